"""Failure classification and the interactive debug hook.

Two modes:
- interactive: show the failure and block in a debugger until a human
  resumes. The pending rerun stays requested unless the human calls
  ``continue_test()``.
- automatic: retry failures whose message matches a transient signature
  after a fixed backoff; re-raise everything else unchanged.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from rich.console import Console
from rich.traceback import Traceback

from vmonkey.harness.errors import VerificationFailure
from vmonkey.harness.retry import RetryScope
from vmonkey.models.harness import FailureMode, HarnessConfig, TransientSignature
from vmonkey.models.outcome import FailureKind, OutcomeRecord

logger = logging.getLogger(__name__)

DebugHook = Callable[[Any, OutcomeRecord], None]


def attach_debugger(context: Any, outcome: OutcomeRecord) -> None:
    """Block in pdb until a human resumes.

    ``context`` is the test case and ``outcome`` the captured failure. Call
    ``context.continue_test()`` before resuming to stop rerunning the
    failed call.
    """
    import pdb

    pdb.set_trace()


class FailureClassifier:
    """Decides whether a failed attempt pauses, retries or propagates."""

    def __init__(
        self,
        config: HarnessConfig | None = None,
        debug_hook: DebugHook | None = None,
        sleep: Callable[[float], None] = time.sleep,
        console: Console | None = None,
    ):
        self.config = config or HarnessConfig.from_settings()
        self.debug_hook = debug_hook or attach_debugger
        self.sleep = sleep
        self.console = console or Console(stderr=True)

    @property
    def mode(self) -> FailureMode:
        return self.config.mode

    @property
    def signatures(self) -> list[TransientSignature]:
        return self.config.transient_signatures

    def classify(self, error: BaseException) -> tuple[FailureKind, TransientSignature | None]:
        """Classify a failure; the first matching signature wins."""
        if isinstance(error, VerificationFailure):
            return FailureKind.VERIFICATION, None
        message = str(error)
        for signature in self.signatures:
            if signature.matches(message):
                return FailureKind.TRANSIENT, signature
        return FailureKind.UNCLASSIFIED, None

    def handle(self, outcome: OutcomeRecord, scope: RetryScope, context: Any = None) -> None:
        """Route a failed attempt according to the configured mode."""
        if self.mode == FailureMode.INTERACTIVE:
            self.pause(outcome, context)
        else:
            self.exception_handle(outcome, scope)

    def pause(self, outcome: OutcomeRecord, context: Any = None) -> None:
        error = outcome.error
        if error is None:
            raise ValueError("Outcome has no captured failure")
        logger.warning(f"Got exception: {error}")
        self.console.print(f"[bold red]Got exception:[/bold red] {error}")
        self.console.print(Traceback.from_exception(type(error), error, error.__traceback__))
        self.console.print("[yellow]Pausing for debugging...[/yellow]")
        self.debug_hook(context, outcome)

    def exception_handle(self, outcome: OutcomeRecord, scope: RetryScope) -> None:
        """Retry known transient failures after their backoff, else re-raise.

        Override in a subclass to add signatures or change timing.
        """
        error = outcome.error
        if error is None:
            raise ValueError("Outcome has no captured failure")
        kind, signature = self.classify(error)
        outcome.kind = kind

        if signature is None:
            logger.error(f"Unrecoverable {kind.value} failure: {error}")
            raise error

        logger.info(f'Got "{signature.name}". Retrying in {signature.backoff_seconds}s....')
        self.sleep(signature.backoff_seconds)
        scope.request_retry()
