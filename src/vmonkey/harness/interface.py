"""Execution wrapper for test cases.

``TestCaseInterface`` wraps every check in the same protocol: request a
rerun, populate settings once, dispatch, verify, and hand any failure to
the ``FailureClassifier``. The call repeats until its own retry scope says
otherwise. There is no retry limit; a human (or an unrecognized failure in
automatic mode) ends the loop.
"""

from __future__ import annotations

import logging
import re
import warnings
from collections.abc import Callable, Mapping
from typing import Any

from rich.console import Console

from vmonkey.harness.classifier import DebugHook, FailureClassifier
from vmonkey.harness.errors import VerificationFailure
from vmonkey.harness.retry import RetryStack
from vmonkey.harness.selection import resolve
from vmonkey.models.harness import HarnessConfig
from vmonkey.models.outcome import FailureKind, OutcomeRecord

logger = logging.getLogger(__name__)

Predicate = Callable[[Any], Any]

HELP_TEXT = """\
Wrapper methods that may be of use while debugging:

[bold]behavior(operation, *args, verify=None)[/bold]
    Call the named method (or callable) with the given arguments while
    handling exceptions, retries and debugger pauses. ``verify`` receives
    the return value, or the exception if the call raised, and returns
    whether it counts as passing.
    Examples:
        behavior("launch_all")
        behavior("launch_set", "Load Balancer")
        behavior("run_script_on_all", "fail", verify=lambda r: isinstance(r, Exception))

[bold]probe(set_spec, command, check=None)[/bold]
    Run a shell command on a set of targets and check each output. ``check``
    takes one target's output string and returns True or False.
    Examples:
        probe(".*", "ls")
        probe("fe_servers", "ls")
        probe(".*", "uname -a", check=lambda out: "x86_64" in out)

[bold]continue_test()[/bold]
    Stop rerunning the call currently being debugged.

[bold]rerun_test()[/bold]
    Rerun the call currently being debugged.

[bold]help()[/bold]
    Print this message.
"""


class TestCaseInterface:
    """Base class for interactive test cases.

    Subclasses define operations as methods and pass their targets in.
    Operations are dispatched by name through ``behavior``.
    """

    __test__ = False

    def __init__(
        self,
        targets: list[Any] | None = None,
        config: HarnessConfig | None = None,
        classifier: FailureClassifier | None = None,
        debug_hook: DebugHook | None = None,
        console: Console | None = None,
    ):
        self.config = config or HarnessConfig.from_settings()
        self.targets: list[Any] = list(targets or [])
        self.populated = False
        self.retry_stack = RetryStack()
        self.console = console or Console()
        self.classifier = classifier or FailureClassifier(
            self.config,
            debug_hook=debug_hook,
            console=self.console,
        )

    # Settings bootstrap

    def populate_settings(self) -> None:
        """Load settings on every target, then look up scripts."""
        for target in self.targets:
            target.settings()
        self.lookup_scripts()
        self.populated = True
        logger.info(f"Populated settings for {len(self.targets)} targets")

    def lookup_scripts(self) -> None:
        """Hook for subclasses that resolve scripts after settings load."""

    # Retry control for humans in the debugger

    def rerun_test(self) -> None:
        self.retry_stack.request_retry()

    def continue_test(self) -> None:
        self.retry_stack.clear_retry()

    # Execution wrapper

    def behavior(
        self,
        operation: str | Callable[..., Any],
        *args: Any,
        verify: Predicate | None = None,
        **kwargs: Any,
    ) -> Any:
        """Run an operation of this test case under the retry protocol.

        Args:
            operation: Method name on this test case, or a callable
            *args: Positional arguments for the operation
            verify: Predicate applied to the result; also offered the
                exception when the operation raises, so an expected failure
                can be accepted
            **kwargs: Keyword arguments for the operation

        Returns:
            The last captured result. Use ``verify`` to assert success.
        """
        label = operation if isinstance(operation, str) else getattr(operation, "__name__", repr(operation))

        def call() -> Any:
            func = getattr(self, operation) if isinstance(operation, str) else operation
            return func(*args, **kwargs)

        return self._run_wrapped(label, call, verify=verify, accept=verify)

    set_var = behavior

    def object_behavior(self, obj: Any, operation: str, *args: Any, **kwargs: Any) -> Any:
        """Run an operation on another object, usually a target."""
        label = f"{getattr(obj, 'nickname', type(obj).__name__)}.{operation}"

        def call() -> Any:
            return getattr(obj, operation)(*args, **kwargs)

        return self._run_wrapped(label, call)

    def run_command_on_set(self, set_spec: Any, name: str, *args: Any) -> list[Any]:
        """Run a named command on each target of a set, in order."""
        return [
            self.object_behavior(target, "run_command", name, list(args))
            for target in self.select_set(set_spec)
        ]

    def _run_wrapped(
        self,
        label: str,
        call: Callable[[], Any],
        verify: Predicate | None = None,
        accept: Predicate | None = None,
        populate: bool = True,
    ) -> Any:
        result = None
        with self.retry_stack.scope(label) as scope:
            while True:
                scope.request_retry()
                scope.attempts += 1
                if scope.attempts > 1:
                    logger.info(f"Rerunning {label} (attempt {scope.attempts})")
                try:
                    if populate and not self.populated:
                        self.populate_settings()
                    result = call()
                    if verify is not None and not verify(result):
                        raise VerificationFailure(
                            f"FATAL: Failed behavior verification. Result was:\n{result!r}",
                            result=result,
                        )
                    scope.clear_retry()
                except Exception as e:
                    if isinstance(e, VerificationFailure):
                        outcome = OutcomeRecord.failure(e, FailureKind.VERIFICATION, value=result)
                    else:
                        outcome = OutcomeRecord.failure(e, FailureKind.DISPATCH, value=result)

                    if outcome.kind == FailureKind.DISPATCH and accept is not None and accept(e):
                        logger.debug(f"{label} raised an accepted failure: {e}")
                        result = e
                        scope.clear_retry()
                    else:
                        self.classifier.handle(outcome, scope, self)

                if not scope.consume_decision():
                    break
        return result

    # Target sets

    def select_set(self, set_spec: Any = None) -> list[Any]:
        """Resolve a set spec against this test case's targets.

        Strings naming a method of this test case run that method and use
        its result; other strings are nickname patterns.
        """
        if set_spec is None:
            return list(self.targets)
        return resolve(set_spec, self.targets, invoke=self.behavior, namespace=self)

    def probe(self, set_spec: Any, command: str, check: Predicate | None = None) -> str:
        """Run a shell command on each target and concatenate the outputs.

        Each target gets its own retry scope. The last output captured per
        target is kept, even when the check rejected it.
        """
        output = ""
        for target in self.select_set(set_spec):
            name = getattr(target, "nickname", repr(target))
            last = ""

            def call(target: Any = target, name: str = name) -> str:
                nonlocal last
                text = _output_of(target.spot_check_command(command))
                last = text
                if check is not None and not check(text):
                    raise VerificationFailure(
                        f"FATAL: Server {name} failed probe. Got {text}",
                        result=text,
                        target=name,
                    )
                return text

            self._run_wrapped(f"probe {name}", call, populate=False)
            output += last
        return output

    def verify(self, method: str | Callable[..., Any], expectation: str, *args: Any) -> None:
        """Deprecated expectation-string check; use ``behavior(verify=...)``.

        ``expectation`` is "pass", "nil", or "fail" with an optional
        ``:<regex>`` the failure message must match.
        """
        warnings.warn(
            "TestCaseInterface.verify is deprecated; use behavior() with a verify predicate",
            DeprecationWarning,
            stacklevel=2,
        )
        error_pattern = ""
        if re.search(r"exception|error|fatal|fail", expectation, re.IGNORECASE):
            expect = "fail"
            error_pattern = ":".join(expectation.split(":")[1:])
        elif re.search(r"success|succeed|pass", expectation, re.IGNORECASE):
            expect = "pass"
        elif re.search(r"nil|none", expectation, re.IGNORECASE):
            expect = "nil"
        else:
            raise ValueError('verify expects a "pass", "fail", or "nil" expectation')

        label = method if isinstance(method, str) else getattr(method, "__name__", repr(method))

        def call() -> Any:
            func = getattr(self, method) if isinstance(method, str) else method
            result = func(*args)
            if expect == "fail" or (expect == "nil" and result is not None):
                raise VerificationFailure("FATAL: Failed verification", result=result)
            return result

        def accept(error: BaseException) -> bool:
            return expect == "fail" and re.search(error_pattern, str(error)) is not None

        self._run_wrapped(label, call, accept=accept, populate=False)

    def help_text(self) -> str:
        return HELP_TEXT

    def help(self) -> None:
        self.console.print(HELP_TEXT)


def _output_of(result: Any) -> str:
    if isinstance(result, Mapping):
        return str(result.get("output", ""))
    return str(getattr(result, "output", ""))
