"""Reentrant retry control.

Every wrapped call owns a ``RetryScope`` holding its own rerun decision.
Scopes live on a ``RetryStack`` only so that a human sitting in the
debugger (or an overriding classifier) can reach "the call currently being
handled" through the top of the stack. A nested call pushes and pops its
own scope and cannot touch the decision of the call that triggered it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class RetryScope:
    """Rerun decision for one wrapped call."""

    def __init__(self, label: str = ""):
        self.label = label
        self.rerun = False
        self.attempts = 0

    def request_retry(self) -> None:
        self.rerun = True

    def clear_retry(self) -> None:
        self.rerun = False

    def consume_decision(self) -> bool:
        """Return the pending decision and reset it."""
        decision = self.rerun
        self.rerun = False
        return decision

    def __repr__(self) -> str:
        return f"RetryScope({self.label!r}, rerun={self.rerun}, attempts={self.attempts})"


class RetryStack:
    """LIFO of retry scopes, one per active wrapped call."""

    def __init__(self) -> None:
        self._scopes: list[RetryScope] = []

    @property
    def depth(self) -> int:
        return len(self._scopes)

    @property
    def top(self) -> RetryScope:
        if not self._scopes:
            raise LookupError("No wrapped call is active")
        return self._scopes[-1]

    @contextmanager
    def scope(self, label: str = "") -> Iterator[RetryScope]:
        """Push a fresh scope for the duration of one wrapped call."""
        scope = RetryScope(label)
        self._scopes.append(scope)
        depth = len(self._scopes)
        try:
            yield scope
        finally:
            if self._scopes and self._scopes[-1] is scope:
                self._scopes.pop()
            else:
                # A caller popped out of order; restore the pre-call depth.
                logger.warning(f"Retry stack unbalanced while leaving {label!r}")
                del self._scopes[depth - 1:]

    def request_retry(self) -> None:
        self.top.request_retry()

    def clear_retry(self) -> None:
        self.top.clear_retry()

    def consume_decision(self) -> bool:
        return self.top.consume_decision()
