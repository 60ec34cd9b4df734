"""Exceptions raised by the harness itself.

Failures raised by dispatched operations are never wrapped in these; they
propagate as the original exception objects.
"""

from __future__ import annotations

from typing import Any


class HarnessError(Exception):
    """Base class for harness errors."""


class VerificationFailure(HarnessError):
    """Raised when a verification predicate rejects a result.

    Always fatal for automatic classification: never matched against the
    transient signature table.
    """

    def __init__(self, message: str, result: Any = None, target: str | None = None):
        self.result = result
        self.target = target
        super().__init__(message)


class SetResolutionError(HarnessError):
    """Raised when a target set spec has an unsupported type."""
