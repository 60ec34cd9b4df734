"""Outcome of a single dispatch inside the execution wrapper."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class FailureKind(str, Enum):
    """Classification of a failed attempt."""

    DISPATCH = "dispatch"
    VERIFICATION = "verification"
    TRANSIENT = "transient"
    UNCLASSIFIED = "unclassified"


@dataclass
class OutcomeRecord:
    """A captured failure and the last result seen before it. Never persisted."""

    value: Any = None
    error: BaseException | None = None
    kind: FailureKind | None = None

    @classmethod
    def failure(
        cls,
        error: BaseException,
        kind: FailureKind = FailureKind.DISPATCH,
        value: Any = None,
    ) -> OutcomeRecord:
        return cls(value=value, error=error, kind=kind)
