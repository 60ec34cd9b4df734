"""Data models for vmonkey."""

from vmonkey.models.harness import (
    FailureMode,
    HarnessConfig,
    TransientSignature,
    default_signatures,
)
from vmonkey.models.outcome import FailureKind, OutcomeRecord
from vmonkey.models.target import SpotCheckResult, Target

__all__ = [
    "FailureKind",
    "FailureMode",
    "HarnessConfig",
    "OutcomeRecord",
    "SpotCheckResult",
    "Target",
    "TransientSignature",
    "default_signatures",
]
