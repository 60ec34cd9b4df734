"""Harness configuration models."""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, Field

from vmonkey.utils.config import Settings, get_settings


class FailureMode(str, Enum):
    """How failures are handled when no predicate accepts them."""

    INTERACTIVE = "interactive"
    AUTOMATIC = "automatic"


class TransientSignature(BaseModel):
    """A recoverable failure message with a fixed backoff."""

    pattern: str = Field(..., description="Regular expression searched in the failure message")
    backoff_seconds: float = Field(..., ge=0, description="Sleep before retrying")
    label: str = Field(default="", description="Human-readable name for logs")

    def matches(self, message: str) -> bool:
        return re.search(self.pattern, message) is not None

    @property
    def name(self) -> str:
        return self.label or self.pattern


def default_signatures(settings: Settings | None = None) -> list[TransientSignature]:
    """Capacity exhaustion and temporary unavailability, in match order."""
    settings = settings or get_settings()
    return [
        TransientSignature(
            pattern="Insufficient capacity",
            backoff_seconds=settings.capacity_backoff_seconds,
            label="Insufficient capacity",
        ),
        TransientSignature(
            pattern="Service Temporarily Unavailable",
            backoff_seconds=settings.unavailable_backoff_seconds,
            label="Service Temporarily Unavailable",
        ),
    ]


class HarnessConfig(BaseModel):
    """Explicit configuration threaded through a test case."""

    mode: FailureMode = Field(default=FailureMode.INTERACTIVE)
    transient_signatures: list[TransientSignature] = Field(default_factory=lambda: default_signatures())

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> HarnessConfig:
        """Build a config from environment-backed settings."""
        settings = settings or get_settings()
        mode = FailureMode.AUTOMATIC if settings.no_debug else FailureMode.INTERACTIVE
        return cls(mode=mode, transient_signatures=default_signatures(settings))
