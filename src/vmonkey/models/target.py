"""Target models: the remote endpoints a test case checks against."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field


class SpotCheckResult(BaseModel):
    """Output of a shell command run on a target."""

    output: str = Field(default="", description="Combined command output")
    exit_status: int | None = Field(default=None, description="Exit status, if known")


@runtime_checkable
class Target(Protocol):
    """A named endpoint capable of running operations and shell commands."""

    nickname: str

    def run_command(self, name: str, args: Any = None) -> Any:
        """Run a named operation on the target."""
        ...

    def spot_check_command(self, command: str) -> SpotCheckResult:
        """Run a shell command on the target and return its output."""
        ...

    def settings(self) -> Any:
        """Load the target's settings. Called once per test case."""
        ...
