"""A target that runs commands on the local host."""

from __future__ import annotations

import logging
import platform
import subprocess
from typing import Any

from vmonkey.models.target import SpotCheckResult

logger = logging.getLogger(__name__)


class LocalShellTarget:
    """Runs operations and shell commands through ``subprocess``.

    Useful for smoke tests and for probing the machine running the harness.
    """

    def __init__(self, nickname: str = "localhost", timeout_seconds: int = 60):
        self.nickname = nickname
        self.timeout_seconds = timeout_seconds
        self._settings: dict[str, Any] | None = None

    def settings(self) -> dict[str, Any]:
        if self._settings is None:
            self._settings = {
                "hostname": platform.node(),
                "system": platform.system(),
                "machine": platform.machine(),
            }
        return self._settings

    def run_command(self, name: str, args: Any = None) -> str:
        """Run an executable with arguments; raise on a non-zero exit."""
        argv = [name, *[str(a) for a in (args or [])]]
        result = subprocess.run(
            argv,
            capture_output=True,
            text=True,
            timeout=self.timeout_seconds,
        )
        if result.returncode != 0:
            raise RuntimeError(
                f"{self.nickname}: {name} exited with {result.returncode}: {result.stderr.strip()}"
            )
        return result.stdout

    def spot_check_command(self, command: str) -> SpotCheckResult:
        """Run a shell command; the caller decides whether the output passes."""
        logger.debug(f"{self.nickname}$ {command}")
        result = subprocess.run(
            command,
            shell=True,
            capture_output=True,
            text=True,
            timeout=self.timeout_seconds,
        )
        return SpotCheckResult(output=result.stdout + result.stderr, exit_status=result.returncode)

    def __repr__(self) -> str:
        return f"LocalShellTarget({self.nickname!r})"
