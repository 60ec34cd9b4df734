"""Pytest fixtures and configuration."""

from __future__ import annotations

import io
from collections.abc import Callable, Generator
from typing import Any

import pytest
from rich.console import Console

from vmonkey.harness import FailureClassifier, TestCaseInterface
from vmonkey.models import FailureMode, HarnessConfig, OutcomeRecord, SpotCheckResult
from vmonkey.utils.config import get_settings


class FakeTarget:
    """In-memory target returning scripted spot-check outputs.

    Each scripted item is either an output string or an exception to raise.
    The last item repeats once the script runs out.
    """

    def __init__(self, nickname: str, outputs: list[Any] | None = None):
        self.nickname = nickname
        self.outputs = list(outputs or [""])
        self.settings_calls = 0
        self.spot_checks: list[str] = []
        self.commands: list[tuple[str, Any]] = []

    def settings(self) -> dict[str, str]:
        self.settings_calls += 1
        return {"nickname": self.nickname}

    def run_command(self, name: str, args: Any = None) -> str:
        self.commands.append((name, args))
        return f"{self.nickname}:{name}"

    def spot_check_command(self, command: str) -> SpotCheckResult:
        self.spot_checks.append(command)
        item = self.outputs.pop(0) if len(self.outputs) > 1 else self.outputs[0]
        if isinstance(item, BaseException):
            raise item
        return SpotCheckResult(output=item, exit_status=0)

    def __repr__(self) -> str:
        return f"FakeTarget({self.nickname!r})"


class DebugRecorder:
    """Stands in for the debugger; runs an optional action per pause."""

    def __init__(self, action: Callable[[Any, OutcomeRecord, int], None] | None = None):
        self.action = action
        self.pauses: list[OutcomeRecord] = []

    def __call__(self, context: Any, outcome: OutcomeRecord) -> None:
        self.pauses.append(outcome)
        if self.action is not None:
            self.action(context, outcome, len(self.pauses))


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Isolate tests from the caller's environment and the settings cache."""
    monkeypatch.delenv("MONKEY_NO_DEBUG", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def quiet_console() -> Console:
    """Console writing to a buffer instead of the terminal."""
    return Console(file=io.StringIO(), width=120)


@pytest.fixture
def sleeps() -> list[float]:
    """Records backoff sleeps instead of sleeping."""
    return []


@pytest.fixture
def automatic_config() -> HarnessConfig:
    return HarnessConfig(mode=FailureMode.AUTOMATIC)


@pytest.fixture
def interactive_config() -> HarnessConfig:
    return HarnessConfig(mode=FailureMode.INTERACTIVE)


@pytest.fixture
def make_target() -> type[FakeTarget]:
    """Factory for scripted in-memory targets."""
    return FakeTarget


@pytest.fixture
def debug_recorder() -> DebugRecorder:
    """Debug hook that records pauses; set ``.action`` to act on them."""
    return DebugRecorder()


@pytest.fixture
def targets() -> list[FakeTarget]:
    return [FakeTarget("web-1", ["w1"]), FakeTarget("web-2", ["w2"]), FakeTarget("app-1", ["a1"])]


@pytest.fixture
def make_case(
    sleeps: list[float], quiet_console: Console
) -> Callable[..., TestCaseInterface]:
    """Build a test case with a recording sleep and a quiet console."""

    def factory(
        config: HarnessConfig,
        targets: list[Any] | None = None,
        debug_hook: Any = None,
        cls: type[TestCaseInterface] = TestCaseInterface,
    ) -> TestCaseInterface:
        classifier = FailureClassifier(
            config,
            debug_hook=debug_hook or DebugRecorder(),
            sleep=sleeps.append,
            console=quiet_console,
        )
        return cls(targets=targets, config=config, classifier=classifier, console=quiet_console)

    return factory
