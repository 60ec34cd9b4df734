"""vmonkey CLI - run interactive test cases from the command line."""

from __future__ import annotations

import importlib
import importlib.util
import logging
import re
import sys
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from vmonkey import __version__
from vmonkey.harness import TestCaseInterface
from vmonkey.harness.interface import HELP_TEXT
from vmonkey.models import FailureMode, HarnessConfig
from vmonkey.targets import LocalShellTarget
from vmonkey.utils.config import get_settings

console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, get_settings().log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _build_config(no_debug: bool) -> HarnessConfig:
    config = HarnessConfig.from_settings()
    if no_debug:
        config = config.model_copy(update={"mode": FailureMode.AUTOMATIC})
    return config


def load_test_case(ref: str) -> type[TestCaseInterface]:
    """Load a test case class from ``module:Class`` or ``path.py:Class``."""
    if ":" not in ref:
        raise click.BadParameter("expected MODULE:CLASS", param_hint="TEST_CASE")
    module_ref, class_name = ref.rsplit(":", 1)

    if module_ref.endswith(".py"):
        path = Path(module_ref)
        if not path.exists():
            raise click.BadParameter(f"no such file: {path}", param_hint="TEST_CASE")
        spec = importlib.util.spec_from_file_location(path.stem, path)
        if spec is None or spec.loader is None:
            raise click.BadParameter(f"cannot import {path}", param_hint="TEST_CASE")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
    else:
        module = importlib.import_module(module_ref)

    cls = getattr(module, class_name, None)
    if not isinstance(cls, type) or not issubclass(cls, TestCaseInterface):
        raise click.BadParameter(f"{class_name} is not a TestCaseInterface subclass", param_hint="TEST_CASE")
    return cls


@click.group()
@click.version_option(version=__version__, prog_name="vmonkey")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """vmonkey - interactive retry harness for test checks."""
    _setup_logging(verbose)


@cli.command("run")
@click.argument("test_case")
@click.option("--method", "-m", default="run", show_default=True, help="Method of the test case to call")
@click.option("--no-debug", is_flag=True, help="Classify failures automatically instead of pausing")
def run(test_case: str, method: str, no_debug: bool) -> None:
    """Run a test case given as MODULE:CLASS or PATH.py:CLASS."""
    cls = load_test_case(test_case)
    config = _build_config(no_debug)
    console.print(f"[dim]Mode: {config.mode.value}[/dim]")

    instance: Any = cls(config=config)
    entry = getattr(instance, method, None)
    if not callable(entry):
        console.print(f"[red]{cls.__name__} has no method {method!r}[/red]")
        sys.exit(2)

    try:
        entry()
    except Exception:
        console.print_exception()
        console.print(f"[red]Test case {cls.__name__} failed[/red]")
        sys.exit(1)

    console.print(f"[green]Test case {cls.__name__} passed[/green]")


@cli.command("probe")
@click.argument("command")
@click.option("--check", "-c", "check_pattern", help="Regex each output must match")
@click.option("--nickname", default="localhost", show_default=True, help="Nickname of the local target")
@click.option("--no-debug", is_flag=True, help="Classify failures automatically instead of pausing")
def probe(command: str, check_pattern: str | None, nickname: str, no_debug: bool) -> None:
    """Run COMMAND on the local host under the retry protocol."""
    case = TestCaseInterface(
        targets=[LocalShellTarget(nickname)],
        config=_build_config(no_debug),
        console=console,
    )
    check = (lambda out: re.search(check_pattern, out) is not None) if check_pattern else None

    try:
        output = case.probe(None, command, check)
    except Exception as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    click.echo(output, nl=False)


@cli.command("signatures")
def signatures() -> None:
    """List the transient failure signatures retried in automatic mode."""
    config = HarnessConfig.from_settings()

    table = Table(title="Transient signatures")
    table.add_column("Label", style="cyan")
    table.add_column("Pattern")
    table.add_column("Backoff (s)", justify="right")

    for signature in config.transient_signatures:
        table.add_row(signature.name, signature.pattern, f"{signature.backoff_seconds:g}")

    console.print(table)


@cli.command("reference")
def reference() -> None:
    """Print the wrapper reference available inside the debugger."""
    console.print(HELP_TEXT)


if __name__ == "__main__":
    cli()
