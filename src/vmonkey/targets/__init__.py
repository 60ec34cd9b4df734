"""Concrete targets."""

from vmonkey.targets.local import LocalShellTarget

__all__ = ["LocalShellTarget"]
