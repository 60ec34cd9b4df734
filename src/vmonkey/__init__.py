"""vmonkey - interactive retry harness for checks against remote test targets."""

__version__ = "0.1.0"
