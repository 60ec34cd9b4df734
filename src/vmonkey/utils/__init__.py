"""Shared utilities for vmonkey."""
