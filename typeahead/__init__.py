"""Inline writing suggestions: context extraction, prompting, quality filtering and overlay state."""

__version__ = "0.1.0"
