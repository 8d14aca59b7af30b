"""Flags, exit-code aware errors, Markdown documentation helpers and fish completion lines."""

__version__ = "0.1.0"
__all__ = ["docs", "errors", "fish", "flags", "inverse"]