"""Data models for loggrep."""

from .filter_spec import FilterSpec, Strictness

__all__ = ["FilterSpec", "Strictness"]
