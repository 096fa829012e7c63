"""Utility helpers for loggrep."""
