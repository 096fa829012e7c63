"""loggrep - quickly find relevant lines in a log by date and pattern."""

__version__ = "0.1.0"
