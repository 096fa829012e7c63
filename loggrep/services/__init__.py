"""Search and filtering services for loggrep."""
