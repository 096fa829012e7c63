"""Logging configuration for loggrep."""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path


def setup_logging():
    """Configure debug logging to a file in the user's home directory.

    Output and diagnostics of a search go to stdout and stderr; this log
    only records what the search engine did. It is written to
    ~/.loggrep/logs/loggrep.log when LOGGREP_DEBUG is "1".

    Returns:
        Path: Path to the log file, or None if logging is disabled
    """
    if os.environ.get("LOGGREP_DEBUG") != "1":
        logging.getLogger().setLevel(logging.CRITICAL)
        return None

    log_dir = Path.home() / ".loggrep" / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "loggrep.log"

    file_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # 20MB per file with 2 backups
    file_handler = RotatingFileHandler(
        log_file, maxBytes=20 * 1024 * 1024, backupCount=2
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(file_formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(file_handler)

    return log_file
