"""Timestamp extraction from log lines."""

import logging
import re
import sys
from datetime import datetime
from typing import Optional, Pattern, TextIO

from dateutil import parser as dateutil_parser

from ..models.filter_spec import Strictness

logger = logging.getLogger("loggrep.date_extractor")

EPOCH_RE = re.compile(r"^\d{10}(?:\d{3})?$")


class BadDateAbort(Exception):
    """Raised when a line without a date is found under the abort policy."""

    def __init__(self, line: str):
        super().__init__(f'could not find date in "{line}"')
        self.line = line


def parse_timestamp(text: str) -> Optional[datetime]:
    """Parse a timestamp string into a naive local datetime.

    Accepts anything python-dateutil understands plus bare epoch seconds
    or milliseconds. Timezone-aware values are converted to local time so
    that every returned instant compares with every other.

    Args:
        text: The timestamp text

    Returns:
        The parsed datetime, or None if the text is not a usable timestamp
    """
    text = text.strip()
    if not text:
        return None

    try:
        if EPOCH_RE.match(text):
            value = int(text)
            if len(text) == 13:
                value = value / 1000.0
            if not value:
                return None
            return datetime.fromtimestamp(value)
        parsed = dateutil_parser.parse(text)
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone().replace(tzinfo=None)
    except (ValueError, OverflowError, OSError):
        return None
    return parsed


class DateExtractor:
    """Finds the date of a line and applies the strictness policy."""

    def __init__(
        self,
        date_pattern: Pattern,
        strictness: Strictness = Strictness.SILENT,
        diagnostics: Optional[TextIO] = None,
    ):
        """Initialize the extractor.

        Args:
            date_pattern: Regex whose first group captures the timestamp text
            strictness: What to do with lines that carry no date
            diagnostics: Stream for warnings, stderr by default
        """
        self.date_pattern = date_pattern
        self.strictness = strictness
        self.diagnostics = diagnostics

    def extract(self, line: str, classify: bool = True) -> Optional[datetime]:
        """Extract the timestamp of a line.

        Args:
            line: The raw log line
            classify: Apply the strictness policy when no date is found

        Returns:
            The line's timestamp, or None

        Raises:
            BadDateAbort: If no date is found under the abort policy
        """
        match = self.date_pattern.search(line)
        if match:
            text = match.group(1) if match.re.groups else match.group(0)
            if text is not None:
                timestamp = parse_timestamp(text)
                if timestamp is not None:
                    return timestamp

        if not classify or self.strictness is Strictness.SILENT:
            return None

        stream = self.diagnostics or sys.stderr
        print(f'could not find date in "{line}"', file=stream)
        if self.strictness is Strictness.ABORT:
            logger.debug("Aborting search on undated line")
            raise BadDateAbort(line)
        return None
