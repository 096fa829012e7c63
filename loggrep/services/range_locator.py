"""Interpolation search for the first line of a time window."""

import logging
from datetime import datetime
from typing import NamedTuple, Optional, Tuple

from .date_extractor import DateExtractor
from .line_source import LineSource

logger = logging.getLogger("loggrep.range_locator")


class Sample(NamedTuple):
    """A line index paired with the timestamp found on that line."""

    index: int
    timestamp: datetime


class RangeLocator:
    """Finds where a time window begins without reading the whole log.

    Log timestamps usually grow roughly linearly with line number, so the
    locator estimates the position of a target time from two known samples
    and refines the estimate until it converges. Undated lines are stepped
    over and a repeated probe ends the search, so unordered input still
    terminates.
    """

    def __init__(self, source: LineSource, extractor: DateExtractor):
        self.source = source
        self.extractor = extractor

    def _timestamp_at(self, index: int, classify: bool = True) -> Optional[datetime]:
        line = self.source.get(index)
        if line is None:
            return None
        return self.extractor.extract(line, classify=classify)

    def find_bounds(self) -> Optional[Tuple[Sample, Sample]]:
        """Find the first and last dated lines of the log.

        Returns:
            (first, last) samples, or None if no line carries a date
        """
        last_index = self.source.last_index
        first = None
        for index in range(0, last_index + 1):
            timestamp = self._timestamp_at(index)
            if timestamp is not None:
                first = Sample(index, timestamp)
                break
        if first is None:
            logger.debug("No dated line found")
            return None

        last = first
        for index in range(last_index, first.index, -1):
            timestamp = self._timestamp_at(index)
            if timestamp is not None:
                last = Sample(index, timestamp)
                break

        logger.debug(f"Log spans {first} to {last}")
        return first, last

    @staticmethod
    def guess(low: Sample, high: Sample, start: datetime) -> int:
        """Estimate the index of ``start`` by linear interpolation."""
        delta = start - low.timestamp
        if not delta:
            return low.index
        span = high.timestamp - low.timestamp
        offset = int((high.index - low.index) * (delta / span))
        return low.index + offset

    def locate(self, start: datetime, low: Sample, high: Sample) -> int:
        """Find the first line whose timestamp is at least ``start``.

        Args:
            start: The target time
            low: The first dated line of the log
            high: The last dated line of the log

        Returns:
            Index to begin scanning at. On ordered input this is the first
            line at or after ``start``, or the line just before it.
        """
        if start <= low.timestamp:
            return 0

        last_index = self.source.last_index
        previous_probe = -1
        reversals = 0
        while True:
            probe = self.guess(low, high, start)
            if probe == low.index:
                return probe

            reversed_ = probe == previous_probe
            previous_probe = probe
            if reversed_:
                # Same probe again, the bounds are not closing in
                reversals += 1
                if reversals > 1:
                    logger.debug(f"Locator oscillating at {probe}, giving up")
                    return probe - 1 if probe else probe
            else:
                reversals = 0

            timestamp = self._timestamp_at(probe)
            while timestamp is None:
                probe += -1 if reversed_ else 1
                if probe < low.index or probe <= 0:
                    return 0
                if probe > last_index:
                    return last_index
                timestamp = self._timestamp_at(probe)

            if timestamp == start:
                return self._rewind(probe, start)
            if timestamp < start:
                low = Sample(probe, timestamp)
            else:
                high = Sample(probe, timestamp)

            if low.index >= high.index:
                return probe - 1 if probe else probe

    def _rewind(self, index: int, start: datetime) -> int:
        """Step back over earlier lines that share the ``start`` timestamp."""
        while index > 0:
            # Undated lines are classified later by the scan itself
            timestamp = self._timestamp_at(index - 1, classify=False)
            if timestamp is not None and timestamp != start:
                break
            index -= 1
        return index
