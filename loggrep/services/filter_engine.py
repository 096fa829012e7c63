"""Streaming filter that drives a grep run over a line source."""

import logging
from typing import Iterator, Optional, TextIO

from ..models.filter_spec import FilterSpec
from .context_buffer import ContextBuffer
from .date_extractor import DateExtractor
from .line_source import LineSource
from .range_locator import RangeLocator

logger = logging.getLogger("loggrep.filter_engine")


class FilterEngine:
    """Applies a FilterSpec to a line source and produces the output lines."""

    def __init__(self, spec: FilterSpec, diagnostics: Optional[TextIO] = None):
        """Initialize the engine.

        Args:
            spec: What to search for
            diagnostics: Stream for undated-line warnings, stderr by default
        """
        self.spec = spec
        self.extractor = DateExtractor(spec.date_pattern, spec.strictness, diagnostics)

    def _matches(self, line: str) -> bool:
        """Check a line against the inclusion and exclusion patterns."""
        if self.spec.include and not any(p.search(line) for p in self.spec.include):
            return False
        return not any(p.search(line) for p in self.spec.exclude)

    def _starting_index(self, source: LineSource):
        """Work out where the scan begins and the effective time window.

        Returns:
            (index, start, end), or None if nothing in the log can match
        """
        spec = self.spec
        if not spec.time_filtered:
            return 0, None, None

        locator = RangeLocator(source, self.extractor)
        bounds = locator.find_bounds()
        if bounds is None:
            return None
        first, last = bounds

        start = spec.start if spec.start is not None else first.timestamp
        end = spec.end if spec.end is not None else last.timestamp
        if end < first.timestamp or start > last.timestamp:
            logger.debug(f"Window {start} - {end} is outside the log")
            return None

        index = locator.locate(start, first, last)
        logger.debug(f"Located {start} at line {index}")
        return index, start, end

    def iter_output(self, source: LineSource) -> Iterator[str]:
        """Scan the source and yield each output line.

        Raises:
            BadDateAbort: If an undated line is met under the abort policy.
                Lines yielded before that point remain valid output.
        """
        if not len(source):
            return

        located = self._starting_index(source)
        if located is None:
            return
        index, start, end = located

        spec = self.spec
        index = max(0, index - spec.before)
        buffer = ContextBuffer(spec.before, spec.after)
        previous = None

        def emit(line: str, lineno: int) -> Iterator[str]:
            nonlocal previous
            if (
                spec.separator is not None
                and previous is not None
                and previous + 1 < lineno
            ):
                yield spec.separator
            previous = lineno
            yield spec.transform(line, lineno)

        while True:
            line = source.get(index)
            if line is None:
                break
            lineno = index
            index += 1

            if spec.time_filtered:
                timestamp = self.extractor.extract(line)
                if timestamp is None or timestamp < start:
                    trailing = buffer.offer(line, lineno)
                    if trailing:
                        yield from emit(*trailing)
                    continue
                if timestamp > end:
                    if buffer.take_trailing():
                        yield from emit(line, lineno)
                        continue
                    logger.debug(f"Passed end of window at line {lineno}")
                    break

            if not self._matches(line):
                trailing = buffer.offer(line, lineno)
                if trailing:
                    yield from emit(*trailing)
                continue

            for held_line, held_lineno in buffer.flush():
                yield from emit(held_line, held_lineno)
            yield from emit(line, lineno)
            buffer.clear()
            buffer.arm()

    def run(self, source: LineSource, sink: TextIO) -> int:
        """Write the output of a scan to a sink.

        Returns:
            Number of lines written, separators included
        """
        count = 0
        for text in self.iter_output(source):
            sink.write(text + "\n")
            count += 1
        return count
