"""Indexed, read-only access to the lines of a log."""

import logging
import mmap
import os
from abc import ABC, abstractmethod
from array import array
from pathlib import Path
from typing import List, Optional, Sequence, Union

logger = logging.getLogger("loggrep.line_source")


class LineSource(ABC):
    """Random access to lines by index.

    ``get`` returns the line without its terminator, or ``None`` once the
    index falls outside the source.
    """

    @abstractmethod
    def __len__(self) -> int:
        pass

    @abstractmethod
    def get(self, index: int) -> Optional[str]:
        pass

    @property
    def last_index(self) -> int:
        """Index of the final line, -1 for an empty source."""
        return len(self) - 1


class ListLineSource(LineSource):
    """Line source over lines already held in memory."""

    def __init__(self, lines: Sequence[str]):
        self._lines: List[str] = list(lines)

    def __len__(self) -> int:
        return len(self._lines)

    def get(self, index: int) -> Optional[str]:
        if index < 0 or index >= len(self._lines):
            return None
        return self._lines[index]


class FileLineSource(LineSource):
    """Memory-mapped line source for large files.

    Line offsets are discovered lazily: reading line ``n`` only scans the
    file up to the end of that line. Asking for the length completes the
    offset table.
    """

    def __init__(self, path: Union[str, Path], encoding: str = "utf-8"):
        self.path = Path(path)
        self.encoding = encoding
        self._file = open(self.path, "rb")
        self._map: Optional[mmap.mmap] = None
        try:
            self._size = os.fstat(self._file.fileno()).st_size
            # mmap refuses zero-length files
            if self._size:
                self._map = mmap.mmap(self._file.fileno(), 0, access=mmap.ACCESS_READ)
        except (OSError, ValueError):
            self._file.close()
            raise
        # _offsets[n] is where line n starts, _offsets[n + 1] where it ends.
        # Unsigned 64-bit slots keep the table at 8 bytes per line.
        self._offsets = array("Q", [0])
        self._scan_pos = 0
        self._complete = self._size == 0

    def _index_through(self, index: int) -> None:
        """Extend the offset table until it covers ``index`` or the file ends."""
        was_complete = self._complete
        while not self._complete and len(self._offsets) <= index + 1:
            newline = self._map.find(b"\n", self._scan_pos)
            if newline == -1:
                # Unterminated final line
                if self._scan_pos < self._size:
                    self._offsets.append(self._size)
                self._complete = True
                break
            self._scan_pos = newline + 1
            self._offsets.append(self._scan_pos)
            if self._scan_pos >= self._size:
                self._complete = True
        if self._complete and not was_complete:
            logger.debug(f"Indexed {len(self._offsets) - 1} lines in {self.path}")

    def __len__(self) -> int:
        if not self._complete:
            self._index_through(self._size)
        return len(self._offsets) - 1

    def get(self, index: int) -> Optional[str]:
        if index < 0:
            return None
        self._index_through(index)
        if index + 1 >= len(self._offsets):
            return None
        raw = self._map[self._offsets[index] : self._offsets[index + 1]]
        if raw.endswith(b"\n"):
            raw = raw[:-1]
        if raw.endswith(b"\r"):
            raw = raw[:-1]
        return raw.decode(self.encoding, errors="replace")

    def close(self) -> None:
        """Release the memory map and the underlying file."""
        if self._map is not None:
            self._map.close()
            self._map = None
        self._file.close()

    def __enter__(self) -> "FileLineSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
