"""Filter specification consumed by the search engine."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional, Pattern, Tuple

LineTransform = Callable[[str, int], str]


def identity_transform(line: str, index: int) -> str:
    """Return the line unchanged."""
    return line


class Strictness(Enum):
    """How to react to a line whose date cannot be found."""

    SILENT = "silent"
    WARN = "warn"
    ABORT = "abort"


@dataclass(frozen=True)
class FilterSpec:
    """Immutable description of a single grep run."""

    date_pattern: Pattern
    include: Tuple[Pattern, ...] = ()
    exclude: Tuple[Pattern, ...] = ()
    literal: bool = False
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    before: int = 0
    after: int = 0
    separator: Optional[str] = None
    strictness: Strictness = Strictness.SILENT
    transform: LineTransform = identity_transform

    def __post_init__(self):
        if self.before < 0 or self.after < 0:
            raise ValueError("context sizes must not be negative")
        # Cheap patterns first so a non-matching line fails fast
        object.__setattr__(
            self, "include", tuple(sorted(self.include, key=lambda p: len(p.pattern)))
        )
        object.__setattr__(
            self, "exclude", tuple(sorted(self.exclude, key=lambda p: len(p.pattern)))
        )

    @property
    def time_filtered(self) -> bool:
        """Check whether a start or end time restricts the search."""
        return self.start is not None or self.end is not None
