import re
from typing import Iterable

from ..models.filter_spec import LineTransform, identity_transform

# ANSI escape code pattern for stripping color codes
ANSI_ESCAPE_PATTERN = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


def strip_ansi_codes(line: str, index: int = 0) -> str:
    """Strip ANSI escape codes from a line.

    Args:
        line: The text containing ANSI codes
        index: Source index of the line, unused

    Returns:
        The text with ANSI codes removed
    """
    return ANSI_ESCAPE_PATTERN.sub("", line)


def number_line(line: str, index: int) -> str:
    """Prefix a line with its 1-based line number, grep style."""
    return f"{index + 1}:{line}"


def compose_transforms(transforms: Iterable[LineTransform]) -> LineTransform:
    """Chain line transforms, applying them in the given order."""
    chain = list(transforms)
    if not chain:
        return identity_transform
    if len(chain) == 1:
        return chain[0]

    def composed(line: str, index: int) -> str:
        for transform in chain:
            line = transform(line, index)
        return line

    return composed
