"""Validation of user options into a FilterSpec.

Every problem found is collected so that all of them can be reported at
once; the search only runs when the list comes back empty.
"""

import os
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, List, Optional, Pattern, Tuple

from .models.filter_spec import FilterSpec, LineTransform, Strictness
from .services.date_extractor import parse_timestamp
from .utils.text_processing import compose_transforms, number_line, strip_ansi_codes


@dataclass
class GrepOptions:
    """Raw options as given on the command line or in the config file."""

    log: Optional[str] = None
    date: Optional[str] = None
    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    quote: bool = False
    start: Optional[str] = None
    end: Optional[str] = None
    context: Optional[int] = None
    before: Optional[int] = None
    after: Optional[int] = None
    blank: bool = False
    separator: Optional[str] = None
    warn: bool = False
    die: bool = False
    strictness: Optional[str] = None
    line_numbers: bool = False
    strip_ansi: bool = False


def check_log_file(filename: Optional[str], errors: List[str]) -> Optional[Path]:
    """Verify the log file can be read, registering any errors."""
    if not filename:
        errors.append("no log file provided")
        return None
    path = Path(filename)
    if not path.exists():
        errors.append(f"file {filename} does not exist")
        return None
    if path.is_dir():
        errors.append(f"{filename} is a directory")
        return None
    if not os.access(path, os.R_OK):
        errors.append(f"cannot read {filename}")
        return None
    return path


def make_regex(
    rx: Optional[str], errors: List[str], kind: str, quote: bool = False
) -> Optional[Pattern]:
    """Compile a regex parameter, registering any errors."""
    if not rx:
        errors.append(f"inadequate {kind} pattern")
        return None
    if quote:
        rx = re.escape(rx)
    try:
        return re.compile(rx)
    except re.error as e:
        errors.append(f"bad {kind} regex: {rx}; error: {e}")
        return None


def as_count(value: Any, name: str, errors: List[str]) -> Optional[int]:
    """Read a context size that may come from YAML or the environment as text."""
    if value is None:
        return None
    if isinstance(value, bool):
        errors.append(f"{name} must be a whole number: {value}")
        return None
    try:
        count = int(value) if isinstance(value, int) else int(str(value))
    except ValueError:
        errors.append(f"{name} must be a whole number: {value}")
        return None
    if count < 0:
        errors.append(f"{name} must not be negative")
        return None
    return count


def as_text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def resolve_context(options: GrepOptions) -> Tuple[int, int]:
    """Combine --context with --before/--after, the larger value winning."""
    before = after = options.context or 0
    if options.before and options.before > before:
        before = options.before
    if options.after and options.after > after:
        after = options.after
    return before, after


def resolve_strictness(options: GrepOptions, errors: List[str]) -> Strictness:
    """Pick the strictness policy; --warn takes precedence over --die."""
    if options.warn:
        return Strictness.WARN
    if options.die:
        return Strictness.ABORT
    if options.strictness:
        try:
            return Strictness(str(options.strictness).lower())
        except ValueError:
            errors.append(f"unknown strictness: {options.strictness}")
    return Strictness.SILENT


def build_transform(options: GrepOptions) -> LineTransform:
    transforms = []
    if options.strip_ansi:
        transforms.append(strip_ansi_codes)
    if options.line_numbers:
        transforms.append(number_line)
    return compose_transforms(transforms)


def build_filter_spec(
    options: GrepOptions,
) -> Tuple[Optional[FilterSpec], Optional[Path], List[str]]:
    """Validate options and build the spec for a search.

    Args:
        options: The raw options

    Returns:
        (spec, log path, errors). Spec and path are None whenever errors
        is non-empty.
    """
    errors: List[str] = []
    path = check_log_file(options.log, errors)

    date_pattern = make_regex(as_text(options.date), errors, "date")
    include = [make_regex(rx, errors, "inclusion", options.quote) for rx in options.include]
    exclude = [make_regex(rx, errors, "exclusion", options.quote) for rx in options.exclude]

    start = end = None
    if options.start:
        start = parse_timestamp(options.start)
        if start is None:
            errors.append(f"cannot parse start time: {options.start}")
    if options.end:
        end = parse_timestamp(options.end)
        if end is None:
            errors.append(f"cannot parse end time: {options.end}")

    if not (options.include or options.exclude or options.start or options.end):
        errors.append("you are not filtering at all")

    counts = {
        name: as_count(getattr(options, name), name, errors)
        for name in ("context", "before", "after")
    }
    before, after = resolve_context(replace(options, **counts))

    strictness = resolve_strictness(options, errors)

    separator = as_text(options.separator)
    if separator is None and options.blank:
        separator = ""

    if errors:
        return None, None, errors

    spec = FilterSpec(
        date_pattern=date_pattern,
        include=tuple(include),
        exclude=tuple(exclude),
        literal=options.quote,
        start=start,
        end=end,
        before=before,
        after=after,
        separator=separator,
        strictness=strictness,
        transform=build_transform(options),
    )
    return spec, path, errors
