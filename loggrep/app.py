"""Command line entry point for loggrep."""

import argparse
import logging
import os
import sys
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from loggrep import __version__
from loggrep.config import config
from loggrep.options import GrepOptions, build_filter_spec
from loggrep.services.date_extractor import BadDateAbort
from loggrep.services.filter_engine import FilterEngine
from loggrep.services.line_source import FileLineSource
from loggrep.utils.logging import setup_logging

logger = logging.getLogger("loggrep")

EXIT_OK = 0
EXIT_ABORTED = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="loggrep",
        description="Quickly find relevant lines in a log, searching by date.",
    )
    parser.add_argument("log", nargs="?", help="log file to search")
    parser.add_argument(
        "-d", "--date", help="regex that finds the date; its first group is parsed"
    )
    parser.add_argument(
        "-i", "--include", action="append", default=[], metavar="RX",
        help="only show lines matching this pattern (repeatable)",
    )
    parser.add_argument(
        "-x", "--exclude", action="append", default=[], metavar="RX",
        help="hide lines matching this pattern (repeatable)",
    )
    parser.add_argument(
        "-q", "--quote", action="store_true", default=None,
        help="treat include and exclude patterns as literal text",
    )
    parser.add_argument("-s", "--start", metavar="TIME", help="earliest time to show")
    parser.add_argument("-e", "--end", metavar="TIME", help="latest time to show")
    parser.add_argument("-C", "--context", type=int, metavar="N", help="lines of context around matches")
    parser.add_argument("-B", "--before", type=int, metavar="N", help="lines of context before matches")
    parser.add_argument("-A", "--after", type=int, metavar="N", help="lines of context after matches")
    parser.add_argument(
        "-b", "--blank", action="store_true", help="print a blank line between non-contiguous output"
    )
    parser.add_argument(
        "-S", "--separator", help="print this between non-contiguous output (implies --blank)"
    )
    parser.add_argument(
        "-w", "--warn", action="store_true", help="warn about lines where no date is found"
    )
    parser.add_argument(
        "-D", "--die", action="store_true", help="stop at the first line where no date is found"
    )
    parser.add_argument(
        "-n", "--line-numbers", action="store_true", default=None,
        help="prefix each output line with its line number",
    )
    parser.add_argument(
        "--strip-ansi", action="store_true", default=None,
        help="remove ANSI color codes from output",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _pick(value, key: str):
    """Prefer a command line value, falling back to the config file."""
    return value if value is not None else config.get(key)


def options_from_args(args: argparse.Namespace) -> GrepOptions:
    """Merge parsed arguments with configured defaults."""
    context = args.context
    before = args.before
    after = args.after
    if context is None and before is None and after is None:
        before = config.get("context.before", 0)
        after = config.get("context.after", 0)

    return GrepOptions(
        log=args.log,
        date=_pick(args.date, "search.date"),
        include=args.include,
        exclude=args.exclude,
        quote=bool(_pick(args.quote, "search.literal")),
        start=args.start,
        end=args.end,
        context=context,
        before=before,
        after=after,
        blank=args.blank,
        separator=_pick(args.separator, "output.separator"),
        warn=args.warn,
        die=args.die,
        strictness=config.get("search.strictness"),
        line_numbers=bool(_pick(args.line_numbers, "output.line_numbers")),
        strip_ansi=bool(_pick(args.strip_ansi, "output.strip_ansi")),
    )


def report_errors(console: Console, parser: argparse.ArgumentParser, errors: List[str]):
    """Print configuration errors followed by a usage hint."""
    for error in errors:
        console.print(f"[bold red]error:[/bold red] {escape(error)}")
    console.print(escape(parser.format_usage().rstrip()))
    console.print(f"[dim]{escape(config.get_config_info())}[/dim]")


def _detach_stdout():
    """Point stdout at /dev/null once the reader has gone away."""
    try:
        fileno = sys.stdout.fileno()
    except (OSError, ValueError):
        return
    os.dup2(os.open(os.devnull, os.O_WRONLY), fileno)


def main(argv: Optional[List[str]] = None) -> int:
    """Run loggrep and return the process exit status."""
    log_file = setup_logging()
    if log_file:
        logger.info(f"Debug logging to {log_file}")

    parser = build_parser()
    args = parser.parse_args(argv)
    err_console = Console(stderr=True, highlight=False, soft_wrap=True)

    spec, path, errors = build_filter_spec(options_from_args(args))
    if errors:
        report_errors(err_console, parser, errors)
        return EXIT_USAGE

    try:
        source = FileLineSource(path)
    except OSError as e:
        report_errors(err_console, parser, [f"cannot read {path}: {e.strerror}"])
        return EXIT_USAGE

    engine = FilterEngine(spec, diagnostics=sys.stderr)
    with source:
        try:
            try:
                written = engine.run(source, sys.stdout)
            finally:
                sys.stdout.flush()
        except BadDateAbort as e:
            logger.info(f"Aborted on undated line: {e.line!r}")
            return EXIT_ABORTED
        except BrokenPipeError:
            logger.info("Output closed by reader")
            _detach_stdout()
            return EXIT_OK

    logger.info(f"Wrote {written} lines from {path}")
    return EXIT_OK


__all__ = ["main", "build_parser"]
