"""CLI entrypoint and logging/argument utilities for the GPA report pipeline.

This module implements the command-line interface for the GPA report: argument
parsing, logging setup and a short console summary. All processing is
delegated to :func:`src.pipeline.gpa_report.runner.run_from_config`; failures
are logged there and surface here only as a non-zero exit code.

See Also
--------
src.pipeline.gpa_report.runner
    Headless runner invoked by `main`.
src.exceptions
    Centralized exception taxonomy.

Examples
--------
CLI usage:

>>> # In shell
>>> python -m src.pipeline.gpa_report.cli --source data/students_by_gpa.csv --output output/gpa.png

Programmatic usage:

>>> from src.pipeline.gpa_report.cli import main
>>> main(["--no-summary"])  # doctest: +SKIP
0
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path

import pandas as pd
from rich.console import Console
from rich.table import Table

from src.config import (
    DEFAULT_SOURCE,
    ETHNICITY_COLUMN,
    LOG_DIR,
    LOG_FILENAME_GPA_REPORT,
    LOG_FORMAT,
    OUTPUT_CHART_FILE,
    REQUEST_TIMEOUT_SECONDS,
    TOTAL_COLUMN,
    YEAR_COLUMN,
)

from .runner import run_from_config

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO", enable_file: bool = True) -> None:
    r"""Configure logging output for the GPA report CLI.

    Removes existing root handlers, then installs a console handler and,
    optionally, a file handler at ``LOG_DIR / LOG_FILENAME_GPA_REPORT``.
    Failure to create the file handler is ignored so the run can still log to
    the console.

    Parameters
    ----------
    level : str, optional
        Logging level name, e.g. "DEBUG" or "INFO". Unknown names fall back
        to INFO.
    enable_file : bool, optional
        Whether to add the file handler.

    Examples
    --------
    >>> from src.pipeline.gpa_report.cli import configure_logging
    >>> configure_logging("DEBUG", enable_file=False)
    """
    for h in logging.root.handlers[:]:
        logging.root.removeHandler(h)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if enable_file:
        try:
            LOG_DIR.mkdir(exist_ok=True)
            handlers.insert(
                0,
                logging.FileHandler(LOG_DIR / LOG_FILENAME_GPA_REPORT, mode="a"),
            )
        except OSError:
            pass
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments for the GPA report."""
    parser = argparse.ArgumentParser(
        description="Chart student counts by ethnicity, GPA bracket and year."
    )
    parser.add_argument(
        "--source",
        type=str,
        default=DEFAULT_SOURCE,
        help="CSV location: http(s) URL, file:// URI or local path.",
    )
    parser.add_argument("--output", type=Path, default=OUTPUT_CHART_FILE)
    parser.add_argument(
        "--timeout",
        type=float,
        default=REQUEST_TIMEOUT_SECONDS,
        help="Network timeout in seconds.",
    )
    parser.add_argument(
        "--strict-gpa",
        action="store_true",
        help="Fail on GPA labels outside the bracket list instead of dropping them.",
    )
    parser.add_argument("--log-level", type=str, default="INFO")
    parser.add_argument(
        "--no-summary",
        action="store_true",
        help="Do not print the per-ethnicity summary table.",
    )
    return parser.parse_args(argv)


def print_summary(counts: pd.DataFrame, console: Console | None = None) -> None:
    """Print one row per ethnicity: years covered, groups and students."""
    console = console if console is not None else Console()
    table = Table(title="Students counted per ethnicity")
    table.add_column("Ethnicity")
    table.add_column("Years")
    table.add_column("Groups", justify="right")
    table.add_column("Students", justify="right")

    if counts.empty:
        console.print("[yellow]No students matched the report filters.[/yellow]")
        return

    for ethnicity, facet in counts.groupby(ETHNICITY_COLUMN, sort=True):
        years = sorted(facet[YEAR_COLUMN].astype(str).unique())
        span = years[0] if len(years) == 1 else f"{years[0]}-{years[-1]}"
        table.add_row(
            str(ethnicity),
            span,
            str(len(facet)),
            f"{int(facet[TOTAL_COLUMN].sum()):,}",
        )
    console.print(table)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the GPA report from the command line and return an exit code."""
    args = parse_arguments(argv)
    configure_logging(
        args.log_level, enable_file=not bool(os.environ.get("DISABLE_FILE_LOGS"))
    )
    logger.info("Starting GPA report for %s", args.source)
    result = run_from_config(
        args.source,
        args.output,
        timeout=args.timeout,
        on_unrecognized="raise" if args.strict_gpa else "drop",
    )
    if result is None:
        return 1
    if not args.no_summary:
        print_summary(result.counts)
    return 0


if __name__ == "__main__":
    sys.exit(main())
