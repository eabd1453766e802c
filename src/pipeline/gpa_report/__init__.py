"""GPA Report Pipeline Module.

Summary
-------
Provides the import surface for the GPA report pipeline: a linear chain that
loads one CSV of student records, normalizes its headers and GPA brackets,
counts students per ethnicity, GPA bracket and year, and draws a faceted line
chart of the result.

Stages
------
- `loader.py`: fetch a CSV from an HTTP(S) URL or local path into a DataFrame.
- `normalizer.py`: snake_case headers and the ordered GPA categorical.
- `aggregator.py`: period split, group counts and unknown-category filtering.
- `renderer.py`: one facet per ethnicity with a reverse-ordered GPA legend.
- `runner.py` / `cli.py`: composition, chart output and the command line.

For configuration and constants, see `src/config.py`. For the error taxonomy,
see `src/exceptions.py`.

Usage
-----
    >>> from src.pipeline.gpa_report import aggregate, fetch, normalize, render
    >>> counts = aggregate(normalize(fetch("data/students_by_gpa.csv")))
    >>> figure = render(counts)
"""

from .aggregator import AggregatedCount, aggregate, as_aggregated_counts
from .gpa import GPA_DTYPE, GPA_ORDER, GpaBracket, legend_order
from .loader import fetch
from .normalizer import clean_column_name, normalize
from .renderer import DEFAULT_THEME, ChartTheme, render, write_chart
from .runner import PipelineResult, run_from_config, run_pipeline

__all__ = [
    "DEFAULT_THEME",
    "GPA_DTYPE",
    "GPA_ORDER",
    "AggregatedCount",
    "ChartTheme",
    "GpaBracket",
    "PipelineResult",
    "aggregate",
    "as_aggregated_counts",
    "clean_column_name",
    "fetch",
    "legend_order",
    "normalize",
    "render",
    "run_from_config",
    "run_pipeline",
    "write_chart",
]
