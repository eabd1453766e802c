"""Run the GPA report pipeline end to end.

This module provides the headless runner that chains the four pipeline
stages (fetch, normalize, aggregate, render) and optionally writes the chart
to disk. It is intended for programmatic invocation and is wrapped by the
command-line interface in ``cli.py``.

Usage Examples
--------------
Typical programmatic usage with config defaults::

    from src.pipeline.gpa_report.runner import run_from_config
    result = run_from_config()
    if result is None:
        ...  # failure already logged

Explicit source and output::

    from pathlib import Path
    from src.pipeline.gpa_report.runner import run_from_config

    run_from_config(
        source="https://example.org/students_by_gpa.csv",
        output_file=Path("reports/gpa_trends.svg"),
    )

"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import pandas as pd
from matplotlib.figure import Figure

from src.config import (
    DEFAULT_SOURCE,
    DEFAULT_UNRECOGNIZED_GPA_POLICY,
    OUTPUT_CHART_FILE,
    REQUEST_TIMEOUT_SECONDS,
)
from src.exceptions import AppError

from .aggregator import aggregate
from .loader import fetch
from .normalizer import normalize
from .renderer import DEFAULT_THEME, ChartTheme, render, write_chart

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    """Aggregate table and the chart drawn from it (``None`` when empty)."""

    counts: pd.DataFrame
    figure: Figure | None


def run_pipeline(
    source: str | Path,
    *,
    theme: ChartTheme = DEFAULT_THEME,
    timeout: float = REQUEST_TIMEOUT_SECONDS,
    on_unrecognized: str = DEFAULT_UNRECOGNIZED_GPA_POLICY,
) -> PipelineResult:
    """Fetch, normalize, aggregate and render ``source``.

    Every stage fails fast; errors propagate unchanged to the caller and no
    partial result is returned.

    Raises
    ------
    src.exceptions.SourceUnavailableError
    src.exceptions.MalformedInputError
    src.exceptions.DuplicateColumnNameError
    src.exceptions.MalformedPeriodError
    src.exceptions.UnrecognizedGpaError
    """
    table = fetch(source, timeout=timeout)
    normalized = normalize(table, on_unrecognized=on_unrecognized)
    counts = aggregate(normalized)
    figure = render(counts, theme)
    return PipelineResult(counts=counts, figure=figure)


def run_from_config(
    source: str | Path | None = None,
    output_file: Path | None = None,
    *,
    theme: ChartTheme | None = None,
    timeout: float | None = None,
    on_unrecognized: str = DEFAULT_UNRECOGNIZED_GPA_POLICY,
) -> PipelineResult | None:
    """Run the pipeline with defaults from ``src.config`` and write the chart.

    Parameters
    ----------
    source : str, Path or None, optional
        CSV location. If ``None``, uses ``DEFAULT_SOURCE``.
    output_file : Path or None, optional
        Chart destination. If ``None``, uses ``OUTPUT_CHART_FILE``.
    theme : ChartTheme or None, optional
        Visual configuration. If ``None``, uses ``DEFAULT_THEME``.
    timeout : float or None, optional
        Network timeout in seconds. If ``None``, uses
        ``REQUEST_TIMEOUT_SECONDS``.
    on_unrecognized : {"drop", "raise"}, optional
        Policy for GPA labels outside the bracket list.

    Returns
    -------
    PipelineResult or None
        The result on success; ``None`` if any stage failed (the error is
        logged). No chart is written when there is nothing to render.
    """
    source = source if source is not None else DEFAULT_SOURCE
    output_file = Path(output_file) if output_file is not None else OUTPUT_CHART_FILE
    try:
        result = run_pipeline(
            source,
            theme=theme if theme is not None else DEFAULT_THEME,
            timeout=timeout if timeout is not None else REQUEST_TIMEOUT_SECONDS,
            on_unrecognized=on_unrecognized,
        )
        if result.figure is None:
            logger.warning("Nothing to render for %s; no chart written", source)
        else:
            write_chart(result.figure, output_file)
        return result
    except AppError as err:
        logger.error("GPA report failed: %s", err, extra={"error": err.to_dict()})
        return None
    except Exception:
        logger.exception("GPA report failed unexpectedly")
        return None


__all__ = ["PipelineResult", "run_from_config", "run_pipeline"]
