"""Faceted line-chart rendering for aggregated GPA counts.

The renderer receives the aggregate table produced by ``aggregator.py`` and
draws one facet per ethnicity. Each facet holds one line per GPA bracket with
years on the x axis and student counts on the y axis; facets do not share a
y scale.

All visual settings live in a :class:`ChartTheme` passed explicitly to
:func:`render`. Figures are built with :class:`matplotlib.figure.Figure`
directly, so no ``pyplot`` state or ``rcParams`` are touched and repeated
renders are independent.

Example
-------
>>> from src.pipeline.gpa_report.renderer import render, write_chart
>>> figure = render(counts)  # doctest: +SKIP
>>> write_chart(figure, Path("output/gpa_trends.png"))  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path

import pandas as pd
from matplotlib import colormaps
from matplotlib.axes import Axes
from matplotlib.figure import Figure
from matplotlib.lines import Line2D
from matplotlib.ticker import FuncFormatter, MaxNLocator

from src.config import ETHNICITY_COLUMN, GPA_COLUMN, TOTAL_COLUMN, YEAR_COLUMN

from .gpa import GPA_ORDER, legend_order

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChartTheme:
    """Visual configuration for the faceted GPA chart."""

    facet_columns: int = 3
    facet_width: float = 4.5
    facet_height: float = 3.2
    dpi: int = 150
    font_size: float = 9.0
    title: str = "Students by GPA bracket and year"
    x_label: str = "Year"
    y_label: str = "Students"
    legend_title: str = "GPA"
    colormap: str = "viridis"
    line_width: float = 1.8
    marker: str = "o"
    marker_size: float = 3.5
    grid_alpha: float = 0.3
    x_tick_rotation: float = 45.0
    dense_tick_threshold: int = 4


DEFAULT_THEME = ChartTheme()


def format_count(value: float, _pos: int | None = None) -> str:
    """Format a tick value with thousands separators and no decimals.

    >>> format_count(12345.0)
    '12,345'
    """
    return f"{value:,.0f}"


def bracket_colors(theme: ChartTheme = DEFAULT_THEME) -> dict[str, tuple]:
    """Map every bracket label to a fixed color sampled from the theme colormap."""
    cmap = colormaps[theme.colormap]
    last = max(len(GPA_ORDER) - 1, 1)
    return {label: cmap(position / last) for position, label in enumerate(GPA_ORDER)}


def facet_grid(facets: int, columns: int) -> tuple[int, int]:
    """Return ``(rows, columns)`` for laying out ``facets`` panels."""
    columns = max(1, min(columns, facets))
    return math.ceil(facets / columns), columns


def _draw_facet(
    ax: Axes,
    ethnicity: str,
    facet: pd.DataFrame,
    colors: dict[str, tuple],
    theme: ChartTheme,
) -> None:
    years = sorted(facet[YEAR_COLUMN].astype(str).unique())
    positions = {year: index for index, year in enumerate(years)}
    labels = facet[GPA_COLUMN].astype(str)

    for label in legend_order(labels.unique().tolist()):
        series = facet.loc[labels == label].sort_values(YEAR_COLUMN)
        ax.plot(
            [positions[str(year)] for year in series[YEAR_COLUMN]],
            series[TOTAL_COLUMN].tolist(),
            label=label,
            color=colors[label],
            linewidth=theme.line_width,
            marker=theme.marker,
            markersize=theme.marker_size,
        )

    ax.set_title(ethnicity, fontsize=theme.font_size + 1)
    ax.set_xticks(range(len(years)))
    if len(years) > theme.dense_tick_threshold:
        ax.set_xticklabels(years, rotation=theme.x_tick_rotation, ha="right")
    else:
        ax.set_xticklabels(years)
    ax.tick_params(labelsize=theme.font_size)
    ax.yaxis.set_major_locator(MaxNLocator(integer=True))
    ax.yaxis.set_major_formatter(FuncFormatter(format_count))
    ax.grid(axis="y", alpha=theme.grid_alpha)
    ax.margins(x=0.05)


def render(counts: pd.DataFrame, theme: ChartTheme = DEFAULT_THEME) -> Figure | None:
    """Draw the faceted GPA line chart.

    Parameters
    ----------
    counts : pandas.DataFrame
        Aggregate table with ``ethnicity``, ``gpa``, ``year`` and ``total``.
    theme : ChartTheme, optional
        Visual configuration.

    Returns
    -------
    matplotlib.figure.Figure or None
        The rendered figure, or ``None`` when ``counts`` is empty.

    Notes
    -----
    The legend lists brackets from highest to lowest merit. Colors are fixed
    per bracket so the same bracket looks identical in every facet.
    """
    if counts.empty:
        logger.info("No aggregated counts to render; skipping chart")
        return None

    ethnicities = sorted(counts[ETHNICITY_COLUMN].astype(str).unique())
    rows, columns = facet_grid(len(ethnicities), theme.facet_columns)
    figure = Figure(
        figsize=(theme.facet_width * columns, theme.facet_height * rows),
        dpi=theme.dpi,
        layout="constrained",
    )
    axes = figure.subplots(rows, columns, squeeze=False, sharey=False)
    colors = bracket_colors(theme)

    flat_axes = axes.ravel()
    for ax, ethnicity in zip(flat_axes, ethnicities):
        facet = counts.loc[counts[ETHNICITY_COLUMN].astype(str) == ethnicity]
        _draw_facet(ax, ethnicity, facet, colors, theme)
    for ax in flat_axes[len(ethnicities) :]:
        ax.set_visible(False)

    present = legend_order(counts[GPA_COLUMN].astype(str).unique().tolist())
    handles = [
        Line2D(
            [],
            [],
            color=colors[label],
            linewidth=theme.line_width,
            marker=theme.marker,
            markersize=theme.marker_size,
        )
        for label in present
    ]
    figure.legend(
        handles,
        present,
        title=theme.legend_title,
        loc="outside right center",
        fontsize=theme.font_size,
        title_fontsize=theme.font_size,
    )
    figure.suptitle(theme.title, fontsize=theme.font_size + 3)
    figure.supxlabel(theme.x_label, fontsize=theme.font_size + 1)
    figure.supylabel(theme.y_label, fontsize=theme.font_size + 1)

    logger.info(
        "Rendered %d facets with %d GPA series", len(ethnicities), len(present)
    )
    return figure


def write_chart(figure: Figure, output_file: Path, *, dpi: int | None = None) -> None:
    """Save ``figure`` to ``output_file``, creating parent directories.

    The image format follows the file suffix. Errors propagate to the caller.
    """
    output_file.parent.mkdir(parents=True, exist_ok=True)
    figure.savefig(output_file, dpi=dpi if dpi is not None else "figure")
    logger.info("Wrote chart to %s", output_file)


__all__ = [
    "DEFAULT_THEME",
    "ChartTheme",
    "bracket_colors",
    "facet_grid",
    "format_count",
    "render",
    "write_chart",
]
