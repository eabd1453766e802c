"""Aggregation of normalized GPA records into per-year student counts.

This module forms the data-oriented core of the GPA report pipeline. It turns
a normalized table (see ``normalizer.py``) into one row per
``(ethnicity, gpa, year)`` with the exact number of source rows in that
partition, ready for the renderer.

Design Principles
-----------------
- Pure functions over :class:`pandas.DataFrame`; inputs are never mutated.
- Grouping is an exact integer count and does not depend on row order.
- Data-quality problems in ``period`` are surfaced as
  :class:`~src.exceptions.MalformedPeriodError`, never silently truncated.
- Output rows are sorted by ethnicity, then year ascending, then GPA bracket
  rank, so results are stable across runs.

Usage
-----
>>> import pandas as pd
>>> from src.pipeline.gpa_report.normalizer import normalize
>>> from src.pipeline.gpa_report.aggregator import aggregate
>>> raw = pd.DataFrame(
...     {
...         "Ethnicity": ["A", "A", "B"],
...         "GPA": ["3.0-3.4", "3.0-3.4", "Unknown"],
...         "Period": ["2021F", "2021F", "2021S"],
...     }
... )
>>> aggregate(normalize(raw)).to_dict("records")
[{'ethnicity': 'A', 'gpa': '3.0-3.4', 'year': '2021', 'total': 2}]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import pandas as pd

from src.config import (
    ETHNICITY_COLUMN,
    GPA_COLUMN,
    PERIOD_COLUMN,
    PERIOD_LENGTH,
    SEMESTER_COLUMN,
    TOTAL_COLUMN,
    UNKNOWN_LABEL,
    YEAR_COLUMN,
    YEAR_LENGTH,
)
from src.exceptions import MalformedInputError, MalformedPeriodError

from .gpa import GPA_DTYPE, GpaBracket, has_gpa_dtype
from .normalizer import coerce_gpa

logger = logging.getLogger(__name__)

GROUP_COLUMNS: list[str] = [ETHNICITY_COLUMN, GPA_COLUMN, YEAR_COLUMN]
COUNT_COLUMNS: list[str] = [*GROUP_COLUMNS, TOTAL_COLUMN]
SORT_COLUMNS: list[str] = [ETHNICITY_COLUMN, YEAR_COLUMN, GPA_COLUMN]

_SAMPLE_SIZE = 5


@dataclass(frozen=True)
class AggregatedCount:
    """Number of students sharing an ethnicity, GPA bracket and year."""

    ethnicity: str
    gpa: GpaBracket
    year: str
    total: int


def empty_counts() -> pd.DataFrame:
    """Return a zero-row count table with the output schema."""
    return pd.DataFrame(
        {
            ETHNICITY_COLUMN: pd.Series(dtype=object),
            GPA_COLUMN: pd.Series(dtype=GPA_DTYPE),
            YEAR_COLUMN: pd.Series(dtype=object),
            TOTAL_COLUMN: pd.Series(dtype="int64"),
        }
    )


def split_period(table: pd.DataFrame) -> pd.DataFrame:
    """Split ``period`` into ``year`` (first four characters) and ``semester``.

    Parameters
    ----------
    table : pandas.DataFrame
        Normalized table with a ``period`` column.

    Returns
    -------
    pandas.DataFrame
        Copy of ``table`` with ``year`` and ``semester`` columns added.

    Raises
    ------
    MalformedPeriodError
        If the column is absent, or any value is missing or not exactly
        ``PERIOD_LENGTH`` characters long.

    Examples
    --------
    >>> import pandas as pd
    >>> split_period(pd.DataFrame({"period": ["20218"]}))[["year", "semester"]].iloc[0].tolist()
    ['2021', '8']
    """
    if PERIOD_COLUMN not in table.columns:
        raise MalformedPeriodError(
            f"Column {PERIOD_COLUMN!r} is missing",
            context={"columns": [str(column) for column in table.columns]},
        )

    periods = table[PERIOD_COLUMN].astype("string")
    wrong_length = periods.str.len().ne(PERIOD_LENGTH).fillna(True)
    malformed = (periods.isna() | wrong_length).astype(bool)
    if malformed.any():
        samples = [
            None if pd.isna(value) else str(value)
            for value in periods[malformed].head(_SAMPLE_SIZE)
        ]
        raise MalformedPeriodError(
            f"{int(malformed.sum())} rows have a {PERIOD_COLUMN!r} value that is "
            f"missing or not {PERIOD_LENGTH} characters long",
            context={"rows": int(malformed.sum()), "samples": samples},
        )

    result = table.copy()
    result[YEAR_COLUMN] = periods.str.slice(0, YEAR_LENGTH).astype(object)
    result[SEMESTER_COLUMN] = periods.str.slice(YEAR_LENGTH, PERIOD_LENGTH).astype(
        object
    )
    return result


def count_by_group(table: pd.DataFrame) -> pd.DataFrame:
    """Count rows per ``(ethnicity, gpa, year)``.

    Rows whose ethnicity or GPA bracket is missing belong to no partition.
    """
    if table.empty:
        return empty_counts()
    counts = (
        table.groupby(GROUP_COLUMNS, observed=True, dropna=True, sort=False)
        .size()
        .reset_index(name=TOTAL_COLUMN)
    )
    if counts.empty:
        return empty_counts()
    counts[TOTAL_COLUMN] = counts[TOTAL_COLUMN].astype("int64")
    return counts


def drop_unknown_groups(counts: pd.DataFrame) -> pd.DataFrame:
    """Drop partitions with a missing or ``"Unknown"`` ethnicity or GPA."""
    ethnicity = counts[ETHNICITY_COLUMN]
    gpa = counts[GPA_COLUMN]
    keep = (
        ethnicity.notna()
        & (ethnicity != UNKNOWN_LABEL)
        & gpa.notna()
        & (gpa.astype(object) != UNKNOWN_LABEL)
    )
    return counts.loc[keep].reset_index(drop=True)


def sort_counts(counts: pd.DataFrame) -> pd.DataFrame:
    """Sort by ethnicity, year ascending, then GPA bracket rank."""
    return counts.sort_values(SORT_COLUMNS, kind="mergesort").reset_index(drop=True)


def aggregate(table: pd.DataFrame) -> pd.DataFrame:
    """Aggregate a normalized table into per-year student counts.

    Parameters
    ----------
    table : pandas.DataFrame
        Output of :func:`~src.pipeline.gpa_report.normalizer.normalize`.

    Returns
    -------
    pandas.DataFrame
        Columns ``ethnicity``, ``gpa`` (ordered categorical), ``year`` and
        ``total`` (int64), sorted by ethnicity, year, then GPA.

    Raises
    ------
    MalformedInputError
        If the ``ethnicity`` or ``gpa`` column is missing.
    MalformedPeriodError
        If ``period`` is missing or any value has the wrong length.

    Notes
    -----
    The sum of ``total`` equals the number of input rows with a known,
    non-"Unknown" ethnicity and a recognized, non-"Unknown" GPA bracket.
    """
    missing = [
        column for column in (ETHNICITY_COLUMN, GPA_COLUMN) if column not in table
    ]
    if missing:
        raise MalformedInputError(
            "Required columns are missing: " + ", ".join(missing),
            context={"missing": missing},
        )

    if not has_gpa_dtype(table[GPA_COLUMN]):
        table = table.assign(**{GPA_COLUMN: coerce_gpa(table[GPA_COLUMN])})

    with_year = split_period(table)
    counts = sort_counts(drop_unknown_groups(count_by_group(with_year)))
    logger.info(
        "Aggregated %d rows into %d groups (%d students counted)",
        len(table),
        len(counts),
        int(counts[TOTAL_COLUMN].sum()),
    )
    return counts


def as_aggregated_counts(counts: pd.DataFrame) -> list[AggregatedCount]:
    """Convert an aggregate table into :class:`AggregatedCount` records."""
    return [
        AggregatedCount(
            ethnicity=str(row.ethnicity),
            gpa=GpaBracket.from_label(str(row.gpa)),
            year=str(row.year),
            total=int(row.total),
        )
        for row in counts[COUNT_COLUMNS].itertuples(index=False)
    ]


__all__ = [
    "AggregatedCount",
    "aggregate",
    "as_aggregated_counts",
    "count_by_group",
    "drop_unknown_groups",
    "empty_counts",
    "sort_counts",
    "split_period",
]
