"""Header and type normalization for the raw GPA table.

Two steps are applied, in order:

1. Column names are rewritten to lowercase snake_case. The rewrite is
   deterministic and idempotent, and two source columns that collapse onto
   the same name are rejected with
   :class:`~src.exceptions.DuplicateColumnNameError`.
2. The ``gpa`` column is cast to the ordered categorical ``GPA_DTYPE``.
   Labels outside the bracket list are either dropped to a missing value
   (default) or rejected with :class:`~src.exceptions.UnrecognizedGpaError`.

The input frame is never modified; a new frame is returned.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from collections.abc import Iterable

import pandas as pd

from src.config import DEFAULT_UNRECOGNIZED_GPA_POLICY, GPA_COLUMN
from src.exceptions import DuplicateColumnNameError, UnrecognizedGpaError

from .gpa import GPA_DTYPE, GPA_ORDER, has_gpa_dtype

logger = logging.getLogger(__name__)

UNRECOGNIZED_GPA_POLICIES = ("drop", "raise")

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def clean_column_name(name: object) -> str:
    """Return ``name`` as a lowercase, underscore-separated identifier.

    Examples
    --------
    >>> clean_column_name("Student Ethnicity")
    'student_ethnicity'
    >>> clean_column_name("GPAValue")
    'gpa_value'
    >>> clean_column_name("% Passed (Fall)")
    'percent_passed_fall'
    >>> clean_column_name("2021 Count")
    'x2021_count'
    """
    text = unicodedata.normalize("NFKD", str(name))
    text = text.encode("ascii", "ignore").decode("ascii")
    text = text.replace("%", " percent ").replace("&", " and ")
    text = _ACRONYM_BOUNDARY.sub(r"\1_\2", text)
    text = _CAMEL_BOUNDARY.sub(r"\1_\2", text)
    text = _NON_ALNUM.sub("_", text.lower()).strip("_")
    if not text:
        return "x"
    if text[0].isdigit():
        return f"x{text}"
    return text


def clean_column_names(columns: Iterable[object]) -> list[str]:
    """Clean every name in ``columns``, rejecting collisions.

    Raises
    ------
    DuplicateColumnNameError
        If two source columns normalize to the same name.
    """
    cleaned: list[str] = []
    sources: dict[str, list[str]] = {}
    for column in columns:
        name = clean_column_name(column)
        sources.setdefault(name, []).append(str(column))
        cleaned.append(name)
    collisions = {name: found for name, found in sources.items() if len(found) > 1}
    if collisions:
        raise DuplicateColumnNameError(
            "Columns normalize to the same name: "
            + ", ".join(sorted(collisions)),
            context={"collisions": collisions},
        )
    return cleaned


def coerce_gpa(
    series: pd.Series, *, on_unrecognized: str = DEFAULT_UNRECOGNIZED_GPA_POLICY
) -> pd.Series:
    """Cast a GPA label series to the ordered bracket categorical.

    Parameters
    ----------
    series : pandas.Series
        Raw GPA labels. Missing values stay missing.
    on_unrecognized : {"drop", "raise"}
        What to do with non-missing labels outside the bracket list.

    Returns
    -------
    pandas.Series
        Series with dtype ``GPA_DTYPE``.

    Raises
    ------
    UnrecognizedGpaError
        With ``on_unrecognized="raise"`` when an out-of-domain label is found.
    ValueError
        If ``on_unrecognized`` is not a known policy.
    """
    if on_unrecognized not in UNRECOGNIZED_GPA_POLICIES:
        raise ValueError(f"Unknown unrecognized-GPA policy: {on_unrecognized!r}")
    if has_gpa_dtype(series):
        return series

    labels = series.astype("string").str.strip()
    known = labels.isin(GPA_ORDER).fillna(False).astype(bool)
    unrecognized = labels[labels.notna() & ~known]
    if not unrecognized.empty:
        distinct = sorted(unrecognized.unique().tolist())
        if on_unrecognized == "raise":
            raise UnrecognizedGpaError(
                f"{len(unrecognized)} GPA values outside the bracket list",
                context={"labels": distinct, "rows": len(unrecognized)},
            )
        logger.warning(
            "Treating %d GPA values as unrecognized: %s",
            len(unrecognized),
            ", ".join(distinct),
        )
    return pd.Series(
        pd.Categorical(labels.where(known).astype(object), dtype=GPA_DTYPE),
        index=series.index,
        name=series.name,
    )


def normalize(
    table: pd.DataFrame,
    *,
    on_unrecognized: str = DEFAULT_UNRECOGNIZED_GPA_POLICY,
) -> pd.DataFrame:
    """Return a copy of ``table`` with clean column names and a typed GPA column.

    Applying ``normalize`` to its own output returns an equal frame.
    """
    normalized = table.copy()
    normalized.columns = clean_column_names(table.columns)
    if GPA_COLUMN in normalized.columns:
        normalized[GPA_COLUMN] = coerce_gpa(
            normalized[GPA_COLUMN], on_unrecognized=on_unrecognized
        )
    else:
        logger.warning("No %r column found; GPA coercion skipped", GPA_COLUMN)
    return normalized


__all__ = [
    "UNRECOGNIZED_GPA_POLICIES",
    "clean_column_name",
    "clean_column_names",
    "coerce_gpa",
    "normalize",
]
