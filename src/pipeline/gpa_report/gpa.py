"""Ordered GPA bracket domain.

The source reports grade-point averages as string-encoded brackets. This
module declares the closed set of brackets together with their rank, and the
pandas categorical dtype built from it, so that ordering never depends on
string comparison.

Examples
--------
>>> from src.pipeline.gpa_report.gpa import GpaBracket, GPA_ORDER
>>> GpaBracket.from_label("3.0-3.4").rank
4
>>> GPA_ORDER[0], GPA_ORDER[-1]
('0.0-.4', 'Unknown')
"""

from __future__ import annotations

from enum import Enum

import pandas as pd


class GpaBracket(Enum):
    """GPA bracket labels, declared in ascending merit order."""

    BELOW_0_4 = "0.0-.4"
    FROM_1_5 = "1.5-1.9"
    FROM_2_0 = "2.0-2.4"
    FROM_2_5 = "2.5-2.9"
    FROM_3_0 = "3.0-3.4"
    FROM_3_5 = "3.5-4.0"
    ABOVE_4_0 = "> 4.0"
    UNKNOWN = "Unknown"

    @property
    def label(self) -> str:
        """Label as written in the source data."""
        return self.value

    @property
    def rank(self) -> int:
        """Zero-based position in the canonical ordering."""
        return _RANKS[self]

    @classmethod
    def from_label(cls, label: str) -> GpaBracket:
        """Return the bracket for ``label``.

        Raises
        ------
        ValueError
            If ``label`` is not one of the declared bracket labels.
        """
        try:
            return cls(label)
        except ValueError:
            raise ValueError(f"Unrecognized GPA bracket: {label!r}") from None

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, GpaBracket):
            return NotImplemented
        return self.rank < other.rank


_RANKS: dict[GpaBracket, int] = {
    bracket: position for position, bracket in enumerate(GpaBracket)
}

GPA_ORDER: tuple[str, ...] = tuple(bracket.value for bracket in GpaBracket)
GPA_DTYPE = pd.CategoricalDtype(categories=list(GPA_ORDER), ordered=True)
_LABEL_SET: frozenset[str] = frozenset(GPA_ORDER)


def legend_order(labels: list[str] | tuple[str, ...] = GPA_ORDER) -> list[str]:
    """Return ``labels`` sorted into reverse canonical order for legends.

    Labels outside the bracket domain are ignored.

    >>> legend_order(["2.0-2.4", "> 4.0", "0.0-.4"])
    ['> 4.0', '2.0-2.4', '0.0-.4']
    """
    known = {label for label in labels if is_known_label(label)}
    return [label for label in reversed(GPA_ORDER) if label in known]


def has_gpa_dtype(series: pd.Series) -> bool:
    """Return True if ``series`` already carries the ordered bracket dtype."""
    return isinstance(series.dtype, pd.CategoricalDtype) and series.dtype == GPA_DTYPE


def is_known_label(label: object) -> bool:
    """Return True if ``label`` is exactly one of the declared bracket labels.

    Matching is case-sensitive and does not strip whitespace; see
    :func:`~src.pipeline.gpa_report.normalizer.coerce_gpa` for lenient input.
    """
    return isinstance(label, str) and label in _LABEL_SET


__all__ = [
    "GPA_DTYPE",
    "GPA_ORDER",
    "GpaBracket",
    "has_gpa_dtype",
    "is_known_label",
    "legend_order",
]
