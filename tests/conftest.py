"""Pytest configuration for test environment setup.

- Forces ``DISABLE_FILE_LOGS=1`` to avoid writing log files during tests.
- Forces the non-interactive ``Agg`` matplotlib backend.
- Ensures the project root is available on ``sys.path`` for imports.
- Provides small raw tables shared by the pipeline tests.
"""

import os
import sys

os.environ.setdefault("DISABLE_FILE_LOGS", "1")  # Avoid creating log files during tests
os.environ.setdefault("MPLBACKEND", "Agg")
from pathlib import Path

import pandas as pd
import pytest

# Ensure project root is on sys.path
ROOT = Path(__file__).resolve().parents[1]
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)


@pytest.fixture
def raw_table() -> pd.DataFrame:
    """Raw table with source-style headers and a mix of known/unknown values."""
    return pd.DataFrame(
        {
            "Period": ["20188", "20188", "20188", "20191", "20198", "20198", "20198"],
            "Ethnicity": ["A", "A", "B", "B", "A", None, "Unknown"],
            "GPA": [
                "3.0-3.4",
                "3.0-3.4",
                "Unknown",
                "> 4.0",
                "3.5-4.0",
                "3.5-4.0",
                "2.0-2.4",
            ],
        }
    )


@pytest.fixture
def write_csv(tmp_path: Path):
    """Return a helper that writes ``text`` to a CSV file under ``tmp_path``."""

    def _write(text: str, name: str = "students.csv") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
