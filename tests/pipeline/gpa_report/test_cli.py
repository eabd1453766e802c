"""Tests for the GPA report command-line interface."""

import logging
from pathlib import Path

import pandas as pd
import pytest
from rich.console import Console

from src.pipeline.gpa_report import cli
from src.pipeline.gpa_report.gpa import GPA_DTYPE

CSV_TEXT = "Period,Ethnicity,GPA\n20188,A,3.0-3.4\n20198,A,3.5-4.0\n20198,B,2.0-2.4\n"


@pytest.fixture(autouse=True)
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_configure_logging_filehandler_error(monkeypatch):
    class BadFH:
        def __init__(self, *a, **k):
            raise OSError("fh error")

    monkeypatch.setattr(cli.logging, "FileHandler", BadFH)
    cli.configure_logging("DEBUG", enable_file=True)
    assert logging.getLogger().level == logging.DEBUG
    assert all(not isinstance(h, BadFH) for h in logging.getLogger().handlers)


def test_parse_arguments_defaults():
    args = cli.parse_arguments([])
    assert args.source == cli.DEFAULT_SOURCE
    assert args.output == cli.OUTPUT_CHART_FILE
    assert args.strict_gpa is False
    assert args.no_summary is False


def test_main_success_prints_summary(write_csv, tmp_path: Path, capsys):
    out = tmp_path / "chart.png"
    code = cli.main(["--source", str(write_csv(CSV_TEXT)), "--output", str(out)])
    assert code == 0
    assert out.exists()
    captured = capsys.readouterr().out
    assert "Students counted per ethnicity" in captured
    assert "2018-2019" in captured


def test_main_failure_returns_one(tmp_path: Path):
    code = cli.main(
        ["--source", str(tmp_path / "missing.csv"), "--output", str(tmp_path / "c.png")]
    )
    assert code == 1


def test_main_strict_gpa_flag(monkeypatch, tmp_path: Path):
    seen = {}

    def fake_run(source, output_file, **kwargs):
        seen.update(kwargs)
        return None

    monkeypatch.setattr(cli, "run_from_config", fake_run)
    assert cli.main(["--strict-gpa", "--timeout", "3", "--no-summary"]) == 1
    assert seen == {"timeout": 3.0, "on_unrecognized": "raise"}


def test_print_summary_table():
    counts = pd.DataFrame(
        {
            "ethnicity": ["A", "A", "B"],
            "gpa": pd.Series(["3.0-3.4", "3.5-4.0", "3.0-3.4"], dtype=GPA_DTYPE),
            "year": ["2018", "2019", "2019"],
            "total": [1200, 300, 4],
        }
    )
    console = Console(record=True, width=100)
    cli.print_summary(counts, console)
    text = console.export_text()
    assert "1,500" in text
    assert "2018-2019" in text


def test_print_summary_empty():
    console = Console(record=True, width=100)
    cli.print_summary(pd.DataFrame(columns=["ethnicity", "gpa", "year", "total"]), console)
    assert "No students matched" in console.export_text()
