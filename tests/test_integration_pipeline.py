"""Integration test: full GPA report from the bundled sample CSV.

Runs the loader, normalizer, aggregator and renderer in sequence on the
sample data shipped in ``data/`` and checks the chart and counts agree.
"""

from pathlib import Path

from src.config import DEFAULT_SOURCE
from src.pipeline.gpa_report import (
    aggregate,
    as_aggregated_counts,
    fetch,
    normalize,
    render,
    run_from_config,
)


def test_sample_data_end_to_end(tmp_path: Path):
    """Run the bundled sample through every stage and the runner.

    Parameters
    ----------
    tmp_path : Path
        Temporary directory provided by pytest.

    Returns
    -------
    None
        Asserts conservation of counts, facets and chart output.
    """
    table = fetch(DEFAULT_SOURCE)
    normalized = normalize(table)
    counts = aggregate(normalized)

    # 27 rows: one Unknown ethnicity, one missing ethnicity, one Unknown GPA
    assert int(counts["total"].sum()) == len(table) - 3
    assert set(counts["ethnicity"]) == {"Asian American", "Hispanic", "White"}
    assert all(record.year.isdigit() for record in as_aggregated_counts(counts))

    figure = render(counts)
    titles = [ax.get_title() for ax in figure.axes if ax.get_visible()]
    assert titles == ["Asian American", "Hispanic", "White"]
    legend = [text.get_text() for text in figure.legends[0].get_texts()]
    assert legend[0] == "> 4.0"

    out = tmp_path / "gpa.png"
    result = run_from_config(DEFAULT_SOURCE, out)
    assert result is not None and out.exists()
