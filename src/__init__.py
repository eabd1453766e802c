"""GPA Trends Report package.

Root of the GPA trends report, a small headless data pipeline that turns a CSV
of student records into a faceted chart of student counts per ethnicity, GPA
bracket and year.

Package Structure
-----------------
- `pipeline/gpa_report/`:
    Loader, normalizer, aggregator and renderer stages, plus the runner and
    command-line entrypoint that chain them.
- `config.py`: All configuration constants (paths, column names, timeouts),
  as UPPER_SNAKE_CASE.
- `exceptions.py`: Project-specific exception classes.

For typical use, run ``gpa-trends`` (or ``python -m src.pipeline.gpa_report.cli``)
or call :func:`src.pipeline.gpa_report.runner.run_from_config`.
"""
