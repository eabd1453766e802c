"""Global configuration constants for the project.

Defines paths, column names, and defaults used across the GPA report pipeline
and its command-line entrypoint.
"""

from __future__ import annotations

from pathlib import Path

# Project directories
PROJECT_ROOT: Path = Path(__file__).resolve().parents[1]
SRC_DIR: Path = PROJECT_ROOT / "src"
LOG_DIR: Path = PROJECT_ROOT / "logs"
DATA_DIR: Path = PROJECT_ROOT / "data"

# Source data
DEFAULT_SOURCE: str = str(DATA_DIR / "students_by_gpa.csv")
CSV_DELIMITER: str = ","
REQUEST_TIMEOUT_SECONDS: float = 30.0

# Column names after header normalization
ETHNICITY_COLUMN: str = "ethnicity"
GPA_COLUMN: str = "gpa"
PERIOD_COLUMN: str = "period"
YEAR_COLUMN: str = "year"
SEMESTER_COLUMN: str = "semester"
TOTAL_COLUMN: str = "total"

# Period layout: four-digit year followed by a one-character semester code
PERIOD_LENGTH: int = 5
YEAR_LENGTH: int = 4

# Literal used by the source for missing categories
UNKNOWN_LABEL: str = "Unknown"

# Policy for GPA labels outside the bracket list: "drop" or "raise"
DEFAULT_UNRECOGNIZED_GPA_POLICY: str = "drop"

# Output
OUTPUT_DIR: Path = PROJECT_ROOT / "output"
OUTPUT_CHART_FILE: Path = OUTPUT_DIR / "gpa_trends.png"

# Logging
LOG_FILENAME_GPA_REPORT: str = "gpa_report.log"
LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
