"""Core constants used across compatibility modules.

This module centralizes layout names and tuning defaults.
Keeping values here avoids magic literals in conversion logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path("testdata") / "tpch"
DEFAULT_VERSIONS_ROOT = Path("testdata") / "versions"
DEFAULT_EXTERNAL_ROOT = Path("testdata") / "impala"
DEFAULT_OUTPUT_ROOT = Path("target") / "compat"
DEFAULT_CURRENT_VERSION = "1.0.0"
DEFAULT_EXTERNAL_PRODUCER = "impala"
DEFAULT_DELIMITER = "|"
DEFAULT_VARIANTS = ("plain", "dict")
DEFAULT_BATCH_ROWS = 1024
DEFAULT_SORT_CHUNK_ROWS = 100_000
DEFAULT_MAX_WORKERS = 1
DEFAULT_LOG_LEVEL = "INFO"
VERSION_DIR_PREFIX = "parquet-compat-"
TEXT_SUFFIX = ".csv"
SCHEMA_SUFFIX = ".schema"
COLUMNAR_SUFFIX = ".parquet"
SORT_SCRATCH_PREFIX = "parquet-compat-sort-"
MATRIX_REPORT_FILE_NAME = "matrix_report.json"
MAX_VERSION_SEGMENTS = 4
GENERATED_TEXT_DIR_NAME = "text"
