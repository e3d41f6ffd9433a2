"""Runtime configuration model for the compatibility suite.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_BATCH_ROWS,
    DEFAULT_CURRENT_VERSION,
    DEFAULT_DATA_ROOT,
    DEFAULT_DELIMITER,
    DEFAULT_EXTERNAL_PRODUCER,
    DEFAULT_EXTERNAL_ROOT,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_WORKERS,
    DEFAULT_OUTPUT_ROOT,
    DEFAULT_SORT_CHUNK_ROWS,
    DEFAULT_VARIANTS,
    DEFAULT_VERSIONS_ROOT,
)
from core.errors import CompatConfigError, MalformedVersion
from core.versioning import VersionId

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass(frozen=True)
class CompatConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Directory holding reference ``.csv`` and ``.schema`` files.
        versions_root: Directory holding ``parquet-compat-<version>`` dirs.
        external_root: Directory holding one ``<version>`` dir per external release.
        external_producer: Variant tag embedded in external artifact names.
        output_root: Directory receiving generated artifacts.
        current_version: Release under test.
        delimiter: Single-character text column delimiter.
        variants: Writer variants exercised by round-trip runs.
        batch_rows: Rows per columnar read/write batch.
        sort_chunk_rows: Rows held in memory per external-sort chunk.
        max_workers: Matrix worker pool size.
        replace_outputs: Whether runs delete their own stale outputs first.
        log_level: Minimum structured log level.
    """

    data_root: Path
    versions_root: Path
    external_root: Path
    external_producer: str
    output_root: Path
    current_version: VersionId
    delimiter: str
    variants: tuple[str, ...]
    batch_rows: int
    sort_chunk_rows: int
    max_workers: int
    replace_outputs: bool
    log_level: str

    @classmethod
    def from_env(cls) -> "CompatConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            CompatConfigError: If environment values are invalid.
        """
        return cls(
            data_root=_env_path("PARQUET_COMPAT_DATA_ROOT", DEFAULT_DATA_ROOT),
            versions_root=_env_path("PARQUET_COMPAT_VERSIONS_ROOT", DEFAULT_VERSIONS_ROOT),
            external_root=_env_path("PARQUET_COMPAT_EXTERNAL_ROOT", DEFAULT_EXTERNAL_ROOT),
            external_producer=os.getenv(
                "PARQUET_COMPAT_EXTERNAL_PRODUCER", DEFAULT_EXTERNAL_PRODUCER
            ),
            output_root=_env_path("PARQUET_COMPAT_OUTPUT_ROOT", DEFAULT_OUTPUT_ROOT),
            current_version=_parse_current_version(
                os.getenv("PARQUET_COMPAT_CURRENT_VERSION", DEFAULT_CURRENT_VERSION)
            ),
            delimiter=_parse_delimiter(os.getenv("PARQUET_COMPAT_DELIMITER", DEFAULT_DELIMITER)),
            variants=_parse_variants(
                os.getenv("PARQUET_COMPAT_VARIANTS", ",".join(DEFAULT_VARIANTS))
            ),
            batch_rows=_parse_positive_int(
                "PARQUET_COMPAT_BATCH_ROWS",
                os.getenv("PARQUET_COMPAT_BATCH_ROWS", str(DEFAULT_BATCH_ROWS)),
            ),
            sort_chunk_rows=_parse_positive_int(
                "PARQUET_COMPAT_SORT_CHUNK_ROWS",
                os.getenv("PARQUET_COMPAT_SORT_CHUNK_ROWS", str(DEFAULT_SORT_CHUNK_ROWS)),
            ),
            max_workers=_parse_positive_int(
                "PARQUET_COMPAT_MAX_WORKERS",
                os.getenv("PARQUET_COMPAT_MAX_WORKERS", str(DEFAULT_MAX_WORKERS)),
            ),
            replace_outputs=_parse_bool(
                "PARQUET_COMPAT_REPLACE_OUTPUTS",
                os.getenv("PARQUET_COMPAT_REPLACE_OUTPUTS", "true"),
            ),
            log_level=_parse_log_level(os.getenv("PARQUET_COMPAT_LOG_LEVEL", DEFAULT_LOG_LEVEL)),
        )


def _env_path(name: str, default: Path) -> Path:
    return Path(os.getenv(name, str(default))).expanduser().resolve()


def _parse_current_version(raw_value: str) -> VersionId:
    """Parse the release under test.

    Raises:
        CompatConfigError: If the value is not a valid release identifier.
    """
    try:
        return VersionId.parse(raw_value)
    except MalformedVersion as error:
        raise CompatConfigError(
            f"Invalid PARQUET_COMPAT_CURRENT_VERSION value '{raw_value}': {error} "
            "Use major.minor.patch[-tag], e.g. 1.0.0 or 1.1.0-SNAPSHOT."
        ) from error


def _parse_delimiter(raw_value: str) -> str:
    if len(raw_value) != 1 or raw_value in ("\n", "\r"):
        raise CompatConfigError(
            "Invalid PARQUET_COMPAT_DELIMITER value: "
            f"expected one non-newline character, got {raw_value!r}."
        )
    return raw_value


def _parse_variants(raw_value: str) -> tuple[str, ...]:
    variants = tuple(item.strip() for item in raw_value.split(",") if item.strip())
    if not variants:
        raise CompatConfigError(
            "Invalid PARQUET_COMPAT_VARIANTS value: expected a comma-separated list "
            "such as 'plain,dict'."
        )
    return variants


def _parse_positive_int(name: str, raw_value: str) -> int:
    """Parse a strictly positive integer environment value.

    Args:
        name: Environment variable name for error context.
        raw_value: Raw string from environment.

    Returns:
        Parsed integer.

    Raises:
        CompatConfigError: If value is not a positive integer.
    """
    try:
        value = int(raw_value)
    except ValueError as error:
        raise CompatConfigError(
            f"Invalid {name} value: expected integer, got '{raw_value}'. "
            f"Set {name} to a positive number."
        ) from error
    if value <= 0:
        raise CompatConfigError(f"Invalid {name} value: expected > 0, got {value}.")
    return value


def _parse_bool(name: str, raw_value: str) -> bool:
    lowered = raw_value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise CompatConfigError(
        f"Invalid {name} value: expected true/false, got '{raw_value}'."
    )


def _parse_log_level(raw_value: str) -> str:
    level = raw_value.strip().upper()
    if level not in _LOG_LEVELS:
        raise CompatConfigError(
            f"Invalid PARQUET_COMPAT_LOG_LEVEL value '{raw_value}': "
            f"expected one of {', '.join(_LOG_LEVELS)}."
        )
    return level
