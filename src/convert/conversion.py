"""File-level conversion between text and columnar artifacts.

This module wires the schema codec, record transcoder, and Parquet codec into
whole-artifact conversions. A conversion that fails part way deletes its
output so a partially converted dataset is never left behind.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

from core.constants import DEFAULT_DELIMITER
from core.errors import ArtifactAlreadyExists, RecordConversionError
from core.logging_config import get_logger
from convert.columnar_codec import ColumnarWriteOptions, ParquetCodec
from convert.record_transcoder import decode_rows, encode_records
from convert.schema_parser import read_schema_file, schema_path_for
from convert.text_artifacts import iter_text_rows, write_text_rows

_LOGGER = get_logger(__name__)


def convert_text_to_columnar(
    text_path: Path,
    columnar_path: Path,
    codec: ParquetCodec,
    options: ColumnarWriteOptions = ColumnarWriteOptions(),
    delimiter: str = DEFAULT_DELIMITER,
    logger: Any | None = None,
) -> int:
    """Encode a delimited text artifact into a new Parquet file.

    The schema is read from the sibling ``.schema`` file of ``text_path``.

    Args:
        text_path: Source text artifact.
        columnar_path: Destination; must not exist yet.
        codec: Columnar encode capability.
        options: Writer variant settings.
        delimiter: Text column separator.
        logger: Optional structured logger.

    Returns:
        Number of rows converted.

    Raises:
        ArtifactAlreadyExists: If the destination exists.
        SchemaParseError: If the schema file is missing or malformed.
        RecordConversionError: If any row fails to decode.
    """
    log = logger or _LOGGER
    if columnar_path.exists():
        raise ArtifactAlreadyExists(str(columnar_path))
    schema = read_schema_file(schema_path_for(text_path))
    log.info(
        "conversion_started",
        direction="text_to_columnar",
        source=str(text_path),
        target=str(columnar_path),
        columns=len(schema),
    )
    records = decode_rows(iter_text_rows(text_path), schema, delimiter)
    row_count = _remove_on_failure(
        columnar_path,
        lambda: codec.encode(columnar_path, schema, records, options),
        text_path,
        log,
    )
    log.info("conversion_finished", direction="text_to_columnar", rows=row_count)
    return row_count


def convert_columnar_to_text(
    columnar_path: Path,
    text_path: Path,
    codec: ParquetCodec,
    delimiter: str = DEFAULT_DELIMITER,
    logger: Any | None = None,
) -> int:
    """Decode a Parquet file into a new delimited text artifact.

    Args:
        columnar_path: Source Parquet file.
        text_path: Destination; must not exist yet.
        codec: Columnar decode capability.
        delimiter: Text column separator.
        logger: Optional structured logger.

    Returns:
        Number of rows converted.

    Raises:
        ArtifactNotFound: If the source file does not exist.
        ArtifactAlreadyExists: If the destination exists.
        RecordConversionError: If any record cannot be rendered as text.
    """
    log = logger or _LOGGER
    if text_path.exists():
        raise ArtifactAlreadyExists(str(text_path))
    schema, records = codec.decode(columnar_path)
    log.info(
        "conversion_started",
        direction="columnar_to_text",
        source=str(columnar_path),
        target=str(text_path),
        columns=len(schema),
    )
    rows = encode_records(records, schema, delimiter)
    row_count = _remove_on_failure(
        text_path,
        lambda: write_text_rows(text_path, rows),
        columnar_path,
        log,
    )
    log.info("conversion_finished", direction="columnar_to_text", rows=row_count)
    return row_count


def _remove_on_failure(
    output_path: Path,
    convert: Callable[[], int],
    source_path: Path,
    log: Any,
) -> int:
    try:
        return convert()
    except ArtifactAlreadyExists:
        raise
    except Exception as error:
        output_path.unlink(missing_ok=True)
        log.error(
            "conversion_failed",
            source=str(source_path),
            target=str(output_path),
            row_index=error.row_index if isinstance(error, RecordConversionError) else None,
            error=str(error),
        )
        raise
