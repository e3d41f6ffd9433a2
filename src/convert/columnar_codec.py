"""Parquet encode/decode capability backed by pyarrow.

This module is the only place that touches the columnar library. Records are
written and read in fixed-size batches so memory stays bounded regardless of
file size.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import islice
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator

import pyarrow as pa
import pyarrow.parquet as pq

from core.constants import DEFAULT_BATCH_ROWS
from core.errors import (
    ArtifactAlreadyExists,
    ArtifactNotFound,
    ColumnarCodecError,
    CompatConfigError,
    FieldTypeMismatch,
    SchemaParseError,
)
from core.types import ColumnDescriptor, PrimitiveKind, Record, Repetition, Schema


@dataclass(frozen=True)
class ColumnarWriteOptions:
    """Writer settings distinguishing one artifact variant from another.

    Attributes:
        use_dictionary: Enable dictionary encoding for all columns.
        compression: Parquet compression codec name.
    """

    use_dictionary: bool = False
    compression: str = "none"


WRITER_VARIANTS: dict[str, ColumnarWriteOptions] = {
    "plain": ColumnarWriteOptions(use_dictionary=False, compression="none"),
    "dict": ColumnarWriteOptions(use_dictionary=True, compression="none"),
    "snappy": ColumnarWriteOptions(use_dictionary=True, compression="snappy"),
}

_ARROW_TYPES: dict[PrimitiveKind, Callable[[], pa.DataType]] = {
    "BOOLEAN": pa.bool_,
    "INT32": pa.int32,
    "INT64": pa.int64,
    "FLOAT": pa.float32,
    "DOUBLE": pa.float64,
    "BINARY": pa.binary,
}


def writer_options_for(variant: str) -> ColumnarWriteOptions:
    """Return writer options for a named variant.

    Raises:
        CompatConfigError: If the variant is unknown.
    """
    try:
        return WRITER_VARIANTS[variant]
    except KeyError as error:
        raise CompatConfigError(
            f"Unknown writer variant '{variant}'. "
            f"Supported variants: {', '.join(sorted(WRITER_VARIANTS))}."
        ) from error


class ParquetCodec:
    """Columnar encode/decode over Parquet files."""

    def __init__(self, batch_rows: int = DEFAULT_BATCH_ROWS) -> None:
        self._batch_rows = batch_rows

    def encode(
        self,
        output_path: Path,
        schema: Schema,
        records: Iterable[Record],
        options: ColumnarWriteOptions = ColumnarWriteOptions(),
    ) -> int:
        """Write records to a new Parquet file.

        Args:
            output_path: Destination; must not exist yet.
            schema: Column layout of the records.
            records: Records aligned with schema ordinals.
            options: Writer variant settings.

        Returns:
            Number of rows written.

        Raises:
            ArtifactAlreadyExists: If the destination exists.
            ColumnarCodecError: If the Parquet writer fails.
        """
        if output_path.exists():
            raise ArtifactAlreadyExists(str(output_path))
        arrow_schema = schema_to_arrow(schema)
        record_iter = iter(records)
        row_count = 0
        try:
            with pq.ParquetWriter(
                str(output_path),
                arrow_schema,
                use_dictionary=options.use_dictionary,
                compression=options.compression,
            ) as writer:
                while True:
                    batch = list(islice(record_iter, self._batch_rows))
                    if not batch:
                        break
                    writer.write_batch(_build_batch(schema, arrow_schema, batch, row_count))
                    row_count += len(batch)
        except (pa.ArrowException, OSError) as error:
            raise ColumnarCodecError(
                f"Failed to write Parquet file at {output_path}: {error}. "
                "Validate the schema and input rows."
            ) from error
        return row_count

    def read_schema(self, input_path: Path) -> Schema:
        """Read the flat schema stored in a Parquet footer.

        Raises:
            ArtifactNotFound: If the file does not exist.
            ColumnarCodecError: If the footer cannot be read.
            SchemaParseError: If the file schema has no text representation.
        """
        with _open_parquet(input_path) as parquet_file:
            arrow_schema = parquet_file.schema_arrow
        return schema_from_arrow(arrow_schema, name=input_path.name.split(".")[0])

    def decode(self, input_path: Path) -> tuple[Schema, Iterator[Record]]:
        """Open a Parquet file for streaming record reads.

        Returns:
            Stored schema and a lazy record iterator in file order.
        """
        schema = self.read_schema(input_path)
        return schema, self._iter_records(input_path, schema)

    def _iter_records(self, input_path: Path, schema: Schema) -> Iterator[Record]:
        normalizers = [_value_normalizer(column) for column in schema.columns]
        with _open_parquet(input_path) as parquet_file:
            try:
                for batch in parquet_file.iter_batches(batch_size=self._batch_rows):
                    columns = [
                        [normalize(value) for value in batch.column(index).to_pylist()]
                        for index, normalize in enumerate(normalizers)
                    ]
                    for values in zip(*columns):
                        yield Record(values=tuple(values))
            except pa.ArrowException as error:
                raise ColumnarCodecError(
                    f"Failed to read Parquet rows from {input_path}: {error}."
                ) from error


def schema_to_arrow(schema: Schema) -> pa.Schema:
    """Map a flat schema onto an Arrow schema for the Parquet writer."""
    fields = []
    for column in schema.columns:
        value_type = _arrow_value_type(column)
        if column.repetition == "repeated":
            fields.append(pa.field(column.name, pa.list_(value_type), nullable=False))
        else:
            fields.append(
                pa.field(column.name, value_type, nullable=column.repetition == "optional")
            )
    return pa.schema(fields)


def schema_from_arrow(arrow_schema: pa.Schema, name: str) -> Schema:
    """Map an Arrow schema read from a Parquet file onto a flat schema.

    Raises:
        SchemaParseError: If a column type has no text representation.
    """
    columns = []
    for ordinal, field in enumerate(arrow_schema):
        arrow_type = field.type
        repetition: Repetition = "optional" if field.nullable else "required"
        if pa.types.is_list(arrow_type) or pa.types.is_large_list(arrow_type):
            arrow_type = arrow_type.value_type
            repetition = "repeated"
        kind, logical_type = _kind_from_arrow(field.name, arrow_type)
        columns.append(
            ColumnDescriptor(
                name=field.name,
                kind=kind,
                ordinal=ordinal,
                repetition=repetition,
                logical_type=logical_type,
            )
        )
    if not columns:
        raise SchemaParseError(f"Columnar schema '{name}' has no columns.")
    return Schema(name=name, columns=tuple(columns))


def _open_parquet(input_path: Path) -> Any:
    if not input_path.exists():
        raise ArtifactNotFound(str(input_path))
    try:
        return pq.ParquetFile(str(input_path))
    except (pa.ArrowException, OSError) as error:
        raise ColumnarCodecError(
            f"Failed to open Parquet file at {input_path}: {error}. "
            "The file may be truncated or written by an unsupported producer."
        ) from error


def _arrow_value_type(column: ColumnDescriptor) -> pa.DataType:
    if column.kind == "BINARY" and column.logical_type == "UTF8":
        return pa.string()
    return _ARROW_TYPES[column.kind]()


def _kind_from_arrow(name: str, arrow_type: pa.DataType) -> tuple[PrimitiveKind, str | None]:
    types = pa.types
    if types.is_boolean(arrow_type):
        return "BOOLEAN", None
    if types.is_int8(arrow_type) or types.is_int16(arrow_type) or types.is_int32(arrow_type):
        return "INT32", None
    if types.is_int64(arrow_type):
        return "INT64", None
    if types.is_float32(arrow_type):
        return "FLOAT", None
    if types.is_float64(arrow_type):
        return "DOUBLE", None
    if types.is_string(arrow_type) or types.is_large_string(arrow_type):
        return "BINARY", "UTF8"
    if types.is_binary(arrow_type) or types.is_large_binary(arrow_type):
        return "BINARY", None
    raise SchemaParseError(
        f"Column '{name}' has type {arrow_type}, which has no text representation."
    )


def _build_batch(
    schema: Schema,
    arrow_schema: pa.Schema,
    records: list[Record],
    first_row_index: int,
) -> pa.RecordBatch:
    """Transpose a row slice into one Arrow record batch."""
    arrays = []
    for column, field in zip(schema.columns, arrow_schema):
        values = [
            _arrow_value(record[column.ordinal], column, first_row_index + offset)
            for offset, record in enumerate(records)
        ]
        arrays.append(pa.array(values, type=field.type))
    return pa.RecordBatch.from_arrays(arrays, schema=arrow_schema)


def _arrow_value(value: object | None, column: ColumnDescriptor, row_index: int) -> object:
    if value is None and column.repetition == "required":
        raise FieldTypeMismatch(row_index, column.name, value, "required column is empty")
    if isinstance(value, (bytes, bytearray)) and column.logical_type == "UTF8":
        try:
            value = bytes(value).decode("utf-8")
        except UnicodeDecodeError as error:
            raise FieldTypeMismatch(
                row_index, column.name, value, "UTF8 column holds invalid bytes"
            ) from error
    if column.repetition == "repeated":
        return [] if value is None else [value]
    return value


def _value_normalizer(column: ColumnDescriptor) -> Callable[[Any], object | None]:
    """Build a reader-side normalizer producing transcoder value types."""

    def normalize_scalar(value: Any) -> object | None:
        if isinstance(value, str):
            return value.encode("utf-8")
        return value

    if column.repetition != "repeated":
        return normalize_scalar

    def normalize_repeated(value: Any) -> object | None:
        # Text rows carry only the first repetition.
        if not value:
            return None
        return normalize_scalar(value[0])

    return normalize_repeated
