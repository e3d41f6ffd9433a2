"""Typed conversion between delimited text rows and records.

Decoding splits one text row on a literal delimiter and parses each field by
its column kind. Encoding renders a record back to text, stripping a trailing
".0" from floating values so output matches producers that omit it.
Both directions are pure per-row functions; the streaming helpers only add the
row index used in error messages.
"""

from __future__ import annotations

import math
import re
from typing import Iterable, Iterator

import numpy as np

from core.constants import DEFAULT_DELIMITER
from core.errors import FieldCountMismatch, FieldTypeMismatch
from core.types import FLOATING_KINDS, ColumnDescriptor, Record, Schema

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
_INTEGER_BOUNDS = {
    "INT32": (-(2**31), 2**31 - 1),
    "INT64": (-(2**63), 2**63 - 1),
}
_SPECIAL_FLOAT_TEXT = {"nan": "NaN", "inf": "Infinity", "-inf": "-Infinity"}
_LINE_BREAKS = ("\n", "\r")


def decode_row(
    line: str,
    schema: Schema,
    delimiter: str = DEFAULT_DELIMITER,
    row_index: int | None = None,
) -> Record:
    """Parse one delimited text row into a typed record.

    Args:
        line: Row text without its line terminator.
        schema: Column layout of the dataset.
        delimiter: Literal single-character column separator.
        row_index: Row position used only in error messages.

    Returns:
        Record with one value per column; empty fields become ``None``.

    Raises:
        FieldCountMismatch: If the row does not split into ``len(schema)`` fields.
        FieldTypeMismatch: If a field does not parse as its column kind.
    """
    fields = line.split(delimiter)
    if len(fields) != len(schema):
        raise FieldCountMismatch(row_index, expected=len(schema), actual=len(fields))
    return Record(
        values=tuple(
            parse_field(raw_value, column, row_index)
            for raw_value, column in zip(fields, schema.columns)
        )
    )


def encode_row(
    record: Record,
    schema: Schema,
    delimiter: str = DEFAULT_DELIMITER,
    row_index: int | None = None,
) -> str:
    """Render one record as a delimited text row.

    Args:
        record: Values aligned with schema ordinals.
        schema: Column layout of the dataset.
        delimiter: Literal single-character column separator.
        row_index: Row position used only in error messages.

    Returns:
        Row text without a line terminator.

    Raises:
        FieldCountMismatch: If the record width differs from the schema.
        FieldTypeMismatch: If a value cannot be rendered for its column.
    """
    if len(record) != len(schema):
        raise FieldCountMismatch(row_index, expected=len(schema), actual=len(record))
    rendered: list[str] = []
    for value, column in zip(record.values, schema.columns):
        text = format_value(value, column, row_index)
        if delimiter in text or any(mark in text for mark in _LINE_BREAKS):
            raise FieldTypeMismatch(
                row_index,
                column.name,
                value,
                "value contains the delimiter or a line break",
            )
        rendered.append(text)
    return delimiter.join(rendered)


def decode_rows(
    lines: Iterable[str],
    schema: Schema,
    delimiter: str = DEFAULT_DELIMITER,
) -> Iterator[Record]:
    """Lazily decode text rows, tagging errors with their zero-based index."""
    for row_index, line in enumerate(lines):
        yield decode_row(line, schema, delimiter, row_index)


def encode_records(
    records: Iterable[Record],
    schema: Schema,
    delimiter: str = DEFAULT_DELIMITER,
) -> Iterator[str]:
    """Lazily encode records, tagging errors with their zero-based index."""
    for row_index, record in enumerate(records):
        yield encode_row(record, schema, delimiter, row_index)


def parse_field(
    raw_value: str,
    column: ColumnDescriptor,
    row_index: int | None = None,
) -> object | None:
    """Parse one text field according to its column kind.

    Raises:
        FieldTypeMismatch: If the text is not a valid value of the column kind.
    """
    if raw_value == "":
        if column.repetition == "required":
            raise FieldTypeMismatch(row_index, column.name, raw_value, "required column is empty")
        return None
    kind = column.kind
    if kind == "BOOLEAN":
        lowered = raw_value.lower()
        if lowered not in ("true", "false"):
            raise FieldTypeMismatch(row_index, column.name, raw_value, "expected true or false")
        return lowered == "true"
    if kind in _INTEGER_BOUNDS:
        return _parse_integer(raw_value, column, row_index)
    if kind in FLOATING_KINDS:
        return _parse_floating(raw_value, column, row_index)
    return raw_value.encode("utf-8")


def format_value(
    value: object | None,
    column: ColumnDescriptor,
    row_index: int | None = None,
) -> str:
    """Render one typed value in canonical text form.

    Raises:
        FieldTypeMismatch: If the value type does not match the column kind.
    """
    if value is None:
        return ""
    kind = column.kind
    if kind == "BOOLEAN":
        if not isinstance(value, bool):
            raise FieldTypeMismatch(row_index, column.name, value, "expected a boolean")
        return "true" if value else "false"
    if kind in _INTEGER_BOUNDS:
        if isinstance(value, bool) or not isinstance(value, int):
            raise FieldTypeMismatch(row_index, column.name, value, f"expected an {kind} integer")
        return str(value)
    if kind in FLOATING_KINDS:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise FieldTypeMismatch(row_index, column.name, value, f"expected a {kind} number")
        return _strip_point_zero(_floating_text(float(value), kind))
    if isinstance(value, str):
        return value
    if not isinstance(value, (bytes, bytearray)):
        raise FieldTypeMismatch(row_index, column.name, value, "expected bytes")
    try:
        return bytes(value).decode("utf-8")
    except UnicodeDecodeError as error:
        raise FieldTypeMismatch(
            row_index, column.name, value, f"not valid UTF-8 ({error.reason})"
        ) from error


def _parse_integer(raw_value: str, column: ColumnDescriptor, row_index: int | None) -> int:
    if not _INTEGER_PATTERN.fullmatch(raw_value):
        raise FieldTypeMismatch(
            row_index, column.name, raw_value, f"expected an {column.kind} integer"
        )
    value = int(raw_value)
    lower, upper = _INTEGER_BOUNDS[column.kind]
    if not lower <= value <= upper:
        raise FieldTypeMismatch(row_index, column.name, raw_value, f"out of {column.kind} range")
    return value


def _parse_floating(raw_value: str, column: ColumnDescriptor, row_index: int | None) -> float:
    reason = f"expected a {column.kind} number"
    if "_" in raw_value or raw_value != raw_value.strip():
        raise FieldTypeMismatch(row_index, column.name, raw_value, reason)
    try:
        value = float(raw_value)
    except ValueError as error:
        raise FieldTypeMismatch(row_index, column.name, raw_value, reason) from error
    if column.kind == "DOUBLE":
        return value
    with np.errstate(over="ignore"):
        narrowed = float(np.float32(value))
    if math.isinf(narrowed) and not math.isinf(value):
        raise FieldTypeMismatch(row_index, column.name, raw_value, "out of FLOAT range")
    return narrowed


def _floating_text(value: float, kind: str) -> str:
    if math.isnan(value) or math.isinf(value):
        return _SPECIAL_FLOAT_TEXT[repr(value)]
    if kind == "FLOAT":
        return str(np.float32(value))
    return repr(value)


def _strip_point_zero(text: str) -> str:
    if text.endswith(".0"):
        return text[:-2]
    return text
