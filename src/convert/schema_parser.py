"""Schema description parsing.

This module parses Parquet message-type descriptions such as::

    message customer {
      required int32 c_custkey;
      optional binary c_name (UTF8);
      optional double c_acctbal;
    }

into an ordered flat ``Schema``. Nested groups and primitive types without a
text rendering (int96, fixed_len_byte_array) are rejected.
"""

from __future__ import annotations

from pathlib import Path
import re
from typing import cast

from core.constants import SCHEMA_SUFFIX
from core.errors import SchemaParseError
from core.types import ColumnDescriptor, PrimitiveKind, Repetition, Schema

_TOKEN_PATTERN = re.compile(r"[{}();=]|[^\s{}();=]+")
_PUNCTUATION = frozenset("{}();=")
_REPETITIONS = ("required", "optional", "repeated")
_PRIMITIVE_TYPES: dict[str, PrimitiveKind] = {
    "boolean": "BOOLEAN",
    "int32": "INT32",
    "int64": "INT64",
    "float": "FLOAT",
    "double": "DOUBLE",
    "binary": "BINARY",
}
_UNSUPPORTED_TYPES = ("int96", "fixed_len_byte_array")


def parse_schema(text: str) -> Schema:
    """Parse a message-type description into an ordered schema.

    Args:
        text: Schema description text.

    Returns:
        Flat schema with ordinals matching declaration order.

    Raises:
        SchemaParseError: If the description is malformed or unsupported.
    """
    tokens = _TokenStream(_TOKEN_PATTERN.findall(text))
    tokens.expect_keyword("message")
    message_name = tokens.next_name("message name")
    tokens.expect("{")
    columns: list[ColumnDescriptor] = []
    seen_names: set[str] = set()
    while tokens.peek() != "}":
        column = _parse_field(tokens, ordinal=len(columns))
        if column.name in seen_names:
            raise SchemaParseError(
                f"Duplicate column '{column.name}' in message '{message_name}'."
            )
        seen_names.add(column.name)
        columns.append(column)
    tokens.expect("}")
    if tokens.peek() is not None:
        raise SchemaParseError(
            f"Unexpected trailing token '{tokens.peek()}' after message '{message_name}'."
        )
    if not columns:
        raise SchemaParseError(f"Message '{message_name}' declares no columns.")
    return Schema(name=message_name, columns=tuple(columns))


def read_schema_file(schema_path: Path) -> Schema:
    """Read and parse a schema description file.

    Raises:
        SchemaParseError: If the file is unreadable or malformed.
    """
    try:
        text = schema_path.read_text(encoding="utf-8")
    except OSError as error:
        raise SchemaParseError(
            f"Failed to read schema at {schema_path}: {error}. "
            f"Every text artifact needs a sibling {SCHEMA_SUFFIX} file."
        ) from error
    try:
        return parse_schema(text)
    except SchemaParseError as error:
        raise SchemaParseError(f"Invalid schema at {schema_path}: {error}") from error


def schema_path_for(text_path: Path) -> Path:
    """Return the sibling schema file path for a text artifact."""
    return text_path.with_suffix(SCHEMA_SUFFIX)


def render_schema(schema: Schema) -> str:
    """Render a schema back into message-type text."""
    lines = [f"message {schema.name} {{"]
    for column in schema.columns:
        primitive = column.kind.lower()
        annotation = f" ({column.logical_type})" if column.logical_type else ""
        lines.append(f"  {column.repetition} {primitive} {column.name}{annotation};")
    lines.append("}")
    return "\n".join(lines) + "\n"


def _parse_field(tokens: "_TokenStream", ordinal: int) -> ColumnDescriptor:
    repetition = tokens.next_name("field repetition").lower()
    if repetition not in _REPETITIONS:
        raise SchemaParseError(
            f"Expected one of {', '.join(_REPETITIONS)} but found '{repetition}'."
        )
    type_name = tokens.next_name("field type").lower()
    if type_name == "group":
        raise SchemaParseError(
            "Nested groups are not supported; text rows require a flat schema."
        )
    if type_name in _UNSUPPORTED_TYPES:
        raise SchemaParseError(f"Primitive type '{type_name}' has no text representation.")
    if type_name not in _PRIMITIVE_TYPES:
        raise SchemaParseError(f"Unknown primitive type '{type_name}'.")
    name = tokens.next_name("field name")
    logical_type: str | None = None
    if tokens.peek() == "(":
        tokens.expect("(")
        logical_type = tokens.next_name("logical type annotation").upper()
        tokens.expect(")")
    if tokens.peek() == "=":
        tokens.expect("=")
        field_id = tokens.next_name("field id")
        if not field_id.isdigit():
            raise SchemaParseError(f"Field id for '{name}' must be numeric, got '{field_id}'.")
    tokens.expect(";")
    return ColumnDescriptor(
        name=name,
        kind=_PRIMITIVE_TYPES[type_name],
        ordinal=ordinal,
        repetition=cast(Repetition, repetition),
        logical_type=logical_type,
    )


class _TokenStream:
    """Cursor over schema tokens with grammar-aware error messages."""

    def __init__(self, tokens: list[str]) -> None:
        self._tokens = tokens
        self._position = 0

    def peek(self) -> str | None:
        if self._position >= len(self._tokens):
            return None
        return self._tokens[self._position]

    def next(self, expected: str) -> str:
        token = self.peek()
        if token is None:
            raise SchemaParseError(f"Unexpected end of schema while reading {expected}.")
        self._position += 1
        return token

    def next_name(self, expected: str) -> str:
        token = self.next(expected)
        if token in _PUNCTUATION:
            raise SchemaParseError(f"Expected {expected} but found '{token}'.")
        return token

    def expect(self, literal: str) -> None:
        token = self.next(f"'{literal}'")
        if token != literal:
            raise SchemaParseError(f"Expected '{literal}' but found '{token}'.")

    def expect_keyword(self, keyword: str) -> None:
        token = self.next(f"'{keyword}'")
        if token.lower() != keyword:
            raise SchemaParseError(f"Expected '{keyword}' but found '{token}'.")
