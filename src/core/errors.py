"""Compatibility suite exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Row-level errors always carry the failing row index and column name.
"""

from __future__ import annotations


class CompatError(Exception):
    """Base exception for all compatibility suite failures."""


class CompatConfigError(CompatError):
    """Raised for invalid runtime configuration."""


class MalformedVersion(CompatError):
    """Raised when a release identifier cannot be parsed."""


class SchemaParseError(CompatError):
    """Raised for malformed or unsupported schema descriptions."""


class RecordConversionError(CompatError):
    """Base class for row-level conversion failures."""

    def __init__(self, message: str, row_index: int | None) -> None:
        super().__init__(message)
        self.row_index = row_index


class FieldCountMismatch(RecordConversionError):
    """Raised when a text row has a different field count than the schema."""

    def __init__(self, row_index: int | None, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Row {_describe_row(row_index)} has {actual} fields but the schema "
            f"declares {expected} columns. Check the delimiter and the .schema file.",
            row_index,
        )


class FieldTypeMismatch(RecordConversionError):
    """Raised when one field value does not match its column type."""

    def __init__(
        self,
        row_index: int | None,
        column_name: str,
        raw_value: object,
        reason: str,
    ) -> None:
        self.column_name = column_name
        self.raw_value = raw_value
        self.reason = reason
        super().__init__(
            f"Row {_describe_row(row_index)}, column '{column_name}': "
            f"cannot convert {raw_value!r}: {reason}.",
            row_index,
        )


class RowEncodingError(RecordConversionError):
    """Raised when a text row is not valid UTF-8."""

    def __init__(self, row_index: int | None, reason: str) -> None:
        self.reason = reason
        super().__init__(
            f"Row {_describe_row(row_index)} is not valid UTF-8: {reason}. "
            "Re-export the file with UTF-8 encoding.",
            row_index,
        )


class ArtifactError(CompatError):
    """Base class for artifact resolution failures."""

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path


class ArtifactNotFound(ArtifactError):
    """Raised when a required artifact does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Artifact {path} does not exist.", path)


class ArtifactAlreadyExists(ArtifactError):
    """Raised instead of silently overwriting an existing artifact."""

    def __init__(self, path: str) -> None:
        super().__init__(
            f"Output artifact {path} already exists. Delete it before regenerating.",
            path,
        )


class ColumnarCodecError(CompatError):
    """Raised when the columnar library fails to read or write a file."""


class CompatVerificationError(CompatError):
    """Raised when a verification run cannot produce a report."""


def _describe_row(row_index: int | None) -> str:
    return "?" if row_index is None else str(row_index)
