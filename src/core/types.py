"""Shared typed models.

This module defines immutable data models used by the schema codec,
record transcoder, artifact locator, and equivalence checker.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Literal

from core.versioning import VersionId

PrimitiveKind = Literal["BOOLEAN", "INT32", "INT64", "FLOAT", "DOUBLE", "BINARY"]
Repetition = Literal["required", "optional", "repeated"]
ArtifactRole = Literal["SOURCE_TEXT", "GENERATED_COLUMNAR", "GENERATED_TEXT"]

PRIMITIVE_KINDS: tuple[PrimitiveKind, ...] = (
    "BOOLEAN",
    "INT32",
    "INT64",
    "FLOAT",
    "DOUBLE",
    "BINARY",
)
FLOATING_KINDS: tuple[PrimitiveKind, ...] = ("FLOAT", "DOUBLE")


@dataclass(frozen=True)
class ColumnDescriptor:
    """One typed column of a flat schema.

    Attributes:
        name: Column name, unique within its schema.
        kind: Primitive physical type.
        ordinal: Zero-based position; defines field order in text rows.
        repetition: Field repetition from the schema description.
        logical_type: Optional annotation such as ``UTF8``.
    """

    name: str
    kind: PrimitiveKind
    ordinal: int
    repetition: Repetition = "optional"
    logical_type: str | None = None


@dataclass(frozen=True)
class Schema:
    """Ordered column list parsed once per dataset.

    Attributes:
        name: Message name from the schema description.
        columns: Columns where ``columns[i].ordinal == i``.
    """

    name: str
    columns: tuple[ColumnDescriptor, ...]

    def __len__(self) -> int:
        return len(self.columns)

    def __iter__(self) -> Iterator[ColumnDescriptor]:
        return iter(self.columns)

    @property
    def column_names(self) -> tuple[str, ...]:
        """Column names in ordinal order."""
        return tuple(column.name for column in self.columns)


@dataclass(frozen=True)
class Record:
    """One row of optional typed values aligned with schema ordinals.

    ``None`` marks an absent value. BINARY values are ``bytes``.
    """

    values: tuple[object | None, ...]

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, ordinal: int) -> object | None:
        return self.values[ordinal]

    def as_dict(self, schema: Schema) -> dict[str, object | None]:
        """Map column names to values for diagnostics and tests."""
        return dict(zip(schema.column_names, self.values))


@dataclass(frozen=True)
class DatasetRef:
    """A reference dataset backed by a text artifact and its schema.

    Attributes:
        name: Logical name, the file name up to its first dot.
        text_path: Reference delimited text file.
        schema_path: Sibling ``.schema`` description.
    """

    name: str
    text_path: Path
    schema_path: Path


@dataclass(frozen=True)
class ArtifactRef:
    """Resolved location of an existing or expected artifact.

    Attributes:
        path: File location.
        role: What the artifact holds.
        dataset: Dataset name it was resolved for.
        version: Release directory it lives under, if any.
        variant: Variant suffix embedded in the file name, if any.
    """

    path: Path
    role: ArtifactRole
    dataset: str
    version: VersionId | None = None
    variant: str | None = None

    @property
    def exists(self) -> bool:
        """Whether the artifact is present on disk."""
        return self.path.exists()


@dataclass(frozen=True)
class RowMismatch:
    """First diverging row between two sequences."""

    row_index: int
    expected: str
    actual: str


@dataclass(frozen=True)
class RowCountMismatch:
    """Row totals when one sequence ends before the other."""

    expected_count: int
    actual_count: int


@dataclass(frozen=True)
class ComparisonResult:
    """Outcome of one equivalence check.

    Attributes:
        matched_rows: Rows compared equal before any divergence.
        first_mismatch: First differing row, if any.
        row_count_mismatch: Row totals when lengths differ, if any.
    """

    matched_rows: int
    first_mismatch: RowMismatch | None = None
    row_count_mismatch: RowCountMismatch | None = None

    @property
    def passed(self) -> bool:
        """Whether both sequences were equivalent."""
        return self.first_mismatch is None and self.row_count_mismatch is None

    def describe(self) -> str:
        """Render a one-line human-readable summary."""
        if self.first_mismatch is not None:
            mismatch = self.first_mismatch
            return (
                f"row {mismatch.row_index} differs: "
                f"expected={mismatch.expected!r} actual={mismatch.actual!r}"
            )
        if self.row_count_mismatch is not None:
            counts = self.row_count_mismatch
            return (
                f"row count differs: expected={counts.expected_count} "
                f"actual={counts.actual_count}"
            )
        return f"matched_rows={self.matched_rows}"
