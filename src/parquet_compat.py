"""Public surface for the Parquet compatibility suite.

This module provides a stable import path for library users.
It re-exports the matrix runner, conversions, and typed models.
"""

from __future__ import annotations

from core.config import CompatConfig
from core.errors import (
    ArtifactAlreadyExists,
    ArtifactNotFound,
    CompatError,
    FieldCountMismatch,
    FieldTypeMismatch,
    MalformedVersion,
    RowEncodingError,
    SchemaParseError,
)
from core.types import ArtifactRef, ColumnDescriptor, ComparisonResult, Record, Schema
from core.versioning import VersionId
from convert.columnar_codec import ParquetCodec, writer_options_for
from convert.conversion import convert_columnar_to_text, convert_text_to_columnar
from convert.record_transcoder import decode_row, encode_row
from convert.schema_parser import parse_schema
from store.artifact_locator import ArtifactLocator
from verify.compat_matrix import CompatibilityMatrixRunner
from verify.equivalence import compare_ordered, compare_text_artifacts, compare_unordered
from verify.matrix_report import render_matrix_report, save_matrix_report
from verify.matrix_types import MatrixReport, MatrixUnitResult

__all__ = [
    "ArtifactAlreadyExists",
    "ArtifactLocator",
    "ArtifactNotFound",
    "ArtifactRef",
    "ColumnDescriptor",
    "CompatConfig",
    "CompatError",
    "CompatibilityMatrixRunner",
    "ComparisonResult",
    "FieldCountMismatch",
    "FieldTypeMismatch",
    "MalformedVersion",
    "MatrixReport",
    "MatrixUnitResult",
    "ParquetCodec",
    "Record",
    "RowEncodingError",
    "Schema",
    "SchemaParseError",
    "VersionId",
    "compare_ordered",
    "compare_text_artifacts",
    "compare_unordered",
    "convert_columnar_to_text",
    "convert_text_to_columnar",
    "decode_row",
    "encode_row",
    "parse_schema",
    "render_matrix_report",
    "save_matrix_report",
    "writer_options_for",
]
