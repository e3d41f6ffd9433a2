"""Unit tests for file-level text and Parquet conversions."""

from __future__ import annotations

from pathlib import Path

import pytest
from structlog.testing import capture_logs

from core.errors import (
    ArtifactAlreadyExists,
    FieldTypeMismatch,
    RecordConversionError,
    SchemaParseError,
)
from convert.columnar_codec import ParquetCodec, writer_options_for
from convert.conversion import convert_columnar_to_text, convert_text_to_columnar
from convert.text_artifacts import iter_text_rows

_SCHEMA = """message widgets {
  required int32 id;
  optional double price;
  optional binary name (UTF8);
}
"""


def _write_dataset(directory: Path, rows: list[str]) -> Path:
    text_path = directory / "widgets.csv"
    text_path.write_text("".join(f"{row}\n" for row in rows), encoding="utf-8")
    (directory / "widgets.schema").write_text(_SCHEMA, encoding="utf-8")
    return text_path


def test_text_columnar_text_round_trip(tmp_path: Path) -> None:
    """Text should survive conversion through Parquet, normalized."""
    text_path = _write_dataset(tmp_path, ["7|12.0|widget", "8||", "9|0.5|gadget"])
    columnar_path = tmp_path / "widgets.dict.parquet"
    output_path = tmp_path / "widgets.out.csv"
    codec = ParquetCodec(batch_rows=2)

    convert_text_to_columnar(text_path, columnar_path, codec, writer_options_for("dict"))
    row_count = convert_columnar_to_text(columnar_path, output_path, codec)

    assert row_count == 3 and list(iter_text_rows(output_path)) == [
        "7|12|widget",
        "8||",
        "9|0.5|gadget",
    ]


def test_failed_conversion_removes_partial_output(tmp_path: Path) -> None:
    """A bad row should abort the conversion and delete the output."""
    rows = [f"{index}|1.5|ok" for index in range(10)] + ["10|not-a-number|bad"]
    text_path = _write_dataset(tmp_path, rows)
    columnar_path = tmp_path / "widgets.parquet"

    with pytest.raises(FieldTypeMismatch):
        convert_text_to_columnar(text_path, columnar_path, ParquetCodec(batch_rows=4))

    assert not columnar_path.exists()


def test_failed_conversion_logs_row_index(tmp_path: Path) -> None:
    """Conversion failures should be logged with the failing row index."""
    text_path = _write_dataset(tmp_path, ["1|1.5|a", "2|x|b"])

    with capture_logs() as logs, pytest.raises(FieldTypeMismatch):
        convert_text_to_columnar(text_path, tmp_path / "widgets.parquet", ParquetCodec())

    failures = [entry for entry in logs if entry["event"] == "conversion_failed"]
    assert failures[0]["row_index"] == 1


def test_conversion_refuses_existing_output(tmp_path: Path) -> None:
    """Existing outputs should be left untouched."""
    text_path = _write_dataset(tmp_path, ["1|1.5|a"])
    columnar_path = tmp_path / "widgets.parquet"
    columnar_path.write_bytes(b"keep me")

    with pytest.raises(ArtifactAlreadyExists):
        convert_text_to_columnar(text_path, columnar_path, ParquetCodec())

    assert columnar_path.read_bytes() == b"keep me"


def test_missing_schema_is_fatal(tmp_path: Path) -> None:
    """A text artifact without a sibling schema should not convert."""
    text_path = tmp_path / "orphan.csv"
    text_path.write_text("1|2\n", encoding="utf-8")

    with pytest.raises(SchemaParseError):
        convert_text_to_columnar(text_path, tmp_path / "orphan.parquet", ParquetCodec())


def test_invalid_utf8_fails_with_row_index(tmp_path: Path) -> None:
    """A row with undecodable bytes should abort with its row index logged."""
    text_path = _write_dataset(tmp_path, [])
    text_path.write_bytes(b"1|1.5|a\n2|2.5|\xff\n")
    columnar_path = tmp_path / "widgets.parquet"

    with capture_logs() as logs, pytest.raises(RecordConversionError):
        convert_text_to_columnar(text_path, columnar_path, ParquetCodec())

    failures = [entry for entry in logs if entry["event"] == "conversion_failed"]
    assert failures[0]["row_index"] == 1 and not columnar_path.exists()
