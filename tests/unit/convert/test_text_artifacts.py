"""Unit tests for streaming text artifact IO."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import ArtifactAlreadyExists, ArtifactNotFound, RowEncodingError
from convert.text_artifacts import iter_text_rows, write_text_rows


def test_write_then_iter_preserves_rows(tmp_path: Path) -> None:
    """Rows should be written one per line and read back without terminators."""
    path = tmp_path / "rows.csv"

    row_count = write_text_rows(path, iter(["a|1", "b|", " c |3 "]))

    assert row_count == 3 and list(iter_text_rows(path)) == ["a|1", "b|", " c |3 "]


def test_write_text_rows_refuses_existing_file(tmp_path: Path) -> None:
    """Existing outputs should never be overwritten."""
    path = tmp_path / "rows.csv"
    path.write_text("old\n", encoding="utf-8")

    with pytest.raises(ArtifactAlreadyExists):
        write_text_rows(path, ["new"])

    assert path.read_text(encoding="utf-8") == "old\n"


def test_iter_text_rows_reports_missing_file(tmp_path: Path) -> None:
    """Reading a missing artifact should raise a not-found error on first use."""
    rows = iter_text_rows(tmp_path / "missing.csv")

    with pytest.raises(ArtifactNotFound):
        next(rows)


def test_iter_text_rows_accepts_crlf_terminators(tmp_path: Path) -> None:
    """Windows line endings from other producers should be normalized."""
    path = tmp_path / "rows.csv"
    path.write_bytes(b"a|1\r\nb|2\r\n")

    assert list(iter_text_rows(path)) == ["a|1", "b|2"]


def test_iter_text_rows_reports_row_of_invalid_utf8(tmp_path: Path) -> None:
    """Undecodable bytes should fail with the index of the row holding them."""
    path = tmp_path / "rows.csv"
    path.write_bytes(b"1|a\n2|\xff\n")
    rows = iter_text_rows(path)
    first = next(rows)

    with pytest.raises(RowEncodingError) as error_info:
        next(rows)

    assert first == "1|a" and error_info.value.row_index == 1
