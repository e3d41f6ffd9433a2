"""Unit tests for the disk-backed external merge sort."""

from __future__ import annotations

from pathlib import Path
import random

import pytest

from core.errors import CompatConfigError, CompatVerificationError
from verify.external_sort import externally_sorted


def _scratch_entries(scratch_dir: Path) -> list[Path]:
    return list(scratch_dir.iterdir())


def test_small_input_sorts_in_memory(tmp_path: Path) -> None:
    """Inputs below one chunk should not touch scratch storage."""
    with externally_sorted(["b", "a", "c"], chunk_rows=10, scratch_dir=tmp_path) as rows:
        result = list(rows)
        spilled = _scratch_entries(tmp_path)

    assert result == ["a", "b", "c"] and spilled == []


def test_large_input_spills_and_merges(tmp_path: Path) -> None:
    """Inputs spanning many chunks should merge into one sorted sequence."""
    rows = [f"{value:05d}|row" for value in range(500)]
    shuffled = rows[:]
    random.Random(7).shuffle(shuffled)

    with externally_sorted(shuffled, chunk_rows=16, scratch_dir=tmp_path, max_fan_in=4) as merged:
        result = list(merged)

    assert result == rows


def test_duplicates_are_kept(tmp_path: Path) -> None:
    """Sorting should preserve multiplicity."""
    with externally_sorted(["b", "a", "b", "a", "b"], chunk_rows=2, scratch_dir=tmp_path) as rows:
        result = list(rows)

    assert result == ["a", "a", "b", "b", "b"]


def test_scratch_directory_removed_after_merge(tmp_path: Path) -> None:
    """Scratch files should be gone once the context exits."""
    with externally_sorted([str(value) for value in range(20)], 3, tmp_path) as rows:
        during = len(_scratch_entries(tmp_path))
        list(rows)

    assert during == 1 and _scratch_entries(tmp_path) == []


def test_scratch_directory_removed_on_failure(tmp_path: Path) -> None:
    """Scratch files should be gone when the consumer fails mid-merge."""
    with pytest.raises(RuntimeError):
        with externally_sorted([str(value) for value in range(20)], 3, tmp_path) as rows:
            next(rows)
            raise RuntimeError("consumer failed")

    assert _scratch_entries(tmp_path) == []


def test_rows_with_line_breaks_are_rejected(tmp_path: Path) -> None:
    """Rows that cannot be spilled one per line should fail and clean up."""
    rows = ["a", "b\nc", "d", "e"]

    with pytest.raises(CompatVerificationError):
        with externally_sorted(rows, chunk_rows=2, scratch_dir=tmp_path) as merged:
            list(merged)

    assert _scratch_entries(tmp_path) == []


def test_input_of_exactly_one_chunk_stays_in_memory(tmp_path: Path) -> None:
    """An input that fills one chunk exactly should not spill."""
    with externally_sorted(["c", "a", "b"], chunk_rows=3, scratch_dir=tmp_path) as rows:
        result = list(rows)
        spilled = _scratch_entries(tmp_path)

    assert result == ["a", "b", "c"] and spilled == []


def test_non_positive_chunk_size_is_rejected(tmp_path: Path) -> None:
    """A chunk size below one should fail instead of sorting nothing."""
    with pytest.raises(CompatConfigError):
        with externally_sorted(["b", "a"], chunk_rows=0, scratch_dir=tmp_path) as rows:
            list(rows)


def test_fan_in_below_two_is_rejected(tmp_path: Path) -> None:
    """A merge fan-in that cannot reduce runs should fail up front."""
    with pytest.raises(CompatConfigError):
        with externally_sorted(["b", "a"], chunk_rows=1, scratch_dir=tmp_path, max_fan_in=1):
            pass
