"""Row sequence equivalence checks.

Ordered comparison walks both sequences in lockstep and stops at the first
divergence. Unordered comparison externally sorts both sides first, so it
treats the sequences as multisets of rows.
"""

from __future__ import annotations

from contextlib import ExitStack
from itertools import zip_longest
from pathlib import Path
from typing import Iterable, Iterator

from core.constants import DEFAULT_SORT_CHUNK_ROWS
from core.types import ComparisonResult, RowCountMismatch, RowMismatch
from convert.text_artifacts import iter_text_rows
from verify.external_sort import externally_sorted

_END = object()


def compare_ordered(expected_rows: Iterable[str], actual_rows: Iterable[str]) -> ComparisonResult:
    """Compare two row sequences position by position.

    Args:
        expected_rows: Reference rows.
        actual_rows: Rows under test.

    Returns:
        Result with the first mismatching row, or row totals when one
        sequence ends early.
    """
    expected_iter: Iterator[str] = iter(expected_rows)
    actual_iter: Iterator[str] = iter(actual_rows)
    matched_rows = 0
    for expected, actual in zip_longest(expected_iter, actual_iter, fillvalue=_END):
        if expected is _END or actual is _END:
            expected_count = matched_rows + (0 if expected is _END else 1 + _count(expected_iter))
            actual_count = matched_rows + (0 if actual is _END else 1 + _count(actual_iter))
            return ComparisonResult(
                matched_rows=matched_rows,
                row_count_mismatch=RowCountMismatch(
                    expected_count=expected_count,
                    actual_count=actual_count,
                ),
            )
        if expected != actual:
            return ComparisonResult(
                matched_rows=matched_rows,
                first_mismatch=RowMismatch(
                    row_index=matched_rows,
                    expected=str(expected),
                    actual=str(actual),
                ),
            )
        matched_rows += 1
    return ComparisonResult(matched_rows=matched_rows)


def compare_unordered(
    expected_rows: Iterable[str],
    actual_rows: Iterable[str],
    chunk_rows: int = DEFAULT_SORT_CHUNK_ROWS,
    scratch_dir: Path | None = None,
) -> ComparisonResult:
    """Compare two row sequences ignoring order.

    Both sides are sorted by full row text through a disk-backed external
    sort before the ordered comparison, so mismatch indices refer to
    sorted order.
    """
    with ExitStack() as stack:
        sorted_expected = stack.enter_context(
            externally_sorted(expected_rows, chunk_rows, scratch_dir)
        )
        sorted_actual = stack.enter_context(externally_sorted(actual_rows, chunk_rows, scratch_dir))
        return compare_ordered(sorted_expected, sorted_actual)


def compare_text_artifacts(
    expected_path: Path,
    actual_path: Path,
    order_matters: bool = True,
    chunk_rows: int = DEFAULT_SORT_CHUNK_ROWS,
    scratch_dir: Path | None = None,
) -> ComparisonResult:
    """Compare two text artifacts row by row.

    Raises:
        ArtifactNotFound: If either file does not exist.
    """
    expected_rows = iter_text_rows(expected_path)
    actual_rows = iter_text_rows(actual_path)
    if order_matters:
        return compare_ordered(expected_rows, actual_rows)
    return compare_unordered(expected_rows, actual_rows, chunk_rows, scratch_dir)


def _count(rows: Iterator[str]) -> int:
    return sum(1 for _ in rows)
