"""Disk-backed external merge sort for text rows.

Input is cut into memory-bounded chunks, each chunk is sorted and spilled to a
scratch directory, and the spilled runs are k-way merged lazily. Scratch files
live in one temporary directory that is removed when the context exits,
whether the merge completed or failed.
"""

from __future__ import annotations

from contextlib import ExitStack, contextmanager
import heapq
from itertools import chain, islice
from pathlib import Path
import tempfile
from typing import Any, Iterable, Iterator

from core.constants import DEFAULT_SORT_CHUNK_ROWS, SORT_SCRATCH_PREFIX
from core.errors import CompatConfigError, CompatVerificationError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)
DEFAULT_MAX_FAN_IN = 64


@contextmanager
def externally_sorted(
    rows: Iterable[str],
    chunk_rows: int = DEFAULT_SORT_CHUNK_ROWS,
    scratch_dir: Path | None = None,
    max_fan_in: int = DEFAULT_MAX_FAN_IN,
    logger: Any | None = None,
) -> Iterator[Iterator[str]]:
    """Sort rows lexicographically without holding them all in memory.

    Args:
        rows: Single-line text rows in any order.
        chunk_rows: Maximum rows sorted in memory at once.
        scratch_dir: Parent for the temporary scratch directory.
        max_fan_in: Maximum runs merged (and files held open) at once.
        logger: Optional structured logger.

    Yields:
        Lazy iterator over all rows in ascending order. It is valid only
        inside the ``with`` block.

    Raises:
        CompatConfigError: If ``chunk_rows`` is below 1 or ``max_fan_in`` below 2.
        CompatVerificationError: If a row contains a line break.
    """
    if chunk_rows < 1:
        raise CompatConfigError(f"Sort chunk size must be at least 1, got {chunk_rows}.")
    if max_fan_in < 2:
        raise CompatConfigError(f"Sort merge fan-in must be at least 2, got {max_fan_in}.")
    log = logger or _LOGGER
    row_iter = iter(rows)
    # One row past the chunk tells whether the input fits in memory.
    first_chunk = list(islice(row_iter, chunk_rows + 1))
    if len(first_chunk) <= chunk_rows:
        yield iter(sorted(first_chunk))
        return
    row_iter = chain([first_chunk.pop()], row_iter)
    first_chunk.sort()
    with tempfile.TemporaryDirectory(prefix=SORT_SCRATCH_PREFIX, dir=scratch_dir) as scratch:
        scratch_root = Path(scratch)
        runs = [_spill(first_chunk, scratch_root, 0)]
        del first_chunk
        while True:
            chunk = sorted(islice(row_iter, chunk_rows))
            if not chunk:
                break
            runs.append(_spill(chunk, scratch_root, len(runs)))
        log.debug("external_sort_spilled", runs=len(runs), scratch_dir=str(scratch_root))
        runs = _reduce_runs(runs, scratch_root, max_fan_in)
        with ExitStack() as stack:
            readers = [_read_run(stack, run) for run in runs]
            yield heapq.merge(*readers)


def _spill(chunk: list[str], scratch_root: Path, run_index: int) -> Path:
    run_path = scratch_root / f"run-{run_index:06d}.txt"
    with run_path.open("w", encoding="utf-8", newline="\n") as handle:
        for row in chunk:
            if "\n" in row or "\r" in row:
                raise CompatVerificationError(
                    f"Cannot sort row containing a line break: {row[:80]!r}."
                )
            handle.write(row)
            handle.write("\n")
    return run_path


def _reduce_runs(runs: list[Path], scratch_root: Path, max_fan_in: int) -> list[Path]:
    """Merge runs in groups until at most ``max_fan_in`` remain."""
    merge_index = 0
    while len(runs) > max_fan_in:
        merged: list[Path] = []
        for start in range(0, len(runs), max_fan_in):
            group = runs[start:start + max_fan_in]
            target = scratch_root / f"merge-{merge_index:06d}.txt"
            merge_index += 1
            with ExitStack() as stack, target.open("w", encoding="utf-8", newline="\n") as out:
                for row in heapq.merge(*(_read_run(stack, run) for run in group)):
                    out.write(row)
                    out.write("\n")
            for run in group:
                run.unlink()
            merged.append(target)
        runs = merged
    return runs


def _read_run(stack: ExitStack, run_path: Path) -> Iterator[str]:
    handle = stack.enter_context(run_path.open("r", encoding="utf-8", newline="\n"))
    return (line[:-1] for line in handle)
