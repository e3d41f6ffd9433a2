"""Streaming access to delimited text artifacts.

Rows are read and written one at a time so datasets of any size run
in a bounded working set.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator

from core.errors import ArtifactAlreadyExists, ArtifactNotFound, RowEncodingError


def iter_text_rows(text_path: Path) -> Iterator[str]:
    """Yield rows of a UTF-8 text artifact without line terminators.

    Lines are decoded one at a time so a bad byte is reported with the
    index of the row that holds it. ``\\r\\n`` terminators are accepted.

    Raises:
        ArtifactNotFound: If the file does not exist.
        RowEncodingError: If a row is not valid UTF-8.
    """
    try:
        handle = text_path.open("rb")
    except FileNotFoundError as error:
        raise ArtifactNotFound(str(text_path)) from error
    with handle:
        for row_index, raw_line in enumerate(handle):
            try:
                line = raw_line.decode("utf-8")
            except UnicodeDecodeError as error:
                raise RowEncodingError(row_index, error.reason) from error
            if line.endswith("\n"):
                line = line[:-1]
            if line.endswith("\r"):
                line = line[:-1]
            yield line


def write_text_rows(text_path: Path, rows: Iterable[str]) -> int:
    """Write rows to a new text artifact, one ``\\n``-terminated line each.

    Args:
        text_path: Output path; must not exist yet.
        rows: Row text without terminators.

    Returns:
        Number of rows written.

    Raises:
        ArtifactAlreadyExists: If the output path already exists.
    """
    try:
        handle = text_path.open("x", encoding="utf-8", newline="\n")
    except FileExistsError as error:
        raise ArtifactAlreadyExists(str(text_path)) from error
    row_count = 0
    with handle:
        for row in rows:
            handle.write(row)
            handle.write("\n")
            row_count += 1
    return row_count
