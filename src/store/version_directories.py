"""Release directory listing.

This module turns a directory of ``<prefix><version>`` children into a lazy
sequence of structured entries, keeping name-pattern logic out of path
resolution.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator

from core.errors import MalformedVersion
from core.logging_config import get_logger
from core.versioning import VersionId

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class VersionDirectory:
    """One release directory and its parsed identifier."""

    name: str
    path: Path
    version: VersionId


def iter_version_directories(
    base_dir: Path,
    prefix: str = "",
    logger: Any | None = None,
) -> Iterator[VersionDirectory]:
    """Yield child directories whose names carry a release identifier.

    Hidden entries, plain files, and names without ``prefix`` are ignored.
    Names whose suffix is not a valid identifier are skipped with a warning.

    Args:
        base_dir: Directory to list; a missing directory yields nothing.
        prefix: Required name prefix before the identifier.
        logger: Optional structured logger.
    """
    log = logger or _LOGGER
    if not base_dir.is_dir():
        log.warning("version_root_missing", base_dir=str(base_dir))
        return
    for entry in base_dir.iterdir():
        name = entry.name
        if name.startswith(".") or not name.startswith(prefix) or not entry.is_dir():
            continue
        try:
            version = VersionId.parse(name[len(prefix):])
        except MalformedVersion as error:
            log.warning("version_directory_skipped", directory=str(entry), reason=str(error))
            continue
        yield VersionDirectory(name=name, path=entry, version=version)
