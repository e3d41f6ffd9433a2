"""Artifact discovery and path resolution.

This module finds reference datasets, lists comparable release directories,
and builds canonical ``dataset[.variant].ext`` artifact paths. Output
artifacts are never overwritten implicitly.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from core.constants import COLUMNAR_SUFFIX, TEXT_SUFFIX, VERSION_DIR_PREFIX
from core.errors import ArtifactAlreadyExists, ArtifactNotFound
from core.logging_config import get_logger
from core.types import ArtifactRef, ArtifactRole, DatasetRef
from core.versioning import VersionId
from convert.schema_parser import schema_path_for
from store.version_directories import iter_version_directories

_LOGGER = get_logger(__name__)


class ArtifactLocator:
    """Naming-convention based artifact resolver.

    Release directories are named ``<version_prefix><version>`` under a base
    directory; artifacts inside are named ``<dataset>[.<variant>]<suffix>``.
    """

    def __init__(
        self,
        version_prefix: str = VERSION_DIR_PREFIX,
        text_suffix: str = TEXT_SUFFIX,
        columnar_suffix: str = COLUMNAR_SUFFIX,
        logger: Any | None = None,
    ) -> None:
        self._version_prefix = version_prefix
        self._suffixes: dict[ArtifactRole, str] = {
            "SOURCE_TEXT": text_suffix,
            "GENERATED_TEXT": text_suffix,
            "GENERATED_COLUMNAR": columnar_suffix,
        }
        self._logger = logger or _LOGGER

    def resolve_datasets(self, base_dir: Path) -> list[DatasetRef]:
        """List reference datasets stored as text artifacts in ``base_dir``.

        Returns:
            Datasets sorted by name; the name is the file name up to its first dot.

        Raises:
            ArtifactNotFound: If ``base_dir`` is not a directory.
        """
        if not base_dir.is_dir():
            raise ArtifactNotFound(str(base_dir))
        text_suffix = self._suffixes["SOURCE_TEXT"]
        datasets = [
            DatasetRef(
                name=entry.name.split(".", 1)[0],
                text_path=entry,
                schema_path=schema_path_for(entry),
            )
            for entry in base_dir.iterdir()
            if entry.is_file() and entry.name.endswith(text_suffix)
        ]
        return sorted(datasets, key=lambda dataset: dataset.name)

    def discover_prior_versions(
        self,
        base_dir: Path,
        current_version: VersionId,
    ) -> list[VersionId]:
        """Return release directories strictly older than ``current_version``.

        Returns:
            Identifiers sorted ascending by full version order.
        """
        versions = [
            entry.version
            for entry in iter_version_directories(base_dir, self._version_prefix, self._logger)
            if entry.version.compare_full(current_version) < 0
        ]
        return sorted(versions)

    def discover_external_versions(
        self,
        base_dir: Path,
        current_version: VersionId,
    ) -> list[VersionId]:
        """Return external producer directories on the current major.minor line.

        External directories are named by bare identifier without a prefix.
        """
        versions = [
            entry.version
            for entry in iter_version_directories(base_dir, "", self._logger)
            if entry.version.compare_major_minor(current_version) == 0
        ]
        return sorted(versions)

    def resolve_artifact(
        self,
        base_dir: Path,
        dataset: str,
        version: VersionId | None,
        variant: str | None,
        role: ArtifactRole,
        must_exist: bool,
        version_prefix: str | None = None,
    ) -> ArtifactRef:
        """Resolve the canonical path of a stored artifact.

        Args:
            base_dir: Root holding release directories (or the artifact itself).
            dataset: Dataset name.
            version: Release directory to look in; ``None`` for ``base_dir`` itself.
            variant: Optional variant suffix placed before the extension.
            role: Artifact role, which selects the extension.
            must_exist: Fail instead of warning when the file is absent.
            version_prefix: Override of the release directory name prefix.

        Returns:
            Reference to the artifact, which may not exist when ``must_exist``
            is false.

        Raises:
            ArtifactNotFound: If ``must_exist`` and the file is absent.
        """
        ref = self._build_ref(base_dir, dataset, version, variant, role, version_prefix)
        if not ref.exists:
            if must_exist:
                raise ArtifactNotFound(str(ref.path))
            self._logger.warning(
                "artifact_missing",
                path=str(ref.path),
                dataset=dataset,
                version=str(version) if version else None,
                variant=variant,
            )
        return ref

    def resolve_output(
        self,
        base_dir: Path,
        dataset: str,
        version: VersionId | None,
        variant: str | None,
        role: ArtifactRole,
        replace_existing: bool = False,
        version_prefix: str | None = None,
    ) -> ArtifactRef:
        """Resolve an output artifact and create its parent directory.

        Args:
            replace_existing: Delete an existing file explicitly instead of failing.
            version_prefix: Override of the release directory name prefix.

        Raises:
            ArtifactAlreadyExists: If the file exists and ``replace_existing`` is false.
        """
        ref = self._build_ref(base_dir, dataset, version, variant, role, version_prefix)
        ref.path.parent.mkdir(parents=True, exist_ok=True)
        if ref.exists:
            if not replace_existing:
                raise ArtifactAlreadyExists(str(ref.path))
            self.discard(ref)
        return ref

    def discard(self, ref: ArtifactRef) -> None:
        """Delete an artifact so it can be regenerated."""
        if ref.exists:
            ref.path.unlink()
            self._logger.info("artifact_discarded", path=str(ref.path))

    def _build_ref(
        self,
        base_dir: Path,
        dataset: str,
        version: VersionId | None,
        variant: str | None,
        role: ArtifactRole,
        version_prefix: str | None,
    ) -> ArtifactRef:
        directory = base_dir
        if version is not None:
            prefix = self._version_prefix if version_prefix is None else version_prefix
            directory = base_dir / f"{prefix}{version.text or version}"
        file_name = dataset + (f".{variant}" if variant else "") + self._suffixes[role]
        return ArtifactRef(
            path=directory / file_name,
            role=role,
            dataset=dataset,
            version=version,
            variant=variant,
        )
