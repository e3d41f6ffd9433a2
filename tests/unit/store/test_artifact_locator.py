"""Unit tests for artifact discovery and path resolution."""

from __future__ import annotations

from pathlib import Path

import pytest
from structlog.testing import capture_logs

from core.errors import ArtifactAlreadyExists, ArtifactNotFound
from core.versioning import VersionId
from store.artifact_locator import ArtifactLocator


def _make_version_dirs(base_dir: Path, names: list[str]) -> None:
    for name in names:
        (base_dir / name).mkdir(parents=True)


def test_resolve_datasets_uses_name_before_first_dot(tpch_dir: Path) -> None:
    """Dataset names should come from the text file names."""
    (tpch_dir / "orders.v2.csv").write_text("", encoding="utf-8")

    datasets = ArtifactLocator().resolve_datasets(tpch_dir)

    assert [(dataset.name, dataset.schema_path.name) for dataset in datasets] == [
        ("customer", "customer.schema"),
        ("nation", "nation.schema"),
        ("orders", "orders.v2.schema"),
    ]


def test_resolve_datasets_requires_directory(tmp_path: Path) -> None:
    """A missing reference directory should be an error."""
    with pytest.raises(ArtifactNotFound):
        ArtifactLocator().resolve_datasets(tmp_path / "absent")


def test_discover_prior_versions_keeps_strictly_older(tmp_path: Path) -> None:
    """Only releases sorting before the current one should be returned in order."""
    _make_version_dirs(
        tmp_path,
        [
            "parquet-compat-1.1.0",
            "parquet-compat-1.0.0",
            "parquet-compat-1.2.0-SNAPSHOT",
            "parquet-compat-1.2.0",
            "parquet-compat-1.3.0",
        ],
    )

    versions = ArtifactLocator().discover_prior_versions(tmp_path, VersionId.parse("1.2.0"))

    assert [str(version) for version in versions] == ["1.0.0", "1.1.0", "1.2.0-SNAPSHOT"]


def test_discover_external_versions_matches_major_minor(tmp_path: Path) -> None:
    """External releases should be grouped by major.minor only."""
    _make_version_dirs(tmp_path, ["1.1.0", "1.1.4", "1.0.9", "2.1.0"])

    versions = ArtifactLocator().discover_external_versions(tmp_path, VersionId.parse("1.1.2"))

    assert [str(version) for version in versions] == ["1.1.0", "1.1.4"]


def test_resolve_artifact_builds_canonical_path(tmp_path: Path) -> None:
    """Artifact paths should follow dataset[.variant].ext inside the release dir."""
    version = VersionId.parse("1.0")

    ref = ArtifactLocator().resolve_artifact(
        tmp_path, "customer", version, "dict", "GENERATED_COLUMNAR", must_exist=False
    )

    assert ref.path == tmp_path / "parquet-compat-1.0" / "customer.dict.parquet"


def test_resolve_artifact_missing_required_raises(tmp_path: Path) -> None:
    """A required artifact that does not exist should raise."""
    with pytest.raises(ArtifactNotFound):
        ArtifactLocator().resolve_artifact(
            tmp_path, "customer", None, None, "SOURCE_TEXT", must_exist=True
        )


def test_resolve_artifact_missing_optional_warns(tmp_path: Path) -> None:
    """An optional missing artifact should be returned with a warning."""
    with capture_logs() as logs:
        ref = ArtifactLocator().resolve_artifact(
            tmp_path,
            "customer",
            VersionId.parse("1.1.0"),
            "impala",
            "GENERATED_COLUMNAR",
            must_exist=False,
            version_prefix="",
        )

    assert not ref.exists and logs[0]["event"] == "artifact_missing"


def test_resolve_output_creates_parent_directory(tmp_path: Path) -> None:
    """Resolving an output should create its release directory idempotently."""
    locator = ArtifactLocator()
    version = VersionId.parse("1.1.0")

    locator.resolve_output(tmp_path, "nation", version, "plain", "GENERATED_TEXT")
    ref = locator.resolve_output(tmp_path, "nation", version, "plain", "GENERATED_TEXT")

    assert ref.path.parent.is_dir() and ref.path.name == "nation.plain.csv"


def test_resolve_output_refuses_existing_file(tmp_path: Path) -> None:
    """Existing outputs should not be overwritten implicitly."""
    locator = ArtifactLocator()
    ref = locator.resolve_output(tmp_path, "nation", None, None, "GENERATED_COLUMNAR")
    ref.path.write_bytes(b"old")

    with pytest.raises(ArtifactAlreadyExists):
        locator.resolve_output(tmp_path, "nation", None, None, "GENERATED_COLUMNAR")

    assert ref.path.read_bytes() == b"old"


def test_resolve_output_replaces_existing_when_requested(tmp_path: Path) -> None:
    """Explicit replacement should delete the stale output first."""
    locator = ArtifactLocator()
    ref = locator.resolve_output(tmp_path, "nation", None, None, "GENERATED_COLUMNAR")
    ref.path.write_bytes(b"old")

    replaced = locator.resolve_output(
        tmp_path, "nation", None, None, "GENERATED_COLUMNAR", replace_existing=True
    )

    assert not replaced.exists


def test_resolve_output_honors_version_prefix_override(tmp_path: Path) -> None:
    """Outputs for external releases should use the bare version directory."""
    locator = ArtifactLocator()

    ref = locator.resolve_output(
        tmp_path,
        "nation",
        VersionId.parse("1.1.3"),
        "impala",
        "GENERATED_TEXT",
        version_prefix="",
    )

    assert ref.path == tmp_path / "1.1.3" / "nation.impala.csv"
