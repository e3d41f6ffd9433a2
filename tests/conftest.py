"""Pytest configuration for repository test runs."""

from __future__ import annotations

import shutil
import sys
from pathlib import Path

import pytest

FIXTURES_ROOT = Path(__file__).resolve().parent / "fixtures"


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture
def tpch_dir(tmp_path: Path) -> Path:
    """Writable copy of the TPC-H reference datasets."""
    target = tmp_path / "tpch"
    shutil.copytree(FIXTURES_ROOT / "tpch", target)
    return target


@pytest.fixture
def compat_config(tmp_path: Path, tpch_dir: Path):
    """Config rooted in a temporary directory with small batch and sort sizes."""
    from core.config import CompatConfig
    from core.versioning import VersionId

    return CompatConfig(
        data_root=tpch_dir,
        versions_root=tmp_path / "versions",
        external_root=tmp_path / "impala",
        external_producer="impala",
        output_root=tmp_path / "out",
        current_version=VersionId.parse("1.1.0"),
        delimiter="|",
        variants=("plain", "dict"),
        batch_rows=5,
        sort_chunk_rows=3,
        max_workers=1,
        replace_outputs=True,
        log_level="INFO",
    )
