"""Integration tests for multi-release compatibility runs."""

from __future__ import annotations

from dataclasses import replace
import json
from pathlib import Path
import random

import pyarrow as pa
import pyarrow.parquet as pq

from core.config import CompatConfig
from core.versioning import VersionId
from convert.text_artifacts import iter_text_rows
from verify.compat_matrix import CompatibilityMatrixRunner
from verify.matrix_report import save_matrix_report


def _write_external_nation(tpch_dir: Path, target: Path) -> None:
    """Write nation the way another producer might: wider ints, shuffled rows."""
    rows = [row.split("|") for row in iter_text_rows(tpch_dir / "nation.csv")]
    random.Random(11).shuffle(rows)
    table = pa.table(
        {
            "n_nationkey": pa.array([int(row[0]) for row in rows], type=pa.int64()),
            "n_name": pa.array([row[1] for row in rows], type=pa.string()),
            "n_regionkey": pa.array([int(row[2]) for row in rows], type=pa.int64()),
            "n_comment": pa.array([row[3].encode("utf-8") for row in rows], type=pa.binary()),
        }
    )
    target.parent.mkdir(parents=True, exist_ok=True)
    pq.write_table(table, str(target), compression="gzip")


def test_next_release_reads_previous_release_outputs(compat_config: CompatConfig) -> None:
    """Artifacts written by one release should be verified by the next."""
    shared_root = compat_config.versions_root
    first_release = replace(
        compat_config,
        output_root=shared_root,
        current_version=VersionId.parse("1.0.0"),
    )
    CompatibilityMatrixRunner(first_release).run_matrix()
    second_release = replace(compat_config, output_root=shared_root)

    report = CompatibilityMatrixRunner(second_release).run_matrix()

    backward = [unit for unit in report.units if unit.mode == "backward"]
    assert len(backward) == 4 and all(unit.status == "passed" for unit in backward)


def test_external_producer_rows_match_in_any_order(
    compat_config: CompatConfig,
    tpch_dir: Path,
) -> None:
    """A shuffled external artifact with different physical types should pass."""
    _write_external_nation(
        tpch_dir, compat_config.external_root / "1.1.0" / "nation.impala.parquet"
    )

    report = CompatibilityMatrixRunner(compat_config).run_matrix()

    cross = {unit.dataset: unit.status for unit in report.units if unit.mode == "cross_producer"}
    assert cross == {"customer": "skipped", "nation": "passed"} and report.failed_count == 0


def test_saved_report_round_trips_counts(compat_config: CompatConfig) -> None:
    """The saved JSON report should agree with the in-memory totals."""
    report = CompatibilityMatrixRunner(replace(compat_config, max_workers=2)).run_matrix()

    payload = json.loads(save_matrix_report(report).read_text(encoding="utf-8"))

    assert (payload["passed"], payload["failed"], len(payload["units"])) == (
        report.passed_count,
        report.failed_count,
        len(report.units),
    )
