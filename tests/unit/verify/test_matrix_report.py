"""Unit tests for matrix report formatting."""

from __future__ import annotations

import json
from pathlib import Path

from verify.matrix_report import render_matrix_report, save_matrix_report
from verify.matrix_types import MatrixReport, MatrixUnitResult


def _build_report(output_root: Path) -> MatrixReport:
    return MatrixReport(
        current_version="1.1.0",
        output_root=str(output_root),
        units=(
            MatrixUnitResult(
                dataset="customer",
                mode="round_trip",
                version="1.1.0",
                variant="plain",
                status="passed",
                details="matched_rows=12",
                duration_seconds=0.0123,
            ),
            MatrixUnitResult(
                dataset="customer",
                mode="cross_producer",
                version="1.1.0",
                variant="impala",
                status="skipped",
                details="Artifact missing.parquet does not exist.",
                duration_seconds=0.001,
            ),
        ),
    )


def test_render_matrix_report_lists_units_and_totals(tmp_path: Path) -> None:
    """Rendered text should contain one line per unit plus totals."""
    text = render_matrix_report(_build_report(tmp_path))

    assert text.splitlines()[2:] == [
        "[PASSED] customer round_trip version=1.1.0 variant=plain (0.012s) :: matched_rows=12",
        "[SKIPPED] customer cross_producer version=1.1.0 variant=impala (0.001s) :: "
        "Artifact missing.parquet does not exist.",
        "passed=1",
        "failed=0",
        "skipped=1",
    ]


def test_save_matrix_report_writes_json(tmp_path: Path) -> None:
    """Saved report should be valid JSON in the output root."""
    report_path = save_matrix_report(_build_report(tmp_path / "out"))

    payload = json.loads(report_path.read_text(encoding="utf-8"))

    assert report_path.name == "matrix_report.json" and [
        unit["status"] for unit in payload["units"]
    ] == ["passed", "skipped"]
