"""Matrix report formatting and persistence."""

from __future__ import annotations

import json
from pathlib import Path

from core.constants import MATRIX_REPORT_FILE_NAME
from verify.matrix_types import MatrixReport

__all__ = ["render_matrix_report", "save_matrix_report"]


def render_matrix_report(report: MatrixReport) -> str:
    """Render report into stable multi-line text for CLI output."""
    lines = [
        f"current_version={report.current_version}",
        f"output_root={report.output_root}",
    ]
    for row in report.units:
        lines.append(
            f"[{row.status.upper()}] {row.dataset} {row.mode} "
            f"version={row.version or '-'} variant={row.variant or '-'} "
            f"({row.duration_seconds:.3f}s) :: {row.details}"
        )
    lines.append(f"passed={report.passed_count}")
    lines.append(f"failed={report.failed_count}")
    lines.append(f"skipped={report.skipped_count}")
    return "\n".join(lines)


def save_matrix_report(report: MatrixReport, report_dir: Path | None = None) -> Path:
    """Persist report JSON, by default into the run's output root.

    Args:
        report: Completed matrix report.
        report_dir: Optional directory override.

    Returns:
        Path of the written JSON file.
    """
    report_path = Path(report_dir or report.output_root) / MATRIX_REPORT_FILE_NAME
    report_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "current_version": report.current_version,
        "output_root": report.output_root,
        "passed": report.passed_count,
        "failed": report.failed_count,
        "skipped": report.skipped_count,
        "units": [
            {
                "dataset": row.dataset,
                "mode": row.mode,
                "version": row.version,
                "variant": row.variant,
                "status": row.status,
                "details": row.details,
                "duration_seconds": row.duration_seconds,
            }
            for row in report.units
        ],
    }
    report_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    return report_path
