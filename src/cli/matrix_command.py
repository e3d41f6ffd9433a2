"""Matrix command wiring for the compatibility CLI."""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Any

from core.config import CompatConfig
from core.errors import CompatError
from verify.compat_matrix import CompatibilityMatrixRunner
from verify.matrix_report import render_matrix_report, save_matrix_report


def add_matrix_command(subparsers: Any) -> None:
    """Register matrix subcommand."""
    parser = subparsers.add_parser(
        "matrix",
        help="Run round-trip, backward, and cross-producer compatibility checks",
    )
    parser.add_argument(
        "--variant",
        action="append",
        dest="variants",
        help="Writer variant to exercise; repeat for several (default from config)",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        help="Number of matrix units evaluated concurrently",
    )
    parser.add_argument(
        "--keep-outputs",
        action="store_true",
        help="Fail instead of replacing generated artifacts from a previous run",
    )
    parser.add_argument("--report-dir", help="Directory for matrix_report.json")


def run_matrix_command(config: CompatConfig, args: argparse.Namespace) -> int:
    """Execute the compatibility matrix and print the unit report."""
    if args.variants:
        config = replace(config, variants=tuple(args.variants))
    if args.max_workers is not None:
        if args.max_workers <= 0:
            print(f"error=--max-workers must be > 0, got {args.max_workers}")
            return 1
        config = replace(config, max_workers=args.max_workers)
    if args.keep_outputs:
        config = replace(config, replace_outputs=False)
    try:
        report = CompatibilityMatrixRunner(config).run_matrix()
    except CompatError as error:
        print(f"matrix_error={error}")
        return 1
    report_dir = Path(args.report_dir).expanduser().resolve() if args.report_dir else None
    report_path = save_matrix_report(report, report_dir)
    print(render_matrix_report(report))
    print(f"report_path={report_path}")
    return 0 if report.failed_count == 0 else 1
