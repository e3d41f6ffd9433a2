"""Compatibility suite CLI entry points.

This module exposes conversion, comparison, and discovery commands.
It maps argparse commands onto core calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from cli.matrix_command import add_matrix_command, run_matrix_command
from core.config import CompatConfig
from core.errors import CompatError
from core.logging_config import configure_logging
from core.versioning import VersionId
from convert.columnar_codec import WRITER_VARIANTS, ParquetCodec, writer_options_for
from convert.conversion import convert_columnar_to_text, convert_text_to_columnar
from store.artifact_locator import ArtifactLocator
from verify.equivalence import compare_text_artifacts

_PATH_OVERRIDES = ("data_root", "versions_root", "external_root", "output_root")


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="parquet-compat",
        description="Parquet cross-version compatibility suite",
    )
    parser.add_argument("--data-root", help="Override PARQUET_COMPAT_DATA_ROOT")
    parser.add_argument("--versions-root", help="Override PARQUET_COMPAT_VERSIONS_ROOT")
    parser.add_argument("--external-root", help="Override PARQUET_COMPAT_EXTERNAL_ROOT")
    parser.add_argument("--output-root", help="Override PARQUET_COMPAT_OUTPUT_ROOT")
    parser.add_argument(
        "--current-version",
        help="Override PARQUET_COMPAT_CURRENT_VERSION, e.g. 1.1.0-SNAPSHOT",
    )
    parser.add_argument(
        "--log-level",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Override PARQUET_COMPAT_LOG_LEVEL",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    add_matrix_command(subparsers)
    _add_to_columnar_command(subparsers)
    _add_to_text_command(subparsers)
    _add_compare_command(subparsers)
    _add_versions_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the compatibility CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = _build_config(args)
    except CompatError as error:
        print(f"config_error={error}")
        return 1
    configure_logging(config.log_level)
    if args.command == "matrix":
        return run_matrix_command(config, args)
    try:
        if args.command == "to-columnar":
            return _run_to_columnar_command(config, args)
        if args.command == "to-text":
            return _run_to_text_command(config, args)
        if args.command == "compare":
            return _run_compare_command(config, args)
        if args.command == "versions":
            return _run_versions_command(config, args)
    except CompatError as error:
        print(f"error={error}")
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(args: argparse.Namespace) -> CompatConfig:
    """Build config from the environment with command-line overrides.

    Args:
        args: Parsed CLI args.

    Returns:
        Validated config.

    Raises:
        CompatConfigError: If environment values are invalid.
        MalformedVersion: If ``--current-version`` is not a release identifier.
    """
    config = CompatConfig.from_env()
    for field_name in _PATH_OVERRIDES:
        raw_path = getattr(args, field_name)
        if raw_path:
            config = replace(config, **{field_name: Path(raw_path).expanduser().resolve()})
    if args.current_version:
        config = replace(config, current_version=VersionId.parse(args.current_version))
    if args.log_level:
        config = replace(config, log_level=args.log_level)
    return config


def _run_to_columnar_command(config: CompatConfig, args: argparse.Namespace) -> int:
    """Handle to-columnar command.

    Args:
        config: Runtime config.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    row_count = convert_text_to_columnar(
        Path(args.source),
        Path(args.output),
        ParquetCodec(config.batch_rows),
        writer_options_for(args.variant),
        config.delimiter,
    )
    print(f"rows={row_count}")
    print(f"output={args.output}")
    return 0


def _run_to_text_command(config: CompatConfig, args: argparse.Namespace) -> int:
    """Handle to-text command.

    Args:
        config: Runtime config.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    row_count = convert_columnar_to_text(
        Path(args.source),
        Path(args.output),
        ParquetCodec(config.batch_rows),
        config.delimiter,
    )
    print(f"rows={row_count}")
    print(f"output={args.output}")
    return 0


def _run_compare_command(config: CompatConfig, args: argparse.Namespace) -> int:
    """Handle compare command.

    Args:
        config: Runtime config.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    result = compare_text_artifacts(
        Path(args.expected),
        Path(args.actual),
        order_matters=not args.unordered,
        chunk_rows=config.sort_chunk_rows,
    )
    print(f"status={'passed' if result.passed else 'failed'}")
    print(result.describe())
    return 0 if result.passed else 1


def _run_versions_command(config: CompatConfig, args: argparse.Namespace) -> int:
    """Handle versions command.

    Args:
        config: Runtime config.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    _ = args
    locator = ArtifactLocator()
    for version in locator.discover_prior_versions(config.versions_root, config.current_version):
        print(f"prior\t{version}")
    for version in locator.discover_external_versions(
        config.external_root, config.current_version
    ):
        print(f"{config.external_producer}\t{version}")
    return 0


def _add_to_columnar_command(subparsers: Any) -> None:
    """Register to-columnar subcommand."""
    parser = subparsers.add_parser("to-columnar", help="Convert a text artifact to Parquet")
    parser.add_argument("source", help="Delimited text file with a sibling .schema file")
    parser.add_argument("output", help="Parquet file to create")
    parser.add_argument(
        "--variant",
        default="plain",
        choices=sorted(WRITER_VARIANTS),
        help="Writer variant",
    )


def _add_to_text_command(subparsers: Any) -> None:
    """Register to-text subcommand."""
    parser = subparsers.add_parser("to-text", help="Convert a Parquet file to delimited text")
    parser.add_argument("source", help="Parquet file to read")
    parser.add_argument("output", help="Text file to create")


def _add_compare_command(subparsers: Any) -> None:
    """Register compare subcommand."""
    parser = subparsers.add_parser("compare", help="Compare two text artifacts row by row")
    parser.add_argument("expected", help="Reference text file")
    parser.add_argument("actual", help="Text file under test")
    parser.add_argument(
        "--unordered",
        action="store_true",
        help="Ignore row order using a disk-backed external sort",
    )


def _add_versions_command(subparsers: Any) -> None:
    """Register versions subcommand."""
    subparsers.add_parser(
        "versions",
        help="List prior and external releases comparable with the current one",
    )
