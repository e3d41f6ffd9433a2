"""Compatibility matrix orchestration.

The runner checks every reference dataset three ways: a round trip through
the current writer, a read of every stored prior release, and a read of every
external producer release on the current major.minor line. Each evaluation
unit is isolated, so an exception becomes a failed report row and the rest of
the matrix still runs.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from functools import cmp_to_key
import time
from typing import Any, Iterator

from core.config import CompatConfig
from core.constants import GENERATED_TEXT_DIR_NAME
from core.errors import ArtifactNotFound
from core.logging_config import get_logger
from core.ordering import absent_greatest, comparing, lexicographic
from core.types import ArtifactRef, ComparisonResult, DatasetRef
from core.versioning import VersionId
from convert.columnar_codec import ParquetCodec, writer_options_for
from convert.conversion import convert_columnar_to_text, convert_text_to_columnar
from convert.record_transcoder import decode_rows, encode_records
from convert.schema_parser import read_schema_file
from convert.text_artifacts import iter_text_rows
from store.artifact_locator import ArtifactLocator
from verify.equivalence import compare_ordered, compare_unordered
from verify.matrix_types import (
    COMPAT_MODES,
    CompatMode,
    MatrixReport,
    MatrixUnit,
    MatrixUnitResult,
    UnitStatus,
)

_LOGGER = get_logger(__name__)
_MODE_RANK = {mode: rank for rank, mode in enumerate(COMPAT_MODES)}
_UNIT_ORDER = lexicographic(
    comparing(lambda unit: unit.dataset.name),
    comparing(lambda unit: _MODE_RANK[unit.mode]),
    comparing(lambda unit: unit.version, absent_greatest(VersionId.compare_full)),
    comparing(lambda unit: unit.variant, absent_greatest()),
)


class CompatibilityMatrixRunner:
    """Run round-trip, backward, and cross-producer checks for all datasets."""

    def __init__(
        self,
        config: CompatConfig,
        locator: ArtifactLocator | None = None,
        codec: ParquetCodec | None = None,
        logger: Any | None = None,
    ) -> None:
        self._config = config
        self._logger = logger or _LOGGER
        self._locator = locator or ArtifactLocator(logger=self._logger)
        self._codec = codec or ParquetCodec(config.batch_rows)

    def run_round_trip(self, dataset: DatasetRef, variant: str) -> ComparisonResult:
        """Encode a dataset with the current writer and read it back.

        The columnar output lands in the current release directory under the
        output root, which is the layout later releases read as a prior
        version.

        Args:
            dataset: Reference dataset.
            variant: Writer variant name.

        Returns:
            Ordered comparison of the canonical reference rows and the
            decoded rows.

        Raises:
            ArtifactAlreadyExists: If outputs exist and replacement is disabled.
            CompatError: If any conversion step fails.
        """
        current = self._config.current_version
        columnar = self._locator.resolve_output(
            self._config.output_root,
            dataset.name,
            current,
            variant,
            "GENERATED_COLUMNAR",
            self._config.replace_outputs,
        )
        convert_text_to_columnar(
            dataset.text_path,
            columnar.path,
            self._codec,
            writer_options_for(variant),
            self._config.delimiter,
            self._logger,
        )
        return self._decode_and_compare("round_trip", dataset, columnar, order_matters=True)

    def run_backward_compat(
        self,
        dataset: DatasetRef,
        prior_versions: list[VersionId],
        variant: str,
    ) -> dict[VersionId, ComparisonResult | Exception]:
        """Read the dataset as written by each prior release.

        A release whose artifact is missing or unreadable does not stop the
        others; its entry holds the raised error instead of a result.

        Args:
            dataset: Reference dataset.
            prior_versions: Releases whose stored artifacts are read.
            variant: Writer variant the prior release used.

        Returns:
            Ordered comparison result, or the failure, per prior release.
        """
        results: dict[VersionId, ComparisonResult | Exception] = {}
        for version in prior_versions:
            try:
                results[version] = self._run_backward_version(dataset, version, variant)
            except Exception as error:
                self._logger.warning(
                    "backward_version_failed",
                    dataset=dataset.name,
                    version=str(version),
                    variant=variant,
                    error=f"{type(error).__name__}: {error}",
                )
                results[version] = error
        return results

    def run_cross_producer_compat(
        self,
        dataset: DatasetRef,
        external_artifact: ArtifactRef,
    ) -> ComparisonResult:
        """Read an artifact written by another producer.

        Row order across producers is not guaranteed, so the comparison
        ignores order.
        """
        return self._decode_and_compare(
            "cross_producer", dataset, external_artifact, order_matters=False
        )

    def plan_units(self) -> list[MatrixUnit]:
        """Enumerate every matrix unit in report order.

        Raises:
            ArtifactNotFound: If the reference data directory is missing.
        """
        config = self._config
        datasets = self._locator.resolve_datasets(config.data_root)
        prior_versions = self._locator.discover_prior_versions(
            config.versions_root, config.current_version
        )
        external_versions = self._locator.discover_external_versions(
            config.external_root, config.current_version
        )
        units: list[MatrixUnit] = []
        for dataset in datasets:
            for variant in config.variants:
                units.append(MatrixUnit(dataset, "round_trip", config.current_version, variant))
                units.extend(
                    MatrixUnit(dataset, "backward", version, variant)
                    for version in prior_versions
                )
            units.extend(
                MatrixUnit(dataset, "cross_producer", version, config.external_producer)
                for version in external_versions
            )
        return sorted(units, key=cmp_to_key(_UNIT_ORDER))

    def run_matrix(self) -> MatrixReport:
        """Run every planned unit and collect the full report.

        Returns:
            Report with one row per unit, in plan order.
        """
        units = self.plan_units()
        self._logger.info(
            "matrix_started",
            units=len(units),
            current_version=str(self._config.current_version),
            max_workers=self._config.max_workers,
        )
        if self._config.max_workers > 1 and len(units) > 1:
            results = self._run_parallel(units)
        else:
            results = [self._run_unit(unit) for unit in units]
        report = MatrixReport(
            current_version=str(self._config.current_version),
            output_root=str(self._config.output_root),
            units=tuple(results),
        )
        self._logger.info(
            "matrix_finished",
            passed=report.passed_count,
            failed=report.failed_count,
            skipped=report.skipped_count,
        )
        return report

    def _run_parallel(self, units: list[MatrixUnit]) -> list[MatrixUnitResult]:
        results: list[MatrixUnitResult | None] = [None] * len(units)
        with ThreadPoolExecutor(max_workers=self._config.max_workers) as executor:
            futures = {
                executor.submit(self._run_unit, unit): index
                for index, unit in enumerate(units)
            }
            for future in as_completed(futures):
                results[futures[future]] = future.result()
        return [result for result in results if result is not None]

    def _run_unit(self, unit: MatrixUnit) -> MatrixUnitResult:
        started_at = time.monotonic()
        comparison: ComparisonResult | None = None
        status: UnitStatus
        try:
            comparison = self._execute(unit)
            status = "passed" if comparison.passed else "failed"
            details = comparison.describe()
        except ArtifactNotFound as error:
            # Older and external releases may legitimately lack a dataset.
            status = "failed" if unit.mode == "round_trip" else "skipped"
            details = str(error)
        except Exception as error:
            status = "failed"
            details = f"{type(error).__name__}: {error}"
        result = MatrixUnitResult(
            dataset=unit.dataset.name,
            mode=unit.mode,
            version=str(unit.version) if unit.version is not None else None,
            variant=unit.variant,
            status=status,
            details=details,
            duration_seconds=round(time.monotonic() - started_at, 3),
            comparison=comparison,
        )
        log_method = self._logger.info if status == "passed" else self._logger.warning
        log_method(
            f"matrix_unit_{status}",
            dataset=result.dataset,
            mode=result.mode,
            version=result.version,
            variant=result.variant,
            details=details,
        )
        return result

    def _execute(self, unit: MatrixUnit) -> ComparisonResult:
        if unit.mode == "round_trip":
            return self.run_round_trip(unit.dataset, str(unit.variant))
        if unit.mode == "backward" and unit.version is not None:
            return self._run_backward_version(unit.dataset, unit.version, str(unit.variant))
        artifact = self._locator.resolve_artifact(
            self._config.external_root,
            unit.dataset.name,
            unit.version,
            unit.variant,
            "GENERATED_COLUMNAR",
            must_exist=True,
            version_prefix="",
        )
        return self.run_cross_producer_compat(unit.dataset, artifact)

    def _run_backward_version(
        self,
        dataset: DatasetRef,
        version: VersionId,
        variant: str,
    ) -> ComparisonResult:
        artifact = self._locator.resolve_artifact(
            self._config.versions_root,
            dataset.name,
            version,
            variant,
            "GENERATED_COLUMNAR",
            must_exist=True,
        )
        return self._decode_and_compare("backward", dataset, artifact, order_matters=True)

    def _decode_and_compare(
        self,
        mode: CompatMode,
        dataset: DatasetRef,
        artifact: ArtifactRef,
        order_matters: bool,
    ) -> ComparisonResult:
        text_output = self._locator.resolve_output(
            self._config.output_root / GENERATED_TEXT_DIR_NAME / mode,
            dataset.name,
            artifact.version,
            artifact.variant,
            "GENERATED_TEXT",
            self._config.replace_outputs,
            version_prefix="" if mode == "cross_producer" else None,
        )
        convert_columnar_to_text(
            artifact.path,
            text_output.path,
            self._codec,
            self._config.delimiter,
            self._logger,
        )
        expected_rows = self._canonical_rows(dataset)
        actual_rows = iter_text_rows(text_output.path)
        if order_matters:
            return compare_ordered(expected_rows, actual_rows)
        return compare_unordered(
            expected_rows,
            actual_rows,
            self._config.sort_chunk_rows,
            self._config.output_root,
        )

    def _canonical_rows(self, dataset: DatasetRef) -> Iterator[str]:
        """Reference rows re-encoded in canonical text form."""
        schema = read_schema_file(dataset.schema_path)
        records = decode_rows(iter_text_rows(dataset.text_path), schema, self._config.delimiter)
        return encode_records(records, schema, self._config.delimiter)
