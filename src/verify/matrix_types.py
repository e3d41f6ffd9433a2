"""Typed models for compatibility matrix runs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from core.types import ComparisonResult, DatasetRef
from core.versioning import VersionId

CompatMode = Literal["round_trip", "backward", "cross_producer"]
UnitStatus = Literal["passed", "failed", "skipped"]

COMPAT_MODES: tuple[CompatMode, ...] = ("round_trip", "backward", "cross_producer")


@dataclass(frozen=True)
class MatrixUnit:
    """One planned dataset x version x variant evaluation."""

    dataset: DatasetRef
    mode: CompatMode
    version: VersionId | None
    variant: str | None


@dataclass(frozen=True)
class MatrixUnitResult:
    """One matrix report row."""

    dataset: str
    mode: CompatMode
    version: str | None
    variant: str | None
    status: UnitStatus
    details: str
    duration_seconds: float
    comparison: ComparisonResult | None = None


@dataclass(frozen=True)
class MatrixReport:
    """Final report for a complete matrix run."""

    current_version: str
    output_root: str
    units: tuple[MatrixUnitResult, ...]

    @property
    def failed_count(self) -> int:
        """Count failed units in this report."""
        return sum(1 for unit in self.units if unit.status == "failed")

    @property
    def passed_count(self) -> int:
        """Count passed units in this report."""
        return sum(1 for unit in self.units if unit.status == "passed")

    @property
    def skipped_count(self) -> int:
        """Count skipped units in this report."""
        return sum(1 for unit in self.units if unit.status == "skipped")
