"""Injectable strategies for metrics that have no measured source yet.

Each placeholder returns fixed values so downstream scoring has stable inputs.
Swap in a real estimator by passing any object with the same `estimate`
signature to the aggregator.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import pandas as pd


@dataclass(frozen=True)
class PerformanceEstimate:
    work_rate: float
    fatigue_index: float
    recovery_time_s: float
    vo2max: float


@dataclass(frozen=True)
class TacticalEstimate:
    field_coverage_pct: float
    formation_adherence_pct: float
    team_sync_pct: float


class PerformanceEstimator(Protocol):
    def estimate(self, frame: pd.DataFrame) -> PerformanceEstimate: ...


class TacticalEstimator(Protocol):
    def estimate(self, frame: pd.DataFrame) -> TacticalEstimate: ...


@dataclass(frozen=True)
class PlaceholderPerformanceEstimator:
    work_rate: float = 85.0
    fatigue_index: float = 5.0
    recovery_time_s: float = 120.0
    vo2max: float = 45.0

    def estimate(self, frame: pd.DataFrame) -> PerformanceEstimate:
        return PerformanceEstimate(
            work_rate=self.work_rate,
            fatigue_index=self.fatigue_index,
            recovery_time_s=self.recovery_time_s,
            vo2max=self.vo2max,
        )


@dataclass(frozen=True)
class PlaceholderTacticalEstimator:
    field_coverage_pct: float = 75.0
    formation_adherence_pct: float = 80.0
    team_sync_pct: float = 70.0

    def estimate(self, frame: pd.DataFrame) -> TacticalEstimate:
        return TacticalEstimate(
            field_coverage_pct=self.field_coverage_pct,
            formation_adherence_pct=self.formation_adherence_pct,
            team_sync_pct=self.team_sync_pct,
        )
