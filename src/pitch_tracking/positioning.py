"""Field projection, heat-map zoning, and per-player positional metrics."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd

from .constants import FIELD_COORDINATE_SCALE, FIELD_GRID_SIZE, FIELD_ZONE_WIDTH
from .estimators import PlaceholderTacticalEstimator, TacticalEstimator
from .models import TacticalMetrics

DEFENSIVE_THIRD_MAX = 33.0
MIDDLE_THIRD_MAX = 67.0


@dataclass(frozen=True)
class FieldCalibration:
    """Linear degrees-to-field mapping.

    Pitch-corner calibration is not wired in yet, so field units are simply
    `degrees * scale` and only land on 0-100 for coordinates near the origin.
    """

    scale: float = FIELD_COORDINATE_SCALE
    zone_width: float = FIELD_ZONE_WIDTH
    grid_size: int = FIELD_GRID_SIZE

    def to_field(self, lat, lon) -> tuple[np.ndarray, np.ndarray]:
        """Return (field_x, field_y) from (lat, lon)."""
        field_x = np.asarray(lon, dtype=float) * self.scale
        field_y = np.asarray(lat, dtype=float) * self.scale
        return field_x, field_y

    def zone_index(self, value) -> np.ndarray:
        idx = np.trunc(np.asarray(value, dtype=float) / self.zone_width).astype(int) + 1
        return np.clip(idx, 1, self.grid_size)

    def zone_ids(self, field_x, field_y) -> list[str]:
        xs = self.zone_index(field_x)
        ys = self.zone_index(field_y)
        return [f"zone_{x}_{y}" for x, y in zip(np.atleast_1d(xs), np.atleast_1d(ys))]


def build_heat_map(frame: pd.DataFrame, calibration: FieldCalibration = FieldCalibration()) -> dict[str, int]:
    """Count samples per grid zone, keyed `zone_{x}_{y}`."""
    if frame.empty:
        return {}
    field_x, field_y = calibration.to_field(frame["lat"], frame["lon"])
    counts = pd.Series(calibration.zone_ids(field_x, field_y)).value_counts()
    return {str(zone): int(count) for zone, count in sorted(counts.items())}


def movement_variability_deg(frame: pd.DataFrame) -> float:
    """RMS distance from the mean position, in raw degrees."""
    if frame.empty:
        return 0.0
    lat = frame["lat"].to_numpy(dtype=float)
    lon = frame["lon"].to_numpy(dtype=float)
    squared = (lat - lat.mean()) ** 2 + (lon - lon.mean()) ** 2
    return float(np.sqrt(squared.mean()))


def field_third(field_y: float) -> str:
    if field_y < DEFENSIVE_THIRD_MAX:
        return "Defensive third"
    if field_y < MIDDLE_THIRD_MAX:
        return "Middle third"
    return "Attacking third"


def compute_tactical_metrics(
    frame: pd.DataFrame,
    calibration: FieldCalibration = FieldCalibration(),
    estimator: TacticalEstimator | None = None,
) -> TacticalMetrics:
    """Average field position, heat map, and estimator-supplied team values."""
    estimator = estimator or PlaceholderTacticalEstimator()
    estimate = estimator.estimate(frame)
    if frame.empty:
        avg_x = avg_y = 0.0
    else:
        field_x, field_y = calibration.to_field(frame["lat"], frame["lon"])
        avg_x = float(field_x.mean())
        avg_y = float(field_y.mean())

    return TacticalMetrics(
        avg_pos_x=avg_x,
        avg_pos_y=avg_y,
        heat_map=build_heat_map(frame, calibration),
        field_coverage_pct=estimate.field_coverage_pct,
        formation_adherence_pct=estimate.formation_adherence_pct,
        team_sync_pct=estimate.team_sync_pct,
    )
