"""Movement and performance metrics over one sorted player window."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd

from .constants import (
    ACCELERATION_THRESHOLD_MS2,
    HIGH_INTENSITY_THRESHOLD_KMH,
    INTENSITY_ACCEL_DIVISOR,
    INTENSITY_CAP,
    INTENSITY_SPEED_DIVISOR,
    JOGGING_MAX_KMH,
    JUMP_VERTICAL_ACCEL_MS2,
    PLAYER_LOAD_SCALE,
    SPRINT_THRESHOLD_KMH,
    WALKING_MAX_KMH,
)
from .errors import InsufficientDataError
from .estimators import PerformanceEstimator, PlaceholderPerformanceEstimator
from .models import MovementMetrics, PerformanceMetrics


@dataclass(frozen=True)
class SpeedZone:
    """Speed zone in km/h; lower edge exclusive, upper edge inclusive."""

    name: str
    lower_kmh: float | None
    upper_kmh: float | None


@dataclass(frozen=True)
class EventThresholds:
    """Cut points for discrete movement events."""

    sprint_kmh: float = SPRINT_THRESHOLD_KMH
    high_intensity_kmh: float = HIGH_INTENSITY_THRESHOLD_KMH
    accel_ms2: float = ACCELERATION_THRESHOLD_MS2
    jump_vertical_ms2: float = JUMP_VERTICAL_ACCEL_MS2
    player_load_scale: float = PLAYER_LOAD_SCALE


SPRINT_ZONE = "sprinting"
HIGH_INTENSITY_ZONE = "high_intensity"


def default_speed_zones(
    high_intensity_kmh: float = HIGH_INTENSITY_THRESHOLD_KMH,
    sprint_kmh: float = SPRINT_THRESHOLD_KMH,
) -> list[SpeedZone]:
    """Five football speed zones that partition every non-negative speed."""
    return [
        SpeedZone("walking", None, WALKING_MAX_KMH),
        SpeedZone("jogging", WALKING_MAX_KMH, JOGGING_MAX_KMH),
        SpeedZone("running", JOGGING_MAX_KMH, high_intensity_kmh),
        SpeedZone(HIGH_INTENSITY_ZONE, high_intensity_kmh, sprint_kmh),
        SpeedZone(SPRINT_ZONE, sprint_kmh, None),
    ]


def assign_speed_zone(
    speed_kmh: pd.Series, zones: Sequence[SpeedZone], out_of_range_label: str = "Out of range"
) -> pd.Series:
    """Assign each sample to a speed-zone label."""
    labels = pd.Series(out_of_range_label, index=speed_kmh.index, dtype="object")
    for zone in zones:
        mask = pd.Series(True, index=speed_kmh.index)
        if zone.lower_kmh is not None:
            mask &= speed_kmh > zone.lower_kmh
        if zone.upper_kmh is not None:
            mask &= speed_kmh <= zone.upper_kmh
        labels.loc[mask] = zone.name
    return labels


def compute_movement_metrics(
    frame: pd.DataFrame,
    zones: Sequence[SpeedZone] | None = None,
    thresholds: EventThresholds = EventThresholds(),
) -> MovementMetrics:
    """Distance, zone split, and event counts over consecutive sample pairs.

    `frame` is the output of `pipeline.samples_to_frame`. Every value is read
    from the segment-closing sample (index >= 1), so the first sample only
    anchors the first segment.
    """
    if len(frame) < 2:
        raise InsufficientDataError(
            "movement metrics need at least two samples", available=len(frame), required=2
        )
    if zones is None:
        zones = default_speed_zones(thresholds.high_intensity_kmh, thresholds.sprint_kmh)

    speed = frame["speed_kmh"].to_numpy(dtype=float)
    seg = frame.iloc[1:]
    seg_speed = seg["speed_kmh"]
    step = seg["step_distance_m"].to_numpy(dtype=float)

    labels = assign_speed_zone(seg_speed, zones)
    zone_distances = {zone.name: 0.0 for zone in zones}
    by_zone = pd.Series(step, index=seg.index).groupby(labels).sum()
    for name, distance in by_zone.items():
        if name in zone_distances:
            zone_distances[name] = float(distance)

    sprint_edges = (speed[:-1] <= thresholds.sprint_kmh) & (speed[1:] > thresholds.sprint_kmh)

    accel = seg["accel_ms2"].to_numpy(dtype=float)
    imu = seg[["imu_ax", "imu_ay", "imu_az"]].to_numpy(dtype=float)
    has_imu = ~np.isnan(imu).any(axis=1)
    imu_magnitude = np.linalg.norm(imu[has_imu], axis=1)
    jumps = np.nan_to_num(imu[:, 2], nan=-np.inf) > thresholds.jump_vertical_ms2

    return MovementMetrics(
        total_distance_m=float(step.sum()),
        sprint_distance_m=_zone_total(zone_distances, SPRINT_ZONE),
        high_intensity_distance_m=_zone_total(zone_distances, HIGH_INTENSITY_ZONE),
        sprint_count=int(sprint_edges.sum()),
        accel_count=int((accel > thresholds.accel_ms2).sum()),
        decel_count=int((accel < -thresholds.accel_ms2).sum()),
        max_speed_kmh=max(0.0, float(seg_speed.max())),
        avg_speed_kmh=float(seg_speed.mean()),
        jump_count=int(jumps.sum()),
        player_load=float((imu_magnitude / thresholds.player_load_scale).sum()),
        speed_zone_distances=zone_distances,
    )


def sample_intensity(frame: pd.DataFrame) -> pd.Series:
    """Per-sample intensity on a 0-10 scale from speed and |acceleration|."""
    raw = (
        frame["speed_kmh"] / INTENSITY_SPEED_DIVISOR
        + frame["accel_ms2"].abs() / INTENSITY_ACCEL_DIVISOR
    )
    return raw.clip(upper=INTENSITY_CAP)


def compute_performance_metrics(
    frame: pd.DataFrame, estimator: PerformanceEstimator | None = None
) -> PerformanceMetrics:
    """Heart-rate summary, mean intensity, and estimator-supplied values."""
    estimator = estimator or PlaceholderPerformanceEstimator()
    # samples_to_frame stores missing or non-positive readings as NaN
    heart_rate = frame["heart_rate"].dropna()
    heart_rate = heart_rate[heart_rate > 0]
    estimate = estimator.estimate(frame)

    intensity = sample_intensity(frame)
    return PerformanceMetrics(
        max_hr=int(heart_rate.max()) if not heart_rate.empty else 0,
        avg_hr=float(heart_rate.mean()) if not heart_rate.empty else 0.0,
        intensity_score=float(intensity.mean()) if not intensity.empty else 0.0,
        work_rate=estimate.work_rate,
        fatigue_index=estimate.fatigue_index,
        recovery_time_s=estimate.recovery_time_s,
        vo2max=estimate.vo2max,
    )


def summarize_speed_zones(
    frame: pd.DataFrame,
    zones: Sequence[SpeedZone],
    *,
    speed_col: str = "speed_kmh",
    distance_col: str = "step_distance_m",
    time_col: str = "dt_s",
) -> pd.DataFrame:
    """Summarize distance and time accumulated in each speed zone."""
    work = frame[[speed_col, distance_col, time_col]].iloc[1:].copy()
    work["speed_zone"] = assign_speed_zone(work[speed_col], zones)

    total_distance = work[distance_col].sum()
    total_time = work[time_col].sum()

    summary = (
        work.groupby("speed_zone", dropna=False)
        .agg(
            distance_m=(distance_col, "sum"),
            time_s=(time_col, "sum"),
            sample_count=(speed_col, "size"),
            mean_speed_kmh=(speed_col, "mean"),
        )
        .reindex([zone.name for zone in zones])
        .fillna({"distance_m": 0.0, "time_s": 0.0, "sample_count": 0})
        .rename_axis("speed_zone")
        .reset_index()
    )
    summary["sample_count"] = summary["sample_count"].astype(int)

    summary["distance_pct"] = np.where(
        total_distance > 0, (summary["distance_m"] / total_distance) * 100.0, 0.0
    )
    summary["time_pct"] = np.where(total_time > 0, (summary["time_s"] / total_time) * 100.0, 0.0)
    return summary


def _zone_total(zone_distances: dict[str, float], name: str) -> float:
    return float(zone_distances.get(name, 0.0))
