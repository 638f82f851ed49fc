"""Analytics presets for repeatable threshold choices."""

from __future__ import annotations

from dataclasses import dataclass

from .config import PitchTrackingConfig
from .constants import (
    ACCELERATION_THRESHOLD_MS2,
    ASSUMED_MAX_HR_BPM,
    HIGH_HR_ZONE_FRACTION,
    HIGH_INTENSITY_EFFORT_KMH,
    INJURY_HISTORY_DAYS,
    PERFORMANCE_HISTORY_DAYS,
    REALTIME_WINDOW_S,
    TRANSITION_SPEED_KMH,
)
from .metrics import EventThresholds, SpeedZone, default_speed_zones


@dataclass(frozen=True)
class ScoringThresholds:
    """Cut points used by the session scorers."""

    high_intensity_effort_kmh: float = HIGH_INTENSITY_EFFORT_KMH
    effort_accel_ms2: float = ACCELERATION_THRESHOLD_MS2
    transition_kmh: float = TRANSITION_SPEED_KMH
    hr_max_bpm: int = ASSUMED_MAX_HR_BPM
    hr_high_zone_fraction: float = HIGH_HR_ZONE_FRACTION

    @property
    def hr_high_zone_bpm(self) -> int:
        return int(self.hr_max_bpm * self.hr_high_zone_fraction)


@dataclass(frozen=True)
class AnalyticsPreset:
    """Single source of truth for threshold choices."""

    name: str
    rationale: str
    speed_zones: tuple[SpeedZone, ...]
    event_thresholds: EventThresholds
    scoring_thresholds: ScoringThresholds
    realtime_window_s: float = REALTIME_WINDOW_S
    injury_history_days: int = INJURY_HISTORY_DAYS
    performance_history_days: int = PERFORMANCE_HISTORY_DAYS


def default_preset() -> AnalyticsPreset:
    """Standard football external-load model."""
    return AnalyticsPreset(
        name="Football Session Model v1",
        rationale=(
            "Five km/h speed zones with a 19.8 km/h high-intensity edge and a 24 km/h "
            "sprint edge; +/-3 m/s^2 acceleration events."
        ),
        speed_zones=tuple(default_speed_zones()),
        event_thresholds=EventThresholds(),
        scoring_thresholds=ScoringThresholds(),
    )


def preset_from_config(config: PitchTrackingConfig) -> AnalyticsPreset:
    """Build a preset from validated project configuration."""
    thresholds = config.thresholds
    windows = config.windows
    base = default_preset()
    return AnalyticsPreset(
        name=f"{base.name} (configured)",
        rationale=base.rationale,
        speed_zones=tuple(
            default_speed_zones(thresholds.high_intensity_kmh, thresholds.sprint_kmh)
        ),
        event_thresholds=EventThresholds(
            sprint_kmh=thresholds.sprint_kmh,
            high_intensity_kmh=thresholds.high_intensity_kmh,
            accel_ms2=thresholds.accel_ms2,
            jump_vertical_ms2=thresholds.jump_vertical_ms2,
        ),
        scoring_thresholds=ScoringThresholds(
            high_intensity_effort_kmh=thresholds.high_intensity_effort_kmh,
            effort_accel_ms2=thresholds.accel_ms2,
            transition_kmh=thresholds.transition_kmh,
            hr_max_bpm=thresholds.hr_max_bpm,
            hr_high_zone_fraction=thresholds.hr_high_zone_fraction,
        ),
        realtime_window_s=windows.realtime_window_s,
        injury_history_days=windows.injury_history_days,
        performance_history_days=windows.performance_history_days,
    )
