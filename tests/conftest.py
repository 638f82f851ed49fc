from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Sequence

import pytest

from pitch_tracking.models import (
    Biometrics,
    ImuReading,
    LoadMetrics,
    Movement,
    MovementMetrics,
    PerformanceMetrics,
    Position,
    Sample,
    SessionMetrics,
    TacticalMetrics,
    Vector3,
)

BASE_TS = datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)
LAT_STEP_DEG = 0.0001


def build_sample(
    t_s: float = 0.0,
    *,
    player_id: str = "p1",
    session_id: str = "s1",
    lat: float = 0.0,
    lon: float = 0.0,
    speed_kmh: float = 0.0,
    accel_ms2: float = 0.0,
    heart_rate: int | None = None,
    imu: tuple[float, float, float] | None = None,
) -> Sample:
    return Sample(
        player_id=player_id,
        session_id=session_id,
        timestamp=BASE_TS + timedelta(seconds=t_s),
        position=Position(lat=lat, lon=lon),
        movement=Movement(
            speed_kmh=speed_kmh,
            acceleration_ms2=accel_ms2,
            imu=None if imu is None else ImuReading(accelerometer=Vector3(*imu)),
        ),
        biometrics=None if heart_rate is None else Biometrics(heart_rate=heart_rate),
    )


def build_run(
    speeds: Sequence[float],
    *,
    player_id: str = "p1",
    session_id: str = "s1",
    accels: Sequence[float] | None = None,
    heart_rates: Sequence[int | None] | None = None,
    dt_s: float = 1.0,
    start_s: float = 0.0,
) -> list[Sample]:
    """Samples one second apart moving north by a fixed step."""
    return [
        build_sample(
            start_s + i * dt_s,
            player_id=player_id,
            session_id=session_id,
            lat=i * LAT_STEP_DEG,
            speed_kmh=speed,
            accel_ms2=0.0 if accels is None else accels[i],
            heart_rate=None if heart_rates is None else heart_rates[i],
        )
        for i, speed in enumerate(speeds)
    ]


def build_metrics(
    *,
    player_id: str = "p1",
    session_id: str = "s1",
    calculated_at: datetime = BASE_TS,
    ratio: float = 1.0,
    session_load: float = 0.0,
    readiness: float = 8.0,
    player_load: float = 10.0,
    sprint_count: int = 5,
    sprint_distance_m: float = 200.0,
    accel_count: int = 10,
    max_speed_kmh: float = 30.0,
    total_distance_m: float = 5000.0,
    intensity: float = 6.0,
    work_rate: float = 85.0,
    max_hr: int = 180,
    avg_pos: tuple[float, float] = (50.0, 50.0),
    adherence: float = 80.0,
    sync: float = 70.0,
    coverage: float = 75.0,
) -> SessionMetrics:
    return SessionMetrics(
        player_id=player_id,
        session_id=session_id,
        calculated_at=calculated_at,
        movement=MovementMetrics(
            total_distance_m=total_distance_m,
            sprint_distance_m=sprint_distance_m,
            sprint_count=sprint_count,
            accel_count=accel_count,
            max_speed_kmh=max_speed_kmh,
            player_load=player_load,
        ),
        performance=PerformanceMetrics(
            max_hr=max_hr, intensity_score=intensity, work_rate=work_rate
        ),
        tactical=TacticalMetrics(
            avg_pos_x=avg_pos[0],
            avg_pos_y=avg_pos[1],
            field_coverage_pct=coverage,
            formation_adherence_pct=adherence,
            team_sync_pct=sync,
        ),
        load=LoadMetrics(
            acute_chronic_ratio=ratio, readiness_score=readiness, session_load=session_load
        ),
    )


@pytest.fixture
def make_sample():
    return build_sample


@pytest.fixture
def make_run():
    return build_run


@pytest.fixture
def make_metrics():
    return build_metrics


@pytest.fixture
def fixed_clock():
    now = BASE_TS + timedelta(hours=2)
    return lambda: now
