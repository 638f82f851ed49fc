"""Sample ingestion and analysis-frame construction."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Sequence

import numpy as np
import pandas as pd

from .kinematics import haversine_meters
from .models import (
    Biometrics,
    Environmental,
    ImuReading,
    Movement,
    Player,
    PlayerProfile,
    Position,
    Sample,
    Vector3,
)

FRAME_COLUMNS = (
    "ts",
    "player_id",
    "session_id",
    "lat",
    "lon",
    "speed_kmh",
    "accel_ms2",
    "imu_ax",
    "imu_ay",
    "imu_az",
    "heart_rate",
)

REQUIRED_CSV_COLUMNS = {"player_id", "session_id", "ts", "lat", "lon", "speed_kmh"}


def samples_to_frame(samples: Iterable[Sample]) -> pd.DataFrame:
    """Flatten samples, stable-sort by timestamp, and add derived columns."""
    rows = [_sample_row(sample) for sample in samples]
    if not rows:
        frame = pd.DataFrame({col: pd.Series(dtype=float) for col in FRAME_COLUMNS})
        frame["ts"] = pd.to_datetime(frame["ts"], utc=True)
        frame["dt_s"] = pd.Series(dtype=float)
        frame["step_distance_m"] = pd.Series(dtype=float)
        return frame

    df = pd.DataFrame(rows, columns=list(FRAME_COLUMNS))
    df["ts"] = pd.to_datetime(df["ts"], utc=True)
    # mergesort keeps arrival order for equal timestamps
    df = df.sort_values("ts", kind="mergesort").reset_index(drop=True)
    return add_segment_columns(df)


def add_segment_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Add `dt_s` and pairwise haversine `step_distance_m` (0 for the first row)."""
    work = df.copy()
    work["dt_s"] = work["ts"].diff().dt.total_seconds().fillna(0.0)

    lat = work["lat"].to_numpy(dtype=float)
    lon = work["lon"].to_numpy(dtype=float)
    step = np.zeros(len(work), dtype=float)
    if len(work) > 1:
        step[1:] = haversine_meters(lat[:-1], lon[:-1], lat[1:], lon[1:])
    work["step_distance_m"] = step
    return work


def load_samples_csv(csv_path: str | Path) -> list[Sample]:
    """Load a flat telemetry CSV into samples, preserving file order for ties."""
    df = pd.read_csv(csv_path)
    missing = REQUIRED_CSV_COLUMNS - set(df.columns)
    if missing:
        raise ValueError(f"Missing columns in telemetry CSV: {sorted(missing)}")

    df["ts"] = pd.to_datetime(df["ts"], utc=True, errors="coerce")
    bad_ts = int(df["ts"].isna().sum())
    if bad_ts:
        raise ValueError(f"{bad_ts} telemetry rows have unparseable timestamps")

    return [_row_to_sample(row) for row in df.to_dict(orient="records")]


def load_roster_csv(csv_path: str | Path) -> list[Player]:
    """Load players (id, name, role, max_speed_kmh, fitness_level, ...) from CSV."""
    df = pd.read_csv(csv_path)
    if "player_id" not in df.columns:
        raise ValueError("Roster CSV must contain a player_id column")

    players: list[Player] = []
    for row in df.to_dict(orient="records"):
        max_speed = _optional_float(row.get("max_speed_kmh"))
        profile = None
        if max_speed is not None:
            profile = PlayerProfile(
                max_speed_kmh=max_speed,
                average_speed_kmh=_optional_float(row.get("average_speed_kmh")) or 0.0,
                max_heart_rate=int(_optional_float(row.get("max_heart_rate")) or 0),
                resting_heart_rate=int(_optional_float(row.get("resting_heart_rate")) or 0),
                fitness_level=_optional_float(row.get("fitness_level")) or 0.0,
            )
        role = row.get("role")
        players.append(
            Player(
                id=str(row["player_id"]),
                name=str(row.get("name") or ""),
                role=None if _is_missing(role) else str(role),
                team_id=None if _is_missing(row.get("team_id")) else str(row["team_id"]),
                profile=profile,
            )
        )
    return players


def session_keys(samples: Sequence[Sample]) -> list[tuple[str, str]]:
    """Distinct (player_id, session_id) pairs in first-seen order."""
    seen: dict[tuple[str, str], None] = {}
    for sample in samples:
        seen.setdefault((sample.player_id, sample.session_id), None)
    return list(seen)


def _sample_row(sample: Sample) -> dict[str, Any]:
    imu = sample.movement.imu
    accel = imu.accelerometer if imu is not None else None
    heart_rate = np.nan
    if sample.biometrics is not None and sample.biometrics.heart_rate > 0:
        heart_rate = float(sample.biometrics.heart_rate)
    return {
        "ts": sample.timestamp,
        "player_id": sample.player_id,
        "session_id": sample.session_id,
        "lat": float(sample.position.lat),
        "lon": float(sample.position.lon),
        "speed_kmh": float(sample.movement.speed_kmh),
        "accel_ms2": float(sample.movement.acceleration_ms2),
        "imu_ax": np.nan if accel is None else float(accel.x),
        "imu_ay": np.nan if accel is None else float(accel.y),
        "imu_az": np.nan if accel is None else float(accel.z),
        "heart_rate": heart_rate,
    }


def _row_to_sample(row: dict[str, Any]) -> Sample:
    imu = None
    accel = _optional_vector(row, "imu_ax", "imu_ay", "imu_az")
    if accel is not None:
        imu = ImuReading(
            accelerometer=accel,
            gyroscope=_optional_vector(row, "gyro_x", "gyro_y", "gyro_z"),
            magnetometer=_optional_vector(row, "mag_x", "mag_y", "mag_z"),
        )

    biometrics = None
    heart_rate = _optional_float(row.get("heart_rate"))
    body_temp = _optional_float(row.get("body_temp_c"))
    stress = _optional_float(row.get("stress_level"))
    if heart_rate is not None or body_temp is not None or stress is not None:
        biometrics = Biometrics(
            heart_rate=int(heart_rate or 0),
            body_temp_c=body_temp,
            stress_level=None if stress is None else int(stress),
        )

    environmental = None
    env_values = [
        _optional_float(row.get(key)) for key in ("env_temp_c", "pressure_hpa", "humidity_pct")
    ]
    if any(value is not None for value in env_values):
        environmental = Environmental(*env_values)

    return Sample(
        player_id=str(row["player_id"]),
        session_id=str(row["session_id"]),
        timestamp=pd.Timestamp(row["ts"]).to_pydatetime(),
        position=Position(
            lat=float(row["lat"]),
            lon=float(row["lon"]),
            altitude=_optional_float(row.get("altitude")) or 0.0,
            accuracy=_optional_float(row.get("accuracy")) or 0.0,
            satellite_count=int(_optional_float(row.get("satellites")) or 0),
        ),
        movement=Movement(
            speed_kmh=float(row["speed_kmh"]),
            acceleration_ms2=_optional_float(row.get("accel_ms2")) or 0.0,
            direction_deg=_optional_float(row.get("direction_deg")) or 0.0,
            imu=imu,
        ),
        biometrics=biometrics,
        environmental=environmental,
    )


def _optional_vector(row: dict[str, Any], kx: str, ky: str, kz: str) -> Vector3 | None:
    values = [_optional_float(row.get(key)) for key in (kx, ky, kz)]
    if any(value is None for value in values):
        return None
    return Vector3(*values)


def _optional_float(value: Any) -> float | None:
    if _is_missing(value):
        return None
    return float(value)


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False
