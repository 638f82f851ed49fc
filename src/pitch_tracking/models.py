"""Telemetry samples, derived session metrics, and scored predictions."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
import uuid


@dataclass(frozen=True)
class Vector3:
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class Position:
    lat: float
    lon: float
    altitude: float = 0.0
    accuracy: float = 0.0
    satellite_count: int = 0


@dataclass(frozen=True)
class ImuReading:
    """Raw inertial readings: accel (m/s^2), gyro (rad/s), mag (uT)."""

    accelerometer: Vector3
    gyroscope: Vector3 | None = None
    magnetometer: Vector3 | None = None


@dataclass(frozen=True)
class Movement:
    speed_kmh: float
    acceleration_ms2: float = 0.0
    direction_deg: float = 0.0
    imu: ImuReading | None = None


@dataclass(frozen=True)
class Biometrics:
    heart_rate: int = 0
    body_temp_c: float | None = None
    stress_level: int | None = None


@dataclass(frozen=True)
class Environmental:
    temperature_c: float | None = None
    pressure_hpa: float | None = None
    humidity_pct: float | None = None


@dataclass(frozen=True)
class Sample:
    """One telemetry reading for a player at an instant."""

    player_id: str
    session_id: str
    timestamp: datetime
    position: Position
    movement: Movement
    biometrics: Biometrics | None = None
    environmental: Environmental | None = None


@dataclass(frozen=True)
class MovementMetrics:
    total_distance_m: float = 0.0
    sprint_distance_m: float = 0.0
    high_intensity_distance_m: float = 0.0
    sprint_count: int = 0
    accel_count: int = 0
    decel_count: int = 0
    max_speed_kmh: float = 0.0
    avg_speed_kmh: float = 0.0
    jump_count: int = 0
    player_load: float = 0.0
    speed_zone_distances: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class PerformanceMetrics:
    max_hr: int = 0
    avg_hr: float = 0.0
    intensity_score: float = 0.0
    work_rate: float = 0.0
    fatigue_index: float = 0.0
    recovery_time_s: float = 0.0
    vo2max: float = 0.0


@dataclass(frozen=True)
class TacticalMetrics:
    avg_pos_x: float = 0.0
    avg_pos_y: float = 0.0
    heat_map: dict[str, int] = field(default_factory=dict)
    field_coverage_pct: float = 0.0
    formation_adherence_pct: float = 0.0
    team_sync_pct: float = 0.0


@dataclass(frozen=True)
class LoadMetrics:
    acute_load: float = 0.0
    chronic_load: float = 0.0
    acute_chronic_ratio: float = 0.0
    training_stress_score: float = 0.0
    recovery_hours: float = 0.0
    readiness_score: float = 0.0
    session_load: float = 0.0


@dataclass(frozen=True)
class SessionMetrics:
    """Aggregated statistics for one player over one session window."""

    player_id: str
    session_id: str
    calculated_at: datetime
    movement: MovementMetrics
    performance: PerformanceMetrics
    tactical: TacticalMetrics
    load: LoadMetrics

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["calculated_at"] = self.calculated_at.isoformat()
        return payload


class PredictionType(str, Enum):
    INJURY_RISK = "INJURY_RISK"
    PERFORMANCE_DECLINE = "PERFORMANCE_DECLINE"
    OPTIMAL_POSITION = "OPTIMAL_POSITION"
    FATIGUE_LEVEL = "FATIGUE_LEVEL"
    RECOVERY_TIME = "RECOVERY_TIME"
    TACTICAL_RECOMMENDATION = "TACTICAL_RECOMMENDATION"


@dataclass(frozen=True)
class Prediction:
    """Write-once output of a heuristic scorer."""

    type: PredictionType
    input: dict[str, Any]
    output: dict[str, Any]
    confidence: float
    predicted_at: datetime
    player_id: str | None = None
    session_id: str | None = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "player_id": self.player_id,
            "session_id": self.session_id,
            "type": self.type.value,
            "input": self.input,
            "output": self.output,
            "confidence": self.confidence,
            "predicted_at": self.predicted_at.isoformat(),
        }


@dataclass(frozen=True)
class PlayerProfile:
    max_speed_kmh: float
    average_speed_kmh: float = 0.0
    max_heart_rate: int = 0
    resting_heart_rate: int = 0
    fitness_level: float = 0.0
    preferred_positions: tuple[str, ...] = ()


@dataclass(frozen=True)
class Player:
    id: str
    name: str = ""
    role: str | None = None
    team_id: str | None = None
    active: bool = True
    profile: PlayerProfile | None = None
