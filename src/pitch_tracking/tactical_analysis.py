"""Team-level tactical scoring and per-player optimal-position advice."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterator, Sequence

import pandas as pd

from .constants import MIN_FORMATION_PLAYERS
from .kinematics import safe_mean
from .models import Prediction, PredictionType, SessionMetrics
from .positioning import (
    DEFENSIVE_THIRD_MAX,
    MIDDLE_THIRD_MAX,
    FieldCalibration,
    build_heat_map,
    field_third,
    movement_variability_deg,
)
from .presets import ScoringThresholds
from .scoring import PriorityRule, build_prediction, first_matching_priority

TACTICAL_PRIORITY_RULES = (
    PriorityRule("HIGH", lambda f: f["teamCompactness"] < 0.5 or f["formationStability"] < 0.6),
    PriorityRule("MEDIUM", lambda f: f["teamCompactness"] < 0.7 or f["formationStability"] < 0.8),
)

# (feature key, threshold, advice, training focus); advice fires when value < threshold
TACTICAL_ADVICE = (
    (
        "formationStability",
        0.7,
        "Improve formation discipline - players drifting from positions",
        "Positional play drills",
    ),
    (
        "teamCompactness",
        0.6,
        "Increase team compactness - too much space between lines",
        "Compactness drills",
    ),
    (
        "pressingEffectiveness",
        0.7,
        "Improve pressing coordination and timing",
        "Pressing triggers training",
    ),
    (
        "transitionEfficiency",
        0.6,
        "Work on faster transitions between phases",
        "Transition speed drills",
    ),
)


def group_positions_by_timestamp(
    frame: pd.DataFrame, min_players: int = MIN_FORMATION_PLAYERS
) -> Iterator[pd.DataFrame]:
    """Yield the rows recorded at each instant with at least `min_players` rows."""
    if frame.empty:
        return
    for _, group in frame.groupby("ts", sort=True):
        if len(group) >= min_players:
            yield group


def momentary_compactness(group: pd.DataFrame) -> float:
    """1 / (1 + bounding-box area) in raw degrees."""
    width = float(group["lon"].max() - group["lon"].min())
    height = float(group["lat"].max() - group["lat"].min())
    return 1.0 / (1.0 + width * height)


def team_compactness(frame: pd.DataFrame, min_players: int = MIN_FORMATION_PLAYERS) -> float:
    return safe_mean(
        [momentary_compactness(group) for group in group_positions_by_timestamp(frame, min_players)]
    )


def detect_formation(positions: dict[str, list[float]]) -> str:
    """Count players per third by average field y, e.g. "4-4-2"."""
    if len(positions) < MIN_FORMATION_PLAYERS:
        return "Unknown"
    defenders = midfielders = forwards = 0
    for _, y in positions.values():
        if y < DEFENSIVE_THIRD_MAX:
            defenders += 1
        elif y < MIDDLE_THIRD_MAX:
            midfielders += 1
        else:
            forwards += 1
    return f"{defenders}-{midfielders}-{forwards}"


def pressing_triggers(metrics: Sequence[SessionMetrics]) -> list[str]:
    triggers: list[str] = []
    if safe_mean([record.movement.accel_count for record in metrics]) > 20:
        triggers.append("High ball recovery attempts")
    triggers.extend(["Opponent ball possession in middle third", "Slow opponent build-up play"])
    return triggers


def transition_summary(frame: pd.DataFrame, thresholds: ScoringThresholds) -> dict[str, Any]:
    speed = frame["speed_kmh"]
    fast = speed[speed > thresholds.transition_kmh]
    very_fast_share = float((speed > thresholds.high_intensity_effort_kmh).mean()) if len(speed) else 0.0
    return {
        "averageTransitionSpeed": float(fast.mean()) if not fast.empty else 0.0,
        "transitionEfficiency": min(1.0, very_fast_share * 10.0),
        "counterAttackFrequency": "Medium",
    }


def extract_tactical_features(
    metrics: Sequence[SessionMetrics],
    frame: pd.DataFrame,
    thresholds: ScoringThresholds = ScoringThresholds(),
) -> dict[str, Any]:
    """Team shape, pressing, transition, defence, and attack blocks."""
    positions = {
        record.player_id: [record.tactical.avg_pos_x, record.tactical.avg_pos_y]
        for record in metrics
    }
    adherence = safe_mean([record.tactical.formation_adherence_pct for record in metrics])
    sync = safe_mean([record.tactical.team_sync_pct for record in metrics])

    return {
        "formation": {
            "detectedFormation": detect_formation(positions),
            "formationStability": adherence / 100.0,
            "playerPositions": positions,
        },
        "teamCompactness": team_compactness(frame),
        "pressing": {
            "averageIntensity": safe_mean([record.performance.intensity_score for record in metrics]),
            "pressingEffectiveness": safe_mean([record.performance.work_rate for record in metrics])
            / 100.0,
            "pressingTriggers": pressing_triggers(metrics),
        },
        "transitions": transition_summary(frame, thresholds),
        "defense": {
            "organizationLevel": adherence,
            "defensiveCompactness": "Good",
            "pressingCoordination": sync / 100.0,
        },
        "attack": {
            "attackingIntensity": safe_mean([record.movement.sprint_distance_m for record in metrics])
            / 1000.0,
            "widthUtilization": "Good",
            "penetrationAttempts": "Medium",
        },
    }


def _flat_tactical_signals(features: dict[str, Any]) -> dict[str, float]:
    return {
        "formationStability": features["formation"]["formationStability"],
        "teamCompactness": features["teamCompactness"],
        "pressingEffectiveness": features["pressing"]["pressingEffectiveness"],
        "transitionEfficiency": features["transitions"]["transitionEfficiency"],
    }


def tactical_recommendations(features: dict[str, Any]) -> dict[str, Any]:
    signals = _flat_tactical_signals(features)
    advice: list[str] = []
    training_focus: list[str] = []
    for key, threshold, text, focus in TACTICAL_ADVICE:
        if signals[key] < threshold:
            advice.append(text)
            training_focus.append(focus)
    return {
        "tacticalAdvice": advice,
        "trainingFocus": training_focus,
        "priority": first_matching_priority(signals, TACTICAL_PRIORITY_RULES),
        "expectedImprovement": "15-25% within 3-4 training sessions",
    }


def tactical_confidence(features: dict[str, Any]) -> float:
    confidence = 0.8
    if features["teamCompactness"] > 0.7:
        confidence += 0.1
    return min(0.95, confidence)


def default_tactical_prediction(session_id: str, predicted_at: datetime) -> Prediction:
    return build_prediction(
        PredictionType.TACTICAL_RECOMMENDATION,
        {},
        {
            "tacticalAdvice": ["Insufficient data for tactical analysis"],
            "trainingFocus": ["Basic positioning", "Team shape"],
            "priority": "LOW",
        },
        0.3,
        predicted_at,
        session_id=session_id,
    )


def score_tactical(
    metrics: Sequence[SessionMetrics],
    frame: pd.DataFrame,
    *,
    session_id: str,
    predicted_at: datetime,
    thresholds: ScoringThresholds = ScoringThresholds(),
) -> Prediction:
    """Session-wide tactical prediction from every player's metrics and samples."""
    if not metrics or frame.empty:
        return default_tactical_prediction(session_id, predicted_at)

    features = extract_tactical_features(metrics, frame, thresholds)
    return build_prediction(
        PredictionType.TACTICAL_RECOMMENDATION,
        features,
        tactical_recommendations(features),
        tactical_confidence(features),
        predicted_at,
        session_id=session_id,
    )


def extract_position_features(
    frame: pd.DataFrame, metrics: SessionMetrics, calibration: FieldCalibration = FieldCalibration()
) -> dict[str, Any]:
    return {
        "heatMap": build_heat_map(frame, calibration),
        "averagePosition": [metrics.tactical.avg_pos_x, metrics.tactical.avg_pos_y],
        "fieldCoverage": metrics.tactical.field_coverage_pct,
        "movementVariability": movement_variability_deg(frame),
    }


def position_recommendation(features: dict[str, Any]) -> dict[str, Any]:
    _, avg_y = features["averagePosition"]
    adjustments: list[str] = []
    if features["fieldCoverage"] < 60.0:
        adjustments.append("Increase field coverage - move more dynamically")
    if avg_y < 30:
        adjustments.append("Push higher up the field when team has possession")
    elif avg_y > 70:
        adjustments.append("Drop deeper to help with build-up play")
    return {
        "positionAdjustments": adjustments,
        "optimalZone": field_third(avg_y),
        "movementPattern": "Dynamic with structured positioning",
    }


def position_confidence(features: dict[str, Any]) -> float:
    confidence = 0.75
    if features["fieldCoverage"] > 70.0 and features["movementVariability"] > 0.1:
        confidence += 0.15
    return min(0.9, confidence)


def default_position_prediction(
    player_id: str, predicted_at: datetime, session_id: str | None = None
) -> Prediction:
    return build_prediction(
        PredictionType.OPTIMAL_POSITION,
        {},
        {
            "positionAdjustments": ["Maintain current position", "Focus on consistency"],
            "optimalZone": "Current zone",
        },
        0.4,
        predicted_at,
        player_id=player_id,
        session_id=session_id,
    )


def score_optimal_position(
    frame: pd.DataFrame,
    metrics: SessionMetrics | None,
    *,
    player_id: str,
    session_id: str,
    predicted_at: datetime,
    calibration: FieldCalibration = FieldCalibration(),
) -> Prediction:
    if frame.empty or metrics is None:
        return default_position_prediction(player_id, predicted_at, session_id)

    features = extract_position_features(frame, metrics, calibration)
    return build_prediction(
        PredictionType.OPTIMAL_POSITION,
        features,
        position_recommendation(features),
        position_confidence(features),
        predicted_at,
        player_id=player_id,
        session_id=session_id,
    )
