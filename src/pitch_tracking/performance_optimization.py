"""Two-week performance trend analysis and training recommendations."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Sequence

from .kinematics import coefficient_of_variation, linear_trend_slope, safe_mean
from .models import Player, Prediction, PredictionType, SessionMetrics
from .scoring import PriorityRule, build_prediction, first_matching_priority

DEFAULT_SPEED_TARGET_KMH = 25.0
SPEED_POTENTIAL_FRACTION = 0.85

ROLE_PLANS: dict[str, tuple[tuple[str, ...], tuple[str, ...]]] = {
    "FORWARD": (
        (
            "Focus on explosive sprint training for breakaways",
            "Improve finishing under fatigue conditions",
        ),
        ("Sprint starts from various positions", "Finishing drills with fatigue"),
    ),
    "MIDFIELDER": (
        (
            "Enhance aerobic capacity for box-to-box play",
            "Work on acceleration for quick direction changes",
        ),
        ("Interval running", "Change of direction drills"),
    ),
    "DEFENDER": (
        (
            "Improve reactive speed for defensive actions",
            "Focus on sustained running for defensive coverage",
        ),
        ("Defensive positioning drills", "1v1 defensive scenarios"),
    ),
    "GOALKEEPER": (
        (
            "Enhance explosive power for diving and jumping",
            "Improve agility and reaction time",
        ),
        ("Plyometric exercises", "Reaction time drills"),
    ),
}
ROLE_PLANS["STRIKER"] = ROLE_PLANS["FORWARD"]

PRIORITY_RULES = (
    PriorityRule(
        "HIGH",
        lambda f: f["maxSpeedTrend"] < -0.15
        or f["distanceTrend"] < -0.1
        or f["intensityTrend"] < -0.2,
    ),
    PriorityRule(
        "MEDIUM",
        lambda f: f["maxSpeedTrend"] < -0.05
        or f["distanceTrend"] < -0.05
        or f["intensityTrend"] < -0.1,
    ),
)


def intensity_peaks(history: Sequence[SessionMetrics]) -> list[dict[str, Any]]:
    """Sessions more than 20% above the mean intensity."""
    mean = safe_mean([record.performance.intensity_score for record in history])
    return [
        {
            "date": record.calculated_at.isoformat(),
            "intensity": record.performance.intensity_score,
            "maxSpeed": record.movement.max_speed_kmh,
            "workRate": record.performance.work_rate,
        }
        for record in history
        if record.performance.intensity_score > mean * 1.2
    ]


def intensity_valleys(history: Sequence[SessionMetrics]) -> list[dict[str, Any]]:
    """Sessions more than 20% below the mean intensity, with likely causes."""
    mean = safe_mean([record.performance.intensity_score for record in history])
    return [
        {
            "date": record.calculated_at.isoformat(),
            "intensity": record.performance.intensity_score,
            "possibleCauses": possible_causes(record),
        }
        for record in history
        if record.performance.intensity_score < mean * 0.8
    ]


def possible_causes(record: SessionMetrics) -> list[str]:
    causes: list[str] = []
    if record.load.acute_chronic_ratio > 1.3:
        causes.append("High training load")
    if record.load.readiness_score < 6.0:
        causes.append("Poor readiness/recovery")
    if record.performance.max_hr < 160:
        causes.append("Low cardiovascular engagement")
    return causes


def recovery_efficiency(history: Sequence[SessionMetrics]) -> float:
    if not history:
        return 0.0
    return sum(record.load.readiness_score for record in history) / (len(history) * 10.0)


def extract_performance_features(
    history: Sequence[SessionMetrics], player: Player
) -> dict[str, Any]:
    max_speeds = [record.movement.max_speed_kmh for record in history]
    distances = [record.movement.total_distance_m for record in history]
    intensities = [record.performance.intensity_score for record in history]
    work_rates = [record.performance.work_rate for record in history]

    features: dict[str, Any] = {
        "avgMaxSpeed": safe_mean(max_speeds),
        "maxSpeedTrend": linear_trend_slope(max_speeds),
        "speedConsistency": 1.0 - coefficient_of_variation(max_speeds),
        "avgTotalDistance": safe_mean(distances),
        "distanceTrend": linear_trend_slope(distances),
        "enduranceConsistency": 1.0 - coefficient_of_variation(distances),
        "avgIntensity": safe_mean(intensities),
        "intensityTrend": linear_trend_slope(intensities),
        "avgWorkRate": safe_mean(work_rates),
        "workRateTrend": linear_trend_slope(work_rates),
    }
    profile = player.profile
    if profile is not None:
        features["speedUtilization"] = (
            features["avgMaxSpeed"] / profile.max_speed_kmh if profile.max_speed_kmh > 0 else 0.0
        )
        features["fitnessLevel"] = profile.fitness_level

    features["performancePeaks"] = intensity_peaks(history)
    features["performanceValleys"] = intensity_valleys(history)
    features["recoveryEfficiency"] = recovery_efficiency(history)
    return features


def role_plan(role: str | None) -> tuple[list[str], list[str]]:
    if not role:
        return [], []
    recommendations, training = ROLE_PLANS.get(role.strip().upper(), ((), ()))
    return list(recommendations), list(training)


def optimization_plan(features: dict[str, Any], player: Player) -> dict[str, Any]:
    recommendations: list[str] = []
    training_focus: list[str] = []

    speed_target = DEFAULT_SPEED_TARGET_KMH
    if player.profile is not None:
        speed_target = player.profile.max_speed_kmh * SPEED_POTENTIAL_FRACTION

    if features["maxSpeedTrend"] < -0.1:
        recommendations.append("Focus on speed development - declining trend detected")
        training_focus.extend(["Sprint intervals", "Plyometric exercises"])
    elif features["avgMaxSpeed"] < speed_target:
        recommendations.append("Increase sprint training to reach speed potential")
        training_focus.append("Acceleration drills")

    if features["distanceTrend"] < -0.05:
        recommendations.append("Improve aerobic capacity - endurance declining")
        training_focus.extend(["Aerobic base training", "Tempo runs"])
    if features["enduranceConsistency"] < 0.8:
        recommendations.append("Work on consistency in endurance performance")
        training_focus.append("Steady-state cardio")

    if features["avgIntensity"] < 6.0:
        recommendations.append("Increase training intensity for better match preparation")
        training_focus.append("High-intensity intervals")

    if features["avgWorkRate"] < 80.0:
        recommendations.append("Improve work rate through tactical training")
        training_focus.extend(["Small-sided games", "Position-specific drills"])

    if features["recoveryEfficiency"] < 0.7:
        recommendations.append("Optimize recovery protocols")
        training_focus.extend(["Active recovery sessions", "Sleep hygiene improvement"])

    role_recommendations, role_training = role_plan(player.role)
    recommendations.extend(role_recommendations)
    training_focus.extend(role_training)

    return {
        "recommendations": recommendations,
        "trainingFocus": training_focus,
        "targetMetrics": {
            "targetMaxSpeed": features["avgMaxSpeed"] * 1.05,
            "targetWorkRate": min(features["avgWorkRate"] * 1.1, 95.0),
            "targetIntensity": min(features["avgIntensity"] * 1.15, 10.0),
        },
        "timeframe": "4-6 weeks",
        "priority": first_matching_priority(features, PRIORITY_RULES),
    }


def optimization_confidence(features: dict[str, Any]) -> float:
    confidence = 0.75
    if abs(features["maxSpeedTrend"]) > 0.1 or abs(features["distanceTrend"]) > 0.05:
        confidence += 0.15
    return min(0.95, confidence)


def default_performance_prediction(player_id: str, predicted_at: datetime) -> Prediction:
    return build_prediction(
        PredictionType.PERFORMANCE_DECLINE,
        {},
        {
            "recommendations": [
                "Establish baseline performance data",
                "Focus on consistent training attendance",
                "Monitor basic fitness metrics",
            ],
            "trainingFocus": ["General fitness", "Basic skills"],
            "priority": "LOW",
        },
        0.5,
        predicted_at,
        player_id=player_id,
    )


def score_performance(
    history: Sequence[SessionMetrics], player: Player, *, predicted_at: datetime
) -> Prediction:
    """Performance-optimization prediction from history ordered oldest first."""
    if not history:
        return default_performance_prediction(player.id, predicted_at)

    features = extract_performance_features(history, player)
    return build_prediction(
        PredictionType.PERFORMANCE_DECLINE,
        features,
        optimization_plan(features, player),
        optimization_confidence(features),
        predicted_at,
        player_id=player.id,
    )
