"""Injury-risk scoring over a player's recent session history."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol, Sequence

import numpy as np

from .kinematics import (
    coefficient_of_variation,
    has_spike,
    linear_trend_slope,
    relative_decline,
    safe_mean,
)
from .models import Prediction, PredictionType, SessionMetrics
from .scoring import (
    CategoryRule,
    build_prediction,
    clamp_confidence,
    classify_score,
    tiered_weight,
    validate_policy,
)

RISK_LEVELS = (
    CategoryRule("HIGH", 0.7),
    CategoryRule("MODERATE", 0.4),
    CategoryRule("LOW", 0.2),
    CategoryRule("MINIMAL", None),
)
validate_policy(RISK_LEVELS)

RISK_RECOMMENDATIONS = (
    (
        0.7,
        (
            "URGENT: Reduce training load by 30-40% for next 7 days",
            "Schedule immediate medical assessment",
            "Focus on recovery and regeneration protocols",
        ),
    ),
    (
        0.4,
        (
            "Reduce training intensity by 20% for next 3-5 days",
            "Increase recovery time between sessions",
            "Monitor movement patterns closely",
        ),
    ),
    (
        0.2,
        (
            "Maintain current load but monitor closely",
            "Ensure adequate sleep and nutrition",
            "Include preventive exercises in warm-up",
        ),
    ),
)

HIGH_LOAD_RATIO = 1.3
RECOVERY_RATIO = 0.8
SPIKE_WEIGHT = 0.2
SPEED_DECLINE_TIERS = ((0.1, 0.15),)
CONSECUTIVE_DAY_TIERS = ((5, 0.15), (3, 0.1))
ASYMMETRY_TIERS = ((0.15, 0.1),)


class AsymmetryModel(Protocol):
    def movement_asymmetry(self, history: Sequence[SessionMetrics]) -> float: ...

    def acceleration_pattern_change(self, history: Sequence[SessionMetrics]) -> bool: ...


@dataclass
class RandomizedAsymmetryModel:
    """Stand-in for left/right gait analysis; draws fresh values on every call.

    Results vary between runs unless `seed` is set.
    """

    seed: int | None = None
    _rng: np.random.Generator = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._rng = np.random.default_rng(self.seed)

    def movement_asymmetry(self, history: Sequence[SessionMetrics]) -> float:
        return 0.05 + float(self._rng.random()) * 0.1

    def acceleration_pattern_change(self, history: Sequence[SessionMetrics]) -> bool:
        return bool(self._rng.random() > 0.8)


@dataclass(frozen=True)
class FixedAsymmetryModel:
    asymmetry: float = 0.1
    pattern_change: bool = False

    def movement_asymmetry(self, history: Sequence[SessionMetrics]) -> float:
        return self.asymmetry

    def acceleration_pattern_change(self, history: Sequence[SessionMetrics]) -> bool:
        return self.pattern_change


def longest_run_above(values: Sequence[float], threshold: float) -> int:
    longest = current = 0
    for value in values:
        current = current + 1 if value > threshold else 0
        longest = max(longest, current)
    return longest


def extract_injury_features(
    history: Sequence[SessionMetrics], asymmetry: AsymmetryModel
) -> dict[str, Any]:
    """Workload features over history ordered oldest first."""
    ratios = [record.load.acute_chronic_ratio for record in history]
    loads = [record.movement.player_load for record in history]
    sprints = [float(record.movement.sprint_count) for record in history]
    max_speeds = [record.movement.max_speed_kmh for record in history]

    speed_decline = 0.0
    if len(max_speeds) >= 2:
        speed_decline = relative_decline(max_speeds[0], max_speeds[-1])

    return {
        "avgAcuteChronicRatio": safe_mean(ratios),
        "maxAcuteChronicRatio": max(ratios),
        "acuteChronicVariability": coefficient_of_variation(ratios),
        "avgPlayerLoad": safe_mean(loads),
        "playerLoadTrend": linear_trend_slope(loads),
        "playerLoadSpike": has_spike(loads),
        "avgSprintCount": safe_mean(sprints),
        "sprintCountTrend": linear_trend_slope(sprints),
        "maxSpeedDecline": speed_decline,
        "speedVariability": coefficient_of_variation(max_speeds),
        "consecutiveHighLoadDays": longest_run_above(ratios, HIGH_LOAD_RATIO),
        "recoveryDays": sum(1 for ratio in ratios if ratio < RECOVERY_RATIO),
        "workloadImbalance": coefficient_of_variation(loads),
        "movementAsymmetry": asymmetry.movement_asymmetry(history),
        "accelerationPatternChange": asymmetry.acceleration_pattern_change(history),
    }


def ratio_weight(features: dict[str, Any]) -> float:
    if features["maxAcuteChronicRatio"] > 1.5:
        return 0.4
    if features["maxAcuteChronicRatio"] > 1.3:
        return 0.25
    if features["avgAcuteChronicRatio"] > 1.2:
        return 0.1
    return 0.0


def injury_risk_score(features: dict[str, Any]) -> float:
    score = ratio_weight(features)
    if features["playerLoadSpike"]:
        score += SPIKE_WEIGHT
    score += tiered_weight(features["consecutiveHighLoadDays"], CONSECUTIVE_DAY_TIERS)
    score += tiered_weight(features["maxSpeedDecline"], SPEED_DECLINE_TIERS)
    score += tiered_weight(features["movementAsymmetry"], ASYMMETRY_TIERS)
    return min(1.0, score)


def injury_recommendations(risk: float, features: dict[str, Any]) -> list[str]:
    recommendations: list[str] = []
    for threshold, advice in RISK_RECOMMENDATIONS:
        if risk > threshold:
            recommendations.extend(advice)
            break
    if features["avgAcuteChronicRatio"] > 1.3:
        recommendations.append("Focus on gradual load progression")
    if features["movementAsymmetry"] > 0.1:
        recommendations.append("Address movement asymmetries with corrective exercises")
    return recommendations


def key_risk_factors(features: dict[str, Any]) -> list[str]:
    factors: list[str] = []
    if features["maxAcuteChronicRatio"] > HIGH_LOAD_RATIO:
        factors.append("Elevated acute:chronic workload ratio")
    if features["playerLoadSpike"]:
        factors.append("Recent spike in player load")
    if features["consecutiveHighLoadDays"] > 3:
        factors.append("Consecutive high-load training days")
    if features["maxSpeedDecline"] > 0.05:
        factors.append("Decline in maximum speed performance")
    return factors


def acute_chronic_risk_level(features: dict[str, Any]) -> str:
    """Level implied by the workload-ratio branch on its own."""
    if features["maxAcuteChronicRatio"] > 1.5:
        return "HIGH"
    if features["maxAcuteChronicRatio"] > 1.3 or features["avgAcuteChronicRatio"] > 1.2:
        return "MODERATE"
    return "LOW"


def injury_confidence(record_count: int) -> float:
    confidence = 0.7
    if record_count > 3:
        confidence += 0.2
    elif record_count == 1:
        confidence -= 0.2
    return clamp_confidence(confidence, floor=0.5, cap=0.95)


def default_injury_prediction(player_id: str, predicted_at: datetime) -> Prediction:
    return build_prediction(
        PredictionType.INJURY_RISK,
        {},
        {
            "injuryRisk": 0.1,
            "riskLevel": "MINIMAL",
            "recommendations": ["Continue current training regimen", "Monitor for data availability"],
            "keyFactors": ["Insufficient historical data"],
        },
        0.5,
        predicted_at,
        player_id=player_id,
    )


def score_injury_risk(
    history: Sequence[SessionMetrics],
    asymmetry: AsymmetryModel,
    *,
    player_id: str,
    predicted_at: datetime,
) -> Prediction:
    """Injury-risk prediction from history ordered oldest first."""
    if not history:
        return default_injury_prediction(player_id, predicted_at)

    features = extract_injury_features(history, asymmetry)
    risk = injury_risk_score(features)
    output = {
        "injuryRisk": risk,
        "riskLevel": classify_score(risk, RISK_LEVELS),
        "acuteChronicRiskLevel": acute_chronic_risk_level(features),
        "recommendations": injury_recommendations(risk, features),
        "keyFactors": key_risk_factors(features),
    }
    return build_prediction(
        PredictionType.INJURY_RISK,
        features,
        output,
        injury_confidence(len(history)),
        predicted_at,
        player_id=player_id,
    )
