"""In-session fatigue scoring from a player's sorted sample frame."""

from __future__ import annotations

from datetime import datetime
from typing import Any

import numpy as np
import pandas as pd

from .kinematics import population_std, relative_decline, safe_mean
from .models import Prediction, PredictionType, SessionMetrics
from .presets import ScoringThresholds
from .scoring import CategoryRule, build_prediction, classify_score, tiered_weight, validate_policy

FATIGUE_CATEGORIES = (
    CategoryRule("SEVERE", 0.8),
    CategoryRule("HIGH", 0.6),
    CategoryRule("MODERATE", 0.3),
    CategoryRule("LOW", None),
)
validate_policy(FATIGUE_CATEGORIES)

# category -> (immediate actions, recovery protocols, recovery estimate)
FATIGUE_PLAYBOOK: dict[str, tuple[tuple[str, ...], tuple[str, ...], str]] = {
    "SEVERE": (
        (
            "IMMEDIATE SUBSTITUTION RECOMMENDED",
            "Complete rest for remainder of session",
            "Medical assessment required",
        ),
        ("Ice bath therapy", "Extended sleep (9+ hours)", "Nutritional recovery plan"),
        "24-48 hours",
    ),
    "HIGH": (
        (
            "Consider substitution in next 10-15 minutes",
            "Reduce intensity - avoid high-speed runs",
            "Monitor closely for further decline",
        ),
        ("Active recovery protocols", "Hydration focus", "Light stretching"),
        "12-24 hours",
    ),
    "MODERATE": (
        (
            "Manage workload - avoid unnecessary sprints",
            "Increase recovery time between efforts",
            "Monitor for progression to high fatigue",
        ),
        ("Proper cool-down routine", "Adequate hydration"),
        "6-12 hours",
    ),
    "LOW": (
        ("Continue current activity level", "Maintain awareness of fatigue indicators"),
        ("Standard recovery protocols",),
        "2-6 hours",
    ),
}

SPEED_DECLINE_TIERS = ((15.0, 0.3), (10.0, 0.2), (5.0, 0.1))
HR_ZONE_TIERS = ((60.0, 0.25), (40.0, 0.15))
EFFICIENCY_TIERS = ((50.0, 0.2), (75.0, 0.1))
ACCEL_DECLINE_TIERS = ((20.0, 0.15), (10.0, 0.1))
RECOVERY_TIERS = ((120.0, 0.1), (90.0, 0.05))

MIN_FATIGUE_SAMPLES = 2


def quarter_decline(values: np.ndarray) -> dict[str, float]:
    """Compare the first and last quarter means; decline is in percent."""
    q = len(values) // 4
    first = safe_mean(values[:q])
    last = safe_mean(values[3 * q :])
    return {
        "first": first,
        "last": last,
        "decline_pct": relative_decline(first, last) * 100.0,
    }


def high_intensity_mask(frame: pd.DataFrame, thresholds: ScoringThresholds) -> np.ndarray:
    speed = frame["speed_kmh"].to_numpy(dtype=float)
    accel = np.abs(frame["accel_ms2"].to_numpy(dtype=float))
    return (speed > thresholds.high_intensity_effort_kmh) | (accel > thresholds.effort_accel_ms2)


def recovery_gaps_s(frame: pd.DataFrame, thresholds: ScoringThresholds = ScoringThresholds()) -> list[float]:
    """Seconds from each end of a high-intensity effort to the next effort.

    An effort ends at the first non-intensive sample after an intensive one.
    Ends with no later effort contribute nothing.
    """
    if len(frame) < 2:
        return []
    hi = high_intensity_mask(frame, thresholds)
    hi_idx = np.flatnonzero(hi)
    end_idx = np.flatnonzero(~hi[1:] & hi[:-1]) + 1
    if hi_idx.size == 0 or end_idx.size == 0:
        return []

    next_pos = np.searchsorted(hi_idx, end_idx, side="right")
    has_next = next_pos < hi_idx.size
    ts = frame["ts"]
    gaps = (
        ts.iloc[hi_idx[next_pos[has_next]]].to_numpy()
        - ts.iloc[end_idx[has_next]].to_numpy()
    )
    return [float(gap / np.timedelta64(1, "s")) for gap in gaps]


def movement_efficiency(frame: pd.DataFrame) -> float:
    """Segment distance per unit of |acceleration|; 0 when nothing accelerates."""
    seg = frame.iloc[1:]
    total_accel = float(seg["accel_ms2"].abs().sum())
    if total_accel <= 0:
        return 0.0
    return float(seg["step_distance_m"].sum()) / total_accel


def extract_fatigue_features(
    frame: pd.DataFrame,
    metrics: SessionMetrics | None = None,
    thresholds: ScoringThresholds = ScoringThresholds(),
) -> dict[str, Any]:
    speed = quarter_decline(frame["speed_kmh"].to_numpy(dtype=float))
    accel = quarter_decline(np.abs(frame["accel_ms2"].to_numpy(dtype=float)))

    heart_rate = frame["heart_rate"].dropna()
    heart_rate = heart_rate[heart_rate > 0].to_numpy(dtype=float)
    hr_block: dict[str, Any] = {"available": bool(heart_rate.size)}
    if heart_rate.size:
        zone_floor = thresholds.hr_high_zone_bpm
        hr_block.update(
            {
                "averageHR": float(heart_rate.mean()),
                "maxHR": int(heart_rate.max()),
                "hrVariability": population_std(heart_rate) if heart_rate.size >= 2 else 0.0,
                "timeInZone4Plus": float((heart_rate > zone_floor).mean() * 100.0),
            }
        )

    features: dict[str, Any] = {
        "speedDecline": {
            "firstQuarterSpeed": speed["first"],
            "lastQuarterSpeed": speed["last"],
            "speedDeclinePercentage": speed["decline_pct"],
        },
        "heartRate": hr_block,
        "movementEfficiency": movement_efficiency(frame),
        "acceleration": {
            "firstQuarterAcceleration": accel["first"],
            "lastQuarterAcceleration": accel["last"],
            "accelerationDecline": accel["decline_pct"],
        },
        "recoveryTimes": recovery_gaps_s(frame, thresholds),
    }
    if metrics is not None:
        features["playerLoad"] = metrics.movement.player_load
        features["workRate"] = metrics.performance.work_rate
    return features


def fatigue_score(features: dict[str, Any]) -> float:
    score = tiered_weight(features["speedDecline"]["speedDeclinePercentage"], SPEED_DECLINE_TIERS)
    hr_block = features["heartRate"]
    if hr_block["available"]:
        score += tiered_weight(hr_block["timeInZone4Plus"], HR_ZONE_TIERS)
    score += tiered_weight(features["movementEfficiency"], EFFICIENCY_TIERS, below=True)
    score += tiered_weight(features["acceleration"]["accelerationDecline"], ACCEL_DECLINE_TIERS)
    recoveries = features["recoveryTimes"]
    if recoveries:
        score += tiered_weight(safe_mean(recoveries), RECOVERY_TIERS)
    return min(1.0, score)


def key_fatigue_indicators(features: dict[str, Any]) -> list[str]:
    indicators: list[str] = []
    if features["speedDecline"]["speedDeclinePercentage"] > 10:
        indicators.append("Significant speed decline detected")
    if features["acceleration"]["accelerationDecline"] > 15:
        indicators.append("Reduced acceleration capacity")
    if features["movementEfficiency"] < 60:
        indicators.append("Decreased movement efficiency")
    recoveries = features["recoveryTimes"]
    if recoveries and safe_mean(recoveries) > 100:
        indicators.append("Extended recovery times between efforts")
    return indicators


def fatigue_recommendations(level: float, features: dict[str, Any]) -> dict[str, Any]:
    category = classify_score(level, FATIGUE_CATEGORIES)
    actions, protocols, recovery = FATIGUE_PLAYBOOK[category]
    return {
        "fatigueLevel": level,
        "fatigueCategory": category,
        "immediateActions": list(actions),
        "recoveryProtocols": list(protocols),
        "estimatedRecoveryTime": recovery,
        "keyIndicators": key_fatigue_indicators(features),
    }


def fatigue_confidence(features: dict[str, Any]) -> float:
    confidence = 0.7
    if features["heartRate"]["available"]:
        confidence += 0.15
    if len(features["recoveryTimes"]) > 3:
        confidence += 0.1
    return min(0.95, confidence)


def default_fatigue_prediction(
    player_id: str, predicted_at: datetime, session_id: str | None = None
) -> Prediction:
    return build_prediction(
        PredictionType.FATIGUE_LEVEL,
        {},
        {
            "fatigueLevel": 0.2,
            "fatigueCategory": "LOW",
            "immediateActions": ["Insufficient data for fatigue analysis"],
            "recoveryProtocols": ["Standard recovery protocols"],
        },
        0.4,
        predicted_at,
        player_id=player_id,
        session_id=session_id,
    )


def score_fatigue(
    frame: pd.DataFrame,
    metrics: SessionMetrics | None,
    *,
    player_id: str,
    session_id: str,
    predicted_at: datetime,
    thresholds: ScoringThresholds = ScoringThresholds(),
) -> Prediction:
    """Fatigue prediction for one player session; the default under two samples."""
    if len(frame) < MIN_FATIGUE_SAMPLES:
        return default_fatigue_prediction(player_id, predicted_at, session_id)

    features = extract_fatigue_features(frame, metrics, thresholds)
    level = fatigue_score(features)
    return build_prediction(
        PredictionType.FATIGUE_LEVEL,
        features,
        fatigue_recommendations(level, features),
        fatigue_confidence(features),
        predicted_at,
        player_id=player_id,
        session_id=session_id,
    )
