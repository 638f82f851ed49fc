from __future__ import annotations

import pytest

from pitch_tracking.fatigue import (
    fatigue_confidence,
    fatigue_recommendations,
    fatigue_score,
    quarter_decline,
    recovery_gaps_s,
    score_fatigue,
)
from pitch_tracking.models import PredictionType
from pitch_tracking.pipeline import samples_to_frame

from conftest import BASE_TS


def _features(
    *,
    speed_decline: float = 0.0,
    hr_zone: float | None = None,
    efficiency: float = 100.0,
    accel_decline: float = 0.0,
    recoveries: list[float] | None = None,
) -> dict:
    heart_rate = {"available": hr_zone is not None}
    if hr_zone is not None:
        heart_rate["timeInZone4Plus"] = hr_zone
    return {
        "speedDecline": {"speedDeclinePercentage": speed_decline},
        "heartRate": heart_rate,
        "movementEfficiency": efficiency,
        "acceleration": {"accelerationDecline": accel_decline},
        "recoveryTimes": recoveries or [],
    }


def test_quarter_decline_compares_first_and_last_quarter() -> None:
    result = quarter_decline([20.0, 20.0, 15.0, 15.0, 12.0, 12.0, 10.0, 10.0])
    assert result["first"] == 20.0
    assert result["last"] == 10.0
    assert result["decline_pct"] == pytest.approx(50.0)

    assert quarter_decline([5.0, 5.0, 5.0])["decline_pct"] == 0.0


def test_recovery_gaps_measure_time_to_next_effort(make_run) -> None:
    frame = samples_to_frame(make_run([25.0, 10.0, 10.0, 25.0, 10.0, 25.0]))
    assert recovery_gaps_s(frame) == [2.0, 1.0]

    trailing = samples_to_frame(make_run([25.0, 10.0, 10.0]))
    assert recovery_gaps_s(trailing) == []


def test_recovery_gaps_count_acceleration_efforts(make_run) -> None:
    frame = samples_to_frame(make_run([5.0, 5.0, 5.0, 5.0], accels=[4.0, 0.0, 0.0, -4.0]))
    assert recovery_gaps_s(frame) == [2.0]


def test_fatigue_score_sums_tiered_weights() -> None:
    features = _features(
        speed_decline=20.0, hr_zone=70.0, efficiency=40.0, accel_decline=25.0, recoveries=[130.0]
    )
    assert fatigue_score(features) == pytest.approx(1.0)
    assert fatigue_score(_features(speed_decline=12.0, efficiency=60.0)) == pytest.approx(0.3)


def test_fatigue_category_thresholds_are_strict() -> None:
    assert fatigue_recommendations(0.3, _features())["fatigueCategory"] == "LOW"
    assert fatigue_recommendations(0.31, _features())["fatigueCategory"] == "MODERATE"
    assert fatigue_recommendations(0.61, _features())["fatigueCategory"] == "HIGH"

    severe = fatigue_recommendations(0.9, _features())
    assert severe["fatigueCategory"] == "SEVERE"
    assert severe["estimatedRecoveryTime"] == "24-48 hours"
    assert "IMMEDIATE SUBSTITUTION RECOMMENDED" in severe["immediateActions"]


def test_fatigue_confidence_rewards_heart_rate_and_recoveries() -> None:
    assert fatigue_confidence(_features()) == pytest.approx(0.7)
    assert fatigue_confidence(_features(hr_zone=10.0)) == pytest.approx(0.85)
    assert fatigue_confidence(
        _features(hr_zone=10.0, recoveries=[10.0, 20.0, 30.0, 40.0])
    ) == pytest.approx(0.95)


def test_score_fatigue_on_declining_session(make_run) -> None:
    frame = samples_to_frame(make_run([30.0, 30.0, 15.0, 15.0, 15.0, 15.0, 10.0, 10.0]))
    prediction = score_fatigue(frame, None, player_id="p1", session_id="s1", predicted_at=BASE_TS)

    assert prediction.type is PredictionType.FATIGUE_LEVEL
    assert prediction.output["fatigueLevel"] == pytest.approx(0.5)
    assert prediction.output["fatigueCategory"] == "MODERATE"
    assert "Significant speed decline detected" in prediction.output["keyIndicators"]
    assert prediction.confidence == pytest.approx(0.7)
    assert prediction.input["heartRate"] == {"available": False}


def test_score_fatigue_defaults_without_samples(make_sample) -> None:
    frame = samples_to_frame([make_sample(0)])
    prediction = score_fatigue(frame, None, player_id="p1", session_id="s1", predicted_at=BASE_TS)

    assert prediction.output["fatigueCategory"] == "LOW"
    assert prediction.output["fatigueLevel"] == 0.2
    assert prediction.confidence == 0.4
