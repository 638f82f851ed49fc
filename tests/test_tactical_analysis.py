from __future__ import annotations

import pytest

from pitch_tracking.models import PredictionType
from pitch_tracking.pipeline import samples_to_frame
from pitch_tracking.tactical_analysis import (
    detect_formation,
    group_positions_by_timestamp,
    momentary_compactness,
    score_optimal_position,
    score_tactical,
    team_compactness,
)

from conftest import BASE_TS


def _team_snapshot(make_sample, players: int, t_s: float = 0.0, spread: float = 0.0, speed: float = 0.0):
    return [
        make_sample(
            t_s,
            player_id=f"p{i}",
            lat=0.0005 + i * spread,
            lon=0.0005 + i * spread,
            speed_kmh=speed,
        )
        for i in range(players)
    ]


def test_detect_formation_counts_thirds() -> None:
    ys = [10.0, 10.0, 10.0, 50.0, 50.0, 50.0, 80.0, 80.0]
    positions = {f"p{i}": [50.0, y] for i, y in enumerate(ys)}

    assert detect_formation(positions) == "3-3-2"
    assert detect_formation(dict(list(positions.items())[:6])) == "Unknown"


def test_group_positions_needs_seven_players(make_sample) -> None:
    frame = samples_to_frame(
        _team_snapshot(make_sample, 7, t_s=0) + _team_snapshot(make_sample, 6, t_s=1)
    )
    groups = list(group_positions_by_timestamp(frame))

    assert len(groups) == 1
    assert len(groups[0]) == 7


def test_compactness_shrinks_with_spread(make_sample) -> None:
    tight = samples_to_frame(_team_snapshot(make_sample, 7))
    loose = samples_to_frame(_team_snapshot(make_sample, 7, spread=1.0))

    assert team_compactness(tight) == pytest.approx(1.0)
    assert momentary_compactness(loose) == pytest.approx(1.0 / 37.0)
    assert team_compactness(samples_to_frame(_team_snapshot(make_sample, 3))) == 0.0


def test_score_tactical_flags_slow_transitions(make_sample, make_metrics) -> None:
    metrics = [make_metrics(player_id=f"p{i}") for i in range(8)]
    frame = samples_to_frame(_team_snapshot(make_sample, 8))
    prediction = score_tactical(metrics, frame, session_id="s1", predicted_at=BASE_TS)
    output = prediction.output

    assert prediction.type is PredictionType.TACTICAL_RECOMMENDATION
    assert prediction.session_id == "s1"
    assert output["tacticalAdvice"] == ["Work on faster transitions between phases"]
    assert output["trainingFocus"] == ["Transition speed drills"]
    assert output["priority"] == "LOW"
    assert prediction.input["formation"]["formationStability"] == pytest.approx(0.8)
    assert prediction.input["pressing"]["pressingEffectiveness"] == pytest.approx(0.85)
    assert prediction.confidence == pytest.approx(0.9)


def test_score_tactical_priority_for_loose_shape(make_sample, make_metrics) -> None:
    metrics = [make_metrics(player_id=f"p{i}", adherence=55.0) for i in range(8)]
    frame = samples_to_frame(_team_snapshot(make_sample, 8, spread=1.0, speed=25.0))
    output = score_tactical(metrics, frame, session_id="s1", predicted_at=BASE_TS).output

    assert output["priority"] == "HIGH"
    assert "Improve formation discipline - players drifting from positions" in output["tacticalAdvice"]
    assert "Work on faster transitions between phases" not in output["tacticalAdvice"]


def test_score_tactical_default_without_metrics() -> None:
    prediction = score_tactical([], samples_to_frame([]), session_id="s1", predicted_at=BASE_TS)

    assert prediction.output["priority"] == "LOW"
    assert prediction.confidence == pytest.approx(0.3)


def test_optimal_position_for_deep_player(make_sample, make_metrics) -> None:
    frame = samples_to_frame(
        [make_sample(0, lat=0.0002, lon=0.0005), make_sample(1, lat=0.0002, lon=0.0005)]
    )
    metrics = make_metrics(avg_pos=(50.0, 20.0), coverage=75.0)
    prediction = score_optimal_position(
        frame, metrics, player_id="p1", session_id="s1", predicted_at=BASE_TS
    )

    assert prediction.type is PredictionType.OPTIMAL_POSITION
    assert prediction.output["optimalZone"] == "Defensive third"
    assert prediction.output["positionAdjustments"] == [
        "Push higher up the field when team has possession"
    ]
    assert prediction.input["heatMap"] == {"zone_2_1": 2}
    assert prediction.confidence == pytest.approx(0.75)


def test_optimal_position_default_without_metrics(make_sample) -> None:
    frame = samples_to_frame([make_sample(0)])
    prediction = score_optimal_position(
        frame, None, player_id="p1", session_id="s1", predicted_at=BASE_TS
    )
    assert prediction.output["optimalZone"] == "Current zone"
    assert prediction.confidence == pytest.approx(0.4)
