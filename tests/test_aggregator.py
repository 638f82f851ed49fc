from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
import logging

import pytest

from pitch_tracking.aggregator import FullSessionWindow, SessionMetricsAggregator, TrailingWindow
from pitch_tracking.load import RollingHistoryLoadModel
from pitch_tracking.stores import InMemoryMetricsStore, InMemorySampleStore

from conftest import BASE_TS


class _FailingLoadModel:
    history_days = 0

    def compute(self, frame, history, anchor):
        raise RuntimeError("load backend unavailable")


def _aggregator(samples=(), **kwargs):
    sample_store = InMemorySampleStore(samples)
    metrics_store = InMemoryMetricsStore()
    return SessionMetricsAggregator(sample_store, metrics_store, **kwargs), sample_store, metrics_store


def test_batch_returns_none_without_enough_samples(make_sample, fixed_clock) -> None:
    aggregator, _, _ = _aggregator(clock=fixed_clock)
    assert aggregator.compute_session_metrics("p1", "s1") is None

    aggregator, _, _ = _aggregator([make_sample(0)], clock=fixed_clock)
    assert aggregator.compute_session_metrics("p1", "s1") is None


def test_batch_is_idempotent_with_fixed_clock(make_run, fixed_clock) -> None:
    aggregator, _, metrics_store = _aggregator(
        make_run([10.0, 25.0, 30.0, 8.0]), clock=fixed_clock
    )

    first = aggregator.compute_session_metrics("p1", "s1")
    second = aggregator.compute_session_metrics("p1", "s1")

    assert first is not None
    assert first == second
    assert first.calculated_at == fixed_clock()
    assert first.movement.sprint_count == 1
    assert first.load.acute_chronic_ratio == pytest.approx(1.25)
    assert metrics_store.get("p1", "s1") is None


def test_batch_persists_when_requested(make_run, fixed_clock) -> None:
    aggregator, _, metrics_store = _aggregator(make_run([10.0, 12.0]), clock=fixed_clock)
    result = aggregator.compute_session_metrics("p1", "s1", persist=True)

    assert metrics_store.get("p1", "s1") == result


def test_incremental_waits_for_second_sample(make_sample, fixed_clock) -> None:
    aggregator, sample_store, metrics_store = _aggregator(clock=fixed_clock)

    first = make_sample(0, speed_kmh=10.0)
    sample_store.add(first)
    assert aggregator.compute_incremental_metrics(first) is None
    assert metrics_store.all() == []

    second = make_sample(1, lat=0.0001, speed_kmh=12.0)
    sample_store.add(second)
    result = aggregator.compute_incremental_metrics(second)

    assert result is not None
    assert metrics_store.get("p1", "s1") == result


def test_incremental_uses_trailing_window(make_sample, fixed_clock) -> None:
    old = make_sample(0, speed_kmh=10.0)
    current = make_sample(400, lat=0.0001, speed_kmh=12.0)
    aggregator, _, metrics_store = _aggregator([old, current], clock=fixed_clock)

    assert aggregator.compute_incremental_metrics(current) is None
    assert metrics_store.all() == []


def test_incremental_ignores_samples_after_trigger(make_run, fixed_clock) -> None:
    samples = make_run([10.0, 12.0, 30.0])
    aggregator, _, _ = _aggregator(samples, clock=fixed_clock)

    result = aggregator.compute_incremental_metrics(samples[1])
    assert result is not None
    assert result.movement.max_speed_kmh == 12.0


def test_incremental_failure_is_logged_not_raised(make_run, fixed_clock, caplog) -> None:
    samples = make_run([10.0, 12.0])
    aggregator, _, metrics_store = _aggregator(
        samples, load_model=_FailingLoadModel(), clock=fixed_clock
    )

    with caplog.at_level(logging.ERROR, logger="pitch_tracking.aggregator"):
        assert aggregator.compute_incremental_metrics(samples[1]) is None

    assert metrics_store.all() == []
    assert any(record.getMessage() == "metrics.incremental.failed" for record in caplog.records)


def test_rolling_history_excludes_current_session(make_run) -> None:
    now = BASE_TS + timedelta(days=1)
    aggregator, sample_store, metrics_store = _aggregator(
        make_run([10.0] * 10, session_id="s1"),
        load_model=RollingHistoryLoadModel(),
        clock=lambda: now - timedelta(hours=1),
    )
    aggregator.compute_session_metrics("p1", "s1", persist=True)

    sample_store.extend(make_run([10.0] * 10, session_id="s2"))
    aggregator.clock = lambda: now
    second = aggregator.compute_session_metrics("p1", "s2")
    again = aggregator.compute_session_metrics("p1", "s1")

    assert second is not None and again is not None
    assert second.load.acute_load == pytest.approx(2.0)
    assert again.load.acute_load == pytest.approx(1.0)


def test_full_and_trailing_windows_agree_on_short_session(make_run, fixed_clock) -> None:
    aggregator, _, _ = _aggregator(make_run([10.0, 25.0, 30.0, 8.0]), clock=fixed_clock)

    full = aggregator.compute_window("p1", "s1", FullSessionWindow())
    trailing = aggregator.compute_window("p1", "s1", TrailingWindow(300.0))

    assert full == trailing
    assert full == aggregator.compute_session_metrics("p1", "s1")


def test_trailing_window_drops_samples_before_cutoff(make_run, fixed_clock) -> None:
    samples = make_run([10.0, 12.0, 30.0, 14.0])
    aggregator, _, _ = _aggregator(samples, clock=fixed_clock)

    rows = aggregator.window_samples("p1", "s1", TrailingWindow(1.0))
    anchored = aggregator.window_samples("p1", "s1", TrailingWindow(1.0), anchor=samples[2].timestamp)

    assert rows == samples[2:]
    assert anchored == samples[1:3]
    assert aggregator.window_samples("p1", "s1", FullSessionWindow()) == samples


def test_incremental_runs_for_different_players_in_parallel(make_run, fixed_clock) -> None:
    players = [f"p{index}" for index in range(6)]
    samples = [
        sample
        for player_id in players
        for sample in make_run([10.0, 14.0, 22.0], player_id=player_id)
    ]
    aggregator, _, metrics_store = _aggregator(samples, clock=fixed_clock)
    triggers = [sample for sample in samples if sample.timestamp == samples[2].timestamp]

    with ThreadPoolExecutor(max_workers=len(players)) as pool:
        results = list(pool.map(aggregator.compute_incremental_metrics, triggers))

    assert all(result is not None for result in results)
    stored = metrics_store.all()
    assert sorted(record.player_id for record in stored) == players
    assert all(record.movement.max_speed_kmh == 22.0 for record in stored)
