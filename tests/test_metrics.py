from __future__ import annotations

import pandas as pd
import pytest

from pitch_tracking.errors import InsufficientDataError
from pitch_tracking.metrics import (
    assign_speed_zone,
    compute_movement_metrics,
    compute_performance_metrics,
    default_speed_zones,
    sample_intensity,
    summarize_speed_zones,
)
from pitch_tracking.pipeline import samples_to_frame


def test_assign_speed_zone_edges_are_upper_inclusive() -> None:
    speeds = pd.Series([0.0, 7.0, 7.1, 14.0, 19.8, 24.0, 24.1])
    labels = assign_speed_zone(speeds, default_speed_zones())

    assert labels.tolist() == [
        "walking",
        "walking",
        "jogging",
        "jogging",
        "running",
        "high_intensity",
        "sprinting",
    ]


def test_movement_metrics_reads_segment_closing_samples(make_run) -> None:
    frame = samples_to_frame(make_run([10.0, 25.0, 30.0, 8.0]))
    metrics = compute_movement_metrics(frame)
    step = frame["step_distance_m"].iloc[1]

    assert metrics.sprint_count == 1
    assert metrics.max_speed_kmh == 30.0
    assert metrics.avg_speed_kmh == pytest.approx(21.0)
    assert metrics.total_distance_m == pytest.approx(3 * step)
    assert metrics.sprint_distance_m == pytest.approx(2 * step)
    assert metrics.speed_zone_distances["jogging"] == pytest.approx(step)


def test_zone_distances_sum_to_total_distance(make_run) -> None:
    frame = samples_to_frame(make_run([3.0, 9.0, 16.0, 21.0, 26.0, 12.0, 5.0]))
    metrics = compute_movement_metrics(frame)

    assert sum(metrics.speed_zone_distances.values()) == pytest.approx(metrics.total_distance_m)
    assert set(metrics.speed_zone_distances) == {zone.name for zone in default_speed_zones()}


def test_sustained_sprint_counts_once(make_run) -> None:
    frame = samples_to_frame(make_run([10.0, 26.0, 27.0, 28.0, 29.0, 30.0]))
    assert compute_movement_metrics(frame).sprint_count == 1

    repeated = samples_to_frame(make_run([10.0, 26.0, 12.0, 27.0, 8.0]))
    assert compute_movement_metrics(repeated).sprint_count == 2


def test_accel_decel_counts_are_strict_and_skip_first_sample(make_run) -> None:
    frame = samples_to_frame(
        make_run([5.0] * 5, accels=[9.0, 3.5, -3.5, 3.0, -3.0])
    )
    metrics = compute_movement_metrics(frame)

    assert metrics.accel_count == 1
    assert metrics.decel_count == 1


def test_jumps_and_player_load_use_imu_samples_only(make_sample) -> None:
    samples = [
        make_sample(0, imu=(0.0, 0.0, 20.0)),
        make_sample(1, lat=0.0001, imu=(0.0, 0.0, 16.0)),
        make_sample(2, lat=0.0002, imu=(3.0, 4.0, 0.0)),
        make_sample(3, lat=0.0003),
    ]
    metrics = compute_movement_metrics(samples_to_frame(samples))

    assert metrics.jump_count == 1
    assert metrics.player_load == pytest.approx(0.21)


def test_movement_metrics_require_two_samples(make_sample) -> None:
    with pytest.raises(InsufficientDataError) as excinfo:
        compute_movement_metrics(samples_to_frame([make_sample(0)]))
    assert excinfo.value.available == 1
    assert excinfo.value.required == 2


def test_performance_metrics_ignore_missing_heart_rate(make_run) -> None:
    frame = samples_to_frame(
        make_run([30.0, 0.0, 0.0, 0.0], accels=[0.0, 10.0, 0.0, 0.0], heart_rates=[0, 150, None, 170])
    )
    metrics = compute_performance_metrics(frame)

    assert metrics.max_hr == 170
    assert metrics.avg_hr == pytest.approx(160.0)
    assert metrics.intensity_score == pytest.approx((1.0 + 2.0) / 4)
    assert metrics.work_rate == 85.0
    assert metrics.vo2max == 45.0


def test_performance_metrics_without_heart_rate(make_run) -> None:
    metrics = compute_performance_metrics(samples_to_frame(make_run([10.0, 12.0])))
    assert metrics.max_hr == 0
    assert metrics.avg_hr == 0.0


def test_sample_intensity_is_capped(make_run) -> None:
    frame = samples_to_frame(make_run([300.0, 15.0], accels=[10.0, -5.0]))
    intensity = sample_intensity(frame)

    assert intensity.iloc[0] == 10.0
    assert intensity.iloc[1] == pytest.approx(1.5)


def test_summarize_speed_zones_reports_every_zone(make_run) -> None:
    zones = default_speed_zones()
    frame = samples_to_frame(make_run([10.0, 25.0, 30.0, 8.0]))
    summary = summarize_speed_zones(frame, zones)

    assert summary["speed_zone"].tolist() == [zone.name for zone in zones]
    assert summary["sample_count"].sum() == 3
    assert summary["time_s"].sum() == pytest.approx(3.0)
    assert summary["distance_pct"].sum() == pytest.approx(100.0)
    sprinting = summary.set_index("speed_zone").loc["sprinting"]
    assert sprinting["sample_count"] == 2
    assert sprinting["time_pct"] == pytest.approx(200.0 / 3.0)
    assert summary.set_index("speed_zone").loc["walking", "distance_m"] == 0.0
