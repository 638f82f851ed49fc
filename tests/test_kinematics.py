from __future__ import annotations

import numpy as np
import pytest

from pitch_tracking.kinematics import (
    coefficient_of_variation,
    has_spike,
    haversine_meters,
    linear_trend_slope,
    relative_decline,
    safe_mean,
)


def test_haversine_one_degree_latitude() -> None:
    assert haversine_meters(0.0, 0.0, 1.0, 0.0) == pytest.approx(111_194.93, rel=1e-6)
    assert haversine_meters(51.5, -0.1, 51.5, -0.1) == 0.0


def test_haversine_vectorized_matches_scalar() -> None:
    lat1 = np.array([0.0, 10.0])
    lat2 = np.array([0.001, 10.001])
    lon = np.zeros(2)
    distances = haversine_meters(lat1, lon, lat2, lon)

    assert isinstance(distances, np.ndarray)
    assert distances[0] == pytest.approx(haversine_meters(0.0, 0.0, 0.001, 0.0))


def test_linear_trend_slope() -> None:
    assert linear_trend_slope([1.0, 2.0, 3.0, 4.0]) == pytest.approx(1.0)
    assert linear_trend_slope([4.0, 2.0, 0.0]) == pytest.approx(-2.0)
    assert linear_trend_slope([5.0, 5.0, 5.0]) == 0.0
    assert linear_trend_slope([7.0]) == 0.0
    assert linear_trend_slope([]) == 0.0


def test_coefficient_of_variation_guards_degenerate_input() -> None:
    assert coefficient_of_variation([]) == 0.0
    assert coefficient_of_variation([0.0, 0.0]) == 0.0
    assert coefficient_of_variation([2.0, 4.0]) == pytest.approx(1.0 / 3.0)


def test_has_spike() -> None:
    assert has_spike([1.0] * 9 + [10.0])
    assert not has_spike([1.0, 1.0, 1.0])
    assert not has_spike([1.0, 50.0])


def test_relative_decline_and_mean() -> None:
    assert relative_decline(10.0, 8.0) == pytest.approx(0.2)
    assert relative_decline(0.0, 5.0) == 0.0
    assert safe_mean([]) == 0.0
    assert safe_mean([1.0, 3.0]) == 2.0
