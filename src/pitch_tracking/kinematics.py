"""Distance, trend, and variability math shared by every calculator."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .constants import EARTH_RADIUS_M


def haversine_meters(lat1, lon1, lat2, lon2):
    """Great-circle distance in meters; accepts scalars or numpy arrays."""
    lat1_r = np.radians(lat1)
    lat2_r = np.radians(lat2)
    d_lat = np.radians(np.asarray(lat2, dtype=float) - np.asarray(lat1, dtype=float))
    d_lon = np.radians(np.asarray(lon2, dtype=float) - np.asarray(lon1, dtype=float))

    a = np.sin(d_lat / 2.0) ** 2 + np.cos(lat1_r) * np.cos(lat2_r) * np.sin(d_lon / 2.0) ** 2
    a = np.clip(a, 0.0, 1.0)
    c = 2.0 * np.arctan2(np.sqrt(a), np.sqrt(1.0 - a))
    distance = EARTH_RADIUS_M * c
    if np.ndim(distance) == 0:
        return float(distance)
    return distance


def safe_mean(values: Sequence[float]) -> float:
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return 0.0
    return float(arr.mean())


def linear_trend_slope(values: Sequence[float]) -> float:
    """Ordinary least-squares slope of value vs. index; 0 below two points."""
    arr = np.asarray(values, dtype=float)
    n = arr.size
    if n < 2:
        return 0.0
    x = np.arange(n, dtype=float)
    denominator = n * float((x * x).sum()) - float(x.sum()) ** 2
    if denominator == 0:
        return 0.0
    return float((n * float((x * arr).sum()) - float(x.sum()) * float(arr.sum())) / denominator)


def population_std(values: Sequence[float]) -> float:
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return 0.0
    return float(arr.std(ddof=0))


def coefficient_of_variation(values: Sequence[float]) -> float:
    """Population std / mean; 0 for empty input or a zero mean."""
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return 0.0
    mean = float(arr.mean())
    if mean == 0:
        return 0.0
    return float(arr.std(ddof=0)) / mean


def has_spike(values: Sequence[float], *, n_std: float = 2.0) -> bool:
    """True when any value sits more than `n_std` standard deviations from the mean."""
    arr = np.asarray(values, dtype=float)
    if arr.size < 3:
        return False
    mean = float(arr.mean())
    std = float(arr.std(ddof=0))
    return bool((np.abs(arr - mean) > n_std * std).any())


def relative_decline(first: float, last: float) -> float:
    """Fractional decline from `first` to `last`; 0 when `first` is 0."""
    if first == 0:
        return 0.0
    return (first - last) / first
