"""Shared building blocks for the heuristic scorers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Mapping, Sequence

from .models import Prediction, PredictionType


@dataclass(frozen=True)
class CategoryRule:
    """Label applied when a score is strictly above `above`.

    A rule with `above=None` is the fallback and must come last.
    """

    label: str
    above: float | None


@dataclass(frozen=True)
class PriorityRule:
    label: str
    matches: Callable[[Mapping[str, float]], bool]


def validate_policy(rules: Sequence[CategoryRule]) -> None:
    """Check that thresholds strictly descend and end with one fallback."""
    if not rules:
        raise ValueError("category policy must not be empty")
    if rules[-1].above is not None:
        raise ValueError("category policy must end with a fallback rule")
    thresholds = [rule.above for rule in rules[:-1]]
    if any(value is None for value in thresholds):
        raise ValueError("only the last category rule may be a fallback")
    if any(b >= a for a, b in zip(thresholds, thresholds[1:])):
        raise ValueError("category thresholds must be strictly descending")


def classify_score(score: float, rules: Sequence[CategoryRule]) -> str:
    for rule in rules:
        if rule.above is None or score > rule.above:
            return rule.label
    raise ValueError("category policy has no fallback rule")


def first_matching_priority(
    features: Mapping[str, float], rules: Sequence[PriorityRule], default: str = "LOW"
) -> str:
    for rule in rules:
        if rule.matches(features):
            return rule.label
    return default


def tiered_weight(
    value: float, tiers: Sequence[tuple[float, float]], *, below: bool = False
) -> float:
    """Weight of the first tier crossed by `value`, or 0.

    Tiers are (threshold, weight) ordered from most to least severe. With
    `below=True` a tier is crossed when value < threshold.
    """
    for threshold, weight in tiers:
        if (value < threshold) if below else (value > threshold):
            return weight
    return 0.0


def clamp_confidence(value: float, *, floor: float = 0.0, cap: float = 1.0) -> float:
    return max(floor, min(cap, value))


def build_prediction(
    prediction_type: PredictionType,
    features: Mapping[str, Any],
    output: Mapping[str, Any],
    confidence: float,
    predicted_at: datetime,
    *,
    player_id: str | None = None,
    session_id: str | None = None,
) -> Prediction:
    return Prediction(
        type=prediction_type,
        input=dict(features),
        output=dict(output),
        confidence=clamp_confidence(confidence),
        predicted_at=predicted_at,
        player_id=player_id,
        session_id=session_id,
    )
