"""Training-load models: acute/chronic workload and readiness."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol, Sequence

import pandas as pd

from .models import LoadMetrics, SessionMetrics

LOAD_PER_SAMPLE = 0.1


def acute_chronic_ratio(acute: float, chronic: float) -> float:
    """acute / chronic, or 0.0 when there is no chronic base."""
    if chronic <= 0:
        return 0.0
    return acute / chronic


def session_load_from_samples(sample_count: int, load_per_sample: float = LOAD_PER_SAMPLE) -> float:
    return load_per_sample * sample_count


class LoadModel(Protocol):
    history_days: int

    def compute(
        self, frame: pd.DataFrame, history: Sequence[SessionMetrics], anchor: datetime
    ) -> LoadMetrics: ...


@dataclass(frozen=True)
class SessionCountLoadModel:
    """Single-session load proxy.

    Chronic load is a fixed fraction of acute load, so the ratio is constant
    (1.25 with the defaults) regardless of history.
    """

    load_per_sample: float = LOAD_PER_SAMPLE
    chronic_fraction: float = 0.8
    stress_per_load: float = 10.0
    recovery_hours: float = 24.0
    readiness_score: float = 8.0
    history_days: int = 0

    def compute(
        self, frame: pd.DataFrame, history: Sequence[SessionMetrics], anchor: datetime
    ) -> LoadMetrics:
        session_load = session_load_from_samples(len(frame), self.load_per_sample)
        acute = session_load
        chronic = acute * self.chronic_fraction
        return LoadMetrics(
            acute_load=acute,
            chronic_load=chronic,
            acute_chronic_ratio=acute_chronic_ratio(acute, chronic),
            training_stress_score=self.stress_per_load * acute,
            recovery_hours=self.recovery_hours,
            readiness_score=self.readiness_score,
            session_load=session_load,
        )


@dataclass(frozen=True)
class RollingHistoryLoadModel:
    """Acute = 7-day load sum; chronic = 28-day load sum as a weekly average.

    `history` must exclude the session being computed; its load is added
    from `frame`.
    """

    load_per_sample: float = LOAD_PER_SAMPLE
    acute_days: int = 7
    chronic_days: int = 28
    stress_per_load: float = 10.0
    recovery_hours: float = 24.0
    readiness_score: float = 8.0

    @property
    def history_days(self) -> int:
        return self.chronic_days

    def compute(
        self, frame: pd.DataFrame, history: Sequence[SessionMetrics], anchor: datetime
    ) -> LoadMetrics:
        session_load = session_load_from_samples(len(frame), self.load_per_sample)
        acute = session_load + _load_since(history, anchor, self.acute_days)
        chronic_total = session_load + _load_since(history, anchor, self.chronic_days)
        chronic = chronic_total / (self.chronic_days / 7.0)
        return LoadMetrics(
            acute_load=acute,
            chronic_load=chronic,
            acute_chronic_ratio=acute_chronic_ratio(acute, chronic),
            training_stress_score=self.stress_per_load * session_load,
            recovery_hours=self.recovery_hours,
            readiness_score=self.readiness_score,
            session_load=session_load,
        )


def build_load_model(name: str) -> LoadModel:
    if name == "session_count":
        return SessionCountLoadModel()
    if name == "rolling_history":
        return RollingHistoryLoadModel()
    raise ValueError(f"Unknown load model: {name}")


def _load_since(history: Sequence[SessionMetrics], anchor: datetime, days: int) -> float:
    start = anchor - timedelta(days=days)
    return float(
        sum(
            record.load.session_load
            for record in history
            if start < record.calculated_at <= anchor
        )
    )
