"""Store interfaces the analytics core reads from and writes to.

The in-memory implementations back the CLI and the tests. Each guards its
containers with a lock; record-level races between concurrent writers for the
same key resolve last-write-wins.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta, timezone
import logging
import threading
from typing import Iterable, Protocol

from .models import Player, Prediction, PredictionType, Sample, SessionMetrics

logger = logging.getLogger(__name__)


class SampleStore(Protocol):
    def samples_for(
        self, player_id: str, session_id: str, since: datetime | None = None
    ) -> list[Sample]: ...

    def samples_for_session(self, session_id: str) -> list[Sample]: ...


class MetricsStore(Protocol):
    def save(self, metrics: SessionMetrics) -> None: ...

    def get(self, player_id: str, session_id: str) -> SessionMetrics | None: ...

    def for_player_between(
        self, player_id: str, start: datetime, end: datetime
    ) -> list[SessionMetrics]: ...

    def for_session(self, session_id: str) -> list[SessionMetrics]: ...


class PlayerRegistry(Protocol):
    def get(self, player_id: str) -> Player | None: ...


class PredictionStore(Protocol):
    def append(self, prediction: Prediction) -> None: ...


class InMemorySampleStore:
    def __init__(self, samples: Iterable[Sample] = ()) -> None:
        self._lock = threading.Lock()
        self._by_key: dict[tuple[str, str], list[Sample]] = defaultdict(list)
        self.extend(samples)

    def add(self, sample: Sample) -> None:
        with self._lock:
            self._by_key[(sample.player_id, sample.session_id)].append(sample)

    def extend(self, samples: Iterable[Sample]) -> None:
        with self._lock:
            for sample in samples:
                self._by_key[(sample.player_id, sample.session_id)].append(sample)

    def samples_for(
        self, player_id: str, session_id: str, since: datetime | None = None
    ) -> list[Sample]:
        """Samples for one player/session at or after `since`, in time order."""
        with self._lock:
            rows = list(self._by_key.get((player_id, session_id), ()))
        if since is not None:
            rows = [sample for sample in rows if sample.timestamp >= since]
        # sorted() is stable, so arrival order breaks timestamp ties
        return sorted(rows, key=lambda sample: sample.timestamp)

    def samples_for_session(self, session_id: str) -> list[Sample]:
        with self._lock:
            rows = [
                sample
                for (_, sid), samples in self._by_key.items()
                if sid == session_id
                for sample in samples
            ]
        return sorted(rows, key=lambda sample: sample.timestamp)

    def session_keys(self) -> list[tuple[str, str]]:
        with self._lock:
            return list(self._by_key)


class InMemoryMetricsStore:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[tuple[str, str], SessionMetrics] = {}

    def save(self, metrics: SessionMetrics) -> None:
        with self._lock:
            self._records[(metrics.player_id, metrics.session_id)] = metrics
        logger.debug(
            "metrics.saved",
            extra={"player_id": metrics.player_id, "session_id": metrics.session_id},
        )

    def get(self, player_id: str, session_id: str) -> SessionMetrics | None:
        with self._lock:
            return self._records.get((player_id, session_id))

    def for_player_between(
        self, player_id: str, start: datetime, end: datetime
    ) -> list[SessionMetrics]:
        """Records for `player_id` with start <= calculated_at <= end, oldest first."""
        with self._lock:
            rows = [
                record
                for (pid, _), record in self._records.items()
                if pid == player_id and start <= record.calculated_at <= end
            ]
        return sorted(rows, key=lambda record: record.calculated_at)

    def for_session(self, session_id: str) -> list[SessionMetrics]:
        with self._lock:
            return [record for (_, sid), record in self._records.items() if sid == session_id]

    def all(self) -> list[SessionMetrics]:
        with self._lock:
            return list(self._records.values())


class InMemoryPlayerRegistry:
    def __init__(self, players: Iterable[Player] = ()) -> None:
        self._lock = threading.Lock()
        self._players: dict[str, Player] = {}
        for player in players:
            self.add(player)

    def add(self, player: Player) -> None:
        with self._lock:
            self._players[player.id] = player

    def get(self, player_id: str) -> Player | None:
        with self._lock:
            return self._players.get(player_id)


class InMemoryPredictionStore:
    """Append-only prediction log with the usual lookup queries."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._predictions: list[Prediction] = []

    def append(self, prediction: Prediction) -> None:
        with self._lock:
            self._predictions.append(prediction)
        logger.debug(
            "prediction.saved",
            extra={"prediction_type": prediction.type.value, "player_id": prediction.player_id},
        )

    def all(self) -> list[Prediction]:
        return self._newest_first(lambda prediction: True)

    def for_player(self, player_id: str) -> list[Prediction]:
        return self._newest_first(lambda prediction: prediction.player_id == player_id)

    def for_session(self, session_id: str) -> list[Prediction]:
        return self._newest_first(lambda prediction: prediction.session_id == session_id)

    def by_type(self, prediction_type: PredictionType) -> list[Prediction]:
        return self._newest_first(lambda prediction: prediction.type == prediction_type)

    def latest(self, player_id: str, prediction_type: PredictionType) -> Prediction | None:
        matches = self._newest_first(
            lambda prediction: prediction.player_id == player_id
            and prediction.type == prediction_type
        )
        return matches[0] if matches else None

    def recent(self, hours: float, now: datetime | None = None) -> list[Prediction]:
        cutoff = (now or datetime.now(timezone.utc)) - timedelta(hours=hours)
        return self._newest_first(lambda prediction: prediction.predicted_at >= cutoff)

    def _newest_first(self, keep) -> list[Prediction]:
        with self._lock:
            rows = [prediction for prediction in self._predictions if keep(prediction)]
        return sorted(rows, key=lambda prediction: prediction.predicted_at, reverse=True)
