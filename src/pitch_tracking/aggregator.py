"""Per-player session aggregation for batch and incremental runs."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import logging
from typing import Callable, Protocol

from .errors import InsufficientDataError
from .estimators import PerformanceEstimator, TacticalEstimator
from .load import LoadModel, SessionCountLoadModel
from .metrics import compute_movement_metrics, compute_performance_metrics
from .models import Sample, SessionMetrics
from .pipeline import samples_to_frame
from .positioning import FieldCalibration, compute_tactical_metrics
from .presets import AnalyticsPreset, default_preset
from .stores import MetricsStore, SampleStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class WindowPolicy(Protocol):
    def since(self, anchor: datetime) -> datetime | None: ...


@dataclass(frozen=True)
class FullSessionWindow:
    """Every sample recorded for the player in the session."""

    def since(self, anchor: datetime) -> datetime | None:
        return None


@dataclass(frozen=True)
class TrailingWindow:
    """Samples no older than `seconds` before the anchor."""

    seconds: float = 300.0

    def since(self, anchor: datetime) -> datetime | None:
        return anchor - timedelta(seconds=self.seconds)


class SessionMetricsAggregator:
    """Run every metrics calculator over one window and assemble the record."""

    def __init__(
        self,
        samples: SampleStore,
        metrics: MetricsStore,
        *,
        preset: AnalyticsPreset | None = None,
        load_model: LoadModel | None = None,
        performance_estimator: PerformanceEstimator | None = None,
        tactical_estimator: TacticalEstimator | None = None,
        calibration: FieldCalibration = FieldCalibration(),
        clock: Clock = utc_now,
    ) -> None:
        self.samples = samples
        self.metrics = metrics
        self.preset = preset or default_preset()
        self.load_model = load_model or SessionCountLoadModel()
        self.performance_estimator = performance_estimator
        self.tactical_estimator = tactical_estimator
        self.calibration = calibration
        self.clock = clock

    def compute_session_metrics(
        self, player_id: str, session_id: str, *, persist: bool = False
    ) -> SessionMetrics | None:
        """Batch metrics over the whole session; None when under two samples."""
        try:
            result = self.compute_window(player_id, session_id, FullSessionWindow())
        except InsufficientDataError as exc:
            logger.info(
                "metrics.batch.insufficient",
                extra={"player_id": player_id, "session_id": session_id, "samples": exc.available},
            )
            return None
        if persist:
            self.metrics.save(result)
        return result

    def compute_incremental_metrics(self, sample: Sample) -> SessionMetrics | None:
        """Best-effort refresh over the trailing window ending at `sample`.

        Never raises: failures are logged and the stored record is left as is.
        """
        window = TrailingWindow(self.preset.realtime_window_s)
        try:
            result = self.compute_window(
                sample.player_id, sample.session_id, window, anchor=sample.timestamp
            )
            self.metrics.save(result)
        except InsufficientDataError:
            return None
        except Exception:
            logger.exception(
                "metrics.incremental.failed",
                extra={"player_id": sample.player_id, "session_id": sample.session_id},
            )
            return None

        logger.debug(
            "metrics.incremental.saved",
            extra={"player_id": sample.player_id, "session_id": sample.session_id},
        )
        return result

    def window_samples(
        self,
        player_id: str,
        session_id: str,
        window: WindowPolicy,
        anchor: datetime | None = None,
    ) -> list[Sample]:
        """Samples inside `window`, ending at `anchor` or at the latest sample."""
        if anchor is None:
            rows = self.samples.samples_for(player_id, session_id)
            if not rows:
                return rows
            since = window.since(rows[-1].timestamp)
            return rows if since is None else [row for row in rows if row.timestamp >= since]

        rows = self.samples.samples_for(player_id, session_id, since=window.since(anchor))
        return [row for row in rows if row.timestamp <= anchor]

    def compute_window(
        self,
        player_id: str,
        session_id: str,
        window: WindowPolicy,
        anchor: datetime | None = None,
    ) -> SessionMetrics:
        """Build one SessionMetrics record; raises InsufficientDataError under two samples."""
        frame = samples_to_frame(self.window_samples(player_id, session_id, window, anchor))
        movement = compute_movement_metrics(
            frame, self.preset.speed_zones, self.preset.event_thresholds
        )
        performance = compute_performance_metrics(frame, self.performance_estimator)
        tactical = compute_tactical_metrics(frame, self.calibration, self.tactical_estimator)

        calculated_at = self.clock()
        history: list[SessionMetrics] = []
        if self.load_model.history_days > 0:
            history = [
                record
                for record in self.metrics.for_player_between(
                    player_id,
                    calculated_at - timedelta(days=self.load_model.history_days),
                    calculated_at,
                )
                if record.session_id != session_id
            ]
        load = self.load_model.compute(frame, history, calculated_at)

        return SessionMetrics(
            player_id=player_id,
            session_id=session_id,
            calculated_at=calculated_at,
            movement=movement,
            performance=performance,
            tactical=tactical,
            load=load,
        )
