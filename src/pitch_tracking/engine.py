"""Entry points that load inputs from the stores and run each scorer."""

from __future__ import annotations

from datetime import timedelta
import logging

from .aggregator import Clock, utc_now
from .errors import PlayerNotFoundError
from .fatigue import MIN_FATIGUE_SAMPLES, score_fatigue
from .injury_risk import AsymmetryModel, RandomizedAsymmetryModel, score_injury_risk
from .models import Prediction
from .performance_optimization import score_performance
from .pipeline import samples_to_frame
from .positioning import FieldCalibration
from .presets import AnalyticsPreset, default_preset
from .stores import MetricsStore, PlayerRegistry, PredictionStore, SampleStore
from .tactical_analysis import score_optimal_position, score_tactical

logger = logging.getLogger(__name__)


class RiskScoringEngine:
    """Fatigue, injury, performance, tactical, and positioning predictions.

    Predictions computed from real inputs are appended to the prediction
    store; insufficient-data defaults are returned but not stored.
    """

    def __init__(
        self,
        samples: SampleStore,
        metrics: MetricsStore,
        players: PlayerRegistry,
        predictions: PredictionStore,
        *,
        preset: AnalyticsPreset | None = None,
        asymmetry: AsymmetryModel | None = None,
        calibration: FieldCalibration = FieldCalibration(),
        clock: Clock = utc_now,
    ) -> None:
        self.samples = samples
        self.metrics = metrics
        self.players = players
        self.predictions = predictions
        self.preset = preset or default_preset()
        self.asymmetry = asymmetry or RandomizedAsymmetryModel()
        self.calibration = calibration
        self.clock = clock

    def score_fatigue(self, player_id: str, session_id: str) -> Prediction:
        logger.info("scoring.fatigue.start", extra={"player_id": player_id, "session_id": session_id})
        frame = samples_to_frame(self.samples.samples_for(player_id, session_id))
        prediction = score_fatigue(
            frame,
            self.metrics.get(player_id, session_id),
            player_id=player_id,
            session_id=session_id,
            predicted_at=self.clock(),
            thresholds=self.preset.scoring_thresholds,
        )
        return self._record(prediction, stored=len(frame) >= MIN_FATIGUE_SAMPLES)

    def score_injury_risk(self, player_id: str) -> Prediction:
        logger.info("scoring.injury.start", extra={"player_id": player_id})
        now = self.clock()
        history = self.metrics.for_player_between(
            player_id, now - timedelta(days=self.preset.injury_history_days), now
        )
        if not history:
            logger.warning("scoring.injury.no_history", extra={"player_id": player_id})
        prediction = score_injury_risk(
            history, self.asymmetry, player_id=player_id, predicted_at=now
        )
        return self._record(prediction, stored=bool(history))

    def score_performance(self, player_id: str) -> Prediction:
        logger.info("scoring.performance.start", extra={"player_id": player_id})
        player = self.players.get(player_id)
        if player is None:
            raise PlayerNotFoundError(player_id)
        now = self.clock()
        history = self.metrics.for_player_between(
            player_id, now - timedelta(days=self.preset.performance_history_days), now
        )
        prediction = score_performance(history, player, predicted_at=now)
        return self._record(prediction, stored=bool(history))

    def score_tactical(self, session_id: str) -> Prediction:
        logger.info("scoring.tactical.start", extra={"session_id": session_id})
        session_metrics = self.metrics.for_session(session_id)
        frame = samples_to_frame(self.samples.samples_for_session(session_id))
        prediction = score_tactical(
            session_metrics,
            frame,
            session_id=session_id,
            predicted_at=self.clock(),
            thresholds=self.preset.scoring_thresholds,
        )
        return self._record(prediction, stored=bool(session_metrics) and not frame.empty)

    def score_optimal_position(self, player_id: str, session_id: str) -> Prediction:
        logger.info(
            "scoring.position.start", extra={"player_id": player_id, "session_id": session_id}
        )
        frame = samples_to_frame(self.samples.samples_for(player_id, session_id))
        session_metrics = self.metrics.get(player_id, session_id)
        prediction = score_optimal_position(
            frame,
            session_metrics,
            player_id=player_id,
            session_id=session_id,
            predicted_at=self.clock(),
            calibration=self.calibration,
        )
        return self._record(prediction, stored=not frame.empty and session_metrics is not None)

    def _record(self, prediction: Prediction, *, stored: bool) -> Prediction:
        if stored:
            self.predictions.append(prediction)
        logger.debug(
            "scoring.done",
            extra={
                "prediction_type": prediction.type.value,
                "confidence": prediction.confidence,
                "stored": stored,
            },
        )
        return prediction
