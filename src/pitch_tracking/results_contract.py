"""One-pass analytics run and results-contract utilities."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
import json
import logging
from pathlib import Path
from typing import Any, Sequence

import numpy as np
import pandas as pd

from .aggregator import Clock, SessionMetricsAggregator, utc_now
from .engine import RiskScoringEngine
from .errors import PlayerNotFoundError
from .injury_risk import AsymmetryModel
from .load import LoadModel
from .metrics import summarize_speed_zones
from .models import Player, Prediction, Sample, SessionMetrics
from .pipeline import samples_to_frame, session_keys
from .presets import AnalyticsPreset, default_preset
from .stores import (
    InMemoryMetricsStore,
    InMemoryPlayerRegistry,
    InMemoryPredictionStore,
    InMemorySampleStore,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalyticsRunResults:
    """Container for one-pass analytics outputs."""

    preset: AnalyticsPreset
    session_metrics: list[SessionMetrics]
    predictions: list[Prediction]
    speed_zone_summary: pd.DataFrame
    skipped_sessions: list[tuple[str, str]]


def run_analytics(
    samples: Sequence[Sample],
    players: Sequence[Player] = (),
    *,
    preset: AnalyticsPreset | None = None,
    load_model: LoadModel | None = None,
    asymmetry: AsymmetryModel | None = None,
    clock: Clock = utc_now,
) -> AnalyticsRunResults:
    """Batch metrics for every player session, then every scorer."""
    preset = preset or default_preset()
    sample_store = InMemorySampleStore(samples)
    metrics_store = InMemoryMetricsStore()
    registry = InMemoryPlayerRegistry(players)
    prediction_store = InMemoryPredictionStore()

    aggregator = SessionMetricsAggregator(
        sample_store, metrics_store, preset=preset, load_model=load_model, clock=clock
    )
    engine = RiskScoringEngine(
        sample_store,
        metrics_store,
        registry,
        prediction_store,
        preset=preset,
        asymmetry=asymmetry,
        clock=clock,
    )

    keys = session_keys(samples)
    computed: list[SessionMetrics] = []
    skipped: list[tuple[str, str]] = []
    zone_frames: list[pd.DataFrame] = []
    for player_id, session_id in keys:
        result = aggregator.compute_session_metrics(player_id, session_id, persist=True)
        if result is None:
            skipped.append((player_id, session_id))
            continue
        computed.append(result)
        frame = samples_to_frame(sample_store.samples_for(player_id, session_id))
        zones = summarize_speed_zones(frame, preset.speed_zones)
        zones.insert(0, "session_id", session_id)
        zones.insert(0, "player_id", player_id)
        zone_frames.append(zones)

    predictions: list[Prediction] = []
    for player_id, session_id in keys:
        predictions.append(engine.score_fatigue(player_id, session_id))
        predictions.append(engine.score_optimal_position(player_id, session_id))

    for player_id in dict.fromkeys(player_id for player_id, _ in keys):
        predictions.append(engine.score_injury_risk(player_id))
        try:
            predictions.append(engine.score_performance(player_id))
        except PlayerNotFoundError:
            logger.warning("scoring.performance.unknown_player", extra={"player_id": player_id})

    for session_id in dict.fromkeys(session_id for _, session_id in keys):
        predictions.append(engine.score_tactical(session_id))

    speed_zone_summary = (
        pd.concat(zone_frames, ignore_index=True) if zone_frames else pd.DataFrame()
    )
    logger.info(
        "run.complete",
        extra={
            "sessions": len(computed),
            "skipped": len(skipped),
            "predictions": len(predictions),
        },
    )
    return AnalyticsRunResults(
        preset=preset,
        session_metrics=computed,
        predictions=predictions,
        speed_zone_summary=speed_zone_summary,
        skipped_sessions=skipped,
    )


def session_metrics_table(metrics: Sequence[SessionMetrics]) -> pd.DataFrame:
    """Flatten SessionMetrics into one row per player session."""
    rows = []
    for record in metrics:
        row: dict[str, Any] = {
            "player_id": record.player_id,
            "session_id": record.session_id,
            "calculated_at": record.calculated_at.isoformat(),
        }
        for prefix, block in (
            ("movement", record.movement),
            ("performance", record.performance),
            ("tactical", record.tactical),
            ("load", record.load),
        ):
            for key, value in asdict(block).items():
                if isinstance(value, dict):
                    continue
                row[f"{prefix}_{key}"] = value
        rows.append(row)
    return pd.DataFrame(rows)


def predictions_table(predictions: Sequence[Prediction]) -> pd.DataFrame:
    rows = [
        {
            "id": prediction.id,
            "type": prediction.type.value,
            "player_id": prediction.player_id,
            "session_id": prediction.session_id,
            "confidence": prediction.confidence,
            "predicted_at": prediction.predicted_at.isoformat(),
            "output": json.dumps(_jsonify_obj(prediction.output), sort_keys=True),
        }
        for prediction in predictions
    ]
    return pd.DataFrame(
        rows,
        columns=["id", "type", "player_id", "session_id", "confidence", "predicted_at", "output"],
    )


def write_results_tables(results: AnalyticsRunResults, output_dir: str | Path) -> dict[str, Path]:
    """Write the canonical CSV tables."""
    root = Path(output_dir)
    table_dir = root / "tables"
    table_dir.mkdir(parents=True, exist_ok=True)

    table_map: dict[str, tuple[pd.DataFrame, Path]] = {
        "session_metrics": (
            session_metrics_table(results.session_metrics),
            table_dir / "session_metrics.csv",
        ),
        "speed_zones": (results.speed_zone_summary, table_dir / "speed_zones.csv"),
        "predictions": (predictions_table(results.predictions), table_dir / "predictions.csv"),
    }
    paths: dict[str, Path] = {}
    for key, (frame, path) in table_map.items():
        frame.to_csv(path, index=False)
        paths[key] = path
    return paths


def write_results_contract(
    results: AnalyticsRunResults,
    *,
    input_path: str | Path,
    output_dir: str | Path,
    table_paths: dict[str, Path] | None = None,
    figure_paths: dict[str, Path] | None = None,
) -> Path:
    """Write `results.json` with thresholds, metrics, predictions, and artifact manifest."""
    root = Path(output_dir)
    root.mkdir(parents=True, exist_ok=True)
    contract_path = root / "results.json"

    preset = results.preset
    contract: dict[str, Any] = {
        "generated_at_utc": pd.Timestamp.now(tz="UTC").isoformat(),
        "input_path": str(Path(input_path)),
        "output_dir": str(root),
        "model": {"name": preset.name, "rationale": preset.rationale},
        "thresholds": {
            "speed_zones_kmh": [
                {
                    "name": zone.name,
                    "lower_kmh_exclusive": zone.lower_kmh,
                    "upper_kmh_inclusive": zone.upper_kmh,
                }
                for zone in preset.speed_zones
            ],
            "events": asdict(preset.event_thresholds),
            "scoring": asdict(preset.scoring_thresholds),
            "realtime_window_s": preset.realtime_window_s,
            "injury_history_days": preset.injury_history_days,
            "performance_history_days": preset.performance_history_days,
        },
        "session_metrics": [record.to_dict() for record in results.session_metrics],
        "skipped_sessions": [
            {"player_id": player_id, "session_id": session_id}
            for player_id, session_id in results.skipped_sessions
        ],
        "predictions": [prediction.to_dict() for prediction in results.predictions],
        "artifacts": {
            "tables": {
                key: str(path.relative_to(root)) if path.is_relative_to(root) else str(path)
                for key, path in (table_paths or {}).items()
            },
            "figures": {
                key: str(path.relative_to(root)) if path.is_relative_to(root) else str(path)
                for key, path in (figure_paths or {}).items()
            },
        },
    }

    contract_path.write_text(json.dumps(_jsonify_obj(contract), indent=2) + "\n", encoding="utf-8")
    logger.info("results.contract.written", extra={"path": str(contract_path)})
    return contract_path


def load_results_contract(output_dir: str | Path) -> dict[str, Any]:
    """Load `results.json` from an output directory."""
    contract_path = Path(output_dir) / "results.json"
    if not contract_path.exists():
        raise FileNotFoundError(
            f"Missing results contract at {contract_path}. Run the pitch-tracking CLI first."
        )
    return json.loads(contract_path.read_text(encoding="utf-8"))


def _jsonify_obj(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _jsonify_obj(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonify_obj(item) for item in value]
    if isinstance(value, (pd.Timestamp, datetime)):
        return value.isoformat()
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and not np.isfinite(value):
        return None
    return value
