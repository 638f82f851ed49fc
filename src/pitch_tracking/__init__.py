"""Wearable telemetry to session metrics and heuristic risk scoring."""

from .aggregator import (
    FullSessionWindow,
    SessionMetricsAggregator,
    TrailingWindow,
    WindowPolicy,
)
from .config import (
    PitchTrackingConfig,
    ProjectPaths,
    clear_project_path_cache,
    default_project_config,
    default_project_paths,
    resolve_data_file,
    resolve_output_dir,
    resolve_roster_file,
)
from .engine import RiskScoringEngine
from .errors import InsufficientDataError, PitchTrackingError, PlayerNotFoundError
from .load import RollingHistoryLoadModel, SessionCountLoadModel, acute_chronic_ratio
from .metrics import (
    EventThresholds,
    SpeedZone,
    assign_speed_zone,
    compute_movement_metrics,
    compute_performance_metrics,
    default_speed_zones,
    summarize_speed_zones,
)
from .models import (
    Player,
    PlayerProfile,
    Prediction,
    PredictionType,
    Sample,
    SessionMetrics,
)
from .pipeline import load_roster_csv, load_samples_csv, samples_to_frame
from .positioning import FieldCalibration, compute_tactical_metrics
from .presets import AnalyticsPreset, default_preset, preset_from_config
from .results_contract import (
    AnalyticsRunResults,
    load_results_contract,
    run_analytics,
    write_results_contract,
    write_results_tables,
)

__all__ = [
    "AnalyticsPreset",
    "AnalyticsRunResults",
    "EventThresholds",
    "FieldCalibration",
    "FullSessionWindow",
    "InsufficientDataError",
    "PitchTrackingConfig",
    "PitchTrackingError",
    "Player",
    "PlayerNotFoundError",
    "PlayerProfile",
    "Prediction",
    "PredictionType",
    "ProjectPaths",
    "RiskScoringEngine",
    "RollingHistoryLoadModel",
    "Sample",
    "SessionCountLoadModel",
    "SessionMetrics",
    "SessionMetricsAggregator",
    "SpeedZone",
    "TrailingWindow",
    "WindowPolicy",
    "acute_chronic_ratio",
    "assign_speed_zone",
    "clear_project_path_cache",
    "compute_movement_metrics",
    "compute_performance_metrics",
    "compute_tactical_metrics",
    "default_preset",
    "default_project_config",
    "default_project_paths",
    "default_speed_zones",
    "load_results_contract",
    "load_roster_csv",
    "load_samples_csv",
    "preset_from_config",
    "resolve_data_file",
    "resolve_output_dir",
    "resolve_roster_file",
    "run_analytics",
    "samples_to_frame",
    "summarize_speed_zones",
    "write_results_contract",
    "write_results_tables",
]
