"""Centralized project configuration and path resolution."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os
from pathlib import Path
import tomllib
from typing import Any, Literal

from omegaconf import OmegaConf
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .constants import (
    ACCELERATION_THRESHOLD_MS2,
    ASSUMED_MAX_HR_BPM,
    HIGH_HR_ZONE_FRACTION,
    HIGH_INTENSITY_EFFORT_KMH,
    HIGH_INTENSITY_THRESHOLD_KMH,
    INJURY_HISTORY_DAYS,
    JUMP_VERTICAL_ACCEL_MS2,
    PERFORMANCE_HISTORY_DAYS,
    REALTIME_WINDOW_S,
    SPRINT_THRESHOLD_KMH,
    TRANSITION_SPEED_KMH,
)


DEFAULT_DATA_FILE = "data/sample_session.csv"
DEFAULT_ROSTER_FILE = "data/sample_roster.csv"
DEFAULT_OUTPUT_DIR = "outputs"
DEFAULT_CONFIG_FILE = "config/pitch_tracking.yaml"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class PathSettings(BaseModel):
    """File and directory locations for this project."""

    data_file: str = DEFAULT_DATA_FILE
    roster_file: str = DEFAULT_ROSTER_FILE
    output_dir: str = DEFAULT_OUTPUT_DIR

    @field_validator("data_file", "roster_file", "output_dir")
    @classmethod
    def _non_empty_path(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("path values must not be empty")
        return cleaned


class ThresholdSettings(BaseModel):
    """Speed, acceleration, and heart-rate cut points."""

    sprint_kmh: float = Field(default=SPRINT_THRESHOLD_KMH, gt=0)
    high_intensity_kmh: float = Field(default=HIGH_INTENSITY_THRESHOLD_KMH, gt=0)
    accel_ms2: float = Field(default=ACCELERATION_THRESHOLD_MS2, gt=0)
    jump_vertical_ms2: float = Field(default=JUMP_VERTICAL_ACCEL_MS2, gt=0)
    high_intensity_effort_kmh: float = Field(default=HIGH_INTENSITY_EFFORT_KMH, gt=0)
    transition_kmh: float = Field(default=TRANSITION_SPEED_KMH, gt=0)
    hr_max_bpm: int = Field(default=ASSUMED_MAX_HR_BPM, gt=0)
    hr_high_zone_fraction: float = Field(default=HIGH_HR_ZONE_FRACTION, gt=0, le=1)

    @model_validator(mode="after")
    def _ordered_speed_edges(self) -> "ThresholdSettings":
        if self.high_intensity_kmh >= self.sprint_kmh:
            raise ValueError("high_intensity_kmh must be below sprint_kmh")
        return self


class WindowSettings(BaseModel):
    """Sample and history window lengths."""

    realtime_window_s: float = Field(default=REALTIME_WINDOW_S, gt=0)
    injury_history_days: int = Field(default=INJURY_HISTORY_DAYS, gt=0)
    performance_history_days: int = Field(default=PERFORMANCE_HISTORY_DAYS, gt=0)


class LoadSettings(BaseModel):
    """Training-load model selection."""

    model: Literal["session_count", "rolling_history"] = "session_count"

    @field_validator("model", mode="before")
    @classmethod
    def _normalize_model(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class RuntimeSettings(BaseModel):
    """Runtime behavior controls for the CLI and pipelines."""

    create_output_dirs: bool = False
    log_level: str = "INFO"
    asymmetry_seed: int | None = None

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        cleaned = value.strip().upper()
        if cleaned not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return cleaned


class PitchTrackingConfig(BaseModel):
    """Typed configuration model for project behavior."""

    model_config = ConfigDict(extra="ignore")
    paths: PathSettings = Field(default_factory=PathSettings)
    thresholds: ThresholdSettings = Field(default_factory=ThresholdSettings)
    windows: WindowSettings = Field(default_factory=WindowSettings)
    load: LoadSettings = Field(default_factory=LoadSettings)
    runtime: RuntimeSettings = Field(default_factory=RuntimeSettings)


@dataclass(frozen=True)
class ProjectPaths:
    """Resolved canonical project paths."""

    project_root: Path
    data_file: Path
    roster_file: Path
    output_dir: Path


def find_project_root(start: Path | None = None) -> Path:
    """Find the project root by locating `pyproject.toml`."""
    env_root = os.getenv("PITCH_TRACKING_PROJECT_ROOT")
    if env_root:
        return _resolve_path(Path(env_root), Path.cwd())

    cursor = (start or Path.cwd()).resolve()
    for candidate in (cursor, *cursor.parents):
        if (candidate / "pyproject.toml").exists():
            return candidate

    module_cursor = Path(__file__).resolve()
    for candidate in (module_cursor, *module_cursor.parents):
        if (candidate / "pyproject.toml").exists():
            return candidate

    raise FileNotFoundError("Could not find project root containing pyproject.toml")


@lru_cache(maxsize=1)
def default_project_config() -> PitchTrackingConfig:
    """Load config with OmegaConf merge + Pydantic validation."""
    project_root = find_project_root()
    merged = _load_merged_config(project_root)
    return validate_config(merged)


def validate_config(raw: dict[str, Any]) -> PitchTrackingConfig:
    try:
        return PitchTrackingConfig.model_validate(raw)
    except ValidationError as exc:
        raise ValueError(f"Invalid pitch_tracking config: {exc}") from exc


@lru_cache(maxsize=1)
def default_project_paths() -> ProjectPaths:
    """Resolve canonical paths from validated project config."""
    project_root = find_project_root()
    config = default_project_config()
    path_cfg = config.paths

    output_dir = _resolve_path(Path(path_cfg.output_dir), project_root)
    if config.runtime.create_output_dirs:
        output_dir.mkdir(parents=True, exist_ok=True)

    return ProjectPaths(
        project_root=project_root,
        data_file=_resolve_path(Path(path_cfg.data_file), project_root),
        roster_file=_resolve_path(Path(path_cfg.roster_file), project_root),
        output_dir=output_dir,
    )


def resolve_data_file(input_path: str | Path | None = None) -> Path:
    """Resolve an explicit or default telemetry file path."""
    paths = default_project_paths()
    if input_path is None:
        return paths.data_file
    return _resolve_path(Path(input_path), paths.project_root)


def resolve_roster_file(roster_path: str | Path | None = None) -> Path:
    paths = default_project_paths()
    if roster_path is None:
        return paths.roster_file
    return _resolve_path(Path(roster_path), paths.project_root)


def resolve_output_dir(output_dir: str | Path | None = None) -> Path:
    """Resolve an explicit or default output directory path."""
    paths = default_project_paths()
    if output_dir is None:
        return paths.output_dir
    return _resolve_path(Path(output_dir), paths.project_root)


def clear_project_path_cache() -> None:
    """Clear cached config; useful for tests or env-var changes."""
    default_project_config.cache_clear()
    default_project_paths.cache_clear()


def _load_merged_config(project_root: Path) -> dict[str, Any]:
    base_cfg = PitchTrackingConfig().model_dump()
    pyproject_cfg = _load_pyproject_tool_config(project_root)

    merged = OmegaConf.merge(
        base_cfg,
        pyproject_cfg,
        _load_file_config(project_root),
        _load_env_overrides(),
    )
    raw = OmegaConf.to_container(merged, resolve=True)
    return raw if isinstance(raw, dict) else {}


def _load_file_config(project_root: Path) -> dict[str, Any]:
    env_path = os.getenv("PITCH_TRACKING_CONFIG_FILE")
    if env_path:
        cfg_path = _resolve_path(Path(env_path), project_root)
        if not cfg_path.exists():
            raise FileNotFoundError(
                f"PITCH_TRACKING_CONFIG_FILE points to missing file: {cfg_path}"
            )
    else:
        cfg_path = project_root / DEFAULT_CONFIG_FILE
        if not cfg_path.exists():
            return {}

    loaded = OmegaConf.load(cfg_path)
    raw = OmegaConf.to_container(loaded, resolve=True)
    return raw if isinstance(raw, dict) else {}


def _load_env_overrides() -> dict[str, Any]:
    paths: dict[str, Any] = {}
    if env_data := os.getenv("PITCH_TRACKING_DATA_FILE"):
        paths["data_file"] = env_data
    if env_roster := os.getenv("PITCH_TRACKING_ROSTER_FILE"):
        paths["roster_file"] = env_roster
    if env_output := os.getenv("PITCH_TRACKING_OUTPUT_DIR"):
        paths["output_dir"] = env_output

    runtime: dict[str, Any] = {}
    if env_create_output := os.getenv("PITCH_TRACKING_CREATE_OUTPUT_DIRS"):
        runtime["create_output_dirs"] = _parse_env_bool(env_create_output)
    if env_log_level := os.getenv("PITCH_TRACKING_LOG_LEVEL"):
        runtime["log_level"] = env_log_level

    overrides: dict[str, Any] = {}
    if paths:
        overrides["paths"] = paths
    if runtime:
        overrides["runtime"] = runtime
    if env_load_model := os.getenv("PITCH_TRACKING_LOAD_MODEL"):
        overrides["load"] = {"model": env_load_model}
    return overrides


def _resolve_path(path: Path, project_root: Path) -> Path:
    if path.is_absolute():
        return path.expanduser().resolve()
    return (project_root / path).resolve()


def _parse_env_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    raise ValueError(
        "PITCH_TRACKING_CREATE_OUTPUT_DIRS must be one of: "
        "1,true,yes,on,0,false,no,off"
    )


def _load_pyproject_tool_config(project_root: Path) -> dict[str, Any]:
    pyproject_path = project_root / "pyproject.toml"
    if not pyproject_path.exists():
        return {}

    with pyproject_path.open("rb") as handle:
        pyproject = tomllib.load(handle)

    tool_cfg = pyproject.get("tool", {})
    project_cfg = tool_cfg.get("pitch_tracking", {})
    return project_cfg if isinstance(project_cfg, dict) else {}
