from __future__ import annotations

from pathlib import Path

import pytest

from pitch_tracking.config import (
    clear_project_path_cache,
    default_project_config,
    default_project_paths,
    resolve_data_file,
    resolve_output_dir,
    validate_config,
)


def test_default_data_path_prefers_data_folder() -> None:
    clear_project_path_cache()
    paths = default_project_paths()
    assert paths.data_file.as_posix().endswith("data/sample_session.csv")
    assert paths.data_file.exists()
    assert paths.roster_file.as_posix().endswith("data/sample_roster.csv")


def test_default_thresholds_from_project_config() -> None:
    clear_project_path_cache()
    config = default_project_config()
    assert config.thresholds.sprint_kmh == 24.0
    assert config.thresholds.high_intensity_kmh == 19.8
    assert config.windows.realtime_window_s == 300.0
    assert config.load.model == "session_count"


def test_env_override_for_data_file(monkeypatch, tmp_path: Path) -> None:
    custom = tmp_path / "custom_session.csv"
    custom.write_text("player_id,session_id,ts,lat,lon,speed_kmh\n", encoding="utf-8")

    monkeypatch.setenv("PITCH_TRACKING_DATA_FILE", str(custom))
    clear_project_path_cache()

    resolved = resolve_data_file()
    assert resolved == custom.resolve()

    monkeypatch.delenv("PITCH_TRACKING_DATA_FILE", raising=False)
    clear_project_path_cache()


def test_env_override_for_output_dir(monkeypatch, tmp_path: Path) -> None:
    custom_output = tmp_path / "exports"
    monkeypatch.setenv("PITCH_TRACKING_OUTPUT_DIR", str(custom_output))
    clear_project_path_cache()

    resolved = resolve_output_dir()
    assert resolved == custom_output.resolve()

    monkeypatch.delenv("PITCH_TRACKING_OUTPUT_DIR", raising=False)
    clear_project_path_cache()


def test_external_yaml_config_file_override(monkeypatch, tmp_path: Path) -> None:
    custom = tmp_path / "yaml_session.csv"
    custom.write_text("player_id,session_id,ts,lat,lon,speed_kmh\n", encoding="utf-8")
    custom_output = tmp_path / "yaml_exports"
    cfg = tmp_path / "pitch_tracking.yaml"
    cfg.write_text(
        "\n".join(
            [
                "paths:",
                f"  data_file: {custom.as_posix()}",
                f"  output_dir: {custom_output.as_posix()}",
                "thresholds:",
                "  sprint_kmh: 25.5",
                "load:",
                "  model: Rolling_History",
            ]
        ),
        encoding="utf-8",
    )

    monkeypatch.setenv("PITCH_TRACKING_CONFIG_FILE", str(cfg))
    clear_project_path_cache()

    model = default_project_config()
    paths = default_project_paths()
    assert model.paths.data_file == custom.as_posix()
    assert model.thresholds.sprint_kmh == 25.5
    assert model.load.model == "rolling_history"
    assert paths.data_file == custom.resolve()
    assert paths.output_dir == custom_output.resolve()

    monkeypatch.delenv("PITCH_TRACKING_CONFIG_FILE", raising=False)
    clear_project_path_cache()


def test_env_overrides_beat_yaml(monkeypatch, tmp_path: Path) -> None:
    cfg = tmp_path / "pitch_tracking.yaml"
    cfg.write_text("runtime:\n  log_level: debug\nload:\n  model: session_count\n", encoding="utf-8")
    monkeypatch.setenv("PITCH_TRACKING_CONFIG_FILE", str(cfg))
    monkeypatch.setenv("PITCH_TRACKING_LOAD_MODEL", "rolling_history")
    clear_project_path_cache()

    model = default_project_config()
    assert model.runtime.log_level == "DEBUG"
    assert model.load.model == "rolling_history"

    monkeypatch.delenv("PITCH_TRACKING_CONFIG_FILE", raising=False)
    monkeypatch.delenv("PITCH_TRACKING_LOAD_MODEL", raising=False)
    clear_project_path_cache()


def test_create_output_dirs_runtime_flag(monkeypatch, tmp_path: Path) -> None:
    custom_output = tmp_path / "auto_created_outputs"
    monkeypatch.setenv("PITCH_TRACKING_OUTPUT_DIR", str(custom_output))
    monkeypatch.setenv("PITCH_TRACKING_CREATE_OUTPUT_DIRS", "true")
    clear_project_path_cache()

    paths = default_project_paths()
    assert paths.output_dir == custom_output.resolve()
    assert custom_output.exists()

    monkeypatch.delenv("PITCH_TRACKING_OUTPUT_DIR", raising=False)
    monkeypatch.delenv("PITCH_TRACKING_CREATE_OUTPUT_DIRS", raising=False)
    clear_project_path_cache()


def test_invalid_config_raises_value_error() -> None:
    with pytest.raises(ValueError, match="Invalid pitch_tracking config"):
        validate_config({"thresholds": {"sprint_kmh": 18.0, "high_intensity_kmh": 19.8}})
    with pytest.raises(ValueError, match="Invalid pitch_tracking config"):
        validate_config({"runtime": {"log_level": "chatty"}})
    with pytest.raises(ValueError, match="Invalid pitch_tracking config"):
        validate_config({"load": {"model": "ewma"}})
