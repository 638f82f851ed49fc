"""Coach-facing text/table formatting helpers."""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from .models import Prediction, SessionMetrics


def build_session_snapshot_text(metrics: SessionMetrics) -> str:
    """Create a short text block summarizing one player session."""
    movement = metrics.movement
    performance = metrics.performance
    load = metrics.load
    hr_line = ""
    if performance.max_hr > 0:
        hr_line = f"\n- Heart rate avg/max: {performance.avg_hr:.0f} / {performance.max_hr} bpm"
    text = (
        f"Session Snapshot: {metrics.player_id} / {metrics.session_id}\n"
        f"- Total distance: {movement.total_distance_m:,.0f} m\n"
        f"- High-intensity / sprint distance: {movement.high_intensity_distance_m:,.0f} / "
        f"{movement.sprint_distance_m:,.0f} m\n"
        f"- Mean / peak speed: {movement.avg_speed_kmh:.1f} / {movement.max_speed_kmh:.1f} km/h\n"
        f"- Sprints: {movement.sprint_count}\n"
        f"- Accel/Decel events: {movement.accel_count} / {movement.decel_count}\n"
        f"- Player load: {movement.player_load:.1f}\n"
        f"- Intensity score: {performance.intensity_score:.2f} / 10\n"
        f"- Acute:chronic ratio: {load.acute_chronic_ratio:.2f}"
        f"{hr_line}"
    )
    return text


def coach_speed_zone_table(speed_zone_summary: pd.DataFrame) -> pd.DataFrame:
    """Round and rename speed-zone summary columns for report tables."""
    table = speed_zone_summary.copy()
    table = table.rename(
        columns={
            "player_id": "Player",
            "session_id": "Session",
            "speed_zone": "Zone",
            "distance_m": "Distance (m)",
            "distance_pct": "Distance (%)",
            "time_s": "Time (s)",
            "time_pct": "Time (%)",
            "mean_speed_kmh": "Mean speed (km/h)",
        }
    )
    for col, digits in [
        ("Distance (m)", 1),
        ("Distance (%)", 1),
        ("Time (s)", 1),
        ("Time (%)", 1),
        ("Mean speed (km/h)", 2),
    ]:
        if col in table.columns:
            table[col] = table[col].round(digits)

    keep = ["Player", "Session", "Zone", "Distance (m)", "Distance (%)", "Time (s)", "Time (%)", "Mean speed (km/h)"]
    keep = [col for col in keep if col in table.columns]
    return table[keep]


def coach_prediction_table(predictions: list[Prediction]) -> pd.DataFrame:
    """One row per prediction with its headline label."""
    rows = []
    for prediction in predictions:
        output = prediction.output
        headline = (
            output.get("fatigueCategory")
            or output.get("riskLevel")
            or output.get("priority")
            or output.get("optimalZone")
            or ""
        )
        rows.append(
            {
                "Type": prediction.type.value,
                "Player": prediction.player_id or "",
                "Session": prediction.session_id or "",
                "Headline": headline,
                "Confidence": round(prediction.confidence, 2),
            }
        )
    return pd.DataFrame(rows, columns=["Type", "Player", "Session", "Headline", "Confidence"])


def write_report_text(output_path: str | Path, text: str) -> None:
    """Persist a copy/paste text block."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text.strip() + "\n", encoding="utf-8")
