"""CLI entrypoints for the telemetry analytics project."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from .config import (
    default_project_config,
    resolve_data_file,
    resolve_output_dir,
    resolve_roster_file,
)
from .injury_risk import RandomizedAsymmetryModel
from .load import build_load_model
from .pipeline import load_roster_csv, load_samples_csv
from .presentation import (
    build_session_snapshot_text,
    coach_prediction_table,
    coach_speed_zone_table,
    write_report_text,
)
from .presets import preset_from_config
from .results_contract import run_analytics, write_results_contract, write_results_tables

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compute session metrics and heuristic predictions from a telemetry CSV."
    )
    parser.add_argument(
        "--input",
        default=None,
        help="Path to the telemetry CSV (default: auto-resolve from project config).",
    )
    parser.add_argument(
        "--roster",
        default=None,
        help="Path to the roster CSV (default: auto-resolve; skipped if missing).",
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory for results.json and tables (default: project config).",
    )
    parser.add_argument(
        "--figures",
        action="store_true",
        help="Also render speed-zone and heat-map figures.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = default_project_config()
    logging.basicConfig(
        level=getattr(logging, config.runtime.log_level),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    input_path = resolve_data_file(args.input)
    roster_path = resolve_roster_file(args.roster)
    output_dir = resolve_output_dir(args.output_dir)

    samples = load_samples_csv(input_path)
    players = []
    if roster_path.exists():
        players = load_roster_csv(roster_path)
    else:
        logger.warning("cli.roster.missing", extra={"path": str(roster_path)})

    results = run_analytics(
        samples,
        players,
        preset=preset_from_config(config),
        load_model=build_load_model(config.load.model),
        asymmetry=RandomizedAsymmetryModel(seed=config.runtime.asymmetry_seed),
    )

    table_paths = write_results_tables(results, output_dir)
    table_paths.update(_write_coach_tables(results, output_dir / "tables"))
    for record in results.session_metrics:
        snapshot_path = output_dir / "snapshots" / f"{record.player_id}_{record.session_id}.txt"
        write_report_text(snapshot_path, build_session_snapshot_text(record))

    figure_paths = _render_figures(results, output_dir) if args.figures else {}
    contract_path = write_results_contract(
        results,
        input_path=input_path,
        output_dir=output_dir,
        table_paths=table_paths,
        figure_paths=figure_paths,
    )

    summary = {
        "input_path": str(input_path),
        "sample_count": len(samples),
        "sessions_computed": len(results.session_metrics),
        "sessions_skipped": len(results.skipped_sessions),
        "predictions": len(results.predictions),
        "results_contract": str(contract_path),
    }
    print(json.dumps(summary, indent=2))


def _write_coach_tables(results, table_dir: Path) -> dict[str, Path]:
    paths = {
        "coach_speed_zones": table_dir / "coach_speed_zones.csv",
        "coach_predictions": table_dir / "coach_predictions.csv",
    }
    coach_speed_zone_table(results.speed_zone_summary).to_csv(
        paths["coach_speed_zones"], index=False
    )
    coach_prediction_table(results.predictions).to_csv(paths["coach_predictions"], index=False)
    return paths


def _render_figures(results, output_dir: Path) -> dict[str, Path]:
    # matplotlib is only imported when figures are requested
    from .visuals import close_figures, plot_field_heat_map, plot_speed_zone_distribution, save_figure

    figure_dir = output_dir / "figures"
    paths: dict[str, Path] = {}
    zones = results.speed_zone_summary
    for record in results.session_metrics:
        key = f"{record.player_id}_{record.session_id}"
        player_zones = zones[
            (zones["player_id"] == record.player_id) & (zones["session_id"] == record.session_id)
        ]
        zone_fig, _ = plot_speed_zone_distribution(
            player_zones, title=f"Distance by Speed Zone: {record.player_id}"
        )
        heat_fig, _ = plot_field_heat_map(record)

        paths[f"speed_zones_{key}"] = figure_dir / f"speed_zones_{key}.png"
        paths[f"heat_map_{key}"] = figure_dir / f"heat_map_{key}.png"
        save_figure(zone_fig, paths[f"speed_zones_{key}"])
        save_figure(heat_fig, paths[f"heat_map_{key}"])
        close_figures([zone_fig, heat_fig])
    return paths


if __name__ == "__main__":
    main()
