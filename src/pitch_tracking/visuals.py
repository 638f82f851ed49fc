"""Figure templates for session reports."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from .constants import FIELD_GRID_SIZE
from .models import SessionMetrics


def plot_speed_zone_distribution(
    speed_zone_summary: pd.DataFrame,
    *,
    title: str = "Distance by Speed Zone",
) -> tuple[plt.Figure, plt.Axes]:
    """Bar chart of distance per speed zone, annotated with share of total."""
    _require_columns(
        speed_zone_summary, ["speed_zone", "distance_m", "distance_pct"], name="speed_zone_summary"
    )

    sns.set_theme(style="whitegrid")
    fig, ax = plt.subplots(figsize=(9.0, 5.0), constrained_layout=True)
    bar = sns.barplot(
        data=speed_zone_summary,
        x="speed_zone",
        y="distance_m",
        hue="speed_zone",
        palette="YlOrRd",
        legend=False,
        ax=ax,
    )
    for pct, patch in zip(speed_zone_summary["distance_pct"], bar.patches, strict=False):
        value = patch.get_height()
        ax.annotate(
            f"{value:.0f} m\n{float(pct):.0f}%",
            (patch.get_x() + patch.get_width() / 2.0, value),
            ha="center",
            va="bottom",
            fontsize=9,
            xytext=(0, 3),
            textcoords="offset points",
        )
    ax.set_title(title, fontsize=12, weight="bold")
    ax.set_xlabel("Speed zone")
    ax.set_ylabel("Distance (m)")
    return fig, ax


def plot_field_heat_map(
    metrics: SessionMetrics,
    *,
    grid_size: int = FIELD_GRID_SIZE,
) -> tuple[plt.Figure, plt.Axes]:
    """Heat map of sample counts per field zone (own goal at the bottom)."""
    grid = heat_map_grid(metrics.tactical.heat_map, grid_size)
    total = grid.to_numpy().sum()
    share = grid / total * 100.0 if total > 0 else grid

    sns.set_theme(style="white")
    fig, ax = plt.subplots(figsize=(6.0, 6.5), constrained_layout=True)
    sns.heatmap(
        share.iloc[::-1],
        annot=True,
        fmt=".0f",
        cmap="Greens",
        cbar_kws={"label": "Share of samples (%)"},
        linewidths=1.0,
        linecolor="white",
        ax=ax,
    )
    ax.set_title(
        f"Field Zones: {metrics.player_id} / {metrics.session_id}", fontsize=12, weight="bold"
    )
    ax.set_xlabel("Field x zone")
    ax.set_ylabel("Field y zone")
    return fig, ax


def heat_map_grid(heat_map: dict[str, int], grid_size: int = FIELD_GRID_SIZE) -> pd.DataFrame:
    """Reshape `zone_{x}_{y}` counts into a y-by-x frame."""
    grid = np.zeros((grid_size, grid_size), dtype=float)
    for zone, count in heat_map.items():
        _, x, y = zone.split("_")
        grid[int(y) - 1, int(x) - 1] += count
    labels = list(range(1, grid_size + 1))
    return pd.DataFrame(grid, index=labels, columns=labels)


def save_figure(fig: plt.Figure, output_path: str | Path, dpi: int = 200) -> None:
    """Save a figure with a white background."""
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output, dpi=dpi, bbox_inches="tight", facecolor="white")


def close_figures(figures: Sequence[plt.Figure]) -> None:
    """Close a batch of figures to keep script memory stable."""
    for fig in figures:
        plt.close(fig)


def _require_columns(df: pd.DataFrame, columns: Sequence[str], *, name: str) -> None:
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise ValueError(f"{name} is missing required columns: {missing}")
