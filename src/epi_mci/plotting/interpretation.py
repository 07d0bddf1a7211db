"""
Interpretation plots.

- Radar chart comparing relative SHAP importance across models
- Bar chart of |Pearson r| between matched MPSs and PGSs
"""

from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from epi_mci.plotting.qc import save_figure

RADAR_COLORS = ["#99000D", "#CB181D", "#EF3B2C"]


def plot_shap_radar(
    table: pd.DataFrame,
    out_path: str | Path,
    rmax: float = 0.3,
    labels: dict[str, str] | None = None,
    colors: list[str] | None = None,
    dpi: int = 300,
) -> Path:
    """
    Radar chart with one axis per feature and one polygon per model.

    Args:
        table: Features × models, as returned by compare_shap_importance()
        rmax: Outer radius of the chart
        labels: feature -> axis label
    """
    labels = labels or {}
    colors = colors or RADAR_COLORS
    features = list(table.index)
    n = len(features)
    if n < 3:
        raise ValueError(f"Radar chart needs at least 3 features, got {n}")

    angles = np.linspace(0, 2 * np.pi, n, endpoint=False).tolist()
    closed = angles + angles[:1]

    fig, ax = plt.subplots(figsize=(8, 7), subplot_kw={"projection": "polar"})
    ax.set_theta_offset(np.pi / 2)
    ax.set_theta_direction(-1)
    for i, model in enumerate(table.columns):
        vals = table[model].tolist()
        ax.plot(closed, vals + vals[:1], color=colors[i % len(colors)], linewidth=2, label=model)

    ax.set_xticks(angles, [labels.get(f, f) for f in features])
    ax.set_ylim(0, rmax)
    ax.set_yticklabels([])
    ax.grid(color="grey", alpha=0.5)
    ax.legend(loc="upper right", bbox_to_anchor=(1.25, 1.1), frameon=False)
    return save_figure(fig, out_path, dpi)


def plot_correlation_bars(corr: pd.DataFrame, out_path: str | Path, dpi: int = 300) -> Path:
    """
    Horizontal bars of |r| per MPS/PGS pair, red where p < alpha.

    Args:
        corr: Output of correlate_score_pairs() (name, r, significant)
    """
    df = corr.sort_values("name", ascending=False)
    colors = np.where(df["significant"], "#EF3B2C", "grey")

    fig, ax = plt.subplots(figsize=(7.5, 5))
    ax.barh(df["name"], df["r"].abs(), color=colors, edgecolor="black")
    ax.set_xlabel("|Pearson correlation coefficient|")
    handles = [
        plt.Rectangle((0, 0), 1, 1, facecolor="grey", edgecolor="black"),
        plt.Rectangle((0, 0), 1, 1, facecolor="#EF3B2C", edgecolor="black"),
    ]
    ax.legend(
        handles,
        ["No", "Yes"],
        title="p-value < 0.05",
        loc="upper center",
        bbox_to_anchor=(0.5, -0.12),
        ncol=2,
        frameon=False,
    )
    ax.grid(True, axis="x", alpha=0.2)
    return save_figure(fig, out_path, dpi)
