"""Score distributions per diagnostic group."""

import math
from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd

from epi_mci.data.schema import DIAGNOSIS_COLORS, DIAGNOSIS_ORDER
from epi_mci.plotting.qc import save_figure


def plot_score_boxplots(
    scores: pd.DataFrame,
    groups: pd.Series,
    out_path: str | Path,
    order: list[str] | None = None,
    labels: dict[str, str] | None = None,
    colors: list[str] | None = None,
    ncols: int = 4,
    ylabel: str = "Methylation Profile Score",
    dpi: int = 300,
) -> Path:
    """
    Grid of boxplots, one panel per score, one box per diagnostic group.

    Args:
        scores: Samples × scores
        groups: Diagnostic group per sample (indexed like scores)
        order: Group order on the x axis (groups absent from the data are skipped)
        labels: score column -> panel title
    """
    order = order or DIAGNOSIS_ORDER
    colors = colors or DIAGNOSIS_COLORS
    labels = labels or {}
    groups = pd.Series(groups).reindex(scores.index)
    present = [g for g in order if (groups == g).any()]
    fill = {g: colors[i % len(colors)] for i, g in enumerate(order)}

    n = scores.shape[1]
    nrows = math.ceil(n / ncols)
    fig, axes = plt.subplots(nrows, ncols, figsize=(3 * ncols, 2.6 * nrows), squeeze=False)

    for ax, col in zip(axes.flat, scores.columns, strict=False):
        data = [scores.loc[groups == g, col].dropna().to_numpy() for g in present]
        box = ax.boxplot(data, patch_artist=True, widths=0.6)
        ax.set_xticks(range(1, len(present) + 1), present)
        for patch, g in zip(box["boxes"], present, strict=False):
            patch.set_facecolor(fill[g])
        for median in box["medians"]:
            median.set_color("black")
        ax.set_title(labels.get(col, col), fontweight="bold")
        ax.set_ylabel(ylabel, fontsize=8)

    for ax in list(axes.flat)[n:]:
        ax.set_visible(False)

    fig.tight_layout()
    return save_figure(fig, out_path, dpi)
