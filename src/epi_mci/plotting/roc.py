"""
ROC comparison plot of the test-set scores of several models.

Curves share one axis; the AUROC (95% CI) of each model is printed in the
lower right corner in the curve's color instead of a legend.
"""

from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from epi_mci.data.schema import ROC_COLORS
from epi_mci.plotting.qc import save_figure


def plot_roc_comparison(
    roc_df: pd.DataFrame,
    metrics_df: pd.DataFrame,
    out_path: str | Path,
    display_names: dict[str, str] | None = None,
    colors: list[str] | None = None,
    title: str = "",
    dpi: int = 300,
) -> Path:
    """
    Plot ROC curves for several models on one axis.

    Args:
        roc_df: Long table from roc_table() (model, fpr, tpr, threshold)
        metrics_df: Table from evaluate_scores() (model, label, ...)
        display_names: model -> text shown next to its AUROC, e.g. "PGSs (EN):"
        colors: One color per model in metrics_df order (default ROC_COLORS)
    """
    display_names = display_names or {}
    models = list(metrics_df["model"])
    colors = colors or ROC_COLORS
    if len(colors) < len(models):
        colors = [matplotlib.colormaps["tab10"](i % 10) for i in range(len(models))]

    fig, ax = plt.subplots(figsize=(7, 5))
    ax.plot([0, 1], [0, 1], "k--", linewidth=1.5)

    ys = np.linspace(0.25, 0.05, len(models)) if len(models) > 1 else np.array([0.05])
    labels = metrics_df.set_index("model")["label"]
    for model, color, y in zip(models, colors, ys, strict=False):
        pts = roc_df[roc_df["model"] == model]
        ax.plot(pts["fpr"], pts["tpr"], color=color, linewidth=1.8)
        label = display_names.get(model, f"{model}:")
        ax.text(0.45, y, label, color=color, fontweight="bold", fontsize=9)
        ax.text(0.8, y, labels.get(model, ""), color=color, fontweight="bold", fontsize=9)

    ax.text(0.8, 0.3, "AUROC", color="black", fontweight="bold", fontsize=11)
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1)
    ax.set_xlabel("1 - Specificity")
    ax.set_ylabel("Sensitivity")
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    if title:
        ax.set_title(title, fontweight="bold")
    return save_figure(fig, out_path, dpi)
