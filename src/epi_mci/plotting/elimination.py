"""Backward elimination curve: CV AUROC against number of remaining features."""

from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd

from epi_mci.plotting.qc import save_figure


def plot_elimination_curve(
    curve: pd.DataFrame,
    out_path: Path | str,
    title: str = "Backward feature elimination",
    model_name: str = "",
    dpi: int = 300,
) -> Path | None:
    """Plot CV performance per elimination round, marking the selected round.

    Args:
        curve: EliminationResult.to_frame() (n_features, performance, is_best)
        out_path: Output file path
        model_name: Shown as subtitle

    Returns:
        Path of the saved plot, or None for an empty curve
    """
    if curve.empty:
        return None

    df = curve.sort_values("n_features", ascending=False)
    fig, ax = plt.subplots(figsize=(8, 6))
    ax.plot(df["n_features"], df["performance"], "o-", color="#2563eb", linewidth=2, markersize=6)

    best = df[df["is_best"]]
    if not best.empty:
        ax.scatter(
            best["n_features"],
            best["performance"],
            s=140,
            color="#CB181D",
            zorder=3,
            label="Selected",
        )
        ax.axvline(best["n_features"].iloc[0], color="#CB181D", linestyle=":", alpha=0.7)
        ax.legend(loc="lower right")

    ax.invert_xaxis()
    ax.set_xlabel("Number of features")
    ax.set_ylabel("CV AUROC")
    ax.set_title(f"{title}\n{model_name}" if model_name else title)
    ax.grid(True, alpha=0.3)
    return save_figure(fig, out_path, dpi)
