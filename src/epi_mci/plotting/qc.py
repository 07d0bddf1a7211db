"""
Array QC plots.

- Per-sample density of beta / M values
- Bisulfite conversion histogram
- Median methylated vs. unmethylated intensity
- Sex check (X vs. Y median intensity)
- PCA score plots with normal-theory ellipses
- Explained variance per component
- Distance-distance (score vs. orthogonal distance) plot
"""

import logging
from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.patches import Ellipse
from scipy import stats

logger = logging.getLogger(__name__)

# Probes sampled per sample for kernel density curves
DENSITY_MAX_POINTS = 20000


def save_figure(fig, out_path: str | Path, dpi: int = 300) -> Path:
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path, dpi=dpi, bbox_inches="tight", pad_inches=0.1)
    plt.close(fig)
    logger.debug(f"Saved plot: {out_path}")
    return out_path


def plot_sample_densities(
    values: pd.DataFrame,
    out_path: str | Path,
    xlabel: str = "Beta value",
    xlim: tuple[float, float] | None = None,
    title: str = "",
    dpi: int = 300,
    random_state: int = 0,
) -> Path:
    """
    One kernel density curve per sample (column) of a probes × samples matrix.
    """
    rng = np.random.RandomState(random_state)
    flat = values.to_numpy()
    lo, hi = xlim if xlim is not None else (np.nanmin(flat), np.nanmax(flat))
    grid = np.linspace(lo, hi, 512)
    colors = matplotlib.colormaps["viridis"](np.linspace(0, 1, max(values.shape[1], 2)))

    fig, ax = plt.subplots(figsize=(7, 5))
    for i, col in enumerate(values.columns):
        v = values[col].dropna().to_numpy(dtype=float)
        if len(v) > DENSITY_MAX_POINTS:
            v = rng.choice(v, DENSITY_MAX_POINTS, replace=False)
        if len(v) < 2 or np.std(v) == 0:
            continue
        ax.plot(grid, stats.gaussian_kde(v)(grid), color=colors[i], linewidth=0.6, alpha=0.8)

    ax.set_xlabel(xlabel)
    ax.set_ylabel("Density")
    ax.set_xlim(lo, hi)
    if title:
        ax.set_title(title)
    ax.grid(True, alpha=0.2)
    return save_figure(fig, out_path, dpi)


def plot_bisulfite_histogram(
    conversion: pd.Series,
    out_path: str | Path,
    bins: int = 30,
    dpi: int = 300,
) -> Path:
    fig, ax = plt.subplots(figsize=(6, 4.5))
    ax.hist(pd.Series(conversion).dropna(), bins=bins, color="grey", edgecolor="black")
    ax.set_xlabel("Median bisulfite conversion percentage")
    ax.set_ylabel("Count")
    return save_figure(fig, out_path, dpi)


def plot_median_intensity(
    qc: pd.DataFrame,
    out_path: str | Path,
    cutoff: float = 10.5,
    limits: tuple[float, float] = (8.0, 14.0),
    dpi: int = 300,
) -> Path:
    """
    Scatter of median methylated vs. unmethylated log2 intensity.

    The dashed line marks mean(mMed, uMed) = cutoff.
    """
    fig, ax = plt.subplots(figsize=(6, 5.5))
    sc = ax.scatter(
        qc["mMed"], qc["uMed"], c=qc["mMed"] * qc["uMed"], cmap="viridis", s=18, edgecolor="none"
    )
    xs = np.linspace(limits[0], limits[1], 50)
    ax.plot(xs, 2 * cutoff - xs, "k--", linewidth=1)
    if "bad" in qc.columns and qc["bad"].any():
        bad = qc[qc["bad"]]
        ax.scatter(
            bad["mMed"], bad["uMed"], facecolor="none", edgecolor="red", s=60, label="Failed"
        )
        ax.legend(loc="lower left")
    ax.set_xlim(limits)
    ax.set_ylim(limits)
    ax.set_xlabel("Meth median intensity (log2)")
    ax.set_ylabel("Unmeth median intensity (log2)")
    fig.colorbar(sc, ax=ax, label="mMed x uMed")
    return save_figure(fig, out_path, dpi)


def plot_sex_check(
    table: pd.DataFrame,
    out_path: str | Path,
    cutoff: float = -2.0,
    dpi: int = 300,
) -> Path:
    """X vs. Y median intensity colored by reported sex; mismatches circled."""
    palette = {"Male": "#377EB8", "Female": "#E41A1C"}
    fig, ax = plt.subplots(figsize=(6, 5.5))
    for sex, grp in table.groupby(table["reported_sex"].fillna("Unknown")):
        ax.scatter(grp["xMed"], grp["yMed"], s=18, color=palette.get(sex, "grey"), label=sex)
    if "mismatch" in table.columns and table["mismatch"].any():
        mis = table[table["mismatch"]]
        ax.scatter(
            mis["xMed"], mis["yMed"], facecolor="none", edgecolor="black", s=70, label="Mismatch"
        )

    xs = np.linspace(table["xMed"].min(), table["xMed"].max(), 50)
    ax.plot(xs, xs + cutoff, "k--", linewidth=1)
    ax.set_xlabel("X chr, median total intensity (log2)")
    ax.set_ylabel("Y chr, median total intensity (log2)")
    ax.legend(title="Sex", loc="best")
    return save_figure(fig, out_path, dpi)


def _normal_ellipse(x: np.ndarray, y: np.ndarray, level: float, **kwargs) -> Ellipse:
    cov = np.cov(x, y)
    vals, vecs = np.linalg.eigh(cov)
    order = vals.argsort()[::-1]
    vals, vecs = vals[order], vecs[:, order]
    angle = np.degrees(np.arctan2(vecs[1, 0], vecs[0, 0]))
    radius = np.sqrt(stats.chi2.ppf(level, df=2))
    width, height = 2 * radius * np.sqrt(np.maximum(vals, 0))
    return Ellipse((np.mean(x), np.mean(y)), width, height, angle=angle, **kwargs)


def plot_pca_scores(
    scores: pd.DataFrame,
    explained: pd.Series,
    out_path: str | Path,
    pc_x: str = "PC1",
    pc_y: str = "PC2",
    color: pd.Series | None = None,
    color_label: str = "",
    dpi: int = 300,
) -> Path:
    """
    Score plot of two components with 95% (filled) and 99% (dashed) ellipses.

    Numeric ``color`` values use a continuous colormap, others one color per level.
    """
    x = scores[pc_x].to_numpy()
    y = scores[pc_y].to_numpy()

    fig, ax = plt.subplots(figsize=(6.5, 5.5))
    ax.add_patch(_normal_ellipse(x, y, 0.95, facecolor="red", alpha=0.25, edgecolor="none"))
    ax.add_patch(
        _normal_ellipse(
            x, y, 0.99, facecolor="none", edgecolor="black", linestyle="--", linewidth=1
        )
    )

    if color is None:
        ax.scatter(x, y, s=16, color="black")
    else:
        c = pd.Series(color).reindex(scores.index)
        # Few distinct numeric codes (e.g. Sex 1/2) are drawn as categories
        if pd.api.types.is_numeric_dtype(c) and c.nunique() > 5:
            sc = ax.scatter(x, y, c=c, cmap="viridis", s=16)
            fig.colorbar(sc, ax=ax, label=color_label)
        else:
            c = c.astype(str)
            levels = sorted(c.unique())
            cmap = matplotlib.colormaps["Set1"]
            for i, lvl in enumerate(levels):
                m = (c == lvl).to_numpy()
                ax.scatter(x[m], y[m], s=16, color=cmap(i % cmap.N), label=lvl)
            ax.legend(title=color_label, loc="best")

    ax.set_xlabel(f"{pc_x} ({explained.get(pc_x, np.nan):.2f}%)")
    ax.set_ylabel(f"{pc_y} ({explained.get(pc_y, np.nan):.2f}%)")
    ax.autoscale_view()
    return save_figure(fig, out_path, dpi)


def plot_explained_variance(explained: pd.Series, out_path: str | Path, dpi: int = 300) -> Path:
    fig, ax = plt.subplots(figsize=(7, 4.5))
    ax.bar(explained.index, explained.values, color="#CB181D", edgecolor="black")
    ax.set_xlabel("")
    ax.set_ylabel("Explained variance (%)")
    ax.grid(True, axis="y", alpha=0.2)
    return save_figure(fig, out_path, dpi)


def plot_distance_distance(
    table: pd.DataFrame,
    out_path: str | Path,
    color: pd.Series | None = None,
    color_label: str = "",
    dpi: int = 300,
) -> Path:
    """
    Orthogonal distance against score distance, with cutoff lines.

    ``table`` is the output of flag_outliers; outliers are labelled by sample id.
    """
    fig, ax = plt.subplots(figsize=(6.5, 5.5))
    if color is not None:
        c = pd.Series(color).reindex(table.index)
        sc = ax.scatter(table["SD"], table["OD"], c=c, cmap="viridis", s=16)
        fig.colorbar(sc, ax=ax, label=color_label)
    else:
        ax.scatter(table["SD"], table["OD"], s=16, color="black")

    ax.axvline(table["SD_cutoff"].iloc[0], color="red", linestyle="--", linewidth=1)
    ax.axhline(table["OD_cutoff"].iloc[0], color="red", linestyle="--", linewidth=1)
    for sample, row in table[table["outlier"]].iterrows():
        ax.annotate(
            str(sample),
            (row["SD"], row["OD"]),
            fontsize=7,
            xytext=(3, 3),
            textcoords="offset points",
        )

    ax.set_xlabel("Score distance")
    ax.set_ylabel("Orthogonal distance")
    return save_figure(fig, out_path, dpi)
