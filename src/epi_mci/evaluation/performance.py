"""Test-set performance of the selected models.

This module handles:
- Scoring test samples with each saved model
- AUROC with stratified bootstrap 95% CI per model
- ROC coordinates for the comparison plot
- AUROC differences between MPS+PGS models and their PGS-only counterparts
"""

import logging

import numpy as np
import pandas as pd

from epi_mci.metrics.bootstrap import stratified_bootstrap_ci, stratified_bootstrap_diff_ci
from epi_mci.metrics.discrimination import auroc, roc_points

logger = logging.getLogger(__name__)


def format_auc_label(auc: float, ci_lower: float, ci_upper: float) -> str:
    """
    AUROC with CI as shown on ROC plots.

    Example:
        >>> format_auc_label(0.7123, 0.6199, 0.8011)
        '0.71 (0.62-0.80)'
    """
    if not np.isfinite(auc):
        return "NA"
    if not (np.isfinite(ci_lower) and np.isfinite(ci_upper)):
        return f"{auc:.2f}"
    return f"{auc:.2f} ({ci_lower:.2f}-{ci_upper:.2f})"


def predict_scores(models: dict, X: pd.DataFrame) -> pd.DataFrame:
    """
    Case probability of every model for every sample.

    Args:
        models: Mapping name -> FittedModel (anything with ``predict_score``)
        X: Feature matrix holding at least each model's training features

    Returns:
        DataFrame indexed like X with one column per model
    """
    return pd.DataFrame(
        {name: np.clip(model.predict_score(X), 0.0, 1.0) for name, model in models.items()},
        index=X.index,
    )


def evaluate_scores(
    y_true: np.ndarray | pd.Series,
    scores: pd.DataFrame,
    n_boot: int = 1000,
    seed: int = 0,
    method: str = "percentile",
) -> pd.DataFrame:
    """
    AUROC and 95% CI per score column.

    Args:
        y_true: Binary labels (0 = control, 1 = case), aligned with scores
        scores: One column per model

    Returns:
        DataFrame with columns model, n, n_cases, auroc, ci_lower, ci_upper, label
    """
    y = np.asarray(y_true).astype(int)
    if len(y) != len(scores):
        raise ValueError(f"Length mismatch: {len(y)} labels vs {len(scores)} scored samples")

    rows = []
    for name in scores.columns:
        p = scores[name].to_numpy(dtype=float)
        auc = auroc(y, p)
        try:
            lo, hi = stratified_bootstrap_ci(y, p, auroc, n_boot=n_boot, seed=seed, method=method)
        except ValueError as e:
            logger.warning(f"[{name}] bootstrap CI skipped: {e}")
            lo, hi = np.nan, np.nan
        rows.append(
            {
                "model": name,
                "n": len(y),
                "n_cases": int(y.sum()),
                "auroc": auc,
                "ci_lower": lo,
                "ci_upper": hi,
                "label": format_auc_label(auc, lo, hi),
            }
        )
        logger.info(f"[{name}] test AUROC {format_auc_label(auc, lo, hi)}")

    return pd.DataFrame(rows)


def roc_table(y_true: np.ndarray | pd.Series, scores: pd.DataFrame) -> pd.DataFrame:
    """Long-format ROC coordinates (model, fpr, tpr, threshold) for plotting."""
    y = np.asarray(y_true).astype(int)
    frames = []
    for name in scores.columns:
        pts = roc_points(y, scores[name].to_numpy(dtype=float))
        pts.insert(0, "model", name)
        frames.append(pts)
    return pd.concat(frames, ignore_index=True)


def compare_feature_sets(
    y_true: np.ndarray | pd.Series,
    scores: pd.DataFrame,
    pairs: list[tuple[str, str]],
    n_boot: int = 1000,
    seed: int = 0,
) -> pd.DataFrame:
    """
    AUROC difference (first - second) with bootstrap CI for pairs of score columns.

    Pairs whose test set is too small to resample keep the observed
    difference with NaN bounds.

    Args:
        pairs: (model_a, model_b) column pairs, e.g. ("EN_all", "EN_pgs_only")

    Returns:
        DataFrame with columns model_a, model_b, auroc_diff, ci_lower, ci_upper
    """
    y = np.asarray(y_true).astype(int)
    rows = []
    for a, b in pairs:
        pa = scores[a].to_numpy(dtype=float)
        pb = scores[b].to_numpy(dtype=float)
        try:
            diff, lo, hi = stratified_bootstrap_diff_ci(y, pa, pb, auroc, n_boot=n_boot, seed=seed)
        except ValueError as e:
            logger.warning(f"[{a} vs {b}] bootstrap CI skipped: {e}")
            diff, lo, hi = auroc(y, pa) - auroc(y, pb), np.nan, np.nan
        rows.append(
            {"model_a": a, "model_b": b, "auroc_diff": diff, "ci_lower": lo, "ci_upper": hi}
        )
    return pd.DataFrame(rows)
