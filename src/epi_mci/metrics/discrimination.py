"""
AUROC and ROC coordinates for MCI-vs-control scores.

Undefined cases (a test set holding one class only) give NaN with a
UserWarning instead of raising, so one degenerate feature set does not stop
the rest of an evaluation.
"""

import warnings

import numpy as np
import pandas as pd
from sklearn.metrics import roc_auc_score, roc_curve


def _as_binary(y_true) -> np.ndarray:
    return np.asarray(y_true).astype(int)


def _has_both_classes(y: np.ndarray, what: str) -> bool:
    present = np.unique(y)
    if present.size >= 2:
        return True
    warnings.warn(
        f"{what} needs both classes in y_true, got only {present.tolist()}; returning NaN",
        UserWarning,
        stacklevel=3,
    )
    return False


def auroc(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """
    Area under the ROC curve; ties count one half.

    >>> auroc(np.array([0, 0, 1, 1]), np.array([0.1, 0.4, 0.6, 0.9]))
    1.0
    """
    y = _as_binary(y_true)
    if not _has_both_classes(y, "AUROC"):
        return np.nan
    return float(roc_auc_score(y, np.asarray(y_pred, dtype=float)))


def roc_points(y_true: np.ndarray, y_pred: np.ndarray) -> pd.DataFrame:
    """``fpr``, ``tpr`` and ``threshold`` columns, fpr non-decreasing."""
    fpr, tpr, threshold = roc_curve(_as_binary(y_true), np.asarray(y_pred, dtype=float))
    return pd.DataFrame({"fpr": fpr, "tpr": tpr, "threshold": threshold})

