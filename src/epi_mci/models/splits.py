"""
Shared cross-validation scheme.

Folds are materialized once per training set so every model family, feature
set and elimination round is scored on identical resamples.
"""

import logging

import numpy as np
import pandas as pd
from sklearn.model_selection import RepeatedStratifiedKFold

logger = logging.getLogger(__name__)


def build_cv_splits(
    y: np.ndarray | pd.Series,
    folds: int = 5,
    repeats: int = 5,
    random_state: int = 123,
) -> list[tuple[np.ndarray, np.ndarray]]:
    """
    Build repeated stratified K-fold splits.

    Args:
        y: Training labels
        folds: Folds per repeat
        repeats: Number of repeats
        random_state: Seed for fold assignment

    Returns:
        List of (train_idx, test_idx) positional index pairs, folds × repeats long

    Raises:
        ValueError: If the smallest class has fewer samples than folds
    """
    y = np.asarray(y)
    _, counts = np.unique(y, return_counts=True)
    if len(counts) < 2:
        raise ValueError("Cross-validation needs at least two classes in y")
    if counts.min() < folds:
        raise ValueError(
            f"Smallest class has {counts.min()} samples; cannot build {folds} stratified folds"
        )

    rskf = RepeatedStratifiedKFold(n_splits=folds, n_repeats=repeats, random_state=random_state)
    splits = list(rskf.split(np.zeros(len(y)), y))
    logger.debug(f"Built {len(splits)} CV splits ({folds} folds × {repeats} repeats)")
    return splits


def cv_from_config(y, cv_config) -> list[tuple[np.ndarray, np.ndarray]]:
    """Build splits from a CVConfig."""
    return build_cv_splits(
        y,
        folds=cv_config.folds,
        repeats=cv_config.repeats,
        random_state=cv_config.random_state,
    )
