"""Backward feature elimination.

Repeatedly trains a model on the current feature set, records its
cross-validated performance, drops the least important feature and finally
returns the round with the best recorded performance.

Design:
- The training callable is opaque: ``train_fn(features, labels)`` returns
  ``(model, importance, performance)`` with higher performance = better.
  Model trainers from ``epi_mci.models.trainers`` satisfy this directly.
- Exactly one feature is removed per round, so m starting features give m
  rounds and the last round trains on a single feature.
- Ties: the least important feature is the first one in current column order;
  the best round is the earliest (largest) one. NaN performance never beats a
  finite one.
- A failing training call aborts the whole elimination; no partial results.

Complementary to the grid search inside each trainer: the trainer tunes
hyperparameters for a fixed feature set, this module searches over nested
feature sets.
"""

import json
import logging
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

TrainFn = Callable[[pd.DataFrame, pd.Series], Any]


class InputValidationError(ValueError):
    """Raised when the feature matrix or labels cannot enter elimination."""


class ModelTrainingFailed(RuntimeError):
    """Raised when the training callable fails during an elimination round.

    Attributes:
        round: 1-based round that failed
        n_features: Size of the feature set being trained
    """

    def __init__(self, message: str, round_no: int, n_features: int):
        super().__init__(message)
        self.round = round_no
        self.n_features = n_features


@dataclass
class RoundRecord:
    """One elimination round.

    Attributes:
        round: 1-based round number
        features: Feature set trained in this round (column order preserved)
        model: Trained model handle returned by the training callable
        performance: Cross-validated performance (higher = better)
        importance: Importance per feature of ``features``
        removed_feature: Feature dropped after this round
    """

    round: int
    features: list[str]
    model: Any
    performance: float
    importance: dict[str, float] = field(default_factory=dict)
    removed_feature: str | None = None

    @property
    def n_features(self) -> int:
        return len(self.features)


@dataclass
class EliminationResult:
    """All rounds of a backward elimination and the selected round.

    Attributes:
        rounds: Round records ordered by round number
        best_index: Position of the selected round in ``rounds``
    """

    rounds: list[RoundRecord]
    best_index: int

    @property
    def best_round(self) -> RoundRecord:
        return self.rounds[self.best_index]

    @property
    def best_features(self) -> list[str]:
        return list(self.best_round.features)

    @property
    def best_model(self) -> Any:
        return self.best_round.model

    @property
    def best_performance(self) -> float:
        return self.best_round.performance

    @property
    def elimination_order(self) -> list[str]:
        """Features in the order they were removed (last survivor last)."""
        return [r.removed_feature for r in self.rounds if r.removed_feature is not None]

    def to_frame(self) -> pd.DataFrame:
        """Elimination curve, one row per round."""
        return pd.DataFrame(
            [
                {
                    "round": r.round,
                    "n_features": r.n_features,
                    "performance": r.performance,
                    "removed_feature": r.removed_feature,
                    "is_best": i == self.best_index,
                    "features": json.dumps(r.features, default=str),
                }
                for i, r in enumerate(self.rounds)
            ]
        )


def validate_inputs(X: pd.DataFrame, y: pd.Series | np.ndarray) -> pd.Series:
    """
    Check that X and y can enter elimination and return y aligned to X.

    A label Series indexed by the same samples in a different order is
    reordered to match X.

    Raises:
        InputValidationError: Empty matrix, count/index mismatch, or missing values
    """
    if not isinstance(X, pd.DataFrame):
        raise InputValidationError(f"Feature matrix must be a DataFrame, got {type(X).__name__}")
    if X.shape[1] == 0:
        raise InputValidationError("Feature matrix has zero columns")
    if X.shape[0] == 0:
        raise InputValidationError("Feature matrix has zero rows")
    if not X.columns.is_unique:
        dupes = X.columns[X.columns.duplicated()].tolist()
        raise InputValidationError(f"Duplicated feature names: {dupes}")

    if len(y) != len(X):
        raise InputValidationError(
            f"Labels and features have mismatched sample counts ({len(y)} vs {len(X)})"
        )

    if isinstance(y, pd.Series):
        if not y.index.equals(X.index):
            if set(y.index) != set(X.index) or not y.index.is_unique:
                raise InputValidationError("Label index does not match feature index")
            y = y.loc[X.index]
    else:
        y = pd.Series(np.asarray(y), index=X.index)

    if X.isna().to_numpy().any():
        na_cols = X.columns[X.isna().any()].tolist()
        raise InputValidationError(f"Feature matrix has missing values in columns: {na_cols}")
    if y.isna().any():
        raise InputValidationError(f"Labels have {int(y.isna().sum())} missing values")

    return y


def least_important_feature(features: list[str], importance: Mapping[str, float]) -> str:
    """
    Feature with minimal importance; ties go to the first in ``features`` order.

    Features absent from ``importance`` (or with NaN importance) count as 0.0.

    Example:
        >>> least_important_feature(["A", "B", "C"], {"A": 0.1, "B": 0.5, "C": 0.3})
        'A'
    """
    best_feature = features[0]
    best_value = math.inf
    for f in features:
        value = importance.get(f, 0.0)
        value = 0.0 if value is None or np.isnan(value) else float(value)
        if value < best_value:
            best_feature, best_value = f, value
    return best_feature


def select_best_round(performances: list[float]) -> int:
    """
    Index of the maximal performance; ties go to the earliest index.

    NaN never wins against a finite value; if every value is NaN index 0 is
    returned.

    Example:
        >>> select_best_round([0.70, 0.65, 0.70])
        0
    """
    if not performances:
        raise ValueError("No rounds to select from")
    best_index = 0
    best_value = -math.inf
    for i, p in enumerate(performances):
        if p is None or np.isnan(p):
            continue
        if p > best_value:
            best_index, best_value = i, p
    return best_index


def _as_importance(value: Any) -> float:
    """Missing or NaN importance counts as 0.0."""
    if value is None:
        return 0.0
    value = float(value)
    return 0.0 if np.isnan(value) else value


def _unpack_training_output(output: Any) -> tuple[Any, Mapping[str, float], float]:
    model, importance, performance = output
    if importance is None:
        importance = model.importance()
    return model, importance, float(performance)


def backward_feature_elimination(
    X: pd.DataFrame,
    y: pd.Series | np.ndarray,
    train_fn: TrainFn,
) -> EliminationResult:
    """
    Run backward feature elimination.

    Args:
        X: Feature matrix (samples × features), no missing values
        y: Labels aligned to X (Series by sample id, or array in row order)
        train_fn: ``(features, labels) -> (model, importance, performance)``;
            if importance is None, ``model.importance()`` is used

    Returns:
        EliminationResult with one record per round

    Raises:
        InputValidationError: Before any training, for malformed input
        ModelTrainingFailed: If train_fn raises or returns malformed output
    """
    y = validate_inputs(X, y)
    # Work on a copy so caller data is never mutated
    data = X.copy()
    labels = y.copy()

    # column labels are kept as given so round models predict on the same matrix
    features = data.columns.tolist()
    n_start = len(features)
    rounds: list[RoundRecord] = []

    logger.info(f"Backward elimination: {n_start} features, {len(data)} samples")

    for round_no in range(1, n_start + 1):
        current = data[features].copy()
        try:
            model, importance, performance = _unpack_training_output(
                train_fn(current, labels.copy())
            )
            imp = {f: _as_importance(importance.get(f)) for f in features}
        except Exception as e:
            raise ModelTrainingFailed(
                f"Training failed in round {round_no} ({len(features)} features): {e}",
                round_no=round_no,
                n_features=len(features),
            ) from e

        removed = least_important_feature(features, imp)

        rounds.append(
            RoundRecord(
                round=round_no,
                features=list(features),
                model=model,
                performance=performance,
                importance=imp,
                removed_feature=removed,
            )
        )
        logger.info(f"Round {round_no}: {len(features)} features, performance={performance:.4f}")
        logger.debug(f"Round {round_no}: removing '{removed}' (importance={imp[removed]:.4g})")

        features = [f for f in features if f != removed]

    best_index = select_best_round([r.performance for r in rounds])
    best = rounds[best_index]
    logger.info(
        f"Best round {best.round}: {best.n_features} features, performance={best.performance:.4f}"
    )
    return EliminationResult(rounds=rounds, best_index=best_index)


def save_elimination_results(
    result: EliminationResult,
    output_dir: str | Path,
    model_name: str = "",
    feature_set: str = "",
) -> dict[str, Path]:
    """Save the elimination curve and summary.

    Args:
        result: EliminationResult from backward_feature_elimination
        output_dir: Directory to save outputs
        model_name: Model name for metadata
        feature_set: Feature set name for metadata

    Returns:
        Dict mapping artifact name -> file path
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    paths: dict[str, Path] = {}

    curve_path = output_dir / "elimination_curve.csv"
    result.to_frame().to_csv(curve_path, index=False)
    paths["elimination_curve"] = curve_path

    summary_path = output_dir / "elimination_summary.json"
    best = result.best_round
    summary = {
        "model": model_name,
        "feature_set": feature_set,
        "n_rounds": len(result.rounds),
        "best_round": best.round,
        "best_n_features": best.n_features,
        "best_performance": None if np.isnan(best.performance) else best.performance,
        "best_features": best.features,
        "elimination_order": result.elimination_order,
    }
    with open(summary_path, "w") as f:
        json.dump(summary, f, indent=2, default=str)
    paths["elimination_summary"] = summary_path

    logger.info(f"Saved elimination results to {output_dir}")
    return paths
