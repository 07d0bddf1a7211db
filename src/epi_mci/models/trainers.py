"""
Model trainers for MCI classification.

One trainer interface with a variant per model family:
- ElasticNetTrainer: elastic-net logistic regression (|standardized coefficient|)
- PLSTrainer: sparse PLS-DA (|regression coefficient|)
- RandomForestTrainer: random forest (impurity importance)

Every trainer runs an exhaustive grid search over repeated stratified CV,
scores candidates by AUROC, refits the best setting on all training samples
and returns a TrainedModel(model, importance, performance). Trainers are
callable so they plug straight into backward feature elimination.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, NamedTuple

import numpy as np
import pandas as pd
from sklearn.model_selection import GridSearchCV
from sklearn.pipeline import Pipeline

from epi_mci.config import TrainingConfig
from epi_mci.models.hyperparams import get_param_grid, grid_size
from epi_mci.models.registry import build_pipeline
from epi_mci.models.splits import cv_from_config

logger = logging.getLogger(__name__)


@dataclass
class FittedModel:
    """
    A refit estimator together with its training feature order.

    Attributes:
        model_name: EN, sPLS or RF
        estimator: Fitted sklearn Pipeline (step ``clf`` holds the classifier)
        feature_names: Training feature order
        best_params: Winning grid setting
        importances: Per-feature importance of the refit model
        cv_results: Mean/std CV score per grid setting
    """

    model_name: str
    estimator: Pipeline
    feature_names: list[str]
    best_params: dict[str, Any] = field(default_factory=dict)
    importances: dict[str, float] = field(default_factory=dict)
    cv_results: pd.DataFrame | None = None

    def importance(self) -> dict[str, float]:
        """Per-feature importance (copy; higher = more important)."""
        return dict(self.importances)

    @property
    def classes_(self) -> np.ndarray:
        return self.estimator.classes_

    def _align(self, X: pd.DataFrame) -> pd.DataFrame:
        missing = [f for f in self.feature_names if f not in X.columns]
        if missing:
            raise ValueError(f"Features used in training are missing from input: {missing}")
        return X[self.feature_names]

    def predict_proba(self, X: pd.DataFrame) -> np.ndarray:
        """Class probabilities, columns ordered as ``classes_``."""
        return self.estimator.predict_proba(self._align(X))

    def predict_score(self, X: pd.DataFrame) -> np.ndarray:
        """Probability of the case (highest-coded) class."""
        return self.predict_proba(X)[:, -1]

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        return self.estimator.predict(self._align(X))


class TrainedModel(NamedTuple):
    """Result of one training call: model handle, importance map, CV performance."""

    model: FittedModel
    importance: dict[str, float]
    performance: float


class ModelTrainer(ABC):
    """
    Grid-search trainer for one model family.

    Args:
        config: TrainingConfig (defaults when None)
        cv: Precomputed CV splits (list of (train_idx, test_idx)) or any sklearn
            CV splitter. When None, splits are built from ``config.cv`` for each
            training call.
    """

    name: str = ""

    def __init__(self, config: TrainingConfig | None = None, cv=None):
        self.config = config if config is not None else TrainingConfig()
        self.cv = cv

    def build_pipeline(self) -> Pipeline:
        return build_pipeline(self.name, self.config)

    def param_grid(self, X: pd.DataFrame) -> dict[str, list]:
        return get_param_grid(self.name, self.config, n_samples=X.shape[0], n_features=X.shape[1])

    @abstractmethod
    def feature_importance(self, estimator: Pipeline, feature_names: list[str]) -> dict[str, float]:
        """Per-feature importance of a fitted pipeline."""

    def train(
        self,
        features: pd.DataFrame,
        labels: pd.Series | np.ndarray,
        param_grid: dict[str, list] | None = None,
        cv=None,
    ) -> TrainedModel:
        """
        Tune by exhaustive grid search and refit on all samples.

        Args:
            features: Training matrix (samples × features)
            labels: Binary labels (0 = control, 1 = case)
            param_grid: Grid override (default: model grid from config)
            cv: CV override (default: trainer cv, then config.cv)

        Returns:
            TrainedModel with performance = best mean CV score
        """
        X = features
        y = np.asarray(labels)
        feature_names = X.columns.tolist()

        grid = param_grid if param_grid is not None else self.param_grid(X)
        if cv is None:
            cv = self.cv if self.cv is not None else cv_from_config(y, self.config.cv)

        search = GridSearchCV(
            estimator=self.build_pipeline(),
            param_grid=grid,
            scoring=self.config.cv.scoring,
            cv=cv,
            n_jobs=self.config.cv.n_jobs,
            refit=True,
            error_score="raise",  # Fail fast on errors
        )

        t0 = time.perf_counter()
        search.fit(X, y)
        elapsed = time.perf_counter() - t0

        estimator = search.best_estimator_
        importances = self.feature_importance(estimator, feature_names)
        performance = float(search.best_score_)

        cv_results = pd.DataFrame(search.cv_results_)
        keep = [c for c in cv_results.columns if c.startswith("param_")]
        cv_results = cv_results[keep + ["mean_test_score", "std_test_score", "rank_test_score"]]

        logger.info(
            f"[{self.name}] {len(feature_names)} features, {grid_size(grid)} settings: "
            f"CV {self.config.cv.scoring}={performance:.3f} ({elapsed:.1f}s)"
        )
        logger.debug(f"[{self.name}] best params: {search.best_params_}")

        fitted = FittedModel(
            model_name=self.name,
            estimator=estimator,
            feature_names=feature_names,
            best_params=dict(search.best_params_),
            importances=importances,
            cv_results=cv_results,
        )
        return TrainedModel(fitted, dict(importances), performance)

    def __call__(self, features: pd.DataFrame, labels) -> TrainedModel:
        return self.train(features, labels)


def _zip_importance(feature_names: list[str], values: np.ndarray) -> dict[str, float]:
    values = np.asarray(values, dtype=float).ravel()
    if len(values) != len(feature_names):
        raise ValueError(
            f"Importance length ({len(values)}) != feature count ({len(feature_names)})"
        )
    return {name: float(v) for name, v in zip(feature_names, values, strict=True)}


class ElasticNetTrainer(ModelTrainer):
    """Elastic-net logistic regression on standardized features."""

    name = "EN"

    def feature_importance(self, estimator, feature_names):
        clf = estimator.named_steps["clf"]
        return _zip_importance(feature_names, np.abs(clf.coef_).ravel())


class PLSTrainer(ModelTrainer):
    """Sparse PLS-DA."""

    name = "sPLS"

    def feature_importance(self, estimator, feature_names):
        clf = estimator.named_steps["clf"]
        return _zip_importance(feature_names, np.abs(clf.coef_).mean(axis=0))


class RandomForestTrainer(ModelTrainer):
    """Random forest with Gini impurity importance."""

    name = "RF"

    def feature_importance(self, estimator, feature_names):
        clf = estimator.named_steps["clf"]
        return _zip_importance(feature_names, clf.feature_importances_)


TRAINERS: dict[str, type[ModelTrainer]] = {
    "EN": ElasticNetTrainer,
    "sPLS": PLSTrainer,
    "RF": RandomForestTrainer,
}


def get_trainer(name: str, config: TrainingConfig | None = None, cv=None) -> ModelTrainer:
    """
    Create a trainer by model name.

    Args:
        name: EN, sPLS or RF
        config: TrainingConfig (defaults when None)
        cv: Optional precomputed CV splits

    Raises:
        ValueError: Unknown model name
    """
    try:
        trainer_cls = TRAINERS[name]
    except KeyError:
        raise ValueError(f"Unknown model: {name}. Expected one of {list(TRAINERS)}") from None
    return trainer_cls(config=config, cv=cv)
