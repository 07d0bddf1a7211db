"""Estimators and pipelines for EN, sPLS and RF.

Every pipeline ends in a step named ``clf`` so the grids in
:mod:`epi_mci.models.hyperparams` can address it as ``clf__<param>``.
"""

import re

import sklearn
from sklearn.ensemble import RandomForestClassifier
from sklearn.linear_model import LogisticRegression
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler

from epi_mci.models.spls import SparsePLSDAClassifier


def _sklearn_version_tuple(ver: str) -> tuple[int, int, int]:
    """``"1.8.0rc1"`` -> ``(1, 8, 0)``; missing parts count as 0."""
    parts = [int(n) for n in re.findall(r"\d+", ver)[:3]]
    major, minor, patch = parts + [0] * (3 - len(parts))
    return (major, minor, patch)


SKLEARN_VER = _sklearn_version_tuple(getattr(sklearn, "__version__", "0.0.0"))

# From 1.8 a non-None l1_ratio alone selects the elastic-net penalty
_PENALTY_KWARGS = {} if SKLEARN_VER >= (1, 8, 0) else {"penalty": "elasticnet"}


def build_logistic_regression(
    solver: str = "saga",
    C: float = 1.0,
    max_iter: int = 5000,
    tol: float = 1e-4,
    random_state: int = 123,
    l1_ratio: float = 0.5,
) -> LogisticRegression:
    """Elastic-net logistic regression; ``C`` and ``l1_ratio`` are tuned by the EN grid."""
    return LogisticRegression(
        solver=solver,
        C=C,
        l1_ratio=l1_ratio,
        max_iter=int(max_iter),
        tol=float(tol),
        random_state=int(random_state),
        **_PENALTY_KWARGS,
    )


def build_random_forest(
    n_estimators: int = 500,
    criterion: str = "gini",
    min_samples_leaf: int = 1,
    max_features: int | str = "sqrt",
    random_state: int = 456,
    n_jobs: int = 1,
) -> RandomForestClassifier:
    """
    Random forest classifier.

    ``max_features`` plays the role of mtry and ``min_samples_leaf`` of the
    minimal node size; both are tuned by the RF grid. Gini impurity gives the
    importances used by backward elimination.
    """
    return RandomForestClassifier(
        n_estimators=int(n_estimators),
        criterion=criterion,
        min_samples_leaf=min_samples_leaf,
        max_features=max_features,
        random_state=int(random_state),
        n_jobs=int(n_jobs),
    )


def build_spls(n_components: int = 2, eta: float = 0.5) -> SparsePLSDAClassifier:
    return SparsePLSDAClassifier(n_components=n_components, eta=eta, scale=True)


def _en_pipeline(config) -> Pipeline:
    en = config.elasticnet
    clf = build_logistic_regression(
        solver=en.solver, max_iter=en.max_iter, random_state=en.random_state
    )
    # standardized inputs keep EN coefficients on a common scale
    return Pipeline([("pre", StandardScaler()), ("clf", clf)])


def _spls_pipeline(config) -> Pipeline:
    return Pipeline([("clf", build_spls())])


def _rf_pipeline(config) -> Pipeline:
    rf = config.rf
    clf = build_random_forest(
        n_estimators=rf.n_estimators,
        criterion=rf.criterion,
        random_state=rf.random_state,
        n_jobs=rf.n_jobs,
    )
    return Pipeline([("clf", clf)])


PIPELINE_BUILDERS = {"EN": _en_pipeline, "sPLS": _spls_pipeline, "RF": _rf_pipeline}


def build_pipeline(model_name: str, config) -> Pipeline:
    """
    Unfitted pipeline for ``model_name`` built from a TrainingConfig.

    Raises:
        ValueError: If ``model_name`` is not EN, sPLS or RF
    """
    try:
        builder = PIPELINE_BUILDERS[model_name]
    except KeyError:
        raise ValueError(
            f"Unknown model: {model_name}. Expected one of {list(PIPELINE_BUILDERS)}"
        ) from None
    return builder(config)
