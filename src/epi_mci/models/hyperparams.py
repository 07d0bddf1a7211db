"""
Hyperparameter grids for all models.

Provides exhaustive grids for GridSearchCV. Parameter names carry the
``clf__`` pipeline prefix.
"""

import numpy as np

from epi_mci.config import TrainingConfig


def get_param_grid(
    model_name: str,
    config: TrainingConfig,
    n_samples: int,
    n_features: int,
) -> dict[str, list]:
    """
    Get the exhaustive parameter grid for a model.

    Grids depend on the data: the EN lambda-to-C mapping needs the number of
    training samples, and sPLS/RF ranges are capped by the number of features.

    Args:
        model_name: Model identifier (EN, sPLS, RF)
        config: TrainingConfig object
        n_samples: Number of training samples
        n_features: Number of features in the current feature set

    Returns:
        Dictionary mapping parameter names to value lists
    """
    if n_samples < 1 or n_features < 1:
        raise ValueError(f"Empty training data ({n_samples} samples, {n_features} features)")

    if model_name == "EN":
        return _get_en_params(config, n_samples)
    if model_name == "sPLS":
        return _get_spls_params(config, n_features)
    if model_name == "RF":
        return _get_rf_params(config, n_features)
    raise ValueError(f"Unknown model: {model_name}")


def _get_en_params(config: TrainingConfig, n_samples: int) -> dict[str, list]:
    """Elastic net: glmnet (alpha, lambda) expressed as sklearn (l1_ratio, C)."""
    en = config.elasticnet
    alphas = np.linspace(en.alpha_min, en.alpha_max, en.alpha_points).tolist()
    lambdas = make_logspace(en.lambda_min, en.lambda_max, en.lambda_points)
    return {
        "clf__l1_ratio": [float(a) for a in alphas],
        "clf__C": lambda_to_C(lambdas, n_samples),
    }


def _get_spls_params(config: TrainingConfig, n_features: int) -> dict[str, list]:
    """Sparse PLS-DA: number of components K and sparsity eta."""
    sp = config.spls
    max_k = min(sp.max_components, n_features)
    etas = np.linspace(sp.eta_min, sp.eta_max, sp.eta_points).tolist()
    return {
        "clf__n_components": list(range(1, max_k + 1)),
        "clf__eta": [float(e) for e in etas],
    }


def _get_rf_params(config: TrainingConfig, n_features: int) -> dict[str, list]:
    """Random Forest: mtry and minimal node size, each 1..n_features."""
    rf = config.rf
    mtry_max = min(n_features, rf.max_features_cap or n_features)
    leaf_max = min(n_features, rf.min_samples_leaf_cap or n_features)
    return {
        "clf__max_features": list(range(1, mtry_max + 1)),
        "clf__min_samples_leaf": list(range(1, leaf_max + 1)),
    }


def make_logspace(min_val: float, max_val: float, n_points: int) -> list[float]:
    """
    Create a grid evenly spaced on the natural-log scale.

    Args:
        min_val: Minimum value (e.g. 0.01)
        max_val: Maximum value (e.g. 2.5)
        n_points: Number of points

    Returns:
        List of float values, ascending
    """
    if n_points < 1:
        return []
    if n_points == 1:
        return [float(np.sqrt(min_val * max_val))]  # Geometric mean
    return np.exp(np.linspace(np.log(min_val), np.log(max_val), n_points)).tolist()


def lambda_to_C(lambdas: list[float], n_samples: int) -> list[float]:
    """Map glmnet penalties to sklearn inverse regularization, ``C = 1 / (n * lambda)``."""
    return [float(1.0 / (n_samples * lam)) for lam in lambdas]


def grid_size(param_grid: dict[str, list]) -> int:
    """Number of candidate settings in an exhaustive grid."""
    size = 1
    for values in param_grid.values():
        size *= len(values)
    return size
