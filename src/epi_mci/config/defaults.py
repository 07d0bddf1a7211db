"""
Default configuration values.

Single source of truth for parameter values shared by the schema and the
loaders. Grid bounds and seeds follow the published EMIF-AD analysis.
"""

from typing import Any

# Valid model names (trainer registry keys)
VALID_MODELS = ["EN", "sPLS", "RF"]

# Valid feature-set names
VALID_FEATURE_SETS = ["all", "pgs_only", "mps_only"]

# Default CV configuration (5-fold, 5 repeats, ROC-based selection)
DEFAULT_CV_CONFIG: dict[str, Any] = {
    "folds": 5,
    "repeats": 5,
    "random_state": 123,
    "scoring": "roc_auc",
    "n_jobs": -1,
}

DEFAULT_ELASTICNET_CONFIG: dict[str, Any] = {
    "alpha_min": 0.1,
    "alpha_max": 1.0,
    "alpha_points": 10,
    "lambda_min": 0.01,
    "lambda_max": 2.5,
    "lambda_points": 100,
    "solver": "saga",
    "max_iter": 5000,
    "random_state": 123,
}

DEFAULT_SPLS_CONFIG: dict[str, Any] = {
    "max_components": 10,
    "eta_min": 0.1,
    "eta_max": 0.9,
    "eta_points": 20,
    "random_state": 123,
}

DEFAULT_RF_CONFIG: dict[str, Any] = {
    "n_estimators": 500,
    "criterion": "gini",
    "max_features_cap": None,
    "min_samples_leaf_cap": None,
    "n_jobs": 1,
    "random_state": 456,
}

DEFAULT_ELIMINATION_CONFIG: dict[str, Any] = {
    "models": ["RF"],
    "save_curve": True,
}

DEFAULT_EVALUATION_CONFIG: dict[str, Any] = {
    "n_boot": 1000,
    "boot_random_state": 0,
    "ci_method": "percentile",
}

DEFAULT_OUTPUT_CONFIG: dict[str, Any] = {
    "save_models": True,
    "save_test_preds": True,
    "save_plots": True,
    "plot_format": "png",
    "plot_dpi": 300,
}

# Preprocessing thresholds
DEFAULT_PREPROCESS_CONFIG: dict[str, Any] = {
    "normalization": "quantile",
    "detection_p_threshold": 0.01,
    "drop_sex_chromosomes": True,
    "intensity_cutoff": 10.5,
    "sex_cutoff": -2.0,
    "n_components": 10,
    "outlier_quantile": 0.975,
    "outdir": "preprocessed",
}
