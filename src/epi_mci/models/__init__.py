"""
Models package for epi-mci.

This package contains model-related functionality including:
- Estimator builders (elastic net, sparse PLS-DA, random forest)
- Hyperparameter grids
- The shared repeated stratified CV scheme
- Grid-search trainers behind one interface
"""

from .hyperparams import (
    get_param_grid,
    lambda_to_C,
    make_logspace,
)
from .registry import (
    build_logistic_regression,
    build_pipeline,
    build_random_forest,
    build_spls,
)
from .splits import build_cv_splits, cv_from_config
from .spls import SparsePLSDAClassifier
from .trainers import (
    TRAINERS,
    ElasticNetTrainer,
    FittedModel,
    ModelTrainer,
    PLSTrainer,
    RandomForestTrainer,
    TrainedModel,
    get_trainer,
)

__all__ = [
    # Registry
    "build_logistic_regression",
    "build_random_forest",
    "build_spls",
    "build_pipeline",
    # Hyperparams
    "get_param_grid",
    "make_logspace",
    "lambda_to_C",
    # CV
    "build_cv_splits",
    "cv_from_config",
    # Estimators
    "SparsePLSDAClassifier",
    # Trainers
    "TRAINERS",
    "ModelTrainer",
    "ElasticNetTrainer",
    "PLSTrainer",
    "RandomForestTrainer",
    "FittedModel",
    "TrainedModel",
    "get_trainer",
]
