"""Utility functions for epi-mci."""

from epi_mci.utils.logging import auto_log_path, level_from_verbosity, log_section, setup_logger
from epi_mci.utils.paths import OutputDirectories, ensure_dir, model_bundle_name
from epi_mci.utils.random import apply_seed_global, set_random_seed
from epi_mci.utils.serialization import (
    library_versions,
    load_fitted_model,
    load_joblib,
    save_joblib,
    save_json,
    save_model_bundle,
)

__all__ = [
    "setup_logger",
    "level_from_verbosity",
    "auto_log_path",
    "log_section",
    "OutputDirectories",
    "ensure_dir",
    "model_bundle_name",
    "set_random_seed",
    "apply_seed_global",
    "library_versions",
    "save_joblib",
    "load_joblib",
    "save_model_bundle",
    "load_fitted_model",
    "save_json",
]
