"""
Persistence of model bundles and result summaries.

A model bundle is a dict written with joblib:

    {"model": FittedModel, "model_name", "feature_set", "cohort", "features",
     "cv_performance", "elimination", "versions"}

``versions`` records the sklearn/pandas/numpy versions at save time; loading a
bundle under different versions warns, since pickled estimators may then
predict differently.
"""

import json
import logging
import warnings
from pathlib import Path
from typing import Any

import joblib
import numpy as np
import pandas as pd
import sklearn

logger = logging.getLogger(__name__)


def library_versions() -> dict[str, str]:
    return {
        "sklearn": sklearn.__version__,
        "pandas": pd.__version__,
        "numpy": np.__version__,
    }


def save_joblib(obj: Any, path: str | Path, compress: int = 3) -> Path:
    """Dump ``obj`` with joblib, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    joblib.dump(obj, path, compress=compress)
    return path


def _warn_version_mismatch(saved: dict[str, str], name: str):
    current = library_versions()
    diffs = [
        f"{lib} {ver} (now {current[lib]})"
        for lib, ver in saved.items()
        if lib in current and ver != current[lib]
    ]
    if diffs:
        warnings.warn(
            f"Model bundle version mismatch in {name}: saved with " + ", ".join(diffs),
            UserWarning,
            stacklevel=3,
        )


def load_joblib(path: str | Path, check_versions: bool = True) -> Any:
    """
    Load a joblib file.

    Args:
        path: File to load
        check_versions: Warn when a bundle's ``versions`` entry differs from
            the installed libraries

    Raises:
        FileNotFoundError: If ``path`` does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Model bundle not found: {path}")

    obj = joblib.load(path)
    if check_versions and isinstance(obj, dict) and isinstance(obj.get("versions"), dict):
        _warn_version_mismatch(obj["versions"], path.name)
    return obj


def save_model_bundle(model: Any, path: str | Path, **metadata: Any) -> Path:
    """Write ``model`` with its metadata and the current library versions."""
    bundle = {"model": model, **metadata, "versions": library_versions()}
    path = save_joblib(bundle, path)
    logger.info(f"Saved model bundle: {path}")
    return path


def load_fitted_model(path: str | Path):
    """The fitted model of a bundle; a bare pickled model is returned as is."""
    obj = load_joblib(path)
    if isinstance(obj, dict) and "model" in obj:
        return obj["model"]
    return obj


def _json_default(obj: Any) -> Any:
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    return str(obj)


def save_json(obj: Any, path: str | Path, indent: int = 2) -> Path:
    """JSON dump that converts numpy scalars and arrays."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(obj, f, indent=indent, default=_json_default)
    return path
