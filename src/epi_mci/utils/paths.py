"""
Path utilities for standardized output locations.

Output structure for a training run:
    {outdir}/
    ├── models/          <- Fit_{cohort}_{model}_{feature_set}.joblib
    ├── preds/           <- test-set predictions
    ├── reports/         <- performance tables, elimination curves
    └── plots/           <- ROC comparison, elimination curves
"""

from dataclasses import dataclass
from pathlib import Path


def ensure_dir(path: str | Path) -> Path:
    """Create directory if it doesn't exist, return Path object."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def model_bundle_name(cohort: str, model_name: str, feature_set: str) -> str:
    """File name of a persisted model, keyed by cohort, model type and feature set.

    Example:
        >>> model_bundle_name("EMIF", "RF", "pgs_only")
        'Fit_EMIF_RF_pgs_only.joblib'
    """
    return f"Fit_{cohort}_{model_name}_{feature_set}.joblib"


@dataclass
class OutputDirectories:
    """Structured output directory paths."""

    root: Path
    models: Path
    preds: Path
    reports: Path
    plots: Path

    @classmethod
    def create(cls, root: str | Path, exist_ok: bool = True) -> "OutputDirectories":
        """Create the output directory structure under ``root``."""
        root_path = Path(root)
        paths = {"root": root_path}
        for key in ("models", "preds", "reports", "plots"):
            abs_path = root_path / key
            abs_path.mkdir(parents=True, exist_ok=exist_ok)
            paths[key] = abs_path
        return cls(**paths)

    def model_path(self, cohort: str, model_name: str, feature_set: str) -> Path:
        return self.models / model_bundle_name(cohort, model_name, feature_set)
