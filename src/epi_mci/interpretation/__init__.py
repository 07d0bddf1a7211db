"""Model interpretation: SHAP importance and MPS/PGS correlations."""

from epi_mci.interpretation.correlations import correlate_score_pairs
from epi_mci.interpretation.shap_values import (
    compare_shap_importance,
    compute_shap_values,
    mean_abs_shap,
)

__all__ = [
    "compute_shap_values",
    "mean_abs_shap",
    "compare_shap_importance",
    "correlate_score_pairs",
]
