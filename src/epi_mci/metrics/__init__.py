"""Metrics module for model evaluation."""

from epi_mci.metrics.bootstrap import (
    stratified_bootstrap_ci,
    stratified_bootstrap_diff_ci,
)
from epi_mci.metrics.discrimination import (
    auroc,
    roc_points,
)

__all__ = [
    # Discrimination metrics
    "auroc",
    "roc_points",
    # Bootstrap confidence intervals
    "stratified_bootstrap_ci",
    "stratified_bootstrap_diff_ci",
]
