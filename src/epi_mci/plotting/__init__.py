"""Plotting utilities for epi-mci.

Visualization for array QC and model evaluation:
- Sample densities, PCA score plots and distance-distance plots
- ROC comparison of MPS/PGS models
- Score boxplots per diagnostic group
- SHAP radar charts and MPS/PGS correlation bars
"""

from epi_mci.plotting.elimination import plot_elimination_curve
from epi_mci.plotting.interpretation import plot_correlation_bars, plot_shap_radar
from epi_mci.plotting.qc import (
    plot_bisulfite_histogram,
    plot_distance_distance,
    plot_explained_variance,
    plot_median_intensity,
    plot_pca_scores,
    plot_sample_densities,
    plot_sex_check,
    save_figure,
)
from epi_mci.plotting.roc import plot_roc_comparison
from epi_mci.plotting.scores import plot_score_boxplots

__all__ = [
    "save_figure",
    # Array QC
    "plot_sample_densities",
    "plot_bisulfite_histogram",
    "plot_median_intensity",
    "plot_sex_check",
    "plot_pca_scores",
    "plot_explained_variance",
    "plot_distance_distance",
    # Evaluation
    "plot_elimination_curve",
    "plot_roc_comparison",
    "plot_score_boxplots",
    # Interpretation
    "plot_shap_radar",
    "plot_correlation_bars",
]
