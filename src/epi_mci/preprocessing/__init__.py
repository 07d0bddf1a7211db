"""Methylation array preprocessing: sample QC, normalization, probe filtering, PCA QC."""

from epi_mci.preprocessing.normalization import (
    QuantileNormalizer,
    beta_to_m,
    m_to_beta,
    quantile_normalize,
)
from epi_mci.preprocessing.pca_qc import (
    PCAResult,
    flag_outliers,
    orthogonal_distance,
    orthogonal_distance_cutoff,
    run_pca,
    score_distance,
    score_distance_cutoff,
)
from epi_mci.preprocessing.probe_filter import (
    check_beta_values,
    filter_cross_reactive,
    filter_detection_p,
    filter_sex_chromosomes,
    filter_snp_probes,
)
from epi_mci.preprocessing.qc import (
    bisulfite_summary,
    check_sex,
    median_intensity_qc,
    predict_sex,
)

__all__ = [
    # Sample QC
    "bisulfite_summary",
    "median_intensity_qc",
    "predict_sex",
    "check_sex",
    # Normalization
    "QuantileNormalizer",
    "quantile_normalize",
    "beta_to_m",
    "m_to_beta",
    # Probe filters
    "filter_detection_p",
    "filter_snp_probes",
    "filter_cross_reactive",
    "filter_sex_chromosomes",
    "check_beta_values",
    # PCA QC
    "PCAResult",
    "run_pca",
    "orthogonal_distance",
    "score_distance",
    "score_distance_cutoff",
    "orthogonal_distance_cutoff",
    "flag_outliers",
]
