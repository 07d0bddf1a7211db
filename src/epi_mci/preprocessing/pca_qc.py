"""
PCA-based sample quality control.

Samples are projected onto the first k principal components of the centered
and scaled beta matrix. Two distances describe how each sample sits relative
to that model:

- score distance (SD): Mahalanobis distance within the PC subspace
- orthogonal distance (OD): Euclidean norm of the residual left after
  reconstructing the sample from k components

A sample is an outlier when either distance exceeds its cutoff. SD uses the
chi-square quantile with k degrees of freedom; OD uses the robust cutoff of
Hubert et al. (2005), (median(OD^2/3) + MAD(OD^2/3) * z_q)^3/2.
"""

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy import stats
from sklearn.decomposition import PCA

logger = logging.getLogger(__name__)


@dataclass
class PCAResult:
    """Sample scores and fit summary of a QC PCA."""

    scores: pd.DataFrame
    explained_variance: pd.Series
    component_variance: np.ndarray
    orthogonal_distance: pd.Series

    @property
    def n_components(self) -> int:
        return self.scores.shape[1]

    @property
    def score_distance(self) -> pd.Series:
        return score_distance(self.scores, self.component_variance)


def _scale_samples(beta: pd.DataFrame) -> pd.DataFrame:
    """Samples × probes matrix, centered and scaled per probe; constant probes dropped."""
    X = beta.T.astype(float)
    sd = X.std(axis=0, ddof=1)
    keep = sd > 0
    n_const = int((~keep).sum())
    if n_const:
        logger.debug(f"Dropping {n_const} constant probes before PCA")
    X = X.loc[:, keep]
    return (X - X.mean(axis=0)) / sd[keep]


def run_pca(beta: pd.DataFrame, n_components: int = 10) -> PCAResult:
    """
    PCA of samples from a probes × samples beta matrix.

    Args:
        beta: Probes × samples, no missing values
        n_components: Components to keep, capped at min(n_samples - 1, n_probes)

    Returns:
        PCAResult with PC1..PCk scores and explained variance in percent
        (rounded to two decimals)
    """
    if beta.isna().to_numpy().any():
        raise ValueError("PCA requires a complete beta matrix (found NaN)")

    X = _scale_samples(beta)
    n_samples, n_probes = X.shape
    k = min(n_components, n_samples - 1, n_probes)
    if k < 1:
        raise ValueError(f"Too few samples ({n_samples}) or probes ({n_probes}) for PCA")
    if k < n_components:
        logger.warning(f"Reducing PCA components from {n_components} to {k}")

    pca = PCA(n_components=k, svd_solver="full")
    scores = pca.fit_transform(X.to_numpy())
    names = [f"PC{i + 1}" for i in range(k)]

    recon = scores @ pca.components_
    residual = X.to_numpy() - recon
    od = pd.Series(np.sqrt((residual**2).sum(axis=1)), index=X.index, name="OD")

    explained = pd.Series(np.round(pca.explained_variance_ratio_ * 100, 2), index=names)
    logger.info(
        f"PCA on {n_samples} samples x {n_probes} probes; "
        f"PC1-PC{k} explain {explained.sum():.1f}% of variance"
    )
    return PCAResult(
        scores=pd.DataFrame(scores, index=X.index, columns=names),
        explained_variance=explained,
        component_variance=pca.explained_variance_,
        orthogonal_distance=od,
    )


def orthogonal_distance(X: np.ndarray, pca: PCA) -> np.ndarray:
    """Residual norm of each row of X after projection onto the fitted components."""
    X = np.asarray(X, dtype=float)
    centered = X - pca.mean_
    recon = (centered @ pca.components_.T) @ pca.components_
    return np.sqrt(((centered - recon) ** 2).sum(axis=1))


def score_distance(scores: pd.DataFrame, variances: np.ndarray) -> pd.Series:
    """Mahalanobis distance of PC scores (components are uncorrelated)."""
    variances = np.asarray(variances, dtype=float)
    sd = np.sqrt(((scores.to_numpy() ** 2) / variances).sum(axis=1))
    return pd.Series(sd, index=scores.index, name="SD")


def score_distance_cutoff(n_components: int, quantile: float = 0.975) -> float:
    return float(np.sqrt(stats.chi2.ppf(quantile, df=n_components)))


def orthogonal_distance_cutoff(od: pd.Series | np.ndarray, quantile: float = 0.975) -> float:
    od23 = np.power(np.asarray(od, dtype=float), 2.0 / 3.0)
    center = np.median(od23)
    spread = stats.median_abs_deviation(od23, scale="normal")
    return float((center + spread * stats.norm.ppf(quantile)) ** 1.5)


def flag_outliers(result: PCAResult, quantile: float = 0.975) -> pd.DataFrame:
    """
    Distance table with outlier flags.

    Returns:
        DataFrame indexed by sample with SD, OD, SD_cutoff, OD_cutoff,
        SD_outlier, OD_outlier, outlier
    """
    sd = result.score_distance
    od = result.orthogonal_distance
    sd_cut = score_distance_cutoff(result.n_components, quantile)
    od_cut = orthogonal_distance_cutoff(od, quantile)

    table = pd.DataFrame({"SD": sd, "OD": od})
    table["SD_cutoff"] = sd_cut
    table["OD_cutoff"] = od_cut
    table["SD_outlier"] = table["SD"] > sd_cut
    table["OD_outlier"] = table["OD"] > od_cut
    table["outlier"] = table["SD_outlier"] | table["OD_outlier"]

    flagged = table.index[table["outlier"]].astype(str).tolist()
    if flagged:
        logger.warning(f"PCA outliers ({len(flagged)}): {flagged}")
    else:
        logger.info("No PCA outliers")
    return table
