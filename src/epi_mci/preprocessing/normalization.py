"""
Between-sample normalization and beta/M-value conversion.

Beta matrices are probes × samples, as exported from the array readers.
"""

import logging

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

# Keep log2 ratios finite for betas at the boundaries
BETA_EPS = 1e-6


class QuantileNormalizer:
    """
    Quantile normalization across samples.

    Every sample (column) is mapped onto a reference distribution, the mean of
    the sorted values over samples. Ties share the mean of their reference
    quantiles.
    """

    def __init__(self):
        self.reference_ = None

    def fit(self, beta: pd.DataFrame):
        values = np.asarray(beta, dtype=float)
        if np.isnan(values).any():
            raise ValueError("Quantile normalization requires a complete matrix (found NaN)")
        self.reference_ = np.sort(values, axis=0).mean(axis=1)
        return self

    def transform(self, beta: pd.DataFrame) -> pd.DataFrame:
        if self.reference_ is None:
            raise RuntimeError("QuantileNormalizer is not fitted")
        if beta.shape[0] != len(self.reference_):
            raise ValueError(
                f"Probe count mismatch: fitted on {len(self.reference_)}, got {beta.shape[0]}"
            )
        ranks = beta.rank(axis=0, method="average").to_numpy() - 1.0
        lo = np.floor(ranks).astype(int)
        hi = np.ceil(ranks).astype(int)
        frac = ranks - lo
        ref = self.reference_
        out = ref[lo] * (1.0 - frac) + ref[hi] * frac
        return pd.DataFrame(out, index=beta.index, columns=beta.columns)

    def fit_transform(self, beta: pd.DataFrame) -> pd.DataFrame:
        return self.fit(beta).transform(beta)


def quantile_normalize(beta: pd.DataFrame) -> pd.DataFrame:
    """Quantile-normalize a probes × samples beta matrix."""
    logger.info(f"Quantile normalizing {beta.shape[1]} samples x {beta.shape[0]} probes")
    return QuantileNormalizer().fit_transform(beta)


def beta_to_m(beta: pd.DataFrame | np.ndarray, eps: float = BETA_EPS):
    """
    Convert beta values to M-values, log2(b / (1 - b)).

    Betas are clipped to [eps, 1 - eps].
    """
    b = np.clip(beta, eps, 1.0 - eps)
    return np.log2(b / (1.0 - b))


def m_to_beta(m: pd.DataFrame | np.ndarray):
    """Inverse of :func:`beta_to_m`: 2^M / (1 + 2^M)."""
    p = np.power(2.0, m)
    return p / (1.0 + p)
