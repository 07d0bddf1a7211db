"""
Sample-level array quality control.

Three checks run on the raw (un-normalized) array:
- Bisulfite conversion efficiency summary
- Chip-wide median methylated/unmethylated intensity
- Reported sex vs. sex predicted from X/Y chromosome intensities
"""

import logging

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

MALE = "Male"
FEMALE = "Female"


def bisulfite_summary(conversion: pd.Series, threshold: float | None = None) -> dict:
    """
    Summarize per-sample median bisulfite conversion percentages.

    Args:
        conversion: Median conversion (%) per sample
        threshold: Optional minimum acceptable conversion; samples below it
            are listed in ``low_samples``

    Returns:
        Dict with n, min, median, max and low_samples
    """
    values = pd.to_numeric(conversion, errors="coerce").dropna()
    if values.empty:
        raise ValueError("No numeric bisulfite conversion values")

    low = []
    if threshold is not None:
        low = values.index[values < threshold].astype(str).tolist()
        if low:
            logger.warning(f"{len(low)} samples below {threshold}% bisulfite conversion")

    return {
        "n": int(len(values)),
        "min": float(values.min()),
        "median": float(values.median()),
        "max": float(values.max()),
        "low_samples": low,
    }


def median_intensity_qc(
    m_med: pd.Series,
    u_med: pd.Series,
    cutoff: float = 10.5,
) -> pd.DataFrame:
    """
    Flag samples with low chip-wide median intensities.

    Inputs are log2 median methylated (mMed) and unmethylated (uMed) signals.
    A sample fails when the mean of the two medians falls below ``cutoff``.

    Returns:
        DataFrame indexed by sample with mMed, uMed, mean_intensity, bad
    """
    m_med = pd.Series(m_med, dtype=float)
    u_med = pd.Series(u_med, dtype=float)
    if not m_med.index.equals(u_med.index):
        u_med = u_med.reindex(m_med.index)
    if u_med.isna().any() or m_med.isna().any():
        raise ValueError("mMed and uMed must be complete and share sample ids")

    qc = pd.DataFrame({"mMed": m_med, "uMed": u_med})
    qc["mean_intensity"] = (qc["mMed"] + qc["uMed"]) / 2.0
    qc["bad"] = qc["mean_intensity"] < cutoff

    n_bad = int(qc["bad"].sum())
    if n_bad:
        logger.warning(f"{n_bad}/{len(qc)} samples below median intensity cutoff {cutoff}")
    else:
        logger.info(f"All {len(qc)} samples pass median intensity QC")
    return qc


def predict_sex(x_med: pd.Series, y_med: pd.Series, cutoff: float = -2.0) -> pd.Series:
    """Male when yMed - xMed >= cutoff, Female otherwise."""
    diff = np.asarray(y_med, dtype=float) - np.asarray(x_med, dtype=float)
    return pd.Series(np.where(diff >= cutoff, MALE, FEMALE), index=pd.Series(x_med).index)


def _normalize_sex(values: pd.Series) -> pd.Series:
    mapping = {
        "1": MALE,
        "m": MALE,
        "male": MALE,
        "2": FEMALE,
        "0": FEMALE,
        "f": FEMALE,
        "female": FEMALE,
    }

    def lookup(v):
        if pd.isna(v):
            return np.nan
        # Numeric columns with gaps are read as float (1.0 / 2.0)
        if isinstance(v, (int, float, np.number)) and float(v).is_integer():
            v = int(v)
        return mapping.get(str(v).strip().lower(), np.nan)

    return values.map(lookup)


def check_sex(
    x_med: pd.Series,
    y_med: pd.Series,
    reported: pd.Series,
    cutoff: float = -2.0,
) -> pd.DataFrame:
    """
    Compare reported sex against sex predicted from X/Y median intensities.

    Reported sex may be coded 1/2 (1 = Male), M/F or Male/Female. Samples with
    missing reported sex are never flagged.

    Returns:
        DataFrame with xMed, yMed, predicted_sex, reported_sex, mismatch
    """
    x_med = pd.Series(x_med, dtype=float)
    y_med = pd.Series(y_med, dtype=float).reindex(x_med.index)
    reported = _normalize_sex(pd.Series(reported).reindex(x_med.index))

    out = pd.DataFrame(
        {
            "xMed": x_med,
            "yMed": y_med,
            "predicted_sex": predict_sex(x_med, y_med, cutoff),
            "reported_sex": reported,
        }
    )
    out["mismatch"] = out["reported_sex"].notna() & (out["reported_sex"] != out["predicted_sex"])

    n_mis = int(out["mismatch"].sum())
    if n_mis:
        logger.warning(
            f"Sex mismatch in {n_mis} samples: {out.index[out['mismatch']].astype(str).tolist()}"
        )
    return out
