"""Correlation between methylation profile scores and matching polygenic scores."""

import logging

import pandas as pd
from scipy import stats

from epi_mci.data.schema import MPS_PGS_PAIRS, RISK_FACTOR_LABELS

logger = logging.getLogger(__name__)


def correlate_score_pairs(
    mps: pd.DataFrame,
    pgs: pd.DataFrame,
    pairs: dict[str, str] | None = None,
    labels: dict[str, str] | None = None,
    alpha: float = 0.05,
) -> pd.DataFrame:
    """
    Pearson correlation for each MPS/PGS pair over shared samples.

    Args:
        mps: Samples × MPS columns
        pgs: Samples × PGS columns, indexed like ``mps``
        pairs: MPS column -> PGS column (default: MPS_PGS_PAIRS)
        labels: MPS column -> display name (default: RISK_FACTOR_LABELS)
        alpha: Significance level for the ``significant`` flag

    Returns:
        DataFrame with columns mps, pgs, name, n, r, pvalue, significant
    """
    pairs = pairs or MPS_PGS_PAIRS
    labels = labels or RISK_FACTOR_LABELS

    shared = mps.index.intersection(pgs.index)
    if len(shared) < 3:
        raise ValueError(f"Need at least 3 samples with both MPSs and PGSs, found {len(shared)}")

    missing = [m for m in pairs if m not in mps.columns] + [
        p for p in pairs.values() if p not in pgs.columns
    ]
    if missing:
        raise ValueError(f"Score columns not found: {missing}")

    rows = []
    for m_col, p_col in pairs.items():
        pair = pd.DataFrame({"mps": mps.loc[shared, m_col], "pgs": pgs.loc[shared, p_col]}).dropna()
        r, p = stats.pearsonr(pair["mps"].astype(float), pair["pgs"].astype(float))
        rows.append(
            {
                "mps": m_col,
                "pgs": p_col,
                "name": labels.get(m_col, m_col),
                "n": len(pair),
                "r": float(r),
                "pvalue": float(p),
                "significant": bool(p < alpha),
            }
        )

    out = pd.DataFrame(rows)
    logger.info(
        f"{int(out['significant'].sum())}/{len(out)} MPS/PGS pairs correlated at p < {alpha} "
        f"(n={len(shared)})"
    )
    return out
