"""
Probe filtering for methylation beta matrices (probes × samples).

Each filter returns the filtered matrix and logs how many probes it removed.
Annotation inputs are indexed by probe id; probes absent from an annotation
are kept.
"""

import logging
from collections.abc import Iterable

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

SEX_CHROMOSOMES = ("chrX", "chrY")


def _log_removed(step: str, before: int, after: int) -> None:
    logger.info(f"{step}: removed {before - after} probes ({after} remaining)")


def filter_detection_p(
    beta: pd.DataFrame,
    detection_p: pd.DataFrame,
    threshold: float = 0.01,
) -> pd.DataFrame:
    """
    Remove probes whose detection p-value exceeds ``threshold`` in any sample.

    Raises:
        ValueError: If detection p-values are missing for probes or samples in beta
    """
    missing_probes = beta.index.difference(detection_p.index)
    missing_samples = beta.columns.difference(detection_p.columns)
    if len(missing_probes) or len(missing_samples):
        raise ValueError(
            f"Detection p-values missing for {len(missing_probes)} probes "
            f"and {len(missing_samples)} samples"
        )
    det = detection_p.loc[beta.index, beta.columns]
    failed = (det > threshold).any(axis=1)
    out = beta.loc[~failed]
    _log_removed(f"Detection p > {threshold}", len(beta), len(out))
    return out


def filter_snp_probes(beta: pd.DataFrame, snp_info: pd.DataFrame) -> pd.DataFrame:
    """
    Remove probes with a SNP at the CpG site or single-base extension.

    ``snp_info`` needs CpG_maf and SBE_maf columns; a probe is removed when
    either is > 0.
    """
    required = {"CpG_maf", "SBE_maf"}
    missing = required - set(snp_info.columns)
    if missing:
        raise ValueError(f"SNP annotation missing columns: {sorted(missing)}")

    info = snp_info.reindex(beta.index)
    cpg = info["CpG_maf"].fillna(0).astype(float)
    sbe = info["SBE_maf"].fillna(0).astype(float)
    flagged = (cpg > 0) | (sbe > 0)
    out = beta.loc[~flagged.to_numpy()]
    _log_removed("SNP probes", len(beta), len(out))
    return out


def filter_cross_reactive(beta: pd.DataFrame, cross_reactive: Iterable[str]) -> pd.DataFrame:
    """Remove probes listed as cross-reactive."""
    drop = set(map(str, cross_reactive))
    out = beta.loc[~beta.index.astype(str).isin(drop)]
    _log_removed("Cross-reactive probes", len(beta), len(out))
    return out


def filter_sex_chromosomes(
    beta: pd.DataFrame,
    annotation: pd.DataFrame,
    chr_col: str = "chr",
) -> pd.DataFrame:
    """Remove probes annotated on chrX or chrY."""
    if chr_col not in annotation.columns:
        raise ValueError(f"Annotation missing chromosome column '{chr_col}'")
    chrom = annotation[chr_col].reindex(beta.index).astype(str)
    out = beta.loc[~chrom.isin(SEX_CHROMOSOMES).to_numpy()]
    _log_removed("Sex chromosome probes", len(beta), len(out))
    return out


def check_beta_values(beta: pd.DataFrame) -> dict:
    """
    Sanity report on a beta matrix.

    Returns:
        Dict with counts of NaN, values <= 0, values >= 1, duplicated probe ids
        and duplicated sample ids
    """
    values = beta.to_numpy(dtype=float)
    report = {
        "n_probes": int(beta.shape[0]),
        "n_samples": int(beta.shape[1]),
        "n_missing": int(np.isnan(values).sum()),
        "n_nonpositive": int((values <= 0).sum()),
        "n_ge_one": int((values >= 1).sum()),
        "n_duplicated_probes": int(beta.index.duplicated().sum()),
        "n_duplicated_samples": int(beta.columns.duplicated().sum()),
    }
    problems = {k: v for k, v in report.items() if k not in ("n_probes", "n_samples") and v}
    if problems:
        logger.warning(f"Beta value check: {problems}")
    return report
