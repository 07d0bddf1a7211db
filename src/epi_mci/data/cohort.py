"""
Cohort assembly for MCI classification.

Turns the raw train/test tables (MPS matrix, diagnosis table, PGS table,
sample metadata) into aligned feature matrices and binary labels.
"""

import logging

import pandas as pd

from epi_mci.data.schema import (
    CASE_LABEL,
    CONTROL_CODE,
    CONTROL_LABEL,
    DIAGNOSIS_COL,
    MCI_CODE,
    META_PARTICIPANT_COL,
    META_SAMPLE_COL,
    PGS_ID_COL,
    PGS_SUFFIX,
    TARGET_COL,
)

logger = logging.getLogger(__name__)

FEATURE_SETS = ("all", "pgs_only", "mps_only")


def filter_diagnosis(
    X: pd.DataFrame,
    Y: pd.DataFrame,
    control: str = CONTROL_CODE,
    case: str = MCI_CODE,
    diagnosis_col: str = DIAGNOSIS_COL,
    control_label: str = CONTROL_LABEL,
    case_label: str = CASE_LABEL,
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Keep control and case samples and add a categorical outcome column.

    Args:
        X: Feature matrix (samples × features)
        Y: Sample table with a diagnosis column, same index as X
        control: Diagnosis code of the control group
        case: Diagnosis code of the case group

    Returns:
        (X_filtered, Y_filtered). ``Y_filtered[TARGET_COL]`` is categorical with
        levels (control_label, case_label).

    Raises:
        ValueError: If X and Y do not share the same sample index
        KeyError: If the diagnosis column is missing
    """
    if diagnosis_col not in Y.columns:
        raise KeyError(f"Diagnosis column '{diagnosis_col}' not found in label table")
    if not X.index.equals(Y.index):
        missing = X.index.difference(Y.index)
        if len(missing) or len(X) != len(Y):
            raise ValueError(
                f"Feature and label tables are not aligned ({len(X)} vs {len(Y)} samples, "
                f"{len(missing)} feature samples without labels)"
            )
        Y = Y.loc[X.index]

    keep = Y[diagnosis_col].isin([control, case])
    X_out = X.loc[keep].copy()
    Y_out = Y.loc[keep].copy()

    Y_out[TARGET_COL] = pd.Categorical(
        [control_label if d == control else case_label for d in Y_out[diagnosis_col]],
        categories=[control_label, case_label],
    )

    counts = Y_out[TARGET_COL].value_counts()
    logger.info(
        f"Kept {keep.sum()}/{len(keep)} samples "
        f"({control_label}={counts.get(control_label, 0)}, "
        f"{case_label}={counts.get(case_label, 0)})"
    )
    return X_out, Y_out


def pgs_by_sample(
    pgs: pd.DataFrame,
    meta: pd.DataFrame,
    pgs_id_col: str = PGS_ID_COL,
    participant_col: str = META_PARTICIPANT_COL,
    sample_col: str = META_SAMPLE_COL,
    suffix: str | None = PGS_SUFFIX,
) -> pd.DataFrame:
    """
    Re-index a PGS table from participant ids to methylation sample ids.

    Args:
        pgs: PGS table, one row per participant. The participant id is taken
            from ``pgs_id_col`` if present, otherwise from the index.
        meta: Sample metadata linking participant ids to sample ids
        suffix: Appended to every PGS column name (None keeps names)

    Returns:
        DataFrame indexed by sample id with numeric PGS columns
    """
    pgs = pgs.copy()
    if pgs_id_col in pgs.columns:
        pgs = pgs.set_index(pgs_id_col)
    pgs.index = pgs.index.astype(str)

    for col in (participant_col, sample_col):
        if col not in meta.columns:
            raise KeyError(f"Metadata column '{col}' not found")

    link = meta[[participant_col, sample_col]].astype(str).drop_duplicates()
    link = link[link[participant_col].isin(pgs.index)]

    out = pgs.loc[link[participant_col]]
    out.index = pd.Index(link[sample_col].to_numpy(), name=None)
    out = out.select_dtypes("number")
    if suffix:
        out.columns = [f"{c}{suffix}" for c in out.columns]

    logger.debug(f"Linked {len(out)} PGS rows to methylation samples")
    return out


def attach_pgs(
    X: pd.DataFrame,
    Y: pd.DataFrame,
    pgs: pd.DataFrame,
    meta: pd.DataFrame,
    pgs_id_col: str = PGS_ID_COL,
    participant_col: str = META_PARTICIPANT_COL,
    sample_col: str = META_SAMPLE_COL,
    suffix: str = PGS_SUFFIX,
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Append PGS columns to the MPS matrix.

    Only samples that have both MPSs and PGSs are kept; row order follows X.

    Returns:
        (X_with_pgs, Y_subset)
    """
    pgs_samples = pgs_by_sample(
        pgs, meta, pgs_id_col, participant_col, sample_col, suffix=suffix
    )
    samples = [s for s in X.index if s in pgs_samples.index]
    if not samples:
        raise ValueError("No samples have both methylation profile scores and PGSs")

    X_out = pd.concat([X.loc[samples], pgs_samples.loc[samples]], axis=1)
    Y_out = Y.loc[samples].copy()

    logger.info(
        f"Attached {pgs_samples.shape[1]} PGSs; {len(samples)}/{len(X)} samples have both"
    )
    return X_out, Y_out


def get_pgs_columns(X: pd.DataFrame, suffix: str = PGS_SUFFIX) -> list[str]:
    """Columns holding polygenic scores."""
    return [c for c in X.columns if str(c).endswith(suffix)]


def select_feature_set(X: pd.DataFrame, name: str, suffix: str = PGS_SUFFIX) -> pd.DataFrame:
    """
    Select the columns of a named feature set.

    Args:
        X: Feature matrix with MPS and ``*_PGS`` columns
        name: ``all`` (MPS + PGS), ``pgs_only`` or ``mps_only``

    Raises:
        ValueError: Unknown name, or the selected set is empty
    """
    if name not in FEATURE_SETS:
        raise ValueError(f"Unknown feature set '{name}'. Expected one of {FEATURE_SETS}")

    pgs_cols = get_pgs_columns(X, suffix)
    if name == "all":
        cols = list(X.columns)
    elif name == "pgs_only":
        cols = pgs_cols
    else:
        cols = [c for c in X.columns if c not in pgs_cols]

    if not cols:
        raise ValueError(f"Feature set '{name}' selects no columns")
    return X[cols]


def encode_labels(y: pd.Series, positive_label: str = CASE_LABEL) -> pd.Series:
    """
    Encode a categorical outcome as 0/1 with ``positive_label`` as 1.

    Raises:
        ValueError: If the positive label is absent or more than two levels occur
    """
    values = y.astype(str)
    levels = set(values.unique())
    if positive_label not in levels:
        raise ValueError(f"Positive label '{positive_label}' not found in labels {sorted(levels)}")
    if len(levels) > 2:
        raise ValueError(f"Expected a binary outcome, found levels {sorted(levels)}")
    return (values == positive_label).astype(int).rename(y.name)


def build_cohort(
    X: pd.DataFrame,
    Y: pd.DataFrame,
    pgs: pd.DataFrame | None = None,
    meta: pd.DataFrame | None = None,
    diagnosis=None,
    pgs_config=None,
) -> tuple[pd.DataFrame, pd.Series]:
    """
    Filter diagnoses, attach PGSs when provided and encode the outcome.

    Args:
        diagnosis: DiagnosisConfig (None uses NL vs MCI)
        pgs_config: PGSConfig for column names (None uses schema defaults)

    Returns:
        (X, y) with y encoded 0 = control, 1 = case
    """
    kwargs = {}
    if diagnosis is not None:
        kwargs = dict(
            control=diagnosis.control,
            case=diagnosis.case,
            diagnosis_col=diagnosis.column,
            control_label=diagnosis.control_label,
            case_label=diagnosis.case_label,
        )
    X, Y = filter_diagnosis(X, Y, **kwargs)

    if pgs is not None and meta is not None:
        link = {}
        if pgs_config is not None:
            link = dict(
                pgs_id_col=pgs_config.pgs_id_col,
                participant_col=pgs_config.meta_participant_col,
                sample_col=pgs_config.meta_sample_col,
                suffix=pgs_config.suffix,
            )
        X, Y = attach_pgs(X, Y, pgs, meta, **link)

    case_label = diagnosis.case_label if diagnosis is not None else CASE_LABEL
    y = encode_labels(Y[TARGET_COL], positive_label=case_label)
    return X, y
