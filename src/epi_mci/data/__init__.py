"""Data handling and schema definitions."""

from epi_mci.data.cohort import (
    attach_pgs,
    build_cohort,
    encode_labels,
    filter_diagnosis,
    get_pgs_columns,
    pgs_by_sample,
    select_feature_set,
)
from epi_mci.data.io import check_numeric_features, read_table, write_table
from epi_mci.data.schema import (
    CASE_LABEL,
    CONTROL_LABEL,
    DIAGNOSIS_COL,
    LABEL_LEVELS,
    MPS_LABELS,
    MPS_PGS_PAIRS,
    PGS_SUFFIX,
    TARGET_COL,
)

__all__ = [
    # Schema
    "DIAGNOSIS_COL",
    "TARGET_COL",
    "CONTROL_LABEL",
    "CASE_LABEL",
    "LABEL_LEVELS",
    "PGS_SUFFIX",
    "MPS_LABELS",
    "MPS_PGS_PAIRS",
    # I/O
    "read_table",
    "write_table",
    "check_numeric_features",
    # Cohort
    "filter_diagnosis",
    "pgs_by_sample",
    "attach_pgs",
    "get_pgs_columns",
    "select_feature_set",
    "encode_labels",
    "build_cohort",
]
