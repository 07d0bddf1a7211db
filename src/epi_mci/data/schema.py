"""
Data schema definitions and constants.

Defines column names, labels, score names and display labels used throughout
the pipeline.
"""

# ============================================================================
# Column Names
# ============================================================================

# Diagnosis column in the label table
DIAGNOSIS_COL = "Diagnosis"

# Binary outcome column added by filter_diagnosis
TARGET_COL = "Y"

# Sample identifier in the metadata table (matches methylation row names)
META_SAMPLE_COL = "X"

# Participant identifier in the metadata table (matches PGS IDs)
META_PARTICIPANT_COL = "Sample_Name"

# Participant identifier in the PGS table
PGS_ID_COL = "ID"

# ============================================================================
# Diagnosis Codes and Class Labels
# ============================================================================

CONTROL_CODE = "NL"
MCI_CODE = "MCI"

CONTROL_LABEL = "Control"
CASE_LABEL = "MCI"

# Label levels (negative class first)
LABEL_LEVELS = (CONTROL_LABEL, CASE_LABEL)

# Diagnostic groups in display order, and their fills
DIAGNOSIS_ORDER = ["Control", "SCI", "MCI", "AD"]
DIAGNOSIS_COLORS = ["#FCBBA1", "#FB6A4A", "#CB181D", "#99000D"]

# ============================================================================
# Column Patterns
# ============================================================================

# PGS columns carry this suffix after attach_pgs
PGS_SUFFIX = "_PGS"

# ============================================================================
# Methylation Profile Scores
# ============================================================================

# MPS column -> plot label, in the order of the score table
MPS_LABELS = {
    "SysBP": "Syst. Blood Pressure",
    "TotalChol": "Total Chol.",
    "Education": "Low Education",
    "Physical": "Physical Inact.",
    "Diet": "Unhealthy Diet",
    "Depression": "Depression",
    "Diabetes": "Type II Diabetes",
    "HeartDisease": "Heart Disease",
    "SexMale": "Sex (male)",
    "Age": "Age",
    "Alcohol": "Alcohol Intake",
    "BMI": "BMI",
    "HDL": "HDL Chol.",
    "Smoking": "Smoking",
}

# ============================================================================
# MPS / PGS Pairs
# ============================================================================

# MPS column -> PGS column measuring the same risk factor
MPS_PGS_PAIRS = {
    "SysBP": "SBPauto",
    "TotalChol": "TC",
    "Education": "EA22",
    "Physical": "MVPA",
    "Diet": "DC2",
    "Depression": "MDD",
    "Diabetes": "T2D",
    "HeartDisease": "CAD",
    "Alcohol": "Alcohol",
    "BMI": "BMI",
    "HDL": "HDL",
}

# MPS column -> risk factor name used in correlation plots
RISK_FACTOR_LABELS = {
    "SysBP": "Syst. blood pressure",
    "TotalChol": "Total cholesterol",
    "Education": "Low education",
    "Physical": "Physical inactivity",
    "Diet": "Dietary intake",
    "Depression": "Depression",
    "Diabetes": "Type II diabetes",
    "HeartDisease": "Heart disease",
    "Alcohol": "Alcohol consumption",
    "BMI": "BMI",
    "HDL": "HDL cholesterol",
}

# ============================================================================
# Model Names
# ============================================================================

VALID_MODELS = ["EN", "sPLS", "RF"]

MODEL_DISPLAY_NAMES = {
    "EN": "EN",
    "sPLS": "sPLS-DA",
    "RF": "RF-RFE",
}

FEATURE_SET_DISPLAY_NAMES = {
    "all": "MPSs/PGSs",
    "pgs_only": "PGSs",
    "mps_only": "MPSs",
}

# ROC curve colors: PGS-only models in blues, MPS+PGS models in reds
ROC_COLORS = ["#084594", "#2171B5", "#4292C6", "#99000D", "#CB181D", "#EF3B2C"]

# ============================================================================
# Array QC Columns (sample sheet)
# ============================================================================

# log2 median methylated / unmethylated intensity
MMED_COL = "mMed"
UMED_COL = "uMed"

# log2 median total intensity of X / Y chromosome probes
XMED_COL = "xMed"
YMED_COL = "yMed"

# Median bisulfite conversion percentage
BISULFITE_COL = "bisulfite"

# Illumina probe annotation chromosome column
ANNOTATION_CHR_COL = "chr"
