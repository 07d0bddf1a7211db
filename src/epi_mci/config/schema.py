"""
Configuration schema for the epi-mci pipeline.

Defines Pydantic models for every command. Defaults follow the EMIF-AD and
EXTEND analyses.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ============================================================================
# Cross-Validation Configuration
# ============================================================================


class CVConfig(BaseModel):
    """Repeated stratified K-fold shared by every model and elimination round."""

    folds: int = Field(default=5, ge=2)
    repeats: int = Field(default=5, ge=1)
    random_state: int = 123
    scoring: str = "roc_auc"
    n_jobs: int = -1


# ============================================================================
# Model-Specific Hyperparameter Configurations
# ============================================================================


class ElasticNetConfig(BaseModel):
    """Elastic-net logistic regression grid.

    alpha is the glmnet L1 mixing parameter (sklearn ``l1_ratio``); lambda is
    the glmnet penalty, mapped to ``C = 1 / (n_samples * lambda)``.
    """

    alpha_min: float = Field(default=0.1, gt=0.0, le=1.0)
    alpha_max: float = Field(default=1.0, gt=0.0, le=1.0)
    alpha_points: int = Field(default=10, ge=1)
    lambda_min: float = Field(default=0.01, gt=0.0)
    lambda_max: float = Field(default=2.5, gt=0.0)
    lambda_points: int = Field(default=100, ge=1)
    solver: str = "saga"
    max_iter: int = 5000
    random_state: int = 123

    @model_validator(mode="after")
    def check_ranges(self):
        if self.alpha_min > self.alpha_max:
            raise ValueError(f"alpha_min ({self.alpha_min}) > alpha_max ({self.alpha_max})")
        if self.lambda_min > self.lambda_max:
            raise ValueError(f"lambda_min ({self.lambda_min}) > lambda_max ({self.lambda_max})")
        return self


class SPLSConfig(BaseModel):
    """Sparse PLS-DA grid: number of components K and thresholding parameter eta."""

    max_components: int = Field(default=10, ge=1)
    eta_min: float = Field(default=0.1, ge=0.0, lt=1.0)
    eta_max: float = Field(default=0.9, ge=0.0, lt=1.0)
    eta_points: int = Field(default=20, ge=1)
    random_state: int = 123


class RFConfig(BaseModel):
    """Random forest grid.

    ``max_features`` (mtry) and ``min_samples_leaf`` (minimal node size) span
    1..n_features unless capped here.
    """

    n_estimators: int = Field(default=500, ge=1)
    criterion: Literal["gini", "entropy", "log_loss"] = "gini"
    max_features_cap: int | None = Field(default=None, ge=1)
    min_samples_leaf_cap: int | None = Field(default=None, ge=1)
    n_jobs: int = 1
    random_state: int = 456


class EliminationConfig(BaseModel):
    """Models that run backward feature elimination instead of a single fit."""

    models: list[str] = Field(default_factory=lambda: ["RF"])
    save_curve: bool = True


# ============================================================================
# Evaluation and Output Configuration
# ============================================================================


class EvaluationConfig(BaseModel):
    """Test-set evaluation settings."""

    n_boot: int = Field(default=1000, ge=100)
    boot_random_state: int = 0
    ci_method: Literal["percentile", "bca"] = "percentile"


class OutputConfig(BaseModel):
    """Configuration for output file generation."""

    model_config = ConfigDict(extra="forbid")

    save_models: bool = True
    save_test_preds: bool = True
    save_plots: bool = True
    plot_format: str = "png"
    plot_dpi: int = 300


class DiagnosisConfig(BaseModel):
    """Diagnostic groups kept for the binary classification task."""

    column: str = "Diagnosis"
    control: str = "NL"
    case: str = "MCI"
    control_label: str = "Control"
    case_label: str = "MCI"


class PGSConfig(BaseModel):
    """How PGS rows are linked to methylation sample ids."""

    pgs_file: Path | None = None
    meta_file: Path | None = None
    pgs_id_col: str = "ID"
    meta_participant_col: str = "Sample_Name"
    meta_sample_col: str = "X"
    suffix: str = "_PGS"


# ============================================================================
# Command Configurations
# ============================================================================


class TrainingConfig(BaseModel):
    """Configuration for ``epimci train``."""

    x_train: Path | None = None
    y_train: Path | None = None
    x_test: Path | None = None
    y_test: Path | None = None
    outdir: Path = Field(default=Path("results"))
    cohort: str = "EMIF"

    models: list[Literal["EN", "sPLS", "RF"]] = Field(
        default_factory=lambda: ["EN", "sPLS", "RF"]
    )
    feature_sets: list[Literal["all", "pgs_only", "mps_only"]] = Field(
        default_factory=lambda: ["all", "pgs_only"]
    )

    diagnosis: DiagnosisConfig = Field(default_factory=DiagnosisConfig)
    pgs: PGSConfig = Field(default_factory=PGSConfig)
    cv: CVConfig = Field(default_factory=CVConfig)
    elasticnet: ElasticNetConfig = Field(default_factory=ElasticNetConfig)
    spls: SPLSConfig = Field(default_factory=SPLSConfig)
    rf: RFConfig = Field(default_factory=RFConfig)
    elimination: EliminationConfig = Field(default_factory=EliminationConfig)
    evaluation: EvaluationConfig = Field(default_factory=EvaluationConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    strictness: Literal["off", "warn", "error"] = "warn"


class PreprocessConfig(BaseModel):
    """Configuration for ``epimci preprocess``."""

    beta_file: Path | None = None
    raw_beta_file: Path | None = None
    sample_sheet: Path | None = None
    detection_p_file: Path | None = None
    snp_file: Path | None = None
    cross_reactive_file: Path | None = None
    annotation_file: Path | None = None
    cell_type_file: Path | None = None
    outdir: Path = Field(default=Path("preprocessed"))

    sample_id_col: str = "Basename"
    sex_col: str = "Sex"
    age_col: str = "Age"

    normalization: Literal["quantile", "none"] = "quantile"
    detection_p_threshold: float = Field(default=0.01, gt=0.0, le=1.0)
    drop_sex_chromosomes: bool = True
    intensity_cutoff: float = 10.5
    sex_cutoff: float = -2.0
    n_components: int = Field(default=10, ge=1)
    outlier_quantile: float = Field(default=0.975, gt=0.5, lt=1.0)
    pca_color_columns: list[str] = Field(default_factory=lambda: ["CD8T", "CD4T", "Sex"])
    m_value_limits: tuple[float, float] = (-10.0, 10.0)
    output: OutputConfig = Field(default_factory=OutputConfig)


class ShapConfig(BaseModel):
    """Configuration for ``epimci shap``."""

    x_train: Path | None = None
    x_test: Path | None = None
    model_files: dict[str, Path] = Field(default_factory=dict)
    outdir: Path = Field(default=Path("results/shap"))
    n_permutations: int = Field(default=50, ge=1)
    background_size: int | None = Field(default=None, ge=1)
    scale_per_sample: bool = False
    exclude_features: list[str] = Field(default_factory=list)
    feature_labels: dict[str, str] = Field(default_factory=dict)
    radar_max: float = Field(default=0.3, gt=0.0)
    random_state: int = 123
    output: OutputConfig = Field(default_factory=OutputConfig)


class CorrelationConfig(BaseModel):
    """Configuration for ``epimci correlate``."""

    mps_file: Path | None = None
    pgs_file: Path | None = None
    meta_file: Path | None = None
    pgs_id_col: str = "ID"
    meta_participant_col: str = "Sample_Name"
    meta_sample_col: str = "X"
    pairs: dict[str, str] | None = None
    labels: dict[str, str] | None = None
    alpha: float = Field(default=0.05, gt=0.0, lt=1.0)
    outdir: Path = Field(default=Path("results/correlations"))
    output: OutputConfig = Field(default_factory=OutputConfig)


class ScoreSummaryConfig(BaseModel):
    """Configuration for ``epimci plot-scores``."""

    scores_file: Path | None = None
    meta_file: Path | None = None
    meta_sample_col: str = "X"
    diagnosis_col: str = "Diagnosis"
    control_code: str = "NL"
    group_order: list[str] = Field(default_factory=lambda: ["Control", "SCI", "MCI", "AD"])
    labels: dict[str, str] | None = None
    ncols: int = Field(default=4, ge=1)
    outdir: Path = Field(default=Path("results/scores"))
    output: OutputConfig = Field(default_factory=OutputConfig)
