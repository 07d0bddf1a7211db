"""Configuration management for epi-mci."""

from epi_mci.config.defaults import (
    DEFAULT_CV_CONFIG,
    VALID_FEATURE_SETS,
    VALID_MODELS,
)
from epi_mci.config.loader import (
    CONFIG_LOADERS,
    apply_overrides,
    load_correlation_config,
    load_preprocess_config,
    load_score_summary_config,
    load_shap_config,
    load_training_config,
    load_yaml,
    save_config,
)
from epi_mci.config.schema import (
    CorrelationConfig,
    CVConfig,
    ElasticNetConfig,
    EliminationConfig,
    EvaluationConfig,
    OutputConfig,
    PreprocessConfig,
    RFConfig,
    ScoreSummaryConfig,
    ShapConfig,
    SPLSConfig,
    TrainingConfig,
)
from epi_mci.config.validation import (
    ConfigValidationError,
    ConfigValidationWarning,
    validate_preprocess_config,
    validate_shap_config,
    validate_training_config,
)

__all__ = [
    "VALID_MODELS",
    "VALID_FEATURE_SETS",
    "DEFAULT_CV_CONFIG",
    "CONFIG_LOADERS",
    "apply_overrides",
    "load_yaml",
    "load_training_config",
    "load_preprocess_config",
    "load_shap_config",
    "load_correlation_config",
    "load_score_summary_config",
    "save_config",
    "TrainingConfig",
    "PreprocessConfig",
    "ShapConfig",
    "CorrelationConfig",
    "ScoreSummaryConfig",
    "CVConfig",
    "ElasticNetConfig",
    "SPLSConfig",
    "RFConfig",
    "EliminationConfig",
    "EvaluationConfig",
    "OutputConfig",
    "ConfigValidationError",
    "ConfigValidationWarning",
    "validate_training_config",
    "validate_preprocess_config",
    "validate_shap_config",
]
