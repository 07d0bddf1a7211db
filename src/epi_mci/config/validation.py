"""
Configuration validation and safety checks.

Semantic checks that pydantic field constraints cannot express. Issues are
raised, warned about or ignored depending on the strictness level.
"""

import warnings

from epi_mci.config.schema import PreprocessConfig, ShapConfig, TrainingConfig


class ConfigValidationError(Exception):
    """Raised when configuration validation fails in strict mode."""

    pass


class ConfigValidationWarning(UserWarning):
    """Warning for potential configuration issues."""

    pass


def validate_training_config(config: TrainingConfig):
    """
    Validate training configuration for inconsistencies.

    Args:
        config: TrainingConfig instance
    """
    issues = []

    unknown = sorted(set(config.elimination.models) - set(config.models))
    if unknown:
        issues.append(
            f"elimination.models {unknown} are not in models {config.models}; "
            "they will not be trained."
        )

    if config.spls.eta_min > config.spls.eta_max:
        issues.append(
            f"spls.eta_min ({config.spls.eta_min}) > spls.eta_max ({config.spls.eta_max})."
        )

    if config.diagnosis.control == config.diagnosis.case:
        issues.append(
            f"diagnosis.control and diagnosis.case are both '{config.diagnosis.case}'."
        )

    if "RF" in config.models and config.rf.n_estimators < 100:
        issues.append(
            f"rf.n_estimators={config.rf.n_estimators} gives unstable impurity importances; "
            "elimination order may vary between seeds."
        )

    n_fits = config.cv.folds * config.cv.repeats
    if n_fits < 10:
        issues.append(
            f"cv.folds x cv.repeats = {n_fits}; CV AUROC estimates used for model "
            "selection will be noisy."
        )

    if (config.pgs.pgs_file is None) != (config.pgs.meta_file is None):
        issues.append(
            "pgs.pgs_file and pgs.meta_file must be set together; PGSs will not be attached."
        )

    _handle_issues(issues, config.strictness, "Training configuration")


def validate_preprocess_config(config: PreprocessConfig, strictness: str = "warn"):
    """Validate preprocessing configuration."""
    issues = []

    lo, hi = config.m_value_limits
    if lo >= hi:
        issues.append(f"m_value_limits lower bound ({lo}) >= upper bound ({hi}).")

    if config.beta_file is None and config.raw_beta_file is None:
        issues.append("Neither beta_file nor raw_beta_file is set.")

    if config.normalization == "none" and config.raw_beta_file is not None:
        issues.append("raw_beta_file is set but normalization='none'; betas are used as-is.")

    _handle_issues(issues, strictness, "Preprocess configuration")


def validate_shap_config(config: ShapConfig, strictness: str = "warn"):
    """Validate SHAP configuration."""
    issues = []

    if not config.model_files:
        issues.append("model_files is empty; no models to explain.")

    if config.n_permutations < 10:
        issues.append(
            f"n_permutations={config.n_permutations}; SHAP estimates will have high variance."
        )

    _handle_issues(issues, strictness, "SHAP configuration")


def _handle_issues(issues: list[str], strictness: str, context: str):
    """Handle validation issues based on strictness level."""
    if not issues:
        return

    message = f"{context} issues:\n" + "\n".join(f"  - {issue}" for issue in issues)

    if strictness == "error":
        raise ConfigValidationError(message)
    elif strictness == "warn":
        warnings.warn(message, ConfigValidationWarning, stacklevel=3)
    # strictness == "off": do nothing
