"""Feature selection for MCI classification."""

from epi_mci.features.elimination import (
    EliminationResult,
    InputValidationError,
    ModelTrainingFailed,
    RoundRecord,
    backward_feature_elimination,
    least_important_feature,
    save_elimination_results,
    select_best_round,
    validate_inputs,
)

__all__ = [
    "EliminationResult",
    "RoundRecord",
    "InputValidationError",
    "ModelTrainingFailed",
    "backward_feature_elimination",
    "least_important_feature",
    "select_best_round",
    "validate_inputs",
    "save_elimination_results",
]
