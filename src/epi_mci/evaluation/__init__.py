"""Evaluation of trained models and score distributions."""

from epi_mci.evaluation.group_tests import anova_tukey, group_tests_table, kruskal_pairwise
from epi_mci.evaluation.performance import (
    compare_feature_sets,
    evaluate_scores,
    format_auc_label,
    predict_scores,
    roc_table,
)

__all__ = [
    "format_auc_label",
    "predict_scores",
    "evaluate_scores",
    "roc_table",
    "compare_feature_sets",
    "anova_tukey",
    "kruskal_pairwise",
    "group_tests_table",
]
