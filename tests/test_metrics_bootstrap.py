"""
Tests for bootstrap confidence interval module.

Covers:
- Basic CI computation
- Stratified resampling behavior
- Edge cases (insufficient samples, length mismatches)
- Reproducibility (seeding)
- Model comparison CIs
"""

import numpy as np
import pytest
from epi_mci.metrics.bootstrap import (
    _safe_metric,
    stratified_bootstrap_ci,
    stratified_bootstrap_diff_ci,
)
from sklearn.metrics import roc_auc_score


class TestSafeMetric:
    """Tests for _safe_metric helper."""

    def test_safe_metric_success(self):
        """Should return metric value on successful computation."""
        result = _safe_metric(roc_auc_score, np.array([0, 0, 1, 1]), np.array([0.1, 0.2, 0.8, 0.9]))
        assert result == 1.0

    def test_safe_metric_failure(self):
        """Should return NaN when the metric is undefined."""
        result = _safe_metric(roc_auc_score, np.array([1, 1, 1]), np.array([0.5, 0.6, 0.7]))
        assert np.isnan(result)


class TestStratifiedBootstrapCI:
    """Tests for stratified_bootstrap_ci."""

    @pytest.fixture
    def basic_data(self):
        """Informative scores for 50 controls and 30 cases."""
        rng = np.random.RandomState(42)
        y_true = np.array([0] * 50 + [1] * 30)
        y_pred = np.clip(0.4 * y_true + rng.normal(0.3, 0.2, 80), 0, 1)
        return y_true, y_pred

    def test_basic_ci_computation(self, basic_data):
        """CI brackets the full-sample AUROC."""
        y_true, y_pred = basic_data
        lo, hi = stratified_bootstrap_ci(y_true, y_pred, roc_auc_score, n_boot=200, seed=42)
        auc = roc_auc_score(y_true, y_pred)
        assert 0 <= lo <= auc <= hi <= 1

    def test_reproducible(self, basic_data):
        y_true, y_pred = basic_data
        a = stratified_bootstrap_ci(y_true, y_pred, roc_auc_score, n_boot=100, seed=7)
        b = stratified_bootstrap_ci(y_true, y_pred, roc_auc_score, n_boot=100, seed=7)
        assert a == b

    def test_different_seeds(self, basic_data):
        y_true, y_pred = basic_data
        a = stratified_bootstrap_ci(y_true, y_pred, roc_auc_score, n_boot=100, seed=1)
        b = stratified_bootstrap_ci(y_true, y_pred, roc_auc_score, n_boot=100, seed=2)
        assert a != b

    def test_stratification_keeps_both_classes(self, basic_data):
        """Every replicate has both classes, so no resample is discarded."""
        y_true, y_pred = basic_data
        seen = []

        def metric(y, p):
            seen.append((int(y.sum()), len(y)))
            return roc_auc_score(y, p)

        stratified_bootstrap_ci(y_true, y_pred, metric, n_boot=50, seed=0)
        assert seen == [(30, 80)] * 50

    def test_insufficient_cases(self):
        with pytest.raises(ValueError, match="Insufficient"):
            stratified_bootstrap_ci(
                np.array([0, 0, 0, 1]), np.array([0.1, 0.2, 0.3, 0.4]), roc_auc_score
            )

    def test_length_mismatch(self):
        with pytest.raises(ValueError, match="Length mismatch"):
            stratified_bootstrap_ci(np.array([0, 0, 1, 1]), np.array([0.1, 0.2]), roc_auc_score)

    def test_unknown_method(self, basic_data):
        y_true, y_pred = basic_data
        with pytest.raises(ValueError, match="method"):
            stratified_bootstrap_ci(y_true, y_pred, roc_auc_score, method="normal")

    def test_bca(self, basic_data):
        y_true, y_pred = basic_data
        lo, hi = stratified_bootstrap_ci(
            y_true, y_pred, roc_auc_score, n_boot=200, seed=0, method="bca"
        )
        assert 0 <= lo <= hi <= 1

    def test_bca_rejects_small_class(self):
        """BCa resamples are unstratified, so a 2-case set is refused."""
        rng = np.random.RandomState(0)
        y_true = np.array([0] * 28 + [1] * 2)
        y_pred = rng.uniform(size=30)
        with pytest.raises(ValueError, match="percentile"):
            stratified_bootstrap_ci(y_true, y_pred, roc_auc_score, n_boot=100, method="bca")
        lo, hi = stratified_bootstrap_ci(y_true, y_pred, roc_auc_score, n_boot=100)
        assert np.isfinite(lo) and np.isfinite(hi)


class TestStratifiedBootstrapDiffCI:
    """Tests for stratified_bootstrap_diff_ci."""

    def test_better_model_positive_difference(self):
        rng = np.random.RandomState(0)
        y = np.array([0] * 60 + [1] * 40)
        strong = 0.6 * y + rng.normal(0.2, 0.15, 100)
        weak = 0.1 * y + rng.normal(0.2, 0.15, 100)

        diff, lo, hi = stratified_bootstrap_diff_ci(y, strong, weak, roc_auc_score, n_boot=200)

        assert diff == pytest.approx(roc_auc_score(y, strong) - roc_auc_score(y, weak))
        assert lo <= diff <= hi
        assert lo > 0

    def test_identical_models(self):
        y = np.array([0, 1] * 20)
        p = np.linspace(0, 1, 40)
        diff, lo, hi = stratified_bootstrap_diff_ci(y, p, p, roc_auc_score, n_boot=100)
        assert diff == 0.0
        assert lo == hi == 0.0

    def test_length_mismatch(self):
        with pytest.raises(ValueError, match="Length mismatch"):
            stratified_bootstrap_diff_ci(
                np.array([0, 1, 0, 1]), np.zeros(4), np.zeros(3), roc_auc_score
            )
