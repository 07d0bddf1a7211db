"""
Tests for SHAP explanations and MPS/PGS correlations.
"""

import numpy as np
import pandas as pd
import pytest
from conftest import make_training_config
from epi_mci.interpretation import (
    compare_shap_importance,
    compute_shap_values,
    correlate_score_pairs,
    mean_abs_shap,
)
from epi_mci.models.trainers import ElasticNetTrainer


@pytest.fixture
def en_model(binary_data):
    X, y = binary_data
    grid = {"clf__l1_ratio": [0.5], "clf__C": [1.0]}
    return ElasticNetTrainer(make_training_config()).train(X, y, param_grid=grid).model


class TestComputeShapValues:
    """Tests for compute_shap_values."""

    def test_shape_and_efficiency(self, en_model, binary_data):
        """Row sums equal prediction minus the background mean prediction."""
        X, _ = binary_data
        bg = X.iloc[:20]
        explain = X.iloc[40:45]

        values = compute_shap_values(en_model, bg, explain, n_permutations=3)

        assert values.shape == (5, 4)
        assert list(values.columns) == en_model.feature_names
        assert list(values.index) == list(explain.index)
        expected = en_model.predict_score(explain) - en_model.predict_score(bg).mean()
        np.testing.assert_allclose(values.sum(axis=1).to_numpy(), expected, atol=1e-6)

    def test_signal_feature_dominates(self, en_model, binary_data):
        X, _ = binary_data
        values = compute_shap_values(en_model, X.iloc[:30], X.iloc[30:], n_permutations=2)
        importance = mean_abs_shap(values)
        assert importance.idxmax() in {"f0", "f1"}

    def test_extra_columns_ignored(self, en_model, binary_data):
        X, _ = binary_data
        wider = X.assign(extra=1.0)[["extra", *X.columns]]
        values = compute_shap_values(en_model, wider.iloc[:10], wider.iloc[10:12], n_permutations=2)
        assert "extra" not in values.columns

    def test_background_subsample(self, en_model, binary_data):
        X, _ = binary_data
        values = compute_shap_values(
            en_model, X, X.iloc[:2], n_permutations=2, background_size=10
        )
        assert values.shape == (2, 4)

    def test_missing_feature(self, en_model, binary_data):
        X, _ = binary_data
        with pytest.raises(ValueError, match="missing"):
            compute_shap_values(en_model, X, X.drop(columns="f2"))


class TestShapImportance:
    """Tests for mean_abs_shap and compare_shap_importance."""

    def test_mean_abs_shap(self):
        values = pd.DataFrame({"a": [1.0, -3.0], "b": [0.0, 1.0]})
        out = mean_abs_shap(values)
        assert out.name == "mean_abs_shap"
        assert out.tolist() == [2.0, 0.5]

    def test_mean_abs_shap_scaled(self):
        values = pd.DataFrame({"a": [1.0, -3.0, 0.0], "b": [1.0, 1.0, 0.0]})
        out = mean_abs_shap(values, scale_per_sample=True)
        # rows: (0.5, 0.5), (0.75, 0.25), all-zero row counts as (0, 0)
        assert out.tolist() == pytest.approx([1.25 / 3, 0.75 / 3])

    def test_compare_normalizes_and_joins(self):
        en = pd.Series({"SysBP": 2.0, "BMI": 1.0, "Age": 1.0})
        rf = pd.Series({"SysBP": 1.0, "BMI": 3.0, "Depression": 5.0})
        table = compare_shap_importance({"EN": en, "RF": rf})
        assert list(table.columns) == ["EN", "RF"]
        assert set(table.index) == {"SysBP", "BMI"}
        np.testing.assert_allclose(table.sum(axis=0), 1.0)
        assert table.loc["SysBP", "EN"] == pytest.approx(2 / 3)

    def test_compare_exclude(self):
        en = pd.Series({"SysBP": 2.0, "Age": 2.0})
        table = compare_shap_importance({"EN": en}, exclude=["Age", "Unknown"])
        assert list(table.index) == ["SysBP"]
        assert table.loc["SysBP", "EN"] == 1.0

    def test_compare_errors(self):
        with pytest.raises(ValueError, match="No SHAP"):
            compare_shap_importance({})
        with pytest.raises(ValueError, match="No features shared"):
            compare_shap_importance({"a": pd.Series({"x": 1.0}), "b": pd.Series({"y": 1.0})})
        with pytest.raises(ValueError, match="All-zero"):
            compare_shap_importance({"a": pd.Series({"x": 0.0})})


class TestCorrelateScorePairs:
    """Tests for correlate_score_pairs."""

    @pytest.fixture
    def scores(self):
        rng = np.random.RandomState(8)
        idx = [f"S{i}" for i in range(60)]
        sbp = rng.normal(size=60)
        mps = pd.DataFrame({"SysBP": sbp, "BMI": rng.normal(size=60)}, index=idx)
        pgs = pd.DataFrame(
            {"SBPauto": sbp + rng.normal(0, 0.5, 60), "BMI": rng.normal(size=60)}, index=idx
        )
        return mps, pgs

    def test_pairs(self, scores):
        mps, pgs = scores
        out = correlate_score_pairs(mps, pgs, pairs={"SysBP": "SBPauto", "BMI": "BMI"})
        assert list(out.columns) == ["mps", "pgs", "name", "n", "r", "pvalue", "significant"]
        assert out.loc[0, "name"] == "Syst. blood pressure"
        assert out.loc[0, "r"] > 0.7
        assert bool(out.loc[0, "significant"])
        assert out["n"].tolist() == [60, 60]

    def test_uses_shared_samples_and_drops_missing(self, scores):
        mps, pgs = scores
        pgs = pgs.iloc[10:].copy()
        pgs.iloc[0, 0] = np.nan
        out = correlate_score_pairs(mps, pgs, pairs={"SysBP": "SBPauto"}, labels={"SysBP": "SBP"})
        assert out.loc[0, "n"] == 49
        assert out.loc[0, "name"] == "SBP"

    def test_missing_columns(self, scores):
        mps, pgs = scores
        with pytest.raises(ValueError, match="not found"):
            correlate_score_pairs(mps, pgs)

    def test_too_few_samples(self, scores):
        mps, pgs = scores
        with pytest.raises(ValueError, match="at least 3"):
            correlate_score_pairs(mps.iloc[:2], pgs, pairs={"SysBP": "SBPauto"})
