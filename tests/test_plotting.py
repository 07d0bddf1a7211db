"""
Tests for plotting functions.

Plots are checked for being written without errors; visual content is not
asserted.
"""

import numpy as np
import pandas as pd
import pytest
from epi_mci.evaluation import evaluate_scores, roc_table
from epi_mci.plotting import (
    plot_bisulfite_histogram,
    plot_correlation_bars,
    plot_distance_distance,
    plot_elimination_curve,
    plot_explained_variance,
    plot_median_intensity,
    plot_pca_scores,
    plot_roc_comparison,
    plot_sample_densities,
    plot_score_boxplots,
    plot_sex_check,
    plot_shap_radar,
)
from epi_mci.preprocessing import check_sex, flag_outliers, median_intensity_qc, run_pca


@pytest.fixture
def pca_result(beta_matrix):
    return run_pca(beta_matrix, n_components=3)


class TestQCPlots:
    """Array QC plots."""

    def test_sample_densities(self, beta_matrix, tmp_path):
        out = plot_sample_densities(beta_matrix, tmp_path / "dens.png", xlim=(0, 1), dpi=50)
        assert out.exists()

    def test_sample_densities_skips_constant(self, beta_matrix, tmp_path):
        beta_matrix["sample00"] = 0.5
        out = plot_sample_densities(beta_matrix, tmp_path / "dens.png", dpi=50)
        assert out.exists()

    def test_bisulfite_histogram(self, tmp_path):
        conv = pd.Series(np.random.RandomState(0).uniform(85, 99, 40))
        assert plot_bisulfite_histogram(conv, tmp_path / "bs.png", dpi=50).exists()

    def test_median_intensity(self, tmp_path):
        idx = [f"s{i}" for i in range(10)]
        qc = median_intensity_qc(
            pd.Series(np.linspace(9, 13, 10), index=idx),
            pd.Series(np.linspace(10, 12, 10), index=idx),
        )
        assert plot_median_intensity(qc, tmp_path / "qc" / "intensity.png", dpi=50).exists()

    def test_sex_check(self, tmp_path):
        idx = ["a", "b", "c", "d"]
        table = check_sex(
            pd.Series([12.0, 12.0, 12.5, 12.2], index=idx),
            pd.Series([11.0, 8.0, 8.5, 11.5], index=idx),
            pd.Series([1, 2, 1, np.nan], index=idx),
        )
        assert plot_sex_check(table, tmp_path / "sex.png", dpi=50).exists()

    def test_pca_scores_plain(self, pca_result, tmp_path):
        out = plot_pca_scores(
            pca_result.scores, pca_result.explained_variance, tmp_path / "pca.png", dpi=50
        )
        assert out.exists()

    def test_pca_scores_continuous_color(self, pca_result, tmp_path):
        color = pd.Series(np.linspace(0, 1, 12), index=pca_result.scores.index)
        out = plot_pca_scores(
            pca_result.scores,
            pca_result.explained_variance,
            tmp_path / "pca_cd8.png",
            pc_x="PC2",
            pc_y="PC3",
            color=color,
            color_label="CD8T",
            dpi=50,
        )
        assert out.exists()

    def test_pca_scores_categorical_color(self, pca_result, tmp_path):
        color = pd.Series([1, 2] * 6, index=pca_result.scores.index)
        out = plot_pca_scores(
            pca_result.scores,
            pca_result.explained_variance,
            tmp_path / "pca_sex.png",
            color=color,
            color_label="Sex",
            dpi=50,
        )
        assert out.exists()

    def test_explained_variance(self, pca_result, tmp_path):
        out = plot_explained_variance(pca_result.explained_variance, tmp_path / "ev.png", dpi=50)
        assert out.exists()

    def test_distance_distance(self, pca_result, tmp_path):
        table = flag_outliers(pca_result)
        table.loc[table.index[0], "outlier"] = True
        assert plot_distance_distance(table, tmp_path / "dd.png", dpi=50).exists()
        color = pd.Series(np.arange(12.0), index=table.index)
        out = plot_distance_distance(table, tmp_path / "dd_color.png", color=color, dpi=50)
        assert out.exists()


class TestEvaluationPlots:
    """ROC, score and elimination plots."""

    def test_roc_comparison(self, tmp_path):
        rng = np.random.RandomState(0)
        y = np.array([0] * 25 + [1] * 15)
        scores = pd.DataFrame(
            {
                "EN_pgs_only": rng.uniform(size=40),
                "EN_all": np.clip(0.4 * y + rng.uniform(size=40) * 0.6, 0, 1),
            }
        )
        metrics = evaluate_scores(y, scores, n_boot=100)
        out = plot_roc_comparison(
            roc_table(y, scores),
            metrics,
            tmp_path / "roc.png",
            display_names={"EN_pgs_only": "PGSs (EN):", "EN_all": "MPSs/PGSs (EN):"},
            title="EMIF",
            dpi=50,
        )
        assert out.exists()

    def test_roc_comparison_many_models(self, tmp_path):
        y = np.array([0, 1] * 10)
        scores = pd.DataFrame({f"m{i}": np.linspace(0, 1, 20) for i in range(8)})
        metrics = evaluate_scores(y, scores, n_boot=100)
        out = plot_roc_comparison(roc_table(y, scores), metrics, tmp_path / "r.png", dpi=50)
        assert out.exists()

    def test_score_boxplots(self, tmp_path):
        rng = np.random.RandomState(1)
        idx = [f"S{i}" for i in range(40)]
        scores = pd.DataFrame(rng.normal(size=(40, 5)), index=idx, columns=list("ABCDE"))
        groups = pd.Series(["Control", "SCI", "MCI", "AD"] * 10, index=idx)
        out = plot_score_boxplots(scores, groups, tmp_path / "box.png", labels={"A": "Age"}, dpi=50)
        assert out.exists()

    def test_elimination_curve(self, tmp_path):
        curve = pd.DataFrame(
            {
                "round": [1, 2, 3],
                "n_features": [3, 2, 1],
                "performance": [0.70, 0.74, 0.60],
                "is_best": [False, True, False],
            }
        )
        out = plot_elimination_curve(curve, tmp_path / "elim.png", model_name="RF", dpi=50)
        assert out.exists()

    def test_elimination_curve_empty(self, tmp_path):
        assert plot_elimination_curve(pd.DataFrame(), tmp_path / "none.png") is None
        assert not (tmp_path / "none.png").exists()


class TestInterpretationPlots:
    """SHAP radar and correlation bars."""

    def test_shap_radar(self, tmp_path):
        table = pd.DataFrame(
            {"EN": [0.2, 0.3, 0.5], "RF": [0.4, 0.4, 0.2]}, index=["SysBP", "BMI", "Age"]
        )
        out = plot_shap_radar(table, tmp_path / "radar.png", labels={"SysBP": "SBP"}, dpi=50)
        assert out.exists()

    def test_shap_radar_needs_three_features(self, tmp_path):
        table = pd.DataFrame({"EN": [0.5, 0.5]}, index=["a", "b"])
        with pytest.raises(ValueError, match="at least 3"):
            plot_shap_radar(table, tmp_path / "radar.png")

    def test_correlation_bars(self, tmp_path):
        corr = pd.DataFrame(
            {
                "name": ["BMI", "Depression", "Total cholesterol"],
                "r": [0.25, -0.05, 0.12],
                "significant": [True, False, True],
            }
        )
        assert plot_correlation_bars(corr, tmp_path / "corr.png", dpi=50).exists()
