"""
Tests for methylation array preprocessing.

Covers:
- Sample QC (bisulfite conversion, median intensity, sex check)
- Quantile normalization and beta/M-value conversion
- Probe filters
- PCA QC distances and outlier flags
"""

import numpy as np
import pandas as pd
import pytest
from epi_mci.preprocessing import (
    QuantileNormalizer,
    beta_to_m,
    bisulfite_summary,
    check_beta_values,
    check_sex,
    filter_cross_reactive,
    filter_detection_p,
    filter_sex_chromosomes,
    filter_snp_probes,
    flag_outliers,
    m_to_beta,
    median_intensity_qc,
    predict_sex,
    quantile_normalize,
    run_pca,
)
from epi_mci.preprocessing.pca_qc import (
    orthogonal_distance,
    orthogonal_distance_cutoff,
    score_distance_cutoff,
)
from sklearn.decomposition import PCA


class TestSampleQC:
    """Tests for array-level sample QC."""

    def test_bisulfite_summary(self):
        conv = pd.Series([95.0, 82.0, 97.5, "n/a"], index=["a", "b", "c", "d"])
        summary = bisulfite_summary(conv, threshold=90)
        assert summary["n"] == 3
        assert summary["min"] == 82.0
        assert summary["median"] == 95.0
        assert summary["max"] == 97.5
        assert summary["low_samples"] == ["b"]

    def test_bisulfite_summary_empty(self):
        with pytest.raises(ValueError, match="No numeric"):
            bisulfite_summary(pd.Series(["x", None]))

    def test_median_intensity(self):
        m = pd.Series([12.0, 10.0, 11.0], index=["a", "b", "c"])
        u = pd.Series([12.0, 10.5, 10.0], index=["a", "b", "c"])
        qc = median_intensity_qc(m, u, cutoff=10.5)
        assert qc["mean_intensity"].tolist() == [12.0, 10.25, 10.5]
        assert qc["bad"].tolist() == [False, True, False]

    def test_median_intensity_misaligned(self):
        m = pd.Series([12.0, 10.0], index=["a", "b"])
        u = pd.Series([12.0, 10.0], index=["a", "z"])
        with pytest.raises(ValueError, match="share sample ids"):
            median_intensity_qc(m, u)

    def test_predict_sex(self):
        x = pd.Series([12.0, 12.0, 12.0], index=["a", "b", "c"])
        y = pd.Series([11.5, 9.0, 10.0], index=["a", "b", "c"])
        assert predict_sex(x, y, cutoff=-2).tolist() == ["Male", "Female", "Male"]

    def test_check_sex_codings(self):
        idx = ["a", "b", "c", "d", "e"]
        x = pd.Series([12.0] * 5, index=idx)
        y = pd.Series([11.0, 8.0, 11.0, 8.0, 8.0], index=idx)
        reported = pd.Series([1, "F", "female", "M", np.nan], index=idx)

        table = check_sex(x, y, reported, cutoff=-2)

        assert table["predicted_sex"].tolist() == ["Male", "Female", "Male", "Female", "Female"]
        assert table["mismatch"].tolist() == [False, False, True, True, False]
        assert pd.isna(table.loc["e", "reported_sex"])

    def test_check_sex_float_codes(self):
        idx = ["a", "b", "c"]
        table = check_sex(
            pd.Series([12.0] * 3, index=idx),
            pd.Series([11.0, 8.0, 8.0], index=idx),
            pd.Series([1.0, 2.0, np.nan], index=idx),
        )
        assert table["reported_sex"].tolist()[:2] == ["Male", "Female"]
        assert not table["mismatch"].any()


class TestNormalization:
    """Tests for quantile normalization and M-values."""

    def test_columns_share_distribution(self, beta_matrix):
        normed = quantile_normalize(beta_matrix)
        sorted_cols = np.sort(normed.to_numpy(), axis=0)
        for j in range(1, sorted_cols.shape[1]):
            np.testing.assert_allclose(sorted_cols[:, j], sorted_cols[:, 0])

    def test_ranks_preserved(self, beta_matrix):
        normed = quantile_normalize(beta_matrix)
        pd.testing.assert_frame_equal(normed.rank(), beta_matrix.rank())

    def test_reference_is_mean_of_sorted(self):
        beta = pd.DataFrame({"s1": [0.1, 0.5, 0.3], "s2": [0.2, 0.4, 0.6]})
        normed = quantile_normalize(beta)
        # reference: mean of [0.1, 0.3, 0.5] and [0.2, 0.4, 0.6]
        assert normed["s1"].tolist() == pytest.approx([0.15, 0.55, 0.35])
        assert normed["s2"].tolist() == pytest.approx([0.15, 0.35, 0.55])

    def test_ties_share_reference(self):
        beta = pd.DataFrame({"s1": [1.0, 1.0, 3.0], "s2": [1.0, 2.0, 3.0]})
        normed = quantile_normalize(beta)
        assert normed["s1"].tolist() == pytest.approx([1.25, 1.25, 3.0])

    def test_not_fitted(self, beta_matrix):
        with pytest.raises(RuntimeError, match="not fitted"):
            QuantileNormalizer().transform(beta_matrix)

    def test_probe_mismatch(self, beta_matrix):
        qn = QuantileNormalizer().fit(beta_matrix)
        with pytest.raises(ValueError, match="Probe count"):
            qn.transform(beta_matrix.iloc[:10])

    def test_nan_rejected(self, beta_matrix):
        beta_matrix.iloc[0, 0] = np.nan
        with pytest.raises(ValueError, match="NaN"):
            quantile_normalize(beta_matrix)

    def test_m_values(self):
        m = beta_to_m(np.array([0.5, 0.8, 0.2]))
        assert m == pytest.approx([0.0, 2.0, -2.0])

    def test_m_values_finite_at_bounds(self):
        m = beta_to_m(np.array([0.0, 1.0]))
        assert np.all(np.isfinite(m))
        assert m[0] == pytest.approx(-m[1])

    def test_m_beta_round_trip(self, beta_matrix):
        back = m_to_beta(beta_to_m(beta_matrix))
        np.testing.assert_allclose(back.to_numpy(), beta_matrix.to_numpy(), atol=1e-9)
        assert isinstance(back, pd.DataFrame)


class TestProbeFilters:
    """Each filter drops exactly the flagged probes."""

    @pytest.fixture
    def beta(self):
        return pd.DataFrame(
            np.full((4, 2), 0.5),
            index=["cg1", "cg2", "cg3", "cg4"],
            columns=["s1", "s2"],
        )

    def test_detection_p(self, beta):
        det = pd.DataFrame(
            {"s1": [0.001, 0.02, 0.0, 0.01], "s2": [0.0, 0.0, 0.5, 0.0], "s3": [1.0] * 4},
            index=["cg1", "cg2", "cg3", "cg4"],
        )
        out = filter_detection_p(beta, det, threshold=0.01)
        # Extra sample s3 in detection table is ignored; p == threshold passes
        assert list(out.index) == ["cg1", "cg4"]

    def test_detection_p_missing(self, beta):
        det = pd.DataFrame({"s1": [0.0] * 3, "s2": [0.0] * 3}, index=["cg1", "cg2", "cg3"])
        with pytest.raises(ValueError, match="missing for 1 probes"):
            filter_detection_p(beta, det)

    def test_snp(self, beta):
        snp = pd.DataFrame(
            {"CpG_maf": [0.0, 0.1, np.nan], "SBE_maf": [0.0, 0.0, 0.2]},
            index=["cg1", "cg2", "cg3"],
        )
        out = filter_snp_probes(beta, snp)
        assert list(out.index) == ["cg1", "cg4"]

    def test_snp_columns_required(self, beta):
        with pytest.raises(ValueError, match="SBE_maf"):
            filter_snp_probes(beta, pd.DataFrame({"CpG_maf": [0.0]}, index=["cg1"]))

    def test_cross_reactive(self, beta):
        out = filter_cross_reactive(beta, ["cg2", "cg9"])
        assert list(out.index) == ["cg1", "cg3", "cg4"]

    def test_sex_chromosomes(self, beta):
        ann = pd.DataFrame({"chr": ["chr1", "chrX", "chrY"]}, index=["cg1", "cg2", "cg4"])
        out = filter_sex_chromosomes(beta, ann)
        assert list(out.index) == ["cg1", "cg3"]

    def test_sex_chromosomes_column(self, beta):
        with pytest.raises(ValueError, match="CHR"):
            filter_sex_chromosomes(beta, pd.DataFrame({"chr": ["chr1"]}), chr_col="CHR")

    def test_check_beta_values(self):
        beta = pd.DataFrame(
            [[0.0, 0.5], [np.nan, 1.0], [0.3, 0.4]],
            index=["cg1", "cg1", "cg2"],
            columns=["s1", "s2"],
        )
        report = check_beta_values(beta)
        assert report == {
            "n_probes": 3,
            "n_samples": 2,
            "n_missing": 1,
            "n_nonpositive": 1,
            "n_ge_one": 1,
            "n_duplicated_probes": 1,
            "n_duplicated_samples": 0,
        }


class TestPCAQC:
    """Tests for PCA-based sample QC."""

    @pytest.fixture
    def beta_with_outlier(self):
        rng = np.random.RandomState(3)
        values = rng.normal(0.5, 0.05, size=(300, 20))
        values[:, 0] += 0.2
        return pd.DataFrame(
            values,
            index=[f"cg{i}" for i in range(300)],
            columns=[f"s{j:02d}" for j in range(20)],
        )

    def test_scores_and_variance(self, beta_matrix):
        result = run_pca(beta_matrix, n_components=3)
        assert list(result.scores.columns) == ["PC1", "PC2", "PC3"]
        assert list(result.scores.index) == list(beta_matrix.columns)
        assert result.n_components == 3
        assert result.explained_variance.is_monotonic_decreasing
        assert 0 < result.explained_variance.sum() <= 100

    def test_components_capped(self, beta_matrix):
        result = run_pca(beta_matrix, n_components=50)
        assert result.n_components == beta_matrix.shape[1] - 1

    def test_nan_rejected(self, beta_matrix):
        beta_matrix.iloc[3, 3] = np.nan
        with pytest.raises(ValueError, match="NaN"):
            run_pca(beta_matrix)

    def test_constant_probes_dropped(self, beta_matrix):
        beta_matrix.iloc[:5] = 0.5
        result = run_pca(beta_matrix, n_components=2)
        assert np.isfinite(result.scores.to_numpy()).all()

    def test_distances_non_negative(self, beta_matrix):
        table = flag_outliers(run_pca(beta_matrix, n_components=2))
        assert (table["SD"] >= 0).all()
        assert (table["OD"] >= 0).all()
        assert list(table.columns) == [
            "SD",
            "OD",
            "SD_cutoff",
            "OD_cutoff",
            "SD_outlier",
            "OD_outlier",
            "outlier",
        ]

    def test_injected_outlier_flagged(self, beta_with_outlier):
        table = flag_outliers(run_pca(beta_with_outlier, n_components=2), quantile=0.975)
        assert table.loc["s00", "SD_outlier"]
        assert table.loc["s00", "outlier"]
        assert table["outlier"].sum() < 5

    def test_orthogonal_distance_matches_pca_result(self, beta_matrix):
        X = beta_matrix.T
        X = (X - X.mean()) / X.std(ddof=1)
        pca = PCA(n_components=2, svd_solver="full").fit(X.to_numpy())
        od = orthogonal_distance(X.to_numpy(), pca)
        result = run_pca(beta_matrix, n_components=2)
        np.testing.assert_allclose(od, result.orthogonal_distance.to_numpy(), rtol=1e-6)

    def test_score_distance_cutoff(self):
        assert score_distance_cutoff(2, 0.975) == pytest.approx(np.sqrt(7.377759), rel=1e-5)

    def test_orthogonal_distance_cutoff_constant(self):
        assert orthogonal_distance_cutoff(np.full(10, 8.0)) == pytest.approx(8.0)
