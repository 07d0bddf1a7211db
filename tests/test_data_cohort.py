"""Tests for cohort assembly."""

import pandas as pd
import pytest
from epi_mci.config.schema import DiagnosisConfig, PGSConfig
from epi_mci.data.cohort import (
    attach_pgs,
    build_cohort,
    encode_labels,
    filter_diagnosis,
    get_pgs_columns,
    pgs_by_sample,
    select_feature_set,
)


class TestFilterDiagnosis:
    """Tests for filter_diagnosis."""

    def test_keeps_control_and_case(self, cohort_tables):
        X, Y = filter_diagnosis(cohort_tables["X"], cohort_tables["Y"])
        assert set(Y["Diagnosis"]) == {"NL", "MCI"}
        assert len(X) == 32
        assert list(Y["Y"].cat.categories) == ["Control", "MCI"]
        assert (Y.loc[Y["Diagnosis"] == "NL", "Y"] == "Control").all()

    def test_reorders_labels(self, cohort_tables):
        X = cohort_tables["X"]
        Y = cohort_tables["Y"].iloc[::-1]
        X_out, Y_out = filter_diagnosis(X, Y)
        assert list(X_out.index) == list(Y_out.index)

    def test_misaligned(self, cohort_tables):
        with pytest.raises(ValueError, match="not aligned"):
            filter_diagnosis(cohort_tables["X"], cohort_tables["Y"].iloc[:10])

    def test_missing_diagnosis_column(self, cohort_tables):
        with pytest.raises(KeyError, match="Diagnosis"):
            filter_diagnosis(cohort_tables["X"], cohort_tables["Y"].drop(columns="Diagnosis"))

    def test_alternative_case_group(self, cohort_tables):
        _, Y = filter_diagnosis(
            cohort_tables["X"], cohort_tables["Y"], case="AD", case_label="AD"
        )
        assert set(Y["Y"]) == {"Control", "AD"}


class TestPGS:
    """Tests for PGS linking."""

    def test_pgs_by_sample(self, cohort_tables):
        out = pgs_by_sample(cohort_tables["pgs"], cohort_tables["meta"])
        assert list(out.columns) == ["SBPauto_PGS", "TC_PGS", "BMI_PGS"]
        assert out.index[0] == "S000"
        assert len(out) == 46

    def test_pgs_by_sample_keeps_names(self, cohort_tables):
        out = pgs_by_sample(cohort_tables["pgs"], cohort_tables["meta"], suffix=None)
        assert list(out.columns) == ["SBPauto", "TC", "BMI"]

    def test_pgs_by_sample_missing_meta_column(self, cohort_tables):
        with pytest.raises(KeyError, match="Sample_Name"):
            pgs_by_sample(cohort_tables["pgs"], cohort_tables["meta"].drop(columns="Sample_Name"))

    def test_attach_keeps_overlap(self, cohort_tables):
        X, Y = attach_pgs(
            cohort_tables["X"], cohort_tables["Y"], cohort_tables["pgs"], cohort_tables["meta"]
        )
        assert len(X) == 46
        assert list(X.index) == list(Y.index)
        assert get_pgs_columns(X) == ["SBPauto_PGS", "TC_PGS", "BMI_PGS"]
        assert "BMI" in X.columns and "BMI_PGS" in X.columns

    def test_attach_no_overlap(self, cohort_tables):
        meta = cohort_tables["meta"].assign(X=lambda d: "other_" + d["X"])
        with pytest.raises(ValueError, match="No samples"):
            attach_pgs(cohort_tables["X"], cohort_tables["Y"], cohort_tables["pgs"], meta)


class TestSelectFeatureSet:
    """Tests for select_feature_set."""

    @pytest.fixture
    def X(self):
        return pd.DataFrame(columns=["SysBP", "BMI", "SBPauto_PGS", "BMI_PGS"], data=[[1, 2, 3, 4]])

    def test_all(self, X):
        assert list(select_feature_set(X, "all").columns) == list(X.columns)

    def test_pgs_only(self, X):
        assert list(select_feature_set(X, "pgs_only").columns) == ["SBPauto_PGS", "BMI_PGS"]

    def test_mps_only(self, X):
        assert list(select_feature_set(X, "mps_only").columns) == ["SysBP", "BMI"]

    def test_empty_set(self, X):
        with pytest.raises(ValueError, match="selects no columns"):
            select_feature_set(X[["SysBP"]], "pgs_only")

    def test_unknown(self, X):
        with pytest.raises(ValueError, match="Unknown feature set"):
            select_feature_set(X, "clinical")


class TestEncodeLabels:
    """Tests for encode_labels."""

    def test_case_is_one(self):
        y = pd.Series(["Control", "MCI", "MCI"], name="Y")
        assert encode_labels(y).tolist() == [0, 1, 1]

    def test_missing_positive(self):
        with pytest.raises(ValueError, match="not found"):
            encode_labels(pd.Series(["Control", "Control"]))

    def test_more_than_two_levels(self):
        with pytest.raises(ValueError, match="binary"):
            encode_labels(pd.Series(["Control", "MCI", "AD"]))


class TestBuildCohort:
    """Tests for build_cohort."""

    def test_without_pgs(self, cohort_tables):
        X, y = build_cohort(cohort_tables["X"], cohort_tables["Y"])
        assert len(X) == len(y) == 32
        assert y.sum() == 16
        assert get_pgs_columns(X) == []

    def test_with_pgs_and_config(self, cohort_tables):
        X, y = build_cohort(
            cohort_tables["X"],
            cohort_tables["Y"],
            pgs=cohort_tables["pgs"],
            meta=cohort_tables["meta"],
            diagnosis=DiagnosisConfig(),
            pgs_config=PGSConfig(suffix="_G"),
        )
        assert get_pgs_columns(X, suffix="_G") == ["SBPauto_G", "TC_G", "BMI_G"]
        # Samples 46 and 47 lack PGSs; 47 (SCI) is dropped anyway, 46 (AD) too
        assert len(X) == 32
        assert list(X.index) == list(y.index)
