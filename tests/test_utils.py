"""
Tests for utils: serialization, paths, random seeding and logging.
"""

import json
import logging

import numpy as np
import pytest
from epi_mci.utils.logging import auto_log_path, level_from_verbosity, setup_logger
from epi_mci.utils.paths import OutputDirectories, ensure_dir, model_bundle_name
from epi_mci.utils.random import apply_seed_global, set_random_seed
from epi_mci.utils.serialization import (
    library_versions,
    load_fitted_model,
    load_joblib,
    save_joblib,
    save_json,
    save_model_bundle,
)


class TestSerialization:
    """Tests for joblib / JSON helpers."""

    def test_joblib_round_trip(self, tmp_path):
        bundle = {"model": [1, 2, 3], "versions": library_versions()}
        path = tmp_path / "models" / "bundle.joblib"
        save_joblib(bundle, path)
        assert load_joblib(path) == bundle

    def test_version_mismatch_warns(self, tmp_path):
        bundle = {"model": None, "versions": {"sklearn": "0.0.1"}}
        path = tmp_path / "old.joblib"
        save_joblib(bundle, path)
        with pytest.warns(UserWarning, match="version mismatch"):
            load_joblib(path)

    def test_missing_bundle(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="not found"):
            load_joblib(tmp_path / "missing.joblib")

    def test_model_bundle(self, tmp_path):
        path = save_model_bundle(
            {"coef": [0.5]}, tmp_path / "Fit_EMIF_EN_all.joblib", model_name="EN", cohort="EMIF"
        )
        bundle = load_joblib(path)
        assert bundle["model_name"] == "EN"
        assert bundle["versions"] == library_versions()
        assert load_fitted_model(path) == {"coef": [0.5]}

    def test_load_bare_model(self, tmp_path):
        path = save_joblib([1, 2], tmp_path / "bare.joblib")
        assert load_fitted_model(path) == [1, 2]

    def test_json_numpy_types(self, tmp_path):
        path = tmp_path / "out" / "summary.json"
        save_json({"n": np.int64(3), "auc": np.float32(0.5), "arr": np.arange(3)}, path)
        assert json.loads(path.read_text()) == {"n": 3, "auc": 0.5, "arr": [0, 1, 2]}


class TestPaths:
    """Tests for output path helpers."""

    def test_model_bundle_name(self):
        assert model_bundle_name("EMIF", "RF", "pgs_only") == "Fit_EMIF_RF_pgs_only.joblib"

    def test_output_directories(self, tmp_path):
        dirs = OutputDirectories.create(tmp_path / "run")
        for sub in ("models", "preds", "reports", "plots"):
            assert (tmp_path / "run" / sub).is_dir()
        assert dirs.model_path("EXTEND", "EN", "all") == (
            tmp_path / "run" / "models" / "Fit_EXTEND_EN_all.joblib"
        )

    def test_ensure_dir(self, tmp_path):
        path = ensure_dir(tmp_path / "a" / "b")
        assert path.is_dir()


class TestRandom:
    """Tests for seeding helpers."""

    def test_set_random_seed(self):
        set_random_seed(7)
        a = np.random.rand(3)
        set_random_seed(7)
        np.testing.assert_array_equal(a, np.random.rand(3))

    @pytest.mark.parametrize(
        "value,expected", [("42", 42), ("", None), ("abc", None), ("-1", None)]
    )
    def test_apply_seed_global(self, monkeypatch, value, expected):
        monkeypatch.setenv("SEED_GLOBAL", value)
        assert apply_seed_global() == expected

    def test_apply_seed_global_unset(self, monkeypatch):
        monkeypatch.delenv("SEED_GLOBAL", raising=False)
        assert apply_seed_global() is None


class TestLogging:
    """Tests for logger setup."""

    def test_setup_logger_file(self, tmp_path):
        log_file = tmp_path / "logs" / "train.log"
        logger = setup_logger("epi_mci.test_logging", log_file=log_file)
        logger.info("hello")
        for handler in logger.handlers:
            handler.flush()
        assert "hello" in log_file.read_text()
        assert len(logger.handlers) == 2

    def test_setup_logger_no_duplicate_handlers(self):
        setup_logger("epi_mci.test_dupes")
        logger = setup_logger("epi_mci.test_dupes")
        assert len(logger.handlers) == 1

    def test_level_from_verbosity(self):
        assert level_from_verbosity(0) == logging.INFO
        assert level_from_verbosity(2) == logging.DEBUG

    def test_auto_log_path(self, tmp_path):
        assert auto_log_path("train", tmp_path) == tmp_path.resolve() / "logs" / "train.log"
