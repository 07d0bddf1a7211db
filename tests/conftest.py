"""
Shared pytest fixtures for epi-mci tests.
"""

import numpy as np
import pandas as pd
import pytest
from epi_mci.config import TrainingConfig

MPS_COLS = ["SysBP", "TotalChol", "BMI", "Depression", "Age"]
PGS_COLS = ["SBPauto", "TC", "BMI"]


def make_training_config(**overrides) -> TrainingConfig:
    """
    Small, fast TrainingConfig for unit tests.

    Grids are shrunk to a handful of settings and CV to 3 folds × 1 repeat.
    Nested sections can be overridden with dicts, e.g. ``rf={"n_estimators": 10}``.
    """
    values = {
        "cv": {"folds": 3, "repeats": 1, "random_state": 0, "n_jobs": 1},
        "elasticnet": {"alpha_points": 2, "lambda_points": 3, "max_iter": 2000},
        "spls": {"max_components": 2, "eta_points": 2},
        "rf": {"n_estimators": 25, "max_features_cap": 2, "min_samples_leaf_cap": 2},
        "evaluation": {"n_boot": 100},
        "output": {"plot_dpi": 50},
    }
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(values.get(key), dict):
            values[key] = {**values[key], **value}
        else:
            values[key] = value
    return TrainingConfig(**values)


@pytest.fixture
def small_config():
    return make_training_config()


@pytest.fixture
def binary_data():
    """60 samples, 4 features; f0 and f1 carry signal, f2 and f3 are noise."""
    rng = np.random.RandomState(0)
    n = 60
    y = pd.Series(np.array([0, 1] * (n // 2)), index=[f"S{i:03d}" for i in range(n)], name="Y")
    X = pd.DataFrame(
        {
            "f0": y.to_numpy() * 1.5 + rng.normal(0, 1, n),
            "f1": y.to_numpy() * 1.0 + rng.normal(0, 1, n),
            "f2": rng.normal(0, 1, n),
            "f3": rng.normal(0, 1, n),
        },
        index=y.index,
    )
    return X, y


def make_cohort_tables() -> dict[str, pd.DataFrame]:
    """
    Raw cohort tables as stored on disk.

    Returns:
        dict with X (MPS matrix), Y (diagnosis table), pgs (PGS per participant,
        ``ID`` column) and meta (participant ``Sample_Name`` -> sample ``X``)
    """
    rng = np.random.RandomState(1)
    n = 48
    samples = [f"S{i:03d}" for i in range(n)]
    diagnosis = np.array(["NL", "MCI", "NL", "MCI", "AD", "SCI"] * (n // 6))
    case = (diagnosis == "MCI").astype(float)

    X = pd.DataFrame(rng.normal(0, 1, (n, len(MPS_COLS))), index=samples, columns=MPS_COLS)
    X["SysBP"] += case
    Y = pd.DataFrame({"Diagnosis": diagnosis, "Age": rng.randint(55, 85, n)}, index=samples)

    # Last two samples have no genotype data
    participants = [f"P{i:03d}" for i in range(n)]
    pgs = pd.DataFrame(rng.normal(0, 1, (n - 2, len(PGS_COLS))), columns=PGS_COLS)
    pgs.insert(0, "ID", participants[: n - 2])
    pgs["SBPauto"] += case[: n - 2]
    meta = pd.DataFrame({"Sample_Name": participants, "X": samples, "Diagnosis": diagnosis})
    return {"X": X, "Y": Y, "pgs": pgs, "meta": meta}


@pytest.fixture
def cohort_tables():
    return make_cohort_tables()


@pytest.fixture
def beta_matrix():
    """Probes × samples beta values without ties."""
    rng = np.random.RandomState(2)
    n_probes, n_samples = 200, 12
    values = rng.beta(2, 5, size=(n_probes, n_samples))
    values += rng.uniform(0, 1e-6, size=values.shape)
    values = np.clip(values, 1e-4, 1 - 1e-4)
    return pd.DataFrame(
        values,
        index=[f"cg{i:08d}" for i in range(n_probes)],
        columns=[f"sample{j:02d}" for j in range(n_samples)],
    )
