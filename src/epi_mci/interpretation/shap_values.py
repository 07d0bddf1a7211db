"""
SHAP explanations of fitted MCI models.

Explanations are model-agnostic: the case probability of a FittedModel is
explained with the permutation algorithm against a background sample of the
training data, so the same code serves EN, sPLS-DA and RF.
"""

import logging

import numpy as np
import pandas as pd
import shap

logger = logging.getLogger(__name__)


def compute_shap_values(
    model,
    background: pd.DataFrame,
    X_explain: pd.DataFrame,
    n_permutations: int = 50,
    background_size: int | None = None,
    random_state: int = 123,
) -> pd.DataFrame:
    """
    Permutation SHAP values of the case probability.

    Args:
        model: FittedModel (``feature_names`` and ``predict_score``)
        background: Reference samples (typically the training set)
        X_explain: Samples to explain
        n_permutations: Feature permutations per explained sample
        background_size: Optional subsample size for the background
        random_state: Seed for background subsampling and permutations

    Returns:
        DataFrame samples × features (model's feature order)
    """
    features = list(model.feature_names)
    missing = [f for f in features if f not in X_explain.columns or f not in background.columns]
    if missing:
        raise ValueError(f"Model features missing from SHAP input: {missing}")

    bg = background[features]
    if background_size is not None and background_size < len(bg):
        bg = bg.sample(n=background_size, random_state=random_state)

    def predict_fn(x: np.ndarray) -> np.ndarray:
        return model.predict_score(pd.DataFrame(x, columns=features))

    masker = shap.maskers.Independent(bg.to_numpy(dtype=float), max_samples=len(bg))
    explainer = shap.Explainer(
        predict_fn,
        masker,
        algorithm="permutation",
        feature_names=features,
        seed=random_state,
    )
    max_evals = n_permutations * (2 * len(features) + 1)
    logger.info(
        f"[{model.model_name}] SHAP for {len(X_explain)} samples, "
        f"{len(features)} features, {len(bg)} background samples"
    )
    X_arr = X_explain[features].to_numpy(dtype=float)
    explanation = explainer(X_arr, max_evals=max_evals, silent=True)

    values = np.asarray(explanation.values)
    if values.ndim == 3:
        values = values[..., -1]
    return pd.DataFrame(values, index=X_explain.index, columns=features)


def mean_abs_shap(values: pd.DataFrame, scale_per_sample: bool = False) -> pd.Series:
    """
    Mean absolute SHAP value per feature.

    With ``scale_per_sample`` each sample's absolute contributions are first
    divided by their sum, so every sample weighs equally.
    """
    a = values.abs()
    if scale_per_sample:
        totals = a.sum(axis=1).replace(0, np.nan)
        a = a.div(totals, axis=0).fillna(0.0)
    return a.mean(axis=0).rename("mean_abs_shap")


def compare_shap_importance(
    importances: dict[str, pd.Series],
    exclude: list[str] | None = None,
) -> pd.DataFrame:
    """
    Side-by-side relative SHAP importance of several models.

    Features are inner-joined across models, excluded features dropped, and
    each model's column normalized to sum to 1.

    Returns:
        DataFrame features × models
    """
    if not importances:
        raise ValueError("No SHAP importances to compare")

    table = pd.concat(importances, axis=1, join="inner")
    if exclude:
        table = table.drop(index=[f for f in exclude if f in table.index])
    if table.empty:
        raise ValueError("No features shared by all models")

    totals = table.sum(axis=0)
    zero = totals.index[totals == 0].tolist()
    if zero:
        raise ValueError(f"All-zero SHAP importance for models: {zero}")
    return table / totals
