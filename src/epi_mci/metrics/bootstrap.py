"""
Case/control stratified bootstrap intervals for AUROC and AUROC differences.

Each replicate draws cases and controls separately, with replacement, so the
MCI/control ratio of the test set is preserved and the AUROC is always
defined. Intervals are percentile by default; BCa goes through
``scipy.stats.bootstrap`` with paired (unstratified) resampling.
"""

from collections.abc import Callable, Iterator
from typing import Literal

import numpy as np
from scipy.stats import bootstrap as scipy_bootstrap

CIMethod = Literal["percentile", "bca"]
CI_METHODS = ("percentile", "bca")
MIN_VALID_REPLICATES = 20
# Smallest class size for which paired BCa resamples almost always hold both classes
MIN_BCA_CLASS_SIZE = 10


def _safe_metric(metric_fn: Callable, y: np.ndarray, p: np.ndarray) -> float:
    """NaN where ``metric_fn`` rejects the resample."""
    try:
        return metric_fn(y, p)
    except ValueError:
        return np.nan


def _check_method(method: str):
    if method not in CI_METHODS:
        raise ValueError(f"method must be one of {CI_METHODS}, got '{method}'")


def _check_lengths(y_true: np.ndarray, *scores: np.ndarray):
    lengths = [len(y_true)] + [len(s) for s in scores]
    if len(set(lengths)) > 1:
        raise ValueError(f"Length mismatch between labels and scores: {lengths}")


def _strata(y_true: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    cases = np.flatnonzero(y_true == 1)
    controls = np.flatnonzero(y_true == 0)
    if min(len(cases), len(controls)) < 2:
        raise ValueError(
            f"Insufficient samples for stratified bootstrap: {len(cases)} cases, "
            f"{len(controls)} controls (need >= 2 each)"
        )
    return cases, controls


def _check_bca_strata(strata: tuple):
    n_min = min(len(s) for s in strata)
    if n_min < MIN_BCA_CLASS_SIZE:
        raise ValueError(
            f"method='bca' resamples without stratification and needs >= {MIN_BCA_CLASS_SIZE} "
            f"cases and controls, got {n_min} in the smaller class; use method='percentile'"
        )


def _replicates(strata: tuple, n_boot: int, seed: int) -> Iterator[np.ndarray]:
    """Yield ``n_boot`` index arrays, cases and controls resampled separately."""
    cases, controls = strata
    rng = np.random.RandomState(seed)
    for _ in range(n_boot):
        yield np.concatenate(
            [
                rng.choice(cases, size=len(cases), replace=True),
                rng.choice(controls, size=len(controls), replace=True),
            ]
        )


def _interval(values: list[float], n_boot: int, min_valid_frac: float, alpha: float = 0.05):
    """Percentile interval, or NaNs when too few replicates were usable."""
    if len(values) < max(MIN_VALID_REPLICATES, int(n_boot * min_valid_frac)):
        return (np.nan, np.nan)
    lo, hi = np.percentile(values, [100 * alpha / 2, 100 * (1 - alpha / 2)])
    return (float(lo), float(hi))


def _bca_interval(arrays: tuple, statistic_fn: Callable, n_boot: int, seed: int, alpha=0.05):
    def statistic(*samples, axis):
        # scipy passes batched resamples as 2-D arrays when vectorized
        if samples[0].ndim > 1:
            return np.array([statistic_fn(*row) for row in zip(*samples)])
        return statistic_fn(*samples)

    res = scipy_bootstrap(
        arrays,
        statistic=statistic,
        n_resamples=n_boot,
        method="BCa",
        confidence_level=1 - alpha,
        paired=True,
        random_state=np.random.default_rng(seed),
    )
    return (float(res.confidence_interval.low), float(res.confidence_interval.high))


def stratified_bootstrap_ci(
    y_true: np.ndarray,
    y_pred: np.ndarray,
    metric_fn: Callable,
    n_boot: int = 1000,
    seed: int = 0,
    min_valid_frac: float = 0.1,
    method: CIMethod = "percentile",
) -> tuple[float, float]:
    """
    95% bootstrap interval of ``metric_fn(y_true, y_pred)``.

    Args:
        y_true: Binary labels (1 = MCI)
        y_pred: Scores or probabilities
        metric_fn: ``(y, p) -> float``, e.g. :func:`epi_mci.metrics.auroc`
        n_boot: Number of replicates
        seed: Seed of the replicate generator
        min_valid_frac: Fraction of replicates that must give a finite value;
            below ``max(20, n_boot * min_valid_frac)`` the interval is NaN
        method: "percentile" (stratified replicates) or "bca". BCa is computed
            by ``scipy.stats.bootstrap`` on paired, unstratified resamples, so
            it is only accepted when both classes have at least
            ``MIN_BCA_CLASS_SIZE`` samples

    Returns:
        (lower, upper)

    Raises:
        ValueError: Unknown method, label/score length mismatch, fewer than
            2 cases or 2 controls, or a class too small for BCa
    """
    _check_method(method)
    y_true = np.asarray(y_true)
    y_pred = np.asarray(y_pred)
    _check_lengths(y_true, y_pred)

    strata = _strata(y_true)
    if method == "bca":
        _check_bca_strata(strata)
        return _bca_interval((y_true, y_pred), metric_fn, n_boot, seed)

    values = []
    for idx in _replicates(strata, n_boot, seed):
        v = _safe_metric(metric_fn, y_true[idx], y_pred[idx])
        if np.isfinite(v):
            values.append(v)
    return _interval(values, n_boot, min_valid_frac)


def stratified_bootstrap_diff_ci(
    y_true: np.ndarray,
    p1: np.ndarray,
    p2: np.ndarray,
    metric_fn: Callable,
    n_boot: int = 1000,
    seed: int = 0,
    min_valid_frac: float = 0.1,
    method: CIMethod = "percentile",
) -> tuple[float, float, float]:
    """
    Paired bootstrap of ``metric(p1) - metric(p2)`` on the same samples.

    This is how the MPS + PGS model is compared with PGS alone. Both scores
    are evaluated on the same replicate indices. ``method`` behaves as in
    :func:`stratified_bootstrap_ci`.

    Returns:
        (observed difference, lower, upper)
    """
    _check_method(method)
    y_true = np.asarray(y_true).astype(int)
    p1 = np.asarray(p1, dtype=float)
    p2 = np.asarray(p2, dtype=float)
    _check_lengths(y_true, p1, p2)

    observed = float(metric_fn(y_true, p1) - metric_fn(y_true, p2))
    strata = _strata(y_true)

    if method == "bca":
        _check_bca_strata(strata)
        lo, hi = _bca_interval(
            (y_true, p1, p2), lambda y, a, b: metric_fn(y, a) - metric_fn(y, b), n_boot, seed
        )
        return (observed, lo, hi)

    diffs = []
    for idx in _replicates(strata, n_boot, seed):
        d = _safe_metric(metric_fn, y_true[idx], p1[idx]) - _safe_metric(
            metric_fn, y_true[idx], p2[idx]
        )
        if np.isfinite(d):
            diffs.append(d)
    return (observed, *_interval(diffs, n_boot, min_valid_frac))
