"""
Seeding helpers.

Stochastic steps (CV folds, random forests, bootstrap resampling, SHAP
permutations) take explicit seeds from their config sections. The SEED_GLOBAL
environment variable additionally seeds the global Python and NumPy
generators when chasing a run that does not reproduce.
"""

import logging
import os
import random

import numpy as np

logger = logging.getLogger(__name__)

SEED_ENV_VAR = "SEED_GLOBAL"
MAX_SEED = 2**32 - 1


def set_random_seed(seed: int):
    """Seed Python's ``random`` module and NumPy's legacy global generator."""
    random.seed(seed)
    np.random.seed(seed)


def _parse_seed(raw: str | None) -> int | None:
    if raw is None or not raw.strip():
        return None
    try:
        seed = int(raw)
    except ValueError:
        logger.warning(f"Ignoring {SEED_ENV_VAR}={raw!r}: not an integer")
        return None
    if not 0 <= seed <= MAX_SEED:
        logger.warning(f"Ignoring {SEED_ENV_VAR}={seed}: outside [0, {MAX_SEED}]")
        return None
    return seed


def apply_seed_global() -> int | None:
    """
    Seed the global generators from ``SEED_GLOBAL`` if it holds a valid seed.

    Returns:
        The applied seed, or None when the variable is unset, empty, not an
        integer or out of range.

    Example:
        >>> os.environ["SEED_GLOBAL"] = "42"
        >>> apply_seed_global()
        42
    """
    seed = _parse_seed(os.environ.get(SEED_ENV_VAR))
    if seed is not None:
        set_random_seed(seed)
        logger.info(f"{SEED_ENV_VAR}={seed} applied to the global RNGs")
    return seed
