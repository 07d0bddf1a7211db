"""
epi-mci: Epigenetic and polygenic risk scores for MCI classification

Backward feature elimination, elastic-net / sparse PLS-DA / random forest
classifiers of mild cognitive impairment from methylation profile scores and
polygenic scores, plus the methylation array preprocessing that feeds them.
"""

import pandas as pd

# Copy-on-Write is the default from pandas 3.0 onwards
if int(pd.__version__.split(".")[0]) < 3:
    pd.options.mode.copy_on_write = True

__version__ = "1.0.0"
__license__ = "MIT"

from epi_mci import (  # noqa: E402
    config,
    data,
    evaluation,
    features,
    interpretation,
    metrics,
    models,
    plotting,
    preprocessing,
    utils,
)

__all__ = [
    "__version__",
    "config",
    "data",
    "evaluation",
    "features",
    "interpretation",
    "metrics",
    "models",
    "plotting",
    "preprocessing",
    "utils",
]
