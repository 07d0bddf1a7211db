"""
CLI implementation for the shap command.

Explains every configured model bundle with permutation SHAP on the test
samples (training samples as background), then compares relative feature
importance across models in a table and radar chart.
"""

from pathlib import Path

from epi_mci.config.loader import load_shap_config, save_config
from epi_mci.config.validation import validate_shap_config
from epi_mci.data.io import read_table, write_table
from epi_mci.data.schema import MPS_LABELS
from epi_mci.interpretation import compare_shap_importance, compute_shap_values, mean_abs_shap
from epi_mci.plotting import plot_shap_radar
from epi_mci.utils.logging import auto_log_path, level_from_verbosity, log_section, setup_logger
from epi_mci.utils.serialization import load_fitted_model


def run_shap(
    config_file: str | None = None,
    overrides: list[str] | None = None,
    verbose: int = 0,
):
    """
    Compute SHAP values for saved models and compare them.

    Args:
        config_file: Path to YAML config file (optional)
        overrides: List of config overrides (optional)
        verbose: Verbosity level (0=INFO, 1=DEBUG)
    """
    config = load_shap_config(config_file=config_file, overrides=overrides)
    outdir = Path(config.outdir)
    logger = setup_logger(
        "epi_mci", level=level_from_verbosity(verbose), log_file=auto_log_path("shap", outdir)
    )

    log_section(logger, "epi-mci SHAP Interpretation")
    validate_shap_config(config)
    if config.x_train is None or config.x_test is None:
        raise ValueError("SHAP requires 'x_train' (background) and 'x_test' (explained samples).")
    if not config.model_files:
        raise ValueError("SHAP requires at least one entry in 'model_files'.")

    outdir.mkdir(parents=True, exist_ok=True)
    save_config(config, outdir / "shap_config.yaml")

    X_train = read_table(config.x_train)
    X_test = read_table(config.x_test)

    importances = {}
    for name, path in config.model_files.items():
        log_section(logger, f"SHAP: {name}")
        model = load_fitted_model(path)
        values = compute_shap_values(
            model,
            X_train,
            X_test,
            n_permutations=config.n_permutations,
            background_size=config.background_size,
            random_state=config.random_state,
        )
        write_table(values, outdir / f"shap_values_{name}.csv")
        importances[name] = mean_abs_shap(values, scale_per_sample=config.scale_per_sample)

    comparison = compare_shap_importance(importances, exclude=config.exclude_features)
    write_table(comparison, outdir / "shap_importance.csv")
    logger.info(f"Compared {len(importances)} models on {len(comparison)} shared features")

    if config.output.save_plots and len(comparison) >= 3:
        labels = {**MPS_LABELS, **config.feature_labels}
        plot_shap_radar(
            comparison,
            outdir / f"shap_radar.{config.output.plot_format}",
            rmax=config.radar_max,
            labels=labels,
            dpi=config.output.plot_dpi,
        )
    elif config.output.save_plots:
        logger.warning("Fewer than 3 shared features; skipping radar chart")

    logger.info(f"Results saved to: {outdir}")
    return comparison
