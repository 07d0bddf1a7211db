"""
CLI implementation for the train command.

For every configured feature set and model:
1. Assemble the cohort (control vs. MCI, PGSs attached when configured)
2. Tune by grid search over shared repeated stratified CV folds, or run
   backward feature elimination for models listed under ``elimination``
3. Persist a model bundle per (cohort, model, feature set)

When a test set is configured, every model is scored on it and the AUROCs
(with bootstrap CI), ROC coordinates and ROC comparison plot are written.
"""

import logging
from pathlib import Path
from typing import Any

import pandas as pd

from epi_mci.config.loader import load_training_config, print_config_summary, save_config
from epi_mci.config.validation import validate_training_config
from epi_mci.data.cohort import build_cohort, select_feature_set
from epi_mci.data.io import check_numeric_features, read_table, write_table
from epi_mci.data.schema import FEATURE_SET_DISPLAY_NAMES, MODEL_DISPLAY_NAMES
from epi_mci.evaluation import compare_feature_sets, evaluate_scores, predict_scores, roc_table
from epi_mci.features.elimination import backward_feature_elimination, save_elimination_results
from epi_mci.models.splits import cv_from_config
from epi_mci.models.trainers import get_trainer
from epi_mci.plotting import plot_elimination_curve, plot_roc_comparison
from epi_mci.utils.logging import auto_log_path, level_from_verbosity, log_section, setup_logger
from epi_mci.utils.paths import OutputDirectories
from epi_mci.utils.serialization import save_model_bundle

# PGS-only models first so they take the blue end of the ROC palette
FEATURE_SET_PLOT_ORDER = ["pgs_only", "mps_only", "all"]


def score_name(model_name: str, feature_set: str) -> str:
    """Column name of a model's test scores, e.g. ``EN_pgs_only``."""
    return f"{model_name}_{feature_set}"


def display_name(model_name: str, feature_set: str) -> str:
    """ROC annotation, e.g. ``PGSs (EN):``."""
    fs = FEATURE_SET_DISPLAY_NAMES.get(feature_set, feature_set)
    model = MODEL_DISPLAY_NAMES.get(model_name, model_name)
    return f"{fs} ({model}):"


def load_cohort(config, x_path: Path, y_path: Path, split: str, logger: logging.Logger):
    """Read one split and return (X, y) with 0/1 labels."""
    logger.info(f"Loading {split} data")
    X = read_table(x_path)
    Y = read_table(y_path)

    pgs = meta = None
    if config.pgs.pgs_file is not None and config.pgs.meta_file is not None:
        pgs = read_table(config.pgs.pgs_file, index_col=None)
        meta = read_table(config.pgs.meta_file, index_col=None, validate_unique_index=False)

    X, y = build_cohort(X, Y, pgs=pgs, meta=meta, diagnosis=config.diagnosis, pgs_config=config.pgs)
    check_numeric_features(X, f"{split} feature matrix")
    logger.info(
        f"{split}: {len(y)} samples ({int(y.sum())} {config.diagnosis.case_label}), "
        f"{X.shape[1]} features"
    )
    return X, y


def train_one(
    model_name: str,
    feature_set: str,
    X: pd.DataFrame,
    y: pd.Series,
    config,
    cv,
    dirs: OutputDirectories,
    logger: logging.Logger,
) -> dict[str, Any]:
    """Train (or eliminate) one model on one feature set and save its bundle."""
    trainer = get_trainer(model_name, config, cv=cv)
    X_fs = select_feature_set(X, feature_set)
    tag = f"[{model_name}/{feature_set}]"
    curve = None

    if model_name in config.elimination.models:
        logger.info(f"{tag} backward feature elimination over {X_fs.shape[1]} features")
        result = backward_feature_elimination(X_fs, y, trainer)
        fitted = result.best_model
        performance = result.best_performance
        curve = result.to_frame()
        if config.elimination.save_curve:
            name = score_name(model_name, feature_set)
            save_elimination_results(
                result,
                dirs.reports / "elimination" / name,
                model_name=model_name,
                feature_set=feature_set,
            )
            if config.output.save_plots:
                plot_elimination_curve(
                    curve,
                    dirs.plots / f"elimination_{name}.{config.output.plot_format}",
                    model_name=display_name(model_name, feature_set).rstrip(":"),
                    dpi=config.output.plot_dpi,
                )
        n_selected = len(fitted.feature_names)
        logger.info(f"{tag} selected {n_selected} features (CV AUROC {performance:.3f})")
    else:
        trained = trainer.train(X_fs, y)
        fitted = trained.model
        performance = trained.performance

    if config.output.save_models:
        save_model_bundle(
            fitted,
            dirs.model_path(config.cohort, model_name, feature_set),
            model_name=model_name,
            feature_set=feature_set,
            cohort=config.cohort,
            features=list(fitted.feature_names),
            cv_performance=performance,
            elimination=curve,
        )

    return {
        "model": model_name,
        "feature_set": feature_set,
        "n_features": len(fitted.feature_names),
        "cv_auroc": performance,
        "best_params": str(fitted.best_params),
        "fitted": fitted,
    }


def evaluate_test_set(
    fitted: dict[str, Any],
    X_test: pd.DataFrame,
    y_test: pd.Series,
    config,
    dirs: OutputDirectories,
    logger: logging.Logger,
) -> pd.DataFrame:
    """Score the test set with every model and write metrics, ROC table and plot."""
    scores = predict_scores(fitted, X_test)
    if config.output.save_test_preds:
        write_table(scores.assign(y=y_test.to_numpy()), dirs.preds / "test_predictions.csv")

    ev = config.evaluation
    metrics = evaluate_scores(
        y_test, scores, n_boot=ev.n_boot, seed=ev.boot_random_state, method=ev.ci_method
    )
    write_table(metrics, dirs.reports / "test_metrics.csv", index=False)

    roc = roc_table(y_test, scores)
    write_table(roc, dirs.reports / "test_roc.csv", index=False)

    pairs = [
        (score_name(m, "all"), score_name(m, "pgs_only"))
        for m in config.models
        if score_name(m, "all") in scores.columns and score_name(m, "pgs_only") in scores.columns
    ]
    if pairs:
        diffs = compare_feature_sets(
            y_test, scores, pairs, n_boot=ev.n_boot, seed=ev.boot_random_state
        )
        write_table(diffs, dirs.reports / "test_auroc_differences.csv", index=False)
        for _, row in diffs.iterrows():
            logger.info(
                f"{row['model_a']} - {row['model_b']}: dAUROC={row['auroc_diff']:.3f} "
                f"({row['ci_lower']:.3f}, {row['ci_upper']:.3f})"
            )

    if config.output.save_plots:
        names = {}
        for col in scores.columns:
            model_name, feature_set = col.split("_", 1)
            names[col] = display_name(model_name, feature_set)
        plot_roc_comparison(
            roc,
            metrics,
            dirs.plots / f"roc_{config.cohort}.{config.output.plot_format}",
            display_names=names,
            dpi=config.output.plot_dpi,
        )
    return metrics


def run_train(
    config_file: str | None = None,
    overrides: list[str] | None = None,
    verbose: int = 0,
):
    """
    Run model training with the config system.

    Args:
        config_file: Path to YAML config file (optional)
        overrides: List of config overrides (optional)
        verbose: Verbosity level (0=INFO, 1=DEBUG)
    """
    config = load_training_config(config_file=config_file, overrides=overrides)
    dirs = OutputDirectories.create(config.outdir)
    logger = setup_logger(
        "epi_mci", level=level_from_verbosity(verbose), log_file=auto_log_path("train", dirs.root)
    )

    log_section(logger, "epi-mci Model Training")

    if config.x_train is None or config.y_train is None:
        raise ValueError("Training requires 'x_train' and 'y_train' in config or via --override.")

    logger.info("Validating configuration...")
    validate_training_config(config)
    if verbose:
        print_config_summary(config, logger)
    save_config(config, dirs.root / "training_config.yaml")

    log_section(logger, "Loading Data")
    X_train, y_train = load_cohort(config, config.x_train, config.y_train, "train", logger)

    # One set of folds for every model, feature set and elimination round
    cv = cv_from_config(y_train, config.cv)

    log_section(logger, "Training")
    feature_sets = sorted(config.feature_sets, key=FEATURE_SET_PLOT_ORDER.index)
    rows, fitted = [], {}
    for feature_set in feature_sets:
        for model_name in config.models:
            row = train_one(model_name, feature_set, X_train, y_train, config, cv, dirs, logger)
            fitted[score_name(model_name, feature_set)] = row.pop("fitted")
            rows.append(row)

    summary = pd.DataFrame(rows)
    write_table(summary, dirs.reports / "cv_summary.csv", index=False)

    if config.x_test is not None and config.y_test is not None:
        log_section(logger, "Test Set Evaluation")
        X_test, y_test = load_cohort(config, config.x_test, config.y_test, "test", logger)
        evaluate_test_set(fitted, X_test, y_test, config, dirs, logger)
    else:
        logger.info("No test set configured; skipping evaluation")

    logger.info(f"Results saved to: {dirs.root}")
    return summary
