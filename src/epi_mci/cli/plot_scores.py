"""CLI implementation for the plot-scores command (scores per diagnostic group)."""

from pathlib import Path

import pandas as pd

from epi_mci.config.loader import load_score_summary_config, save_config
from epi_mci.data.io import read_table, write_table
from epi_mci.data.schema import CONTROL_LABEL, MPS_LABELS
from epi_mci.evaluation import group_tests_table
from epi_mci.plotting import plot_score_boxplots
from epi_mci.utils.logging import auto_log_path, level_from_verbosity, log_section, setup_logger


def diagnosis_groups(
    meta: pd.DataFrame, sample_col: str, diagnosis_col: str, control_code: str
) -> pd.Series:
    """Diagnosis per sample id, with the control code renamed to ``Control``."""
    for col in (sample_col, diagnosis_col):
        if col not in meta.columns:
            raise KeyError(f"Metadata column '{col}' not found")
    groups = meta.set_index(meta[sample_col].astype(str))[diagnosis_col].astype(str)
    return groups.replace({control_code: CONTROL_LABEL})


def run_plot_scores(
    config_file: str | None = None,
    overrides: list[str] | None = None,
    verbose: int = 0,
):
    """Boxplot grid of every score by diagnosis, plus ANOVA/Tukey and Kruskal-Wallis tables."""
    config = load_score_summary_config(config_file=config_file, overrides=overrides)
    outdir = Path(config.outdir)
    logger = setup_logger(
        "epi_mci",
        level=level_from_verbosity(verbose),
        log_file=auto_log_path("plot-scores", outdir),
    )

    log_section(logger, "epi-mci Score Summary")
    if config.scores_file is None or config.meta_file is None:
        raise ValueError(
            "plot-scores requires 'scores_file' and 'meta_file' in config or via --override."
        )

    outdir.mkdir(parents=True, exist_ok=True)
    save_config(config, outdir / "score_summary_config.yaml")

    scores = read_table(config.scores_file)
    meta = read_table(config.meta_file, index_col=None)
    groups = diagnosis_groups(
        meta, config.meta_sample_col, config.diagnosis_col, config.control_code
    )

    shared = scores.index.intersection(groups.index)
    if len(shared) == 0:
        raise ValueError("No score samples found in the metadata table")
    scores = scores.loc[shared]
    groups = groups.loc[shared]
    logger.info(f"{len(shared)} samples; groups: {groups.value_counts().to_dict()}")

    omnibus, posthoc = group_tests_table(scores, groups, order=config.group_order)
    write_table(omnibus, outdir / "group_tests.csv", index=False)
    write_table(posthoc, outdir / "group_tests_posthoc.csv", index=False)

    if config.output.save_plots:
        plot_score_boxplots(
            scores,
            groups,
            outdir / f"scores_by_diagnosis.{config.output.plot_format}",
            order=config.group_order,
            labels=config.labels or MPS_LABELS,
            ncols=config.ncols,
            dpi=config.output.plot_dpi,
        )

    logger.info(f"Results saved to: {outdir}")
    return omnibus
