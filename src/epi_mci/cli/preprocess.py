"""
CLI implementation for the preprocess command.

Runs array QC on a beta matrix (probes × samples) and its sample sheet:
sample QC, normalization, probe filtering, PCA outlier detection and
M-value conversion. Every step writes its table and plot under ``outdir``.
"""

import logging
from pathlib import Path
from typing import Any

import pandas as pd

from epi_mci.config.loader import load_preprocess_config, save_config
from epi_mci.config.validation import validate_preprocess_config
from epi_mci.data.io import read_table, write_table
from epi_mci.data.schema import (
    ANNOTATION_CHR_COL,
    BISULFITE_COL,
    MMED_COL,
    UMED_COL,
    XMED_COL,
    YMED_COL,
)
from epi_mci.plotting import (
    plot_bisulfite_histogram,
    plot_distance_distance,
    plot_explained_variance,
    plot_median_intensity,
    plot_pca_scores,
    plot_sample_densities,
    plot_sex_check,
)
from epi_mci.preprocessing import (
    beta_to_m,
    bisulfite_summary,
    check_beta_values,
    check_sex,
    filter_cross_reactive,
    filter_detection_p,
    filter_sex_chromosomes,
    filter_snp_probes,
    flag_outliers,
    median_intensity_qc,
    quantile_normalize,
    run_pca,
)
from epi_mci.utils.logging import auto_log_path, level_from_verbosity, log_section, setup_logger
from epi_mci.utils.serialization import save_json


def _read_sample_sheet(path: Path, sample_id_col: str) -> pd.DataFrame:
    sheet = read_table(path, index_col=None)
    if sample_id_col in sheet.columns:
        sheet = sheet.set_index(sample_id_col)
        sheet.index = sheet.index.astype(str)
    return sheet


def _read_probe_list(path: Path) -> list[str]:
    table = read_table(path, index_col=None, validate_unique_index=False)
    return table.iloc[:, 0].astype(str).tolist()


def run_sample_qc(
    sheet: pd.DataFrame, config, plot_dir: Path, logger: logging.Logger
) -> dict[str, Any]:
    """Sample-level QC from sample sheet columns; steps whose columns are absent are skipped."""
    fmt, dpi = config.output.plot_format, config.output.plot_dpi
    save_plots = config.output.save_plots
    summary: dict[str, Any] = {}

    if BISULFITE_COL in sheet.columns:
        summary["bisulfite"] = bisulfite_summary(sheet[BISULFITE_COL])
        if save_plots:
            plot_bisulfite_histogram(sheet[BISULFITE_COL], plot_dir / f"bisulfite.{fmt}", dpi=dpi)
    else:
        logger.info(f"No '{BISULFITE_COL}' column; skipping bisulfite summary")

    if {MMED_COL, UMED_COL} <= set(sheet.columns):
        qc = median_intensity_qc(sheet[MMED_COL], sheet[UMED_COL], cutoff=config.intensity_cutoff)
        summary["low_intensity_samples"] = qc.index[qc["bad"]].tolist()
        if save_plots:
            plot_median_intensity(
                qc, plot_dir / f"median_intensity.{fmt}", cutoff=config.intensity_cutoff, dpi=dpi
            )
    else:
        logger.info("No mMed/uMed columns; skipping median intensity QC")

    if {XMED_COL, YMED_COL, config.sex_col} <= set(sheet.columns):
        sex = check_sex(
            sheet[XMED_COL], sheet[YMED_COL], sheet[config.sex_col], cutoff=config.sex_cutoff
        )
        summary["sex_mismatch_samples"] = sex.index[sex["mismatch"]].tolist()
        if save_plots:
            plot_sex_check(sex, plot_dir / f"sex_check.{fmt}", cutoff=config.sex_cutoff, dpi=dpi)
    else:
        logger.info("No xMed/yMed/sex columns; skipping sex check")

    return summary


def filter_probes(beta: pd.DataFrame, config, logger: logging.Logger) -> pd.DataFrame:
    """Apply every probe filter whose input table is configured."""
    n_start = len(beta)
    if config.detection_p_file:
        det = read_table(config.detection_p_file)
        beta = filter_detection_p(beta, det, threshold=config.detection_p_threshold)
    if config.snp_file:
        beta = filter_snp_probes(beta, read_table(config.snp_file))
    if config.cross_reactive_file:
        beta = filter_cross_reactive(beta, _read_probe_list(config.cross_reactive_file))
    if config.drop_sex_chromosomes:
        if config.annotation_file:
            annotation = read_table(config.annotation_file)
            beta = filter_sex_chromosomes(beta, annotation, ANNOTATION_CHR_COL)
        else:
            logger.warning("drop_sex_chromosomes is set but no annotation_file given; skipping")
    logger.info(f"Probe filtering: {n_start} -> {len(beta)} probes")
    return beta


def run_pca_qc(
    beta: pd.DataFrame,
    sheet: pd.DataFrame | None,
    cell_types: pd.DataFrame | None,
    config,
    outdir: Path,
    plot_dir: Path,
) -> pd.DataFrame:
    """PCA, outlier table and score/explained-variance/DD plots."""
    fmt, dpi = config.output.plot_format, config.output.plot_dpi
    result = run_pca(beta, n_components=config.n_components)
    outliers = flag_outliers(result, quantile=config.outlier_quantile)

    write_table(result.scores, outdir / "pca_scores.csv")
    write_table(outliers, outdir / "pca_outliers.csv")
    write_table(
        result.explained_variance.rename("explained_pct").to_frame(),
        outdir / "pca_explained_variance.csv",
    )

    if not config.output.save_plots:
        return outliers

    covariates = pd.DataFrame(index=result.scores.index)
    for table in (cell_types, sheet):
        if table is not None:
            extra = table.reindex(result.scores.index)
            new_cols = [c for c in extra.columns if c not in covariates.columns]
            covariates = covariates.join(extra[new_cols])

    pcs = list(result.scores.columns)
    for i, color_col in enumerate(config.pca_color_columns):
        pc_x, pc_y = 2 * i, 2 * i + 1
        if pc_y >= len(pcs):
            break
        color = covariates[color_col] if color_col in covariates.columns else None
        plot_pca_scores(
            result.scores,
            result.explained_variance,
            plot_dir / f"pca_{pcs[pc_x]}_{pcs[pc_y]}.{fmt}",
            pc_x=pcs[pc_x],
            pc_y=pcs[pc_y],
            color=color,
            color_label=color_col,
            dpi=dpi,
        )

    plot_explained_variance(
        result.explained_variance, plot_dir / f"pca_explained_variance.{fmt}", dpi=dpi
    )
    age = covariates[config.age_col] if config.age_col in covariates.columns else None
    plot_distance_distance(
        outliers,
        plot_dir / f"pca_distance_distance.{fmt}",
        color=age,
        color_label=config.age_col,
        dpi=dpi,
    )
    return outliers


def run_preprocess(
    config_file: str | None = None,
    overrides: list[str] | None = None,
    verbose: int = 0,
):
    """
    Run array preprocessing.

    Args:
        config_file: Path to YAML config file (optional)
        overrides: List of config overrides (optional)
        verbose: Verbosity level (0=INFO, 1=DEBUG)
    """
    config = load_preprocess_config(config_file=config_file, overrides=overrides)
    outdir = Path(config.outdir)
    logger = setup_logger(
        "epi_mci", level=level_from_verbosity(verbose), log_file=auto_log_path("preprocess", outdir)
    )

    log_section(logger, "epi-mci Array Preprocessing")
    validate_preprocess_config(config)

    if config.raw_beta_file is None and config.beta_file is None:
        raise ValueError("Preprocessing requires 'raw_beta_file' or 'beta_file' in config.")

    plot_dir = outdir / "plots"
    outdir.mkdir(parents=True, exist_ok=True)
    plot_dir.mkdir(parents=True, exist_ok=True)
    save_config(config, outdir / "preprocess_config.yaml")
    fmt, dpi = config.output.plot_format, config.output.plot_dpi

    sheet = None
    if config.sample_sheet:
        sheet = _read_sample_sheet(config.sample_sheet, config.sample_id_col)
    cell_types = read_table(config.cell_type_file) if config.cell_type_file else None
    summary: dict[str, Any] = {}

    # Step 1: sample QC
    if sheet is not None:
        log_section(logger, "Sample QC")
        summary.update(run_sample_qc(sheet, config, plot_dir, logger))

    # Step 2: normalization
    log_section(logger, "Normalization")
    if config.raw_beta_file is not None:
        raw = read_table(config.raw_beta_file)
        if config.output.save_plots:
            plot_sample_densities(
                raw, plot_dir / f"density_raw.{fmt}", xlim=(0, 1), title="Raw", dpi=dpi
            )
        beta = quantile_normalize(raw) if config.normalization == "quantile" else raw
    else:
        logger.info(f"Using normalized betas from {config.beta_file}")
        beta = read_table(config.beta_file)

    # Step 3: probe filtering and value checks
    log_section(logger, "Probe Filtering")
    beta = filter_probes(beta, config, logger)
    summary["beta_check"] = check_beta_values(beta)
    summary["n_probes"] = int(beta.shape[0])
    summary["n_samples"] = int(beta.shape[1])
    if config.output.save_plots:
        plot_sample_densities(
            beta,
            plot_dir / f"density_normalized.{fmt}",
            xlim=(0, 1),
            title="Normalized",
            dpi=dpi,
        )

    # Step 4: PCA QC
    log_section(logger, "PCA QC")
    outliers = run_pca_qc(beta, sheet, cell_types, config, outdir, plot_dir)
    summary["pca_outliers"] = outliers.index[outliers["outlier"]].tolist()

    # Step 5: M-values
    log_section(logger, "M-values")
    m_values = beta_to_m(beta)
    write_table(beta, outdir / "beta_processed.parquet")
    write_table(m_values, outdir / "m_values.parquet")
    if config.output.save_plots:
        plot_sample_densities(
            m_values,
            plot_dir / f"density_m_values.{fmt}",
            xlabel="M-value",
            xlim=tuple(config.m_value_limits),
            dpi=dpi,
        )

    save_json(summary, outdir / "preprocess_summary.json")
    logger.info(f"Preprocessing complete: {beta.shape[0]} probes x {beta.shape[1]} samples")
    logger.info(f"Results saved to: {outdir}")
    return summary
