"""CLI implementation for the correlate command (MPS vs. matching PGS)."""

from pathlib import Path

from epi_mci.config.loader import load_correlation_config, save_config
from epi_mci.data.cohort import pgs_by_sample
from epi_mci.data.io import read_table, write_table
from epi_mci.interpretation import correlate_score_pairs
from epi_mci.plotting import plot_correlation_bars
from epi_mci.utils.logging import auto_log_path, level_from_verbosity, log_section, setup_logger


def run_correlate(
    config_file: str | None = None,
    overrides: list[str] | None = None,
    verbose: int = 0,
):
    """
    Correlate each MPS with the PGS of the same risk factor.

    PGS rows are keyed by participant id and mapped to methylation sample ids
    through the metadata table before correlating.
    """
    config = load_correlation_config(config_file=config_file, overrides=overrides)
    outdir = Path(config.outdir)
    logger = setup_logger(
        "epi_mci", level=level_from_verbosity(verbose), log_file=auto_log_path("correlate", outdir)
    )

    log_section(logger, "epi-mci MPS/PGS Correlations")
    missing = [k for k in ("mps_file", "pgs_file", "meta_file") if getattr(config, k) is None]
    if missing:
        raise ValueError(f"Correlation requires {missing} in config or via --override.")

    outdir.mkdir(parents=True, exist_ok=True)
    save_config(config, outdir / "correlation_config.yaml")

    mps = read_table(config.mps_file)
    pgs = pgs_by_sample(
        read_table(config.pgs_file, index_col=None),
        read_table(config.meta_file, index_col=None, validate_unique_index=False),
        pgs_id_col=config.pgs_id_col,
        participant_col=config.meta_participant_col,
        sample_col=config.meta_sample_col,
        suffix=None,
    )

    corr = correlate_score_pairs(
        mps, pgs, pairs=config.pairs, labels=config.labels, alpha=config.alpha
    )
    write_table(corr, outdir / "mps_pgs_correlations.csv", index=False)

    if config.output.save_plots:
        plot_correlation_bars(
            corr,
            outdir / f"mps_pgs_correlations.{config.output.plot_format}",
            dpi=config.output.plot_dpi,
        )

    logger.info(f"Results saved to: {outdir}")
    return corr
