"""
The ``epimci`` command group.

Command bodies import their runners lazily so ``epimci --help`` stays fast:
  - epimci preprocess: Array QC, normalization, probe filtering, PCA QC
  - epimci train: Train EN / sPLS-DA / RF models and evaluate on the test set
  - epimci shap: SHAP importance of saved models
  - epimci correlate: Correlate MPSs with matching PGSs
  - epimci plot-scores: Scores per diagnostic group
  - epimci config validate: Check a configuration file
"""

import click

from epi_mci import __version__

CONFIG_OPTION_HELP = "Path to YAML configuration file"
OVERRIDE_OPTION_HELP = "Override config values (format: key=value or nested.key=value)"


def config_options(func):
    """Shared --config/-c and --override options."""
    func = click.option("--override", multiple=True, help=OVERRIDE_OPTION_HELP)(func)
    config_path = click.Path(exists=True)
    return click.option("--config", "-c", type=config_path, help=CONFIG_OPTION_HELP)(func)


def _invoke(ctx, runner, config, override):
    runner(config_file=config, overrides=list(override), verbose=ctx.obj.get("verbose", 0))


@click.group()
@click.version_option(version=__version__, prog_name="epimci")
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv)",
)
@click.pass_context
def cli(ctx, verbose):
    """
    epi-mci: Epigenetic and polygenic risk scores for MCI classification

    Trains and interprets classifiers of mild cognitive impairment from
    methylation profile scores (MPSs) and polygenic scores (PGSs).
    """
    from epi_mci.utils.random import apply_seed_global

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    # Apply SEED_GLOBAL if set (for single-threaded reproducibility debugging)
    seed_applied = apply_seed_global()
    if seed_applied is not None:
        ctx.obj["seed_global"] = seed_applied


@cli.command("preprocess")
@config_options
@click.pass_context
def preprocess(ctx, config, override):
    """Array QC, quantile normalization, probe filtering, PCA QC and M-values."""
    from epi_mci.cli.preprocess import run_preprocess

    _invoke(ctx, run_preprocess, config, override)


@cli.command("train")
@config_options
@click.pass_context
def train(ctx, config, override):
    """Train models per feature set, run backward elimination, evaluate on test set."""
    from epi_mci.cli.train import run_train

    _invoke(ctx, run_train, config, override)


@cli.command("shap")
@config_options
@click.pass_context
def shap(ctx, config, override):
    """Permutation SHAP values of saved models and their comparison."""
    from epi_mci.cli.interpret import run_shap

    _invoke(ctx, run_shap, config, override)


@cli.command("correlate")
@config_options
@click.pass_context
def correlate(ctx, config, override):
    """Pearson correlation between each MPS and its matching PGS."""
    from epi_mci.cli.correlate import run_correlate

    _invoke(ctx, run_correlate, config, override)


@cli.command("plot-scores")
@config_options
@click.pass_context
def plot_scores(ctx, config, override):
    """Boxplots and group tests of scores across diagnostic groups."""
    from epi_mci.cli.plot_scores import run_plot_scores

    _invoke(ctx, run_plot_scores, config, override)


@cli.group("config")
@click.pass_context
def config_group(ctx):
    """Configuration management tools."""
    pass


@config_group.command("validate")
@click.argument("config_file", type=click.Path(exists=True))
@click.option(
    "--command",
    type=click.Choice(["preprocess", "train", "shap", "correlate", "plot-scores"]),
    default="train",
    help="Command type (default: train)",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Treat warnings as errors",
)
@click.pass_context
def config_validate(ctx, config_file, command, strict):
    """Validate configuration file and report issues."""
    from pathlib import Path

    from epi_mci.cli.config_tools import run_config_validate

    run_config_validate(
        config_file=Path(config_file),
        command=command,
        strict=strict,
        verbose=ctx.obj.get("verbose", 0),
    )


def main():
    """Entry point for console script."""
    cli(obj={})


if __name__ == "__main__":
    main()
