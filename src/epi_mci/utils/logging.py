"""
Logging setup for epi-mci commands.

Library modules only call ``logging.getLogger(__name__)``. Each CLI runner
calls :func:`setup_logger` once; records from ``epi_mci.*`` modules then reach
the package logger's console and file handlers.
"""

import logging
import sys
from pathlib import Path

DEFAULT_FORMAT = "[%(asctime)s] %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _handler(handler: logging.Handler, level: int, formatter: logging.Formatter):
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logger(
    name: str = "epi_mci",
    level: int = logging.INFO,
    log_file: Path | None = None,
    format_string: str | None = None,
) -> logging.Logger:
    """
    Attach a stdout handler, and optionally a file handler, to ``name``.

    Existing handlers are replaced so repeated calls (several commands in one
    process) do not duplicate output. Propagation is switched off on this
    logger only; child loggers keep propagating up to it.

    Args:
        name: Logger name, normally the package logger ``"epi_mci"``
        level: Logging level for the logger and its handlers
        log_file: Append-mode log file; parent directories are created
        format_string: Record format (default: timestamp, level, message)

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers.clear()
    logger.propagate = False

    formatter = logging.Formatter(format_string or DEFAULT_FORMAT, datefmt=DATE_FORMAT)
    logger.addHandler(_handler(logging.StreamHandler(sys.stdout), level, formatter))

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.addHandler(_handler(logging.FileHandler(log_file, mode="a"), level, formatter))

    return logger


def level_from_verbosity(verbose: int) -> int:
    """``-v`` count to level: 0 is INFO, anything higher is DEBUG."""
    return logging.DEBUG if verbose and verbose > 0 else logging.INFO


def auto_log_path(command: str, outdir: Path | str = "results") -> Path:
    """``{outdir}/logs/{command}.log`` as an absolute path (not created here)."""
    return Path(outdir).resolve() / "logs" / f"{command}.log"


def log_section(logger: logging.Logger, title: str, width: int = 80, char: str = "="):
    rule = char * width
    logger.info(rule)
    logger.info(title)
    logger.info(rule)
