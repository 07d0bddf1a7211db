"""
Configuration tools for the epi-mci CLI.

``epimci config validate`` loads a YAML config with the schema of the given
command and runs the semantic checks, reporting errors and warnings.
"""

import sys
import warnings
from pathlib import Path

import yaml

from epi_mci.config.loader import CONFIG_LOADERS, load_yaml
from epi_mci.config.validation import (
    ConfigValidationWarning,
    validate_preprocess_config,
    validate_shap_config,
    validate_training_config,
)
from epi_mci.utils.logging import level_from_verbosity, setup_logger


def _semantic_checks(command: str, config) -> list[str]:
    """Run the command's semantic checks, collecting warnings instead of raising."""
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", ConfigValidationWarning)
        if command == "train":
            validate_training_config(config.model_copy(update={"strictness": "warn"}))
        elif command == "preprocess":
            validate_preprocess_config(config, strictness="warn")
        elif command == "shap":
            validate_shap_config(config, strictness="warn")

    messages = []
    for w in caught:
        if issubclass(w.category, ConfigValidationWarning):
            lines = str(w.message).splitlines()[1:]
            messages.extend(line.strip().removeprefix("- ") for line in lines if line.strip())
    return messages


def validate_config_file(
    config_file: Path,
    command: str,
    strict: bool = False,
) -> tuple[bool, list[str], list[str]]:
    """
    Validate configuration file and return diagnostic report.

    Args:
        config_file: Path to YAML config file
        command: CLI command whose schema applies (train, preprocess, ...)
        strict: If True, treat warnings as errors

    Returns:
        Tuple of (is_valid, errors, warnings)
    """
    errors: list[str] = []

    if command not in CONFIG_LOADERS:
        return False, [f"Unknown command: {command}"], []

    try:
        load_yaml(config_file)
    except (OSError, yaml.YAMLError) as e:
        return False, [f"Failed to load YAML: {e}"], []

    try:
        config = CONFIG_LOADERS[command](config_file=config_file)
    except ValueError as e:
        return False, [f"Schema validation failed: {e}"], []

    found = _semantic_checks(command, config)
    is_valid = not errors and (not strict or not found)
    return is_valid, errors, found


def run_config_validate(
    config_file: Path,
    command: str = "train",
    strict: bool = False,
    verbose: int = 0,
):
    """
    Run config validation command and exit with 0 (valid) or 1 (invalid).

    Args:
        config_file: Path to config file
        command: Command type
        strict: Treat warnings as errors
        verbose: Verbosity level
    """
    logger = setup_logger("epi_mci.config.validate", level=level_from_verbosity(verbose))
    logger.info(f"Validating config: {config_file}")

    is_valid, errors, found = validate_config_file(config_file, command, strict)
    logger.info(f"Validation complete: {len(errors)} errors, {len(found)} warnings")

    print("\n" + "=" * 80)
    print(f"Validation Report: {config_file.name} ({command})")
    print("=" * 80)

    if errors:
        print(f"\nERRORS ({len(errors)}):")
        for err in errors:
            print(f"  - {err}")

    if found:
        print(f"\nWARNINGS ({len(found)}):")
        for warn in found:
            print(f"  - {warn}")

    if is_valid:
        print("\n[OK] Config is valid")
    else:
        print("\n[FAIL] Config is invalid")
        if strict:
            print("  (strict mode: warnings treated as errors)")

    print("=" * 80)

    sys.exit(0 if is_valid else 1)
