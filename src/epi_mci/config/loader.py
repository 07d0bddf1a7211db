"""
Build validated config objects for each command.

Precedence, lowest first: built-in defaults, the YAML file (after following
its ``_base`` chain), then ``--override key.path=value`` strings. Relative
paths in a YAML file are anchored at that file's directory.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError

from epi_mci.config.defaults import (
    DEFAULT_CV_CONFIG,
    DEFAULT_ELASTICNET_CONFIG,
    DEFAULT_ELIMINATION_CONFIG,
    DEFAULT_EVALUATION_CONFIG,
    DEFAULT_OUTPUT_CONFIG,
    DEFAULT_PREPROCESS_CONFIG,
    DEFAULT_RF_CONFIG,
    DEFAULT_SPLS_CONFIG,
)
from epi_mci.config.schema import (
    CorrelationConfig,
    PreprocessConfig,
    ScoreSummaryConfig,
    ShapConfig,
    TrainingConfig,
)

# Keys whose values are file-system paths
PATH_KEY_SUFFIXES = ("_file", "_sheet", "dir")
PATH_KEYS = {"x_train", "y_train", "x_test", "y_test", "outdir"}

# Override values for these keys are always lists
LIST_KEYS = {"models", "feature_sets", "exclude_features", "pca_color_columns", "group_order"}

# Override values for these keys are never typed
STRING_KEYS = {"cohort", "control", "case", "control_code", "suffix"}


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge *overlay* into *base* (overlay wins on leaf conflicts).

    Returns a new dict; neither input is mutated.
    """
    merged = base.copy()
    for key, value in overlay.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_yaml(file_path: str | Path) -> dict[str, Any]:
    """Load configuration from YAML file.

    Supports a ``_base`` key: if present, the referenced YAML file is loaded
    first and the current file's values are deep-merged on top. The ``_base``
    path is resolved relative to the directory containing *file_path*.
    """
    file_path = Path(file_path).resolve()
    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {file_path}")

    with open(file_path) as f:
        config_dict = yaml.safe_load(f) or {}

    base_ref = config_dict.pop("_base", None)
    if base_ref is not None:
        base_path = (file_path.parent / base_ref).resolve()
        config_dict = _deep_merge(load_yaml(base_path), config_dict)

    return config_dict


def _is_path_key(key: str) -> bool:
    return key in PATH_KEYS or key.endswith(PATH_KEY_SUFFIXES)


def resolve_paths_relative_to_config(
    config_dict: dict[str, Any], config_file: Path
) -> dict[str, Any]:
    """
    Resolve relative paths in config dict relative to the config file directory.

    Only string values under path-like keys (``outdir``, ``x_train``,
    ``*_file``...) are resolved, at any nesting depth. ``model_files`` maps
    model names to paths and is resolved value by value.
    """
    config_dir = Path(config_file).resolve().parent

    def resolve_value(value: Any) -> Any:
        if isinstance(value, str):
            path = Path(value)
            if not path.is_absolute() and len(path.parts) > 0:
                return str(config_dir / path)
        return value

    def walk(d: dict[str, Any]) -> dict[str, Any]:
        out = {}
        for key, value in d.items():
            if key == "model_files" and isinstance(value, dict):
                out[key] = {k: resolve_value(v) for k, v in value.items()}
            elif isinstance(value, dict):
                out[key] = walk(value)
            elif _is_path_key(key):
                out[key] = resolve_value(value)
            else:
                out[key] = value
        return out

    return walk(config_dict)


_BOOL_WORDS = {"true": True, "yes": True, "false": False, "no": False}
_NULL_WORDS = {"none", "null"}


def _set_dotted(config_dict: dict[str, Any], dotted_key: str, value: Any):
    """Set ``a.b.c`` in a nested dict, replacing non-dict intermediates."""
    *parents, leaf = dotted_key.split(".")
    node = config_dict
    for key in parents:
        if not isinstance(node.get(key), dict):
            node[key] = {}
        node = node[key]
    node[leaf] = value


def apply_overrides(config_dict: dict[str, Any], overrides: list[str]) -> dict[str, Any]:
    """
    Apply ``--override`` strings to a config dict in place.

    ``cv.folds=10`` sets ``config_dict["cv"]["folds"] = 10``; missing
    sections are created. Values are typed by :func:`_parse_value`.
    """
    for override in overrides:
        dotted_key, sep, raw = override.partition("=")
        if not sep or not dotted_key:
            raise ValueError(f"Invalid override format: {override}. Expected 'key=value'")
        leaf = dotted_key.rsplit(".", 1)[-1]
        _set_dotted(
            config_dict,
            dotted_key,
            _parse_value(raw, force_list=leaf in LIST_KEYS, force_string=leaf in STRING_KEYS),
        )
    return config_dict


def _parse_scalar(raw: str) -> Any:
    for cast in (int, float):
        try:
            return cast(raw)
        except ValueError:
            continue
    return raw


def _parse_value(raw: str, force_list: bool = False, force_string: bool = False) -> Any:
    """
    Type an override value.

    Booleans (true/yes/false/no), none/null, ints and floats are recognized;
    a comma makes a list. ``force_string`` keeps the raw text; ``force_list``
    wraps single values and turns none into an empty list.
    """
    if force_string:
        return raw

    word = raw.strip().lower()
    if word in _NULL_WORDS:
        return [] if force_list else None
    if word in _BOOL_WORDS:
        value = _BOOL_WORDS[word]
        return [value] if force_list else value

    if force_list or "," in raw:
        return [_parse_scalar(part.strip()) for part in raw.split(",") if part.strip()]
    return _parse_scalar(raw)


def _load_config(
    model_cls: type[BaseModel],
    defaults: dict[str, Any],
    config_file: str | Path | None,
    overrides: list[str] | None,
    label: str,
):
    config_dict = {k: (v.copy() if isinstance(v, dict) else v) for k, v in defaults.items()}

    if config_file is not None:
        config_file_path = Path(config_file)
        file_config = load_yaml(config_file_path)
        file_config = resolve_paths_relative_to_config(file_config, config_file_path)
        config_dict = _deep_merge(config_dict, file_config)

    if overrides:
        config_dict = apply_overrides(config_dict, overrides)

    try:
        return model_cls(**config_dict)
    except ValidationError as e:
        raise ValueError(f"Invalid {label} configuration:\n{e}") from e


def load_training_config(
    config_file: str | Path | None = None,
    overrides: list[str] | None = None,
) -> TrainingConfig:
    """
    Load training configuration from file and CLI overrides.

    Args:
        config_file: Path to YAML config file (optional)
        overrides: List of CLI overrides in "key=value" format (optional)

    Returns:
        Validated TrainingConfig instance
    """
    defaults = {
        "cv": DEFAULT_CV_CONFIG,
        "elasticnet": DEFAULT_ELASTICNET_CONFIG,
        "spls": DEFAULT_SPLS_CONFIG,
        "rf": DEFAULT_RF_CONFIG,
        "elimination": DEFAULT_ELIMINATION_CONFIG,
        "evaluation": DEFAULT_EVALUATION_CONFIG,
        "output": DEFAULT_OUTPUT_CONFIG,
    }
    return _load_config(TrainingConfig, defaults, config_file, overrides, "training")


def load_preprocess_config(
    config_file: str | Path | None = None,
    overrides: list[str] | None = None,
) -> PreprocessConfig:
    """Load preprocessing configuration from file and CLI overrides."""
    defaults = {**DEFAULT_PREPROCESS_CONFIG, "output": DEFAULT_OUTPUT_CONFIG}
    return _load_config(PreprocessConfig, defaults, config_file, overrides, "preprocess")


def load_shap_config(
    config_file: str | Path | None = None,
    overrides: list[str] | None = None,
) -> ShapConfig:
    """Load SHAP configuration from file and CLI overrides."""
    return _load_config(ShapConfig, {}, config_file, overrides, "shap")


def load_correlation_config(
    config_file: str | Path | None = None,
    overrides: list[str] | None = None,
) -> CorrelationConfig:
    """Load MPS/PGS correlation configuration from file and CLI overrides."""
    return _load_config(CorrelationConfig, {}, config_file, overrides, "correlation")


def load_score_summary_config(
    config_file: str | Path | None = None,
    overrides: list[str] | None = None,
) -> ScoreSummaryConfig:
    """Load score summary configuration from file and CLI overrides."""
    return _load_config(ScoreSummaryConfig, {}, config_file, overrides, "score summary")


CONFIG_LOADERS = {
    "preprocess": load_preprocess_config,
    "train": load_training_config,
    "shap": load_shap_config,
    "correlate": load_correlation_config,
    "plot-scores": load_score_summary_config,
}


def save_config(config: BaseModel, output_path: str | Path):
    """Save resolved configuration to YAML file."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    # mode="json" turns Path and tuple values into YAML-safe primitives
    config_dict = config.model_dump(mode="json")

    with open(output_path, "w") as f:
        yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)


def _summary_lines(d: dict[str, Any], depth: int = 0) -> list[str]:
    pad = "  " * depth
    lines = []
    for key, value in d.items():
        if isinstance(value, dict):
            lines.append(f"{pad}{key}:")
            lines.extend(_summary_lines(value, depth + 1))
        else:
            lines.append(f"{pad}{key}: {value}")
    return lines


def print_config_summary(config: BaseModel, logger=None):
    """Dump the resolved config as indented ``key: value`` lines."""
    rule = "=" * 80
    summary = "\n".join(
        [rule, f"{type(config).__name__} summary", rule, *_summary_lines(config.model_dump()), rule]
    )
    if logger is not None:
        logger.info(summary)
    else:
        print(summary)
