"""
Configuration loading and merging logic.

Supports:
1. Loading from YAML files (with ``_base`` inheritance)
2. CLI argument overrides (dot-notation: e.g., plausibility.min_batch_size=10)
3. Environment variable override of the artifact directory
4. Validation via the Pydantic schema
"""

import copy
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from dip_ml.config.defaults import ARTIFACT_DIR_ENV, DEFAULT_INFERENCE_CONFIG
from dip_ml.config.schema import InferenceConfig


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
    first and the current file's values are deep-merged on top.  The ``_base``
    path is resolved relative to the directory containing *file_path*.
    """
    file_path = Path(file_path).resolve()
    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {file_path}")

    with open(file_path) as f:
        config_dict = yaml.safe_load(f) or {}

    if not isinstance(config_dict, dict):
        raise ValueError(f"Config file must contain a mapping at top level: {file_path}")

    base_ref = config_dict.pop("_base", None)
    if base_ref is not None:
        base_path = (file_path.parent / base_ref).resolve()
        base_dict = load_yaml(base_path)
        config_dict = _deep_merge(base_dict, config_dict)

    return config_dict


def resolve_paths_relative_to_config(
    config_dict: dict[str, Any], config_file: Path
) -> dict[str, Any]:
    """
    Resolve a relative ``artifacts.artifact_dir`` against the config file directory.

    Args:
        config_dict: Configuration dictionary loaded from YAML
        config_file: Path to the config file

    Returns:
        Config dict with the artifact directory made absolute
    """
    resolved = copy.deepcopy(config_dict)
    artifacts = resolved.get("artifacts")
    if isinstance(artifacts, dict) and artifacts.get("artifact_dir"):
        path = Path(artifacts["artifact_dir"])
        if not path.is_absolute():
            artifacts["artifact_dir"] = str(config_file.resolve().parent / path)
    return resolved


def apply_overrides(config_dict: dict[str, Any], overrides: list[str]) -> dict[str, Any]:
    """
    Apply CLI overrides to config dictionary.

    Supports dot-notation for nested keys:
        plausibility.enabled=false -> config_dict['plausibility']['enabled'] = False
        backend.timeout_s=30 -> config_dict['backend']['timeout_s'] = 30

    Args:
        config_dict: Base configuration dictionary
        overrides: List of "key=value" or "nested.key=value" strings

    Returns:
        Updated config dictionary
    """
    # Keys that should always be lists
    LIST_KEYS = {"regressor_feature_order"}

    # Keys that should always be strings (not parsed as int/float)
    STRING_KEYS = {"version", "classifier_file", "regressor_file", "artifact_dir"}

    for override in overrides:
        if "=" not in override:
            raise ValueError(f"Invalid override format: {override}. Expected 'key=value'")

        key_path, value_str = override.split("=", 1)
        keys = key_path.split(".")

        target = config_dict
        for key in keys[:-1]:
            if key not in target or not isinstance(target[key], dict):
                target[key] = {}
            target = target[key]

        final_key = keys[-1]
        value = _parse_value(
            value_str,
            force_list=final_key in LIST_KEYS,
            force_string=final_key in STRING_KEYS,
        )
        target[final_key] = value

    return config_dict


def _parse_value(value_str: str, force_list: bool = False, force_string: bool = False) -> Any:
    """
    Parse string value to appropriate Python type.

    Args:
        value_str: String to parse
        force_list: If True, always return a list (for comma-separated or single values)
        force_string: If True, always return a string (skip int/float parsing)
    """
    if force_string:
        return value_str

    # Boolean
    if value_str.lower() in ("true", "yes"):
        return [True] if force_list else True
    if value_str.lower() in ("false", "no"):
        return [False] if force_list else False

    # None
    if value_str.lower() in ("none", "null"):
        return [None] if force_list else None

    # List (comma-separated) or forced list
    if "," in value_str or force_list:
        return [_parse_scalar(v.strip()) for v in value_str.split(",")]

    return _parse_scalar(value_str)


def _parse_scalar(value_str: str) -> Any:
    try:
        return int(value_str)
    except ValueError:
        pass
    try:
        return float(value_str)
    except ValueError:
        pass
    return value_str


def load_inference_config(
    config_file: str | Path | None = None,
    overrides: list[str] | None = None,
) -> InferenceConfig:
    """
    Load inference configuration from defaults, file, environment, and CLI overrides.

    Precedence (lowest to highest): defaults, YAML file, DIP_ARTIFACT_DIR, overrides.

    Args:
        config_file: Path to YAML config file (optional)
        overrides: List of CLI overrides in "key=value" format (optional)

    Returns:
        Validated InferenceConfig instance

    Raises:
        ValueError: If the merged configuration fails validation
    """
    config_dict = copy.deepcopy(DEFAULT_INFERENCE_CONFIG)

    if config_file is not None:
        config_file_path = Path(config_file)
        file_config = load_yaml(config_file_path)
        file_config = resolve_paths_relative_to_config(file_config, config_file_path)
        config_dict = _deep_merge(config_dict, file_config)

    env_dir = os.environ.get(ARTIFACT_DIR_ENV)
    if env_dir:
        config_dict["artifacts"]["artifact_dir"] = env_dir

    if overrides:
        config_dict = apply_overrides(config_dict, list(overrides))

    try:
        return InferenceConfig(**config_dict)
    except ValidationError as e:
        raise ValueError(f"Invalid inference configuration:\n{e}") from e


def save_config(config: InferenceConfig, output_path: str | Path):
    """Save resolved configuration to YAML file."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        yaml.dump(config_to_dict(config), f, default_flow_style=False, sort_keys=False)


def config_to_dict(config: InferenceConfig) -> dict[str, Any]:
    """Dump config to plain Python types (Paths become strings)."""
    return config.model_dump(mode="json")

