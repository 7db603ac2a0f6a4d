"""Configuration management for DIP-ML."""

from dip_ml.config.defaults import ARTIFACT_DIR_ENV, DEFAULT_INFERENCE_CONFIG
from dip_ml.config.loader import (
    apply_overrides,
    load_inference_config,
    save_config,
)
from dip_ml.config.schema import (
    ArtifactConfig,
    BackendConfig,
    InferenceConfig,
    PlausibilityConfig,
    ValidationConfig,
)

__all__ = [
    "ARTIFACT_DIR_ENV",
    "DEFAULT_INFERENCE_CONFIG",
    "apply_overrides",
    "load_inference_config",
    "save_config",
    "ArtifactConfig",
    "BackendConfig",
    "InferenceConfig",
    "PlausibilityConfig",
    "ValidationConfig",
]
