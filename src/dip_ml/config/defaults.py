"""
Default configuration values.

Single source of truth for default parameter values; the thresholds match the
behavior of the published DIP models.
"""

from typing import Any

DEFAULT_VALIDATION_CONFIG: dict[str, Any] = {
    "consistency_min_rows": 10,
    "consistency_max_share": 0.10,
    "warn_negative_values": True,
}

DEFAULT_PLAUSIBILITY_CONFIG: dict[str, Any] = {
    "enabled": True,
    "band_low": 0.30,
    "band_high": 0.36,
    "min_batch_size": 1,
    "check_uniform_probabilities": True,
    "uniform_prob_tol": 1e-3,
}

DEFAULT_ARTIFACT_CONFIG: dict[str, Any] = {
    "version": "v1",
    "artifact_dir": None,
    "classifier_file": "xgb_model.json",
    "regressor_file": "model.pkl",
    "regressor_feature_order": ["Procalcitonin", "TREM_1", "IL_6"],
    "check_versions": True,
}

DEFAULT_BACKEND_CONFIG: dict[str, Any] = {
    "timeout_s": None,
}

DEFAULT_INFERENCE_CONFIG: dict[str, Any] = {
    "validation": DEFAULT_VALIDATION_CONFIG,
    "plausibility": DEFAULT_PLAUSIBILITY_CONFIG,
    "artifacts": DEFAULT_ARTIFACT_CONFIG,
    "backend": DEFAULT_BACKEND_CONFIG,
}

# Environment variable overriding artifacts.artifact_dir
ARTIFACT_DIR_ENV = "DIP_ARTIFACT_DIR"
