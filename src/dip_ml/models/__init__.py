"""Frozen model artifacts and the backends that invoke them."""

from dip_ml.models.artifacts import (
    clear_model_cache,
    get_artifact_dir,
    load_classifier_artifact,
    load_regressor_artifact,
    resolve_artifact_path,
)
from dip_ml.models.backends import ClassifierBackend, ModelBackend, RegressorBackend

__all__ = [
    "ModelBackend",
    "ClassifierBackend",
    "RegressorBackend",
    "clear_model_cache",
    "get_artifact_dir",
    "load_classifier_artifact",
    "load_regressor_artifact",
    "resolve_artifact_path",
]
