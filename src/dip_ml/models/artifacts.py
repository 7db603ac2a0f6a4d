"""
Model artifact store.

Frozen artifacts ship inside the package under ``artifacts/<version>/``:

    artifacts/v1/xgb_model.json   DIP stage classifier (XGBoost JSON)
    artifacts/v1/model.pkl        cDIP regressor (scikit-learn, pickle/joblib)

The directory can be redirected with ``artifacts.artifact_dir`` or the
``DIP_ARTIFACT_DIR`` environment variable. Each artifact is loaded once per
path and shared read-only for the life of the process.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import xgboost as xgb

from dip_ml.config.defaults import ARTIFACT_DIR_ENV
from dip_ml.config.schema import ArtifactConfig
from dip_ml.exceptions import ModelArtifactMissingError
from dip_ml.utils.serialization import load_joblib

logger = logging.getLogger(__name__)

PACKAGE_ARTIFACT_ROOT = Path(__file__).resolve().parent.parent / "artifacts"

ArtifactKind = Literal["classifier", "regressor"]


def get_artifact_dir(config: ArtifactConfig | None = None) -> Path:
    """Directory holding the artifacts for the configured version."""
    config = config or ArtifactConfig()
    if config.artifact_dir is not None:
        return Path(config.artifact_dir)

    env_dir = os.environ.get(ARTIFACT_DIR_ENV)
    if env_dir:
        return Path(env_dir)

    return PACKAGE_ARTIFACT_ROOT / config.version


def resolve_artifact_path(kind: ArtifactKind, config: ArtifactConfig | None = None) -> Path:
    """
    Locate an artifact file.

    Args:
        kind: "classifier" or "regressor"
        config: Artifact configuration (defaults to ArtifactConfig())

    Returns:
        Absolute path to the artifact

    Raises:
        ModelArtifactMissingError: If the file does not exist
        ValueError: If kind is unknown
    """
    config = config or ArtifactConfig()
    if kind == "classifier":
        filename = config.classifier_file
    elif kind == "regressor":
        filename = config.regressor_file
    else:
        raise ValueError(f"Unknown artifact kind: {kind!r}")

    path = (get_artifact_dir(config) / filename).resolve()
    if not path.is_file():
        raise ModelArtifactMissingError(path)
    return path


@lru_cache(maxsize=None)
def _load_booster(path: str) -> xgb.Booster:
    logger.info(f"Loading DIP stage classifier from: {path}")
    booster = xgb.Booster()
    booster.load_model(path)
    return booster


@lru_cache(maxsize=None)
def _load_estimator(path: str, check_versions: bool) -> Any:
    logger.info(f"Loading cDIP regressor from: {path}")
    return load_joblib(path, check_versions=check_versions)


def load_classifier_artifact(config: ArtifactConfig | None = None) -> xgb.Booster:
    """Load (or fetch from cache) the stage classifier booster."""
    config = config or ArtifactConfig()
    path = resolve_artifact_path("classifier", config)
    return _load_booster(str(path))


def load_regressor_artifact(config: ArtifactConfig | None = None) -> Any:
    """Load (or fetch from cache) the cDIP regression estimator."""
    config = config or ArtifactConfig()
    path = resolve_artifact_path("regressor", config)
    return _load_estimator(str(path), config.check_versions)


def clear_model_cache() -> None:
    """Forget loaded artifacts so the next call reloads from disk."""
    _load_booster.cache_clear()
    _load_estimator.cache_clear()
