"""Model backends behind a uniform batch-predict contract.

Both backends take an N×3 float matrix with columns in canonical predictor
order (TREM_1, IL_6, Procalcitonin) and return an N×K float array:

- ClassifierBackend: K=3 stage probabilities (rows sum to 1)
- RegressorBackend: K=1 cDIP score in [0, 1]

Any non-finite output invalidates the whole batch.
"""

import logging
from abc import ABC, abstractmethod
import threading
from typing import Any

import numpy as np
import pandas as pd
import xgboost as xgb

from dip_ml.config.schema import InferenceConfig
from dip_ml.data.schema import N_STAGES, PREDICTOR_COLS, REGRESSOR_FEATURE_ORDER
from dip_ml.exceptions import (
    ModelTimeoutError,
    PredictionNaNError,
    PredictionShapeError,
    ShapeError,
)
from dip_ml.models.artifacts import load_classifier_artifact, load_regressor_artifact

logger = logging.getLogger(__name__)


def _feature_frame(X: np.ndarray, order: list[str]) -> pd.DataFrame:
    """Canonical matrix -> DataFrame with columns rearranged to ``order``."""
    return pd.DataFrame(X, columns=PREDICTOR_COLS)[order]


def _fitted_feature_order(model: Any) -> list[str] | None:
    names = getattr(model, "feature_names_in_", None)
    if names is not None and sorted(names) == sorted(PREDICTOR_COLS):
        return [str(n) for n in names]
    return None


class ModelBackend(ABC):
    """Frozen model wrapped behind ``predict(matrix) -> N×K``.

    Subclasses implement ``_predict_raw`` (the call into the model) and may
    override ``_postprocess``. Input/output shape checks, the optional timeout
    and the non-finite guard live here.
    """

    n_outputs: int = 1
    name: str = "model"

    def __init__(self, model: Any, timeout_s: float | None = None):
        self.model = model
        self.timeout_s = timeout_s

    @classmethod
    @abstractmethod
    def from_config(cls, config: InferenceConfig | None = None) -> "ModelBackend":
        """Build the backend from the artifact store."""

    @classmethod
    def from_model(cls, model: Any, timeout_s: float | None = None, **kwargs) -> "ModelBackend":
        """Wrap an in-memory model object (no artifact lookup)."""
        return cls(model, timeout_s=timeout_s, **kwargs)

    @abstractmethod
    def _predict_raw(self, X: np.ndarray) -> Any:
        """Call into the wrapped model."""

    def _postprocess(self, out: np.ndarray) -> np.ndarray:
        return out

    def predict(self, matrix: Any) -> np.ndarray:
        """
        Predict a batch.

        Args:
            matrix: N×3 array-like in canonical predictor order

        Returns:
            np.ndarray of shape (N, n_outputs), float64

        Raises:
            ShapeError: If the input is not N×3
            PredictionShapeError: If the model output has the wrong shape
            PredictionNaNError: If any output is NaN or infinite
            ModelTimeoutError: If the call exceeds ``timeout_s``
        """
        X = np.asarray(matrix, dtype=np.float64)
        if X.ndim != 2 or X.shape[1] != len(PREDICTOR_COLS):
            raise ShapeError(
                f"{self.name} expects an N×{len(PREDICTOR_COLS)} matrix "
                f"({', '.join(PREDICTOR_COLS)}), got shape {X.shape}"
            )

        n = X.shape[0]
        if n == 0:
            return np.empty((0, self.n_outputs), dtype=np.float64)

        logger.debug(f"{self.name}: predicting {n} records")
        raw = self._call_with_timeout(X)
        out = self._check_output(raw, n)
        return self._postprocess(out)

    def _call_with_timeout(self, X: np.ndarray) -> Any:
        if self.timeout_s is None:
            return self._predict_raw(X)

        # Daemon worker: a model call that never returns must not block
        # interpreter exit.
        outcome: dict[str, Any] = {}

        def _target():
            try:
                outcome["value"] = self._predict_raw(X)
            except Exception as e:
                outcome["error"] = e

        worker = threading.Thread(target=_target, name=f"{self.name} predict", daemon=True)
        worker.start()
        worker.join(self.timeout_s)

        if worker.is_alive():
            logger.error(f"{self.name}: no result after {self.timeout_s:g} s; abandoning call")
            raise ModelTimeoutError(self.timeout_s)
        if "error" in outcome:
            raise outcome["error"]
        return outcome["value"]

    def _check_output(self, raw: Any, n: int) -> np.ndarray:
        out = np.asarray(raw, dtype=np.float64)
        k = self.n_outputs

        # Flat n*k output is row-major (one record's outputs are contiguous).
        if out.ndim == 1 and out.size == n * k:
            out = out.reshape(n, k)
        if out.shape != (n, k):
            raise PredictionShapeError(
                f"{self.name} returned shape {out.shape}; expected ({n}, {k})"
            )

        bad = ~np.isfinite(out)
        if bad.any():
            raise PredictionNaNError(int(bad.sum()), int(out.size))

        return out


class ClassifierBackend(ModelBackend):
    """DIP stage classifier (XGBoost multi:softprob, 3 classes)."""

    n_outputs = N_STAGES
    name = "DIP stage classifier"

    @classmethod
    def from_config(cls, config: InferenceConfig | None = None) -> "ClassifierBackend":
        config = config or InferenceConfig()
        booster = load_classifier_artifact(config.artifacts)
        return cls(booster, timeout_s=config.backend.timeout_s)

    def _predict_raw(self, X: np.ndarray) -> Any:
        model = self.model
        if isinstance(model, xgb.Booster):
            names = model.feature_names
            if names and sorted(names) == sorted(PREDICTOR_COLS):
                dmatrix = xgb.DMatrix(_feature_frame(X, list(names)))
            elif names:
                dmatrix = xgb.DMatrix(X, feature_names=list(names))
            else:
                dmatrix = xgb.DMatrix(X)
            return model.predict(dmatrix)

        order = _fitted_feature_order(model)
        if order is not None:
            return model.predict_proba(_feature_frame(X, order))
        return model.predict_proba(X)

    def _postprocess(self, out: np.ndarray) -> np.ndarray:
        out = np.clip(out, 0.0, 1.0)
        row_sums = out.sum(axis=1, keepdims=True)
        if np.any(row_sums <= 0.0):
            raise PredictionShapeError(
                f"{self.name} returned an all-zero probability row; cannot normalize"
            )
        return out / row_sums


class RegressorBackend(ModelBackend):
    """cDIP regression ensemble (scikit-learn estimator)."""

    n_outputs = 1
    name = "cDIP regressor"

    def __init__(
        self,
        model: Any,
        timeout_s: float | None = None,
        feature_order: list[str] | None = None,
    ):
        # Artifacts saved from a wrapper object keep the estimator in ``.model``.
        if not hasattr(model, "predict") and hasattr(model, "model"):
            model = model.model
        super().__init__(model, timeout_s=timeout_s)
        self.feature_order = list(feature_order or REGRESSOR_FEATURE_ORDER)

    @classmethod
    def from_config(cls, config: InferenceConfig | None = None) -> "RegressorBackend":
        config = config or InferenceConfig()
        estimator = load_regressor_artifact(config.artifacts)
        return cls(
            estimator,
            timeout_s=config.backend.timeout_s,
            feature_order=config.artifacts.regressor_feature_order,
        )

    def _predict_raw(self, X: np.ndarray) -> Any:
        order = _fitted_feature_order(self.model)
        if order is not None:
            return self.model.predict(_feature_frame(X, order))
        # Fitted without column names: positional input in the training order.
        return self.model.predict(_feature_frame(X, self.feature_order).to_numpy())

    def _postprocess(self, out: np.ndarray) -> np.ndarray:
        n_out = int(((out < 0.0) | (out > 1.0)).sum())
        if n_out:
            logger.warning(f"{n_out} cDIP score(s) outside [0, 1] were clipped")
        return np.clip(out, 0.0, 1.0)
