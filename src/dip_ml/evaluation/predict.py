"""Prediction entry points for DIP stage and cDIP score.

This module handles:
- Validating and normalizing the input table
- Dropping records with missing biomarkers (reported, not fatal)
- Invoking the classifier or regressor backend
- Stage assignment and the batch plausibility guard (stage path only)
- Assembling the output table and result object
"""

import logging
from typing import Any

import numpy as np

from dip_ml.config.schema import InferenceConfig
from dip_ml.data.filters import filter_missing_predictors
from dip_ml.data.schema import PREDICTOR_COLS, UNITS_REMINDER
from dip_ml.data.validation import ValidatedRecords, validate_records
from dip_ml.evaluation.plausibility import check_stage_distribution
from dip_ml.evaluation.results import (
    ScoreResult,
    StageResult,
    assemble_score_result,
    assemble_stage_result,
)
from dip_ml.evaluation.staging import assign_stages
from dip_ml.models.backends import ClassifierBackend, ModelBackend, RegressorBackend

logger = logging.getLogger(__name__)


def _prepare(table: Any, config: InferenceConfig):
    logger.info(UNITS_REMINDER)
    records: ValidatedRecords = validate_records(table, config.validation)
    filtered, exclusions = filter_missing_predictors(records.data)
    X = filtered[PREDICTOR_COLS].to_numpy(dtype=np.float64)
    return records, filtered, exclusions, X


def predict_stage(
    table: Any,
    config: InferenceConfig | None = None,
    backend: ModelBackend | None = None,
) -> StageResult:
    """Predict the DIP stage (DIP1-3) for each record.

    Parameters
    ----------
    table : pd.DataFrame
        Columns ``ID``, ``TREM_1``, ``IL_6``, ``Procalcitonin`` (pg/ml, raw).
    config : InferenceConfig, optional
        Pipeline configuration; defaults to ``InferenceConfig()``.
    backend : ModelBackend, optional
        Classifier to use; defaults to the packaged XGBoost artifact.

    Returns
    -------
    StageResult
        Unpacks as ``(predictions, exclusions)``; ``.table`` holds the
        output frame.

    Raises
    ------
    InputValidationError
        Any validation failure, before the model is invoked.
    ModelBackendError
        Artifact missing, non-finite output, timeout.
    ImplausibleDistributionError
        Near-uniform one-third split across stages.

    Examples
    --------
    >>> result = predict_stage(df)
    >>> predictions, excluded = result
    >>> result.table.head()
    """
    config = config or InferenceConfig()
    records, filtered, exclusions, X = _prepare(table, config)

    if backend is None:
        backend = ClassifierBackend.from_config(config)

    proba = backend.predict(X)
    stages = assign_stages(proba)
    proportions = check_stage_distribution(stages, proba, config.plausibility)

    result = assemble_stage_result(
        filtered,
        proba,
        stages,
        exclusions,
        coercions=records.coercions,
        diagnostics=records.diagnostics,
        proportions=tuple(proportions),
    )
    logger.info(
        f"DIP stage predicted for {len(result)} record(s); {len(exclusions)} excluded"
    )
    return result


def predict_score(
    table: Any,
    config: InferenceConfig | None = None,
    backend: ModelBackend | None = None,
) -> ScoreResult:
    """Predict the continuous cDIP score in [0, 1] for each record.

    Parameters
    ----------
    table : pd.DataFrame
        Columns ``ID``, ``TREM_1``, ``IL_6``, ``Procalcitonin`` (pg/ml, raw).
    config : InferenceConfig, optional
        Pipeline configuration; defaults to ``InferenceConfig()``.
    backend : ModelBackend, optional
        Regressor to use; defaults to the packaged scikit-learn artifact.

    Returns
    -------
    ScoreResult
        Unpacks as ``(predictions, exclusions)``; ``.table`` holds the
        output frame.
    """
    config = config or InferenceConfig()
    records, filtered, exclusions, X = _prepare(table, config)

    if backend is None:
        backend = RegressorBackend.from_config(config)

    scores = backend.predict(X)

    result = assemble_score_result(
        filtered,
        scores[:, 0],
        exclusions,
        coercions=records.coercions,
        diagnostics=records.diagnostics,
    )
    logger.info(f"cDIP predicted for {len(result)} record(s); {len(exclusions)} excluded")
    return result
