"""Inference pipeline: staging, plausibility, result assembly."""

from dip_ml.evaluation.plausibility import (
    check_stage_distribution,
    stage_counts,
    stage_distribution,
    stage_proportions,
)
from dip_ml.evaluation.predict import predict_score, predict_stage
from dip_ml.evaluation.results import (
    ScorePrediction,
    ScoreResult,
    StagePrediction,
    StageResult,
    assemble_score_result,
    assemble_stage_result,
)
from dip_ml.evaluation.staging import assign_stage, assign_stages

__all__ = [
    "predict_stage",
    "predict_score",
    "assign_stage",
    "assign_stages",
    "check_stage_distribution",
    "stage_counts",
    "stage_proportions",
    "stage_distribution",
    "StagePrediction",
    "ScorePrediction",
    "StageResult",
    "ScoreResult",
    "assemble_stage_result",
    "assemble_score_result",
]
