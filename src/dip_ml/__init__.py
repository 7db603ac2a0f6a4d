"""
DIP-ML: Dysregulated Immune Profile inference from plasma biomarkers

Predicts the DIP stage (DIP1 minor, DIP2 moderate, DIP3 major host-response
dysregulation) or the continuous cDIP score from sTREM-1, IL-6 and
Procalcitonin concentrations, using frozen pretrained models.
"""

__version__ = "1.0.0"
__license__ = "MIT"

from dip_ml.data.schema import Stage  # noqa: E402
from dip_ml.evaluation import (  # noqa: E402
    ScorePrediction,
    ScoreResult,
    StagePrediction,
    StageResult,
    predict_score,
    predict_stage,
)
from dip_ml.exceptions import DIPError  # noqa: E402

__all__ = [
    "__version__",
    "predict_stage",
    "predict_score",
    "Stage",
    "StagePrediction",
    "ScorePrediction",
    "StageResult",
    "ScoreResult",
    "DIPError",
]
