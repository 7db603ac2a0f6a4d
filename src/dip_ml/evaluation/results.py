"""Result types and assembly of the output tables.

Results are returned explicitly; nothing is published to module or global
state. Both result types unpack as ``(predictions, exclusions)``.
"""

from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd

from dip_ml.data.filters import ExclusionReport
from dip_ml.data.schema import (
    ID_COL,
    PREDICTOR_COLS,
    SCORE_COL,
    SCORE_OUTPUT_COLS,
    STAGE_COL,
    STAGE_OUTPUT_COLS,
    STAGE_PROB_COLS,
    Stage,
)
from dip_ml.evaluation.plausibility import stage_distribution


@dataclass(frozen=True)
class StagePrediction:
    """One record's DIP stage and class probabilities (p_DIP1, p_DIP2, p_DIP3)."""

    id: Any
    stage: Stage
    prob: tuple[float, float, float]


@dataclass(frozen=True)
class ScorePrediction:
    """One record's cDIP score."""

    id: Any
    score: float


@dataclass(frozen=True, eq=False)
class StageResult:
    """Output of ``predict_stage``."""

    table: pd.DataFrame
    predictions: tuple[StagePrediction, ...]
    exclusions: ExclusionReport
    coercions: tuple[str, ...] = ()
    diagnostics: tuple[str, ...] = ()
    proportions: tuple[float, ...] = ()

    def __iter__(self):
        return iter((self.predictions, self.exclusions))

    def __len__(self) -> int:
        return len(self.predictions)

    @property
    def distribution(self) -> pd.DataFrame:
        return stage_distribution([p.stage for p in self.predictions])


@dataclass(frozen=True, eq=False)
class ScoreResult:
    """Output of ``predict_score``."""

    table: pd.DataFrame
    predictions: tuple[ScorePrediction, ...]
    exclusions: ExclusionReport
    coercions: tuple[str, ...] = ()
    diagnostics: tuple[str, ...] = ()

    def __iter__(self):
        return iter((self.predictions, self.exclusions))

    def __len__(self) -> int:
        return len(self.predictions)


def _check_alignment(dataset: pd.DataFrame, values: np.ndarray, what: str) -> None:
    if len(values) != len(dataset):
        raise ValueError(
            f"{what} has {len(values)} rows but the dataset has {len(dataset)}; "
            "predictions must align with the filtered input"
        )


def assemble_stage_result(
    dataset: pd.DataFrame,
    probabilities: np.ndarray,
    stages: list[Stage],
    exclusions: ExclusionReport,
    coercions: tuple[str, ...] = (),
    diagnostics: tuple[str, ...] = (),
    proportions: tuple[float, ...] = (),
) -> StageResult:
    """Merge filtered input with stage predictions.

    Parameters
    ----------
    dataset : pd.DataFrame
        Filtered dataset, ``[ID, TREM_1, IL_6, Procalcitonin]``.
    probabilities : np.ndarray
        N×3 class probabilities aligned with ``dataset`` rows.
    stages : list of Stage
        Assigned stage per row.
    exclusions : ExclusionReport
        Records dropped before prediction.

    Returns
    -------
    StageResult
        ``table`` has columns ``ID, TREM_1, IL_6, Procalcitonin, DIP,
        DIP1_Prob, DIP2_Prob, DIP3_Prob`` in input order.
    """
    P = np.asarray(probabilities, dtype=np.float64)
    _check_alignment(dataset, P, "Probability matrix")
    _check_alignment(dataset, np.asarray(stages), "Stage list")

    table = dataset.loc[:, [ID_COL, *PREDICTOR_COLS]].copy().reset_index(drop=True)
    table[STAGE_COL] = [s.name for s in stages]
    for j, col in enumerate(STAGE_PROB_COLS):
        table[col] = P[:, j]
    table = table[STAGE_OUTPUT_COLS]

    ids = table[ID_COL].tolist()
    predictions = tuple(
        StagePrediction(id=rid, stage=stage, prob=tuple(float(p) for p in row))
        for rid, stage, row in zip(ids, stages, P)
    )

    return StageResult(
        table=table,
        predictions=predictions,
        exclusions=exclusions,
        coercions=tuple(coercions),
        diagnostics=tuple(diagnostics),
        proportions=tuple(float(p) for p in proportions),
    )


def assemble_score_result(
    dataset: pd.DataFrame,
    scores: np.ndarray,
    exclusions: ExclusionReport,
    coercions: tuple[str, ...] = (),
    diagnostics: tuple[str, ...] = (),
) -> ScoreResult:
    """Merge filtered input with cDIP scores.

    The output table has columns ``ID, TREM_1, IL_6, Procalcitonin, cDIP``.
    """
    s = np.asarray(scores, dtype=np.float64).reshape(-1)
    _check_alignment(dataset, s, "Score vector")

    table = dataset.loc[:, [ID_COL, *PREDICTOR_COLS]].copy().reset_index(drop=True)
    table[SCORE_COL] = s
    table = table[SCORE_OUTPUT_COLS]

    predictions = tuple(
        ScorePrediction(id=rid, score=float(v)) for rid, v in zip(table[ID_COL].tolist(), s)
    )

    return ScoreResult(
        table=table,
        predictions=predictions,
        exclusions=exclusions,
        coercions=tuple(coercions),
        diagnostics=tuple(diagnostics),
    )
