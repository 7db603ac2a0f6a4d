"""
Data schema definitions and constants.

Defines column names, stage labels, and output columns used throughout the pipeline.
"""

from enum import IntEnum

# ============================================================================
# Column Names
# ============================================================================

# Identifier column (case-sensitive, caller supplied)
ID_COL = "ID"

# Biomarker predictors, in the order the stage classifier expects
TREM1_COL = "TREM_1"
IL6_COL = "IL_6"
PCT_COL = "Procalcitonin"

PREDICTOR_COLS = [TREM1_COL, IL6_COL, PCT_COL]

# Feature order the cDIP regressor was fitted with
REGRESSOR_FEATURE_ORDER = [PCT_COL, TREM1_COL, IL6_COL]

UNITS_REMINDER = (
    "Please ensure TREM_1, IL_6, and Procalcitonin are in pg/ml, untransformed and unscaled."
)

# ============================================================================
# Stage Labels
# ============================================================================


class Stage(IntEnum):
    """Ordered Dysregulated Immune Profile stages."""

    DIP1 = 1  # minor dysregulation
    DIP2 = 2  # moderate dysregulation
    DIP3 = 3  # major dysregulation

    @property
    def label(self) -> str:
        return self.name

    @classmethod
    def from_index(cls, index: int) -> "Stage":
        """Map a zero-based probability column index to its stage."""
        return cls(int(index) + 1)


STAGE_LABELS = [s.name for s in Stage]
N_STAGES = len(STAGE_LABELS)

# ============================================================================
# Output Columns
# ============================================================================

STAGE_COL = "DIP"
STAGE_PROB_COLS = [f"{label}_Prob" for label in STAGE_LABELS]
SCORE_COL = "cDIP"

STAGE_OUTPUT_COLS = [ID_COL, *PREDICTOR_COLS, STAGE_COL, *STAGE_PROB_COLS]
SCORE_OUTPUT_COLS = [ID_COL, *PREDICTOR_COLS, SCORE_COL]


def get_input_columns() -> list[str]:
    """Columns of a normalized input Dataset, in order."""
    return [ID_COL, *PREDICTOR_COLS]
