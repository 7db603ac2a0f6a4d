"""Data handling and schema definitions."""

from dip_ml.data.filters import ExclusionReport, filter_missing_predictors
from dip_ml.data.io import read_biomarker_file, write_table
from dip_ml.data.schema import (
    ID_COL,
    PREDICTOR_COLS,
    SCORE_COL,
    STAGE_COL,
    STAGE_LABELS,
    STAGE_PROB_COLS,
    Stage,
)
from dip_ml.data.validation import ValidatedRecords, validate_records

__all__ = [
    # Schema
    "ID_COL",
    "PREDICTOR_COLS",
    "STAGE_COL",
    "STAGE_PROB_COLS",
    "STAGE_LABELS",
    "SCORE_COL",
    "Stage",
    # Validation
    "ValidatedRecords",
    "validate_records",
    # Filters
    "ExclusionReport",
    "filter_missing_predictors",
    # I/O
    "read_biomarker_file",
    "write_table",
]
