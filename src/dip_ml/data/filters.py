"""
Row filtering for records with missing predictors.

Selection is index based over the validated snapshot: the input frame is never
modified, and the excluded identifiers are returned in an ExclusionReport.
"""

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd

from dip_ml.data.schema import ID_COL, PREDICTOR_COLS
from dip_ml.exceptions import EmptyAfterFilterError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExclusionReport:
    """IDs removed because one or more predictors were missing.

    ``excluded`` keeps input order; ``missing_predictors`` pairs each excluded
    ID with the predictor names that were empty for it.
    """

    excluded: tuple = ()
    missing_predictors: tuple[tuple[Any, tuple[str, ...]], ...] = ()

    @property
    def ids(self) -> frozenset:
        return frozenset(self.excluded)

    def __len__(self) -> int:
        return len(self.excluded)

    def __iter__(self):
        return iter(self.excluded)

    def __contains__(self, item) -> bool:
        return item in self.excluded

    def to_dict(self) -> dict[str, Any]:
        return {
            "n_excluded": len(self.excluded),
            "excluded_ids": list(self.excluded),
            "missing_predictors": {str(i): list(cols) for i, cols in self.missing_predictors},
        }


def filter_missing_predictors(
    dataset: pd.DataFrame,
    predictor_cols: list[str] | None = None,
    raise_if_empty: bool = True,
) -> tuple[pd.DataFrame, ExclusionReport]:
    """
    Drop records with any missing predictor.

    Args:
        dataset: Validated dataset with ID and predictor columns
        predictor_cols: Columns that must be present (default: PREDICTOR_COLS)
        raise_if_empty: If True, raise when no record survives

    Returns:
        (filtered_df, report): filtered_df is a new frame with a fresh
        RangeIndex, rows in input order.

    Raises:
        EmptyAfterFilterError: If every record was excluded and raise_if_empty=True

    Example:
        >>> kept, report = filter_missing_predictors(records.data)
        >>> print(f"Excluded {len(report)} records: {list(report)}")
    """
    cols = predictor_cols if predictor_cols is not None else PREDICTOR_COLS

    missing_mask = dataset[cols].isna().to_numpy()
    row_missing = missing_mask.any(axis=1)

    keep_idx = np.flatnonzero(~row_missing)
    drop_idx = np.flatnonzero(row_missing)

    excluded_ids = dataset[ID_COL].iloc[drop_idx].tolist()
    missing_by_id = tuple(
        (rid, tuple(c for c, m in zip(cols, missing_mask[pos]) if m))
        for rid, pos in zip(excluded_ids, drop_idx)
    )
    report = ExclusionReport(excluded=tuple(excluded_ids), missing_predictors=missing_by_id)

    if excluded_ids:
        logger.warning(
            "Patients with missing classifier data are omitted. Affected patient IDs: "
            + " ".join(str(i) for i in excluded_ids)
        )

    if len(keep_idx) == 0 and raise_if_empty:
        raise EmptyAfterFilterError(excluded_ids)

    filtered = dataset.iloc[keep_idx].copy().reset_index(drop=True)
    logger.debug(f"Missing-data filter: {len(dataset)} in, {len(filtered)} out")

    return filtered, report
