"""
Input record validation and schema normalization.

Turns a caller-supplied table into a normalized Dataset with columns
``[ID, TREM_1, IL_6, Procalcitonin]`` (predictors in model order, float dtype).
All checks run before any model is touched; failures raise immediately.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np
import pandas as pd

from dip_ml.data.schema import ID_COL, PREDICTOR_COLS, get_input_columns
from dip_ml.exceptions import (
    DuplicateIdError,
    EmptyInputError,
    MissingColumnError,
    MissingIdColumnError,
    MissingIdValueError,
    NonNumericPredictorError,
    ShapeError,
)

if TYPE_CHECKING:
    from dip_ml.config.schema import ValidationConfig

logger = logging.getLogger(__name__)

_DECIMAL_COMMA = re.compile(r"^\s*[-+]?\d+,\d+\s*$")


@dataclass(frozen=True)
class ValidatedRecords:
    """Normalized dataset plus a record of what was changed or flagged."""

    data: pd.DataFrame
    coercions: tuple[str, ...] = ()
    diagnostics: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.data)


def as_dataframe(table: Any) -> pd.DataFrame:
    """
    Accept a DataFrame, a mapping of columns, or a sequence of record mappings.

    Raises:
        ShapeError: If the input cannot be interpreted as a table
    """
    if isinstance(table, pd.DataFrame):
        df = table
    elif isinstance(table, Mapping) or (
        isinstance(table, (list, tuple)) and all(isinstance(r, Mapping) for r in table)
    ):
        try:
            df = pd.DataFrame(table)
        except (ValueError, TypeError) as e:
            raise ShapeError(f"Input could not be converted to a table: {e}") from e
    else:
        raise ShapeError(
            f"Input must be a data frame (pandas.DataFrame), got {type(table).__name__}."
        )

    if df.columns.duplicated().any():
        dupes = sorted({str(c) for c in df.columns[df.columns.duplicated()]})
        raise ShapeError(f"Input has repeated column names: {dupes}.")

    return df


def check_identifiers(df: pd.DataFrame) -> None:
    """
    Validate the ID column: present, non-null, unique.

    Raises:
        MissingIdColumnError: If the ID column is absent
        MissingIdValueError: If any ID is null
        DuplicateIdError: If any ID repeats
    """
    if ID_COL not in df.columns:
        raise MissingIdColumnError(ID_COL)

    ids = df[ID_COL]
    null_mask = ids.isna().to_numpy()
    if null_mask.any():
        raise MissingIdValueError(np.flatnonzero(null_mask).tolist())

    dup_mask = ids.duplicated(keep=False)
    if dup_mask.any():
        raise DuplicateIdError(pd.unique(ids[dup_mask]).tolist())


def normalize_schema(df: pd.DataFrame) -> tuple[pd.DataFrame, list[str]]:
    """
    Select ``[ID, *PREDICTOR_COLS]`` in canonical order.

    Args:
        df: Input table (not modified)

    Returns:
        (normalized_df, coercions) where coercions describes each change applied

    Raises:
        MissingColumnError: If any predictor column is absent
    """
    missing = [c for c in PREDICTOR_COLS if c not in df.columns]
    if missing:
        raise MissingColumnError(missing)

    coercions = []

    present_order = [c for c in df.columns if c in PREDICTOR_COLS]
    if present_order != PREDICTOR_COLS:
        msg = (
            "Column order in the dataset does not match the model's expected format "
            f"({', '.join(present_order)}). Reordering to match the correct order "
            f"({', '.join(PREDICTOR_COLS)})."
        )
        logger.warning(msg)
        coercions.append(msg)

    keep = get_input_columns()
    extra = [c for c in df.columns if c not in keep]
    if extra:
        msg = f"Dropped columns not used by the models: {[str(c) for c in extra]}"
        logger.info(msg)
        coercions.append(msg)

    normalized = df.loc[:, keep].copy().reset_index(drop=True)
    return normalized, coercions


def coerce_predictors(df: pd.DataFrame) -> tuple[pd.DataFrame, list[str]]:
    """
    Convert predictor columns to float64.

    Numeric columns pass through. Text columns are parsed with
    ``pd.to_numeric``; blank strings count as missing. Any other value that
    fails to parse, boolean columns, and infinite values are rejected.

    Args:
        df: Normalized table (modified in place; callers pass their own copy)

    Returns:
        (df, coercions)

    Raises:
        NonNumericPredictorError: If any predictor holds non-numeric values
    """
    offending: dict[str, list] = {}
    coercions = []
    decimal_comma = False

    for col in PREDICTOR_COLS:
        s = df[col]

        if pd.api.types.is_bool_dtype(s):
            offending[col] = pd.unique(s.dropna()).tolist()
            continue

        if pd.api.types.is_numeric_dtype(s):
            values = s.astype("float64")
        else:
            s = s.astype(object)
            blank = s.map(lambda v: isinstance(v, str) and v.strip() == "")
            s = s.mask(blank)
            bool_vals = s.map(lambda v: isinstance(v, (bool, np.bool_)))
            values = pd.to_numeric(s.mask(bool_vals), errors="coerce").astype("float64")
            bad = (s.notna() & values.isna()) | bool_vals
            if bad.any():
                bad_vals = pd.unique(s[bad]).tolist()
                offending[col] = bad_vals
                decimal_comma = decimal_comma or any(
                    isinstance(v, str) and _DECIMAL_COMMA.match(v) for v in bad_vals
                )
                continue
            coercions.append(f"Converted {col} to numeric")

        inf_mask = np.isinf(values.to_numpy())
        if inf_mask.any():
            offending[col] = pd.unique(values[inf_mask]).tolist()
            continue

        df[col] = values

    if offending:
        hint = "Decimal separator must be '.' (not ',')." if decimal_comma else None
        raise NonNumericPredictorError(offending, hint=hint)

    return df, coercions


def consistency_diagnostics(
    df: pd.DataFrame,
    min_rows: int = 10,
    max_share: float = 0.10,
    warn_negative: bool = True,
) -> list[str]:
    """
    Non-fatal data-quality checks.

    For batches larger than ``min_rows``, flags any predictor whose most
    frequent value covers more than ``max_share`` of rows (duplicated or
    corrupted data). Optionally flags negative concentrations.

    Returns:
        List of warning messages (also logged)
    """
    messages = []
    n = len(df)

    if n > min_rows:
        for col in PREDICTOR_COLS:
            freqs = df[col].value_counts(dropna=True)
            if len(freqs) == 0:
                continue
            share = freqs.iloc[0] / n
            if share > max_share:
                messages.append(
                    f"More than {max_share:.0%} of {col} are the exact same value "
                    f"({share * 100:.2f}%). The column may contain duplicated or corrupted data."
                )

    if warn_negative:
        for col in PREDICTOR_COLS:
            n_neg = int((df[col] < 0).sum())
            if n_neg:
                messages.append(
                    f"{col} contains {n_neg} negative value(s); "
                    "concentrations must be raw pg/ml."
                )

    for msg in messages:
        logger.warning(msg)

    return messages


def validate_records(table: Any, config: "ValidationConfig | None" = None) -> ValidatedRecords:
    """
    Validate and normalize a biomarker table.

    Check order: shape, empty, ID column, ID values, duplicate IDs, predictor
    columns, numeric predictors. The caller's table is never modified.

    Args:
        table: pandas DataFrame (or mapping / list of record mappings)
        config: Validation thresholds (defaults to ValidationConfig())

    Returns:
        ValidatedRecords with the normalized dataset

    Raises:
        ShapeError, EmptyInputError, MissingIdColumnError, MissingIdValueError,
        DuplicateIdError, MissingColumnError, NonNumericPredictorError

    Example:
        >>> records = validate_records(df)
        >>> list(records.data.columns)
        ['ID', 'TREM_1', 'IL_6', 'Procalcitonin']
    """
    if config is None:
        from dip_ml.config.schema import ValidationConfig

        config = ValidationConfig()

    df = as_dataframe(table)

    if len(df) == 0:
        raise EmptyInputError()

    check_identifiers(df)

    normalized, coercions = normalize_schema(df)
    normalized, numeric_coercions = coerce_predictors(normalized)
    coercions.extend(numeric_coercions)

    diagnostics = consistency_diagnostics(
        normalized,
        min_rows=config.consistency_min_rows,
        max_share=config.consistency_max_share,
        warn_negative=config.warn_negative_values,
    )

    logger.debug(f"Validated {len(normalized)} records")

    return ValidatedRecords(
        data=normalized,
        coercions=tuple(coercions),
        diagnostics=tuple(diagnostics),
    )
