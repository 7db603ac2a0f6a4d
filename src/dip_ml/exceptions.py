"""
Exception hierarchy for the DIP inference pipeline.

Validation errors are raised before any model is invoked. Backend and
plausibility errors abort the whole batch; no partial predictions are returned.
"""

from collections.abc import Sequence


class DIPError(Exception):
    """Base class for all DIP pipeline errors."""

    pass


# ============================================================================
# Input validation
# ============================================================================


class InputValidationError(DIPError, ValueError):
    """Raised when the input table violates the record contract."""

    pass


class ShapeError(InputValidationError):
    """Raised when the input is not tabular or a matrix has the wrong shape."""

    pass


class EmptyInputError(InputValidationError):
    """Raised when the input table has zero rows."""

    def __init__(self):
        super().__init__("Input data frame is empty. Provide valid patient data.")


class MissingIdColumnError(InputValidationError):
    """Raised when the identifier column is absent."""

    def __init__(self, id_col: str):
        self.id_col = id_col
        super().__init__(f"Data must contain an '{id_col}' column.")


class MissingIdValueError(InputValidationError):
    """Raised when one or more rows have an empty identifier."""

    def __init__(self, row_positions: Sequence[int]):
        self.row_positions = list(row_positions)
        super().__init__(
            f"{len(self.row_positions)} row(s) have no ID "
            f"(row positions: {self.row_positions}). Every record needs a unique ID."
        )


class DuplicateIdError(InputValidationError):
    """Raised when identifiers are not unique within the batch."""

    def __init__(self, duplicate_ids: Sequence):
        self.duplicate_ids = list(duplicate_ids)
        super().__init__(
            f"IDs are not unique: {self.duplicate_ids}. Each ID must be unique. "
            "Patients with multiple timepoints should have the timepoint included in their ID."
        )


class MissingColumnError(InputValidationError):
    """Raised when required predictor columns are absent."""

    def __init__(self, missing_columns: Sequence[str]):
        self.missing_columns = list(missing_columns)
        super().__init__(
            f"Missing required columns: {', '.join(self.missing_columns)}. "
            "Ensure these exact names are used in your dataset."
        )


class NonNumericPredictorError(InputValidationError):
    """Raised when a predictor column holds values that are not numbers."""

    def __init__(self, offending: dict[str, list], hint: str | None = None):
        self.offending = {col: list(vals) for col, vals in offending.items()}
        details = "; ".join(f"{col}: {vals[:5]}" for col, vals in self.offending.items())
        msg = f"All biomarker columns must be numeric. Non-numeric values found in {details}."
        if hint:
            msg = f"{msg} {hint}"
        super().__init__(msg)


class EmptyAfterFilterError(InputValidationError):
    """Raised when every record was excluded for missing predictors."""

    def __init__(self, excluded_ids: Sequence):
        self.excluded_ids = list(excluded_ids)
        super().__init__(
            "All records were excluded because of missing biomarker values "
            f"(excluded IDs: {' '.join(str(i) for i in self.excluded_ids)}). "
            "No predictions can be made."
        )


# ============================================================================
# Model backends
# ============================================================================


class ModelBackendError(DIPError):
    """Base class for failures while loading or invoking a model."""

    pass


class ModelArtifactMissingError(ModelBackendError, FileNotFoundError):
    """Raised when a model artifact cannot be located."""

    def __init__(self, path):
        self.path = path
        super().__init__(
            f"Model file not found: {path}. Please reinstall the package "
            "or point artifacts.artifact_dir / DIP_ARTIFACT_DIR at a valid artifact directory."
        )


class PredictionNaNError(ModelBackendError):
    """Raised when a model returns non-finite values; invalidates the whole batch."""

    def __init__(self, n_bad: int, n_total: int):
        self.n_bad = n_bad
        self.n_total = n_total
        super().__init__(
            f"Model prediction returned {n_bad} non-finite value(s) out of {n_total}. "
            "Check input data format. No results were returned."
        )


class PredictionShapeError(ModelBackendError):
    """Raised when a model returns an output of unexpected shape."""

    pass


class ModelTimeoutError(ModelBackendError, TimeoutError):
    """Raised when a model call exceeds the configured timeout."""

    def __init__(self, timeout_s: float):
        self.timeout_s = timeout_s
        super().__init__(f"Model prediction did not finish within {timeout_s:g} s.")


# ============================================================================
# Output plausibility
# ============================================================================


class ImplausibleDistributionError(DIPError):
    """Raised when the batch-level stage distribution is biologically implausible."""

    def __init__(self, message: str, proportions: Sequence[float] | None = None):
        self.proportions = list(proportions) if proportions is not None else None
        super().__init__(message)
