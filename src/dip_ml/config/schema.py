"""
Configuration schema for the DIP inference pipeline.

Defines Pydantic models for validation thresholds, the plausibility guard,
artifact locations, and backend invocation.
"""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator

from dip_ml.data.schema import PREDICTOR_COLS, REGRESSOR_FEATURE_ORDER

# ============================================================================
# Input Validation Configuration
# ============================================================================


class ValidationConfig(BaseModel):
    """Thresholds for the non-fatal consistency diagnostics."""

    consistency_min_rows: int = Field(default=10, ge=0)
    consistency_max_share: float = Field(default=0.10, ge=0.0, le=1.0)
    warn_negative_values: bool = True


# ============================================================================
# Plausibility Guard Configuration
# ============================================================================


class PlausibilityConfig(BaseModel):
    """Batch-level stage distribution sanity check.

    All three stage proportions falling inside [band_low, band_high] rejects the
    batch. min_batch_size=1 runs the check on every batch.
    """

    enabled: bool = True
    band_low: float = Field(default=0.30, ge=0.0, le=1.0)
    band_high: float = Field(default=0.36, ge=0.0, le=1.0)
    min_batch_size: int = Field(default=1, ge=1)
    check_uniform_probabilities: bool = True
    uniform_prob_tol: float = Field(default=1e-3, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def validate_band(self):
        if self.band_low > self.band_high:
            raise ValueError(
                f"band_low ({self.band_low}) must not exceed band_high ({self.band_high})"
            )
        return self


# ============================================================================
# Artifact Store Configuration
# ============================================================================


class ArtifactConfig(BaseModel):
    """Location of the frozen model artifacts."""

    version: str = "v1"
    artifact_dir: Path | None = None
    classifier_file: str = "xgb_model.json"
    regressor_file: str = "model.pkl"
    regressor_feature_order: list[str] = Field(
        default_factory=lambda: list(REGRESSOR_FEATURE_ORDER)
    )
    check_versions: bool = True

    @field_validator("regressor_feature_order")
    @classmethod
    def validate_feature_order(cls, v: list[str]) -> list[str]:
        if sorted(v) != sorted(PREDICTOR_COLS):
            raise ValueError(
                f"regressor_feature_order must be a permutation of {PREDICTOR_COLS}, got {v}"
            )
        return v


# ============================================================================
# Backend Invocation Configuration
# ============================================================================


class BackendConfig(BaseModel):
    """Model invocation settings."""

    timeout_s: float | None = Field(default=None, gt=0.0)


# ============================================================================
# Top-level Configuration
# ============================================================================


class InferenceConfig(BaseModel):
    """Complete configuration for predict_stage / predict_score."""

    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    plausibility: PlausibilityConfig = Field(default_factory=PlausibilityConfig)
    artifacts: ArtifactConfig = Field(default_factory=ArtifactConfig)
    backend: BackendConfig = Field(default_factory=BackendConfig)
