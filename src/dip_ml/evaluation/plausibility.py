"""Batch-level plausibility guard for DIP stage predictions.

Real cohorts do not split evenly into thirds across DIP1/DIP2/DIP3. An
approximately uniform split, or a classifier that assigns near-uniform
probabilities to every record, is treated as a pipeline defect (scaled or
transformed input, text masquerading as numbers, a broken runtime) and the
whole batch is rejected.
"""

import logging
from collections.abc import Sequence

import numpy as np
import pandas as pd

from dip_ml.config.schema import PlausibilityConfig
from dip_ml.data.schema import N_STAGES, STAGE_COL, STAGE_LABELS, Stage
from dip_ml.exceptions import ImplausibleDistributionError

logger = logging.getLogger(__name__)

IMPLAUSIBLE_HELP = (
    "This pattern is highly unlikely for valid biological input and usually "
    "indicates malformed data or an execution/environment issue.\n\n"
    "Please verify:\n"
    "  - Biomarker values are raw pg/ml (not scaled, normalized, or transformed).\n"
    "  - Biomarker columns are truly numeric (not categories or text).\n"
    "  - Decimal separator is '.' (not ',').\n"
    "  - The Python environment (numpy, pandas, xgboost, scikit-learn) is intact "
    "and matches the versions the models were built with.\n"
    "No results were returned."
)


def stage_counts(stages: Sequence[Stage]) -> np.ndarray:
    """Fixed-order counts (DIP1, DIP2, DIP3); absent stages count as 0."""
    counts = np.zeros(N_STAGES, dtype=np.int64)
    for s in stages:
        counts[int(s) - 1] += 1
    return counts


def stage_proportions(stages: Sequence[Stage]) -> np.ndarray:
    """Per-stage share of the batch; zeros for an empty batch."""
    counts = stage_counts(stages)
    n = counts.sum()
    if n == 0:
        return np.zeros(N_STAGES, dtype=np.float64)
    return counts / n


def stage_distribution(stages: Sequence[Stage]) -> pd.DataFrame:
    """Counts and percentages per stage, for chart consumers.

    Returns
    -------
    pd.DataFrame
        Columns ``DIP``, ``Freq``, ``percentage`` (rounded to 0.1),
        ``fill_label`` (e.g. "DIP1 (40.0%)"). One row per stage, including
        stages with zero records.
    """
    counts = stage_counts(stages)
    total = counts.sum()
    pct = np.round(counts / total * 100, 1) if total else np.zeros(N_STAGES)
    return pd.DataFrame(
        {
            STAGE_COL: STAGE_LABELS,
            "Freq": counts,
            "percentage": pct,
            "fill_label": [f"{lab} ({p}%)" for lab, p in zip(STAGE_LABELS, pct)],
        }
    )


def check_stage_distribution(
    stages: Sequence[Stage],
    probabilities: np.ndarray | None = None,
    config: PlausibilityConfig | None = None,
) -> np.ndarray:
    """Reject biologically implausible batches.

    Parameters
    ----------
    stages : sequence of Stage
        Assigned stage per record, whole batch.
    probabilities : np.ndarray, optional
        N×3 probability matrix; enables the uniform-probability check.
    config : PlausibilityConfig, optional
        Band, minimum batch size and switches.

    Returns
    -------
    np.ndarray
        Stage proportions (DIP1, DIP2, DIP3).

    Raises
    ------
    ImplausibleDistributionError
        If every proportion lies inside [band_low, band_high], or if every
        record's probability vector is within ``uniform_prob_tol`` of 1/3 each.
    """
    config = config or PlausibilityConfig()
    props = stage_proportions(stages)
    n = len(stages)

    if not config.enabled:
        return props

    if n < config.min_batch_size:
        logger.info(
            f"Plausibility check skipped: batch of {n} is below min_batch_size "
            f"({config.min_batch_size})"
        )
        return props

    in_band = (props >= config.band_low) & (props <= config.band_high)
    if n > 0 and in_band.all():
        pct = ", ".join(f"{lab} {p:.1%}" for lab, p in zip(STAGE_LABELS, props))
        raise ImplausibleDistributionError(
            "Invalid input detected: the predicted DIP distribution is approximately "
            f"1/3-1/3-1/3 across DIP1/DIP2/DIP3 ({pct}).\n\n" + IMPLAUSIBLE_HELP,
            proportions=props.tolist(),
        )

    if config.check_uniform_probabilities and probabilities is not None and n > 0:
        P = np.asarray(probabilities, dtype=np.float64)
        if np.all(np.abs(P - 1.0 / N_STAGES) <= config.uniform_prob_tol):
            raise ImplausibleDistributionError(
                "Invalid input detected: the classifier assigned approximately equal "
                "probability (1/3) to every DIP stage for every record.\n\n" + IMPLAUSIBLE_HELP,
                proportions=props.tolist(),
            )

    logger.debug(
        "Stage distribution: " + ", ".join(f"{lab}={p:.3f}" for lab, p in zip(STAGE_LABELS, props))
    )
    return props
