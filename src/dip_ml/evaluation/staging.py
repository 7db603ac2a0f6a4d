"""Stage assignment from classifier probabilities."""

import numpy as np

from dip_ml.data.schema import N_STAGES, Stage


def assign_stage(prob) -> Stage:
    """Arg-max stage for one probability vector.

    Ties resolve to the lowest-severity stage. Near-equal mass on two adjacent
    stages is left for the caller to read from the returned probabilities.

    Parameters
    ----------
    prob : array-like of length 3
        (p_DIP1, p_DIP2, p_DIP3)

    Returns
    -------
    Stage
    """
    p = np.asarray(prob, dtype=np.float64)
    if p.shape != (N_STAGES,):
        raise ValueError(f"Expected a probability vector of length {N_STAGES}, got shape {p.shape}")
    # np.argmax returns the first maximal index.
    return Stage.from_index(int(np.argmax(p)))


def assign_stages(probabilities) -> list[Stage]:
    """Vectorized ``assign_stage`` over an N×3 matrix."""
    P = np.asarray(probabilities, dtype=np.float64)
    if P.ndim != 2 or P.shape[1] != N_STAGES:
        raise ValueError(f"Expected an N×{N_STAGES} probability matrix, got shape {P.shape}")
    return [Stage.from_index(i) for i in np.argmax(P, axis=1)]
