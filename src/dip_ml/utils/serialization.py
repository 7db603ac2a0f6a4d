"""
Serialization utilities for model artifacts and results.
"""

import json
import warnings
from pathlib import Path
from typing import Any

import joblib
from sklearn.exceptions import InconsistentVersionWarning


def save_joblib(obj: Any, path: str | Path, compress: int = 3):
    """Save object using joblib."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    joblib.dump(obj, path, compress=compress)


def load_joblib(path: str | Path, check_versions: bool = True) -> Any:
    """
    Load object using joblib with optional version checking.

    Plain pickle files are accepted as well.

    Args:
        path: Path to joblib/pickle file
        check_versions: If True, collect library version differences between the
            artifact and the current environment and report them as one warning.
            Two sources are checked: a bundle dict with a "versions" entry, and
            scikit-learn's InconsistentVersionWarning raised while unpickling.

    Returns:
        Loaded object

    Warns:
        UserWarning if versions mismatch and check_versions=True
    """
    if not check_versions:
        return joblib.load(path)

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        obj = joblib.load(path)

    mismatches = []
    for w in caught:
        if issubclass(w.category, InconsistentVersionWarning):
            msg = w.message
            mismatches.append(
                f"sklearn ({msg.estimator_name}): saved={msg.original_sklearn_version}, "
                f"current={msg.current_sklearn_version}"
            )
        else:
            warnings.warn(w.message, w.category, stacklevel=2)

    if isinstance(obj, dict) and "versions" in obj:
        mismatches.extend(_bundle_version_mismatches(obj["versions"]))

    if mismatches:
        # One line per library/estimator pair
        mismatches = list(dict.fromkeys(mismatches))
        warnings.warn(
            f"Model artifact version mismatch in {Path(path).name}:\n"
            + "\n".join(f"  - {m}" for m in mismatches)
            + "\nPredictions may be inconsistent.",
            UserWarning,
            stacklevel=2,
        )

    return obj


def _bundle_version_mismatches(saved_versions: dict[str, str]) -> list[str]:
    import numpy as np
    import pandas as pd
    import sklearn

    current_versions = {
        "sklearn": sklearn.__version__,
        "pandas": pd.__version__,
        "numpy": np.__version__,
    }

    mismatches = []
    for lib, saved_ver in saved_versions.items():
        current_ver = current_versions.get(lib)
        if current_ver and saved_ver != current_ver:
            mismatches.append(f"{lib}: saved={saved_ver}, current={current_ver}")
    return mismatches


def save_json(obj: Any, path: str | Path, indent: int = 2):
    """Save object as JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        json.dump(obj, f, indent=indent, default=str)


def load_json(path: str | Path) -> Any:
    """Load JSON file."""
    with open(path) as f:
        return json.load(f)
