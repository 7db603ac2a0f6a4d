"""
Shared pytest fixtures for DIP-ML tests.
"""

import logging

import numpy as np
import pandas as pd
import pytest
from sklearn.ensemble import GradientBoostingRegressor
from xgboost import XGBClassifier

from dip_ml.config.schema import InferenceConfig
from dip_ml.data.schema import ID_COL, PREDICTOR_COLS, REGRESSOR_FEATURE_ORDER
from dip_ml.models.artifacts import clear_model_cache
from dip_ml.utils.serialization import save_joblib

# Example cohort shipped with the original package documentation (pg/ml).
EXAMPLE_TREM_1 = [182, 400, 1000, 560, 230, 900, 450, 710, 620, 350,
                  150, 800, 250, 490, 780, 340, 900, 1100, 220, 510]  # fmt: skip
EXAMPLE_IL_6 = [70, 5, 10000, 450, 88, 3000, 150, 680, 740, 50,
                30, 600, 120, 470, 800, 60, 5000, 9000, 33, 200]  # fmt: skip
EXAMPLE_PCT = [877, 66, 20000, 1500, 500, 10000, 800, 2700, 1800, 460,
               250, 12000, 600, 1100, 14000, 350, 15000, 18000, 310, 900]  # fmt: skip


class ThresholdClassifier:
    """Deterministic stand-in for the stage classifier.

    Stage is driven by IL_6 (column 1): <100 -> DIP1, <1000 -> DIP2, else DIP3.
    """

    def __init__(self):
        self.calls = 0

    def predict_proba(self, X):
        self.calls += 1
        X = np.asarray(X, dtype=float)
        il6 = X[:, 1]
        out = np.empty((len(X), 3))
        out[il6 < 100] = [0.80, 0.15, 0.05]
        out[(il6 >= 100) & (il6 < 1000)] = [0.10, 0.70, 0.20]
        out[il6 >= 1000] = [0.05, 0.15, 0.80]
        return out


class FixedProbaClassifier:
    """Returns the same probability matrix for any input of matching length."""

    def __init__(self, proba):
        self.proba = np.asarray(proba, dtype=float)

    def predict_proba(self, X):
        n = len(X)
        if self.proba.ndim == 1:
            return np.tile(self.proba, (n, 1))
        return self.proba[:n]


class RecordingRegressor:
    """Regressor stub that records the columns it was given."""

    def __init__(self, feature_names=None, value=0.5):
        if feature_names is not None:
            self.feature_names_in_ = np.asarray(feature_names, dtype=object)
        self.value = value
        self.seen = None

    def predict(self, X):
        self.seen = X
        return np.full(len(X), self.value, dtype=float)


@pytest.fixture(autouse=True)
def _reset_state():
    """Drop cached artifacts and CLI logging handlers between tests."""
    yield
    clear_model_cache()
    pkg_logger = logging.getLogger("dip_ml")
    pkg_logger.handlers.clear()
    pkg_logger.propagate = True
    pkg_logger.setLevel(logging.NOTSET)


@pytest.fixture
def example_df():
    """Twenty-patient example cohort."""
    return pd.DataFrame(
        {
            ID_COL: list(range(1, 21)),
            "TREM_1": EXAMPLE_TREM_1,
            "IL_6": EXAMPLE_IL_6,
            "Procalcitonin": EXAMPLE_PCT,
        }
    )


@pytest.fixture
def threshold_classifier():
    return ThresholdClassifier()


def _synthetic_training_data(n=300, seed=0):
    rng = np.random.default_rng(seed)
    trem = rng.lognormal(mean=6.2, sigma=0.6, size=n)
    il6 = rng.lognormal(mean=5.0, sigma=1.8, size=n)
    pct = rng.lognormal(mean=7.0, sigma=1.4, size=n)
    X = pd.DataFrame({"TREM_1": trem, "IL_6": il6, "Procalcitonin": pct})
    severity = np.log(il6) + 0.5 * np.log(pct) + 0.3 * np.log(trem)
    y = np.digitize(severity, np.quantile(severity, [0.5, 0.85]))
    score = (severity - severity.min()) / (severity.max() - severity.min())
    return X, y, score


@pytest.fixture(scope="session")
def artifact_dir(tmp_path_factory):
    """Directory with a small real classifier (JSON) and regressor (joblib)."""
    out = tmp_path_factory.mktemp("artifacts")
    X, y, score = _synthetic_training_data()

    clf = XGBClassifier(
        n_estimators=20,
        max_depth=2,
        learning_rate=0.3,
        objective="multi:softprob",
        random_state=0,
        n_jobs=1,
    )
    clf.fit(X[PREDICTOR_COLS].to_numpy(), y)
    clf.get_booster().save_model(str(out / "xgb_model.json"))

    reg = GradientBoostingRegressor(n_estimators=30, max_depth=2, random_state=0)
    reg.fit(X[REGRESSOR_FEATURE_ORDER], score)
    save_joblib(reg, out / "model.pkl")

    return out


@pytest.fixture
def artifact_config(artifact_dir):
    """InferenceConfig pointing at the test artifacts, plausibility guard off."""
    return InferenceConfig(
        artifacts={"artifact_dir": artifact_dir},
        plausibility={"enabled": False},
    )


@pytest.fixture
def example_csv(tmp_path, example_df):
    path = tmp_path / "cohort.csv"
    example_df.to_csv(path, index=False)
    return path
