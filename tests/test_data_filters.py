"""
Tests for the missing-predictor filter.
"""

import numpy as np
import pandas as pd
import pytest

from dip_ml.data.filters import ExclusionReport, filter_missing_predictors
from dip_ml.data.validation import validate_records
from dip_ml.exceptions import EmptyAfterFilterError


@pytest.fixture
def dataset_with_gaps(example_df):
    """Validated example cohort; IDs 3 and 17 lack IL_6, ID 8 lacks TREM_1 and Procalcitonin."""
    df = example_df.astype({"TREM_1": float, "IL_6": float, "Procalcitonin": float})
    df.loc[df["ID"].isin([3, 17]), "IL_6"] = np.nan
    df.loc[df["ID"] == 8, ["TREM_1", "Procalcitonin"]] = np.nan
    return validate_records(df).data


class TestFilterMissingPredictors:
    def test_no_missing_values(self, example_df):
        data = validate_records(example_df).data
        kept, report = filter_missing_predictors(data)

        assert len(kept) == 20
        assert len(report) == 0
        assert report.ids == frozenset()
        pd.testing.assert_frame_equal(kept, data)

    def test_excludes_incomplete_records(self, dataset_with_gaps):
        kept, report = filter_missing_predictors(dataset_with_gaps)

        assert len(kept) == 17
        assert report.ids == {3, 8, 17}
        assert list(report) == [3, 8, 17]  # input order
        assert 8 in report
        assert not kept["ID"].isin([3, 8, 17]).any()

    def test_missing_predictors_per_id(self, dataset_with_gaps):
        _, report = filter_missing_predictors(dataset_with_gaps)
        missing = dict(report.missing_predictors)
        assert missing[3] == ("IL_6",)
        assert missing[8] == ("TREM_1", "Procalcitonin")

    def test_order_preserved_and_index_reset(self, dataset_with_gaps):
        kept, _ = filter_missing_predictors(dataset_with_gaps)
        expected = [i for i in range(1, 21) if i not in (3, 8, 17)]
        assert kept["ID"].tolist() == expected
        assert kept.index.tolist() == list(range(17))

    def test_input_not_mutated(self, dataset_with_gaps):
        before = dataset_with_gaps.copy()
        filter_missing_predictors(dataset_with_gaps)
        pd.testing.assert_frame_equal(dataset_with_gaps, before)

    def test_all_records_missing_raises(self, example_df):
        df = example_df.astype({"Procalcitonin": float})
        df["Procalcitonin"] = np.nan
        data = validate_records(df).data
        with pytest.raises(EmptyAfterFilterError) as exc:
            filter_missing_predictors(data)
        assert exc.value.excluded_ids == list(range(1, 21))

    def test_all_records_missing_without_raise(self, example_df):
        df = example_df.astype({"Procalcitonin": float})
        df["Procalcitonin"] = np.nan
        kept, report = filter_missing_predictors(validate_records(df).data, raise_if_empty=False)
        assert kept.empty
        assert len(report) == 20


class TestExclusionReport:
    def test_to_dict(self):
        report = ExclusionReport(
            excluded=("p1", "p2"),
            missing_predictors=(("p1", ("IL_6",)), ("p2", ("TREM_1", "IL_6"))),
        )
        assert report.to_dict() == {
            "n_excluded": 2,
            "excluded_ids": ["p1", "p2"],
            "missing_predictors": {"p1": ["IL_6"], "p2": ["TREM_1", "IL_6"]},
        }

    def test_is_immutable(self):
        report = ExclusionReport(excluded=(1,))
        with pytest.raises(AttributeError):
            report.excluded = (2,)
