"""
Tests for input record validation and schema normalization.
"""

import numpy as np
import pandas as pd
import pytest

from dip_ml.config.schema import ValidationConfig
from dip_ml.data.schema import ID_COL, PREDICTOR_COLS
from dip_ml.data.validation import (
    as_dataframe,
    consistency_diagnostics,
    validate_records,
)
from dip_ml.exceptions import (
    DuplicateIdError,
    EmptyInputError,
    InputValidationError,
    MissingColumnError,
    MissingIdColumnError,
    MissingIdValueError,
    NonNumericPredictorError,
    ShapeError,
)


class TestShapeAndIdentifiers:
    """Structural checks that run before any predictor check."""

    def test_not_tabular_raises_shape_error(self):
        with pytest.raises(ShapeError, match="data frame"):
            validate_records(np.zeros((3, 4)))

    def test_string_raises_shape_error(self):
        with pytest.raises(ShapeError):
            validate_records("ID,TREM_1,IL_6,Procalcitonin")

    def test_list_of_records_is_accepted(self):
        rows = [
            {"ID": "a", "TREM_1": 100.0, "IL_6": 20.0, "Procalcitonin": 300.0},
            {"ID": "b", "TREM_1": 200.0, "IL_6": 40.0, "Procalcitonin": 600.0},
        ]
        records = validate_records(rows)
        assert records.data[ID_COL].tolist() == ["a", "b"]

    def test_repeated_column_names_raise_shape_error(self):
        df = pd.DataFrame([[1, 2, 3, 4, 5]], columns=["ID", "TREM_1", "TREM_1", "IL_6", "Procalcitonin"])
        with pytest.raises(ShapeError, match="TREM_1"):
            as_dataframe(df)

    def test_empty_input(self):
        df = pd.DataFrame(columns=["ID", *PREDICTOR_COLS])
        with pytest.raises(EmptyInputError, match="empty"):
            validate_records(df)

    def test_missing_id_column(self, example_df):
        df = example_df.rename(columns={"ID": "id"})
        with pytest.raises(MissingIdColumnError, match="'ID'"):
            validate_records(df)

    def test_null_id(self, example_df):
        df = example_df.astype({"ID": object})
        df.loc[4, "ID"] = None
        with pytest.raises(MissingIdValueError) as exc:
            validate_records(df)
        assert exc.value.row_positions == [4]

    def test_duplicate_ids(self, example_df):
        df = example_df.copy()
        df.loc[5, "ID"] = 1
        df.loc[9, "ID"] = 2
        with pytest.raises(DuplicateIdError) as exc:
            validate_records(df)
        assert sorted(exc.value.duplicate_ids) == [1, 2]
        assert "timepoint" in str(exc.value)

    def test_duplicate_ids_win_over_bad_predictors(self, example_df):
        """Duplicates are reported even when predictors are also broken."""
        df = example_df.drop(columns=["IL_6"])
        df["TREM_1"] = "not a number"
        df.loc[1, "ID"] = 1
        with pytest.raises(DuplicateIdError):
            validate_records(df)

    def test_errors_are_value_errors(self, example_df):
        with pytest.raises(ValueError):
            validate_records(example_df.drop(columns=["ID"]))
        assert issubclass(MissingColumnError, InputValidationError)


class TestMissingColumns:
    @pytest.mark.parametrize("col", PREDICTOR_COLS)
    def test_single_missing_column_named_exactly(self, example_df, col):
        with pytest.raises(MissingColumnError) as exc:
            validate_records(example_df.drop(columns=[col]))
        assert exc.value.missing_columns == [col]
        assert col in str(exc.value)

    def test_all_missing_columns_listed(self, example_df):
        with pytest.raises(MissingColumnError) as exc:
            validate_records(example_df[["ID"]])
        assert exc.value.missing_columns == PREDICTOR_COLS

    def test_column_names_are_case_sensitive(self, example_df):
        df = example_df.rename(columns={"IL_6": "il_6"})
        with pytest.raises(MissingColumnError) as exc:
            validate_records(df)
        assert exc.value.missing_columns == ["IL_6"]


class TestNormalization:
    def test_canonical_columns_and_dtypes(self, example_df):
        records = validate_records(example_df)
        assert list(records.data.columns) == ["ID", *PREDICTOR_COLS]
        for col in PREDICTOR_COLS:
            assert records.data[col].dtype == np.float64
        assert records.coercions == ()

    def test_reorders_predictors_with_coercion(self, example_df):
        df = example_df[["Procalcitonin", "ID", "IL_6", "TREM_1"]]
        records = validate_records(df)

        assert list(records.data.columns) == ["ID", "TREM_1", "IL_6", "Procalcitonin"]
        assert any("Reordering" in c for c in records.coercions)
        # Values follow their column, not their position
        assert records.data["Procalcitonin"].tolist() == example_df["Procalcitonin"].astype(float).tolist()

    def test_extra_columns_dropped(self, example_df):
        df = example_df.assign(Age=60, Sex="F")
        records = validate_records(df)
        assert list(records.data.columns) == ["ID", *PREDICTOR_COLS]
        assert any("Age" in c and "Sex" in c for c in records.coercions)

    def test_input_not_mutated(self, example_df):
        df = example_df[["IL_6", "ID", "Procalcitonin", "TREM_1"]].copy()
        df["IL_6"] = df["IL_6"].astype(str)
        before = df.copy()
        validate_records(df)
        pd.testing.assert_frame_equal(df, before)

    def test_row_order_preserved(self, example_df):
        df = example_df.iloc[::-1].reset_index(drop=True)
        records = validate_records(df)
        assert records.data["ID"].tolist() == list(range(20, 0, -1))

    def test_non_default_index_is_reset(self, example_df):
        df = example_df.set_index(pd.Index(range(100, 120)))
        records = validate_records(df)
        assert records.data.index.tolist() == list(range(20))


class TestNumericPredictors:
    def test_numeric_strings_are_converted(self, example_df):
        df = example_df.copy()
        df["TREM_1"] = df["TREM_1"].astype(str)
        records = validate_records(df)
        assert records.data["TREM_1"].tolist() == [float(v) for v in example_df["TREM_1"]]
        assert "Converted TREM_1 to numeric" in records.coercions

    def test_blank_strings_become_missing(self, example_df):
        df = example_df.astype({"IL_6": object})
        df.loc[2, "IL_6"] = "  "
        records = validate_records(df)
        assert np.isnan(records.data.loc[2, "IL_6"])

    def test_text_values_rejected(self, example_df):
        df = example_df.astype({"IL_6": object})
        df.loc[0, "IL_6"] = "high"
        with pytest.raises(NonNumericPredictorError) as exc:
            validate_records(df)
        assert exc.value.offending == {"IL_6": ["high"]}

    def test_decimal_comma_hint(self, example_df):
        df = example_df.astype({"Procalcitonin": object})
        df.loc[3, "Procalcitonin"] = "1500,5"
        with pytest.raises(NonNumericPredictorError, match="Decimal separator"):
            validate_records(df)

    def test_boolean_column_rejected(self, example_df):
        df = example_df.copy()
        df["TREM_1"] = df["TREM_1"] > 500
        with pytest.raises(NonNumericPredictorError, match="TREM_1"):
            validate_records(df)

    def test_categorical_column_uses_labels_not_codes(self, example_df):
        df = example_df.copy()
        df["IL_6"] = pd.Categorical(df["IL_6"].astype(str))
        records = validate_records(df)
        assert records.data["IL_6"].tolist() == [float(v) for v in example_df["IL_6"]]

    def test_infinite_values_rejected(self, example_df):
        df = example_df.astype({"TREM_1": float})
        df.loc[0, "TREM_1"] = np.inf
        with pytest.raises(NonNumericPredictorError, match="TREM_1"):
            validate_records(df)

    def test_every_offending_column_reported(self, example_df):
        df = example_df.astype({"TREM_1": object, "IL_6": object})
        df.loc[0, "TREM_1"] = "x"
        df.loc[1, "IL_6"] = "y"
        with pytest.raises(NonNumericPredictorError) as exc:
            validate_records(df)
        assert set(exc.value.offending) == {"TREM_1", "IL_6"}

    def test_missing_values_pass_validation(self, example_df):
        df = example_df.astype({"IL_6": float})
        df.loc[[2, 16], "IL_6"] = np.nan
        records = validate_records(df)
        assert records.data["IL_6"].isna().sum() == 2


class TestConsistencyDiagnostics:
    def _frame(self, n, trem):
        return pd.DataFrame(
            {
                "ID": range(n),
                "TREM_1": trem,
                "IL_6": np.arange(n, dtype=float) + 1,
                "Procalcitonin": np.arange(n, dtype=float) * 10 + 5,
            }
        )

    def test_repeated_value_warns_above_ten_rows(self):
        trem = [500.0, 500.0] + [float(100 + i) for i in range(9)]
        records = validate_records(self._frame(11, trem))
        assert len(records.diagnostics) == 1
        assert "More than 10% of TREM_1" in records.diagnostics[0]
        assert "18.18%" in records.diagnostics[0]

    def test_no_check_for_ten_rows_or_fewer(self):
        records = validate_records(self._frame(10, [500.0] * 10))
        assert records.diagnostics == ()

    def test_exactly_ten_percent_is_fine(self, example_df):
        # TREM_1 = 900 occurs twice in 20 rows
        records = validate_records(example_df)
        assert records.diagnostics == ()

    def test_thresholds_are_configurable(self):
        trem = [500.0, 500.0] + [float(100 + i) for i in range(9)]
        cfg = ValidationConfig(consistency_max_share=0.25)
        records = validate_records(self._frame(11, trem), cfg)
        assert records.diagnostics == ()

    def test_negative_values_flagged(self):
        df = self._frame(3, [100.0, -5.0, 200.0])
        messages = consistency_diagnostics(df)
        assert any("negative" in m and "TREM_1" in m for m in messages)

    def test_negative_warning_can_be_disabled(self):
        df = self._frame(3, [100.0, -5.0, 200.0])
        assert consistency_diagnostics(df, warn_negative=False) == []
