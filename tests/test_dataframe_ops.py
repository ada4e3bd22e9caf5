import pandas as pd
import pytest

from forestord.data_process.dataframe_ops import assert_same_index, assert_unique_index
from forestord.exceptions import RowAlignmentError


def test_assert_same_index_rejects_misordered_index():
    # Same index values, different orders
    df1 = pd.DataFrame({"site": ["A", "B", "C"], "x": [1, 2, 3]}).set_index("site")
    df2 = pd.DataFrame({"site": ["C", "A", "B"], "y": [10, 20, 30]}).set_index("site")

    with pytest.raises(RowAlignmentError, match="position 0"):
        assert_same_index(df1, df2)


def test_assert_same_index_reports_length_mismatch():
    df1 = pd.DataFrame({"x": [1, 2, 3]}, index=["A", "B", "C"])
    df2 = pd.DataFrame({"y": [1, 2]}, index=["A", "B"])
    with pytest.raises(RowAlignmentError, match="3 rows"):
        assert_same_index(df1, df2)


def test_assert_same_index_requires_same_label_dtype():
    # equal values but int vs float labels are not the same row labels
    df1 = pd.DataFrame({"x": [1, 2]}, index=pd.Index([1, 2]))
    df2 = pd.DataFrame({"y": [1, 2]}, index=pd.Index([1.0, 2.0]))
    with pytest.raises(RowAlignmentError, match="dtype"):
        assert_same_index(df1, df2)


def test_assert_same_index_accepts_identical_labels():
    df1 = pd.DataFrame({"x": [1, 2, 3]}, index=["A", "B", "C"])
    df2 = pd.DataFrame({"y": [10, 20, 30]}, index=["A", "B", "C"])
    assert_same_index(df1, df2)


def test_assert_unique_index():
    df = pd.DataFrame({"x": [1, 2]}, index=["A", "A"])
    with pytest.raises(ValueError):
        assert_unique_index(df)
