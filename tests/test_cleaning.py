# tests/test_cleaning.py
import pandas as pd
import pytest
from forestord.data_process.cleaning import cast_types, ensure_nonnegative, harmonize_ids, normalize_columns

def test_harmonize_ids_upper_trim_species_only():
    df = pd.DataFrame({"plotID":[" abc ","X-1"], "spcode":[" acerrub","TSUGCAN "], "v":[1,2]})
    out = harmonize_ids(df)
    assert list(out["plotID"]) == ["abc","X-1"]
    assert list(out["spcode"]) == ["ACERRUB","TSUGCAN"]

def test_normalize_columns_strips_whitespace():
    df = pd.DataFrame({" plotID ":[1], "cover\t":[2]})
    assert list(normalize_columns(df).columns) == ["plotID", "cover"]

def test_cast_types_float_and_skip_missing():
    df = pd.DataFrame({"cover":["1.5", "x"], "utme":[1, 2]})
    out = cast_types(df, {"cover": "float", "absent": "float"})
    assert out["cover"].iloc[0] == 1.5
    assert pd.isna(out["cover"].iloc[1])

def test_ensure_nonnegative_rejects_negative_cover():
    df = pd.DataFrame({"cover":[1.0, -2.0]})
    with pytest.raises(ValueError):
        ensure_nonnegative(df, ["cover"])

def test_harmonize_ids_keeps_missing_ids_missing():
    df = pd.DataFrame({"plotID":["A", None, "  "], "spcode":[float("nan"), "acerrub", "tsugcan"]})
    out = harmonize_ids(df)
    assert pd.isna(out.loc[0, "spcode"])
    assert pd.isna(out.loc[1, "plotID"])
    assert pd.isna(out.loc[2, "plotID"])
    assert "NAN" not in set(out["spcode"].dropna())
    assert out.loc[1, "spcode"] == "ACERRUB"
