from __future__ import annotations
from typing import Iterable
import pandas as pd

from ..config import PLOT_COL, SPECIES_COL, COVER_COL


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Strip surrounding whitespace from column names.

    Field names are part of the observation table contract, so case and
    inner characters are left untouched.
    """
    df = df.copy()
    df.columns = df.columns.astype(str).str.strip()
    return df


def cast_types(df: pd.DataFrame, spec: dict[str, str]) -> pd.DataFrame:
    """
    Cast columns to specified data types based on a specification dictionary.

    Args:
        df: Input DataFrame
        spec: Dictionary mapping column names to target data types

    Returns:
        DataFrame with columns cast to specified types. Columns absent from
        df are skipped.
    """
    df = df.copy()
    for col, t in spec.items():
        if col not in df.columns:
            continue
        if t.startswith("datetime"):
            df[col] = pd.to_datetime(df[col], errors="coerce")
        elif t in ("float", "float64"):
            df[col] = pd.to_numeric(df[col], errors="coerce").astype(float)
        else:
            df[col] = df[col].astype(t)
    return df


def harmonize_ids(df: pd.DataFrame, id_cols: Iterable[str] = (PLOT_COL, SPECIES_COL)) -> pd.DataFrame:
    """
    Standardize identifier columns as trimmed strings.

    Species codes are upper-cased so 'Acer-rub' and 'ACER-RUB ' land in the
    same community matrix column; plot IDs keep their case. Missing or blank
    identifiers stay missing so validation can report them.

    Args:
        df: Input DataFrame
        id_cols: Identifier columns to harmonize

    Returns:
        DataFrame with standardized identifier columns
    """
    df = df.copy()
    for col in id_cols:
        if col not in df.columns:
            continue
        s = df[col].astype(str).str.strip()
        if col == SPECIES_COL:
            s = s.str.upper()
        df[col] = s.where(df[col].notna() & (s != ""))
    return df


def ensure_nonnegative(df: pd.DataFrame, cols: Iterable[str] = (COVER_COL,)) -> pd.DataFrame:
    """
    Validate that abundance columns contain only non-negative values.

    Raises:
        ValueError: If negative values are found in specified columns
    """
    cols = [c for c in cols if c in df.columns]
    if (df[cols] < 0).any().any():
        bad = [c for c in cols if (df[c] < 0).any()]
        raise ValueError(f"Negative values found in {bad} columns.")
    return df
