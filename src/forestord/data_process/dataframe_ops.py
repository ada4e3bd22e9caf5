from __future__ import annotations
import pandas as pd

from ..exceptions import RowAlignmentError

# -------------------------------
# Validation / Safety
# -------------------------------

def assert_same_index(a: pd.DataFrame, b: pd.DataFrame, names: tuple[str, str] = ("left", "right")) -> None:
    """Raise RowAlignmentError unless both frames carry identical row labels (values, dtype, order)."""
    if a.index.equals(b.index) and a.index.dtype == b.index.dtype:
        return
    if len(a.index) != len(b.index):
        detail = f"{names[0]} has {len(a.index)} rows, {names[1]} has {len(b.index)}"
    elif a.index.dtype != b.index.dtype:
        detail = f"label dtypes differ: {names[0]}={a.index.dtype}, {names[1]}={b.index.dtype}"
    else:
        pos = next((i for i, (x, y) in enumerate(zip(a.index, b.index)) if x != y), 0)
        detail = (
            f"first mismatch at position {pos}: "
            f"{names[0]}={a.index[pos]!r}, {names[1]}={b.index[pos]!r}"
        )
    raise RowAlignmentError(
        f"Row label mismatch between {names[0]} and {names[1]} ({detail}). "
        "Both matrices must be indexed by the same plot keys in the same order."
    )

def assert_unique_index(df: pd.DataFrame, name: str = "frame") -> None:
    if not df.index.is_unique:
        dups = df.index[df.index.duplicated()].unique()
        raise ValueError(f"{name} has duplicate index values (first 10): {dups[:10].tolist()}")
