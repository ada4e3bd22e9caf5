from __future__ import annotations
import numpy as np
import pandas as pd


def hellinger_transform(df: pd.DataFrame) -> pd.DataFrame:
    """
    Hellinger transform for a nonnegative community matrix.

    Each site's covers are divided by the site total and square-rooted, so
    rows have unit Euclidean norm and PCA/RDA on the result preserves the
    Hellinger distance between sites. Empty sites stay all-zero.
    """
    X = df.to_numpy(dtype=float, copy=True)
    if np.any(X < 0):
        raise ValueError("hellinger_transform requires nonnegative inputs.")
    row_sums = X.sum(axis=1, keepdims=True)
    row_sums[row_sums == 0] = 1.0  # avoid division by zero
    H = np.sqrt(X / row_sums)
    return pd.DataFrame(H, index=df.index, columns=df.columns)


def standardize_columns(df: pd.DataFrame, log: bool = False) -> pd.DataFrame:
    """
    Z-score by column (ddof=1), optionally on the log1p scale for right-skewed
    covariates such as distance-to-stream. Constant columns are centred only.
    """
    X = df.to_numpy(dtype=float, copy=True)
    if log:
        if np.any(X <= -1):
            raise ValueError("log1p standardization requires values > -1.")
        X = np.log1p(X)
    mu = X.mean(axis=0, keepdims=True)
    sd = X.std(axis=0, ddof=1, keepdims=True)
    sd[~np.isfinite(sd) | (sd == 0)] = 1.0
    Z = (X - mu) / sd
    return pd.DataFrame(Z, index=df.index, columns=df.columns)
