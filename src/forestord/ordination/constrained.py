"""
Constrained ordination (RDA, CCA) and the adjusted R2 of a constrained model.

Both fits are two-step: regress the (transformed) community matrix on the
covariates, then decompose the fitted values. Total inertia is split into
a constrained part (fitted values) and an unconstrained part (residuals),
which is what adjusted_r2 / r2_adj consume.

- RDA: inertia = sum of descriptor variances
- CCA: inertia = mean squared contingency (chi-square / grand total), with
  sites weighted by their share of total cover
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

import numpy as np
import pandas as pd
from scipy import linalg
from sklearn.decomposition import PCA
from sklearn.linear_model import LinearRegression

from ..data_process.dataframe_ops import assert_same_index
from ..exceptions import AdjustedR2DomainError, CovariateEncodingError

logger = logging.getLogger(__name__)

__all__ = [
    "ConstrainedOrdination",
    "R2Result",
    "encode_covariates",
    "fit_rda",
    "fit_cca",
    "adjusted_r2",
    "r2_adj",
]

_RANK_TOL = 1e-10


@dataclass
class ConstrainedOrdination:
    method: str
    total_inertia: float
    constrained_inertia: float
    unconstrained_inertia: float
    rank: int                        # free constraining variables
    n: int                           # sites
    constrained_eigenvalues: np.ndarray
    unconstrained_eigenvalues: np.ndarray
    site_scores: pd.DataFrame        # linear combination scores on the constrained axes
    species_scores: pd.DataFrame
    covariates: list[str] = field(default_factory=list)

    @property
    def proportion_constrained(self) -> float:
        return self.constrained_inertia / self.total_inertia if self.total_inertia > 0 else 0.0

    def inertia_table(self) -> pd.DataFrame:
        """Total / constrained / unconstrained inertia with proportions, like a model summary."""
        values = [self.total_inertia, self.constrained_inertia, self.unconstrained_inertia]
        total = self.total_inertia if self.total_inertia > 0 else 1.0
        return pd.DataFrame(
            {"inertia": values, "proportion": [v / total for v in values]},
            index=["Total", "Constrained", "Unconstrained"],
        )

    def __repr__(self):
        return (
            f"ConstrainedOrdination(method='{self.method}', n={self.n}, rank={self.rank}, "
            f"total={self.total_inertia:.4g}, constrained={self.constrained_inertia:.4g}, "
            f"unconstrained={self.unconstrained_inertia:.4g})"
        )


@dataclass(frozen=True)
class R2Result:
    r2: float
    r2_adj: float


# --------------------------- Covariate handling ---------------------------

def encode_covariates(env: pd.DataFrame, columns: Optional[Iterable[str]] = None,
                      drop_first: bool = True) -> pd.DataFrame:
    """
    One-hot encode categorical covariates (e.g. disturbance class).

    Args:
        env: Environmental matrix
        columns: Columns to encode; default is every non-numeric column
        drop_first: Drop the first level so the dummies are not collinear
            with the intercept

    Returns:
        Fully numeric DataFrame with the same index
    """
    if columns is None:
        columns = [c for c in env.columns if not pd.api.types.is_numeric_dtype(env[c])]
    columns = list(columns)
    if not columns:
        return env.astype(float)
    out = pd.get_dummies(env, columns=columns, drop_first=drop_first, dtype=float)
    return out.astype(float)


def _numeric_covariates(env: pd.DataFrame, call: str) -> np.ndarray:
    for c in env.columns:
        if not (pd.api.types.is_numeric_dtype(env[c]) or pd.api.types.is_bool_dtype(env[c])):
            raise CovariateEncodingError(str(c), call, env[c].dtype)
    X = env.to_numpy(dtype=float)
    if np.isnan(X).any():
        bad = list(env.columns[np.isnan(X).any(axis=0)])
        raise ValueError(f"{call}: covariates contain missing values: {bad}")
    return X


def _prepare(community: pd.DataFrame, env: pd.DataFrame, call: str) -> tuple[np.ndarray, np.ndarray]:
    assert_same_index(community, env, names=("community", "environment"))
    X = _numeric_covariates(env, call)
    Y = community.to_numpy(dtype=float)
    if Y.shape[0] < 2:
        raise ValueError(f"{call}: need at least 2 sites, got {Y.shape[0]}")
    return Y, X


def _matrix_rank(X: np.ndarray) -> int:
    if X.size == 0:
        return 0
    s = linalg.svdvals(X)
    return int(np.sum(s > _RANK_TOL * max(X.shape) * (s[0] if len(s) else 0.0)))


def _axis_names(prefix: str, k: int) -> list[str]:
    return [f"{prefix}{i+1}" for i in range(k)]


# --------------------------- RDA ---------------------------

def fit_rda(community: pd.DataFrame, env: pd.DataFrame, scale: bool = False) -> ConstrainedOrdination:
    """
    Redundancy analysis of a community matrix on numeric covariates.

    Args:
        community: Sites x species (usually Hellinger-transformed covers)
        env: Sites x covariates, same row labels and order as community
        scale: Standardize species to unit variance first

    Returns:
        ConstrainedOrdination with inertia decomposition and RDA axes
    """
    Y, X = _prepare(community, env, "fit_rda")
    n = Y.shape[0]

    Yc = Y - Y.mean(axis=0)
    if scale:
        sd = Yc.std(axis=0, ddof=1)
        sd[sd == 0] = 1.0
        Yc = Yc / sd

    reg = LinearRegression()
    reg.fit(X, Yc)
    fitted = reg.predict(X)
    resid = Yc - fitted
    rank = _matrix_rank(X - X.mean(axis=0))

    total = float(np.sum(Yc ** 2) / (n - 1))
    constrained = float(np.sum(fitted ** 2) / (n - 1))
    unconstrained = float(np.sum(resid ** 2) / (n - 1))

    k = min(rank, Yc.shape[1], n - 1)
    if k > 0:
        pca_fit = PCA(n_components=k)
        lc = pca_fit.fit_transform(fitted)
        constrained_eig = pca_fit.explained_variance_
        species = pca_fit.components_.T
    else:
        lc = np.empty((n, 0))
        constrained_eig = np.empty(0)
        species = np.empty((Yc.shape[1], 0))
    unconstrained_eig = PCA().fit(resid).explained_variance_

    names = _axis_names("RDA", k)
    logger.info("RDA: %d sites, rank %d, constrained %.1f%% of %.4g",
                n, rank, 100 * constrained / total if total > 0 else 0.0, total)
    return ConstrainedOrdination(
        method="RDA",
        total_inertia=total,
        constrained_inertia=constrained,
        unconstrained_inertia=unconstrained,
        rank=rank,
        n=n,
        constrained_eigenvalues=constrained_eig,
        unconstrained_eigenvalues=unconstrained_eig[unconstrained_eig > _RANK_TOL],
        site_scores=pd.DataFrame(lc, index=community.index, columns=names),
        species_scores=pd.DataFrame(species, index=community.columns, columns=names),
        covariates=[str(c) for c in env.columns],
    )


# --------------------------- CCA ---------------------------

def fit_cca(community: pd.DataFrame, env: pd.DataFrame) -> ConstrainedOrdination:
    """
    Canonical correspondence analysis (ter Braak 1986) of cover on numeric covariates.

    Every site and every species must have positive total cover.
    """
    Y, X = _prepare(community, env, "fit_cca")
    if np.any(Y < 0):
        raise ValueError("fit_cca requires nonnegative abundances.")
    n = Y.shape[0]

    P = Y / Y.sum()
    r = P.sum(axis=1)
    c = P.sum(axis=0)
    if np.any(r == 0) or np.any(c == 0):
        raise ValueError(
            f"fit_cca: {int(np.sum(r == 0))} empty site(s) and {int(np.sum(c == 0))} "
            "empty species; drop them before fitting"
        )

    expected = np.outer(r, c)
    Qbar = (P - expected) / np.sqrt(expected)

    # covariates centred on the site-weighted mean, rows weighted by sqrt(r)
    Xw = (X - r @ X) * np.sqrt(r)[:, None]
    rank = _matrix_rank(Xw)
    if Xw.shape[1] > 0:
        B, *_ = linalg.lstsq(Xw, Qbar)
        fitted = Xw @ B
    else:
        fitted = np.zeros_like(Qbar)
    resid = Qbar - fitted

    total = float(np.sum(Qbar ** 2))
    constrained = float(np.sum(fitted ** 2))
    unconstrained = float(np.sum(resid ** 2))

    k = min(rank, Qbar.shape[1] - 1, n - 1)
    U, s, Vt = linalg.svd(fitted, full_matrices=False)
    constrained_eig = s[:k] ** 2
    unconstrained_eig = linalg.svdvals(resid) ** 2

    names = _axis_names("CCA", k)
    site = U[:, :k] / np.sqrt(r)[:, None]
    species = Vt.T[:, :k] / np.sqrt(c)[:, None]
    logger.info("CCA: %d sites, rank %d, constrained %.1f%% of %.4g",
                n, rank, 100 * constrained / total if total > 0 else 0.0, total)
    return ConstrainedOrdination(
        method="CCA",
        total_inertia=total,
        constrained_inertia=constrained,
        unconstrained_inertia=unconstrained,
        rank=rank,
        n=n,
        constrained_eigenvalues=constrained_eig,
        unconstrained_eigenvalues=unconstrained_eig[unconstrained_eig > _RANK_TOL],
        site_scores=pd.DataFrame(site, index=community.index, columns=names),
        species_scores=pd.DataFrame(species, index=community.columns, columns=names),
        covariates=[str(c) for c in env.columns],
    )


# --------------------------- Adjusted R2 ---------------------------

def adjusted_r2(constrained_inertia: float, total_inertia: float, n: int, rank: int) -> R2Result:
    """
    R2 = constrained / total and its Ezekiel adjustment
    R2_adj = 1 - (1 - R2) * (n - 1) / (n - rank - 1).

    Raises:
        AdjustedR2DomainError: if n - rank - 1 <= 0
    """
    n = int(n)
    rank = int(rank)
    if constrained_inertia < 0 or total_inertia <= 0:
        raise ValueError(
            f"Inertia must be non-negative with a positive total "
            f"(constrained={constrained_inertia}, total={total_inertia})"
        )
    if n - rank - 1 <= 0:
        raise AdjustedR2DomainError(n, rank)
    r2 = constrained_inertia / total_inertia
    r2a = 1.0 - (1.0 - r2) * (n - 1) / (n - rank - 1)
    return R2Result(r2=float(r2), r2_adj=float(r2a))


def r2_adj(model, n: Optional[int] = None, rank: Optional[int] = None) -> R2Result:
    """
    Raw and adjusted R2 of a fitted constrained ordination.

    `model` needs constrained_inertia, unconstrained_inertia and total_inertia;
    n and rank are read from the model when not given.
    """
    constrained = float(model.constrained_inertia)
    unconstrained = float(model.unconstrained_inertia)
    total = float(model.total_inertia)
    if min(constrained, unconstrained, total) < 0:
        raise ValueError(
            f"Negative inertia (constrained={constrained}, "
            f"unconstrained={unconstrained}, total={total})"
        )
    if not np.isclose(constrained + unconstrained, total, rtol=1e-8, atol=1e-12):
        raise ValueError(
            f"Inconsistent model: constrained + unconstrained = {constrained + unconstrained} "
            f"but total = {total}"
        )
    n = model.n if n is None else n
    rank = model.rank if rank is None else rank
    return adjusted_r2(constrained, total, n=n, rank=rank)
