"""
Community and environmental matrix construction.

Turns the long-format observation table (one row per species recorded at a
plot-survey) into the two row-aligned matrices every ordination call needs:

- community matrix: plot-surveys x species, mean cover, 0.0 where absent
- environmental matrix: plot-surveys x covariates, first record per plot-survey

A plot-survey is keyed by plot ID + date + UTM coordinates, so re-surveys
of the same physical plot stay separate rows.
"""
from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Optional, Sequence

import numpy as np
import pandas as pd

from ..config import (
    KEY_COLS, KEY_SEP, PLOT_KEY, PLOT_SIZE_COL,
    SPECIES_COL, COVER_COL, ENV_COLS,
)
from ..exceptions import (
    MissingCovariateError, CovariateConflictError, CovariateConflictWarning,
)
from .dataframe_ops import assert_same_index, assert_unique_index

logger = logging.getLogger(__name__)

__all__ = [
    "CommunityData",
    "make_plot_key",
    "filter_observations",
    "build_community_matrix",
    "build_environment_matrix",
    "verify_alignment",
    "renumber_rows",
    "build_matrices",
]


@dataclass(frozen=True)
class CommunityData:
    """
    The paired matrices handed to the ordination routines.

    Attributes:
        community (pd.DataFrame): plot-surveys x species, mean cover
        environment (pd.DataFrame): plot-surveys x covariates, same rows and order
        plot_keys (pd.Series): row label -> plot-survey key; after renumbering
            this is the only place the composite keys survive
        aligned (bool): True once verify_alignment has passed
    """
    community: pd.DataFrame
    environment: pd.DataFrame
    plot_keys: pd.Series
    aligned: bool = False

    @property
    def n_plots(self) -> int:
        return self.community.shape[0]

    @property
    def n_species(self) -> int:
        return self.community.shape[1]

    def renumbered(self, start: int = 0) -> "CommunityData":
        """Return a copy with both matrices relabelled to a shared ordinal index."""
        comm, env, ordinal_keys = renumber_rows(self.community, self.environment, start=start)
        # compose so the mapping always points back to the composite plot keys
        keys = pd.Series(
            self.plot_keys.to_numpy(), index=ordinal_keys.index, name=self.plot_keys.name
        )
        return replace(self, community=comm, environment=env, plot_keys=keys, aligned=True)

    def __repr__(self):
        return (
            f"CommunityData(plots={self.n_plots}, species={self.n_species}, "
            f"covariates={self.environment.shape[1]}, aligned={self.aligned})"
        )


def _require_columns(df: pd.DataFrame, cols: Iterable[str]) -> None:
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise KeyError(f"Columns not found: {missing}. Available: {list(df.columns)[:20]}...")


def _require_values(df: pd.DataFrame, cols: Iterable[str], what: str) -> None:
    """Raise ValueError naming the rows where any of `cols` is missing."""
    cols = list(cols)
    na = df[cols].isna().to_numpy()
    if na.any():
        rows = np.flatnonzero(na.any(axis=1))
        detail = {str(df.index[r]): [c for c, m in zip(cols, na[r]) if m] for r in rows[:10]}
        raise ValueError(
            f"{len(rows)} observation(s) have no {what} (row: columns, first 10): {detail}"
        )


def make_plot_key(
    obs: pd.DataFrame,
    key_cols: Sequence[str] = KEY_COLS,
    sep: str = KEY_SEP,
) -> pd.Series:
    """
    Build the composite plot-survey key for every observation.

    Args:
        obs: Observation table
        key_cols: Columns that together identify one sampling event
        sep: Separator placed between the key parts

    Returns:
        pd.Series of string keys aligned with obs.index
    """
    key_cols = list(key_cols)
    _require_columns(obs, key_cols)
    _require_values(obs, key_cols, "plot-survey key")
    parts = [obs[c].astype(str) for c in key_cols]
    keys = parts[0].str.cat(parts[1:], sep=sep) if len(parts) > 1 else parts[0]
    return keys.rename(PLOT_KEY)


def filter_observations(
    obs: pd.DataFrame,
    plot_size: Optional[object] = None,
    predicate: Optional[Callable[[pd.DataFrame], object]] = None,
    plot_size_col: str = PLOT_SIZE_COL,
) -> pd.DataFrame:
    """
    Keep only the records that should enter the matrices.

    Args:
        obs: Observation table
        plot_size: Keep rows whose plot size class equals this value
        predicate: Callable returning a boolean mask over obs rows
        plot_size_col: Column holding the plot size class

    Returns:
        Filtered copy of obs (original index kept)
    """
    mask = np.ones(len(obs), dtype=bool)
    if plot_size is not None:
        _require_columns(obs, [plot_size_col])
        mask &= (obs[plot_size_col] == plot_size).to_numpy()
    if predicate is not None:
        extra = np.asarray(predicate(obs), dtype=bool)
        if extra.shape != (len(obs),):
            raise ValueError(
                f"predicate must return one boolean per row (got shape {extra.shape}, "
                f"expected ({len(obs)},))"
            )
        mask &= extra
    out = obs.loc[mask].copy()
    logger.info("Kept %d of %d observation records after filtering", len(out), len(obs))
    return out


def build_community_matrix(
    obs: pd.DataFrame,
    key_col: str = PLOT_KEY,
    species_col: str = SPECIES_COL,
    cover_col: str = COVER_COL,
) -> pd.DataFrame:
    """
    Pivot observations into a dense plot-survey x species cover matrix.

    Records are grouped by (plot-survey, species) and reduced by the mean, so
    duplicate rows for one species in one plot-survey are averaged rather than
    summed or overwritten. Combinations never observed are 0.0. Only keys and
    species present in obs appear as rows and columns.
    """
    _require_columns(obs, [key_col, species_col, cover_col])
    _require_values(obs, [key_col, species_col], "plot key or species code")
    if obs.empty:
        raise ValueError("No observations to build a community matrix from (empty after filtering?)")

    cover = pd.to_numeric(obs[cover_col], errors="raise").astype(float)
    if cover.isna().any():
        # mean() would skip these and a fully-NaN pair would turn into a silent 0
        raise ValueError(f"{int(cover.isna().sum())} observation(s) have no {cover_col} value")

    comm = (
        obs.assign(**{cover_col: cover})
        .groupby([key_col, species_col], sort=True)[cover_col]
        .mean()
        .unstack(species_col, fill_value=0.0)
        .astype(float)
    )
    comm.index.name = key_col
    comm.columns.name = species_col
    logger.info("Community matrix: %d plot-surveys x %d species", *comm.shape)
    return comm


def _covariate_conflicts(obs: pd.DataFrame, key_col: str, env_cols: list[str]) -> dict[str, list[str]]:
    counts = obs.groupby(key_col, sort=False)[env_cols].nunique(dropna=False)
    bad = counts > 1
    rows = bad.index[bad.any(axis=1)]
    return {str(k): [c for c in env_cols if bad.at[k, c]] for k in rows}


def build_environment_matrix(
    obs: pd.DataFrame,
    index: pd.Index,
    key_col: str = PLOT_KEY,
    env_cols: Sequence[str] = ENV_COLS,
    on_conflict: str = "warn",
) -> pd.DataFrame:
    """
    One row of site covariates per plot-survey, in the order of `index`.

    Covariates are taken from the first record of each plot-survey. Because
    that is only sound if they are constant within a plot-survey, differing
    values are reported according to `on_conflict`:
    "warn" (CovariateConflictWarning), "raise" (CovariateConflictError) or "ignore".

    Raises:
        MissingCovariateError: if any plot-survey lacks a covariate value
    """
    env_cols = list(env_cols)
    _require_columns(obs, [key_col] + env_cols)
    if on_conflict not in ("warn", "raise", "ignore"):
        raise ValueError(f"Unknown on_conflict policy: {on_conflict}")

    if on_conflict != "ignore":
        conflicts = _covariate_conflicts(obs, key_col, env_cols)
        if conflicts:
            if on_conflict == "raise":
                raise CovariateConflictError(conflicts)
            warnings.warn(
                f"Covariates vary within {len(conflicts)} plot-survey(s); "
                f"keeping the first record's values. First 10: {dict(list(conflicts.items())[:10])}",
                CovariateConflictWarning,
                stacklevel=2,
            )

    first = obs.drop_duplicates(subset=key_col, keep="first").set_index(key_col)[env_cols]
    env = first.reindex(index)

    na = env.isna()
    if na.to_numpy().any():
        missing = {
            str(k): [c for c in env_cols if na.at[k, c]]
            for k in env.index[na.any(axis=1)]
        }
        raise MissingCovariateError(missing)

    env.index.name = index.name
    return env


def verify_alignment(community: pd.DataFrame, environment: pd.DataFrame) -> None:
    """
    Fail loudly unless both matrices carry the same unique row labels in the same order.

    Raises:
        RowAlignmentError: on any difference in row labels or their order
    """
    assert_unique_index(community, name="community matrix")
    assert_same_index(community, environment, names=("community", "environment"))


def renumber_rows(
    community: pd.DataFrame,
    environment: pd.DataFrame,
    start: int = 0,
) -> tuple[pd.DataFrame, pd.DataFrame, pd.Series]:
    """
    Relabel both matrices with the same ordinal row index.

    Alignment is verified first; the relabelling never reorders rows.

    Returns:
        (community, environment, keys) where keys maps each ordinal label to
        the row label it replaced
    """
    verify_alignment(community, environment)
    ordinal = pd.RangeIndex(start, start + len(community.index))
    keys = pd.Series(community.index.to_numpy(), index=ordinal, name=community.index.name)

    comm = community.copy()
    env = environment.copy()
    comm.index = ordinal
    env.index = ordinal
    return comm, env, keys


def build_matrices(
    obs: pd.DataFrame,
    plot_size: Optional[object] = None,
    predicate: Optional[Callable[[pd.DataFrame], object]] = None,
    *,
    key_cols: Sequence[str] = KEY_COLS,
    sep: str = KEY_SEP,
    species_col: str = SPECIES_COL,
    cover_col: str = COVER_COL,
    env_cols: Sequence[str] = ENV_COLS,
    on_conflict: str = "warn",
    renumber: bool = True,
) -> CommunityData:
    """
    Build the aligned community and environmental matrices from raw observations.

    Args:
        obs: Observation table (long format)
        plot_size: Only include plot-surveys of this size class (e.g. 1000)
        predicate: Additional row filter, applied together with plot_size
        key_cols: Columns forming the plot-survey key
        sep: Separator for the composite key
        species_col: Species code column
        cover_col: Cover (abundance) column
        env_cols: Site covariates for the environmental matrix
        on_conflict: Policy for covariates that vary within a plot-survey
        renumber: Relabel rows 0..n-1 after the alignment check

    Returns:
        CommunityData with aligned matrices and the plot key mapping
    """
    _require_columns(obs, list(key_cols) + [species_col, cover_col] + list(env_cols))

    kept = filter_observations(obs, plot_size=plot_size, predicate=predicate)
    kept[PLOT_KEY] = make_plot_key(kept, key_cols=key_cols, sep=sep)

    comm = build_community_matrix(kept, key_col=PLOT_KEY, species_col=species_col, cover_col=cover_col)
    env = build_environment_matrix(
        kept, comm.index, key_col=PLOT_KEY, env_cols=env_cols, on_conflict=on_conflict
    )
    verify_alignment(comm, env)

    keys = pd.Series(comm.index.to_numpy(), index=comm.index, name=PLOT_KEY)
    data = CommunityData(community=comm, environment=env, plot_keys=keys, aligned=True)
    if renumber:
        data = data.renumbered()
    return data
