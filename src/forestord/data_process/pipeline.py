from __future__ import annotations
from pathlib import Path
import logging

from ..config import DEFAULT_PLOT_SIZE, COVER_COL, EASTING_COL, NORTHING_COL
from .ingest import read_observations
from .cleaning import normalize_columns, cast_types, harmonize_ids, ensure_nonnegative
from .validators import validate_observations
from .community import CommunityData, build_matrices
from .data_io import save_community_data

logger = logging.getLogger(__name__)


def make_matrices(
    path: str | Path | None = None,
    plot_size: object = DEFAULT_PLOT_SIZE,
    on_conflict: str = "warn",
    save: bool = False,
    prefix: str = "treedata",
) -> CommunityData:
    # ---- Observations ----
    obs = read_observations(path)
    obs = normalize_columns(obs)
    obs = cast_types(obs, {EASTING_COL: "float", NORTHING_COL: "float", COVER_COL: "float"})
    obs = harmonize_ids(obs)
    obs = ensure_nonnegative(obs, [COVER_COL])
    obs = validate_observations(obs)

    # ---- Matrices ----
    data = build_matrices(obs, plot_size=plot_size, on_conflict=on_conflict)
    logger.info("Built %r (plot size %s)", data, plot_size)

    if save:
        save_community_data(data, prefix=prefix)
    return data
