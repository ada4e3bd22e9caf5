from __future__ import annotations
from pathlib import Path
import pandas as pd

from ..config import INTERIM
from .community import CommunityData, verify_alignment


def save_interim(df: pd.DataFrame, name: str, index: bool = True) -> Path:
    """
    Save a DataFrame to the interim data directory as a Parquet file.

    Args:
        df: The DataFrame to save
        name: The filename (without path) for the saved file
        index: Whether to store the row index (plot keys / ordinals)

    Returns:
        Path: The full path to the saved file
    """
    INTERIM.mkdir(parents=True, exist_ok=True)
    path = INTERIM / name
    df.to_parquet(path, index=index)
    return path


def load_interim(name: str) -> pd.DataFrame:
    """
    Load a DataFrame from the interim data directory.
    """
    return pd.read_parquet(INTERIM / name)


def save_community_data(data: CommunityData, prefix: str = "treedata") -> dict[str, Path]:
    """Persist the three parts of a CommunityData under `<prefix>_*.parquet`."""
    return {
        "community": save_interim(data.community, f"{prefix}_community.parquet"),
        "environment": save_interim(data.environment, f"{prefix}_environment.parquet"),
        "plot_keys": save_interim(data.plot_keys.to_frame(), f"{prefix}_plot_keys.parquet"),
    }


def load_community_data(prefix: str = "treedata") -> CommunityData:
    """Reload matrices written by save_community_data and re-check their alignment."""
    comm = load_interim(f"{prefix}_community.parquet")
    env = load_interim(f"{prefix}_environment.parquet")
    keys = load_interim(f"{prefix}_plot_keys.parquet").iloc[:, 0]
    verify_alignment(comm, env)
    return CommunityData(community=comm, environment=env, plot_keys=keys, aligned=True)
