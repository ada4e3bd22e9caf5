"""
Data processing for forestord.

Reading, cleaning and validating the observation table, and building the
row-aligned community and environmental matrices.
"""

from .community import (
    CommunityData, make_plot_key, filter_observations,
    build_community_matrix, build_environment_matrix,
    verify_alignment, renumber_rows, build_matrices,
)
from .transform import hellinger_transform, standardize_columns
from .dataframe_ops import assert_same_index, assert_unique_index

__all__ = [
    # Matrix builder
    "CommunityData", "make_plot_key", "filter_observations",
    "build_community_matrix", "build_environment_matrix",
    "verify_alignment", "renumber_rows", "build_matrices",

    # Transform functions
    "hellinger_transform", "standardize_columns",

    # Alignment helpers
    "assert_same_index", "assert_unique_index",
]
