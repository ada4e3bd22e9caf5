"""
forestord - community matrices and ordination helpers for forest inventory data

Builds the site x species community matrix and the row-aligned site x
covariate matrix from a long-format plot survey table, and provides the
small helpers an ordination session leans on: PCA biplots under both
scalings and the adjusted R2 of constrained (RDA/CCA) models.

Subpackages:
- data_process: Reading, cleaning, validation and matrix construction
- ordination: PCA, biplots, RDA/CCA and adjusted R2
"""

from .data_process import (
    CommunityData, make_plot_key, filter_observations,
    build_community_matrix, build_environment_matrix,
    verify_alignment, renumber_rows, build_matrices,
    hellinger_transform, standardize_columns,
)

from .ordination import (
    PCAResult, fit_pca, BiplotData, pca_biplot, plot_biplot, cleanplot_pca,
    ConstrainedOrdination, R2Result, encode_covariates,
    fit_rda, fit_cca, adjusted_r2, r2_adj,
)

from .exceptions import (
    RowAlignmentError, MissingCovariateError, CovariateConflictError,
    CovariateConflictWarning, CovariateEncodingError, AdjustedR2DomainError,
)

__all__ = [
    # Matrix builder
    "CommunityData", "make_plot_key", "filter_observations",
    "build_community_matrix", "build_environment_matrix",
    "verify_alignment", "renumber_rows", "build_matrices",
    "hellinger_transform", "standardize_columns",

    # Ordination support
    "PCAResult", "fit_pca", "BiplotData", "pca_biplot", "plot_biplot", "cleanplot_pca",
    "ConstrainedOrdination", "R2Result", "encode_covariates",
    "fit_rda", "fit_cca", "adjusted_r2", "r2_adj",

    # Errors
    "RowAlignmentError", "MissingCovariateError", "CovariateConflictError",
    "CovariateConflictWarning", "CovariateEncodingError", "AdjustedR2DomainError",
]

# Package metadata
__version__ = "0.1.0"
