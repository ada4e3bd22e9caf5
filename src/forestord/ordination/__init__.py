"""
Ordination support for forestord.

PCA fitting and biplots under both scalings, constrained ordination
(RDA, CCA) and the adjusted R2 of constrained models.
"""

from .pca import PCAResult, fit_pca
from .biplot import BiplotData, pca_biplot, plot_biplot, cleanplot_pca
from .constrained import (
    ConstrainedOrdination,
    R2Result,
    encode_covariates,
    fit_rda,
    fit_cca,
    adjusted_r2,
    r2_adj,
)

__all__ = [
    # PCA
    "PCAResult",
    "fit_pca",

    # Biplots
    "BiplotData",
    "pca_biplot",
    "plot_biplot",
    "cleanplot_pca",

    # Constrained ordination
    "ConstrainedOrdination",
    "R2Result",
    "encode_covariates",
    "fit_rda",
    "fit_cca",
    "adjusted_r2",
    "r2_adj",
]
