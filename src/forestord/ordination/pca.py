"""
PCA on a site x descriptor matrix.

Wraps scikit-learn's PCA and keeps everything the biplot renderer needs:
eigenvalues (variances of the axes), unit-length eigenvectors and the
site scores in the centred (optionally standardised) descriptor space.
"""

import logging

import numpy as np
import pandas as pd
from sklearn.decomposition import PCA
from typing import Optional

logger = logging.getLogger(__name__)


class PCAResult:
    """
    Result object for a principal component analysis.

    Attributes:
        scores (pd.DataFrame): Site scores F = X U (sites x components)
        loadings (pd.DataFrame): Unit-length eigenvectors U (descriptors x components)
        eigenvalues (np.ndarray): Variance of each component (ddof=1)
        explained_variance_ratio (np.ndarray): Proportion of total variance per component
        pca (sklearn.decomposition.PCA): Fitted PCA object
        standardized (bool): Whether descriptors were z-scored before fitting
        n_sites (int): Number of sites included in analysis
        n_descriptors (int): Number of descriptors included
    """

    def __init__(self, scores: pd.DataFrame, loadings: pd.DataFrame,
                 eigenvalues: np.ndarray, explained_variance_ratio: np.ndarray,
                 pca: PCA, standardized: bool = True):
        self.scores = scores
        self.loadings = loadings
        self.eigenvalues = eigenvalues
        self.explained_variance_ratio = explained_variance_ratio
        self.pca = pca
        self.standardized = standardized
        self.n_sites = scores.shape[0]
        self.n_descriptors = loadings.shape[0]

    def get_key_descriptors(self, pc: int = 1, n: int = 10) -> pd.DataFrame:
        """
        Return the descriptors with highest absolute loadings for a given PC.

        Args:
            pc: Principal component number (1-based)
            n: Number of top descriptors to return
        """
        pc_col = f'PC{pc}'
        if pc_col not in self.loadings.columns:
            raise ValueError(f"PC{pc} not available. Available PCs: {list(self.loadings.columns)}")

        loadings_abs = self.loadings[pc_col].abs()
        top = loadings_abs.nlargest(n)

        return pd.DataFrame({
            'loading': self.loadings.loc[top.index, pc_col],
            'abs_loading': top
        })

    def broken_stick(self) -> pd.DataFrame:
        """
        Compare each axis' share of variance with the broken-stick expectation.

        Axes whose observed share exceeds the broken-stick share are the
        ones worth interpreting.
        """
        p = min(self.n_sites - 1, self.n_descriptors)  # axes with nonzero variance
        expected = np.array([np.sum(1.0 / np.arange(k, p + 1)) / p
                             for k in range(1, len(self.eigenvalues) + 1)])
        return pd.DataFrame({
            'observed': self.explained_variance_ratio,
            'broken_stick': expected,
            'retain': self.explained_variance_ratio > expected,
        }, index=self.loadings.columns)

    def __repr__(self):
        return (
            f"PCAResult(sites={self.n_sites}, descriptors={self.n_descriptors}, "
            f"components={len(self.eigenvalues)}, standardized={self.standardized}, "
            f"var_explained_PC1={self.explained_variance_ratio[0]:.3f})"
        )


def fit_pca(
    data: pd.DataFrame,
    n_components: Optional[int] = None,
    standardize: bool = True,
    min_variance_threshold: float = 1e-10,
) -> PCAResult:
    """
    Fit a PCA on a site x descriptor matrix.

    Args:
        data: Sites as rows, descriptors (species or covariates) as columns
        n_components: Number of components to retain (None = all components)
        standardize: z-score descriptors (correlation-matrix PCA); use False
            for a covariance PCA of e.g. Hellinger-transformed covers
        min_variance_threshold: Descriptors with lower variance are dropped

    Returns:
        PCAResult with scores, unit eigenvectors and eigenvalues
    """
    df = data.apply(pd.to_numeric, errors='coerce')
    non_numeric = [c for c in data.columns if df[c].isna().all() and not data[c].isna().all()]
    if non_numeric:
        raise ValueError(f"Non-numeric descriptors cannot enter a PCA: {non_numeric}")

    # Remove rows with any missing values
    complete_mask = df.notna().all(axis=1)
    if not complete_mask.all():
        logger.info("Removed %d sites with missing values", int((~complete_mask).sum()))
        df = df.loc[complete_mask]

    # Remove constant descriptors
    variances = df.var()
    low_variance = variances < min_variance_threshold
    if low_variance.any():
        logger.info("Removing %d descriptors with variance <%g", int(low_variance.sum()), min_variance_threshold)
        df = df.loc[:, ~low_variance]

    if df.shape[1] < 2:
        raise ValueError(f"Insufficient descriptors for PCA (found {df.shape[1]}, need ≥2)")
    if df.shape[0] < 3:
        raise ValueError(f"Insufficient sites for PCA (found {df.shape[0]}, need ≥3)")

    X = df.to_numpy(dtype=float)
    if standardize:
        X = (X - X.mean(axis=0)) / X.std(axis=0, ddof=1)

    pca = PCA(n_components=n_components)
    scores = pca.fit_transform(X)
    loadings = pca.components_.T

    pc_names = [f"PC{i+1}" for i in range(scores.shape[1])]
    scores_df = pd.DataFrame(scores, index=df.index, columns=pc_names)
    loadings_df = pd.DataFrame(loadings, index=df.columns, columns=pc_names)

    return PCAResult(
        scores=scores_df,
        loadings=loadings_df,
        eigenvalues=pca.explained_variance_,
        explained_variance_ratio=pca.explained_variance_ratio_,
        pca=pca,
        standardized=standardize,
    )
