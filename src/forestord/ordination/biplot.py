"""
PCA biplots under the two classical scalings.

Scaling 1, distance biplot
    Descriptor vectors are the unit-length eigenvectors U and site points
    are the principal components F = XU. Distances between sites
    approximate their Euclidean distances; angles between descriptor
    vectors do NOT represent correlations. A descriptor whose vector is
    longer than the equilibrium circle radius sqrt(d/p) contributes more
    than average to the plotted axes.

Scaling 2, correlation biplot
    Descriptor vectors are U * sqrt(lambda) and site points F * lambda^(-1/2).
    Angles between descriptor vectors reflect their correlations; distances
    between sites are NOT Euclidean distances.

The scaling is stored on the result so the two readings cannot be mixed
up when the description is drawn or reused.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np
import pandas as pd

from .pca import PCAResult

__all__ = ["BiplotData", "pca_biplot", "plot_biplot", "cleanplot_pca"]

_SCALING_ALIASES = {1: 1, 2: 2, "distance": 1, "correlation": 2}
_SCALING_NAMES = {1: "distance", 2: "correlation"}


@dataclass(frozen=True)
class BiplotData:
    sites: pd.DataFrame             # site points, sites x 2
    descriptors: pd.DataFrame       # descriptor vector tips, descriptors x 2
    eigenvalues: np.ndarray         # eigenvalues of the two plotted axes
    explained_variance_ratio: np.ndarray
    scaling: int
    axes: Tuple[int, int]
    circle_radius: Optional[float] = None  # equilibrium circle, scaling 1 only

    @property
    def scaling_name(self) -> str:
        return _SCALING_NAMES[self.scaling]

    @property
    def axis_labels(self) -> list[str]:
        return [f"PC{a} ({r:.1%})" for a, r in zip(self.axes, self.explained_variance_ratio)]


def _resolve_scaling(scaling: Union[int, str]) -> int:
    if isinstance(scaling, str):
        scaling = scaling.lower()
    try:
        return _SCALING_ALIASES[scaling]
    except (KeyError, TypeError):
        raise ValueError(f"Unknown scaling {scaling!r}: use 1/'distance' or 2/'correlation'") from None


def pca_biplot(result: PCAResult, scaling: Union[int, str] = 1,
               axes: Tuple[int, int] = (1, 2)) -> BiplotData:
    """
    Project sites and descriptors of a fitted PCA onto two axes.

    Args:
        result: Fitted PCA (see fit_pca)
        scaling: 1 / "distance" or 2 / "correlation"
        axes: 1-based pair of axes to plot

    Returns:
        BiplotData ready for plot_biplot or any other renderer
    """
    s = _resolve_scaling(scaling)
    n_axes = len(result.eigenvalues)
    if len(axes) != 2 or any(a < 1 or a > n_axes for a in axes):
        raise ValueError(f"axes must be two 1-based component numbers in [1, {n_axes}], got {axes}")
    idx = [a - 1 for a in axes]

    U = result.loadings.iloc[:, idx]
    F = result.scores.iloc[:, idx]
    lam = np.asarray(result.eigenvalues, dtype=float)[idx]

    if s == 1:
        descriptors = U.copy()
        sites = F.copy()
        radius = float(np.sqrt(len(axes) / result.n_descriptors))
    else:
        if np.any(lam <= 0):
            raise ValueError(f"Correlation biplot needs positive eigenvalues on axes {axes}, got {lam}")
        descriptors = U * np.sqrt(lam)
        sites = F / np.sqrt(lam)
        radius = None

    return BiplotData(
        sites=sites,
        descriptors=descriptors,
        eigenvalues=lam,
        explained_variance_ratio=np.asarray(result.explained_variance_ratio)[idx],
        scaling=s,
        axes=tuple(axes),
        circle_radius=radius,
    )


def plot_biplot(data: BiplotData, ax=None, label_sites: bool = False,
                site_color: str = "grey", arrow_color: str = "crimson"):
    """Draw a BiplotData with matplotlib and return the axes."""
    import matplotlib.pyplot as plt

    if ax is None:
        _, ax = plt.subplots(figsize=(6, 6))

    xs, ys = data.sites.iloc[:, 0], data.sites.iloc[:, 1]
    ax.scatter(xs, ys, s=12, color=site_color, alpha=0.7)
    if label_sites:
        for name, x, y in zip(data.sites.index, xs, ys):
            ax.annotate(str(name), (x, y), fontsize=7, color=site_color)

    # arrows share the site axes; rescale so they are visible but not dominant
    tips = data.descriptors.to_numpy()
    site_extent = np.abs(data.sites.to_numpy()).max() if len(data.sites) else 1.0
    tip_extent = np.abs(tips).max() if tips.size else 1.0
    mult = 0.9 * site_extent / tip_extent if tip_extent > 0 else 1.0
    for name, (x, y) in zip(data.descriptors.index, tips):
        ax.arrow(0, 0, x * mult, y * mult, color=arrow_color,
                 head_width=0.02 * site_extent, length_includes_head=True)
        ax.text(x * mult * 1.08, y * mult * 1.08, str(name), color=arrow_color,
                fontsize=8, ha="center", va="center")

    if data.circle_radius is not None:
        circle = plt.Circle((0, 0), data.circle_radius * mult, fill=False,
                            color=arrow_color, linestyle="--", linewidth=0.8)
        ax.add_patch(circle)

    ax.axhline(0, color="black", linewidth=0.5, linestyle=":")
    ax.axvline(0, color="black", linewidth=0.5, linestyle=":")
    ax.set_xlabel(data.axis_labels[0])
    ax.set_ylabel(data.axis_labels[1])
    ax.set_title(f"PCA biplot - scaling {data.scaling} ({data.scaling_name})")
    ax.set_aspect("equal", adjustable="datalim")
    return ax


def cleanplot_pca(result: PCAResult, axes: Tuple[int, int] = (1, 2), label_sites: bool = False):
    """
    Side-by-side distance and correlation biplots of the same PCA.

    Returns:
        (fig, (ax_scaling1, ax_scaling2))
    """
    import matplotlib.pyplot as plt

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 6))
    plot_biplot(pca_biplot(result, scaling=1, axes=axes), ax=ax1, label_sites=label_sites)
    plot_biplot(pca_biplot(result, scaling=2, axes=axes), ax=ax2, label_sites=label_sites)
    fig.tight_layout()
    return fig, (ax1, ax2)
