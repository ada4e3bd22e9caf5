"""
Walkthrough: from a long-format plot survey table to PCA biplots and RDA/CCA.

Uses a small synthetic table with the same columns as the lesson's tree
survey (plotID, date, utme, utmn, plotsize, spcode, cover, elev, tci,
streamdist, disturb, beers). Point `read_observations` at the real file to
run it on field data.
"""

import numpy as np
import pandas as pd

from forestord import (
    build_matrices, hellinger_transform, fit_pca, pca_biplot, cleanplot_pca,
    encode_covariates, fit_rda, fit_cca, r2_adj, AdjustedR2DomainError,
)


def create_mock_observations(n_plots: int = 40, seed: int = 0) -> pd.DataFrame:
    """Synthetic survey: species cover responds to elevation."""
    rng = np.random.default_rng(seed)
    species = ["ACERRUB", "TSUGCAN", "PINUSTR", "QUERPRI", "BETUALL", "FAGUGRA"]
    optima = np.linspace(400, 1800, len(species))
    rows = []
    for i in range(n_plots):
        elev = rng.uniform(300, 1900)
        site = {
            "plotID": f"P{i:03d}", "date": "2004-07-01",
            "utme": 270000 + 100 * i, "utmn": 3940000.0,
            "plotsize": 1000 if i % 5 else 100,
            "elev": elev, "tci": rng.normal(6, 2), "streamdist": rng.gamma(2, 100),
            "disturb": rng.choice(["CORPLOG", "LT-SEL", "VIRGIN"]),
            "beers": rng.uniform(0, 2),
        }
        for sp, opt in zip(species, optima):
            cover = 10 * np.exp(-((elev - opt) ** 2) / (2 * 350 ** 2))
            if cover > 0.5:
                rows.append({**site, "spcode": sp, "cover": round(cover + rng.uniform(0, 1), 1)})
    return pd.DataFrame(rows)


def main():
    print("=== Ordination walkthrough ===\n")

    print("1. Building community and environmental matrices (1000 m2 plots)...")
    obs = create_mock_observations()
    data = build_matrices(obs, plot_size=1000)
    print(f"   {data}")

    print("\n2. PCA of the environmental covariates...")
    env_num = data.environment.drop(columns="disturb")
    pca = fit_pca(env_num)
    print(f"   {pca}")
    print(pca.broken_stick().round(3))
    print("   Descriptors driving PC1:")
    print(pca.get_key_descriptors(pc=1, n=3).round(3))
    for scaling in (1, 2):
        bp = pca_biplot(pca, scaling=scaling)
        lengths = np.linalg.norm(bp.descriptors.to_numpy(), axis=1)
        print(f"   scaling {scaling} ({bp.scaling_name}): vector lengths {np.round(lengths, 3)}")
    fig, _ = cleanplot_pca(pca)
    fig.savefig("pca_biplots.png", dpi=120)

    print("\n3. RDA of Hellinger-transformed cover on all covariates...")
    env = encode_covariates(data.environment)
    rda = fit_rda(hellinger_transform(data.community), env)
    print(f"   {rda}")
    print(rda.inertia_table().round(4))
    try:
        res = r2_adj(rda)
        print(f"   R2 = {res.r2:.3f}, adjusted R2 = {res.r2_adj:.3f}")
    except AdjustedR2DomainError as e:
        print(f"   {e}")

    print("\n4. CCA of raw cover on elevation and TCI...")
    cca = fit_cca(data.community, data.environment[["elev", "tci"]])
    res = r2_adj(cca)
    print(f"   {cca}")
    print(f"   R2 = {res.r2:.3f}, adjusted R2 = {res.r2_adj:.3f}")


if __name__ == "__main__":
    main()
