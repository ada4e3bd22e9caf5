from types import SimpleNamespace

import numpy as np
import pandas as pd
import pytest

from forestord.data_process.transform import hellinger_transform
from forestord.exceptions import AdjustedR2DomainError, CovariateEncodingError, RowAlignmentError
from forestord.ordination.constrained import (
    R2Result,
    adjusted_r2,
    encode_covariates,
    fit_cca,
    fit_rda,
    r2_adj,
)


@pytest.fixture
def survey():
    rng = np.random.default_rng(11)
    n = 25
    env = pd.DataFrame({
        "elev": rng.normal(1000, 250, n),
        "tci": rng.normal(6, 2, n),
        "disturb": rng.choice(["CORPLOG", "LT-SEL", "VIRGIN"], n),
    })
    optima = np.linspace(500, 1500, 6)
    mu = 20 * np.exp(-((env["elev"].to_numpy()[:, None] - optima) ** 2) / (2 * 300 ** 2)) + 0.5
    comm = pd.DataFrame(rng.poisson(mu).astype(float) + 0.1,
                        columns=[f"SP{i}" for i in range(6)])
    return comm, env


def test_encode_covariates_dummies(survey):
    _, env = survey
    enc = encode_covariates(env)
    assert "disturb" not in enc.columns
    assert [c for c in enc.columns if c.startswith("disturb_")] == ["disturb_LT-SEL", "disturb_VIRGIN"]
    assert all(pd.api.types.is_float_dtype(enc[c]) for c in enc.columns)


def test_categorical_covariate_is_not_masked(survey):
    comm, env = survey
    with pytest.raises(CovariateEncodingError) as exc:
        fit_rda(comm, env)
    assert exc.value.covariate == "disturb"
    assert "fit_rda" in str(exc.value)
    with pytest.raises(CovariateEncodingError, match="fit_cca"):
        fit_cca(comm, env)


def test_misaligned_matrices_are_rejected(survey):
    comm, env = survey
    with pytest.raises(RowAlignmentError):
        fit_rda(comm, encode_covariates(env).iloc[::-1])


def test_rda_inertia_decomposition(survey):
    comm, env = survey
    Y = hellinger_transform(comm)
    model = fit_rda(Y, encode_covariates(env))

    assert model.method == "RDA"
    assert model.n == 25
    assert model.rank == 4
    assert model.total_inertia == pytest.approx(Y.var(ddof=1).sum())
    assert model.constrained_inertia + model.unconstrained_inertia == pytest.approx(model.total_inertia)
    assert model.constrained_eigenvalues.sum() == pytest.approx(model.constrained_inertia)
    assert model.site_scores.shape == (25, 4)
    assert list(model.species_scores.index) == list(comm.columns)
    table = model.inertia_table()
    assert table.loc["Total", "proportion"] == pytest.approx(1.0)


def test_cca_inertia_is_mean_square_contingency(survey):
    comm, env = survey
    model = fit_cca(comm, env[["elev", "tci"]])

    O = comm.to_numpy()
    N = O.sum()
    E = np.outer(O.sum(axis=1), O.sum(axis=0)) / N
    assert model.total_inertia == pytest.approx(((O - E) ** 2 / E).sum() / N)
    assert model.constrained_inertia + model.unconstrained_inertia == pytest.approx(model.total_inertia)
    assert model.constrained_eigenvalues.sum() == pytest.approx(model.constrained_inertia)
    assert model.rank == 2
    assert list(model.site_scores.columns) == ["CCA1", "CCA2"]


def test_cca_rejects_empty_species(survey):
    comm, env = survey
    with pytest.raises(ValueError):
        fit_cca(comm.assign(EMPTY=0.0), env[["elev"]])


def test_adjusted_r2_known_value():
    res = adjusted_r2(0.4, 1.0, n=10, rank=2)
    assert isinstance(res, R2Result)
    assert res.r2 == pytest.approx(0.4)
    assert res.r2_adj == pytest.approx(1 - 0.6 * 9 / 7)


@pytest.mark.parametrize("n, rank", [(5, 4), (5, 5), (3, 7)])
def test_adjusted_r2_domain_error(n, rank):
    with pytest.raises(AdjustedR2DomainError) as exc:
        adjusted_r2(0.5, 1.0, n=n, rank=rank)
    assert exc.value.n == n
    assert exc.value.rank == rank
    assert isinstance(exc.value, ValueError)


def test_adjustment_vanishes_for_one_constraint_and_large_n():
    gaps = [abs(adjusted_r2(0.3, 1.0, n=n, rank=1).r2_adj - 0.3) for n in (10, 100, 10_000, 1_000_000)]
    assert gaps == sorted(gaps, reverse=True)
    assert gaps[-1] < 1e-6


def test_r2_adj_reads_model(survey):
    comm, env = survey
    model = fit_rda(hellinger_transform(comm), encode_covariates(env))
    res = r2_adj(model)
    assert res == adjusted_r2(model.constrained_inertia, model.total_inertia, model.n, model.rank)
    assert res.r2_adj < res.r2


def test_r2_adj_with_explicit_n_and_rank():
    model = SimpleNamespace(constrained_inertia=0.3, unconstrained_inertia=0.7, total_inertia=1.0)
    assert r2_adj(model, n=20, rank=3).r2_adj == pytest.approx(1 - 0.7 * 19 / 16)


def test_r2_adj_rejects_inconsistent_inertia():
    model = SimpleNamespace(constrained_inertia=0.3, unconstrained_inertia=0.5,
                            total_inertia=1.0, n=20, rank=2)
    with pytest.raises(ValueError):
        r2_adj(model)
    negative = SimpleNamespace(constrained_inertia=-0.1, unconstrained_inertia=1.1,
                               total_inertia=1.0, n=20, rank=2)
    with pytest.raises(ValueError):
        r2_adj(negative)
