import pandas as pd
import pandera.errors
import pytest

import forestord.data_process.data_io as data_io
from forestord.data_process.data_io import load_community_data, save_community_data
from forestord.data_process.ingest import read_observations
from forestord.data_process.pipeline import make_matrices
from forestord.data_process.validators import validate_observations


@pytest.fixture
def treedata_csv(tmp_path, observations):
    path = tmp_path / "treedata.csv"
    observations.to_csv(path, index=False)
    return path


def test_read_observations_csv(treedata_csv, observations):
    df = read_observations(treedata_csv)
    assert df.shape == observations.shape
    assert list(df.columns) == list(observations.columns)


def test_read_observations_tsv(tmp_path, observations):
    path = tmp_path / "treedata.tsv"
    observations.to_csv(path, sep="\t", index=False)
    assert read_observations(path).shape == observations.shape


def test_validate_observations_reports_negative_cover(observations):
    bad = observations.copy()
    bad.loc[0, "cover"] = -1
    with pytest.raises(pandera.errors.SchemaErrors):
        validate_observations(bad)


def test_validate_observations_coerces_ids(observations):
    obs = observations.assign(plotID=range(len(observations)))
    out = validate_observations(obs)
    assert out["plotID"].iloc[1] == "1"


def test_make_matrices_from_file(treedata_csv):
    data = make_matrices(treedata_csv, plot_size=1000)
    assert data.n_plots == 3
    assert sorted(data.community.columns) == ["ACERRUB", "TSUGCAN"]
    assert data.community.index.equals(data.environment.index)


def test_community_data_parquet_round_trip(tmp_path, monkeypatch, treedata_csv):
    pytest.importorskip("pyarrow")
    monkeypatch.setattr(data_io, "INTERIM", tmp_path / "interim")
    data = make_matrices(treedata_csv, plot_size=1000)

    paths = save_community_data(data, prefix="test")
    assert all(p.exists() for p in paths.values())

    loaded = load_community_data(prefix="test")
    pd.testing.assert_frame_equal(loaded.community, data.community, check_names=False)
    assert list(loaded.plot_keys) == list(data.plot_keys)
    assert loaded.aligned


def test_make_matrices_reports_blank_species_code(tmp_path, observations):
    path = tmp_path / "treedata.csv"
    observations.assign(spcode=["ACERRUB", "", "TSUGCAN", "TSUGCAN", "ACERRUB", "PINUSTR"]).to_csv(path, index=False)
    with pytest.raises(pandera.errors.SchemaErrors):
        make_matrices(path, plot_size=1000)


def test_make_matrices_reports_blank_plot_id(tmp_path, observations):
    path = tmp_path / "treedata.csv"
    observations.assign(plotID=["A", "A", "A", "", "A", "C"]).to_csv(path, index=False)
    with pytest.raises(pandera.errors.SchemaErrors):
        make_matrices(path, plot_size=1000)
