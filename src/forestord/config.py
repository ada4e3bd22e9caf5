from __future__ import annotations
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
DATA = ROOT / "data"
RAW = DATA / "raw"
INTERIM = DATA / "interim"
PROC = DATA / "processed"

# raw observation table (one row per plot-survey x species)
RAW_TREEDATA_CSV = RAW / "treedata.csv"

# column contract of the observation table
PLOT_COL = "plotID"
DATE_COL = "date"
EASTING_COL = "utme"
NORTHING_COL = "utmn"
PLOT_SIZE_COL = "plotsize"
SPECIES_COL = "spcode"
COVER_COL = "cover"

# site-level covariates, constant within a plot-survey
ENV_COLS = ["elev", "tci", "streamdist", "disturb", "beers"]

# keys
KEY_COLS = [PLOT_COL, DATE_COL, EASTING_COL, NORTHING_COL]  # one sampling event
KEY_SEP = "_"
PLOT_KEY = "plot_key"

DEFAULT_PLOT_SIZE = 1000
