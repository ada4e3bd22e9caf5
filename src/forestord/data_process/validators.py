from __future__ import annotations
from pandera import Column, DataFrameSchema, Check

from ..config import (
    PLOT_COL, DATE_COL, EASTING_COL, NORTHING_COL,
    PLOT_SIZE_COL, SPECIES_COL, COVER_COL, ENV_COLS,
)

# Covariates are nullable here: a missing value is reported per plot-survey by
# the matrix builder, which knows the key it belongs to.
schema_observations = DataFrameSchema(
    {
        PLOT_COL: Column(str, nullable=False, coerce=True),
        DATE_COL: Column(nullable=False),
        EASTING_COL: Column(float, nullable=False, coerce=True),
        NORTHING_COL: Column(float, nullable=False, coerce=True),
        PLOT_SIZE_COL: Column(nullable=True, required=False),
        SPECIES_COL: Column(str, nullable=False, coerce=True),
        COVER_COL: Column(float, Check.ge(0), nullable=False, coerce=True),
        **{c: Column(nullable=True) for c in ENV_COLS},
    },
    strict=False,
)


def validate_observations(df):
    """Validate the observation table contract, reporting every failure at once."""
    return schema_observations.validate(df, lazy=True)
