from __future__ import annotations
from pathlib import Path
import logging

import pandas as pd
from ..config import RAW_TREEDATA_CSV

logger = logging.getLogger(__name__)

_SEPARATORS = {".csv": ",", ".tsv": "\t", ".txt": None}


def read_observations(path: str | Path | None = None, sep: str | None = None) -> pd.DataFrame:
    """
    Read the long-format observation table.

    Delimited text is parsed from an explicitly scoped file handle; Excel
    workbooks go through openpyxl.

    Args:
        path: File to read (default: config.RAW_TREEDATA_CSV)
        sep: Field separator; inferred from the suffix when omitted

    Returns:
        DataFrame with one row per (plot-survey, species) record
    """
    path = Path(path or RAW_TREEDATA_CSV)
    suffix = path.suffix.lower()
    if suffix in (".xlsx", ".xlsm"):
        df = pd.read_excel(path, engine="openpyxl")
    else:
        if sep is None:
            sep = _SEPARATORS.get(suffix, ",")
        with open(path, newline="", encoding="utf-8") as fh:
            # sep=None lets pandas sniff whitespace/other delimiters
            df = pd.read_csv(fh, sep=sep, engine="python" if sep is None else "c")
    logger.info("Read %d observation records from %s", len(df), path)
    return df
