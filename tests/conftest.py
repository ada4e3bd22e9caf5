import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest


def _record(plot, sp, cover, date="2004-06-01", size=1000, e=275000.0, n=3940000.0,
            elev=800.0, tci=5.0, streamdist=120.0, disturb="CORPLOG", beers=1.2):
    return {
        "plotID": plot, "date": date, "utme": e, "utmn": n, "plotsize": size,
        "spcode": sp, "cover": cover, "elev": elev, "tci": tci,
        "streamdist": streamdist, "disturb": disturb, "beers": beers,
    }


@pytest.fixture
def record():
    return _record


@pytest.fixture
def observations():
    # two 1000 m2 plot-surveys, one re-survey of plot A on a later date, one 100 m2 plot
    rows = [
        _record("A", "ACERRUB", 3),
        _record("A", "ACERRUB", 5),
        _record("A", "TSUGCAN", 2),
        _record("B", "TSUGCAN", 10, e=276000.0, elev=1200.0, disturb="VIRGIN"),
        _record("A", "ACERRUB", 7, date="2010-06-01"),
        _record("C", "PINUSTR", 4, size=100, e=277000.0),
    ]
    return pd.DataFrame(rows)
