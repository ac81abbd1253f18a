from __future__ import annotations

from typing import Dict, List

import pandas as pd
import pytest

from water_dqo.config import (
    ACCURACY_COLUMNS,
    CENSORED_COLUMNS,
    FRECOM_COLUMNS,
    RESULTS_COLUMNS,
    SITES_COLUMNS,
    WQX_COLUMNS,
)

BASE_ROW: Dict[str, object] = {
    "Monitoring Location ID": "ABT-026",
    "Activity Type": "Field Msr/Obs",
    "Activity Start Date": "2022-06-01",
    "Activity Start Time": "10:30",
    "Activity Depth/Height Measure": 0.5,
    "Activity Depth/Height Unit": "m",
    "Activity Relative Depth Name": None,
    "Characteristic Name": "Water Temp",
    "Result Value": "18.2",
    "Result Unit": "deg C",
    "Quantitation Limit": None,
    "QC Reference Value": None,
    "Result Measure Qualifier": None,
    "Result Attribute": None,
    "Sample Collection Method ID": None,
    "Project ID": "Water Quality",
    "Local Record ID": None,
    "Result Comment": None,
}

# One valid row per line; row numbers in tests are 1-based positions here
VALID_ROWS: List[Dict[str, object]] = [
    {},
    {"Activity Depth/Height Measure": None, "Activity Relative Depth Name": "Surface", "Result Value": "19"},
    {"Characteristic Name": "pH", "Result Value": "7.1", "Result Unit": None},
    {"Activity Type": "Sample-Routine", "Characteristic Name": "TP", "Result Value": "BDL",
     "Result Unit": "ug/l", "Quantitation Limit": "5"},
    {"Activity Type": "Quality Control Sample-Field Replicate", "Characteristic Name": "TP",
     "Result Value": "25", "Result Unit": "ug/l", "QC Reference Value": "24"},
    {"Characteristic Name": "DO", "Result Value": "8.4", "Result Unit": "mg/l"},
    {"Characteristic Name": "Salinity", "Result Value": "12", "Result Unit": "ppt"},
    {"Activity Type": "Sample-Routine", "Characteristic Name": "TP", "Result Value": "40",
     "Result Unit": "ug/l", "Result Measure Qualifier": "Q"},
]


def build_results(rows: List[Dict[str, object]]) -> pd.DataFrame:
    records = [{**BASE_ROW, **row} for row in rows]
    return pd.DataFrame(records, columns=list(RESULTS_COLUMNS), dtype=object)


def build_table(columns, rows) -> pd.DataFrame:
    return pd.DataFrame([dict(zip(columns, r)) for r in rows], columns=list(columns), dtype=object)


@pytest.fixture
def make_results():
    return build_results


@pytest.fixture
def results_df() -> pd.DataFrame:
    return build_results(VALID_ROWS)


@pytest.fixture
def make_table():
    return build_table


@pytest.fixture
def accuracy_df() -> pd.DataFrame:
    return build_table(ACCURACY_COLUMNS, [
        ("Water Temp", "deg C", 0.1, 40, "all", 1, 1, None, None, None),
        ("pH", "s.u.", None, None, "all", 0.5, 0.5, None, None, None),
        ("TP", "ug/l", 2, 100, "<20", 5, 5, 2, 2, "80-120%"),
        ("TP", "ug/l", 2, 100, ">=20", "30%", "30%", 2, 2, "80-120%"),
        ("DO", "mg/l", 0.2, 20, "all", 0.5, None, None, None, None),
        ("Salinity", "ppt", 0.5, 60, "all", 1, None, None, None, None),
        ("E.coli", "CFU/100ml", 1, 1000, "all", "log", "log", None, None, None),
    ])


@pytest.fixture
def frecom_df() -> pd.DataFrame:
    return build_table(FRECOM_COLUMNS, [
        ("DO", 10, None, None, None, None, 90),
        ("Salinity", 10, None, None, None, None, 90),
        ("TP", 10, 5, 10, 5, 5, 90),
        ("Water Temp", 10, None, None, None, None, 90),
        ("pH", 10, None, None, None, None, 90),
    ])


@pytest.fixture
def censored_df() -> pd.DataFrame:
    return build_table(CENSORED_COLUMNS, [
        ("DO", 0),
        ("Salinity", 0),
        ("TP", 1),
        ("Water Temp", 0),
        ("pH", 0),
    ])


@pytest.fixture
def sites_df() -> pd.DataFrame:
    return build_table(SITES_COLUMNS, [
        ("ABT-026", "Rt 2, Concord", 42.4606, -71.3618, "Assabet"),
        ("ABT-077", "Rt 27/62, Maynard", 42.4310, -71.4474, "Assabet"),
    ])


@pytest.fixture
def wqx_df() -> pd.DataFrame:
    return build_table(WQX_COLUMNS, [
        ("TP", None, "as P", "Total", "4500-P-E", "APHA"),
        ("DO", None, None, None, "4500-O-G", "APHA"),
    ])
