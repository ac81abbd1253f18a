"""
Tests for results formatting, censored value substitution and axis scale.
"""
import math
from datetime import date, datetime, time

import pandas as pd
import pytest

from water_dqo.config import ACCURACY_COLUMNS
from water_dqo.errors import DataQualityWarning
from water_dqo.formatting import format_results, format_time, format_unit
from water_dqo.limits import fill_limits, yscale


class TestFormatTime:

    @pytest.mark.parametrize("value, expected", [
        ("10:30", "10:30"),
        ("10:30:00", "10:30"),
        ("1899-12-31 10:30:00", "10:30"),
        ("10:30:15", "10:30:15"),
        (time(9, 5), "09:05"),
        (datetime(2022, 6, 1, 14, 0), "14:00"),
        (None, None),
    ])
    def test_values(self, value, expected):
        assert format_time(value) == expected


class TestFormatUnit:

    def test_salinity_ppt(self):
        assert format_unit("Salinity", " ppt ") == "ppth"

    def test_ph_units_dropped(self):
        assert format_unit("pH", "s.u.") is None

    def test_other_units_trimmed(self):
        assert format_unit("DO", " mg/l") == "mg/l"


class TestFormatResults:

    def test_formats_columns(self, make_results):
        df = make_results([
            {"Characteristic Name": "Temperature, water", "Activity Start Time": "1899-12-31 08:15:00"},
            {"Activity Start Date": pd.Timestamp("2022-06-02 13:45")},
            {"Characteristic Name": "pH", "Result Value": "7", "Result Unit": "s.u."},
        ])
        out = format_results(df)
        assert out["Activity Start Date"].tolist() == [date(2022, 6, 1), date(2022, 6, 2), date(2022, 6, 1)]
        assert out["Activity Start Time"].tolist() == ["08:15", "10:30", "10:30"]
        assert out["Characteristic Name"].tolist() == ["Water Temp", "Water Temp", "pH"]
        assert out["Result Unit"].tolist() == ["deg C", "deg C", None]
        assert out["Result Unit"].dtype == object

    def test_returns_new_frame(self, results_df):
        before = results_df.copy()
        out = format_results(results_df)
        assert out is not results_df
        assert results_df.equals(before)


@pytest.fixture
def tp_results(make_results):
    return format_results(make_results([
        {"Characteristic Name": "TP", "Result Unit": "ug/l", "Result Value": "BDL", "Quantitation Limit": "5"},
        {"Characteristic Name": "TP", "Result Unit": "ug/l", "Result Value": "BDL"},
        {"Characteristic Name": "TP", "Result Unit": "ug/l", "Result Value": "AQL", "Quantitation Limit": "50"},
        {"Characteristic Name": "TP", "Result Unit": "ug/l", "Result Value": "AQL"},
        {"Characteristic Name": "TP", "Result Unit": "ug/l", "Result Value": "25"},
        {},
    ]))


class TestFillLimits:

    def test_substitutes_tokens(self, tp_results, accuracy_df):
        out = fill_limits(tp_results, accuracy_df, "TP")
        assert out["Result Value"].tolist() == [2.5, 1.0, 50.0, 100.0, 25.0]
        assert out["Result Value"].dtype == float

    def test_only_requested_parameter(self, tp_results, accuracy_df):
        out = fill_limits(tp_results, accuracy_df, "TP")
        assert set(out["Characteristic Name"]) == {"TP"}

    def test_unknown_parameter(self, tp_results, accuracy_df):
        with pytest.raises(ValueError, match="Parameter not found in results data: DO"):
            fill_limits(tp_results, accuracy_df, "DO")

    def test_no_limit_warns(self, tp_results, make_table):
        accuracy = make_table(ACCURACY_COLUMNS, [("TP", "ug/l", None, None, "all", None, None, None, None, None)])
        with pytest.warns(DataQualityWarning, match="No limit available to fill 2 Result Value entries for TP"):
            out = fill_limits(tp_results, accuracy, "TP")
        values = out["Result Value"].tolist()
        assert math.isnan(values[1]) and math.isnan(values[3])
        assert values[0] == 2.5


class TestYscale:

    def test_auto_reads_accuracy(self, accuracy_df):
        assert yscale(accuracy_df, "E.coli") is True
        assert yscale(accuracy_df, "TP") is False

    def test_forced(self, accuracy_df):
        assert yscale(accuracy_df, "E.coli", yscl="linear") is False
        assert yscale(accuracy_df, "TP", yscl="log") is True

    def test_unknown_parameter_is_linear(self, accuracy_df):
        assert yscale(accuracy_df, "Chl a") is False

    def test_invalid_option(self, accuracy_df):
        with pytest.raises(ValueError, match="yscl must be one of"):
            yscale(accuracy_df, "TP", yscl="sqrt")
