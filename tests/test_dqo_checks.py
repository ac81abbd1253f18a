"""
Tests for the DQO table checks (accuracy, frequency and completeness,
censored counts) and the site / WQX metadata checks.
"""
import math
import re

import pytest

from water_dqo.config import CENSORED_COLUMNS, FRECOM_COLUMNS
from water_dqo.dqo_checks import (
    ALL_VALUES,
    ValueRange,
    parse_value_range,
    range_problems,
    validate_accuracy,
    validate_censored,
    validate_frecom,
    validate_sites,
    validate_wqx,
)
from water_dqo.errors import DataQualityWarning, StructuralError


class TestParseValueRange:

    def test_all_and_blank(self):
        assert parse_value_range("all") == ALL_VALUES
        assert parse_value_range(None) == ALL_VALUES
        assert parse_value_range("  ") == ALL_VALUES

    def test_bounds(self):
        assert parse_value_range("<20") == ValueRange(-math.inf, 20.0, False, False)
        assert parse_value_range(">= 20") == ValueRange(20.0, math.inf, True, False)

    def test_between(self):
        r = parse_value_range("10-20")
        assert r.contains(10) and r.contains(20)
        assert not r.contains(20.5)

    def test_unparseable(self):
        assert parse_value_range("20 to 30") is None
        assert parse_value_range("30-20") is None


class TestRangeProblems:

    def test_adjacent_open_closed(self):
        assert range_problems([parse_value_range("<20"), parse_value_range(">=20")]) == (False, False)

    def test_overlap(self):
        assert range_problems([parse_value_range("<=20"), parse_value_range(">=20")]) == (False, True)

    def test_gap(self):
        assert range_problems([parse_value_range("<10"), parse_value_range(">20")]) == (True, False)

    def test_wide_range_covers_later_ones(self):
        ranges = [parse_value_range(s) for s in ["<=100", "10-20", ">100"]]
        assert range_problems(ranges) == (False, True)

    def test_gap_after_nested_range(self):
        ranges = [parse_value_range(s) for s in ["<50", "10-20", ">60"]]
        assert range_problems(ranges) == (True, True)


class TestAccuracy:

    def test_valid(self, accuracy_df):
        assert validate_accuracy(accuracy_df) is accuracy_df

    def test_missing_column(self, accuracy_df):
        with pytest.raises(StructuralError, match="Missing the following columns: UQL") as exc:
            validate_accuracy(accuracy_df.drop(columns=["UQL"]))
        assert exc.value.rule_id == "ACC_1"

    def test_two_units(self, accuracy_df):
        accuracy_df.loc[3, "uom"] = "mg/l"
        with pytest.raises(StructuralError, match=re.escape("More than one unit per Parameter: TP (ug/l, mg/l)")):
            validate_accuracy(accuracy_df)

    def test_unapproved_unit(self, accuracy_df):
        accuracy_df.loc[4, "uom"] = "ppm"
        with pytest.raises(StructuralError, match=re.escape("Incorrect units for Parameter: DO (ppm)")):
            validate_accuracy(accuracy_df)

    def test_non_numeric_mdl(self, accuracy_df):
        accuracy_df.loc[2, "MDL"] = "abc"
        with pytest.raises(StructuralError, match=re.escape("Non-numeric entries in MDL found: abc in row(s) 3")):
            validate_accuracy(accuracy_df)

    def test_bad_value_range(self, accuracy_df):
        accuracy_df.loc[2, "Value Range"] = "20 to 30"
        with pytest.raises(StructuralError) as exc:
            validate_accuracy(accuracy_df)
        assert exc.value.rule_id == "ACC_7"

    def test_overlapping_ranges_warn(self, accuracy_df):
        accuracy_df.loc[2, "Value Range"] = "<=20"
        with pytest.warns(DataQualityWarning, match="Overlapping entries in Value Range for Parameter: TP"):
            validate_accuracy(accuracy_df)

    def test_gaps_warn(self, accuracy_df):
        accuracy_df.loc[2, "Value Range"] = "<10"
        accuracy_df.loc[3, "Value Range"] = ">20"
        with pytest.warns(DataQualityWarning, match="Gaps in Value Range for Parameter: TP"):
            validate_accuracy(accuracy_df)

    def test_unknown_parameter_warns(self, accuracy_df):
        accuracy_df.loc[0, "Parameter"] = "Temp"
        with pytest.warns(DataQualityWarning, match="Parameter not included in approved parameters: Temp"):
            validate_accuracy(accuracy_df)


class TestFrecom:

    def test_valid(self, frecom_df):
        assert validate_frecom(frecom_df) is frecom_df

    def test_non_numeric(self, frecom_df):
        frecom_df.loc[1, "% Completeness"] = "ninety"
        with pytest.raises(StructuralError, match="Non-numeric entries in % Completeness found: ninety"):
            validate_frecom(frecom_df)

    def test_out_of_range_warns(self, frecom_df):
        frecom_df.loc[0, "% Completeness"] = 120
        with pytest.warns(DataQualityWarning, match=re.escape("% Completeness in row(s) 1")):
            validate_frecom(frecom_df)

    def test_duplicate_parameter(self, make_table):
        df = make_table(FRECOM_COLUMNS, [("DO", 10, None, None, None, None, 90),
                                         ("DO", 10, None, None, None, None, 95)])
        with pytest.raises(StructuralError, match="Multiple entries for Parameter found: DO") as exc:
            validate_frecom(df)
        assert exc.value.rule_id == "FRE_5"


class TestCensored:

    def test_valid(self, censored_df):
        assert validate_censored(censored_df) is censored_df

    @pytest.mark.parametrize("count", [-1, 1.5, None, "many"])
    def test_bad_counts(self, make_table, count):
        df = make_table(CENSORED_COLUMNS, [("DO", 0), ("TP", count)])
        with pytest.raises(StructuralError, match=r"Missed and Censored Records found: .* in row\(s\) 2") as exc:
            validate_censored(df)
        assert exc.value.rule_id == "CEN_3"

    def test_duplicate_parameter(self, make_table):
        df = make_table(CENSORED_COLUMNS, [("DO", 0), ("DO", 1)])
        with pytest.raises(StructuralError, match="Multiple entries for Parameter found: DO"):
            validate_censored(df)


class TestSites:

    def test_valid(self, sites_df):
        assert validate_sites(sites_df) is sites_df

    def test_missing_id(self, sites_df):
        sites_df.loc[1, "Monitoring Location ID"] = None
        with pytest.raises(StructuralError, match=r"Missing entries in Monitoring Location ID found in row\(s\) 2"):
            validate_sites(sites_df)

    def test_duplicate_id(self, sites_df):
        sites_df.loc[1, "Monitoring Location ID"] = "ABT-026"
        with pytest.raises(StructuralError, match="Multiple entries for Monitoring Location ID found: ABT-026"):
            validate_sites(sites_df)

    def test_latitude_out_of_range(self, sites_df):
        sites_df.loc[0, "Monitoring Location Latitude"] = 95
        with pytest.raises(StructuralError, match="Monitoring Location Latitude outside of -90 to 90") as exc:
            validate_sites(sites_df)
        assert exc.value.rule_id == "SIT_5"

    def test_missing_name_warns(self, sites_df):
        sites_df.loc[0, "Monitoring Location Name"] = None
        with pytest.warns(DataQualityWarning, match=r"Monitoring Location Name found in row\(s\) 1"):
            out = validate_sites(sites_df)
        assert out is sites_df


class TestWqx:

    def test_valid(self, wqx_df):
        assert validate_wqx(wqx_df) is wqx_df

    def test_duplicate_parameter(self, wqx_df):
        wqx_df.loc[1, "Parameter"] = "TP"
        with pytest.raises(StructuralError, match="Multiple entries for Parameter found: TP"):
            validate_wqx(wqx_df)
