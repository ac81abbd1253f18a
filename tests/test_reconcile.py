"""
Tests for cross-table checks: parameter coverage, accuracy units, sites.
"""
import re
import warnings

import pandas as pd
import pytest

from water_dqo.config import CENSORED_COLUMNS, FRECOM_COLUMNS
from water_dqo.errors import DataQualityWarning, StructuralError
from water_dqo.formatting import format_results
from water_dqo.reconcile import reconcile_accuracy, reconcile_completeness, reconcile_sites


class TestCompletenessCoverage:

    def test_all_covered(self, results_df, frecom_df, censored_df):
        outcome = reconcile_completeness(results_df, frecom_df, censored_df)
        assert outcome.ok

    def test_frecom_parameter_not_in_results_warns(self, results_df, frecom_df, make_table):
        extra = make_table(FRECOM_COLUMNS, [("Chl a", 10, None, None, None, None, 90)])
        frecom = pd.concat([frecom_df, extra], ignore_index=True)
        with pytest.warns(DataQualityWarning, match="frequency and completeness not found in results data: Chl a"):
            reconcile_completeness(results_df, frecom)

    def test_results_parameter_not_in_frecom_warns(self, results_df, frecom_df):
        frecom = frecom_df[frecom_df["Parameter"] != "DO"]
        with pytest.warns(DataQualityWarning) as record:
            reconcile_completeness(results_df, frecom)
        msgs = [str(w.message) for w in record if issubclass(w.category, DataQualityWarning)]
        assert msgs == [
            "Parameters in results data not found in quality control objectives for frequency and completeness: DO"
        ]

    def test_censored_parameter_not_in_results_warns(self, results_df, frecom_df, make_table):
        censored = make_table(CENSORED_COLUMNS, [(p, 0) for p in ["DO", "Salinity", "TP", "Water Temp", "pH", "TSS"]])
        with pytest.warns(DataQualityWarning, match="Parameters in censored data not found in results data: TSS"):
            reconcile_completeness(results_df, frecom_df, censored)

    @pytest.mark.parametrize("warn", [True, False])
    def test_frecom_parameter_not_in_censored_is_fatal(self, results_df, frecom_df, censored_df, warn):
        censored = censored_df[~censored_df["Parameter"].isin(["pH", "DO"])]
        expected = ("Parameters in quality control objectives for frequency and completeness "
                    "not found in censored data: DO, pH")
        with pytest.raises(StructuralError, match=re.escape(expected)) as exc:
            reconcile_completeness(results_df, frecom_df, censored, warn=warn)
        assert exc.value.rule_id == "REC_4"

    def test_no_censored_data_skips_censored_rules(self, results_df, frecom_df):
        outcome = reconcile_completeness(results_df, frecom_df, None)
        assert [r.rule_id for r in outcome.results] == ["REC_1", "REC_2"]


class TestAccuracyAgreement:

    def test_formatted_units_agree(self, results_df, accuracy_df):
        # results in ppth after formatting, accuracy still in ppt
        with warnings.catch_warnings():
            warnings.simplefilter("error", DataQualityWarning)
            outcome = reconcile_accuracy(format_results(results_df), accuracy_df)
        assert outcome.ok

    def test_unit_mismatch_is_fatal(self, results_df, accuracy_df):
        accuracy_df.loc[4, "uom"] = "ug/l"
        expected = "DO (results: mg/l, accuracy: ug/l)"
        with pytest.raises(StructuralError, match=re.escape(expected)) as exc:
            reconcile_accuracy(results_df, accuracy_df)
        assert exc.value.rule_id == "REC_6"

    def test_results_parameter_not_in_accuracy_warns(self, results_df, accuracy_df):
        accuracy = accuracy_df[accuracy_df["Parameter"] != "DO"]
        with pytest.warns(DataQualityWarning, match="not found in quality control objectives for accuracy: DO"):
            reconcile_accuracy(results_df, accuracy)


class TestSiteCoverage:

    def test_unknown_location_warns(self, results_df, sites_df):
        results_df.loc[2, "Monitoring Location ID"] = "XYZ-001"
        with pytest.warns(DataQualityWarning, match="not found in site metadata: XYZ-001"):
            reconcile_sites(results_df, sites_df)

    def test_known_locations(self, results_df, sites_df):
        assert reconcile_sites(results_df, sites_df).ok
