"""
Cross-table consistency checks.

Parameter coverage between results, frequency/completeness objectives and
censored counts; unit agreement between results and accuracy objectives;
location coverage between results and site metadata.

Every coverage message lists the full sorted, de-duplicated set of
offending names in one message per rule.
"""
from __future__ import annotations

from typing import Callable, List, Optional, Sequence

import pandas as pd

from .checks import units_by_parameter
from .dqo_checks import distinct_values
from .formatting import format_unit
from .models import CheckResult, ValidationOutcome, fail_result, pass_result
from .report import run_table_checks

TABLE = "cross-table"


def _coverage(
    rule_id: str,
    rule_name: str,
    source: Sequence[str],
    target: Sequence[str],
    message: str,
    fatal: bool,
) -> CheckResult:
    """Names in `source` that are not in `target`."""
    missing = sorted(set(source) - set(target), key=str.casefold)
    if missing:
        return fail_result(
            rule_id, rule_name, TABLE,
            f"{message}: {', '.join(missing)}",
            fatal=fatal, values=missing,
        )
    return pass_result(rule_id, rule_name, TABLE)


def results_parameters(resdat: pd.DataFrame) -> List[str]:
    return distinct_values(resdat, "Characteristic Name")


# =============================================================================
# Completeness inputs
# =============================================================================

def check_frecom_in_results(resdat: pd.DataFrame, frecomdat: pd.DataFrame) -> CheckResult:
    return _coverage(
        "REC_1", "Checking completeness parameters in results",
        distinct_values(frecomdat), results_parameters(resdat),
        "Parameters in quality control objectives for frequency and completeness not found in results data",
        fatal=False,
    )


def check_results_in_frecom(resdat: pd.DataFrame, frecomdat: pd.DataFrame) -> CheckResult:
    return _coverage(
        "REC_2", "Checking results parameters in completeness objectives",
        results_parameters(resdat), distinct_values(frecomdat),
        "Parameters in results data not found in quality control objectives for frequency and completeness",
        fatal=False,
    )


def check_censored_in_results(resdat: pd.DataFrame, censdat: pd.DataFrame) -> CheckResult:
    return _coverage(
        "REC_3", "Checking censored data parameters in results",
        distinct_values(censdat), results_parameters(resdat),
        "Parameters in censored data not found in results data",
        fatal=False,
    )


def check_frecom_in_censored(frecomdat: pd.DataFrame, censdat: pd.DataFrame) -> CheckResult:
    # No censored count -> completeness cannot be computed for that parameter
    return _coverage(
        "REC_4", "Checking completeness parameters in censored data",
        distinct_values(frecomdat), distinct_values(censdat),
        "Parameters in quality control objectives for frequency and completeness not found in censored data",
        fatal=True,
    )


def completeness_coverage_checks(
    resdat: pd.DataFrame,
    frecomdat: pd.DataFrame,
    censdat: Optional[pd.DataFrame] = None,
) -> List[Callable[[], CheckResult]]:
    checks = [
        lambda: check_frecom_in_results(resdat, frecomdat),
        lambda: check_results_in_frecom(resdat, frecomdat),
    ]
    if censdat is not None:
        checks += [
            lambda: check_censored_in_results(resdat, censdat),
            lambda: check_frecom_in_censored(frecomdat, censdat),
        ]
    return checks


def reconcile_completeness(
    resdat: pd.DataFrame,
    frecomdat: pd.DataFrame,
    censdat: Optional[pd.DataFrame] = None,
    warn: bool = True,
) -> ValidationOutcome:
    """
    Raises StructuralError when a completeness parameter has no censored
    count (only when censored data is supplied). Other gaps are warnings.
    """
    return run_table_checks(TABLE, completeness_coverage_checks(resdat, frecomdat, censdat), warn=warn)


# =============================================================================
# Accuracy and site metadata
# =============================================================================

def check_results_in_accuracy(resdat: pd.DataFrame, accdat: pd.DataFrame) -> CheckResult:
    return _coverage(
        "REC_5", "Checking results parameters in accuracy objectives",
        results_parameters(resdat), distinct_values(accdat),
        "Parameters in results data not found in quality control objectives for accuracy",
        fatal=False,
    )


def check_units_match_accuracy(resdat: pd.DataFrame, accdat: pd.DataFrame) -> CheckResult:
    rule_id, rule_name = "REC_6", "Checking results units against accuracy objectives"
    res_units = units_by_parameter(resdat, "Characteristic Name", "Result Unit")
    acc_units = units_by_parameter(accdat, "Parameter", "uom")

    wrong = []
    for prm in sorted(set(res_units) & set(acc_units)):
        # compare in formatted form so ppt/ppth and s.u./blank agree
        acc_fmt = {format_unit(prm, u) for u in acc_units[prm]}
        extra = [u for u in res_units[prm] if format_unit(prm, u) not in acc_fmt]
        if extra:
            wrong.append(f"{prm} (results: {', '.join(extra)}, accuracy: {', '.join(acc_units[prm])})")

    if wrong:
        return fail_result(
            rule_id, rule_name, TABLE,
            f"Units in results data do not match quality control objectives for accuracy: {'; '.join(wrong)}",
            column_name="Result Unit", values=wrong,
        )
    return pass_result(rule_id, rule_name, TABLE, "Result Unit")


def reconcile_accuracy(resdat: pd.DataFrame, accdat: pd.DataFrame, warn: bool = True) -> ValidationOutcome:
    return run_table_checks(
        TABLE,
        [
            lambda: check_results_in_accuracy(resdat, accdat),
            lambda: check_units_match_accuracy(resdat, accdat),
        ],
        warn=warn,
    )


def check_results_sites(resdat: pd.DataFrame, sitdat: pd.DataFrame) -> CheckResult:
    return _coverage(
        "REC_7", "Checking results locations in site metadata",
        distinct_values(resdat, "Monitoring Location ID"),
        distinct_values(sitdat, "Monitoring Location ID"),
        "Monitoring Location ID in results data not found in site metadata",
        fatal=False,
    )


def reconcile_sites(resdat: pd.DataFrame, sitdat: pd.DataFrame, warn: bool = True) -> ValidationOutcome:
    return run_table_checks(TABLE, [lambda: check_results_sites(resdat, sitdat)], warn=warn)
