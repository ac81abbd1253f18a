from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional, Sequence

import pandas as pd

from .errors import StructuralError, warn_quality
from .models import CheckResult, ValidationOutcome

log = logging.getLogger(__name__)

CONFIRMATION = "All checks passed!"

# --- RULE DETAILS ---
RULE_DETAILS = {
    "RES_1": "Column names match the results template and none are missing",
    "RES_2": "Activity Type entries are in the controlled vocabulary",
    "RES_3": "Activity Start Date entries are dates in YYYY-MM-DD",
    "RES_4": "Routine data rows have a depth measure or a relative depth name",
    "RES_5": "Activity Depth/Height Measure entries are numeric",
    "RES_6": "Activity Depth/Height Unit entries are ft or m",
    "RES_7": "Activity Depth/Height Measure is within the surface range",
    "RES_8": "Activity Relative Depth Name entries are approved",
    "RES_9": "Characteristic Name entries are approved parameters",
    "RES_10": "Result Value entries are numeric or a censored token",
    "RES_11": "Quantitation Limit entries are blank or numeric",
    "RES_12": "QC Reference Value entries are blank, numeric or a censored token",
    "RES_13": "Result Unit is filled for parameters that need a unit",
    "RES_14": "One Result Unit per Characteristic Name",
    "RES_15": "Result Unit is approved for the Characteristic Name",
    "RES_16": "Result Value is within the plausible range for the parameter",
    "ACC_1": "Column names match the accuracy template and none are missing",
    "ACC_2": "Parameter entries are approved parameters",
    "ACC_3": "uom is filled for parameters that need a unit",
    "ACC_4": "One uom per Parameter",
    "ACC_5": "uom is approved for the Parameter",
    "ACC_6": "MDL and UQL entries are blank or numeric",
    "ACC_7": "Value Range entries are parseable",
    "ACC_8": "Value Ranges per Parameter have no gaps or overlaps",
    "FRE_1": "Column names match the frequency and completeness template and none are missing",
    "FRE_2": "Parameter entries are approved parameters",
    "FRE_3": "Frequency and completeness entries are blank or numeric",
    "FRE_4": "Frequency and completeness entries are between 0 and 100",
    "FRE_5": "One row per Parameter",
    "CEN_1": "Column names match the censored data template and none are missing",
    "CEN_2": "Parameter entries are approved parameters",
    "CEN_3": "Missed and Censored Records are non-negative integers",
    "CEN_4": "One row per Parameter",
    "SIT_1": "Column names match the site metadata template and none are missing",
    "SIT_2": "Monitoring Location ID is filled",
    "SIT_3": "One row per Monitoring Location ID",
    "SIT_4": "Latitude and longitude are numeric and present",
    "SIT_5": "Latitude and longitude are within valid ranges",
    "SIT_6": "Monitoring Location Name is filled",
    "WQX_1": "Column names match the WQX metadata template and none are missing",
    "WQX_2": "Parameter entries are approved parameters",
    "WQX_3": "One row per Parameter",
    "REC_1": "Completeness parameters are present in the results",
    "REC_2": "Results parameters are present in the completeness objectives",
    "REC_3": "Censored data parameters are present in the results",
    "REC_4": "Completeness parameters are present in the censored data",
    "REC_5": "Results parameters are present in the accuracy objectives",
    "REC_6": "Results units agree with the accuracy objectives",
    "REC_7": "Results locations are present in the site metadata",
}

FINAL_COLS = [
    "table_name",
    "rule_id",
    "rule_name",
    "rule_details",
    "severity",
    "status",
    "column_name",
    "rows",
    "values",
    "message",
]


# =============================================================================
# Evaluation
# =============================================================================

def evaluate_checks(table_name: str, checks: Iterable[Callable[[], CheckResult]]) -> ValidationOutcome:
    """
    Run zero-arg checks in order and collect their results.
    Stops at the first fatal result; later checks never run.
    """
    outcome = ValidationOutcome(table_name=table_name)
    for check in checks:
        result = check()
        outcome.results.append(result)
        log.debug("%s | %s | %s", table_name, result.rule_id, result.status.value)
        if result.is_fatal:
            break
    return outcome


def report_outcome(outcome: ValidationOutcome, warn: bool = True) -> List[str]:
    """
    Surface one table's outcome:
      - any fatal result -> StructuralError (warnings are dropped)
      - otherwise each warning -> DataQualityWarning, unless warn=False
      - no issues at all -> a single confirmation message

    Returns the messages that were surfaced.
    """
    errors = outcome.errors
    if errors:
        first = errors[0]
        raise StructuralError(
            f"{first.rule_name}: {first.message}",
            rule_id=first.rule_id,
            table=outcome.table_name,
        )

    if outcome.ok:
        log.info("%s: %s", outcome.table_name, CONFIRMATION)
        return [CONFIRMATION]

    messages = [w.message for w in outcome.warnings]
    if warn:
        for msg in messages:
            log.warning("%s: %s", outcome.table_name, msg)
            warn_quality(msg, stacklevel=3)
    return messages


def run_table_checks(
    table_name: str,
    checks: Sequence[Callable[[], CheckResult]],
    warn: bool = True,
) -> ValidationOutcome:
    outcome = evaluate_checks(table_name, checks)
    report_outcome(outcome, warn=warn)
    return outcome


# =============================================================================
# Export
# =============================================================================

def _compact_int_ranges(nums: List[int]) -> str:
    nums = sorted({int(n) for n in nums if n is not None})
    if not nums:
        return ""
    out = []
    start = prev = nums[0]
    for n in nums[1:]:
        if n == prev + 1:
            prev = n
            continue
        out.append(f"{start}-{prev}" if start != prev else f"{start}")
        start = prev = n
    out.append(f"{start}-{prev}" if start != prev else f"{start}")
    return ",".join(out)


def format_all_checks_for_export(outcomes: Iterable[ValidationOutcome]) -> pd.DataFrame:
    records = []
    for outcome in outcomes:
        for r in outcome.results:
            rec = r.to_record()
            rec["rows"] = _compact_int_ranges(r.rows)
            records.append(rec)

    if not records:
        return pd.DataFrame(columns=FINAL_COLS)

    df = pd.DataFrame.from_records(records)
    df["rule_details"] = df["rule_id"].map(RULE_DETAILS).fillna("")
    for c in FINAL_COLS:
        if c not in df.columns:
            df[c] = ""
    return df[FINAL_COLS]


def build_summary_table(all_checks: pd.DataFrame) -> pd.DataFrame:
    """
    One line per table:
      checks run | fails by severity | overall status
    """
    cols = ["table_name", "checks_run", "critical_fails", "warnings", "status"]
    if all_checks is None or len(all_checks) == 0:
        return pd.DataFrame(columns=cols)

    df = all_checks.copy()
    is_fail = df["status"].eq("Fail")

    summary = (
        df.assign(
            critical=is_fail & df["severity"].eq("Critical"),
            warning=is_fail & df["severity"].eq("Warning"),
        )
        .groupby("table_name", sort=False)
        .agg(checks_run=("rule_id", "count"), critical_fails=("critical", "sum"), warnings=("warning", "sum"))
        .reset_index()
    )

    def _status_rollup(row: pd.Series) -> str:
        if row["critical_fails"] > 0:
            return "Fail"
        if row["warnings"] > 0:
            return "Pass with warnings"
        return "Pass"

    summary["status"] = summary.apply(_status_rollup, axis=1)
    return summary[cols]


def print_rule_kpi(outcome: ValidationOutcome, file_name: Optional[str] = None) -> None:
    """
    Prints one line per table:
      <file> | <table> | <fail>/<total> FAIL
    """
    total = len(outcome.results)
    fails = len(outcome.errors) + len(outcome.warnings)
    print(f"{file_name or '-'} | {outcome.table_name} | {fails}/{total} FAIL")
