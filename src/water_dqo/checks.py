from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Sequence

import pandas as pd

from .config import DEFAULT_CONFIG, RESULTS_COLUMNS, ValidationConfig
from .models import CheckResult, fail_result, pass_result
from .params import PARAMETER_VOCABULARY, ParameterVocabulary
from .report import run_table_checks
from .utils import (
    is_missing,
    is_number,
    join_values,
    parse_date,
    parse_number,
    row_numbers,
    unique_in_order,
)

TABLE = "results"


# =============================================================================
# Shared helpers (also used by the DQO table checks)
# =============================================================================

def check_columns(
    df: pd.DataFrame,
    expected: Sequence[str],
    table_name: str,
    rule_id: str,
) -> CheckResult:
    """
    Exact column-name match: no unknown names, no missing names.
    Unknown names are reported first since they are usually misspellings
    of the missing ones.
    """
    rule_name = "Checking column names"
    cols = [str(c) for c in df.columns]

    unknown = [c for c in cols if c not in expected]
    if unknown:
        return fail_result(
            rule_id, rule_name, table_name,
            f"Please correct the column names or remove: {', '.join(unknown)}",
            values=unknown,
        )

    missing = [c for c in expected if c not in cols]
    if missing:
        return fail_result(
            rule_id, rule_name, table_name,
            f"Missing the following columns: {', '.join(missing)}",
            values=missing,
        )

    return pass_result(rule_id, rule_name, table_name)


def offending_entries(
    series: pd.Series,
    is_bad: Callable[[Any], bool],
) -> tuple[List[Any], List[int]]:
    """Offending values and their 1-based rows, in row order."""
    values = series.tolist()
    mask = [is_bad(v) for v in values]
    bad_values = [v for v, flag in zip(values, mask) if flag]
    return bad_values, row_numbers(mask)


def _rows_txt(rows: List[int]) -> str:
    return ", ".join(str(r) for r in rows)


# =============================================================================
# Results checks
# =============================================================================

def check_results_columns(resdat: pd.DataFrame) -> CheckResult:
    return check_columns(resdat, RESULTS_COLUMNS, TABLE, "RES_1")


def check_activity_types(resdat: pd.DataFrame, cfg: ValidationConfig) -> CheckResult:
    rule_id, rule_name, col = "RES_2", "Checking valid Activity Types", "Activity Type"
    bad, rows = offending_entries(
        resdat[col], lambda v: is_missing(v) or str(v) not in cfg.activity_types
    )
    if rows:
        distinct = unique_in_order(bad)
        return fail_result(
            rule_id, rule_name, TABLE,
            f"Incorrect Activity Type found: {join_values(distinct)} in row(s) {_rows_txt(rows)}",
            column_name=col, rows=rows, values=distinct,
        )
    return pass_result(rule_id, rule_name, TABLE, col)


def check_start_dates(resdat: pd.DataFrame, cfg: ValidationConfig) -> CheckResult:
    rule_id, rule_name, col = "RES_3", "Checking date formats", "Activity Start Date"
    bad, rows = offending_entries(resdat[col], lambda v: parse_date(v, cfg.date_format) is None)
    if rows:
        return fail_result(
            rule_id, rule_name, TABLE,
            f"Missing or incorrect date format in Activity Start Date found in row(s) {_rows_txt(rows)}, "
            f"dates must be formatted as YYYY-MM-DD",
            column_name=col, rows=rows, values=bad,
        )
    return pass_result(rule_id, rule_name, TABLE, col)


def check_depth_present(resdat: pd.DataFrame, cfg: ValidationConfig) -> CheckResult:
    rule_id, rule_name = "RES_4", "Checking depth data are present"
    mask = [
        str(act) in cfg.data_activity_types and is_missing(msr) and is_missing(rel)
        for act, msr, rel in zip(
            resdat["Activity Type"],
            resdat["Activity Depth/Height Measure"],
            resdat["Activity Relative Depth Name"],
        )
    ]
    rows = row_numbers(mask)
    if rows:
        return fail_result(
            rule_id, rule_name, TABLE,
            "Missing entries for both Activity Depth/Height Measure and Activity Relative Depth Name "
            f"found in row(s) {_rows_txt(rows)}",
            column_name="Activity Depth/Height Measure", rows=rows,
        )
    return pass_result(rule_id, rule_name, TABLE)


def check_depth_numeric(resdat: pd.DataFrame) -> CheckResult:
    rule_id, rule_name, col = "RES_5", "Checking non-numeric Activity Depth/Height Measure", "Activity Depth/Height Measure"
    bad, rows = offending_entries(resdat[col], lambda v: not is_missing(v) and not is_number(v))
    if rows:
        return fail_result(
            rule_id, rule_name, TABLE,
            f"Non-numeric entries in Activity Depth/Height Measure found: {join_values(bad)} "
            f"in row(s) {_rows_txt(rows)}",
            column_name=col, rows=rows, values=bad,
        )
    return pass_result(rule_id, rule_name, TABLE, col)


def check_depth_units(resdat: pd.DataFrame, cfg: ValidationConfig) -> CheckResult:
    rule_id, rule_name, col = "RES_6", "Checking Activity Depth/Height Unit", "Activity Depth/Height Unit"
    bad, rows = offending_entries(resdat[col], lambda v: not is_missing(v) and str(v) not in cfg.depth_units)
    if rows:
        distinct = unique_in_order(bad)
        return fail_result(
            rule_id, rule_name, TABLE,
            f"Incorrect entries in Activity Depth/Height Unit found: {join_values(distinct)} "
            f"in row(s) {_rows_txt(rows)}",
            column_name=col, rows=rows, values=distinct,
        )
    return pass_result(rule_id, rule_name, TABLE, col)


def check_depth_range(resdat: pd.DataFrame, cfg: ValidationConfig) -> CheckResult:
    rule_id, rule_name, col = "RES_7", "Checking Activity Depth/Height Measure range", "Activity Depth/Height Measure"
    max_depth = dict(cfg.max_surface_depth)

    def _out_of_range(msr: Any, unit: Any) -> bool:
        x = parse_number(msr)
        limit = max_depth.get(str(unit)) if not is_missing(unit) else None
        if x is None or limit is None:
            return False
        return x < 0 or x > limit

    mask = [_out_of_range(m, u) for m, u in zip(resdat[col], resdat["Activity Depth/Height Unit"])]
    rows = row_numbers(mask)
    if rows:
        limits = ", ".join(f"{v:g} {u}" for u, v in sorted(cfg.max_surface_depth))
        return fail_result(
            rule_id, rule_name, TABLE,
            f"Activity Depth/Height Measure out of range (max {limits}) in row(s) {_rows_txt(rows)}",
            fatal=False, column_name=col, rows=rows,
        )
    return pass_result(rule_id, rule_name, TABLE, col)


def check_relative_depths(resdat: pd.DataFrame, cfg: ValidationConfig) -> CheckResult:
    rule_id, rule_name, col = "RES_8", "Checking Activity Relative Depth Name entries", "Activity Relative Depth Name"
    bad, rows = offending_entries(resdat[col], lambda v: not is_missing(v) and str(v) not in cfg.relative_depths)
    if rows:
        distinct = unique_in_order(bad)
        return fail_result(
            rule_id, rule_name, TABLE,
            f"Incorrect entries in Activity Relative Depth Name found: {join_values(distinct)} "
            f"in row(s) {_rows_txt(rows)}",
            fatal=False, column_name=col, rows=rows, values=distinct,
        )
    return pass_result(rule_id, rule_name, TABLE, col)


def check_characteristic_names(resdat: pd.DataFrame, vocab: ParameterVocabulary) -> CheckResult:
    rule_id, rule_name, col = "RES_9", "Checking Characteristic Name entries", "Characteristic Name"
    bad, rows = offending_entries(resdat[col], lambda v: not is_missing(v) and str(v) not in vocab)
    if rows:
        names = sorted({str(v) for v in bad}, key=str.casefold)
        return fail_result(
            rule_id, rule_name, TABLE,
            f"Characteristic Name not included in approved parameters: {', '.join(names)}",
            fatal=False, column_name=col, rows=rows, values=names,
        )
    return pass_result(rule_id, rule_name, TABLE, col)


def check_result_values(resdat: pd.DataFrame, cfg: ValidationConfig) -> CheckResult:
    rule_id, rule_name, col = "RES_10", "Checking entries in Result Value", "Result Value"

    def _bad(v: Any) -> bool:
        if is_number(v):
            return False
        return is_missing(v) or str(v).strip() not in cfg.censored_tokens

    bad, rows = offending_entries(resdat[col], _bad)
    if rows:
        return fail_result(
            rule_id, rule_name, TABLE,
            f"Incorrect entries in Result Value found: {join_values(bad)} in row(s) {_rows_txt(rows)}",
            column_name=col, rows=rows, values=bad,
        )
    return pass_result(rule_id, rule_name, TABLE, col)


def check_quantitation_limits(resdat: pd.DataFrame) -> CheckResult:
    rule_id, rule_name, col = "RES_11", "Checking entries in Quantitation Limit", "Quantitation Limit"
    bad, rows = offending_entries(resdat[col], lambda v: not is_missing(v) and not is_number(v))
    if rows:
        return fail_result(
            rule_id, rule_name, TABLE,
            f"Non-numeric entries in Quantitation Limit found: {join_values(bad)} in row(s) {_rows_txt(rows)}",
            column_name=col, rows=rows, values=bad,
        )
    return pass_result(rule_id, rule_name, TABLE, col)


def check_qc_reference_values(resdat: pd.DataFrame, cfg: ValidationConfig) -> CheckResult:
    rule_id, rule_name, col = "RES_12", "Checking entries in QC Reference Value", "QC Reference Value"

    def _bad(v: Any) -> bool:
        if is_missing(v) or is_number(v):
            return False
        return str(v).strip() not in cfg.censored_tokens

    bad, rows = offending_entries(resdat[col], _bad)
    if rows:
        return fail_result(
            rule_id, rule_name, TABLE,
            f"Incorrect entries in QC Reference Value found: {join_values(bad)} in row(s) {_rows_txt(rows)}",
            column_name=col, rows=rows, values=bad,
        )
    return pass_result(rule_id, rule_name, TABLE, col)


def check_units_present(resdat: pd.DataFrame, vocab: ParameterVocabulary) -> CheckResult:
    rule_id, rule_name, col = "RES_13", "Checking missing entries in Result Unit", "Result Unit"
    mask = [
        is_missing(unit) and vocab.unit_required(str(prm))
        for prm, unit in zip(resdat["Characteristic Name"], resdat[col])
    ]
    rows = row_numbers(mask)
    if rows:
        return fail_result(
            rule_id, rule_name, TABLE,
            f"Missing entries in Result Unit found in row(s) {_rows_txt(rows)}",
            column_name=col, rows=rows,
        )
    return pass_result(rule_id, rule_name, TABLE, col)


def units_by_parameter(df: pd.DataFrame, prm_col: str, unit_col: str) -> Dict[str, List[str]]:
    """Distinct non-null units per parameter, first-occurrence order."""
    out: Dict[str, List[str]] = {}
    for prm, unit in zip(df[prm_col], df[unit_col]):
        if is_missing(prm) or is_missing(unit):
            continue
        units = out.setdefault(str(prm), [])
        u = str(unit)
        if u not in units:
            units.append(u)
    return out


def check_one_unit_per_parameter(resdat: pd.DataFrame) -> CheckResult:
    rule_id, rule_name, col = "RES_14", "Checking more than one unit per Characteristic Name", "Result Unit"
    units = units_by_parameter(resdat, "Characteristic Name", col)
    multi = {prm: u for prm, u in units.items() if len(u) > 1}
    if multi:
        txt = "; ".join(f"{prm} ({', '.join(multi[prm])})" for prm in sorted(multi))
        return fail_result(
            rule_id, rule_name, TABLE,
            f"More than one unit per parameter in Characteristic Name: {txt}",
            column_name=col, values=sorted(multi),
        )
    return pass_result(rule_id, rule_name, TABLE, col)


def check_approved_units(resdat: pd.DataFrame, vocab: ParameterVocabulary) -> CheckResult:
    rule_id, rule_name, col = "RES_15", "Checking acceptable units for each Characteristic Name", "Result Unit"
    units = units_by_parameter(resdat, "Characteristic Name", col)
    wrong = []
    for prm in sorted(units):
        if prm not in vocab:
            continue
        for u in units[prm]:
            if u not in vocab.approved_units(prm):
                wrong.append(f"{prm} ({u})")
    if wrong:
        return fail_result(
            rule_id, rule_name, TABLE,
            f"Incorrect units for parameter in Characteristic Name: {', '.join(wrong)}",
            column_name=col, values=wrong,
        )
    return pass_result(rule_id, rule_name, TABLE, col)


def check_value_ranges(resdat: pd.DataFrame, vocab: ParameterVocabulary) -> CheckResult:
    rule_id, rule_name, col = "RES_16", "Checking Result Value plausible ranges", "Result Value"
    flagged: Dict[str, List[int]] = {}
    for i, (prm, val, unit) in enumerate(zip(resdat["Characteristic Name"], resdat[col], resdat["Result Unit"]), start=1):
        spec = vocab.get(str(prm)) if not is_missing(prm) else None
        x = parse_number(val)
        if spec is None or spec.value_range is None or x is None:
            continue
        if is_missing(unit):
            applies = not spec.unit_required
        else:
            applies = str(unit) == spec.range_unit
        lo, hi = spec.value_range
        if applies and not (lo <= x <= hi):
            flagged.setdefault(str(prm), []).append(i)

    if flagged:
        txt = "; ".join(f"{prm} in row(s) {_rows_txt(flagged[prm])}" for prm in sorted(flagged))
        rows = sorted(r for rs in flagged.values() for r in rs)
        return fail_result(
            rule_id, rule_name, TABLE,
            f"Result Value outside the plausible range for parameter: {txt}",
            fatal=False, column_name=col, rows=rows, values=sorted(flagged),
        )
    return pass_result(rule_id, rule_name, TABLE, col)


# =============================================================================
# Table validator
# =============================================================================

def results_checks(
    resdat: pd.DataFrame,
    cfg: ValidationConfig = DEFAULT_CONFIG,
    vocab: ParameterVocabulary = PARAMETER_VOCABULARY,
) -> List[Callable[[], CheckResult]]:
    """Results checks in run order, as zero-arg callables."""
    return [
        lambda: check_results_columns(resdat),
        lambda: check_activity_types(resdat, cfg),
        lambda: check_start_dates(resdat, cfg),
        lambda: check_depth_present(resdat, cfg),
        lambda: check_depth_numeric(resdat),
        lambda: check_depth_units(resdat, cfg),
        lambda: check_depth_range(resdat, cfg),
        lambda: check_relative_depths(resdat, cfg),
        lambda: check_characteristic_names(resdat, vocab),
        lambda: check_result_values(resdat, cfg),
        lambda: check_quantitation_limits(resdat),
        lambda: check_qc_reference_values(resdat, cfg),
        lambda: check_units_present(resdat, vocab),
        lambda: check_one_unit_per_parameter(resdat),
        lambda: check_approved_units(resdat, vocab),
        lambda: check_value_ranges(resdat, vocab),
    ]


def validate_results(
    resdat: pd.DataFrame,
    cfg: Optional[ValidationConfig] = None,
    vocab: Optional[ParameterVocabulary] = None,
    warn: Optional[bool] = None,
) -> pd.DataFrame:
    """
    Run all results checks.

    Raises StructuralError at the first fatal check. Warnings are emitted
    together afterwards (unless warn=False). Returns `resdat` unchanged.
    """
    cfg = cfg or DEFAULT_CONFIG
    vocab = vocab or PARAMETER_VOCABULARY
    warn = cfg.warn if warn is None else warn
    run_table_checks(TABLE, results_checks(resdat, cfg, vocab), warn=warn)
    return resdat
