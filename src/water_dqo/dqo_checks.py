from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import pandas as pd

from .checks import check_columns, offending_entries, units_by_parameter
from .config import (
    ACCURACY_COLUMNS,
    CENSORED_COLUMNS,
    DEFAULT_CONFIG,
    FRECOM_COLUMNS,
    SITES_COLUMNS,
    WQX_COLUMNS,
    ValidationConfig,
)
from .models import CheckResult, fail_result, pass_result
from .params import PARAMETER_VOCABULARY, ParameterVocabulary
from .report import run_table_checks
from .utils import is_missing, is_number, join_values, parse_number, row_numbers


def _rows_txt(rows: List[int]) -> str:
    return ", ".join(str(r) for r in rows)


# =============================================================================
# Shared table checks
# =============================================================================

def check_parameter_names(
    df: pd.DataFrame,
    table_name: str,
    rule_id: str,
    vocab: ParameterVocabulary,
    col: str = "Parameter",
) -> CheckResult:
    rule_name = f"Checking {col} entries"
    bad, rows = offending_entries(df[col], lambda v: not is_missing(v) and str(v) not in vocab)
    if rows:
        names = sorted({str(v) for v in bad}, key=str.casefold)
        return fail_result(
            rule_id, rule_name, table_name,
            f"{col} not included in approved parameters: {', '.join(names)}",
            fatal=False, column_name=col, rows=rows, values=names,
        )
    return pass_result(rule_id, rule_name, table_name, col)


def check_unique_entries(df: pd.DataFrame, table_name: str, rule_id: str, col: str = "Parameter") -> CheckResult:
    rule_name = f"Checking duplicate {col} entries"
    values = df[col].tolist()
    seen = set()
    mask = []
    for v in values:
        key = None if is_missing(v) else str(v)
        mask.append(key is not None and key in seen)
        if key is not None:
            seen.add(key)
    rows = row_numbers(mask)
    if rows:
        dupes = sorted({str(values[r - 1]) for r in rows})
        return fail_result(
            rule_id, rule_name, table_name,
            f"Multiple entries for {col} found: {', '.join(dupes)}",
            column_name=col, rows=rows, values=dupes,
        )
    return pass_result(rule_id, rule_name, table_name, col)


def check_numeric_columns(
    df: pd.DataFrame,
    cols: List[str],
    table_name: str,
    rule_id: str,
) -> CheckResult:
    """Blank or numeric entries only; reports the first offending column."""
    rule_name = "Checking numeric entries"
    for col in cols:
        bad, rows = offending_entries(df[col], lambda v: not is_missing(v) and not is_number(v))
        if rows:
            return fail_result(
                rule_id, rule_name, table_name,
                f"Non-numeric entries in {col} found: {join_values(bad)} in row(s) {_rows_txt(rows)}",
                column_name=col, rows=rows, values=bad,
            )
    return pass_result(rule_id, rule_name, table_name)


# =============================================================================
# Accuracy value ranges
# =============================================================================

_BOUND_RE = re.compile(r"^(<=|>=|<|>)\s*(-?\d+(?:\.\d+)?)$")
_BETWEEN_RE = re.compile(r"^(-?\d+(?:\.\d+)?)\s*-\s*(-?\d+(?:\.\d+)?)$")


@dataclass(frozen=True)
class ValueRange:
    lo: float
    hi: float
    lo_closed: bool = True
    hi_closed: bool = True

    def contains(self, x: float) -> bool:
        above = x >= self.lo if self.lo_closed else x > self.lo
        below = x <= self.hi if self.hi_closed else x < self.hi
        return above and below


ALL_VALUES = ValueRange(-math.inf, math.inf, False, False)


def parse_value_range(text: Any) -> Optional[ValueRange]:
    """
    Parse a Value Range cell: "all", "<x", "<=x", ">x", ">=x" or "x-y".
    Blank means "all". Returns None when unparseable.
    """
    if is_missing(text):
        return ALL_VALUES
    s = str(text).strip()
    if s.lower() == "all":
        return ALL_VALUES

    m = _BOUND_RE.match(s)
    if m:
        op, x = m.group(1), float(m.group(2))
        if op == "<":
            return ValueRange(-math.inf, x, False, False)
        if op == "<=":
            return ValueRange(-math.inf, x, False, True)
        if op == ">":
            return ValueRange(x, math.inf, False, False)
        return ValueRange(x, math.inf, True, False)

    m = _BETWEEN_RE.match(s)
    if m:
        lo, hi = float(m.group(1)), float(m.group(2))
        if lo > hi:
            return None
        return ValueRange(lo, hi, True, True)

    return None


def range_problems(ranges: List[ValueRange]) -> tuple[bool, bool]:
    """(has_gap, has_overlap) across the ranges of one parameter, sorted by lower bound."""
    ordered = sorted(ranges, key=lambda r: (r.lo, not r.lo_closed))
    gap = overlap = False
    if not ordered:
        return gap, overlap
    # furthest upper bound covered so far
    hi, hi_closed = ordered[0].hi, ordered[0].hi_closed
    for b in ordered[1:]:
        if hi > b.lo or (hi == b.lo and hi_closed and b.lo_closed):
            overlap = True
        elif hi < b.lo or (hi == b.lo and not hi_closed and not b.lo_closed):
            gap = True
        if b.hi > hi or (b.hi == hi and b.hi_closed):
            hi, hi_closed = b.hi, b.hi_closed
    return gap, overlap


# =============================================================================
# Accuracy
# =============================================================================

ACC = "accuracy"


def check_accuracy_units_present(accdat: pd.DataFrame, vocab: ParameterVocabulary) -> CheckResult:
    rule_id, rule_name, col = "ACC_3", "Checking missing entries in uom", "uom"
    mask = [is_missing(u) and vocab.unit_required(str(p)) for p, u in zip(accdat["Parameter"], accdat[col])]
    rows = row_numbers(mask)
    if rows:
        return fail_result(
            rule_id, rule_name, ACC,
            f"Missing entries in uom found in row(s) {_rows_txt(rows)}",
            column_name=col, rows=rows,
        )
    return pass_result(rule_id, rule_name, ACC, col)


def check_accuracy_one_unit(accdat: pd.DataFrame) -> CheckResult:
    rule_id, rule_name, col = "ACC_4", "Checking more than one unit per Parameter", "uom"
    units = units_by_parameter(accdat, "Parameter", col)
    multi = {p: u for p, u in units.items() if len(u) > 1}
    if multi:
        txt = "; ".join(f"{p} ({', '.join(multi[p])})" for p in sorted(multi))
        return fail_result(
            rule_id, rule_name, ACC,
            f"More than one unit per Parameter: {txt}",
            column_name=col, values=sorted(multi),
        )
    return pass_result(rule_id, rule_name, ACC, col)


def check_accuracy_approved_units(accdat: pd.DataFrame, vocab: ParameterVocabulary) -> CheckResult:
    rule_id, rule_name, col = "ACC_5", "Checking acceptable units for each Parameter", "uom"
    units = units_by_parameter(accdat, "Parameter", col)
    wrong = [
        f"{p} ({u})"
        for p in sorted(units) if p in vocab
        for u in units[p] if u not in vocab.approved_units(p)
    ]
    if wrong:
        return fail_result(
            rule_id, rule_name, ACC,
            f"Incorrect units for Parameter: {', '.join(wrong)}",
            column_name=col, values=wrong,
        )
    return pass_result(rule_id, rule_name, ACC, col)


def check_accuracy_value_ranges(accdat: pd.DataFrame) -> CheckResult:
    rule_id, rule_name, col = "ACC_7", "Checking Value Range entries", "Value Range"
    bad, rows = offending_entries(accdat[col], lambda v: parse_value_range(v) is None)
    if rows:
        return fail_result(
            rule_id, rule_name, ACC,
            f"Incorrect entries in Value Range found: {join_values(bad)} in row(s) {_rows_txt(rows)}",
            column_name=col, rows=rows, values=bad,
        )
    return pass_result(rule_id, rule_name, ACC, col)


def check_accuracy_range_coverage(accdat: pd.DataFrame) -> CheckResult:
    rule_id, rule_name, col = "ACC_8", "Checking gaps and overlaps in Value Range", "Value Range"
    by_param: Dict[str, List[ValueRange]] = {}
    for p, v in zip(accdat["Parameter"], accdat[col]):
        if is_missing(p):
            continue
        by_param.setdefault(str(p), []).append(parse_value_range(v))

    gaps, overlaps = [], []
    for p in sorted(by_param):
        gap, overlap = range_problems(by_param[p])
        if gap:
            gaps.append(p)
        if overlap:
            overlaps.append(p)

    parts = []
    if overlaps:
        parts.append(f"Overlapping entries in Value Range for Parameter: {', '.join(overlaps)}")
    if gaps:
        parts.append(f"Gaps in Value Range for Parameter: {', '.join(gaps)}")
    if parts:
        return fail_result(
            rule_id, rule_name, ACC, "; ".join(parts),
            fatal=False, column_name=col, values=sorted(set(gaps + overlaps)),
        )
    return pass_result(rule_id, rule_name, ACC, col)


def accuracy_checks(
    accdat: pd.DataFrame,
    vocab: ParameterVocabulary = PARAMETER_VOCABULARY,
) -> List[Callable[[], CheckResult]]:
    return [
        lambda: check_columns(accdat, ACCURACY_COLUMNS, ACC, "ACC_1"),
        lambda: check_parameter_names(accdat, ACC, "ACC_2", vocab),
        lambda: check_accuracy_units_present(accdat, vocab),
        lambda: check_accuracy_one_unit(accdat),
        lambda: check_accuracy_approved_units(accdat, vocab),
        lambda: check_numeric_columns(accdat, ["MDL", "UQL"], ACC, "ACC_6"),
        lambda: check_accuracy_value_ranges(accdat),
        lambda: check_accuracy_range_coverage(accdat),
    ]


def validate_accuracy(
    accdat: pd.DataFrame,
    cfg: Optional[ValidationConfig] = None,
    vocab: Optional[ParameterVocabulary] = None,
    warn: Optional[bool] = None,
) -> pd.DataFrame:
    cfg = cfg or DEFAULT_CONFIG
    warn = cfg.warn if warn is None else warn
    run_table_checks(ACC, accuracy_checks(accdat, vocab or PARAMETER_VOCABULARY), warn=warn)
    return accdat


# =============================================================================
# Frequency and completeness
# =============================================================================

FRECOM = "frequency and completeness"


def check_frecom_range(frecomdat: pd.DataFrame) -> CheckResult:
    rule_id, rule_name = "FRE_4", "Checking frequency and completeness entries are percentages"
    flagged: List[str] = []
    rows: List[int] = []
    for col in FRECOM_COLUMNS[1:]:
        nums = [parse_number(v) for v in frecomdat[col]]
        mask = [x is not None and not (0 <= x <= 100) for x in nums]
        col_rows = row_numbers(mask)
        if col_rows:
            flagged.append(f"{col} in row(s) {_rows_txt(col_rows)}")
            rows.extend(col_rows)
    if flagged:
        return fail_result(
            rule_id, rule_name, FRECOM,
            f"Entries outside of 0 - 100 found: {'; '.join(flagged)}",
            fatal=False, rows=sorted(set(rows)),
        )
    return pass_result(rule_id, rule_name, FRECOM)


def frecom_checks(
    frecomdat: pd.DataFrame,
    vocab: ParameterVocabulary = PARAMETER_VOCABULARY,
) -> List[Callable[[], CheckResult]]:
    return [
        lambda: check_columns(frecomdat, FRECOM_COLUMNS, FRECOM, "FRE_1"),
        lambda: check_parameter_names(frecomdat, FRECOM, "FRE_2", vocab),
        lambda: check_numeric_columns(frecomdat, list(FRECOM_COLUMNS[1:]), FRECOM, "FRE_3"),
        lambda: check_frecom_range(frecomdat),
        lambda: check_unique_entries(frecomdat, FRECOM, "FRE_5"),
    ]


def validate_frecom(
    frecomdat: pd.DataFrame,
    cfg: Optional[ValidationConfig] = None,
    vocab: Optional[ParameterVocabulary] = None,
    warn: Optional[bool] = None,
) -> pd.DataFrame:
    cfg = cfg or DEFAULT_CONFIG
    warn = cfg.warn if warn is None else warn
    run_table_checks(FRECOM, frecom_checks(frecomdat, vocab or PARAMETER_VOCABULARY), warn=warn)
    return frecomdat


# =============================================================================
# Censored data
# =============================================================================

CENS = "censored"


def check_censored_counts(censdat: pd.DataFrame) -> CheckResult:
    rule_id, rule_name, col = "CEN_3", "Checking Missed and Censored Records entries", "Missed and Censored Records"

    def _bad(v: Any) -> bool:
        x = parse_number(v)
        return x is None or x < 0 or not float(x).is_integer()

    bad, rows = offending_entries(censdat[col], _bad)
    if rows:
        return fail_result(
            rule_id, rule_name, CENS,
            f"Missing, negative or non-integer entries in Missed and Censored Records found: "
            f"{join_values(bad)} in row(s) {_rows_txt(rows)}",
            column_name=col, rows=rows, values=bad,
        )
    return pass_result(rule_id, rule_name, CENS, col)


def censored_checks(
    censdat: pd.DataFrame,
    vocab: ParameterVocabulary = PARAMETER_VOCABULARY,
) -> List[Callable[[], CheckResult]]:
    return [
        lambda: check_columns(censdat, CENSORED_COLUMNS, CENS, "CEN_1"),
        lambda: check_parameter_names(censdat, CENS, "CEN_2", vocab),
        lambda: check_censored_counts(censdat),
        lambda: check_unique_entries(censdat, CENS, "CEN_4"),
    ]


def validate_censored(
    censdat: pd.DataFrame,
    cfg: Optional[ValidationConfig] = None,
    vocab: Optional[ParameterVocabulary] = None,
    warn: Optional[bool] = None,
) -> pd.DataFrame:
    cfg = cfg or DEFAULT_CONFIG
    warn = cfg.warn if warn is None else warn
    run_table_checks(CENS, censored_checks(censdat, vocab or PARAMETER_VOCABULARY), warn=warn)
    return censdat


# =============================================================================
# Site metadata
# =============================================================================

SITES = "sites"
LAT_COL = "Monitoring Location Latitude"
LON_COL = "Monitoring Location Longitude"


def check_site_ids_present(sitdat: pd.DataFrame) -> CheckResult:
    rule_id, rule_name, col = "SIT_2", "Checking missing Monitoring Location ID", "Monitoring Location ID"
    rows = row_numbers([is_missing(v) for v in sitdat[col]])
    if rows:
        return fail_result(
            rule_id, rule_name, SITES,
            f"Missing entries in Monitoring Location ID found in row(s) {_rows_txt(rows)}",
            column_name=col, rows=rows,
        )
    return pass_result(rule_id, rule_name, SITES, col)


def check_site_coordinates(sitdat: pd.DataFrame) -> CheckResult:
    rule_id, rule_name = "SIT_4", "Checking latitude and longitude entries"
    for col in (LAT_COL, LON_COL):
        bad, rows = offending_entries(sitdat[col], lambda v: not is_number(v))
        if rows:
            return fail_result(
                rule_id, rule_name, SITES,
                f"Missing or non-numeric entries in {col} found: {join_values(bad)} in row(s) {_rows_txt(rows)}",
                column_name=col, rows=rows, values=bad,
            )
    return pass_result(rule_id, rule_name, SITES)


def check_site_coordinate_ranges(sitdat: pd.DataFrame) -> CheckResult:
    rule_id, rule_name = "SIT_5", "Checking latitude and longitude ranges"
    for col, limit in ((LAT_COL, 90.0), (LON_COL, 180.0)):
        bad, rows = offending_entries(sitdat[col], lambda v: abs(parse_number(v)) > limit)
        if rows:
            return fail_result(
                rule_id, rule_name, SITES,
                f"Entries in {col} outside of -{limit:g} to {limit:g} found: {join_values(bad)} "
                f"in row(s) {_rows_txt(rows)}",
                column_name=col, rows=rows, values=bad,
            )
    return pass_result(rule_id, rule_name, SITES)


def check_site_names_present(sitdat: pd.DataFrame) -> CheckResult:
    rule_id, rule_name, col = "SIT_6", "Checking missing Monitoring Location Name", "Monitoring Location Name"
    rows = row_numbers([is_missing(v) for v in sitdat[col]])
    if rows:
        return fail_result(
            rule_id, rule_name, SITES,
            f"Missing entries in Monitoring Location Name found in row(s) {_rows_txt(rows)}",
            fatal=False, column_name=col, rows=rows,
        )
    return pass_result(rule_id, rule_name, SITES, col)


def sites_checks(sitdat: pd.DataFrame) -> List[Callable[[], CheckResult]]:
    return [
        lambda: check_columns(sitdat, SITES_COLUMNS, SITES, "SIT_1"),
        lambda: check_site_ids_present(sitdat),
        lambda: check_unique_entries(sitdat, SITES, "SIT_3", col="Monitoring Location ID"),
        lambda: check_site_coordinates(sitdat),
        lambda: check_site_coordinate_ranges(sitdat),
        lambda: check_site_names_present(sitdat),
    ]


def validate_sites(
    sitdat: pd.DataFrame,
    cfg: Optional[ValidationConfig] = None,
    warn: Optional[bool] = None,
) -> pd.DataFrame:
    cfg = cfg or DEFAULT_CONFIG
    warn = cfg.warn if warn is None else warn
    run_table_checks(SITES, sites_checks(sitdat), warn=warn)
    return sitdat


# =============================================================================
# WQX metadata
# =============================================================================

WQX = "wqx"


def wqx_checks(
    wqxdat: pd.DataFrame,
    vocab: ParameterVocabulary = PARAMETER_VOCABULARY,
) -> List[Callable[[], CheckResult]]:
    return [
        lambda: check_columns(wqxdat, WQX_COLUMNS, WQX, "WQX_1"),
        lambda: check_parameter_names(wqxdat, WQX, "WQX_2", vocab),
        lambda: check_unique_entries(wqxdat, WQX, "WQX_3"),
    ]


def validate_wqx(
    wqxdat: pd.DataFrame,
    cfg: Optional[ValidationConfig] = None,
    vocab: Optional[ParameterVocabulary] = None,
    warn: Optional[bool] = None,
) -> pd.DataFrame:
    cfg = cfg or DEFAULT_CONFIG
    warn = cfg.warn if warn is None else warn
    run_table_checks(WQX, wqx_checks(wqxdat, vocab or PARAMETER_VOCABULARY), warn=warn)
    return wqxdat


def distinct_values(df: pd.DataFrame, col: str = "Parameter") -> List[str]:
    return sorted({str(v) for v in df[col] if not is_missing(v)})
