from __future__ import annotations

import logging
import math
from typing import Any, Optional

import pandas as pd

from .errors import warn_quality
from .utils import is_missing, parse_number

log = logging.getLogger(__name__)

YSCALES = ("auto", "log", "linear")


def _accuracy_limit(accdat: pd.DataFrame, param: str, unit: Any, col: str) -> Optional[float]:
    """First numeric MDL/UQL for the parameter, preferring rows in the same unit."""
    rows = accdat.loc[accdat["Parameter"].astype(str) == param]
    if not is_missing(unit):
        same_unit = rows.loc[rows["uom"].astype(str) == str(unit)]
        if len(same_unit):
            rows = same_unit
    for v in rows[col]:
        x = parse_number(v)
        if x is not None:
            return x
    return None


def fill_limits(
    resdat: pd.DataFrame,
    accdat: pd.DataFrame,
    param: str,
    warn: bool = True,
) -> pd.DataFrame:
    """
    Rows of `param` with censored Result Value tokens replaced by numbers.

    BDL -> half the row's Quantitation Limit, else half the accuracy MDL.
    AQL -> the row's Quantitation Limit, else the accuracy UQL.
    Entries with no usable limit become NaN.
    """
    names = resdat["Characteristic Name"].astype(str)
    if not (names == param).any():
        raise ValueError(f"Parameter not found in results data: {param}")

    out = resdat.loc[names == param].copy()
    unfilled = []

    def _fill(row: pd.Series) -> float:
        val = row["Result Value"]
        x = parse_number(val)
        if x is not None:
            return x
        token = "" if is_missing(val) else str(val).strip()
        ql = parse_number(row["Quantitation Limit"])
        if token == "BDL":
            limit = ql if ql is not None else _accuracy_limit(accdat, param, row["Result Unit"], "MDL")
            if limit is not None:
                return limit / 2
        elif token == "AQL":
            limit = ql if ql is not None else _accuracy_limit(accdat, param, row["Result Unit"], "UQL")
            if limit is not None:
                return limit
        unfilled.append(token or "NA")
        return math.nan

    out["Result Value"] = out.apply(_fill, axis=1).astype(float)

    if unfilled and warn:
        warn_quality(
            f"No limit available to fill {len(unfilled)} Result Value entries for {param}: "
            f"{', '.join(sorted(set(unfilled)))}",
            stacklevel=2,
        )
    log.info("Filled censored values for %s (%s rows)", param, len(out))
    return out


def yscale(accdat: pd.DataFrame, param: str, yscl: str = "auto") -> bool:
    """
    True if `param` should be shown on a log10 axis.

    yscl="log"/"linear" force the answer; "auto" is True when any accuracy
    entry for the parameter reads "log".
    """
    if yscl not in YSCALES:
        raise ValueError(f"yscl must be one of {', '.join(YSCALES)}, got {yscl!r}")
    if yscl == "log":
        return True
    if yscl == "linear":
        return False

    rows = accdat.loc[accdat["Parameter"].astype(str) == param]
    for v in rows.to_numpy().ravel():
        if isinstance(v, str) and v.strip().lower() == "log":
            return True
    return False
