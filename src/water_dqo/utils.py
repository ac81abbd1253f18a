from __future__ import annotations

import math
import numbers
import re
from datetime import date, datetime
from typing import Any, Iterable, List, Optional, Sequence

import pandas as pd

# Plain decimal or scientific literal, ASCII digits only
_NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


def normalize_text(value: object) -> str:
    """
    Normalize a free-text cell for comparison.
    Removes RTL/LTR markers and NBSP, collapses whitespace.
    """
    s = "" if value is None else str(value)
    s = s.replace("\u200f", "").replace("\u200e", "").replace("\u00A0", " ")
    s = re.sub(r"\s+", " ", s).strip()
    return s


def is_missing(value: Any) -> bool:
    """None, NaN/NaT/pd.NA, or a blank string."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def parse_number(value: Any) -> Optional[float]:
    """
    Float value of a numeric cell or numeric string, else None.
    NaN never counts as a number.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real):
        x = float(value)
        return None if math.isnan(x) else x
    if isinstance(value, str):
        s = value.strip()
        if not _NUMBER_RE.fullmatch(s):
            return None
        return float(s)
    return None


def is_number(value: Any) -> bool:
    return parse_number(value) is not None


def parse_date(value: Any, fmt: str) -> Optional[date]:
    """
    Date of a date-like cell. Strings must match `fmt` exactly.
    Returns None when missing or unparseable.
    """
    if is_missing(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.strptime(value.strip(), fmt).date()
        except ValueError:
            return None
    return None


def display_value(value: Any) -> str:
    if is_missing(value):
        return "NA"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def join_values(values: Iterable[Any]) -> str:
    return ", ".join(display_value(v) for v in values)


def row_numbers(mask: Sequence[bool]) -> List[int]:
    """1-based positions of the True entries."""
    return [i + 1 for i, flag in enumerate(mask) if flag]


def unique_in_order(values: Iterable[Any]) -> List[Any]:
    out: List[Any] = []
    seen = set()
    for v in values:
        key = display_value(v)
        if key in seen:
            continue
        seen.add(key)
        out.append(v)
    return out

