from __future__ import annotations

import re
from datetime import datetime, time
from typing import Any, Optional

import pandas as pd

from .config import DEFAULT_CONFIG, ValidationConfig
from .params import PARAMETER_VOCABULARY, ParameterVocabulary
from .utils import is_missing, parse_date

# Excel often hands back times as "1899-12-31 10:30:00"
_TIME_SECONDS_RE = re.compile(r"^(\d{1,2}:\d{2}):00$")


def format_time(value: Any) -> Optional[str]:
    if is_missing(value):
        return None
    if isinstance(value, (datetime, time)):
        return value.strftime("%H:%M")
    token = str(value).strip().split()[-1]
    m = _TIME_SECONDS_RE.match(token)
    return m.group(1) if m else token


def format_unit(param: Any, unit: Any) -> Optional[str]:
    if is_missing(unit):
        return None
    u = str(unit).strip()
    if u == "ppt":
        return "ppth"
    if param == "pH" and u == "s.u.":
        return None
    return u


def format_results(
    resdat: pd.DataFrame,
    cfg: Optional[ValidationConfig] = None,
    vocab: Optional[ParameterVocabulary] = None,
) -> pd.DataFrame:
    """
    Normalize a validated results table for downstream analysis:
      - Activity Start Date -> datetime.date
      - Activity Start Time -> "HH:MM"
      - Result Unit trimmed, ppt -> ppth, pH s.u. -> missing
      - WQX parameter names -> simple names

    Returns a new frame; `resdat` is left untouched.
    """
    cfg = cfg or DEFAULT_CONFIG
    vocab = vocab or PARAMETER_VOCABULARY

    out = resdat.copy()
    out["Activity Start Date"] = out["Activity Start Date"].map(lambda v: parse_date(v, cfg.date_format))
    out["Activity Start Time"] = out["Activity Start Time"].map(format_time)
    out["Characteristic Name"] = out["Characteristic Name"].map(
        lambda v: v if is_missing(v) else vocab.simple_name(str(v))
    )
    # object dtype so a dropped unit stays None instead of becoming NaN
    out["Result Unit"] = pd.Series(
        [format_unit(p, u) for p, u in zip(out["Characteristic Name"], out["Result Unit"])],
        index=out.index,
        dtype=object,
    )
    return out
