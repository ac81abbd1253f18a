from __future__ import annotations

import logging
from typing import Dict, List, Optional

import pandas as pd

from .config import COMPLETENESS_COLUMNS, DEFAULT_CONFIG, ValidationConfig
from .dqo_checks import distinct_values
from .models import CompletenessRow
from .reconcile import reconcile_completeness, results_parameters
from .utils import is_missing, parse_number

log = logging.getLogger(__name__)


def completeness_pct(
    datarec: int,
    qualrec: int,
    missed_censored: int,
    standard: Optional[float],
) -> Optional[float]:
    """
    100 * (1 - (qualrec + missed) / (datarec + missed)).
    None when there is no standard or nothing to divide by.
    """
    if standard is None:
        return None
    denom = datarec + missed_censored
    if denom == 0:
        return None
    return 100 * (1 - (qualrec + missed_censored) / denom)


def _standards(frecomdat: pd.DataFrame) -> Dict[str, Optional[float]]:
    out: Dict[str, Optional[float]] = {}
    for prm, std in zip(frecomdat["Parameter"], frecomdat["% Completeness"]):
        if is_missing(prm):
            continue
        out.setdefault(str(prm), parse_number(std))
    return out


def _censored_counts(censdat: Optional[pd.DataFrame]) -> Dict[str, int]:
    if censdat is None:
        return {}
    out: Dict[str, int] = {}
    for prm, n in zip(censdat["Parameter"], censdat["Missed and Censored Records"]):
        x = parse_number(n)
        if is_missing(prm) or x is None:
            continue
        out.setdefault(str(prm), int(x))
    return out


def completeness_rows(
    resdat: pd.DataFrame,
    frecomdat: pd.DataFrame,
    censdat: Optional[pd.DataFrame] = None,
    cfg: Optional[ValidationConfig] = None,
) -> List[CompletenessRow]:
    """
    One CompletenessRow per parameter found in both the results and the
    completeness objectives, sorted by parameter name. No checks are run.
    """
    cfg = cfg or DEFAULT_CONFIG
    prms = sorted(set(results_parameters(resdat)) & set(distinct_values(frecomdat)))
    standards = _standards(frecomdat)
    censored = _censored_counts(censdat)

    names = resdat["Characteristic Name"].map(lambda v: None if is_missing(v) else str(v))

    rows: List[CompletenessRow] = []
    for prm in prms:
        sub = resdat.loc[names == prm]

        # QC duplicates, blanks, spikes and calibration checks are not data records
        datarec = int(sub["Activity Type"].isin(sorted(cfg.data_activity_types)).sum())
        qualrec = int(sum(not is_missing(v) for v in sub["Result Measure Qualifier"]))
        missed = censored.get(prm, 0)
        standard = standards.get(prm)

        complete = completeness_pct(datarec, qualrec, missed, standard)
        met = None if complete is None else complete >= standard

        rows.append(CompletenessRow(
            parameter=prm,
            datarec=datarec,
            qualrec=qualrec,
            missed_censored=missed,
            standard=standard,
            complete=complete,
            met=met,
        ))
        log.debug("completeness %s: %s", prm, complete)

    return rows


def completeness_frame(rows: List[CompletenessRow]) -> pd.DataFrame:
    out = pd.DataFrame.from_records([r.to_record() for r in rows], columns=list(COMPLETENESS_COLUMNS))
    return out.astype({
        "datarec": "int64",
        "qualrec": "int64",
        "Missed and Censored Records": "int64",
        "standard": "Float64",
        "complete": "Float64",
        "met": "boolean",
    })


def check_completeness(
    resdat: pd.DataFrame,
    frecomdat: pd.DataFrame,
    censdat: Optional[pd.DataFrame] = None,
    cfg: Optional[ValidationConfig] = None,
    warn: Optional[bool] = None,
) -> pd.DataFrame:
    """
    Completeness report for validated results.

    Parameter coverage is reconciled first: a completeness parameter missing
    from supplied censored data raises StructuralError, other gaps warn.
    Undefined `complete`/`met` values come back as pd.NA.
    """
    cfg = cfg or DEFAULT_CONFIG
    warn = cfg.warn if warn is None else warn
    reconcile_completeness(resdat, frecomdat, censdat, warn=warn)
    return completeness_frame(completeness_rows(resdat, frecomdat, censdat, cfg))
