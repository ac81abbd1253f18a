from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, Tuple

import pandas as pd

from .checks import TABLE as RESULTS, results_checks
from .completeness import check_completeness, completeness_frame, completeness_rows
from .config import DEFAULT_CONFIG, ValidationConfig
from .dqo_checks import (
    ACC,
    CENS,
    FRECOM,
    SITES,
    WQX,
    accuracy_checks,
    censored_checks,
    frecom_checks,
    sites_checks,
    wqx_checks,
)
from .excel_io import TableSource, ValidationInputs, load_inputs
from .formatting import format_results
from .models import CheckResult, ValidationOutcome
from .params import PARAMETER_VOCABULARY, ParameterVocabulary
from .reconcile import reconcile_accuracy, reconcile_completeness, reconcile_sites
from .report import run_table_checks

log = logging.getLogger(__name__)


def run_completeness(
    results: TableSource,
    frecom: TableSource,
    censored: TableSource = None,
    cfg: Optional[ValidationConfig] = None,
    runchk: bool = True,
    warn: Optional[bool] = None,
) -> pd.DataFrame:
    """Load (and check) the inputs, reconcile parameters, compute completeness."""
    cfg = cfg or DEFAULT_CONFIG
    inputs = load_inputs(results=results, frecom=frecom, censored=censored, cfg=cfg, runchk=runchk, warn=warn)
    if inputs.results is None or inputs.frecom is None:
        raise ValueError("Results and frequency and completeness inputs are both required")
    return check_completeness(inputs.results, inputs.frecom, inputs.censored, cfg=cfg, warn=warn)


def run_all_checks(
    inputs: ValidationInputs,
    cfg: Optional[ValidationConfig] = None,
    vocab: Optional[ParameterVocabulary] = None,
    warn: Optional[bool] = None,
) -> Tuple[Optional[pd.DataFrame], List[ValidationOutcome]]:
    """
    Check every table present in `inputs` (raw, not yet checked), then the
    cross-table rules, then compute completeness when objectives are given.

    Raises StructuralError at the first fatal check.
    Returns (completeness frame or None, one outcome per table/cross check).
    """
    cfg = cfg or DEFAULT_CONFIG
    vocab = vocab or PARAMETER_VOCABULARY
    warn = cfg.warn if warn is None else warn

    outcomes: List[ValidationOutcome] = []

    def _run_table(table_name: str, df: Optional[pd.DataFrame], fn: Callable[[], Sequence[Callable[[], CheckResult]]]):
        """
        Runs one table's checks, keeps the outcome.
        `fn` must be a zero-arg callable returning the table's check list.
        """
        if df is None:
            log.info("No %s input, skipping", table_name)
            return
        outcomes.append(run_table_checks(table_name, fn(), warn=warn))

    # ---- Table rules ----
    _run_table(RESULTS, inputs.results, lambda: results_checks(inputs.results, cfg, vocab))
    _run_table(ACC, inputs.accuracy, lambda: accuracy_checks(inputs.accuracy, vocab))
    _run_table(FRECOM, inputs.frecom, lambda: frecom_checks(inputs.frecom, vocab))
    _run_table(CENS, inputs.censored, lambda: censored_checks(inputs.censored, vocab))
    _run_table(SITES, inputs.sites, lambda: sites_checks(inputs.sites))
    _run_table(WQX, inputs.wqx, lambda: wqx_checks(inputs.wqx, vocab))

    if inputs.results is None:
        return None, outcomes

    resdat = format_results(inputs.results, cfg=cfg, vocab=vocab)

    # ---- Cross-table rules ----
    if inputs.accuracy is not None:
        outcomes.append(reconcile_accuracy(resdat, inputs.accuracy, warn=warn))
    if inputs.sites is not None:
        outcomes.append(reconcile_sites(resdat, inputs.sites, warn=warn))

    completeness = None
    if inputs.frecom is not None:
        outcomes.append(reconcile_completeness(resdat, inputs.frecom, inputs.censored, warn=warn))
        completeness = completeness_frame(completeness_rows(resdat, inputs.frecom, inputs.censored, cfg))

    return completeness, outcomes
