from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional, Union

import pandas as pd
from openpyxl import load_workbook
from openpyxl.styles import PatternFill

from .checks import validate_results
from .config import DEFAULT_CONFIG, ValidationConfig
from .dqo_checks import (
    validate_accuracy,
    validate_censored,
    validate_frecom,
    validate_sites,
    validate_wqx,
)
from .formatting import format_results
from .utils import normalize_text

log = logging.getLogger(__name__)

TableSource = Union[pd.DataFrame, str, Path, None]

RED_FILL = PatternFill(start_color="FFFF0000", end_color="FFFF0000", fill_type="solid")

# Columns kept as text so censored tokens and odd entries survive the read
_TEXT_COLUMNS = {
    "results": ["Result Value", "QC Reference Value", "Quantitation Limit", "Activity Start Time"],
    "accuracy": ["Value Range", "MDL", "UQL"],
}


@dataclass
class ValidationInputs:
    """The tables of one dataset; any of them may be absent."""
    results: Optional[pd.DataFrame] = None
    accuracy: Optional[pd.DataFrame] = None
    frecom: Optional[pd.DataFrame] = None
    sites: Optional[pd.DataFrame] = None
    wqx: Optional[pd.DataFrame] = None
    censored: Optional[pd.DataFrame] = None


def read_table(path: Union[str, Path], kind: str, cfg: Optional[ValidationConfig] = None) -> pd.DataFrame:
    """Read the first sheet of an .xlsx input. `kind` is a ValidationInputs field name."""
    cfg = cfg or DEFAULT_CONFIG
    path = Path(path).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"Input file for {kind} not found: {path}")

    dtype = {c: str for c in _TEXT_COLUMNS.get(kind, [])}
    df = pd.read_excel(
        path,
        sheet_name=0,
        dtype=dtype or None,
        na_values=list(cfg.na_values),
        engine="openpyxl",
    )
    # NBSP and stray whitespace in header cells are common in hand-made templates
    df.columns = [normalize_text(c) for c in df.columns]
    log.info("Loaded %s from %s (%s rows)", kind, path.name, len(df))
    return df


def _validators(cfg: ValidationConfig, warn: bool) -> Dict[str, Callable[[pd.DataFrame], pd.DataFrame]]:
    return {
        "results": lambda df: format_results(validate_results(df, cfg=cfg, warn=warn), cfg=cfg),
        "accuracy": lambda df: validate_accuracy(df, cfg=cfg, warn=warn),
        "frecom": lambda df: validate_frecom(df, cfg=cfg, warn=warn),
        "sites": lambda df: validate_sites(df, cfg=cfg, warn=warn),
        "wqx": lambda df: validate_wqx(df, cfg=cfg, warn=warn),
        "censored": lambda df: validate_censored(df, cfg=cfg, warn=warn),
    }


def load_inputs(
    results: TableSource = None,
    accuracy: TableSource = None,
    frecom: TableSource = None,
    sites: TableSource = None,
    wqx: TableSource = None,
    censored: TableSource = None,
    cfg: Optional[ValidationConfig] = None,
    runchk: bool = True,
    warn: Optional[bool] = None,
) -> ValidationInputs:
    """
    Bundle the inputs of one dataset.

    Each argument may be:
      - a DataFrame -> used as-is (assumed already checked and formatted)
      - a path to an .xlsx file -> read, then checked (and the results
        formatted) when runchk=True
      - None -> absent
    """
    cfg = cfg or DEFAULT_CONFIG
    warn = cfg.warn if warn is None else warn
    validators = _validators(cfg, warn)

    sources = {
        "results": results,
        "accuracy": accuracy,
        "frecom": frecom,
        "sites": sites,
        "wqx": wqx,
        "censored": censored,
    }
    loaded = {}
    for kind, src in sources.items():
        if src is None or isinstance(src, pd.DataFrame):
            loaded[kind] = src
            continue
        df = read_table(src, kind, cfg)
        loaded[kind] = validators[kind](df) if runchk else df

    return ValidationInputs(**loaded)


# =============================================================================
# Report output
# =============================================================================

def _excel_safe(df: pd.DataFrame) -> pd.DataFrame:
    # pd.NA in nullable columns -> empty cells
    return df.astype(object).where(df.notna(), None)


def write_report(
    output_xlsx_path: Union[str, Path],
    completeness: Optional[pd.DataFrame],
    all_checks: pd.DataFrame,
    summary: Optional[pd.DataFrame] = None,
) -> Path:
    output_path = Path(output_xlsx_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        if summary is not None:
            summary.to_excel(writer, sheet_name="Summary", index=False)
        if completeness is not None:
            _excel_safe(completeness).to_excel(writer, sheet_name="Completeness", index=False)
        all_checks.to_excel(writer, sheet_name="Checks", index=False)

    if completeness is not None:
        apply_red_highlights(output_path, completeness)
    log.info("Report written to %s", output_path)
    return output_path


def apply_red_highlights(
    output_xlsx_path: Union[str, Path],
    completeness: pd.DataFrame,
    sheet_name: str = "Completeness",
) -> int:
    """
    Fill every row of `sheet_name` whose standard is not met in red.
    Rows with an undefined `met` are left alone. Returns the number of rows filled.
    """
    if completeness is None or len(completeness) == 0 or "met" not in completeness.columns:
        return 0

    wb = load_workbook(output_xlsx_path)
    if sheet_name not in wb.sheetnames:
        return 0
    ws = wb[sheet_name]

    filled = 0
    for i, met in enumerate(completeness["met"].tolist()):
        if met is pd.NA or met is None or bool(met):
            continue
        excel_row = i + 2  # header is row 1
        for cell in ws[excel_row]:
            cell.fill = RED_FILL
        filled += 1

    wb.save(output_xlsx_path)
    return filled
