from __future__ import annotations

import argparse
import logging
import warnings
from pathlib import Path
from typing import Optional, Sequence

from .errors import StructuralError
from .excel_io import load_inputs, write_report
from .report import build_summary_table, format_all_checks_for_export, print_rule_kpi
from .runner import run_all_checks

log = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="water-dqo",
        description="Validate water quality monitoring data against data quality objectives.",
    )
    parser.add_argument("--results", type=str, required=True, help="Results data workbook (.xlsx)")
    parser.add_argument("--frecom", type=str, default=None,
                        help="Quality control objectives for frequency and completeness (.xlsx)")
    parser.add_argument("--accuracy", type=str, default=None, help="Quality control objectives for accuracy (.xlsx)")
    parser.add_argument("--censored", type=str, default=None, help="Missed and censored records (.xlsx)")
    parser.add_argument("--sites", type=str, default=None, help="Site metadata (.xlsx)")
    parser.add_argument("--wqx", type=str, default=None, help="WQX metadata (.xlsx)")
    parser.add_argument(
        "--output",
        type=str,
        default="dqo_report.xlsx",
        help="Output Excel filename/path",
    )
    parser.add_argument("--no-warn", action="store_true", help="Do not emit data quality warnings")
    parser.add_argument("--verbose", action="store_true", help="Enable INFO logs")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    warnings.filterwarnings(
        "ignore",
        message=r"Data Validation extension is not supported and will be removed",
        category=UserWarning,
    )

    setup_logging(args.verbose)

    try:
        inputs = load_inputs(
            results=args.results,
            accuracy=args.accuracy,
            frecom=args.frecom,
            sites=args.sites,
            wqx=args.wqx,
            censored=args.censored,
            runchk=False,
        )
        completeness, outcomes = run_all_checks(inputs, warn=not args.no_warn)
    except StructuralError as e:
        log.error("%s table: %s", e.table or "input", e)
        return 1

    file_name = Path(args.results).name
    for outcome in outcomes:
        print_rule_kpi(outcome, file_name)

    all_checks = format_all_checks_for_export(outcomes)
    summary = build_summary_table(all_checks)
    output_path = write_report(args.output, completeness, all_checks, summary)

    print(f"Validation complete. Output saved to: {output_path.resolve()}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
