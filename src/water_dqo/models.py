from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, List, Optional


class Severity(str, Enum):
    CRITICAL = "Critical"
    WARNING = "Warning"
    INFO = "Info"


class Status(str, Enum):
    PASS_ = "Pass"
    FAIL = "Fail"


@dataclass
class CheckResult:
    """
    Outcome of one check on one table.

    Reads as a tagged union:
      - status PASS_                      -> pass
      - status FAIL, severity WARNING     -> warning (processing continues)
      - status FAIL, severity CRITICAL    -> fatal (processing aborts)
    """
    # --- required ---
    rule_id: str
    rule_name: str
    severity: Severity
    table_name: str
    status: Status
    message: str

    # --- optional / contextual ---
    column_name: Optional[str] = None
    rows: List[int] = field(default_factory=list)     # 1-based row numbers
    values: List[Any] = field(default_factory=list)   # offending literals, row order

    @property
    def is_fatal(self) -> bool:
        return self.status == Status.FAIL and self.severity == Severity.CRITICAL

    @property
    def is_warning(self) -> bool:
        return self.status == Status.FAIL and self.severity == Severity.WARNING

    @property
    def passed(self) -> bool:
        return self.status != Status.FAIL

    def to_record(self) -> dict:
        rec = asdict(self)
        rec["status"] = self.status.value
        rec["severity"] = self.severity.value
        rec["rows"] = ", ".join(str(r) for r in self.rows)
        rec["values"] = ", ".join("NA" if v is None else str(v) for v in self.values)
        return rec


def pass_result(rule_id: str, rule_name: str, table_name: str, column_name: Optional[str] = None) -> CheckResult:
    return CheckResult(
        rule_id=rule_id,
        rule_name=rule_name,
        severity=Severity.INFO,
        table_name=table_name,
        status=Status.PASS_,
        message="",
        column_name=column_name,
    )


def fail_result(
    rule_id: str,
    rule_name: str,
    table_name: str,
    message: str,
    *,
    fatal: bool = True,
    column_name: Optional[str] = None,
    rows: Optional[List[int]] = None,
    values: Optional[List[Any]] = None,
) -> CheckResult:
    return CheckResult(
        rule_id=rule_id,
        rule_name=rule_name,
        severity=Severity.CRITICAL if fatal else Severity.WARNING,
        table_name=table_name,
        status=Status.FAIL,
        message=message,
        column_name=column_name,
        rows=list(rows or []),
        values=list(values or []),
    )


@dataclass
class ValidationOutcome:
    """All check results of one validation pass over one table."""
    table_name: str
    results: List[CheckResult] = field(default_factory=list)

    @property
    def errors(self) -> List[CheckResult]:
        return [r for r in self.results if r.is_fatal]

    @property
    def warnings(self) -> List[CheckResult]:
        return [r for r in self.results if r.is_warning]

    @property
    def ok(self) -> bool:
        return not self.errors and not self.warnings


@dataclass(frozen=True)
class CompletenessRow:
    parameter: str
    datarec: int
    qualrec: int
    missed_censored: int
    standard: Optional[float]
    complete: Optional[float]
    met: Optional[bool]

    def to_record(self) -> dict:
        return {
            "Parameter": self.parameter,
            "datarec": self.datarec,
            "qualrec": self.qualrec,
            "Missed and Censored Records": self.missed_censored,
            "standard": self.standard,
            "complete": self.complete,
            "met": self.met,
        }
