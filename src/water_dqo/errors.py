from __future__ import annotations

import sys
import warnings
from typing import Optional


class StructuralError(ValueError):
    """
    Irrecoverable problem with an input table (bad columns, unparseable
    required fields, irreconcilable parameter coverage).
    Always fatal for the calling operation.
    """

    def __init__(self, message: str, *, rule_id: Optional[str] = None, table: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.rule_id = rule_id
        self.table = table


class DataQualityWarning(UserWarning):
    """Parseable but suspicious data; processing continues with the values as given."""


# Every validation run reports its own warnings; user filters inserted later still take precedence
warnings.simplefilter("always", DataQualityWarning, append=True)


def warn_quality(message: str, stacklevel: int = 1) -> None:
    """
    Emit a DataQualityWarning attributed to the caller `stacklevel` frames up.

    Active filters apply as usual ("ignore", "error", ...), but no per-module
    registry is kept, so a repeated call warns again under "default".
    """
    frame = sys._getframe(1)
    for _ in range(stacklevel - 1):
        if frame.f_back is None:
            break
        frame = frame.f_back
    warnings.warn_explicit(
        message,
        DataQualityWarning,
        frame.f_code.co_filename,
        frame.f_lineno,
        module=frame.f_globals.get("__name__"),
        registry=None,
    )
