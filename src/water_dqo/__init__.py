"""
water_dqo package.

Data quality objective checks for water quality monitoring data:
- check results, DQO tables and site/WQX metadata
- reconcile parameters across tables
- compute completeness against the objectives
- export detailed check results to Excel
"""

from .checks import validate_results
from .completeness import check_completeness
from .dqo_checks import validate_accuracy, validate_censored, validate_frecom, validate_sites, validate_wqx
from .errors import DataQualityWarning, StructuralError
from .excel_io import ValidationInputs, load_inputs
from .formatting import format_results
from .limits import fill_limits, yscale

__all__ = [
    "DataQualityWarning",
    "StructuralError",
    "ValidationInputs",
    "check_completeness",
    "fill_limits",
    "format_results",
    "load_inputs",
    "validate_accuracy",
    "validate_censored",
    "validate_frecom",
    "validate_results",
    "validate_sites",
    "validate_wqx",
    "yscale",
]
__version__ = "0.1.0"
