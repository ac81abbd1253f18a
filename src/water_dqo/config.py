from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Tuple


RESULTS_COLUMNS: Tuple[str, ...] = (
    "Monitoring Location ID",
    "Activity Type",
    "Activity Start Date",
    "Activity Start Time",
    "Activity Depth/Height Measure",
    "Activity Depth/Height Unit",
    "Activity Relative Depth Name",
    "Characteristic Name",
    "Result Value",
    "Result Unit",
    "Quantitation Limit",
    "QC Reference Value",
    "Result Measure Qualifier",
    "Result Attribute",
    "Sample Collection Method ID",
    "Project ID",
    "Local Record ID",
    "Result Comment",
)

ACCURACY_COLUMNS: Tuple[str, ...] = (
    "Parameter",
    "uom",
    "MDL",
    "UQL",
    "Value Range",
    "Field Duplicate",
    "Lab Duplicate",
    "Field Blank",
    "Lab Blank",
    "Spike/Check Accuracy",
)

FRECOM_COLUMNS: Tuple[str, ...] = (
    "Parameter",
    "Field Duplicate",
    "Lab Duplicate",
    "Field Blank",
    "Lab Blank",
    "Spike/Check Accuracy",
    "% Completeness",
)

CENSORED_COLUMNS: Tuple[str, ...] = ("Parameter", "Missed and Censored Records")

SITES_COLUMNS: Tuple[str, ...] = (
    "Monitoring Location ID",
    "Monitoring Location Name",
    "Monitoring Location Latitude",
    "Monitoring Location Longitude",
    "Location Group",
)

WQX_COLUMNS: Tuple[str, ...] = (
    "Parameter",
    "Sampling Method Context",
    "Method Speciation",
    "Result Sample Fraction",
    "Analytical Method",
    "Analytical Method Context",
)

COMPLETENESS_COLUMNS: Tuple[str, ...] = (
    "Parameter",
    "datarec",
    "qualrec",
    "Missed and Censored Records",
    "standard",
    "complete",
    "met",
)


@dataclass(frozen=True)
class ValidationConfig:
    # Activity Type controlled vocabulary
    activity_types: FrozenSet[str] = frozenset({
        "Field Msr/Obs",
        "Sample-Routine",
        "Quality Control Field Replicate Msr/Obs",
        "Quality Control Sample-Field Blank",
        "Quality Control Sample-Field Replicate",
        "Quality Control Sample-Lab Blank",
        "Quality Control Sample-Lab Duplicate",
        "Quality Control Sample-Lab Spike",
        "Quality Control-Calibration Check",
        "Quality Control-Duplicate",
        "Quality Control-Meter Lab Blank",
        "Quality Control-Meter Lab Duplicate",
    })

    # Activity types counted as data records (everything else is QC)
    data_activity_types: FrozenSet[str] = frozenset({"Field Msr/Obs", "Sample-Routine"})

    date_format: str = "%Y-%m-%d"

    depth_units: FrozenSet[str] = frozenset({"ft", "m"})
    # Upper bound of a surface sample, as (depth unit, limit) pairs
    max_surface_depth: Tuple[Tuple[str, float], ...] = (("ft", 3.3), ("m", 1.0))

    relative_depths: FrozenSet[str] = frozenset({
        "Surface",
        "Near Surface",
        "Midwater",
        "Near Bottom",
        "Bottom",
    })

    # Tokens standing in for a numeric Result Value / QC Reference Value
    censored_tokens: FrozenSet[str] = frozenset({"BDL", "AQL"})

    # Tokens read as missing by the Excel loader
    na_values: Tuple[str, ...] = ("NA", "na", "")

    # Global switch for DataQualityWarning emission (never affects errors)
    warn: bool = True


DEFAULT_CONFIG = ValidationConfig()
