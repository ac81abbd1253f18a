"""
Parameter vocabulary: approved water-quality parameters.

Each parameter has a simple name (used throughout the results file after
formatting), a WQX long-form name, the approved units and an optional
plausible value range. The range is expressed in the first approved unit.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple


@dataclass(frozen=True)
class ParamSpec:
    simple: str
    wqx: str
    units: Tuple[str, ...]
    unit_required: bool = True
    value_range: Optional[Tuple[float, float]] = None

    @property
    def range_unit(self) -> Optional[str]:
        return self.units[0] if self.units else None


def _p(simple: str, wqx: str, units: str, value_range=None, unit_required: bool = True) -> ParamSpec:
    # units come in as "a|b|c", same as the source reference sheet
    return ParamSpec(
        simple=simple,
        wqx=wqx,
        units=tuple(u.strip() for u in units.split("|") if u.strip()),
        unit_required=unit_required,
        value_range=value_range,
    )


PARAMS: Tuple[ParamSpec, ...] = (
    _p("Air Temp", "Temperature, air", "deg C|deg F", (-40.0, 50.0)),
    _p("Water Temp", "Temperature, water", "deg C|deg F", (-2.0, 40.0)),
    _p("Conductivity", "Conductivity", "uS/cm", (0.0, 100000.0)),
    _p("Sp Conductance", "Specific conductance", "uS/cm", (0.0, 100000.0)),
    _p("DO", "Dissolved oxygen (DO)", "mg/l", (0.0, 25.0)),
    _p("DO saturation", "Dissolved oxygen saturation", "%", (0.0, 300.0)),
    _p("pH", "pH", "s.u.", (0.0, 14.0), unit_required=False),
    _p("Salinity", "Salinity", "ppth|ppt", (0.0, 70.0)),
    _p("Turbidity", "Turbidity", "NTU", (0.0, 4000.0)),
    _p("TSS", "Total suspended solids", "mg/l", (0.0, 10000.0)),
    _p("Chl a", "Chlorophyll a", "ug/l|mg/l", (0.0, 1000.0)),
    _p("Pheophytin", "Pheophytin a", "ug/l|mg/l", (0.0, 1000.0)),
    _p("TP", "Total Phosphorus, mixed forms", "ug/l|mg/l", (0.0, 10000.0)),
    _p("Ortho P", "Orthophosphate", "ug/l|mg/l", (0.0, 10000.0)),
    _p("TN", "Total Nitrogen, mixed forms", "mg/l|ug/l", (0.0, 100.0)),
    _p("TKN", "Kjeldahl nitrogen", "mg/l|ug/l", (0.0, 100.0)),
    _p("Nitrate", "Nitrate", "mg/l|ug/l", (0.0, 100.0)),
    _p("Nitrite", "Nitrite", "mg/l|ug/l", (0.0, 100.0)),
    _p("Nitrate-Nitrite", "Inorganic nitrogen (nitrate and nitrite)", "mg/l|ug/l", (0.0, 100.0)),
    _p("Ammonia", "Ammonia", "mg/l|ug/l", (0.0, 100.0)),
    _p("Chloride", "Chloride", "mg/l", (0.0, 30000.0)),
    _p("Alkalinity", "Alkalinity, total", "mg/l", (0.0, 1000.0)),
    _p("E.coli", "Escherichia coli", "#/100ml|CFU/100ml|MPN/100ml", (0.0, 1e7)),
    _p("Enterococcus", "Enterococcus", "#/100ml|CFU/100ml|MPN/100ml", (0.0, 1e7)),
    _p("Fecal Coliform", "Fecal Coliform", "#/100ml|CFU/100ml|MPN/100ml", (0.0, 1e7)),
    _p("Secchi Depth", "Depth, Secchi disk depth", "m|ft", (0.0, 50.0)),
    _p("Gage", "Height, gage", "ft|m"),
    _p("Flow", "Flow", "ft3/sec|m3/sec", (0.0, 1e6)),
)


class ParameterVocabulary:
    """
    Read-only lookup over a set of ParamSpec entries.
    Names are matched exactly (case and whitespace sensitive).
    """

    def __init__(self, specs: Iterable[ParamSpec]):
        self.specs: Tuple[ParamSpec, ...] = tuple(specs)
        by_name: Dict[str, ParamSpec] = {}
        for spec in self.specs:
            by_name[spec.simple] = spec
        for spec in self.specs:
            by_name.setdefault(spec.wqx, spec)
        self._by_name: Mapping[str, ParamSpec] = MappingProxyType(by_name)
        self._wqx_to_simple: Mapping[str, str] = MappingProxyType({s.wqx: s.simple for s in self.specs})

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._by_name

    def __len__(self) -> int:
        return len(self.specs)

    def get(self, name: str) -> Optional[ParamSpec]:
        return self._by_name.get(name)

    def simple_name(self, name: str) -> str:
        """WQX name -> simple name; anything else is returned untouched."""
        return self._wqx_to_simple.get(name, name)

    def approved_units(self, name: str) -> Tuple[str, ...]:
        spec = self.get(name)
        return spec.units if spec else ()

    def unit_required(self, name: str) -> bool:
        spec = self.get(name)
        return True if spec is None else spec.unit_required


# Loaded once, shared read-only by every validator
PARAMETER_VOCABULARY = ParameterVocabulary(PARAMS)
