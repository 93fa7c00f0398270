"""
CO₂ comparison across offtakes.

Scales each offtake's avoided/removed CO₂ range (kt per MW·yr) by the
recovered heat so that all offtakes can be compared for the same project,
independent of which one is selected:

    kt/yr = kt/MW·yr × Q_rec

DAC is a removal figure with a single value (min == max); heat offtakes are
displacement proxies against natural gas heating.

Separately, reduced cooling electricity avoids grid emissions:

    tCO₂/yr = avoided MWh × grid factor (kg/kWh == t/MWh)
"""

from dataclasses import dataclass, asdict
from typing import Dict, Mapping, Optional, Tuple

from .reference import Location, OfftakeKind, OfftakeSpec


@dataclass(frozen=True)
class CO2Row:
    """CO₂ range for one offtake at the project scale."""

    kind: OfftakeKind
    label: str
    co2_label: str

    min_kt_per_MWyr: float
    mid_kt_per_MWyr: float
    max_kt_per_MWyr: float

    min_kt_per_year: float
    mid_kt_per_year: float
    max_kt_per_year: float

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data


def build_co2_table(
    recoverable_heat_MW: float,
    offtakes: Mapping[OfftakeKind, OfftakeSpec],
) -> Tuple[CO2Row, ...]:
    """
    Build the CO₂ comparison table for every offtake.

    Args:
        recoverable_heat_MW: Recovered heat power
        offtakes: Offtake reference records

    Returns:
        Tuple of one CO2Row per offtake, in OfftakeKind order
    """
    mw = max(0.0, recoverable_heat_MW)
    rows = []
    for kind in OfftakeKind:
        spec = offtakes[kind]
        co2 = spec.co2_range
        rows.append(CO2Row(
            kind=kind,
            label=spec.label,
            co2_label=spec.co2_label,
            min_kt_per_MWyr=co2.min_kt_per_MWyr,
            mid_kt_per_MWyr=co2.mid_kt_per_MWyr,
            max_kt_per_MWyr=co2.max_kt_per_MWyr,
            min_kt_per_year=co2.min_kt_per_MWyr * mw,
            mid_kt_per_year=co2.mid_kt_per_MWyr * mw,
            max_kt_per_year=co2.max_kt_per_MWyr * mw,
        ))
    return tuple(rows)


def grid_co2_avoided(avoided_cooling_MWh: float, location: Optional[Location]) -> Optional[float]:
    """Tonnes CO₂/yr avoided on the grid; None without a location."""
    if location is None:
        return None
    return avoided_cooling_MWh * location.grid_emission_factor_kg_per_kWh
