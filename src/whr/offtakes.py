"""
Physical outputs of each heat offtake.

Combines the thermal core, the performance ramps and the per-offtake
reference yields:

    water (FO, AWH)  = Q_rec × m³/MW·yr × f(T)
    DAC CO₂          = MW·yr × tCO₂/MW·yr × f(T)
    DAC water        = MW·yr × m³/MW·yr × f(T)   (own constant, not via tCO₂)
    homes heated     = E_year / MWh per home-year
    greenhouse area  = E_year / MWh per ha·yr × f(T)

Food/brewery and hot water have no yield model; they get a temperature
suitability flag only.

A per-MW·yr normalized set is also produced so that projects of different
size can be compared directly.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Mapping, Optional, Tuple

from .reference import (
    DAC_WATER_M3_PER_MW_YEAR,
    DEFAULT_MWH_PER_HOME_YEAR,
    DEFAULT_PER_CAPITA_GPCD,
    GAL_TO_M3,
    HOURS_PER_YEAR,
    OfftakeKind,
    OfftakeSpec,
)
from .ramps import PerformanceFactors
from .thermal import ThermalResult


OUTPUT_UNITS: Dict[OfftakeKind, str] = {
    OfftakeKind.DAC: "tCO₂/yr",
    OfftakeKind.WATER_TREATMENT_FO: "m³/yr",
    OfftakeKind.ATMOSPHERIC_WATER: "m³/yr",
    OfftakeKind.DISTRICT_HEAT: "homes",
    OfftakeKind.GREENHOUSES: "ha",
    OfftakeKind.FOOD_BREWERY: "",
    OfftakeKind.HOT_WATER: "",
}


def per_capita_water_m3(gpcd: float) -> Optional[float]:
    """
    Annual per-person water use in m³.

    Args:
        gpcd: Gallons per capita per day

    Returns:
        m³ per person-year, or None if gpcd is not positive
    """
    if gpcd <= 0:
        return None
    return gpcd * GAL_TO_M3 * 365


def people_served(water_m3: float, m3_per_person_year: Optional[float]) -> Optional[float]:
    """People whose annual water use equals ``water_m3``."""
    if m3_per_person_year is None or m3_per_person_year <= 0:
        return None
    return water_m3 / m3_per_person_year


def _ratio(numerator: float, denominator: float) -> Optional[float]:
    if denominator <= 0:
        return None
    return numerator / denominator


@dataclass(frozen=True)
class OfftakeOutputs:
    """Annual physical outputs for every offtake."""

    fo_water_m3: float
    awh_water_m3: float
    dac_tco2: float
    dac_water_m3: float
    homes_heated: Optional[float]
    greenhouse_ha: float

    # People-served equivalents (None when per-capita use is undefined)
    m3_per_person_year: Optional[float]
    fo_people_served: Optional[float]
    awh_people_served: Optional[float]
    dac_people_served: Optional[float]

    # Qualitative suitability of the loop temperature
    district_heat_high_grade: bool
    food_brewery_suitable: bool
    hot_water_suitable: bool

    def physical_yield(self, kind: OfftakeKind) -> Optional[float]:
        """
        Headline annual yield for an offtake (see ``OUTPUT_UNITS``).

        Returns None for offtakes without a yield model.
        """
        kind = OfftakeKind.parse(kind)
        return {
            OfftakeKind.DAC: self.dac_tco2,
            OfftakeKind.WATER_TREATMENT_FO: self.fo_water_m3,
            OfftakeKind.ATMOSPHERIC_WATER: self.awh_water_m3,
            OfftakeKind.DISTRICT_HEAT: self.homes_heated,
            OfftakeKind.GREENHOUSES: self.greenhouse_ha,
        }.get(kind)

    def primary(self, kind: OfftakeKind) -> Tuple[Optional[float], str]:
        """(value, unit) of the headline output for the selected offtake."""
        kind = OfftakeKind.parse(kind)
        return self.physical_yield(kind), OUTPUT_UNITS[kind]

    def is_suitable(self, kind: OfftakeKind) -> bool:
        """Whether the loop temperature serves the offtake without a heat lift."""
        kind = OfftakeKind.parse(kind)
        if kind is OfftakeKind.FOOD_BREWERY:
            return self.food_brewery_suitable
        if kind is OfftakeKind.HOT_WATER:
            return self.hot_water_suitable
        if kind is OfftakeKind.DISTRICT_HEAT:
            return self.district_heat_high_grade
        return True

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class NormalizedOutputs:
    """Outputs per MW·yr of recovered heat (independent of project size)."""

    fo_m3_per_MWyr: float
    awh_m3_per_MWyr: float
    dac_tco2_per_MWyr: float
    dac_water_m3_per_MWyr: float
    homes_per_MWyr: Optional[float]
    greenhouse_ha_per_MWyr: float

    fo_people_per_MWyr: Optional[float]
    awh_people_per_MWyr: Optional[float]
    dac_people_per_MWyr: Optional[float]

    def to_dict(self) -> Dict:
        return asdict(self)


def compute_offtake_outputs(
    thermal: ThermalResult,
    performance: PerformanceFactors,
    offtakes: Mapping[OfftakeKind, OfftakeSpec],
    mwh_per_home_year: float = DEFAULT_MWH_PER_HOME_YEAR,
    per_capita_gpcd: float = DEFAULT_PER_CAPITA_GPCD,
    high_grade_C: float = 65.0,
) -> OfftakeOutputs:
    """
    Compute annual outputs for all offtakes.

    Args:
        thermal: Thermal core result
        performance: Ramp multipliers at the return temperature
        offtakes: Offtake reference records
        mwh_per_home_year: Heat demand of one home (district heat)
        per_capita_gpcd: Per-capita water use for people-served figures
        high_grade_C: Return temperature above which district heat needs no lift

    Returns:
        OfftakeOutputs
    """
    mw = thermal.recoverable_heat_MW
    temp = thermal.return_temp_C

    fo = offtakes[OfftakeKind.WATER_TREATMENT_FO]
    awh = offtakes[OfftakeKind.ATMOSPHERIC_WATER]
    dac = offtakes[OfftakeKind.DAC]
    greenhouse = offtakes[OfftakeKind.GREENHOUSES]

    fo_water = mw * fo.reference_yield_per_MWyr * performance.water_treatment_fo
    awh_water = mw * awh.reference_yield_per_MWyr * performance.atmospheric_water

    dac_tco2 = thermal.effective_MWyr * dac.reference_yield_per_MWyr * performance.dac
    dac_water = thermal.effective_MWyr * DAC_WATER_M3_PER_MW_YEAR * performance.dac

    greenhouse_ha = (
        thermal.annual_heat_MWh / greenhouse.reference_yield_per_MWyr
        * performance.greenhouses
    )

    m3_per_person = per_capita_water_m3(per_capita_gpcd)

    return OfftakeOutputs(
        fo_water_m3=fo_water,
        awh_water_m3=awh_water,
        dac_tco2=dac_tco2,
        dac_water_m3=dac_water,
        homes_heated=_ratio(thermal.annual_heat_MWh, mwh_per_home_year),
        greenhouse_ha=greenhouse_ha,
        m3_per_person_year=m3_per_person,
        fo_people_served=people_served(fo_water, m3_per_person),
        awh_people_served=people_served(awh_water, m3_per_person),
        dac_people_served=people_served(dac_water, m3_per_person),
        district_heat_high_grade=temp >= high_grade_C,
        food_brewery_suitable=_meets_threshold(offtakes[OfftakeKind.FOOD_BREWERY], temp),
        hot_water_suitable=_meets_threshold(offtakes[OfftakeKind.HOT_WATER], temp),
    )


def compute_normalized_outputs(
    performance: PerformanceFactors,
    offtakes: Mapping[OfftakeKind, OfftakeSpec],
    mwh_per_home_year: float = DEFAULT_MWH_PER_HOME_YEAR,
    per_capita_gpcd: float = DEFAULT_PER_CAPITA_GPCD,
) -> NormalizedOutputs:
    """
    Compute outputs per MW·yr of recovered heat.

    Equivalent to ``compute_offtake_outputs`` for 1 MW running all year,
    so the result does not depend on IT load, recovery or hours.
    """
    fo_m3 = (
        offtakes[OfftakeKind.WATER_TREATMENT_FO].reference_yield_per_MWyr
        * performance.water_treatment_fo
    )
    awh_m3 = (
        offtakes[OfftakeKind.ATMOSPHERIC_WATER].reference_yield_per_MWyr
        * performance.atmospheric_water
    )
    dac_tco2 = offtakes[OfftakeKind.DAC].reference_yield_per_MWyr * performance.dac
    dac_water = DAC_WATER_M3_PER_MW_YEAR * performance.dac
    greenhouse_ha = (
        HOURS_PER_YEAR / offtakes[OfftakeKind.GREENHOUSES].reference_yield_per_MWyr
        * performance.greenhouses
    )

    m3_per_person = per_capita_water_m3(per_capita_gpcd)

    return NormalizedOutputs(
        fo_m3_per_MWyr=fo_m3,
        awh_m3_per_MWyr=awh_m3,
        dac_tco2_per_MWyr=dac_tco2,
        dac_water_m3_per_MWyr=dac_water,
        homes_per_MWyr=_ratio(HOURS_PER_YEAR, mwh_per_home_year),
        greenhouse_ha_per_MWyr=greenhouse_ha,
        fo_people_per_MWyr=people_served(fo_m3, m3_per_person),
        awh_people_per_MWyr=people_served(awh_m3, m3_per_person),
        dac_people_per_MWyr=people_served(dac_water, m3_per_person),
    )


def _meets_threshold(spec: OfftakeSpec, temp_C: float) -> bool:
    if spec.process_temp_threshold_C is None:
        return True
    return temp_C >= spec.process_temp_threshold_C
