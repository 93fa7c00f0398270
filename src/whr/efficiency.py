"""
Data center efficiency impact of heat reuse.

Estimates PUE and WUE before and after heat reuse, and an energy reuse
effectiveness (ERE) figure, from the facility profile, the energy reuse
fraction (ERF) and the DC return temperature:

    k_T      = max(0.85, 1 - (T_return - 25)/100)
    PUE_HR   = PUE_0 × (1 - max_improvement × ERF × k_T)
    WUE_HR   = WUE_0 × (1 - 0.15 × ERF × k_T)        (0 stays 0 when dry-cooled)
    ERE      = base_ERE(cooling type) × ERF          (undefined when ERF = 0)

These are declared heuristics, not standards-body formulas. The
coefficients live on ``ModelConfig``.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Optional

from .config import DEFAULT_CONFIG, ModelConfig
from .reference import Facility
from .thermal import clamp


def temperature_adjustment_factor(
    return_temp_C: float,
    config: ModelConfig = DEFAULT_CONFIG,
) -> float:
    """
    Scale the achievable improvement by the loop temperature.

    Hotter return water is easier to reuse but leaves less headroom on the
    chiller side; the factor is floored so it never collapses.
    """
    return max(
        config.temp_adjust_floor,
        1 - (return_temp_C - config.temp_adjust_reference_C) / 100,
    )


def base_ere(cooling_type: str, config: ModelConfig = DEFAULT_CONFIG) -> float:
    """
    Base ERE coefficient by cooling-type keyword.

    Evaporative > hybrid/adiabatic > air/dry cooled (the default).
    """
    text = cooling_type.lower()
    if "evap" in text:
        return config.base_ere_evaporative
    if "hybrid" in text or "adiabatic" in text:
        return config.base_ere_hybrid
    return config.base_ere_air


@dataclass(frozen=True)
class DCEfficiency:
    """PUE/WUE/ERE before and after heat reuse."""

    facility_key: str
    cooling_type: str
    erf_fraction: float
    temp_adjustment_factor: float

    pue_baseline: float
    pue_with_hr: float

    wue_baseline: float  # L/kWh
    wue_with_hr: float
    wue_reduction: Optional[float]  # None when the site uses no water

    ere: Optional[float]  # None when nothing is reused

    @property
    def pue_reduction(self) -> float:
        return self.pue_baseline - self.pue_with_hr

    @property
    def pue_reduction_percent(self) -> float:
        return 100 * self.pue_reduction / self.pue_baseline

    @property
    def wue_reduction_percent(self) -> Optional[float]:
        if self.wue_reduction is None:
            return None
        return 100 * self.wue_reduction / self.wue_baseline

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["pue_reduction"] = self.pue_reduction
        data["pue_reduction_percent"] = self.pue_reduction_percent
        data["wue_reduction_percent"] = self.wue_reduction_percent
        return data


def compute_dc_efficiency(
    facility: Facility,
    erf_pct: float,
    return_temp_C: float,
    config: ModelConfig = DEFAULT_CONFIG,
) -> DCEfficiency:
    """
    Apply the heat reuse efficiency heuristic to a facility.

    Args:
        facility: Facility cooling profile
        erf_pct: Energy reuse fraction in percent, clamped to [0, 100]
        return_temp_C: DC return temperature
        config: Model constants

    Returns:
        DCEfficiency
    """
    erf = clamp(erf_pct, 0.0, 100.0) / 100
    k_t = temperature_adjustment_factor(return_temp_C, config)

    pue_with = facility.pue_baseline * (
        1 - facility.pue_max_improvement_fraction * erf * k_t
    )

    wue_baseline = facility.wue_baseline_L_per_kWh
    if wue_baseline > 0:
        wue_with = wue_baseline * (1 - config.wue_reduction_per_erf * erf * k_t)
        wue_reduction = wue_baseline - wue_with
    else:
        # Nothing to save on a dry-cooled site
        wue_with = 0.0
        wue_reduction = None

    ere = base_ere(facility.cooling_type, config) * erf if erf > 0 else None

    return DCEfficiency(
        facility_key=facility.key,
        cooling_type=facility.cooling_type,
        erf_fraction=erf,
        temp_adjustment_factor=k_t,
        pue_baseline=facility.pue_baseline,
        pue_with_hr=pue_with,
        wue_baseline=wue_baseline,
        wue_with_hr=wue_with,
        wue_reduction=wue_reduction,
        ere=ere,
    )
