"""
Thermal core for data center waste heat recovery.

Converts IT load, recovery fraction, operating hours and loop temperatures
into recoverable heat power, annual heat energy and loop ΔT:

    Q_rec   = P_IT × clamp(recovery%, 0, 100) / 100
    E_year  = Q_rec × hours
    MW·yr   = Q_rec × hours / 8760
    ΔT      = max(1, T_return - T_supply)

Inputs are clamped rather than rejected; there are no failure modes.
"""

from dataclasses import dataclass
from typing import Optional

from .config import DEFAULT_CONFIG
from .reference import HOURS_PER_YEAR


MIN_DELTA_T_C = 1.0


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp ``value`` to ``[lower, upper]``."""
    return min(upper, max(lower, value))


def supply_temperature(return_temp_C: float, loop_delta_t_C: float) -> float:
    """
    DC loop supply temperature derived from the return temperature.

    Args:
        return_temp_C: Warm water leaving the IT load (°C)
        loop_delta_t_C: Return minus supply (°C)

    Returns:
        Supply temperature in °C, floored at 0
    """
    return max(0.0, return_temp_C - loop_delta_t_C)


@dataclass(frozen=True)
class ThermalResult:
    """Recoverable heat and loop temperatures for one scenario."""

    it_load_MW: float
    recovery_fraction: float
    hours_per_year: float

    recoverable_heat_MW: float
    annual_heat_MWh: float
    effective_MWyr: float  # full-year-equivalent capacity

    return_temp_C: float
    supply_temp_C: float
    delta_t_C: float

    @property
    def capacity_factor(self) -> float:
        """Operating hours as a share of the year."""
        return self.hours_per_year / HOURS_PER_YEAR

    def __repr__(self) -> str:
        return (f"ThermalResult(Q_rec={self.recoverable_heat_MW:.2f} MW, "
                f"E={self.annual_heat_MWh:,.0f} MWh/yr, "
                f"MW·yr={self.effective_MWyr:.2f}, ΔT={self.delta_t_C:.0f}°C)")


def compute_thermal(
    it_load_MW: float,
    recovery_pct: float,
    hours_per_year: float,
    return_temp_C: float,
    loop_delta_t_C: Optional[float] = None,
) -> ThermalResult:
    """
    Run the thermal core.

    Args:
        it_load_MW: IT load (negative values treated as 0)
        recovery_pct: Share of IT heat captured, clamped to [0, 100]
        hours_per_year: Operating hours, clamped to [0, 8760]
        return_temp_C: DC return water temperature
        loop_delta_t_C: Return minus supply (uses config default if None)

    Returns:
        ThermalResult
    """
    if loop_delta_t_C is None:
        loop_delta_t_C = DEFAULT_CONFIG.loop_delta_t_C

    load = max(0.0, it_load_MW)
    recovery_fraction = clamp(recovery_pct, 0.0, 100.0) / 100
    hours = clamp(hours_per_year, 0.0, HOURS_PER_YEAR)

    recoverable = load * recovery_fraction
    supply = supply_temperature(return_temp_C, loop_delta_t_C)

    return ThermalResult(
        it_load_MW=load,
        recovery_fraction=recovery_fraction,
        hours_per_year=hours,
        recoverable_heat_MW=recoverable,
        annual_heat_MWh=recoverable * hours,
        effective_MWyr=recoverable * hours / HOURS_PER_YEAR,
        return_temp_C=return_temp_C,
        supply_temp_C=supply,
        delta_t_C=max(MIN_DELTA_T_C, return_temp_C - supply),
    )
