"""
Cost and revenue model for waste heat reuse projects.

This module implements the capital/operating cost and annual revenue
primitives that the ownership structures are built from:

    Piping capex   = (base/MW × (1 - subsidy) + cost/km/MW × km) × Q_rec
    Piping opex    = 3% × piping capex
    HX capex       = WHR capital cost/MW × Q_rec
    Savings        = Q_rec × ERF × hours / COP × electricity price
    Offtake revenue (by offtake):
        DAC        = tCO₂ × (market price - procurement cost)
        water      = m³ × (market price - production cost)
        thermal    = MWh × heat price

Plant capex/opex are externally supplied reference numbers per offtake.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Optional

from .config import DEFAULT_CONFIG, ModelConfig
from .offtakes import OfftakeOutputs
from .reference import OfftakeKind, OfftakeSpec, PipingLookup
from .thermal import ThermalResult, clamp


@dataclass(frozen=True)
class MarketPricing:
    """Market prices and production costs per offtake."""

    # DAC ($/tCO₂)
    dac_market_price_per_t: float = 600.0
    dac_procurement_cost_per_t: float = 350.0

    # Forward osmosis treated water ($/m³)
    fo_market_price_per_m3: float = 1.5
    fo_production_cost_per_m3: float = 0.6

    # Atmospheric water ($/m³)
    awh_market_price_per_m3: float = 12.0
    awh_production_cost_per_m3: float = 7.0

    # Heat sold to thermal offtakes ($/MWh)
    thermal_energy_price_per_MWh: float = 30.0


@dataclass(frozen=True)
class PipingCost:
    """Heat network piping cost for one scenario."""

    region: str
    used_fallback: bool
    distance_km: float
    capex_usd: float
    annual_opex_usd: float


@dataclass(frozen=True)
class CostRevenue:
    """
    Cost and revenue primitives for one scenario.
    """

    offtake: OfftakeKind

    # Capital costs
    heat_exchanger_capex_usd: float
    piping: Optional[PipingCost]  # None if no region row could be found
    plant_capex_usd: float

    # Operating costs
    plant_opex_usd: float

    # DC-side savings
    electricity_cost_per_MWh: float
    cooling_cop: float
    avoided_cooling_MWh: float
    annual_operational_savings_usd: float

    # Offtake-side revenue
    offtake_revenue_usd: float

    @property
    def piping_capex_usd(self) -> Optional[float]:
        return self.piping.capex_usd if self.piping else None

    @property
    def piping_opex_usd(self) -> Optional[float]:
        return self.piping.annual_opex_usd if self.piping else None

    def summary(self) -> str:
        """Generate cost/revenue summary."""
        piping = (
            f"${self.piping.capex_usd:,.0f} ({self.piping.region})"
            if self.piping else "—"
        )
        return f"""
COST & REVENUE: {self.offtake.value}
{'='*60}

CAPITAL COST:
  Heat exchanger: ${self.heat_exchanger_capex_usd:,.0f}
  Piping:         {piping}
  Offtake plant:  ${self.plant_capex_usd:,.0f}

ANNUAL:
  Plant opex:            ${self.plant_opex_usd:,.0f}
  Avoided cooling:       {self.avoided_cooling_MWh:,.0f} MWh
  Operational savings:   ${self.annual_operational_savings_usd:,.0f}
  Offtake revenue:       ${self.offtake_revenue_usd:,.0f}
{'='*60}
"""

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["offtake"] = self.offtake.value
        return data


def compute_piping_cost(
    lookup: PipingLookup,
    recoverable_heat_MW: float,
    distance_km: float,
    config: ModelConfig = DEFAULT_CONFIG,
) -> Optional[PipingCost]:
    """
    Calculate piping capex and opex from a region lookup.

    Args:
        lookup: Region row lookup result
        recoverable_heat_MW: Recovered heat power
        distance_km: Intake distance to the offtake site (negative treated as 0)
        config: Model constants

    Returns:
        PipingCost, or None when no region row is available
    """
    row = lookup.row
    if row is None:
        return None

    km = max(0.0, distance_km)
    per_MW = (
        row.base_capex_per_MW * (1 - row.subsidy_fraction)
        + row.cost_per_km_per_MW * km
    )
    capex = per_MW * recoverable_heat_MW

    return PipingCost(
        region=row.region,
        used_fallback=lookup.used_fallback,
        distance_km=km,
        capex_usd=capex,
        annual_opex_usd=config.piping_opex_fraction * capex,
    )


def avoided_cooling_energy(
    recoverable_heat_MW: float,
    erf_pct: float,
    hours_per_year: float,
    cooling_cop: float,
) -> float:
    """
    Cooling electricity avoided by reusing heat instead of rejecting it.

    Proportional to the heat actually reused (ERF), not the heat available.

    Returns:
        Avoided electricity in MWh/yr, 0 when the COP is not positive
    """
    if cooling_cop <= 0:
        return 0.0
    erf = clamp(erf_pct, 0.0, 100.0) / 100
    return recoverable_heat_MW * erf * hours_per_year / cooling_cop


def compute_operational_savings(
    recoverable_heat_MW: float,
    erf_pct: float,
    hours_per_year: float,
    cooling_cop: float,
    electricity_cost_per_MWh: float,
) -> float:
    """
    Annual DC-side savings from avoided cooling electricity.

    Args:
        recoverable_heat_MW: Recovered heat power
        erf_pct: Energy reuse fraction (%)
        hours_per_year: Operating hours
        cooling_cop: Cooling plant coefficient of performance
        electricity_cost_per_MWh: Electricity price

    Returns:
        Savings in USD/yr
    """
    avoided = avoided_cooling_energy(
        recoverable_heat_MW, erf_pct, hours_per_year, cooling_cop
    )
    return avoided * electricity_cost_per_MWh


def compute_offtake_revenue(
    offtake: OfftakeKind,
    outputs: OfftakeOutputs,
    thermal: ThermalResult,
    pricing: MarketPricing,
) -> float:
    """
    Annual market revenue of the selected offtake.

    Args:
        offtake: Selected offtake
        outputs: Physical outputs
        thermal: Thermal core result
        pricing: Market prices

    Returns:
        Revenue net of production/procurement cost in USD/yr
    """
    offtake = OfftakeKind.parse(offtake)

    if offtake is OfftakeKind.DAC:
        margin = pricing.dac_market_price_per_t - pricing.dac_procurement_cost_per_t
        return outputs.dac_tco2 * margin

    if offtake is OfftakeKind.WATER_TREATMENT_FO:
        margin = pricing.fo_market_price_per_m3 - pricing.fo_production_cost_per_m3
        return outputs.fo_water_m3 * margin

    if offtake is OfftakeKind.ATMOSPHERIC_WATER:
        margin = pricing.awh_market_price_per_m3 - pricing.awh_production_cost_per_m3
        return outputs.awh_water_m3 * margin

    return thermal.annual_heat_MWh * pricing.thermal_energy_price_per_MWh


def compute_cost_revenue(
    offtake_spec: OfftakeSpec,
    thermal: ThermalResult,
    outputs: OfftakeOutputs,
    piping_lookup: PipingLookup,
    pricing: MarketPricing,
    erf_pct: float,
    cooling_cop: float,
    electricity_cost_per_MWh: float,
    whr_capital_cost_per_MW: float,
    distance_km: float,
    config: ModelConfig = DEFAULT_CONFIG,
) -> CostRevenue:
    """
    Assemble all cost and revenue primitives for the selected offtake.

    Returns:
        CostRevenue
    """
    mw = thermal.recoverable_heat_MW
    avoided = avoided_cooling_energy(mw, erf_pct, thermal.hours_per_year, cooling_cop)

    return CostRevenue(
        offtake=offtake_spec.kind,
        heat_exchanger_capex_usd=max(0.0, whr_capital_cost_per_MW) * mw,
        piping=compute_piping_cost(piping_lookup, mw, distance_km, config),
        plant_capex_usd=offtake_spec.plant_cost.capex_usd,
        plant_opex_usd=offtake_spec.plant_cost.annual_opex_usd,
        electricity_cost_per_MWh=electricity_cost_per_MWh,
        cooling_cop=cooling_cop,
        avoided_cooling_MWh=avoided,
        annual_operational_savings_usd=avoided * electricity_cost_per_MWh,
        offtake_revenue_usd=compute_offtake_revenue(
            offtake_spec.kind, outputs, thermal, pricing
        ),
    )
