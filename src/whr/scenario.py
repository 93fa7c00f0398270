"""
Scenario inputs for the waste heat reuse pipeline.

``ScenarioInputs`` is the one record every calculation reads. It can be
built directly, or from a dict with either snake_case field names or the
camelCase keys used by web clients (``itLoadMW``, ``dcReturnTempC``, ...).
"""

from dataclasses import dataclass, field, asdict, fields
from typing import Any, Dict, Mapping, Optional

from .config import DEFAULT_CONFIG
from .economics import MarketPricing
from .ownership import OwnershipModel
from .reference import (
    DEFAULT_MWH_PER_HOME_YEAR,
    DEFAULT_PER_CAPITA_GPCD,
    OfftakeKind,
)


@dataclass(frozen=True)
class ScenarioInputs:
    """User-controlled inputs of one WHR scenario."""

    # Thermal core
    it_load_MW: float = 200.0
    recovery_pct: float = 5.0
    hours_per_year: float = 8000.0
    dc_return_temp_C: float = 39.0
    loop_delta_t_C: Optional[float] = None  # None = ModelConfig default

    # Selections
    selected_offtake: OfftakeKind = OfftakeKind.DAC
    selected_location: str = DEFAULT_CONFIG.default_location
    selected_facility: str = DEFAULT_CONFIG.default_facility

    # DC side
    cooling_cop: float = 4.0
    electricity_cost_per_MWh: Optional[float] = None  # None = location price
    erf_pct: float = 100.0

    # Offtake assumptions
    mwh_per_home_year: float = DEFAULT_MWH_PER_HOME_YEAR
    per_capita_gpcd: float = DEFAULT_PER_CAPITA_GPCD
    pricing: MarketPricing = field(default_factory=MarketPricing)

    # Ownership
    ownership_model: OwnershipModel = OwnershipModel.FULL_OWNERSHIP
    tipping_fee_per_MWh: float = 5.0
    revenue_share_pct: float = 30.0
    whr_capital_cost_per_MW: float = 250_000.0
    intake_distance_km: float = 1.0

    def __post_init__(self):
        object.__setattr__(self, "selected_offtake", OfftakeKind.parse(self.selected_offtake))
        object.__setattr__(self, "ownership_model", OwnershipModel.parse(self.ownership_model))
        if isinstance(self.pricing, Mapping):
            object.__setattr__(self, "pricing", _pricing_from_dict(self.pricing))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScenarioInputs":
        """
        Build inputs from a dict of snake_case or camelCase keys.

        Pricing may be given as a nested ``pricing`` dict or as flat keys.

        Raises:
            ValueError: On unknown keys, offtakes or ownership models
        """
        field_names = {f.name for f in fields(cls)}
        pricing_names = {f.name for f in fields(MarketPricing)}

        kwargs: Dict[str, Any] = {}
        pricing: Dict[str, Any] = {}
        unknown = []

        for key, value in data.items():
            name = _SCENARIO_ALIASES.get(key, key)
            pricing_name = _PRICING_ALIASES.get(key, key)
            if name == "pricing" and isinstance(value, Mapping):
                pricing.update(value)
            elif name in field_names:
                kwargs[name] = value
            elif pricing_name in pricing_names:
                pricing[pricing_name] = value
            else:
                unknown.append(key)

        if unknown:
            raise ValueError(
                f"Unknown scenario fields: {', '.join(sorted(unknown))}. "
                f"Available: {', '.join(sorted(field_names))}"
            )

        if pricing:
            kwargs["pricing"] = _pricing_from_dict(pricing)
        return cls(**kwargs)

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["selected_offtake"] = self.selected_offtake.value
        data["ownership_model"] = self.ownership_model.value
        return data


def _pricing_from_dict(data: Mapping[str, Any]) -> MarketPricing:
    values = {}
    for key, value in data.items():
        name = _PRICING_ALIASES.get(key, key)
        if name not in {f.name for f in fields(MarketPricing)}:
            raise ValueError(f"Unknown pricing field: {key}")
        values[name] = float(value)
    return MarketPricing(**values)


_SCENARIO_ALIASES = {
    "itLoadMW": "it_load_MW",
    "recoveryPct": "recovery_pct",
    "hoursPerYear": "hours_per_year",
    "dcReturnTempC": "dc_return_temp_C",
    "loopDeltaTC": "loop_delta_t_C",
    "selectedOfftake": "selected_offtake",
    "offtake": "selected_offtake",
    "selectedLocation": "selected_location",
    "location": "selected_location",
    "selectedFacility": "selected_facility",
    "facility": "selected_facility",
    "coolingCOP": "cooling_cop",
    "electricityCostPerMWh": "electricity_cost_per_MWh",
    "erfPct": "erf_pct",
    "mwhPerHomeYear": "mwh_per_home_year",
    "perCapitaGpcd": "per_capita_gpcd",
    "ownershipModel": "ownership_model",
    "tippingFeePerMWh": "tipping_fee_per_MWh",
    "revenueSharePct": "revenue_share_pct",
    "revenueSharePercent": "revenue_share_pct",
    "whrCapitalCostPerMW": "whr_capital_cost_per_MW",
    "intakeDistanceKm": "intake_distance_km",
}

_PRICING_ALIASES = {
    "dacMarketPricePerTon": "dac_market_price_per_t",
    "dacProcurementCostPerTon": "dac_procurement_cost_per_t",
    "foMarketPricePerM3": "fo_market_price_per_m3",
    "foProductionCostPerM3": "fo_production_cost_per_m3",
    "awhMarketPricePerM3": "awh_market_price_per_m3",
    "awhProductionCostPerM3": "awh_production_cost_per_m3",
    "thermalEnergyPricePerMWh": "thermal_energy_price_per_MWh",
}
