"""
Ownership structures for a heat reuse project.

Three mutually exclusive ways of splitting the project between the data
center (DC) operator and an offtake operator:

    A  full ownership      capex = HX + piping + plant, opex = plant opex
                           revenue = savings + offtake revenue
    B  third-party plant   capex = HX, opex = 0
                           revenue = savings + E_year × tipping fee
    C  revenue share       capex = HX, opex = 0
                           revenue = savings + offtake revenue × share

Payback for the DC operator in every model:

    payback = capex / (revenue - opex)      undefined when revenue <= opex
"""

from dataclasses import dataclass, asdict
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from .economics import CostRevenue
from .thermal import ThermalResult, clamp


class OwnershipModel(Enum):
    """Financial structure of the project."""

    FULL_OWNERSHIP = "A"
    THIRD_PARTY = "B"
    REVENUE_SHARE = "C"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def parse(cls, value) -> "OwnershipModel":
        """Resolve 'A'/'b'/member name/enum into an OwnershipModel."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for model in cls:
            if text.upper() == model.value or text.lower() == model.name.lower():
                return model
        raise ValueError(
            f"Unknown ownership model: {value}. "
            f"Available: {[m.value for m in cls]}"
        )


_LABELS = {
    OwnershipModel.FULL_OWNERSHIP: "Full ownership",
    OwnershipModel.THIRD_PARTY: "Third-party-owned plant",
    OwnershipModel.REVENUE_SHARE: "Hybrid revenue share",
}


def payback_years(
    capex: Optional[float],
    annual_revenue: float,
    annual_opex: float,
) -> Optional[float]:
    """
    Simple payback period.

    Args:
        capex: Upfront capital cost (None if unknown)
        annual_revenue: Annual cash inflow
        annual_opex: Annual operating cost

    Returns:
        Years to recover capex, or None when there is no payback
    """
    if capex is None:
        return None
    net = annual_revenue - annual_opex
    if net <= 0:
        return None
    return capex / net


@dataclass(frozen=True)
class OwnershipResult:
    """Cash flows of one ownership model, seen from the DC operator."""

    model: OwnershipModel
    capex_usd: Optional[float]  # None when piping cost is unknown (model A)
    annual_opex_usd: float
    annual_revenue_usd: float
    payback_years: Optional[float]

    # Offtake operator side (models B and C)
    third_party_capex_usd: Optional[float] = None
    third_party_profit_usd: Optional[float] = None
    tipping_fee_paid_usd: Optional[float] = None

    @property
    def net_annual_benefit_usd(self) -> float:
        return self.annual_revenue_usd - self.annual_opex_usd

    @property
    def has_payback(self) -> bool:
        return self.payback_years is not None

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["model"] = self.model.value
        data["label"] = self.model.label
        data["net_annual_benefit_usd"] = self.net_annual_benefit_usd
        return data


@dataclass(frozen=True)
class OwnershipComparison:
    """All three ownership models side by side."""

    selected: OwnershipModel
    results: Mapping[OwnershipModel, OwnershipResult]
    tipping_fee_per_MWh: float
    revenue_share_pct: float

    def __post_init__(self):
        object.__setattr__(self, "results", MappingProxyType(dict(self.results)))

    def __getitem__(self, model) -> OwnershipResult:
        return self.results[OwnershipModel.parse(model)]

    @property
    def selected_result(self) -> OwnershipResult:
        return self.results[self.selected]

    @property
    def best(self) -> Optional[OwnershipModel]:
        """Model with the shortest defined payback, if any has one."""
        candidates = [r for r in self.results.values() if r.has_payback]
        if not candidates:
            return None
        return min(candidates, key=lambda r: r.payback_years).model

    def rows(self) -> List[OwnershipResult]:
        return [self.results[m] for m in OwnershipModel]

    def to_dict(self) -> Dict:
        best = self.best
        return {
            "selected": self.selected.value,
            "best": best.value if best else None,
            "tipping_fee_per_MWh": self.tipping_fee_per_MWh,
            "revenue_share_pct": self.revenue_share_pct,
            "models": {m.value: r.to_dict() for m, r in self.results.items()},
        }


def _piping_plus_plant(costs: CostRevenue) -> Optional[float]:
    if costs.piping_capex_usd is None:
        return None
    return costs.piping_capex_usd + costs.plant_capex_usd


def full_ownership(costs: CostRevenue) -> OwnershipResult:
    """Model A: the DC operator builds and runs everything."""
    capex = _piping_plus_plant(costs)
    if capex is not None:
        capex += costs.heat_exchanger_capex_usd

    revenue = costs.annual_operational_savings_usd + costs.offtake_revenue_usd
    opex = costs.plant_opex_usd

    return OwnershipResult(
        model=OwnershipModel.FULL_OWNERSHIP,
        capex_usd=capex,
        annual_opex_usd=opex,
        annual_revenue_usd=revenue,
        payback_years=payback_years(capex, revenue, opex),
    )


def third_party_plant(
    costs: CostRevenue,
    thermal: ThermalResult,
    tipping_fee_per_MWh: float,
) -> OwnershipResult:
    """Model B: a third party owns the plant and pays a fee per MWh of heat."""
    capex = costs.heat_exchanger_capex_usd
    fee_paid = thermal.annual_heat_MWh * tipping_fee_per_MWh
    revenue = costs.annual_operational_savings_usd + fee_paid

    return OwnershipResult(
        model=OwnershipModel.THIRD_PARTY,
        capex_usd=capex,
        annual_opex_usd=0.0,
        annual_revenue_usd=revenue,
        payback_years=payback_years(capex, revenue, 0.0),
        third_party_capex_usd=_piping_plus_plant(costs),
        third_party_profit_usd=costs.offtake_revenue_usd - costs.plant_opex_usd - fee_paid,
        tipping_fee_paid_usd=fee_paid,
    )


def revenue_share(costs: CostRevenue, share_pct: float) -> OwnershipResult:
    """Model C: the DC operator takes a share of the offtake revenue."""
    share = clamp(share_pct, 0.0, 100.0) / 100
    capex = costs.heat_exchanger_capex_usd
    revenue = costs.annual_operational_savings_usd + costs.offtake_revenue_usd * share

    return OwnershipResult(
        model=OwnershipModel.REVENUE_SHARE,
        capex_usd=capex,
        annual_opex_usd=0.0,
        annual_revenue_usd=revenue,
        payback_years=payback_years(capex, revenue, 0.0),
        third_party_capex_usd=_piping_plus_plant(costs),
        third_party_profit_usd=(1 - share) * costs.offtake_revenue_usd - costs.plant_opex_usd,
    )


def compare_ownership_models(
    costs: CostRevenue,
    thermal: ThermalResult,
    selected="A",
    tipping_fee_per_MWh: float = 5.0,
    revenue_share_pct: float = 30.0,
) -> OwnershipComparison:
    """
    Evaluate all ownership models for one cost/revenue breakdown.

    Args:
        costs: Cost and revenue primitives
        thermal: Thermal core result (annual heat for the tipping fee)
        selected: Ownership model chosen by the user
        tipping_fee_per_MWh: Model B fee paid to the DC operator
        revenue_share_pct: Model C share of offtake revenue kept by the DC operator

    Returns:
        OwnershipComparison
    """
    results = {
        OwnershipModel.FULL_OWNERSHIP: full_ownership(costs),
        OwnershipModel.THIRD_PARTY: third_party_plant(costs, thermal, tipping_fee_per_MWh),
        OwnershipModel.REVENUE_SHARE: revenue_share(costs, revenue_share_pct),
    }
    return OwnershipComparison(
        selected=OwnershipModel.parse(selected),
        results=results,
        tipping_fee_per_MWh=tipping_fee_per_MWh,
        revenue_share_pct=clamp(revenue_share_pct, 0.0, 100.0),
    )
