"""
Main calculation orchestrator for waste heat reuse scenarios.

This module runs the full pipeline for one ``ScenarioInputs`` record:

    reference data → thermal core → performance ramps
        → offtake outputs, DC efficiency → cost/revenue → ownership
    reference data + thermal core → CO₂ comparison

Every run recomputes everything from the inputs; nothing is cached between
calls other than the immutable reference data.

Example usage:
    >>> from whr import ScenarioInputs, compute_derived_metrics
    >>> metrics = compute_derived_metrics(ScenarioInputs(it_load_MW=50))
    >>> print(metrics.summary())
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple
import json
import logging

from .co2 import CO2Row, build_co2_table, grid_co2_avoided
from .config import DEFAULT_CONFIG, ModelConfig
from .economics import CostRevenue, compute_cost_revenue
from .efficiency import DCEfficiency, compute_dc_efficiency
from .offtakes import (
    NormalizedOutputs,
    OfftakeOutputs,
    compute_normalized_outputs,
    compute_offtake_outputs,
)
from .ownership import OwnershipComparison, compare_ownership_models
from .ramps import PerformanceFactors, compute_performance_factors
from .reference import Facility, Location, ReferenceData, default_reference_data
from .scenario import ScenarioInputs
from .thermal import ThermalResult, compute_thermal


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DerivedMetrics:
    """
    Complete result of one scenario run.
    """

    inputs: ScenarioInputs
    reference_version: str

    # Resolved selections (None only if the configured default is missing)
    location: Optional[Location]
    facility: Optional[Facility]

    thermal: ThermalResult
    performance: PerformanceFactors
    offtake_outputs: OfftakeOutputs
    normalized_outputs: NormalizedOutputs
    dc_efficiency: Optional[DCEfficiency]
    cost_revenue: CostRevenue
    ownership: OwnershipComparison
    co2_table: Tuple[CO2Row, ...]
    grid_co2_avoided_t: Optional[float]

    @property
    def recoverable_heat_MW(self) -> float:
        return self.thermal.recoverable_heat_MW

    @property
    def annual_heat_MWh(self) -> float:
        return self.thermal.annual_heat_MWh

    @property
    def effective_MWyr(self) -> float:
        return self.thermal.effective_MWyr

    @property
    def delta_t_C(self) -> float:
        return self.thermal.delta_t_C

    def summary(self) -> str:
        """Generate scenario summary."""
        offtake = self.inputs.selected_offtake
        value, unit = self.offtake_outputs.primary(offtake)
        t = self.thermal

        lines = [
            "=" * 70,
            "WASTE HEAT REUSE SCENARIO",
            "=" * 70,
            f"Offtake:  {offtake.value}",
            f"Location: {self.location.label if self.location else '—'}",
            f"Facility: {self.facility.name if self.facility else '—'}",
            "",
            "THERMAL:",
            f"  Recoverable heat: {t.recoverable_heat_MW:.2f} MW",
            f"  Annual heat:      {t.annual_heat_MWh:,.0f} MWh/yr",
            f"  Effective:        {t.effective_MWyr:.2f} MW·yr",
            f"  Loop:             {t.return_temp_C:.0f}°C → {t.supply_temp_C:.0f}°C "
            f"(ΔT {t.delta_t_C:.0f}°C)",
            f"  Performance:      {self.performance[offtake]:.3f}",
            "",
            "OUTPUT:",
        ]
        if value is None:
            suitable = self.offtake_outputs.is_suitable(offtake)
            lines.append(f"  Temperature suitable: {'yes' if suitable else 'no (needs heat lift)'}")
        else:
            lines.append(f"  {value:,.1f} {unit}")

        if self.dc_efficiency:
            eff = self.dc_efficiency
            lines.extend([
                "",
                "DC EFFICIENCY:",
                f"  PUE: {eff.pue_baseline:.3f} → {eff.pue_with_hr:.3f}",
                f"  WUE: {eff.wue_baseline:.2f} → {eff.wue_with_hr:.2f} L/kWh",
                f"  ERE: {_fmt(eff.ere, '.3f')}",
            ])

        lines.extend([
            "",
            "OWNERSHIP:",
            "-" * 50,
        ])
        for result in self.ownership.rows():
            marker = "*" if result.model is self.ownership.selected else " "
            lines.append(
                f" {marker}{result.model.value} {result.model.label:<26} "
                f"capex {_fmt(result.capex_usd, ',.0f', '$')}  "
                f"payback {_fmt(result.payback_years, '.1f')} yr"
            )

        lines.extend([
            "",
            "CO₂ (kt/yr, mid):",
        ])
        for row in self.co2_table:
            lines.append(f"  {row.label:<30} {row.mid_kt_per_year:8.2f}")
        lines.append(f"  Grid CO₂ avoided: {_fmt(self.grid_co2_avoided_t, ',.0f')} t/yr")
        lines.append("=" * 70)

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "metadata": {
                "reference_version": self.reference_version,
                "location": self.location.key if self.location else None,
                "facility": self.facility.key if self.facility else None,
            },
            "inputs": self.inputs.to_dict(),
            "thermal": {
                "recoverable_heat_MW": self.thermal.recoverable_heat_MW,
                "annual_heat_MWh": self.thermal.annual_heat_MWh,
                "effective_MWyr": self.thermal.effective_MWyr,
                "return_temp_C": self.thermal.return_temp_C,
                "supply_temp_C": self.thermal.supply_temp_C,
                "delta_t_C": self.thermal.delta_t_C,
            },
            "performance": self.performance.to_dict(),
            "offtake_outputs": self.offtake_outputs.to_dict(),
            "normalized_outputs": self.normalized_outputs.to_dict(),
            "dc_efficiency": self.dc_efficiency.to_dict() if self.dc_efficiency else None,
            "cost_revenue": self.cost_revenue.to_dict(),
            "ownership": self.ownership.to_dict(),
            "co2_table": [row.to_dict() for row in self.co2_table],
            "grid_co2_avoided_t": self.grid_co2_avoided_t,
        }

    def to_json(self, indent: int = 2) -> str:
        """Export as JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def save(self, filepath: str):
        """Save results to JSON file."""
        with open(filepath, 'w', encoding='utf-8') as f:
            f.write(self.to_json())


def _fmt(value: Optional[float], spec: str, prefix: str = "") -> str:
    if value is None:
        return "—"
    return f"{prefix}{value:{spec}}"


class WasteHeatCalculator:
    """
    Pipeline engine for waste heat reuse scenarios.

    Holds the reference data and model constants; every ``compute`` call is
    independent.

    Example:
        >>> calculator = WasteHeatCalculator()
        >>> metrics = calculator.compute(ScenarioInputs(selected_offtake="greenhouses"))
        >>> print(metrics.offtake_outputs.greenhouse_ha)
    """

    def __init__(
        self,
        reference: ReferenceData = None,
        config: ModelConfig = None,
    ):
        """
        Initialize calculator.

        Args:
            reference: Reference tables (default: built-in tables)
            config: Model constants (default: DEFAULT_CONFIG)
        """
        self.reference = reference or default_reference_data()
        self.config = config or DEFAULT_CONFIG

    def resolve_location(self, key: Optional[str]) -> Optional[Location]:
        """Find the location, falling back to the configured default."""
        location = self.reference.location(key)
        if location is None:
            location = self.reference.location(self.config.default_location)
            logger.warning(
                "Unknown location %r, using %s",
                key, location.key if location else None,
            )
        return location

    def resolve_facility(self, key: Optional[str]) -> Optional[Facility]:
        """Find the facility, falling back to the configured default."""
        facility = self.reference.facility(key)
        if facility is None:
            facility = self.reference.facility(self.config.default_facility)
            logger.warning(
                "Unknown facility %r, using %s",
                key, facility.key if facility else None,
            )
        return facility

    def electricity_price(
        self,
        inputs: ScenarioInputs,
        location: Optional[Location],
    ) -> float:
        """Explicit price if given, else the location's price."""
        if inputs.electricity_cost_per_MWh is not None:
            return inputs.electricity_cost_per_MWh
        if location is None:
            logger.warning("No location and no electricity price given, savings set to 0")
            return 0.0
        return location.electricity_cost_per_MWh

    def compute(self, inputs: ScenarioInputs = None) -> DerivedMetrics:
        """
        Run the complete pipeline.

        Args:
            inputs: Scenario inputs (default: ScenarioInputs())

        Returns:
            DerivedMetrics
        """
        inputs = inputs or ScenarioInputs()
        reference = self.reference
        config = self.config

        location = self.resolve_location(inputs.selected_location)
        facility = self.resolve_facility(inputs.selected_facility)

        loop_delta_t = inputs.loop_delta_t_C
        if loop_delta_t is None:
            loop_delta_t = config.loop_delta_t_C

        thermal = compute_thermal(
            it_load_MW=inputs.it_load_MW,
            recovery_pct=inputs.recovery_pct,
            hours_per_year=inputs.hours_per_year,
            return_temp_C=inputs.dc_return_temp_C,
            loop_delta_t_C=loop_delta_t,
        )
        logger.debug("Thermal core: %r", thermal)

        performance = compute_performance_factors(thermal.return_temp_C, reference.offtakes)

        outputs = compute_offtake_outputs(
            thermal,
            performance,
            reference.offtakes,
            mwh_per_home_year=inputs.mwh_per_home_year,
            per_capita_gpcd=inputs.per_capita_gpcd,
            high_grade_C=config.district_heat_high_grade_C,
        )
        normalized = compute_normalized_outputs(
            performance,
            reference.offtakes,
            mwh_per_home_year=inputs.mwh_per_home_year,
            per_capita_gpcd=inputs.per_capita_gpcd,
        )

        efficiency = None
        if facility is not None:
            efficiency = compute_dc_efficiency(
                facility, inputs.erf_pct, thermal.return_temp_C, config
            )

        piping_lookup = reference.piping.lookup(
            location.label if location else None,
            location.region if location else None,
        )

        costs = compute_cost_revenue(
            offtake_spec=reference.offtake(inputs.selected_offtake),
            thermal=thermal,
            outputs=outputs,
            piping_lookup=piping_lookup,
            pricing=inputs.pricing,
            erf_pct=inputs.erf_pct,
            cooling_cop=inputs.cooling_cop,
            electricity_cost_per_MWh=self.electricity_price(inputs, location),
            whr_capital_cost_per_MW=inputs.whr_capital_cost_per_MW,
            distance_km=inputs.intake_distance_km,
            config=config,
        )

        ownership = compare_ownership_models(
            costs,
            thermal,
            selected=inputs.ownership_model,
            tipping_fee_per_MWh=inputs.tipping_fee_per_MWh,
            revenue_share_pct=inputs.revenue_share_pct,
        )

        logger.info(
            "Computed %s scenario: %.2f MW recoverable, model %s payback %s",
            inputs.selected_offtake.value,
            thermal.recoverable_heat_MW,
            ownership.selected.value,
            ownership.selected_result.payback_years,
        )

        return DerivedMetrics(
            inputs=inputs,
            reference_version=reference.version,
            location=location,
            facility=facility,
            thermal=thermal,
            performance=performance,
            offtake_outputs=outputs,
            normalized_outputs=normalized,
            dc_efficiency=efficiency,
            cost_revenue=costs,
            ownership=ownership,
            co2_table=build_co2_table(thermal.recoverable_heat_MW, reference.offtakes),
            grid_co2_avoided_t=grid_co2_avoided(costs.avoided_cooling_MWh, location),
        )


def compute_derived_metrics(
    inputs: ScenarioInputs = None,
    reference: ReferenceData = None,
    config: ModelConfig = None,
) -> DerivedMetrics:
    """
    Convenience function for a single scenario run.

    Args:
        inputs: Scenario inputs (default: ScenarioInputs())
        reference: Reference tables (default: built-in tables)
        config: Model constants (default: DEFAULT_CONFIG)

    Returns:
        DerivedMetrics
    """
    return WasteHeatCalculator(reference, config).compute(inputs)
