"""
Waste Heat Reuse Calculator (WHR)
=================================

A planning calculator for reusing data center waste heat: recoverable heat,
offtake outputs (direct air capture, water treatment, atmospheric water,
district heat, greenhouses, process heat), data center efficiency impact,
project economics under three ownership models, and CO₂ comparison.
"""

__version__ = "0.1.0"

from .config import (
    ModelConfig,
    DEFAULT_CONFIG,
    load_config,
    save_config,
)

from .reference import (
    OfftakeKind,
    OfftakeSpec,
    PerformanceRamp,
    PlantCost,
    CO2Range,
    Location,
    Facility,
    PipingCostRow,
    PipingCostTable,
    PipingLookup,
    ReferenceData,
    ReferenceDataError,
    build_reference_data,
    default_reference_data,
    load_reference_data,
)

from .thermal import (
    ThermalResult,
    compute_thermal,
    supply_temperature,
    clamp,
)

from .ramps import (
    PerformanceFactors,
    ramp,
    evaluate_ramp,
    compute_performance_factors,
)

from .offtakes import (
    OfftakeOutputs,
    NormalizedOutputs,
    per_capita_water_m3,
    people_served,
    compute_offtake_outputs,
    compute_normalized_outputs,
)

from .efficiency import (
    DCEfficiency,
    temperature_adjustment_factor,
    base_ere,
    compute_dc_efficiency,
)

from .economics import (
    MarketPricing,
    PipingCost,
    CostRevenue,
    compute_piping_cost,
    avoided_cooling_energy,
    compute_operational_savings,
    compute_offtake_revenue,
    compute_cost_revenue,
)

from .ownership import (
    OwnershipModel,
    OwnershipResult,
    OwnershipComparison,
    payback_years,
    compare_ownership_models,
)

from .co2 import (
    CO2Row,
    build_co2_table,
    grid_co2_avoided,
)

from .scenario import ScenarioInputs

from .calculator import (
    DerivedMetrics,
    WasteHeatCalculator,
    compute_derived_metrics,
)

__all__ = [
    # Version info
    "__version__",

    # Configuration
    "ModelConfig",
    "DEFAULT_CONFIG",
    "load_config",
    "save_config",

    # Reference data
    "OfftakeKind",
    "OfftakeSpec",
    "PerformanceRamp",
    "PlantCost",
    "CO2Range",
    "Location",
    "Facility",
    "PipingCostRow",
    "PipingCostTable",
    "PipingLookup",
    "ReferenceData",
    "ReferenceDataError",
    "build_reference_data",
    "default_reference_data",
    "load_reference_data",

    # Thermal
    "ThermalResult",
    "compute_thermal",
    "supply_temperature",
    "clamp",

    # Performance ramps
    "PerformanceFactors",
    "ramp",
    "evaluate_ramp",
    "compute_performance_factors",

    # Offtake outputs
    "OfftakeOutputs",
    "NormalizedOutputs",
    "per_capita_water_m3",
    "people_served",
    "compute_offtake_outputs",
    "compute_normalized_outputs",

    # DC efficiency
    "DCEfficiency",
    "temperature_adjustment_factor",
    "base_ere",
    "compute_dc_efficiency",

    # Economics
    "MarketPricing",
    "PipingCost",
    "CostRevenue",
    "compute_piping_cost",
    "avoided_cooling_energy",
    "compute_operational_savings",
    "compute_offtake_revenue",
    "compute_cost_revenue",

    # Ownership
    "OwnershipModel",
    "OwnershipResult",
    "OwnershipComparison",
    "payback_years",
    "compare_ownership_models",

    # CO2
    "CO2Row",
    "build_co2_table",
    "grid_co2_avoided",

    # Main calculator
    "ScenarioInputs",
    "DerivedMetrics",
    "WasteHeatCalculator",
    "compute_derived_metrics",
]
