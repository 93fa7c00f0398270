"""
Model configuration for the waste heat reuse calculator.

Centralizes the named constants of the heuristic models (loop temperature
difference, PUE/WUE coefficients, ERE lookup, piping O&M share) so they can be
tuned without touching the calculation code.
"""

from dataclasses import dataclass, asdict
from typing import Optional
import json


@dataclass(frozen=True)
class ModelConfig:
    """Named constants shared by the pipeline stages."""

    # DC loop: supply = return - delta (°C)
    loop_delta_t_C: float = 12.0

    # Piping O&M as a share of piping capex per year
    piping_opex_fraction: float = 0.03

    # DC efficiency heuristic
    temp_adjust_reference_C: float = 25.0
    temp_adjust_floor: float = 0.85
    wue_reduction_per_erf: float = 0.15  # 15% WUE cut at 100% ERF

    # Energy reuse effectiveness base values by cooling type
    base_ere_evaporative: float = 0.30
    base_ere_hybrid: float = 0.25
    base_ere_air: float = 0.20

    # Qualitative thresholds (°C)
    district_heat_high_grade_C: float = 65.0

    # Reference lookups
    default_region_label: str = "European average"
    default_location: str = "Frankfurt"
    default_facility: str = "hybrid_adiabatic"

    def with_overrides(self, **overrides) -> "ModelConfig":
        """Return a copy with the given fields replaced."""
        data = asdict(self)
        data.update(overrides)
        return ModelConfig(**data)


DEFAULT_CONFIG = ModelConfig()


def load_config(path: Optional[str] = None) -> ModelConfig:
    """Load configuration from a JSON file or return defaults."""
    if path is None:
        return DEFAULT_CONFIG

    with open(path, 'r') as f:
        data = json.load(f)

    return ModelConfig(**data)


def save_config(config: ModelConfig, path: str):
    """Save configuration to a JSON file."""
    with open(path, 'w') as f:
        json.dump(asdict(config), f, indent=2)
