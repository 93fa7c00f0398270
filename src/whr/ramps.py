"""
Temperature-dependent performance ramps for heat offtakes.

Each offtake family maps the DC return temperature to a dimensionless
efficiency multiplier with a clamped linear ramp:

    f(T) = v0                                   T <= t0
    f(T) = v0 + (T - t0)/(t1 - t0) × (v1 - v0)  t0 < T < t1
    f(T) = v1                                   T >= t1

The tuning tuples live on the offtake reference records. Offtakes without
a ramp run at a constant multiplier of 1.0.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Union
import numpy as np

from .reference import OfftakeKind, OfftakeSpec, PerformanceRamp


ArrayLike = Union[float, np.ndarray]


def ramp(x: ArrayLike, x0: float, x1: float, y0: float, y1: float) -> ArrayLike:
    """
    Clamped linear interpolation between (x0, y0) and (x1, y1).

    Args:
        x: Input value or array (e.g. temperature in °C)
        x0: Lower breakpoint
        x1: Upper breakpoint
        y0: Output at and below x0
        y1: Output at and above x1

    Returns:
        float for scalar input, ndarray for array input
    """
    if x1 <= x0:
        # Degenerate ramp collapses to a step at x1
        result = np.where(np.asarray(x, dtype=float) >= x1, y1, y0)
    else:
        result = np.interp(x, [x0, x1], [y0, y1])

    if np.ndim(result) == 0:
        return float(result)
    return result


def evaluate_ramp(definition: Optional[PerformanceRamp], temp_C: ArrayLike) -> ArrayLike:
    """Evaluate a reference ramp; no ramp means a constant 1.0."""
    if definition is None:
        if np.ndim(temp_C) == 0:
            return 1.0
        return np.ones_like(np.asarray(temp_C, dtype=float))
    return ramp(temp_C, definition.t0_C, definition.t1_C, definition.v0, definition.v1)


@dataclass(frozen=True)
class PerformanceFactors:
    """Performance multiplier per offtake at one return temperature."""

    temp_C: float
    factors: Mapping[OfftakeKind, float]

    def __post_init__(self):
        object.__setattr__(self, "factors", MappingProxyType(dict(self.factors)))

    def __getitem__(self, kind: OfftakeKind) -> float:
        return self.factors[OfftakeKind.parse(kind)]

    @property
    def dac(self) -> float:
        return self.factors[OfftakeKind.DAC]

    @property
    def water_treatment_fo(self) -> float:
        return self.factors[OfftakeKind.WATER_TREATMENT_FO]

    @property
    def atmospheric_water(self) -> float:
        return self.factors[OfftakeKind.ATMOSPHERIC_WATER]

    @property
    def greenhouses(self) -> float:
        return self.factors[OfftakeKind.GREENHOUSES]

    def to_dict(self) -> Dict[str, float]:
        return {kind.value: value for kind, value in self.factors.items()}


def compute_performance_factors(
    temp_C: float,
    offtakes: Mapping[OfftakeKind, OfftakeSpec],
) -> PerformanceFactors:
    """
    Evaluate every offtake's ramp at the DC return temperature.

    Args:
        temp_C: DC return temperature in °C
        offtakes: Offtake reference records

    Returns:
        PerformanceFactors
    """
    factors = {
        kind: evaluate_ramp(spec.ramp, temp_C)
        for kind, spec in offtakes.items()
    }
    return PerformanceFactors(temp_C=temp_C, factors=factors)
