"""
Reference data for waste heat reuse calculations.

This module holds the static tables the pipeline reads: offtake yield
constants and performance ramps, offtake plant capex/opex, CO₂ ranges,
data center locations, facility cooling profiles and piping cost by region.

Every tuned number lives here as versioned data rather than as literals in
the calculation code. Tables are validated once when a ``ReferenceData`` is
built and are read-only afterwards.

Sources (best-effort planning figures, tune with project data):
    - DAC: 4,550 tCO₂ per MW·yr at scale, ~65°C sorbent release step
    - FO (Trevi): 255-365 ML treated water per MW·yr, 30→45°C lift model
    - AWH (Uravu): 2-15 ML captured water per MW·yr, 30-55°C design envelope
    - Greenhouses: 4,500 MWh per hectare-year heating demand
    - District heat proxy: natural gas displaced at 0.202-0.27 kgCO₂/kWh
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple
import functools
import json
import logging
import re


logger = logging.getLogger(__name__)

REFERENCE_DATA_VERSION = "2025.1"

# Unit conversions
HOURS_PER_YEAR = 8760
L_PER_M3 = 1000.0
GAL_TO_M3 = 0.00378541

# DAC (at-scale)
DAC_TCO2_PER_MW_YEAR = 4550.0
DAC_WATER_M3_PER_MW_YEAR = 7280.0  # 1.6 m³/tCO₂ at the at-scale capture rate
DAC_RELEASE_TEMP_C = 65.0

# Forward osmosis (Trevi): planning range, midpoint used as baseline
FO_L_PER_MW_YEAR_RANGE = (255_000_000.0, 365_000_000.0)
FO_M3_PER_MW_YEAR_MID = sum(FO_L_PER_MW_YEAR_RANGE) / 2 / L_PER_M3

# Atmospheric water harvesting (Uravu): planning range, midpoint used
AWH_L_PER_MW_YEAR_RANGE = (2_000_000.0, 15_000_000.0)
AWH_M3_PER_MW_YEAR_MID = sum(AWH_L_PER_MW_YEAR_RANGE) / 2 / L_PER_M3

GREENHOUSE_MWH_PER_HA_YEAR = 4500.0
DEFAULT_MWH_PER_HOME_YEAR = 14.5
DEFAULT_PER_CAPITA_GPCD = 125.0  # Phoenix per-capita water use

FOOD_BREWERY_PROCESS_TEMP_C = 80.0  # boiling / pasteurisation steps
HOT_WATER_SUPPLY_TEMP_C = 60.0


class ReferenceDataError(ValueError):
    """Raised when reference tables are malformed or inconsistent."""


class OfftakeKind(Enum):
    """Downstream uses of recovered heat."""

    HOT_WATER = "hotWater"
    DISTRICT_HEAT = "districtHeat"
    WATER_TREATMENT_FO = "waterTreatmentFO"
    ATMOSPHERIC_WATER = "atmosphericWater"
    GREENHOUSES = "greenhouses"
    FOOD_BREWERY = "foodBrewery"
    DAC = "dac"

    @classmethod
    def parse(cls, value: Any) -> "OfftakeKind":
        """
        Resolve an offtake from its value or member name (case-insensitive).

        Raises:
            ValueError: If the text names no offtake
        """
        if isinstance(value, cls):
            return value

        text = str(value).strip().lower()
        for kind in cls:
            if text in (kind.value.lower(), kind.name.lower()):
                return kind

        available = ", ".join(k.value for k in cls)
        raise ValueError(f"Unknown offtake: {value}. Available: {available}")

    @property
    def is_water(self) -> bool:
        return self in (OfftakeKind.WATER_TREATMENT_FO, OfftakeKind.ATMOSPHERIC_WATER)

    @property
    def is_thermal(self) -> bool:
        """Offtakes paid per MWh of heat delivered."""
        return self in (
            OfftakeKind.DISTRICT_HEAT,
            OfftakeKind.GREENHOUSES,
            OfftakeKind.HOT_WATER,
            OfftakeKind.FOOD_BREWERY,
        )


@dataclass(frozen=True)
class PerformanceRamp:
    """
    Piecewise-linear temperature → performance multiplier.

    The multiplier is ``v0`` at or below ``t0_C``, ``v1`` at or above
    ``t1_C`` and linear in between. This expresses "a hotter DC loop helps
    the offtake" without a full thermodynamic model; it is a tuned
    simplification, not a physical law.
    """

    t0_C: float
    t1_C: float
    v0: float
    v1: float


@dataclass(frozen=True)
class PlantCost:
    """Offtake plant cost (externally supplied, not computed)."""

    capex_usd: float
    annual_opex_usd: float


@dataclass(frozen=True)
class CO2Range:
    """CO₂ avoided/removed range in kt per MW·yr."""

    min_kt_per_MWyr: float
    max_kt_per_MWyr: float

    @property
    def mid_kt_per_MWyr(self) -> float:
        return (self.min_kt_per_MWyr + self.max_kt_per_MWyr) / 2


@dataclass(frozen=True)
class OfftakeSpec:
    """Reference record for one offtake."""

    kind: OfftakeKind
    label: str
    co2_label: str
    plant_cost: PlantCost
    co2_range: CO2Range

    # Yield per MW·yr of recovered heat (or energy intensity for heat-only uses)
    reference_yield_per_MWyr: Optional[float] = None
    yield_unit: str = ""

    ramp: Optional[PerformanceRamp] = None
    process_temp_threshold_C: Optional[float] = None


@dataclass(frozen=True)
class Location:
    """Data center location (selected by key, never mutated)."""

    key: str
    label: str
    region: str  # "US" or "Europe"
    ambient_temp_C: float
    electricity_cost_per_MWh: float
    grid_emission_factor_kg_per_kWh: float


@dataclass(frozen=True)
class Facility:
    """
    Data center facility cooling profile.

    Sets the ceiling on achievable PUE/WUE improvement from heat reuse.
    ``wue_baseline_L_per_kWh`` is 0 for dry-cooled sites.
    """

    key: str
    name: str
    cooling_type: str
    ambient_temp_C: float
    electricity_cost_per_MWh: float
    pue_baseline: float
    pue_max_improvement_fraction: float
    wue_baseline_L_per_kWh: float
    whr_friendliness: str = ""

    @property
    def is_dry_cooled(self) -> bool:
        return self.wue_baseline_L_per_kWh <= 0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Facility":
        """
        Build a facility from a DC cooling scenario row.

        Column names follow the converted spreadsheet and are matched
        case-insensitively.
        """
        name = _row_value(row, "Facility", "Name")
        if not name:
            raise ReferenceDataError(f"Facility row has no name: {dict(row)}")

        key = _row_value(row, "Key") or _slugify(name)

        return cls(
            key=str(key),
            name=str(name),
            cooling_type=str(_row_value(row, "Cooling type", default="")),
            ambient_temp_C=_parse_float(_row_value(row, "Ambient temp (C)", default=20.0)),
            electricity_cost_per_MWh=_parse_float(
                _row_value(row, "Electricity cost ($/MWh)", default=0.0)
            ),
            pue_baseline=_parse_float(_row_value(row, "PUE baseline")),
            pue_max_improvement_fraction=_parse_float(_row_value(row, "PUE max improvement")),
            wue_baseline_L_per_kWh=_parse_float(
                _row_value(row, "WUE baseline (L/kWh)", "WUE baseline", default=0.0)
            ),
            whr_friendliness=str(_row_value(row, "WHR friendliness", default="")),
        )


@dataclass(frozen=True)
class PipingCostRow:
    """Piping cost for one region."""

    region: str
    base_capex_per_MW: float
    subsidy_fraction: float
    cost_per_km_per_MW: float

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "PipingCostRow":
        return cls(
            region=str(_row_value(row, "Region")).strip(),
            base_capex_per_MW=_parse_float(_row_value(row, "Base capex per MW")),
            subsidy_fraction=_parse_float(_row_value(row, "Subsidy fraction", default=0.0)),
            cost_per_km_per_MW=_parse_float(
                _row_value(row, "Cost per km per MW", "Cost per km")
            ),
        )


@dataclass(frozen=True)
class PipingLookup:
    """Outcome of a region lookup; ``row`` is None when nothing matched."""

    row: Optional[PipingCostRow]
    matched_key: Optional[str] = None
    used_fallback: bool = False


@dataclass(frozen=True)
class PipingCostTable:
    """
    Piping cost rows indexed by region label.

    Lookups try an exact (case-insensitive) label match first, then a
    substring match in either direction, then the default region row.
    """

    rows: Tuple[PipingCostRow, ...]
    default_label: str = "European average"
    _by_label: Mapping[str, PipingCostRow] = field(
        init=False, repr=False, compare=False, default=None
    )

    def __post_init__(self):
        object.__setattr__(self, "rows", tuple(self.rows))
        index = {row.region.lower(): row for row in self.rows}
        object.__setattr__(self, "_by_label", MappingProxyType(index))

    @classmethod
    def from_raw_rows(
        cls,
        document: Any,
        default_label: str = "European average",
    ) -> "PipingCostTable":
        """
        Build from the converted spreadsheet document.

        Args:
            document: ``{"raw_rows": [...]}`` or a bare list of rows
            default_label: Region used when no row matches

        Returns:
            PipingCostTable
        """
        if isinstance(document, Mapping):
            raw_rows = document.get("raw_rows")
        else:
            raw_rows = document
        if not isinstance(raw_rows, list):
            raise ReferenceDataError("Piping cost document must contain a 'raw_rows' list")

        rows = []
        for raw in raw_rows:
            # Spreadsheet exports carry blank and note rows
            if not isinstance(raw, Mapping) or not _row_value(raw, "Region"):
                logger.debug("Skipping piping row without region: %r", raw)
                continue
            rows.append(PipingCostRow.from_row(raw))

        return cls(rows=tuple(rows), default_label=default_label)

    def find(self, key: str) -> Optional[PipingCostRow]:
        """Find a row for ``key`` by exact then substring match."""
        needle = key.strip().lower()
        if not needle:
            return None
        if needle in self._by_label:
            return self._by_label[needle]
        for label, row in self._by_label.items():
            if label in needle or needle in label:
                return row
        return None

    def lookup(self, *keys: Optional[str]) -> PipingLookup:
        """
        Resolve the first key that matches a row, else the default row.

        Args:
            keys: Candidate keys in priority order (e.g. site label, region)

        Returns:
            PipingLookup (``row`` is None if even the default is missing)
        """
        for key in keys:
            if not key:
                continue
            row = self.find(key)
            if row is not None:
                return PipingLookup(row=row, matched_key=key)

        fallback = self._by_label.get(self.default_label.lower())
        if fallback is None:
            logger.warning(
                "No piping cost row for %s and no default region %r",
                [k for k in keys if k], self.default_label,
            )
        else:
            logger.info(
                "No piping cost row for %s, using %s",
                [k for k in keys if k], fallback.region,
            )
        return PipingLookup(row=fallback, matched_key=None, used_fallback=True)


# ============================================================================
# Default tables
# ============================================================================

OFFTAKE_SPECS: Tuple[OfftakeSpec, ...] = (
    OfftakeSpec(
        kind=OfftakeKind.DAC,
        label="Direct Air Capture (DAC)",
        co2_label="Direct Air Capture (DAC)",
        reference_yield_per_MWyr=DAC_TCO2_PER_MW_YEAR,
        yield_unit="tCO₂/MW·yr",
        ramp=PerformanceRamp(30.0, DAC_RELEASE_TEMP_C, 0.5, 1.0),
        plant_cost=PlantCost(capex_usd=12_000_000.0, annual_opex_usd=1_500_000.0),
        co2_range=CO2Range(4.55, 4.55),
    ),
    OfftakeSpec(
        kind=OfftakeKind.WATER_TREATMENT_FO,
        label="Water treatment (FO / Trevi)",
        co2_label="FO Waste Water Treatment",
        reference_yield_per_MWyr=FO_M3_PER_MW_YEAR_MID,
        yield_unit="m³/MW·yr",
        ramp=PerformanceRamp(30.0, 45.0, 0.85, 1.0),
        plant_cost=PlantCost(capex_usd=4_500_000.0, annual_opex_usd=600_000.0),
        co2_range=CO2Range(0.07, 0.10),
    ),
    OfftakeSpec(
        kind=OfftakeKind.ATMOSPHERIC_WATER,
        label="Atmospheric water capture (AWH / Uravu)",
        co2_label="Atmospheric Water Capture",
        reference_yield_per_MWyr=AWH_M3_PER_MW_YEAR_MID,
        yield_unit="m³/MW·yr",
        ramp=PerformanceRamp(30.0, 55.0, 0.75, 1.0),
        plant_cost=PlantCost(capex_usd=3_000_000.0, annual_opex_usd=350_000.0),
        co2_range=CO2Range(0.13, 0.53),
    ),
    OfftakeSpec(
        kind=OfftakeKind.GREENHOUSES,
        label="Greenhouses & agriculture",
        co2_label="Greenhouses & Agriculture",
        reference_yield_per_MWyr=GREENHOUSE_MWH_PER_HA_YEAR,
        yield_unit="MWh/ha·yr",
        ramp=PerformanceRamp(30.0, 60.0, 0.9, 1.0),
        plant_cost=PlantCost(capex_usd=1_800_000.0, annual_opex_usd=120_000.0),
        co2_range=CO2Range(0.26, 0.78),  # seasonal capacity-factor adjusted
    ),
    OfftakeSpec(
        kind=OfftakeKind.DISTRICT_HEAT,
        label="District heat / heated homes",
        co2_label="District Heating (proxy)",
        reference_yield_per_MWyr=DEFAULT_MWH_PER_HOME_YEAR,
        yield_unit="MWh/home·yr",
        plant_cost=PlantCost(capex_usd=2_500_000.0, annual_opex_usd=150_000.0),
        co2_range=CO2Range(1.77, 2.37),
    ),
    OfftakeSpec(
        kind=OfftakeKind.FOOD_BREWERY,
        label="Food & brewery industry",
        co2_label="Food & Beverage (EU)",
        plant_cost=PlantCost(capex_usd=1_200_000.0, annual_opex_usd=90_000.0),
        co2_range=CO2Range(0.65, 1.30),
        process_temp_threshold_C=FOOD_BREWERY_PROCESS_TEMP_C,
    ),
    OfftakeSpec(
        kind=OfftakeKind.HOT_WATER,
        label="Hot water (baseline equivalence)",
        co2_label="Hot Water (NG displacement proxy)",
        plant_cost=PlantCost(capex_usd=400_000.0, annual_opex_usd=25_000.0),
        co2_range=CO2Range(1.77, 2.37),
        process_temp_threshold_C=HOT_WATER_SUPPLY_TEMP_C,
    ),
)

DEFAULT_LOCATIONS: Tuple[Location, ...] = (
    Location("Seattle", "Seattle, WA", "US", 11.5, 99.9, 0.367),
    Location("Chicago", "Chicago, IL", "US", 10.5, 118.1, 0.367),
    Location("Phoenix", "Phoenix, AZ", "US", 24.0, 122.3, 0.367),
    Location("Atlanta", "Atlanta, GA", "US", 17.0, 108.7, 0.367),
    Location("Frankfurt", "Frankfurt, Germany", "Europe", 10.5, 284.0, 0.332),
    Location("Newport", "Newport, UK", "Europe", 10.5, 442.0, 0.217),
    Location("Agriport A7", "Agriport A7, Netherlands", "Europe", 10.0, 221.0, 0.253),
    Location("Zaragoza", "Zaragoza, Spain", "Europe", 15.5, 138.0, 0.153),
)

# DC cooling scenario rows, in the converted spreadsheet's column names
DEFAULT_FACILITY_ROWS: List[Dict[str, Any]] = [
    {
        "Key": "evaporative_hyperscale",
        "Facility": "Hyperscale evaporative",
        "Cooling type": "Evaporative cooling tower",
        "Ambient temp (C)": 24.0,
        "Electricity cost ($/MWh)": 122.3,
        "PUE baseline": 1.40,
        "PUE max improvement": 0.12,
        "WUE baseline (L/kWh)": 1.80,
        "WHR friendliness": "Medium",
    },
    {
        "Key": "hybrid_adiabatic",
        "Facility": "Hybrid adiabatic colocation",
        "Cooling type": "Hybrid adiabatic",
        "Ambient temp (C)": 10.5,
        "Electricity cost ($/MWh)": 284.0,
        "PUE baseline": 1.30,
        "PUE max improvement": 0.10,
        "WUE baseline (L/kWh)": 0.60,
        "WHR friendliness": "High",
    },
    {
        "Key": "air_cooled_enterprise",
        "Facility": "Air-cooled enterprise",
        "Cooling type": "Air-cooled (dry cooler)",
        "Ambient temp (C)": 10.5,
        "Electricity cost ($/MWh)": 118.1,
        "PUE baseline": 1.50,
        "PUE max improvement": 0.08,
        "WUE baseline (L/kWh)": 0.0,
        "WHR friendliness": "Low",
    },
    {
        "Key": "liquid_cooled_ai",
        "Facility": "Direct liquid-cooled AI cluster",
        "Cooling type": "Liquid-cooled, dry cooler heat rejection",
        "Ambient temp (C)": 15.5,
        "Electricity cost ($/MWh)": 138.0,
        "PUE baseline": 1.15,
        "PUE max improvement": 0.06,
        "WUE baseline (L/kWh)": 0.0,
        "WHR friendliness": "Very high",
    },
]

DEFAULT_PIPING_DOCUMENT: Dict[str, Any] = {
    "raw_rows": [
        {"Region": "US average", "Base capex per MW": 520_000, "Subsidy fraction": 0.0,
         "Cost per km per MW": 120_000},
        {"Region": "European average", "Base capex per MW": 480_000, "Subsidy fraction": 0.15,
         "Cost per km per MW": 150_000},
        {"Region": "Germany", "Base capex per MW": 510_000, "Subsidy fraction": 0.30,
         "Cost per km per MW": 165_000},
        {"Region": "Netherlands", "Base capex per MW": 470_000, "Subsidy fraction": 0.25,
         "Cost per km per MW": 140_000},
        {"Region": "UK", "Base capex per MW": 540_000, "Subsidy fraction": 0.10,
         "Cost per km per MW": 180_000},
        {"Region": "Spain", "Base capex per MW": 430_000, "Subsidy fraction": 0.20,
         "Cost per km per MW": 130_000},
    ]
}


@dataclass(frozen=True)
class ReferenceData:
    """
    Immutable bundle of every reference table the pipeline reads.

    Validated on construction; a malformed table raises
    ``ReferenceDataError`` at startup rather than failing per request.
    """

    offtakes: Mapping[OfftakeKind, OfftakeSpec]
    locations: Mapping[str, Location]
    facilities: Mapping[str, Facility]
    piping: PipingCostTable
    version: str = REFERENCE_DATA_VERSION

    def __post_init__(self):
        object.__setattr__(self, "offtakes", MappingProxyType(dict(self.offtakes)))
        object.__setattr__(self, "locations", MappingProxyType(dict(self.locations)))
        object.__setattr__(self, "facilities", MappingProxyType(dict(self.facilities)))
        self.validate()

    def offtake(self, kind: OfftakeKind) -> OfftakeSpec:
        return self.offtakes[OfftakeKind.parse(kind)]

    def location(self, key: Optional[str]) -> Optional[Location]:
        """Find a location by key or label (case-insensitive)."""
        return _find_by_key(self.locations, key, lambda loc: loc.label)

    def facility(self, key: Optional[str]) -> Optional[Facility]:
        """Find a facility by key or name (case-insensitive)."""
        return _find_by_key(self.facilities, key, lambda fac: fac.name)

    def validate(self):
        """
        Check tables for completeness and sane values.

        Raises:
            ReferenceDataError: Listing every problem found
        """
        problems = []

        missing = [k.value for k in OfftakeKind if k not in self.offtakes]
        if missing:
            problems.append(f"missing offtakes: {', '.join(missing)}")

        for kind, spec in self.offtakes.items():
            if spec.kind is not kind:
                problems.append(f"{kind.value}: record registered under wrong kind")
            if spec.ramp is not None and spec.ramp.t1_C <= spec.ramp.t0_C:
                problems.append(f"{kind.value}: ramp t1 must exceed t0")
            if spec.ramp is not None and min(spec.ramp.v0, spec.ramp.v1) < 0:
                problems.append(f"{kind.value}: ramp multipliers must be >= 0")
            if spec.reference_yield_per_MWyr is not None and spec.reference_yield_per_MWyr <= 0:
                problems.append(f"{kind.value}: reference yield must be > 0")
            if spec.plant_cost.capex_usd < 0 or spec.plant_cost.annual_opex_usd < 0:
                problems.append(f"{kind.value}: plant cost must be >= 0")
            co2 = spec.co2_range
            if co2.min_kt_per_MWyr < 0 or co2.min_kt_per_MWyr > co2.max_kt_per_MWyr:
                problems.append(f"{kind.value}: CO₂ range must satisfy 0 <= min <= max")

        if not self.locations:
            problems.append("no locations")
        for key, loc in self.locations.items():
            if loc.electricity_cost_per_MWh < 0 or loc.grid_emission_factor_kg_per_kWh < 0:
                problems.append(f"location {key}: negative price or emission factor")

        if not self.facilities:
            problems.append("no facilities")
        for key, fac in self.facilities.items():
            if fac.pue_baseline < 1.0:
                problems.append(f"facility {key}: PUE baseline below 1.0")
            if not 0.0 <= fac.pue_max_improvement_fraction < 1.0:
                problems.append(f"facility {key}: PUE max improvement outside [0, 1)")
            if fac.wue_baseline_L_per_kWh < 0:
                problems.append(f"facility {key}: negative WUE baseline")

        for row in self.piping.rows:
            if row.base_capex_per_MW < 0 or row.cost_per_km_per_MW < 0:
                problems.append(f"piping {row.region}: negative cost")
            if not 0.0 <= row.subsidy_fraction <= 1.0:
                problems.append(f"piping {row.region}: subsidy outside [0, 1]")

        if problems:
            raise ReferenceDataError("Invalid reference data: " + "; ".join(problems))


def build_reference_data(
    offtakes: Iterable[OfftakeSpec] = OFFTAKE_SPECS,
    locations: Iterable[Location] = DEFAULT_LOCATIONS,
    facility_rows: Iterable[Mapping[str, Any]] = DEFAULT_FACILITY_ROWS,
    piping_document: Any = DEFAULT_PIPING_DOCUMENT,
    default_region_label: str = "European average",
) -> ReferenceData:
    """
    Assemble and validate reference data from table records.

    Returns:
        ReferenceData

    Raises:
        ReferenceDataError: If any table is malformed
    """
    facilities = [Facility.from_row(row) for row in facility_rows]

    reference = ReferenceData(
        offtakes={spec.kind: spec for spec in offtakes},
        locations={loc.key: loc for loc in locations},
        facilities={fac.key: fac for fac in facilities},
        piping=PipingCostTable.from_raw_rows(piping_document, default_region_label),
    )
    logger.debug(
        "Loaded reference data v%s: %d locations, %d facilities, %d piping regions",
        reference.version, len(reference.locations),
        len(reference.facilities), len(reference.piping.rows),
    )
    return reference


@functools.lru_cache(maxsize=1)
def default_reference_data() -> ReferenceData:
    """Built-in reference tables (built once per process)."""
    return build_reference_data()


def load_reference_data(
    piping_path: Optional[str] = None,
    facilities_path: Optional[str] = None,
    default_region_label: str = "European average",
) -> ReferenceData:
    """
    Load reference data, replacing built-in tables with converted JSON files.

    Args:
        piping_path: JSON document shaped ``{"raw_rows": [...]}``
        facilities_path: JSON list of DC cooling scenario rows
        default_region_label: Fallback piping region

    Returns:
        ReferenceData
    """
    piping_document = DEFAULT_PIPING_DOCUMENT
    if piping_path is not None:
        with open(piping_path, 'r') as f:
            piping_document = json.load(f)

    facility_rows = DEFAULT_FACILITY_ROWS
    if facilities_path is not None:
        with open(facilities_path, 'r') as f:
            facility_rows = json.load(f)
        if not isinstance(facility_rows, list):
            raise ReferenceDataError("Facility document must be a list of rows")
        facility_rows = [row for row in facility_rows if _row_value(row, "Facility", "Name")]

    return build_reference_data(
        facility_rows=facility_rows,
        piping_document=piping_document,
        default_region_label=default_region_label,
    )


# ============================================================================
# Helpers
# ============================================================================

_MISSING = object()


def _row_value(row: Mapping[str, Any], *names: str, default: Any = _MISSING) -> Any:
    """Read the first present column (case-insensitive)."""
    lowered = {str(k).strip().lower(): v for k, v in row.items()}
    for name in names:
        value = lowered.get(name.lower())
        if value is not None and value != "":
            return value
    if default is _MISSING:
        return None
    return default


def _parse_float(value: Any) -> float:
    if value is None:
        raise ReferenceDataError("Missing numeric value")
    try:
        return float(str(value).replace(",", ""))
    except (ValueError, TypeError):
        raise ReferenceDataError(f"Not a number: {value!r}")


def _slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", str(text).lower()).strip("_")


def _find_by_key(table: Mapping[str, Any], key: Optional[str], label_of) -> Optional[Any]:
    if not key:
        return None
    if key in table:
        return table[key]
    needle = key.strip().lower()
    for item_key, item in table.items():
        if needle in (item_key.lower(), label_of(item).lower()):
            return item
    return None
