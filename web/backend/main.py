"""
FastAPI Backend for the Waste Heat Reuse calculator.

Provides REST API endpoints for:
- Computing a full scenario
- Listing offtakes, locations and facility profiles
- CO₂ comparison at a given recovered heat
- Performance ramp curves

Every request recomputes from its own inputs; the service keeps no state.

Run with: uvicorn main:app --reload --port 8000
"""

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
import os
import sys

import numpy as np

# Add src directory to path for whr imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from whr import (
    __version__,
    MarketPricing,
    OfftakeKind,
    ScenarioInputs,
    build_co2_table,
    compute_derived_metrics,
    default_reference_data,
    evaluate_ramp,
)


# ============================================================================
# FastAPI App Configuration
# ============================================================================

app = FastAPI(
    title="Waste Heat Reuse Calculator API",
    description="Offtake outputs, economics and CO₂ for data center waste heat",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS for React frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Pydantic Models
# ============================================================================

class PricingConfig(BaseModel):
    """Market prices and production costs."""

    dac_market_price_per_t: float = Field(default=600.0, ge=0, description="DAC credit price ($/tCO₂)")
    dac_procurement_cost_per_t: float = Field(default=350.0, ge=0, description="DAC cost ($/tCO₂)")
    fo_market_price_per_m3: float = Field(default=1.5, ge=0)
    fo_production_cost_per_m3: float = Field(default=0.6, ge=0)
    awh_market_price_per_m3: float = Field(default=12.0, ge=0)
    awh_production_cost_per_m3: float = Field(default=7.0, ge=0)
    thermal_energy_price_per_MWh: float = Field(default=30.0, ge=0)


class ScenarioRequest(BaseModel):
    """Scenario inputs for one computation."""

    it_load_MW: float = Field(default=200.0, ge=0, le=10000, description="IT load (MW)")
    recovery_pct: float = Field(default=5.0, ge=0, le=100, description="Heat recovered (%)")
    hours_per_year: float = Field(default=8000.0, ge=0, le=8760)
    dc_return_temp_C: float = Field(default=39.0, ge=0, le=120, description="DC return temperature")
    loop_delta_t_C: Optional[float] = Field(default=None, ge=0, le=60)

    selected_offtake: str = Field(default="dac", description="Offtake key")
    selected_location: str = Field(default="Frankfurt")
    selected_facility: str = Field(default="hybrid_adiabatic")

    cooling_cop: float = Field(default=4.0, gt=0, le=20)
    electricity_cost_per_MWh: Optional[float] = Field(default=None, ge=0)
    erf_pct: float = Field(default=100.0, ge=0, le=100, description="Energy reuse fraction (%)")

    mwh_per_home_year: float = Field(default=14.5, ge=0)
    per_capita_gpcd: float = Field(default=125.0, ge=0)
    pricing: PricingConfig = Field(default_factory=PricingConfig)

    ownership_model: str = Field(default="A", pattern="^[ABCabc]$")
    tipping_fee_per_MWh: float = Field(default=5.0, ge=0)
    revenue_share_pct: float = Field(default=30.0, ge=0, le=100)
    whr_capital_cost_per_MW: float = Field(default=250_000.0, ge=0)
    intake_distance_km: float = Field(default=1.0, ge=0, le=100)

    def to_inputs(self) -> ScenarioInputs:
        data = self.model_dump()
        data["pricing"] = MarketPricing(**data["pricing"])
        return ScenarioInputs(**data)


# ============================================================================
# API Endpoints
# ============================================================================

@app.get("/", response_class=HTMLResponse)
async def root():
    """Root endpoint with API information."""
    return """
    <html>
        <head>
            <title>WHR API</title>
            <style>
                body { font-family: system-ui; max-width: 800px; margin: 50px auto; padding: 20px; }
                h1 { color: #ea580c; }
                a { color: #ea580c; }
                code { background: #f1f5f9; padding: 2px 6px; border-radius: 4px; }
            </style>
        </head>
        <body>
            <h1>Waste Heat Reuse Calculator API</h1>
            <p>Offtake outputs, economics and CO₂ for data center waste heat.</p>
            <h2>Quick Links</h2>
            <ul>
                <li><a href="/docs">Interactive API Documentation (Swagger)</a></li>
                <li><a href="/redoc">API Reference (ReDoc)</a></li>
                <li><a href="/health">Health Check</a></li>
            </ul>
            <h2>Key Endpoints</h2>
            <ul>
                <li><code>POST /api/compute</code> - Compute a scenario</li>
                <li><code>GET /api/offtakes</code> - List offtakes</li>
                <li><code>GET /api/locations</code> - List locations</li>
                <li><code>GET /api/facilities</code> - List facility profiles</li>
                <li><code>GET /api/co2</code> - CO₂ comparison</li>
                <li><code>GET /api/ramp/{offtake}</code> - Performance ramp curve</li>
            </ul>
        </body>
    </html>
    """


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": __version__,
        "reference_version": default_reference_data().version,
    }


@app.post("/api/compute")
async def compute(request: ScenarioRequest):
    """Compute all derived metrics for a scenario."""
    try:
        inputs = request.to_inputs()
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return compute_derived_metrics(inputs).to_dict()


@app.get("/api/offtakes")
async def list_offtakes():
    """List offtakes with their reference yields and ramps."""
    reference = default_reference_data()
    offtakes = []
    for kind in OfftakeKind:
        spec = reference.offtake(kind)
        ramp = spec.ramp
        offtakes.append({
            "id": kind.value,
            "label": spec.label,
            "reference_yield_per_MWyr": spec.reference_yield_per_MWyr,
            "yield_unit": spec.yield_unit,
            "ramp": {
                "t0_C": ramp.t0_C, "t1_C": ramp.t1_C, "v0": ramp.v0, "v1": ramp.v1,
            } if ramp else None,
            "process_temp_threshold_C": spec.process_temp_threshold_C,
            "plant_capex_usd": spec.plant_cost.capex_usd,
            "plant_opex_usd": spec.plant_cost.annual_opex_usd,
        })
    return {"offtakes": offtakes}


@app.get("/api/locations")
async def list_locations():
    """List data center locations."""
    return {
        "locations": [
            {
                "id": loc.key,
                "label": loc.label,
                "region": loc.region,
                "ambient_temp_C": loc.ambient_temp_C,
                "electricity_cost_per_MWh": loc.electricity_cost_per_MWh,
                "grid_emission_factor_kg_per_kWh": loc.grid_emission_factor_kg_per_kWh,
            }
            for loc in default_reference_data().locations.values()
        ]
    }


@app.get("/api/facilities")
async def list_facilities():
    """List facility cooling profiles."""
    return {
        "facilities": [
            {
                "id": fac.key,
                "name": fac.name,
                "cooling_type": fac.cooling_type,
                "pue_baseline": fac.pue_baseline,
                "pue_max_improvement_fraction": fac.pue_max_improvement_fraction,
                "wue_baseline_L_per_kWh": fac.wue_baseline_L_per_kWh,
                "dry_cooled": fac.is_dry_cooled,
            }
            for fac in default_reference_data().facilities.values()
        ]
    }


@app.get("/api/co2")
async def co2_comparison(recoverable_heat_MW: float = Query(default=1.0, ge=0)):
    """CO₂ comparison across offtakes at a given recovered heat."""
    rows = build_co2_table(recoverable_heat_MW, default_reference_data().offtakes)
    return {
        "recoverable_heat_MW": recoverable_heat_MW,
        "rows": [row.to_dict() for row in rows],
    }


@app.get("/api/ramp/{offtake}")
async def ramp_curve(
    offtake: str,
    t_min: float = Query(default=20.0, ge=-50, le=200),
    t_max: float = Query(default=80.0, ge=-50, le=200),
    n_points: int = Query(default=61, ge=2, le=1000),
):
    """Performance multiplier of an offtake over a temperature range."""
    try:
        kind = OfftakeKind.parse(offtake)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    if t_max <= t_min:
        raise HTTPException(status_code=400, detail="t_max must exceed t_min")

    temps = np.linspace(t_min, t_max, n_points)
    factors = evaluate_ramp(default_reference_data().offtake(kind).ramp, temps)

    return {
        "offtake": kind.value,
        "temperatures_C": temps.tolist(),
        "factors": np.asarray(factors).tolist(),
    }


# ============================================================================
# Run server
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
