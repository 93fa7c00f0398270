#!/usr/bin/env python3
"""
WHR Quickstart Example
======================
Demonstrates core functionality in 20 lines.
"""

from whr import ScenarioInputs, compute_derived_metrics

# 1. Default scenario (200 MW, 5% recovered, DAC, Frankfurt)
metrics = compute_derived_metrics()
print(f"Recoverable: {metrics.recoverable_heat_MW:.1f} MW | DAC: {metrics.offtake_outputs.dac_tco2:,.0f} tCO₂/yr")

# 2. Hotter loop, greenhouse offtake in Zaragoza
inputs = ScenarioInputs(dc_return_temp_C=55, selected_offtake="greenhouses", selected_location="Zaragoza")
metrics = compute_derived_metrics(inputs)
print(f"Greenhouses: {metrics.offtake_outputs.greenhouse_ha:.1f} ha")

# 3. Ownership comparison
for result in metrics.ownership.rows():
    payback = f"{result.payback_years:.1f} yr" if result.has_payback else "no payback"
    print(f"Model {result.model.value} ({result.model.label}): {payback}")

# 4. Full report
print(metrics.summary())
