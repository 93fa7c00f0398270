"""
Test suite for the Waste Heat Reuse calculator.

Run with: pytest tests/test_whr.py -v
"""

import json

import pytest
import numpy as np
from numpy.testing import assert_allclose


class TestReferenceData:
    """Test reference tables and their validation."""

    def test_default_reference_has_every_offtake(self):
        from whr import OfftakeKind, default_reference_data

        reference = default_reference_data()
        assert set(reference.offtakes) == set(OfftakeKind)
        assert len(reference.locations) == 8
        assert reference.location("Frankfurt").electricity_cost_per_MWh == 284.0

    def test_default_reference_is_memoised(self):
        from whr import default_reference_data

        assert default_reference_data() is default_reference_data()

    def test_tables_are_read_only(self):
        from whr import default_reference_data

        reference = default_reference_data()
        with pytest.raises(TypeError):
            reference.locations["Nowhere"] = None

    def test_offtake_parse(self):
        from whr import OfftakeKind

        assert OfftakeKind.parse("dac") is OfftakeKind.DAC
        assert OfftakeKind.parse("WATERTREATMENTFO") is OfftakeKind.WATER_TREATMENT_FO
        assert OfftakeKind.parse("district_heat") is OfftakeKind.DISTRICT_HEAT

        with pytest.raises(ValueError, match="Unknown offtake"):
            OfftakeKind.parse("nuclear")

    def test_location_lookup_by_label(self):
        from whr import default_reference_data

        reference = default_reference_data()
        assert reference.location("newport, uk").key == "Newport"
        assert reference.location("Atlantis") is None

    def test_dry_cooled_facilities(self):
        from whr import default_reference_data

        reference = default_reference_data()
        assert reference.facility("air_cooled_enterprise").is_dry_cooled
        assert not reference.facility("evaporative_hyperscale").is_dry_cooled

    def test_facility_from_spreadsheet_row(self):
        from whr import Facility

        facility = Facility.from_row({
            "Facility": "Test Site",
            "Cooling type": "Evaporative cooling tower",
            "PUE baseline": "1.45",
            "PUE max improvement": 0.1,
            "WUE baseline (L/kWh)": "1,2",
        })
        assert facility.key == "test_site"
        assert facility.pue_baseline == 1.45

    def test_invalid_facility_rejected(self):
        from whr import ReferenceDataError, build_reference_data

        rows = [{
            "Facility": "Broken",
            "Cooling type": "Hybrid adiabatic",
            "PUE baseline": 0.9,
            "PUE max improvement": 0.1,
        }]
        with pytest.raises(ReferenceDataError, match="PUE baseline"):
            build_reference_data(facility_rows=rows)

    def test_missing_offtake_rejected(self):
        from whr import ReferenceDataError, build_reference_data
        from whr.reference import OFFTAKE_SPECS

        with pytest.raises(ReferenceDataError, match="missing offtakes"):
            build_reference_data(offtakes=OFFTAKE_SPECS[:-1])

    def test_load_reference_from_json(self, tmp_path):
        from whr import load_reference_data

        path = tmp_path / "piping.json"
        path.write_text(json.dumps({
            "raw_rows": [
                {"Region": "European average", "Base capex per MW": 400000,
                 "Subsidy fraction": 0, "Cost per km per MW": 100000},
                {"Region": "", "Base capex per MW": "note row"},
            ]
        }))

        reference = load_reference_data(piping_path=str(path))
        assert len(reference.piping.rows) == 1


class TestPipingLookup:
    """Test region lookup for piping costs."""

    def test_substring_match_on_label(self):
        from whr import default_reference_data

        table = default_reference_data().piping
        lookup = table.lookup("Frankfurt, Germany", "Europe")
        assert lookup.row.region == "Germany"
        assert not lookup.used_fallback

    def test_region_match(self):
        from whr import default_reference_data

        lookup = default_reference_data().piping.lookup("Phoenix, AZ", "US")
        assert lookup.row.region == "US average"

    def test_fallback_to_default_region(self):
        from whr import default_reference_data

        lookup = default_reference_data().piping.lookup("Oslo, Norway", "Nordics")
        assert lookup.used_fallback
        assert lookup.row.region == "European average"

    def test_no_row_and_no_default(self):
        from whr import PipingCostTable

        table = PipingCostTable.from_raw_rows({
            "raw_rows": [{"Region": "Japan", "Base capex per MW": 1,
                          "Cost per km per MW": 1}]
        })
        lookup = table.lookup("Frankfurt, Germany", "Europe")
        assert lookup.row is None
        assert lookup.used_fallback


class TestThermal:
    """Test the thermal core."""

    def test_defaults(self):
        from whr import compute_thermal

        t = compute_thermal(200, 5, 8000, 39)
        assert t.recoverable_heat_MW == 10.0
        assert t.annual_heat_MWh == 80000.0
        assert_allclose(t.effective_MWyr, 80000 / 8760)
        assert t.supply_temp_C == 27.0
        assert t.delta_t_C == 12.0

    def test_dac_reference_scenario(self):
        from whr import compute_thermal

        t = compute_thermal(50, 10, 8760, 65)
        assert t.recoverable_heat_MW == 5.0
        assert t.effective_MWyr == 5.0

    def test_inputs_clamped(self):
        from whr import compute_thermal

        t = compute_thermal(-10, 150, 10000, 40)
        assert t.recoverable_heat_MW == 0.0

        t = compute_thermal(10, 150, 10000, 40)
        assert t.recoverable_heat_MW == 10.0
        assert t.hours_per_year == 8760

    def test_recoverable_never_exceeds_load(self):
        from whr import compute_thermal

        for load in [0, 1, 50, 500]:
            for pct in [-5, 0, 37, 100, 120]:
                t = compute_thermal(load, pct, 8000, 40)
                assert 0 <= t.recoverable_heat_MW <= load

    def test_annual_heat_is_exact_product(self):
        from whr import compute_thermal

        t = compute_thermal(123.4, 7.7, 6543.2, 40)
        assert t.annual_heat_MWh == t.recoverable_heat_MW * t.hours_per_year

    def test_delta_t_floor(self):
        from whr import compute_thermal

        t = compute_thermal(10, 10, 8000, 5)
        assert t.supply_temp_C == 0.0
        assert t.delta_t_C == 5.0

        t = compute_thermal(10, 10, 8000, 0.5)
        assert t.delta_t_C == 1.0

    def test_custom_loop_delta(self):
        from whr import compute_thermal

        t = compute_thermal(10, 10, 8000, 39, loop_delta_t_C=20)
        assert t.supply_temp_C == 19.0
        assert t.delta_t_C == 20.0

    def test_annual_heat_linear_in_hours(self):
        from whr import compute_thermal

        half = compute_thermal(200, 5, 4000, 39)
        full = compute_thermal(200, 5, 8000, 39)
        assert_allclose(full.annual_heat_MWh, 2 * half.annual_heat_MWh)
        assert_allclose(full.effective_MWyr, 2 * half.effective_MWyr)
        assert full.recoverable_heat_MW == half.recoverable_heat_MW


class TestRamps:
    """Test the performance ramp primitive."""

    def test_breakpoints(self):
        from whr import ramp

        assert ramp(20, 30, 65, 0.5, 1.0) == 0.5
        assert ramp(30, 30, 65, 0.5, 1.0) == 0.5
        assert ramp(65, 30, 65, 0.5, 1.0) == 1.0
        assert ramp(90, 30, 65, 0.5, 1.0) == 1.0
        assert_allclose(ramp(47.5, 30, 65, 0.5, 1.0), 0.75)

    def test_scalar_returns_float(self):
        from whr import ramp

        assert isinstance(ramp(40, 30, 45, 0.85, 1.0), float)

    def test_array_input(self):
        from whr import ramp

        temps = np.linspace(0, 100, 201)
        values = ramp(temps, 30, 55, 0.75, 1.0)

        assert values.shape == temps.shape
        assert np.all(values >= 0.75)
        assert np.all(values <= 1.0)
        assert np.all(np.diff(values) >= 0)

    def test_no_ramp_is_constant(self):
        from whr import evaluate_ramp

        assert evaluate_ramp(None, 12.0) == 1.0
        assert_allclose(evaluate_ramp(None, np.array([10.0, 90.0])), [1.0, 1.0])

    def test_factors_for_all_offtakes(self):
        from whr import OfftakeKind, compute_performance_factors, default_reference_data

        factors = compute_performance_factors(45, default_reference_data().offtakes)
        assert factors.water_treatment_fo == 1.0
        assert_allclose(factors.dac, 0.5 + 15 / 35 * 0.5)
        assert factors[OfftakeKind.HOT_WATER] == 1.0
        assert factors["districtHeat"] == 1.0


class TestOfftakeOutputs:
    """Test physical outputs of every offtake."""

    def _outputs(self, load=50, pct=10, hours=8760, temp=65, **kwargs):
        from whr import (
            compute_offtake_outputs,
            compute_performance_factors,
            compute_thermal,
            default_reference_data,
        )

        offtakes = default_reference_data().offtakes
        thermal = compute_thermal(load, pct, hours, temp)
        factors = compute_performance_factors(temp, offtakes)
        return thermal, compute_offtake_outputs(thermal, factors, offtakes, **kwargs)

    def test_dac_reference_scenario(self):
        thermal, outputs = self._outputs()

        assert_allclose(outputs.dac_tco2, 22750.0)
        assert_allclose(outputs.dac_water_m3, 5 * 7280.0)

    def test_water_outputs(self):
        _, outputs = self._outputs(temp=45)

        assert_allclose(outputs.fo_water_m3, 5 * 310_000.0)
        awh_factor = 0.75 + 15 / 25 * 0.25
        assert_allclose(outputs.awh_water_m3, 5 * 8_500.0 * awh_factor)

    def test_people_served(self):
        _, outputs = self._outputs(temp=45)

        per_person = 125 * 0.00378541 * 365
        assert_allclose(outputs.m3_per_person_year, per_person)
        assert_allclose(outputs.fo_people_served, outputs.fo_water_m3 / per_person)

    def test_people_served_undefined_without_use(self):
        _, outputs = self._outputs(per_capita_gpcd=0)

        assert outputs.m3_per_person_year is None
        assert outputs.fo_people_served is None
        assert outputs.dac_people_served is None

    def test_homes_and_greenhouses(self):
        thermal, outputs = self._outputs(temp=40)

        assert_allclose(outputs.homes_heated, thermal.annual_heat_MWh / 14.5)
        assert_allclose(
            outputs.greenhouse_ha,
            thermal.annual_heat_MWh / 4500 * (0.9 + 10 / 30 * 0.1),
        )

    def test_homes_undefined_for_zero_demand(self):
        _, outputs = self._outputs(mwh_per_home_year=0)
        assert outputs.homes_heated is None

    def test_temperature_suitability_flags(self):
        _, cool = self._outputs(temp=40)
        _, hot = self._outputs(temp=85)

        assert not cool.food_brewery_suitable
        assert not cool.hot_water_suitable
        assert not cool.district_heat_high_grade
        assert hot.food_brewery_suitable
        assert hot.hot_water_suitable
        assert hot.district_heat_high_grade

    def test_primary_output(self):
        from whr import OfftakeKind

        _, outputs = self._outputs()

        value, unit = outputs.primary(OfftakeKind.DAC)
        assert_allclose(value, 22750.0)
        assert unit == "tCO₂/yr"
        assert outputs.primary("foodBrewery") == (None, "")

    def test_zero_load(self):
        _, outputs = self._outputs(load=0)

        assert outputs.dac_tco2 == 0
        assert outputs.fo_water_m3 == 0
        assert outputs.homes_heated == 0
        assert outputs.greenhouse_ha == 0

    def test_normalized_outputs_independent_of_size(self):
        from whr import ScenarioInputs, compute_derived_metrics

        small = compute_derived_metrics(ScenarioInputs(it_load_MW=10))
        large = compute_derived_metrics(ScenarioInputs(it_load_MW=400, hours_per_year=4000))

        assert small.normalized_outputs == large.normalized_outputs
        assert_allclose(small.normalized_outputs.homes_per_MWyr, 8760 / 14.5)


class TestDCEfficiency:
    """Test the PUE/WUE/ERE heuristic."""

    def _facility(self, key):
        from whr import default_reference_data
        return default_reference_data().facility(key)

    def test_temperature_adjustment(self):
        from whr import temperature_adjustment_factor

        assert_allclose(temperature_adjustment_factor(39), 0.86)
        assert temperature_adjustment_factor(25) == 1.0
        assert temperature_adjustment_factor(90) == 0.85

    def test_base_ere_by_cooling_type(self):
        from whr import base_ere

        assert base_ere("Evaporative cooling tower") == 0.30
        assert base_ere("Hybrid adiabatic") == 0.25
        assert base_ere("Air-cooled (dry cooler)") == 0.20
        assert base_ere("something else") == 0.20

    def test_hybrid_facility(self):
        from whr import compute_dc_efficiency

        eff = compute_dc_efficiency(self._facility("hybrid_adiabatic"), 100, 39)

        assert_allclose(eff.pue_with_hr, 1.30 * (1 - 0.10 * 0.86))
        assert_allclose(eff.wue_with_hr, 0.60 * (1 - 0.15 * 0.86))
        assert_allclose(eff.wue_reduction, 0.60 - eff.wue_with_hr)
        assert eff.ere == 0.25

    def test_dry_cooled_wue(self):
        from whr import compute_dc_efficiency

        eff = compute_dc_efficiency(self._facility("air_cooled_enterprise"), 80, 45)

        assert eff.wue_baseline == 0
        assert eff.wue_with_hr == 0
        assert eff.wue_reduction is None
        assert eff.wue_reduction_percent is None
        assert eff.pue_with_hr < eff.pue_baseline

    def test_zero_erf(self):
        from whr import compute_dc_efficiency

        eff = compute_dc_efficiency(self._facility("evaporative_hyperscale"), 0, 45)

        assert eff.pue_with_hr == eff.pue_baseline
        assert eff.ere is None

    def test_erf_clamped(self):
        from whr import compute_dc_efficiency

        facility = self._facility("evaporative_hyperscale")
        assert compute_dc_efficiency(facility, 150, 45) == compute_dc_efficiency(facility, 100, 45)


class TestEconomics:
    """Test cost and revenue primitives."""

    def test_piping_cost(self):
        from whr import compute_piping_cost, default_reference_data

        lookup = default_reference_data().piping.lookup("Germany")
        piping = compute_piping_cost(lookup, recoverable_heat_MW=10, distance_km=2)

        expected = (510_000 * 0.7 + 165_000 * 2) * 10
        assert_allclose(piping.capex_usd, expected)
        assert_allclose(piping.annual_opex_usd, 0.03 * expected)

    def test_piping_cost_without_row(self):
        from whr import PipingLookup, compute_piping_cost

        assert compute_piping_cost(PipingLookup(row=None), 10, 1) is None

    def test_operational_savings(self):
        from whr import compute_operational_savings

        savings = compute_operational_savings(10, 100, 8000, 4.0, 284.0)
        assert_allclose(savings, 10 * 8000 / 4 * 284)

        half = compute_operational_savings(10, 50, 8000, 4.0, 284.0)
        assert_allclose(half, savings / 2)

    def test_savings_inverse_in_cop(self):
        from whr import compute_operational_savings

        at_one = compute_operational_savings(10, 100, 1000, 1.0, 100.0)
        at_half = compute_operational_savings(10, 100, 1000, 0.5, 100.0)

        assert_allclose(at_one, 1_000_000.0)
        assert_allclose(at_half, 2 * at_one)

    def test_non_positive_cop_saves_nothing(self):
        from whr import avoided_cooling_energy

        assert avoided_cooling_energy(10, 100, 1000, 0.0) == 0.0
        assert avoided_cooling_energy(10, 100, 1000, -2.0) == 0.0

    def test_cop_below_one_flows_through_pipeline(self):
        from whr import ScenarioInputs, compute_derived_metrics

        metrics = compute_derived_metrics(ScenarioInputs(cooling_cop=0.5))
        assert metrics.cost_revenue.cooling_cop == 0.5
        assert_allclose(metrics.cost_revenue.avoided_cooling_MWh, 10 * 8000 / 0.5)

    def test_offtake_revenue(self):
        from whr import MarketPricing, OfftakeKind, compute_offtake_revenue
        from whr import ScenarioInputs, compute_derived_metrics

        metrics = compute_derived_metrics(ScenarioInputs())
        outputs = metrics.offtake_outputs
        thermal = metrics.thermal
        pricing = MarketPricing()

        dac = compute_offtake_revenue(OfftakeKind.DAC, outputs, thermal, pricing)
        assert_allclose(dac, outputs.dac_tco2 * (600 - 350))

        fo = compute_offtake_revenue("waterTreatmentFO", outputs, thermal, pricing)
        assert_allclose(fo, outputs.fo_water_m3 * (1.5 - 0.6))

        heat = compute_offtake_revenue(OfftakeKind.GREENHOUSES, outputs, thermal, pricing)
        assert_allclose(heat, thermal.annual_heat_MWh * 30)


class TestOwnership:
    """Test ownership models and payback."""

    def test_payback(self):
        from whr import payback_years

        assert payback_years(100, 30, 10) == 5.0
        assert payback_years(100, 10, 10) is None
        assert payback_years(100, 5, 10) is None
        assert payback_years(None, 30, 10) is None

    def test_payback_decreasing_in_revenue(self):
        from whr import payback_years

        paybacks = [payback_years(1000, r, 10) for r in [20, 50, 100, 500]]
        assert all(a > b for a, b in zip(paybacks, paybacks[1:]))

    def test_parse_model(self):
        from whr import OwnershipModel

        assert OwnershipModel.parse("a") is OwnershipModel.FULL_OWNERSHIP
        assert OwnershipModel.parse("revenue_share") is OwnershipModel.REVENUE_SHARE
        with pytest.raises(ValueError):
            OwnershipModel.parse("D")

    def test_full_ownership_capex(self):
        from whr import ScenarioInputs, compute_derived_metrics

        metrics = compute_derived_metrics(ScenarioInputs())
        costs = metrics.cost_revenue
        a = metrics.ownership["A"]

        assert_allclose(
            a.capex_usd,
            costs.heat_exchanger_capex_usd + costs.piping_capex_usd + costs.plant_capex_usd,
        )
        assert a.annual_opex_usd == costs.plant_opex_usd
        assert_allclose(
            a.annual_revenue_usd,
            costs.annual_operational_savings_usd + costs.offtake_revenue_usd,
        )

    def test_model_b_zero_tipping_fee(self):
        from whr import ScenarioInputs, compute_derived_metrics

        metrics = compute_derived_metrics(ScenarioInputs(tipping_fee_per_MWh=0))
        b = metrics.ownership["B"]

        assert b.annual_revenue_usd == metrics.cost_revenue.annual_operational_savings_usd
        assert b.capex_usd == metrics.cost_revenue.heat_exchanger_capex_usd
        assert b.annual_opex_usd == 0

    def test_model_b_third_party_profit(self):
        from whr import ScenarioInputs, compute_derived_metrics

        metrics = compute_derived_metrics(ScenarioInputs(tipping_fee_per_MWh=10))
        costs = metrics.cost_revenue
        b = metrics.ownership["B"]

        fee = metrics.annual_heat_MWh * 10
        assert_allclose(b.tipping_fee_paid_usd, fee)
        assert_allclose(b.third_party_profit_usd, costs.offtake_revenue_usd - costs.plant_opex_usd - fee)

    def test_model_c_revenue_share(self):
        from whr import ScenarioInputs, compute_derived_metrics

        metrics = compute_derived_metrics(ScenarioInputs(revenue_share_pct=40))
        costs = metrics.cost_revenue
        c = metrics.ownership["C"]

        assert_allclose(
            c.annual_revenue_usd,
            costs.annual_operational_savings_usd + 0.4 * costs.offtake_revenue_usd,
        )
        assert_allclose(c.third_party_profit_usd, 0.6 * costs.offtake_revenue_usd - costs.plant_opex_usd)

    def test_best_model(self):
        from whr import ScenarioInputs, compute_derived_metrics

        comparison = compute_derived_metrics(ScenarioInputs(ownership_model="C")).ownership
        defined = [r for r in comparison.rows() if r.payback_years is not None]

        assert comparison.selected.value == "C"
        assert comparison.best is min(defined, key=lambda r: r.payback_years).model

    def test_missing_piping_row_means_no_payback(self):
        from whr import ScenarioInputs, WasteHeatCalculator, build_reference_data

        reference = build_reference_data(piping_document={
            "raw_rows": [{"Region": "Japan", "Base capex per MW": 1, "Cost per km per MW": 1}]
        })
        metrics = WasteHeatCalculator(reference).compute(ScenarioInputs())

        assert metrics.cost_revenue.piping is None
        assert metrics.ownership["A"].capex_usd is None
        assert metrics.ownership["A"].payback_years is None
        assert metrics.ownership["B"].third_party_capex_usd is None


class TestCO2:
    """Test the CO₂ comparison table."""

    def test_table_covers_every_offtake(self):
        from whr import OfftakeKind, build_co2_table, default_reference_data

        rows = build_co2_table(10, default_reference_data().offtakes)
        assert [r.kind for r in rows] == list(OfftakeKind)

    def test_scaling(self):
        from whr import OfftakeKind, build_co2_table, default_reference_data

        rows = {r.kind: r for r in build_co2_table(10, default_reference_data().offtakes)}

        dac = rows[OfftakeKind.DAC]
        assert dac.min_kt_per_MWyr == dac.max_kt_per_MWyr
        assert_allclose(dac.mid_kt_per_year, 45.5)

        fo = rows[OfftakeKind.WATER_TREATMENT_FO]
        assert_allclose(fo.mid_kt_per_MWyr, 0.085)
        assert_allclose(fo.max_kt_per_year, 1.0)

    def test_hot_water_uses_gas_proxy(self):
        from whr import OfftakeKind, build_co2_table, default_reference_data

        rows = {r.kind: r for r in build_co2_table(1, default_reference_data().offtakes)}
        assert rows[OfftakeKind.HOT_WATER].mid_kt_per_MWyr == rows[OfftakeKind.DISTRICT_HEAT].mid_kt_per_MWyr

    def test_independent_of_selected_offtake(self):
        from whr import ScenarioInputs, compute_derived_metrics

        dac = compute_derived_metrics(ScenarioInputs(selected_offtake="dac"))
        heat = compute_derived_metrics(ScenarioInputs(selected_offtake="districtHeat"))
        assert dac.co2_table == heat.co2_table


class TestScenarioInputs:
    """Test scenario input parsing."""

    def test_defaults(self):
        from whr import OfftakeKind, OwnershipModel, ScenarioInputs

        inputs = ScenarioInputs()
        assert inputs.selected_offtake is OfftakeKind.DAC
        assert inputs.ownership_model is OwnershipModel.FULL_OWNERSHIP
        assert inputs.selected_location == "Frankfurt"
        assert inputs.electricity_cost_per_MWh is None

    def test_from_dict_camel_case(self):
        from whr import OfftakeKind, ScenarioInputs

        inputs = ScenarioInputs.from_dict({
            "itLoadMW": 50,
            "recoveryPct": 10,
            "selectedOfftake": "greenhouses",
            "ownershipModel": "b",
            "dacMarketPricePerTon": 700,
        })
        assert inputs.it_load_MW == 50
        assert inputs.selected_offtake is OfftakeKind.GREENHOUSES
        assert inputs.ownership_model.value == "B"
        assert inputs.pricing.dac_market_price_per_t == 700
        assert inputs.pricing.fo_market_price_per_m3 == 1.5

    def test_from_dict_snake_case_nested_pricing(self):
        from whr import ScenarioInputs

        inputs = ScenarioInputs.from_dict({
            "dc_return_temp_C": 55,
            "pricing": {"thermal_energy_price_per_MWh": 45},
        })
        assert inputs.dc_return_temp_C == 55
        assert inputs.pricing.thermal_energy_price_per_MWh == 45

    def test_from_dict_rejects_unknown(self):
        from whr import ScenarioInputs

        with pytest.raises(ValueError, match="Unknown scenario fields"):
            ScenarioInputs.from_dict({"itLoad": 50})

        with pytest.raises(ValueError, match="Unknown offtake"):
            ScenarioInputs.from_dict({"offtake": "bitcoin"})


class TestConfig:
    """Test model configuration."""

    def test_defaults(self):
        from whr import DEFAULT_CONFIG, load_config

        assert load_config() is DEFAULT_CONFIG
        assert DEFAULT_CONFIG.loop_delta_t_C == 12.0
        assert DEFAULT_CONFIG.piping_opex_fraction == 0.03

    def test_overrides(self):
        from whr import DEFAULT_CONFIG

        config = DEFAULT_CONFIG.with_overrides(loop_delta_t_C=8.0)
        assert config.loop_delta_t_C == 8.0
        assert DEFAULT_CONFIG.loop_delta_t_C == 12.0

    def test_save_and_load(self, tmp_path):
        from whr import DEFAULT_CONFIG, load_config, save_config

        path = tmp_path / "config.json"
        config = DEFAULT_CONFIG.with_overrides(piping_opex_fraction=0.05)
        save_config(config, str(path))

        assert load_config(str(path)) == config

    def test_config_flows_into_pipeline(self):
        from whr import DEFAULT_CONFIG, ScenarioInputs, compute_derived_metrics

        config = DEFAULT_CONFIG.with_overrides(loop_delta_t_C=20.0)
        metrics = compute_derived_metrics(ScenarioInputs(), config=config)
        assert metrics.delta_t_C == 20.0


class TestCalculator:
    """Test the full pipeline."""

    def test_default_scenario(self):
        from whr import compute_derived_metrics

        metrics = compute_derived_metrics()

        assert metrics.recoverable_heat_MW == 10.0
        assert metrics.annual_heat_MWh == 80000.0
        assert metrics.location.key == "Frankfurt"
        assert metrics.facility.key == "hybrid_adiabatic"
        assert_allclose(metrics.cost_revenue.annual_operational_savings_usd, 10 * 8000 / 4 * 284)
        assert_allclose(metrics.grid_co2_avoided_t, 20000 * 0.332)

    def test_dac_reference_scenario(self):
        from whr import ScenarioInputs, compute_derived_metrics

        metrics = compute_derived_metrics(ScenarioInputs(
            it_load_MW=50, recovery_pct=10, hours_per_year=8760, dc_return_temp_C=65,
        ))

        assert metrics.recoverable_heat_MW == 5.0
        assert metrics.effective_MWyr == 5.0
        assert metrics.performance.dac == 1.0
        assert_allclose(metrics.offtake_outputs.dac_tco2, 22750.0)

    def test_zero_load_scenario(self):
        from whr import ScenarioInputs, compute_derived_metrics

        metrics = compute_derived_metrics(ScenarioInputs(it_load_MW=0))

        assert metrics.recoverable_heat_MW == 0
        assert metrics.offtake_outputs.dac_tco2 == 0
        assert metrics.cost_revenue.annual_operational_savings_usd == 0
        assert all(r.payback_years is None for r in metrics.ownership.rows())
        assert metrics.ownership.best is None
        assert metrics.cost_revenue.offtake_revenue_usd == 0
        assert metrics.ownership["B"].annual_revenue_usd == 0
        assert metrics.ownership["C"].annual_revenue_usd == 0

    def test_inputs_frozen_after_compute(self):
        import dataclasses
        from whr import ScenarioInputs, compute_derived_metrics

        inputs = ScenarioInputs(it_load_MW=50)
        metrics = compute_derived_metrics(inputs)

        with pytest.raises(dataclasses.FrozenInstanceError):
            inputs.it_load_MW = 999

        dataclasses.replace(inputs, it_load_MW=999)
        assert metrics.to_dict()["inputs"]["it_load_MW"] == 50
        assert_allclose(metrics.recoverable_heat_MW, 2.5)

    def test_nested_results_read_only(self):
        from whr import OfftakeKind, OwnershipModel, compute_derived_metrics

        metrics = compute_derived_metrics()
        before = metrics.to_dict()

        with pytest.raises(TypeError):
            metrics.performance.factors[OfftakeKind.DAC] = 0.0
        with pytest.raises(TypeError):
            metrics.ownership.results[OwnershipModel.FULL_OWNERSHIP] = None
        assert isinstance(metrics.co2_table, tuple)

        assert metrics.to_dict() == before

    def test_dry_cooled_scenario(self):
        from whr import ScenarioInputs, compute_derived_metrics

        metrics = compute_derived_metrics(ScenarioInputs(selected_facility="liquid_cooled_ai"))

        assert metrics.dc_efficiency.wue_with_hr == 0
        assert metrics.dc_efficiency.wue_reduction is None

    def test_explicit_electricity_price(self):
        from whr import ScenarioInputs, compute_derived_metrics

        metrics = compute_derived_metrics(ScenarioInputs(electricity_cost_per_MWh=100))
        assert metrics.cost_revenue.electricity_cost_per_MWh == 100

    def test_unknown_location_falls_back(self, caplog):
        from whr import ScenarioInputs, compute_derived_metrics

        with caplog.at_level("WARNING", logger="whr.calculator"):
            metrics = compute_derived_metrics(ScenarioInputs(selected_location="Atlantis"))

        assert metrics.location.key == "Frankfurt"
        assert "Atlantis" in caplog.text

    def test_recompute_is_pure(self):
        from whr import ScenarioInputs, compute_derived_metrics

        inputs = ScenarioInputs(selected_offtake="atmosphericWater")
        assert compute_derived_metrics(inputs) == compute_derived_metrics(inputs)

    def test_json_export(self, tmp_path):
        from whr import ScenarioInputs, compute_derived_metrics

        metrics = compute_derived_metrics(ScenarioInputs(selected_facility="air_cooled_enterprise"))
        data = json.loads(metrics.to_json())

        assert data["thermal"]["recoverable_heat_MW"] == 10.0
        assert data["dc_efficiency"]["wue_reduction"] is None
        assert data["inputs"]["selected_offtake"] == "dac"
        assert len(data["co2_table"]) == 7

        path = tmp_path / "result.json"
        metrics.save(str(path))
        assert json.loads(path.read_text(encoding="utf-8")) == data

    def test_summary(self):
        from whr import ScenarioInputs, compute_derived_metrics

        summary = compute_derived_metrics(ScenarioInputs(selected_offtake="foodBrewery")).summary()

        assert "WASTE HEAT REUSE SCENARIO" in summary
        assert "needs heat lift" in summary
        assert "Frankfurt, Germany" in summary


class TestCLI:
    """Test the command-line interface."""

    def test_compute_json(self, capsys):
        from whr.cli import main

        with pytest.raises(SystemExit) as exc:
            main(["compute", "--it-load", "50", "--offtake", "greenhouses", "--json"])

        assert exc.value.code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["inputs"]["selected_offtake"] == "greenhouses"

    def test_compute_unknown_offtake(self, capsys):
        from whr.cli import main

        with pytest.raises(SystemExit) as exc:
            main(["compute", "--offtake", "bitcoin"])

        assert exc.value.code == 2
        assert "Unknown offtake" in capsys.readouterr().err

    def test_list_locations(self, capsys):
        from whr.cli import main

        with pytest.raises(SystemExit):
            main(["locations"])

        assert "Zaragoza" in capsys.readouterr().out
