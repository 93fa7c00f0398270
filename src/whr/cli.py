"""
Command-line interface for the Waste Heat Reuse calculator.

Usage:
    whr compute [--it-load MW] [--recovery PCT] [--offtake KIND] [--json] [-o FILE]
    whr offtakes
    whr locations
    whr facilities
    whr server [--port PORT]
"""

import argparse
import logging
import sys


def cmd_compute(args):
    """Run one scenario."""
    from whr import OwnershipModel, ScenarioInputs, compute_derived_metrics, load_config

    try:
        inputs = ScenarioInputs(
            it_load_MW=args.it_load,
            recovery_pct=args.recovery,
            hours_per_year=args.hours,
            dc_return_temp_C=args.return_temp,
            selected_offtake=args.offtake,
            selected_location=args.location,
            selected_facility=args.facility,
            cooling_cop=args.cop,
            electricity_cost_per_MWh=args.electricity_cost,
            erf_pct=args.erf,
            ownership_model=args.ownership,
            tipping_fee_per_MWh=args.tipping_fee,
            revenue_share_pct=args.revenue_share,
            intake_distance_km=args.distance_km,
        )
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    metrics = compute_derived_metrics(inputs, config=load_config(args.config))

    if args.output:
        metrics.save(args.output)
        print(f"Results saved to {args.output}")
    elif args.json:
        print(metrics.to_json())
    else:
        print(metrics.summary())

    return 0


def cmd_offtakes(args):
    """List offtakes."""
    from whr import OfftakeKind, default_reference_data

    reference = default_reference_data()
    for kind in OfftakeKind:
        spec = reference.offtake(kind)
        ramp = spec.ramp
        ramp_text = (
            f"{ramp.t0_C:.0f}-{ramp.t1_C:.0f}°C → {ramp.v0:.2f}-{ramp.v1:.2f}"
            if ramp else "constant 1.0"
        )
        print(f"  {kind.value:<18} {spec.label:<32} {ramp_text}")
    return 0


def cmd_locations(args):
    """List data center locations."""
    from whr import default_reference_data

    for loc in default_reference_data().locations.values():
        print(
            f"  {loc.key:<12} {loc.label:<24} {loc.region:<7} "
            f"{loc.ambient_temp_C:5.1f}°C  ${loc.electricity_cost_per_MWh:6.1f}/MWh  "
            f"{loc.grid_emission_factor_kg_per_kWh:.3f} kg/kWh"
        )
    return 0


def cmd_facilities(args):
    """List facility cooling profiles."""
    from whr import default_reference_data

    for fac in default_reference_data().facilities.values():
        print(
            f"  {fac.key:<24} {fac.cooling_type:<42} "
            f"PUE {fac.pue_baseline:.2f}  WUE {fac.wue_baseline_L_per_kWh:.2f} L/kWh"
        )
    return 0


def cmd_server(args):
    """Start web server."""
    try:
        import uvicorn
    except ImportError:
        print("Web dependencies not installed. Run: pip install whr-calculator[web]")
        return 1
    uvicorn.run(
        "main:app",
        app_dir="web/backend",
        host="0.0.0.0",
        port=args.port,
        reload=args.reload,
    )
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="whr",
        description="Waste Heat Reuse calculator - offtake outputs, economics and CO₂ for DC heat",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # compute
    p_compute = subparsers.add_parser("compute", help="Compute one scenario")
    p_compute.add_argument("--it-load", type=float, default=200.0, help="IT load (MW)")
    p_compute.add_argument("--recovery", type=float, default=5.0, help="Heat recovery (%%)")
    p_compute.add_argument("--hours", type=float, default=8000.0, help="Operating hours per year")
    p_compute.add_argument("--return-temp", type=float, default=39.0, help="DC return temp (°C)")
    p_compute.add_argument("--offtake", default="dac", help="Offtake key (see 'whr offtakes')")
    p_compute.add_argument("--location", default="Frankfurt")
    p_compute.add_argument("--facility", default="hybrid_adiabatic")
    p_compute.add_argument("--cop", type=float, default=4.0, help="Cooling COP")
    p_compute.add_argument("--electricity-cost", type=float, default=None,
                           help="Electricity price ($/MWh, default: location price)")
    p_compute.add_argument("--erf", type=float, default=100.0, help="Energy reuse fraction (%%)")
    p_compute.add_argument("--ownership", default="A", choices=["A", "B", "C"])
    p_compute.add_argument("--tipping-fee", type=float, default=5.0, help="Model B fee ($/MWh)")
    p_compute.add_argument("--revenue-share", type=float, default=30.0, help="Model C share (%%)")
    p_compute.add_argument("--distance-km", type=float, default=1.0, help="Intake distance (km)")
    p_compute.add_argument("--config", help="Model config JSON file")
    p_compute.add_argument("--json", action="store_true", help="Print JSON instead of summary")
    p_compute.add_argument("-o", "--output", help="Output JSON file")

    # reference listings
    subparsers.add_parser("offtakes", help="List offtakes")
    subparsers.add_parser("locations", help="List locations")
    subparsers.add_parser("facilities", help="List facility cooling profiles")

    # server
    p_server = subparsers.add_parser("server", help="Start web server")
    p_server.add_argument("-p", "--port", type=int, default=8000)
    p_server.add_argument("--reload", action="store_true")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING - 10 * min(args.verbose, 2),
        format="%(levelname)s %(name)s: %(message)s",
    )

    commands = {
        "compute": cmd_compute,
        "offtakes": cmd_offtakes,
        "locations": cmd_locations,
        "facilities": cmd_facilities,
        "server": cmd_server,
    }
    if args.command in commands:
        sys.exit(commands[args.command](args))

    parser.print_help()
    sys.exit(0)


if __name__ == "__main__":
    main()
