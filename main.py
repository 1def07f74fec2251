"""
Location acquisition demo.

Runs acquisitions against a simulated platform so the race, validation
and proximity behaviour can be observed without device hardware.
"""

import sys
import json
import time
import asyncio
import logging
import argparse
from typing import List, Tuple

import config
from locfix_core import AcquisitionConfig, AcquisitionService, LocationSample, LocationSource
from locfix_core.io import SimulatedLocationPlatform, SimulatedSource, silent_source
from locfix_core.localization import haversine_km_many
from locfix_core.metrics import get_metrics

logging.basicConfig(
    level=getattr(logging, config.LOGGING_CONFIG["level"]),
    format=config.LOGGING_CONFIG["format"]
)
logger = logging.getLogger(__name__)

SCENARIOS = ("gps", "network", "fused", "stale", "none", "gps-disabled")


def _scaled_config() -> AcquisitionConfig:
    """Acquisition config with timeouts scaled by SIMULATION_CONFIG['time_scale']."""
    scale = config.SIMULATION_CONFIG["time_scale"]
    values = dict(config.ACQUISITION_CONFIG)
    values["gps_timeout_ms"] = int(values["gps_timeout_ms"] * scale)
    values["network_timeout_ms"] = int(values["network_timeout_ms"] * scale)
    return AcquisitionConfig.from_dict(values)


def _sample(source: LocationSource, accuracy_m: float, offset_deg: float = 0.0,
            age_ms: int = 0) -> LocationSample:
    sim = config.SIMULATION_CONFIG
    return LocationSample(
        latitude=sim["base_lat"] + offset_deg,
        longitude=sim["base_lon"] + offset_deg,
        accuracy_m=accuracy_m,
        captured_at_ms=int(time.time() * 1000) - age_ms,
        source=source,
    )


def script_sources(scenario: str, offset_deg: float = 0.0) -> Tuple[SimulatedSource, ...]:
    """Scripted (gps, network, fused) behaviour for one scenario."""
    sim = config.SIMULATION_CONFIG
    scale = sim["time_scale"]

    def source(kind: LocationSource, delay_key: str, accuracy_key: str) -> SimulatedSource:
        return SimulatedSource(
            delay_ms=sim[delay_key] * scale,
            sample=_sample(kind, sim[accuracy_key], offset_deg),
            stamp_on_delivery=True,
        )

    gps = source(LocationSource.GPS, "gps_delay_ms", "gps_accuracy_m")
    network = source(LocationSource.NETWORK, "network_delay_ms", "network_accuracy_m")
    fused = source(LocationSource.FUSED, "fused_delay_ms", "fused_accuracy_m")

    if scenario == "network":
        gps = silent_source()
    elif scenario == "fused":
        gps, network = silent_source(), silent_source()
    elif scenario == "stale":
        gps, network = silent_source(), silent_source()
        fused = SimulatedSource(
            delay_ms=sim["fused_delay_ms"] * scale,
            sample=_sample(LocationSource.FUSED, sim["fused_accuracy_m"], offset_deg,
                           age_ms=sim["stale_fix_age_ms"]),
        )
    elif scenario == "none":
        gps, network, fused = silent_source(), silent_source(), SimulatedSource()
    elif scenario == "gps-disabled":
        gps = SimulatedSource(respond=False,
                              disable_after_ms=sim["gps_disable_after_ms"] * scale)

    return gps, network, fused


async def run_scenario(scenario: str, runs: int) -> List[LocationSample]:
    """
    Run acquisitions for one scenario on a single service instance.

    Returns:
        Fixes from successful runs
    """
    platform = SimulatedLocationPlatform()
    service = AcquisitionService(platform, _scaled_config())
    fixes: List[LocationSample] = []

    for i in range(runs):
        # Small drift between runs, well inside the proximity threshold
        platform.gps, platform.network, platform.fused = script_sources(
            scenario, offset_deg=i * 0.0005
        )
        platform.gps_enabled = True

        result = await service.acquire()
        print(f"[run {i + 1}/{runs}] {json.dumps(result.to_dict(), indent=2)}")
        if result.success:
            fixes.append(result.location)

    return fixes


def _print_spread(fixes: List[LocationSample]):
    """Print how far successful fixes drifted from the first one."""
    if len(fixes) < 2:
        return
    distances_m = haversine_km_many(fixes[0], fixes[1:]) * 1000.0
    print(f"Drift from first fix: max={distances_m.max():.1f}m, mean={distances_m.mean():.1f}m")


def main():
    """Entry point."""
    parser = argparse.ArgumentParser(description='Location acquisition demo')
    parser.add_argument('--scenario', '-s', choices=SCENARIOS, default='gps',
                        help='Simulated source behaviour')
    parser.add_argument('--runs', '-n', type=int, default=1,
                        help='Number of acquisitions on one service')
    parser.add_argument('--debug', '-d', action='store_true',
                        help='Enable debug logging')

    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.runs < 1:
        parser.error("--runs must be at least 1")

    logger.info(f"Running scenario '{args.scenario}' ({args.runs} run(s))")
    fixes = asyncio.run(run_scenario(args.scenario, args.runs))

    _print_spread(fixes)
    get_metrics().print_summary()

    return 0 if fixes else 1


if __name__ == "__main__":
    sys.exit(main())
