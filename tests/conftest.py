"""
Pytest configuration and shared fixtures for location acquisition tests.

Provides a fixed clock, sample factories, short-timeout configs and
scripted simulated platforms.
"""

import sys
from pathlib import Path
from typing import Callable

import pytest

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from locfix_core.config import AcquisitionConfig
from locfix_core.io import SimulatedLocationPlatform, SimulatedSource, silent_source
from locfix_core.metrics import reset_metrics
from locfix_core.proto import LocationSample, LocationSource


# =============================================================================
# Clock and Sample Fixtures
# =============================================================================

NOW_MS = 1_700_000_000_000

NEW_DELHI = (28.6139, 77.2090)


@pytest.fixture(autouse=True)
def fresh_metrics():
    """Every test starts with an empty global metrics collector."""
    reset_metrics()
    yield


@pytest.fixture
def clock() -> Callable[[], int]:
    """Fixed clock returning NOW_MS."""
    return lambda: NOW_MS


@pytest.fixture
def make_sample() -> Callable[..., LocationSample]:
    """
    Factory for LocationSample.

    Defaults to a fresh, 10m-accurate GPS fix in New Delhi captured at NOW_MS.
    """
    def _make(
        lat: float = NEW_DELHI[0],
        lon: float = NEW_DELHI[1],
        accuracy_m: float = 10.0,
        age_ms: int = 0,
        source: LocationSource = LocationSource.GPS,
    ) -> LocationSample:
        return LocationSample(
            latitude=lat,
            longitude=lon,
            accuracy_m=accuracy_m,
            captured_at_ms=NOW_MS - age_ms,
            source=source,
        )

    return _make


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def default_config() -> AcquisitionConfig:
    """Defaults from the data model."""
    return AcquisitionConfig()


@pytest.fixture
def fast_config() -> AcquisitionConfig:
    """
    Short timeouts for race tests.

    GPS budget (overall deadline) 400ms, network budget 200ms.
    """
    return AcquisitionConfig(gps_timeout_ms=400, network_timeout_ms=200)


# =============================================================================
# Platform Fixtures
# =============================================================================


@pytest.fixture
def make_platform(make_sample) -> Callable[..., SimulatedLocationPlatform]:
    """
    Factory for SimulatedLocationPlatform.

    Each source argument is either a SimulatedSource, None (never answers),
    or a (delay_ms, LocationSample | None) tuple.
    """
    def _source(script):
        if script is None:
            return silent_source()
        if isinstance(script, SimulatedSource):
            return script
        delay_ms, sample = script
        return SimulatedSource(delay_ms=delay_ms, sample=sample)

    def _make(gps=None, network=None, fused=None, **kwargs) -> SimulatedLocationPlatform:
        return SimulatedLocationPlatform(
            gps=_source(gps),
            network=_source(network),
            fused=_source(fused) if fused is not None else SimulatedSource(),
            **kwargs,
        )

    return _make
