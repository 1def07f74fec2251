"""
Providers Module: Platform boundary and per-source adapters.

Key classes:
- LocationPlatform: Capabilities the host must supply
- OneShotResult: Exactly-once bridge from callbacks to asyncio
- Registration: Platform subscription released exactly once
- GpsProviderAdapter / NetworkProviderAdapter / FusedProviderAdapter
"""

from .platform import (
    GPS_PROVIDER,
    FusedCallback,
    FusedLocationRequest,
    GpsListener,
    LocationPlatform,
    RequestPriority,
)
from .base import (
    OneShotResult,
    ProviderAdapter,
    Registration,
)
from .gps import GpsProviderAdapter
from .network import NetworkProviderAdapter
from .fused import FusedProviderAdapter

__all__ = [
    'GPS_PROVIDER',
    'FusedCallback',
    'FusedLocationRequest',
    'GpsListener',
    'LocationPlatform',
    'RequestPriority',
    'OneShotResult',
    'ProviderAdapter',
    'Registration',
    'GpsProviderAdapter',
    'NetworkProviderAdapter',
    'FusedProviderAdapter',
]
