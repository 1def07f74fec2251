"""
I/O Module: Platform implementations.

- SimulatedLocationPlatform: scripted sources for demos and tests
"""

from .simulated_platform import (
    SimulatedLocationPlatform,
    SimulatedSource,
    silent_source,
)

__all__ = [
    'SimulatedLocationPlatform',
    'SimulatedSource',
    'silent_source',
]
