"""
Localization Module: Geodesy and fix validation.

Key classes:
- ValidationPipeline: Recency -> accuracy -> distance-from-last-known
- ProximityGuard: Distance from last successful / registered reference
- haversine_km / distance_km / distance_m: Great-circle distances
"""

from .geodesy import (
    EARTH_RADIUS_KM,
    distance_km,
    distance_m,
    haversine_km,
    haversine_km_many,
)
from .validation_pipeline import (
    ALL_CRITERIA_MET,
    ValidationPipeline,
    epoch_ms,
)
from .proximity_guard import (
    NO_REFERENCE,
    ProximityGuard,
)

__all__ = [
    'EARTH_RADIUS_KM',
    'distance_km',
    'distance_m',
    'haversine_km',
    'haversine_km_many',
    'ALL_CRITERIA_MET',
    'ValidationPipeline',
    'epoch_ms',
    'NO_REFERENCE',
    'ProximityGuard',
]
