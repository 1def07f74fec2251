"""
Location Sample Schema.

A single fix reported by one location source. Produced by a provider
adapter and treated as an immutable value afterwards (it is copied by
reference into service state when promoted to "last successful").
"""

from dataclasses import dataclass
from enum import Enum


class LocationSource(Enum):
    """Source of a location fix, in priority order (GPS highest)."""

    GPS = "GPS"
    NETWORK = "NETWORK"
    FUSED = "FUSED"

    @property
    def priority(self) -> int:
        """Priority rank: 0 is preferred over 1, 1 over 2."""
        return _PRIORITY[self]


_PRIORITY = {
    LocationSource.GPS: 0,
    LocationSource.NETWORK: 1,
    LocationSource.FUSED: 2,
}


@dataclass(frozen=True)
class LocationSample:
    """
    Location fix from a single provider.

    Attributes:
        latitude: WGS84 latitude in degrees
        longitude: WGS84 longitude in degrees
        accuracy_m: Horizontal accuracy radius in meters (lower is better)
        captured_at_ms: Capture time (Unix epoch milliseconds)
        source: Provider that produced the fix
    """

    latitude: float
    longitude: float
    accuracy_m: float
    captured_at_ms: int
    source: LocationSource

    def __post_init__(self):
        """Validate sample."""
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude out of range: {self.latitude}")

        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude out of range: {self.longitude}")

        if not self.accuracy_m >= 0:
            raise ValueError(f"Accuracy must be a non-negative number: {self.accuracy_m}")

    def age_ms(self, now_ms: int) -> int:
        """Milliseconds elapsed between capture and now_ms."""
        return now_ms - self.captured_at_ms

    def with_source(self, source: LocationSource) -> 'LocationSample':
        """Copy of this sample attributed to another source."""
        return LocationSample(
            latitude=self.latitude,
            longitude=self.longitude,
            accuracy_m=self.accuracy_m,
            captured_at_ms=self.captured_at_ms,
            source=source,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'latitude': self.latitude,
            'longitude': self.longitude,
            'accuracy_m': self.accuracy_m,
            'captured_at_ms': self.captured_at_ms,
            'source': self.source.value,
        }

    def __str__(self) -> str:
        return (f"{self.source.value}(lat={self.latitude:.6f}, lon={self.longitude:.6f}, "
                f"acc={self.accuracy_m:.1f}m)")
