"""
Acquisition configuration.

All durations are milliseconds, distances are in the unit named by the
field. The cascading-timeout protocol assumes
network_timeout_ms <= gps_timeout_ms; a violation is logged, not rejected.
"""

import logging
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Mapping

logger = logging.getLogger(__name__)


class StaleReferencePolicy(Enum):
    """What to do when the last known fix is older than last_known_location_age_ms."""

    FAIL = "fail"    # Staleness itself fails validation
    SKIP = "skip"    # Skip the distance check, keep validating


@dataclass(frozen=True)
class AcquisitionConfig:
    """
    Configuration for one AcquisitionService.

    Attributes:
        max_distance_km: Max distance from the last known fix (km)
        accuracy_threshold_m: Max accepted accuracy radius (m)
        gps_timeout_ms: GPS budget, also the overall race deadline (ms)
        network_timeout_ms: Network provider budget (ms)
        recency_threshold_ms: Max age of an accepted fix (ms)
        last_known_location_age_ms: Max age of the last known fix for the
            distance check (ms)
        proximity_threshold_m: Max distance from the reference location (m)
        gps_update_interval_ms: GPS feed update interval (ms)
        gps_min_distance_m: GPS feed minimum displacement between updates (m)
        network_update_interval_ms: Network request interval (ms)
        network_max_update_age_ms: Max age of a cached network fix (ms)
        stale_reference_policy: Handling of a stale last known fix
    """

    max_distance_km: float = 10.0
    accuracy_threshold_m: float = 100.0
    gps_timeout_ms: int = 30_000
    network_timeout_ms: int = 15_000
    recency_threshold_ms: int = 30_000
    last_known_location_age_ms: int = 600_000
    proximity_threshold_m: float = 1000.0

    gps_update_interval_ms: int = 1000
    gps_min_distance_m: float = 0.0
    network_update_interval_ms: int = 5000
    network_max_update_age_ms: int = 60_000

    stale_reference_policy: StaleReferencePolicy = StaleReferencePolicy.FAIL

    def __post_init__(self):
        """Warn about configurations the cascading protocol does not expect."""
        if self.network_timeout_ms > self.gps_timeout_ms:
            logger.warning(
                f"network_timeout_ms ({self.network_timeout_ms}) exceeds gps_timeout_ms "
                f"({self.gps_timeout_ms}); network results will be cut by the race deadline"
            )

    @property
    def gps_timeout_s(self) -> float:
        return self.gps_timeout_ms / 1000.0

    @property
    def network_timeout_s(self) -> float:
        return self.network_timeout_ms / 1000.0

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> 'AcquisitionConfig':
        """
        Build a config from a plain mapping (e.g. config.ACQUISITION_CONFIG).

        Args:
            values: Field names to values; missing fields keep defaults

        Returns:
            AcquisitionConfig

        Raises:
            ValueError: On unknown keys or an unknown stale_reference_policy
        """
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown acquisition config keys: {sorted(unknown)}")

        kwargs = dict(values)
        policy = kwargs.get('stale_reference_policy')
        if isinstance(policy, str):
            kwargs['stale_reference_policy'] = StaleReferencePolicy(policy.lower())

        return cls(**kwargs)

    def to_dict(self) -> dict:
        result = {f.name: getattr(self, f.name) for f in fields(self)}
        result['stale_reference_policy'] = self.stale_reference_policy.value
        return result
