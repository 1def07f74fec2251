"""
Platform capability boundary.

The host implements LocationPlatform over the real location stack
(hardware GPS feed, network-assisted requests, cached fused fix, runtime
permissions). Adapters only talk to this interface.

Callbacks may be delivered more than once and from any thread.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence

from locfix_core.proto.location_sample import LocationSample

GPS_PROVIDER = "gps"


class RequestPriority(Enum):
    """Power/accuracy trade-off for a fused request."""

    HIGH_ACCURACY = "high_accuracy"
    BALANCED_POWER_ACCURACY = "balanced_power_accuracy"
    LOW_POWER = "low_power"


@dataclass(frozen=True)
class FusedLocationRequest:
    """
    Request parameters for network-assisted updates.

    Attributes:
        priority: Power/accuracy trade-off
        interval_ms: Desired update interval (ms)
        max_updates: Stop after this many updates
        max_update_age_ms: Accept a cached fix up to this age (ms)
    """

    priority: RequestPriority
    interval_ms: int
    max_updates: int = 1
    max_update_age_ms: int = 0


class GpsListener(ABC):
    """Receiver for the continuous GPS feed."""

    @abstractmethod
    def on_location_changed(self, sample: LocationSample) -> None:
        ...

    def on_provider_enabled(self, provider: str) -> None:
        pass

    def on_provider_disabled(self, provider: str) -> None:
        pass


class FusedCallback(ABC):
    """Receiver for network-assisted location results."""

    @abstractmethod
    def on_location_result(self, samples: Sequence[LocationSample]) -> None:
        ...


class LocationPlatform(ABC):
    """Capabilities the acquisition core needs from the host platform."""

    @abstractmethod
    def has_fine_and_coarse_location_permission(self) -> bool:
        ...

    @abstractmethod
    def has_fine_location_permission(self) -> bool:
        ...

    @abstractmethod
    def is_gps_provider_enabled(self) -> bool:
        ...

    @abstractmethod
    def request_gps_updates(
        self,
        listener: GpsListener,
        interval_ms: int,
        min_distance_m: float,
    ) -> None:
        """Start delivering GPS fixes to listener until removed."""

    @abstractmethod
    def remove_gps_updates(self, listener: GpsListener) -> None:
        ...

    @abstractmethod
    def request_fused_updates(
        self,
        request: FusedLocationRequest,
        callback: FusedCallback,
    ) -> None:
        """Start delivering network-assisted results to callback until removed."""

    @abstractmethod
    def remove_fused_updates(self, callback: FusedCallback) -> None:
        ...

    @abstractmethod
    def get_last_location(
        self,
        on_success: Callable[[Optional[LocationSample]], None],
        on_failure: Callable[[Exception], None],
    ) -> Optional[Callable[[], None]]:
        """
        Ask for the single best cached fix.

        Args:
            on_success: Called with the fix, or None if nothing is cached
            on_failure: Called with the platform error

        Returns:
            Optional cancel hook, invoked if the caller stops waiting
        """
