"""
Simulated location platform.

Scripted stand-in for the host location stack. Each source answers after
a configurable delay by scheduling callbacks on the running event loop,
the same way a real platform delivers them from its looper. Every
subscription is tracked so callers can check nothing is left registered.
"""

import asyncio
import dataclasses
import logging
import time
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from locfix_core.proto.location_sample import LocationSample
from locfix_core.providers.platform import (
    GPS_PROVIDER,
    FusedCallback,
    FusedLocationRequest,
    GpsListener,
    LocationPlatform,
)

logger = logging.getLogger(__name__)


@dataclass
class SimulatedSource:
    """
    Scripted behaviour of one source.

    Attributes:
        delay_ms: Delay before the first answer (ms)
        sample: Fix to deliver; None answers without a fix
        respond: False never answers (provokes timeouts)
        repeat: Number of callbacks delivered (GPS feed / network updates)
        stamp_on_delivery: Replace captured_at_ms with the delivery time
        fail_with: Deliver this error instead of a fix (fused only)
        disable_after_ms: Switch GPS off after this delay (GPS only)
    """

    delay_ms: float = 0.0
    sample: Optional[LocationSample] = None
    respond: bool = True
    repeat: int = 1
    stamp_on_delivery: bool = False
    fail_with: Optional[Exception] = None
    disable_after_ms: Optional[float] = None


def silent_source() -> SimulatedSource:
    """A source that never answers."""
    return SimulatedSource(respond=False)


class SimulatedLocationPlatform(LocationPlatform):
    """
    LocationPlatform driven by SimulatedSource scripts.

    Usage:
        platform = SimulatedLocationPlatform(
            gps=SimulatedSource(delay_ms=50, sample=fix),
            network=silent_source(),
        )
        service = AcquisitionService(platform, config)
        result = await service.acquire()
        assert platform.active_registrations() == 0
    """

    def __init__(
        self,
        gps: Optional[SimulatedSource] = None,
        network: Optional[SimulatedSource] = None,
        fused: Optional[SimulatedSource] = None,
        fine_permission: bool = True,
        coarse_permission: bool = True,
        gps_enabled: bool = True,
    ):
        self.gps = gps or silent_source()
        self.network = network or silent_source()
        self.fused = fused or SimulatedSource()
        self.fine_permission = fine_permission
        self.coarse_permission = coarse_permission
        self.gps_enabled = gps_enabled

        self.requests: List[tuple] = []
        self.release_counts: Dict[str, int] = defaultdict(int)
        self._active: Dict[int, str] = {}
        self._handles: Dict[int, List[asyncio.TimerHandle]] = {}

    # Capability checks

    def has_fine_and_coarse_location_permission(self) -> bool:
        return self.fine_permission and self.coarse_permission

    def has_fine_location_permission(self) -> bool:
        return self.fine_permission

    def is_gps_provider_enabled(self) -> bool:
        return self.gps_enabled

    # Subscriptions

    def active_registrations(self, kind: Optional[str] = None) -> int:
        """Number of live subscriptions, optionally of one kind (gps/network/fused)."""
        if kind is None:
            return len(self._active)
        return sum(1 for k in self._active.values() if k == kind)

    def request_gps_updates(
        self,
        listener: GpsListener,
        interval_ms: int,
        min_distance_m: float,
    ) -> None:
        self.requests.append(('gps', interval_ms, min_distance_m))
        handles = []
        if self.gps.respond:
            for i in range(self.gps.repeat):
                handles.append(self._schedule(
                    self.gps.delay_ms + i * interval_ms,
                    self._deliver_gps, listener,
                ))
        if self.gps.disable_after_ms is not None:
            handles.append(self._schedule(self.gps.disable_after_ms, self._disable_gps, listener))
        self._track(listener, 'gps', handles)

    def remove_gps_updates(self, listener: GpsListener) -> None:
        self._untrack(listener, 'gps')

    def request_fused_updates(
        self,
        request: FusedLocationRequest,
        callback: FusedCallback,
    ) -> None:
        self.requests.append(('network', request))
        handles = []
        if self.network.respond:
            for i in range(min(self.network.repeat, request.max_updates)):
                handles.append(self._schedule(
                    self.network.delay_ms + i * request.interval_ms,
                    self._deliver_network, callback,
                ))
        self._track(callback, 'network', handles)

    def remove_fused_updates(self, callback: FusedCallback) -> None:
        self._untrack(callback, 'network')

    def get_last_location(
        self,
        on_success: Callable[[Optional[LocationSample]], None],
        on_failure: Callable[[Exception], None],
    ) -> Optional[Callable[[], None]]:
        self.requests.append(('fused',))
        token = object()
        handles = []
        if self.fused.respond:
            handles.append(self._schedule(
                self.fused.delay_ms, self._deliver_fused, token, on_success, on_failure,
            ))
        self._track(token, 'fused', handles)
        return lambda: self._untrack(token, 'fused')

    # Delivery

    def _schedule(self, delay_ms: float, callback, *args) -> asyncio.TimerHandle:
        loop = asyncio.get_running_loop()
        return loop.call_later(max(delay_ms, 0.0) / 1000.0, callback, *args)

    def _track(self, subscriber, kind: str, handles: List[asyncio.TimerHandle]) -> None:
        self._active[id(subscriber)] = kind
        self._handles[id(subscriber)] = handles
        logger.debug(f"Simulated {kind} subscription registered")

    def _untrack(self, subscriber, kind: str) -> None:
        key = id(subscriber)
        for handle in self._handles.pop(key, []):
            handle.cancel()
        if self._active.pop(key, None) is not None:
            self.release_counts[kind] += 1
            logger.debug(f"Simulated {kind} subscription removed")

    def _is_active(self, subscriber) -> bool:
        return id(subscriber) in self._active

    def _stamp(self, source: SimulatedSource) -> Optional[LocationSample]:
        sample = source.sample
        if sample is None or not source.stamp_on_delivery:
            return sample
        return dataclasses.replace(sample, captured_at_ms=int(time.time() * 1000))

    def _deliver_gps(self, listener: GpsListener) -> None:
        if not self._is_active(listener):
            return
        sample = self._stamp(self.gps)
        if sample is not None:
            listener.on_location_changed(sample)

    def _disable_gps(self, listener: GpsListener) -> None:
        self.gps_enabled = False
        if self._is_active(listener):
            listener.on_provider_disabled(GPS_PROVIDER)

    def _deliver_network(self, callback: FusedCallback) -> None:
        if not self._is_active(callback):
            return
        sample = self._stamp(self.network)
        callback.on_location_result([sample] if sample is not None else [])

    def _deliver_fused(self, token, on_success, on_failure) -> None:
        if not self._is_active(token):
            return
        if self.fused.fail_with is not None:
            on_failure(self.fused.fail_with)
        else:
            on_success(self._stamp(self.fused))
