"""
Network provider adapter.

One balanced-power request for at most a single update, accepting a
cached network fix up to network_max_update_age_ms old.
"""

import logging
from typing import Sequence

from locfix_core.proto.location_sample import LocationSample, LocationSource
from .base import OneShotResult, ProviderAdapter, Registration
from .platform import FusedCallback, FusedLocationRequest, RequestPriority

logger = logging.getLogger(__name__)


class _SingleResultCallback(FusedCallback):
    """Completes the cell with the newest sample of the first result."""

    def __init__(self, adapter: 'NetworkProviderAdapter', cell: OneShotResult):
        self._adapter = adapter
        self._cell = cell

    def on_location_result(self, samples: Sequence[LocationSample]) -> None:
        if not samples:
            logger.debug("NETWORK: result carried no location")
            self._cell.resolve(None)
            return

        logger.debug(f"NETWORK: result with {len(samples)} location(s)")
        self._cell.resolve(self._adapter._tag(samples[-1]))


class NetworkProviderAdapter(ProviderAdapter):
    """Network-assisted fix via a single balanced-power request."""

    source = LocationSource.NETWORK

    def build_request(self) -> FusedLocationRequest:
        return FusedLocationRequest(
            priority=RequestPriority.BALANCED_POWER_ACCURACY,
            interval_ms=self.config.network_update_interval_ms,
            max_updates=1,
            max_update_age_ms=self.config.network_max_update_age_ms,
        )

    def _register(self, cell: OneShotResult) -> Registration:
        callback = _SingleResultCallback(self, cell)
        self.platform.request_fused_updates(self.build_request(), callback)
        return Registration(lambda: self.platform.remove_fused_updates(callback), "NETWORK")
