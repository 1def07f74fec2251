"""
GPS provider adapter.

Subscribes to the continuous hardware GPS feed and takes the first fix.
If the GPS provider is switched off while waiting, the request fails with
ProviderDisabledError instead of quietly returning None.
"""

import logging

from locfix_core.errors import ProviderDisabledError
from locfix_core.proto.location_sample import LocationSample, LocationSource
from .base import OneShotResult, ProviderAdapter, Registration
from .platform import GPS_PROVIDER, GpsListener

logger = logging.getLogger(__name__)


class _FirstFixListener(GpsListener):
    """Completes the cell with the first GPS fix or a mid-flight disable."""

    def __init__(self, adapter: 'GpsProviderAdapter', cell: OneShotResult):
        self._adapter = adapter
        self._cell = cell

    def on_location_changed(self, sample: LocationSample) -> None:
        logger.debug(f"GPS: location changed {sample}")
        if not self._cell.resolve(self._adapter._tag(sample)):
            logger.debug("GPS: extra update ignored")

    def on_provider_enabled(self, provider: str) -> None:
        logger.debug(f"GPS: provider enabled: {provider}")

    def on_provider_disabled(self, provider: str) -> None:
        logger.debug(f"GPS: provider disabled: {provider}")
        if provider == GPS_PROVIDER:
            self._cell.fail(ProviderDisabledError(provider))


class GpsProviderAdapter(ProviderAdapter):
    """Hardware GPS: first fix from the continuous feed."""

    source = LocationSource.GPS

    def _can_request(self) -> bool:
        if not self.platform.is_gps_provider_enabled():
            logger.warning("GPS: provider disabled, not subscribing")
            self.metrics.increment_drop('provider_unavailable')
            return False

        if not self.platform.has_fine_location_permission():
            logger.warning("GPS: fine location permission missing")
            self.metrics.increment_drop('provider_permission_missing')
            return False

        return True

    def _register(self, cell: OneShotResult) -> Registration:
        listener = _FirstFixListener(self, cell)
        self.platform.request_gps_updates(
            listener,
            interval_ms=self.config.gps_update_interval_ms,
            min_distance_m=self.config.gps_min_distance_m,
        )
        return Registration(lambda: self.platform.remove_gps_updates(listener), "GPS")
