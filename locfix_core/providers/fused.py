"""
Fused provider adapter.

Asks the platform for its single best cached fix. No timeout of its own;
the orchestrator's overall deadline bounds the wait.
"""

import logging

from locfix_core.proto.location_sample import LocationSource
from .base import OneShotResult, ProviderAdapter, Registration

logger = logging.getLogger(__name__)


class FusedProviderAdapter(ProviderAdapter):
    """Platform last-known fix (None immediately if nothing is cached)."""

    source = LocationSource.FUSED

    def _register(self, cell: OneShotResult) -> Registration:
        cancel = self.platform.get_last_location(
            on_success=lambda sample: cell.resolve(self._tag(sample)),
            on_failure=cell.fail,
        )
        return Registration(cancel, "FUSED")
