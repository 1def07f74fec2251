"""
Acquisition orchestrator: cascading-timeout race over three providers.

All three provider requests start at time zero and run concurrently.
Their results are observed in strict priority order, GPS > Network > Fused:

1. Wait for GPS (bounded by gps_timeout_ms, which is also the overall
   deadline). A fix wins and the other requests are cancelled. A
   ProviderDisabledError cancels the others and propagates.
2. Otherwise take Network's answer (its adapter enforces
   network_timeout_ms). A fix wins and Fused is cancelled.
3. Otherwise take Fused's answer, or None.

A lower-priority result that arrives early is held in its task until the
higher-priority sources have answered. Once the overall deadline passes
nothing is waited for any more: answers already held are still consulted
in priority order. Sources still pending are recorded as timed out,
cancelled and treated as empty. The race counts as cut short by the
deadline only when it ends without a fix.

Cancellation is fire-and-forget (Task.cancel()); it is never awaited.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from locfix_core.config import AcquisitionConfig
from locfix_core.metrics import get_metrics
from locfix_core.proto.location_sample import LocationSample, LocationSource
from locfix_core.providers import (
    FusedProviderAdapter,
    GpsProviderAdapter,
    LocationPlatform,
    NetworkProviderAdapter,
    ProviderAdapter,
)

logger = logging.getLogger(__name__)

PRIORITY_ORDER = (LocationSource.GPS, LocationSource.NETWORK, LocationSource.FUSED)


@dataclass
class RaceReport:
    """
    Diagnostics for one race.

    Attributes:
        winner: Source of the returned fix (None if no fix)
        cancelled: Sources abandoned while pending once the race was decided
        timed_out: Sources still silent when the overall deadline passed
        deadline_expired: True if the deadline passed with a source still
            pending and no fix was returned
        error: Message of the error that aborted the race, if any
        elapsed_ms: Wall-clock duration of the race
    """

    winner: Optional[LocationSource] = None
    cancelled: List[LocationSource] = field(default_factory=list)
    timed_out: List[LocationSource] = field(default_factory=list)
    deadline_expired: bool = False
    error: Optional[str] = None
    elapsed_ms: float = 0.0

    def to_dict(self) -> dict:
        return {
            'winner': self.winner.value if self.winner else None,
            'cancelled': [s.value for s in self.cancelled],
            'timed_out': [s.value for s in self.timed_out],
            'deadline_expired': self.deadline_expired,
            'error': self.error,
            'elapsed_ms': self.elapsed_ms,
        }


def _discard_outcome(task: asyncio.Task) -> None:
    """Mark a task's outcome as retrieved so unconsulted errors stay quiet."""
    if not task.cancelled():
        task.exception()


class AcquisitionOrchestrator:
    """
    Race GPS, Network and Fused providers and pick the winner by priority.

    Usage:
        orchestrator = AcquisitionOrchestrator.from_platform(platform, config)
        fix = await orchestrator.acquire()   # LocationSample or None
        print(orchestrator.last_race.to_dict())
    """

    def __init__(
        self,
        gps: ProviderAdapter,
        network: ProviderAdapter,
        fused: ProviderAdapter,
        config: Optional[AcquisitionConfig] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            gps: Highest-priority adapter
            network: Medium-priority adapter
            fused: Lowest-priority adapter
            config: Timeouts (uses defaults if None)
        """
        self.config = config or AcquisitionConfig()
        self.adapters: Dict[LocationSource, ProviderAdapter] = {
            LocationSource.GPS: gps,
            LocationSource.NETWORK: network,
            LocationSource.FUSED: fused,
        }
        self.metrics = get_metrics()
        self.last_race: Optional[RaceReport] = None

    @classmethod
    def from_platform(
        cls,
        platform: LocationPlatform,
        config: Optional[AcquisitionConfig] = None,
    ) -> 'AcquisitionOrchestrator':
        """Build the standard three-adapter orchestrator over one platform."""
        config = config or AcquisitionConfig()
        return cls(
            gps=GpsProviderAdapter(platform, config),
            network=NetworkProviderAdapter(platform, config),
            fused=FusedProviderAdapter(platform, config),
            config=config,
        )

    def _budget_ms(self, source: LocationSource) -> Optional[int]:
        if source is LocationSource.GPS:
            return self.config.gps_timeout_ms
        if source is LocationSource.NETWORK:
            return self.config.network_timeout_ms
        return None

    async def acquire(self) -> Optional[LocationSample]:
        """
        Run one race.

        Returns:
            Winning LocationSample, or None if no source produced a fix
            before the overall deadline

        Raises:
            ProviderDisabledError: GPS was switched off while in flight
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.config.gps_timeout_s
        started = time.monotonic()

        report = RaceReport()
        self.last_race = report
        self.metrics.increment('races_started')
        logger.info(f"Race started (deadline {self.config.gps_timeout_ms}ms)")

        tasks = {
            source: asyncio.ensure_future(self.adapters[source].request(self._budget_ms(source)))
            for source in PRIORITY_ORDER
        }

        try:
            fix = await self._observe_in_priority(tasks, deadline, report)
        except Exception as e:
            report.error = str(e)
            logger.warning(f"Race aborted: {e}")
            raise
        finally:
            self._cancel_pending(tasks, report)
            report.elapsed_ms = (time.monotonic() - started) * 1000.0
            self.metrics.record_histogram('race_elapsed_ms', report.elapsed_ms)

        report.deadline_expired = fix is None and bool(report.timed_out)
        if report.deadline_expired:
            self.metrics.increment('races_deadline_expired')

        if fix is None:
            logger.info(f"Race finished without a fix after {report.elapsed_ms:.0f}ms")
            return None

        report.winner = fix.source
        self.metrics.increment(f'winner_{fix.source.value.lower()}')
        logger.info(f"Race won by {fix.source.value} after {report.elapsed_ms:.0f}ms: {fix}")
        return fix

    async def _observe_in_priority(
        self,
        tasks: Dict[LocationSource, asyncio.Future],
        deadline: float,
        report: RaceReport,
    ) -> Optional[LocationSample]:
        loop = asyncio.get_running_loop()

        for source in PRIORITY_ORDER:
            task = tasks[source]

            if not task.done():
                remaining = deadline - loop.time()
                if remaining > 0:
                    await asyncio.wait({task}, timeout=remaining)

            if not task.done():
                report.timed_out.append(source)
                logger.info(f"{source.value}: no answer before the race deadline")
                continue

            # Re-raises ProviderDisabledError from the GPS request
            fix = task.result()
            if fix is not None:
                return fix

            logger.debug(f"{source.value}: no fix, falling through")

        return None

    def _cancel_pending(
        self,
        tasks: Dict[LocationSource, asyncio.Future],
        report: RaceReport,
    ) -> None:
        for source, task in tasks.items():
            if not task.done():
                task.cancel()
                if source not in report.timed_out:
                    report.cancelled.append(source)
                    logger.info(f"{source.value}: request cancelled")
            task.add_done_callback(_discard_outcome)
