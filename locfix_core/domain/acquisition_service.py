"""
Acquisition service: single entry point for the host.

Sequence for acquire():
1. Permission pre-check        -> PERMISSION_DENIED / REQUEST_PERMISSIONS
2. GPS-enabled pre-check       -> GPS_DISABLED / ENABLE_GPS
3. Orchestrator race           -> NO_VALID_LOCATION / CALIBRATE_DEVICE
4. Validation pipeline         -> VALIDATION_FAILED
5. Proximity guard             -> PROXIMITY_FAILED
6. Success: fix becomes the last successful location

Errors raised by collaborators are caught here and mapped to an
AcquisitionFailure. Calls to acquire() on one instance are serialized, so
each call sees the state left by the previous one.
"""

import asyncio
import logging
from typing import Callable, Optional

from locfix_core.config import AcquisitionConfig
from locfix_core.errors import LocationAcquisitionError
from locfix_core.localization import ProximityGuard, ValidationPipeline
from locfix_core.metrics import get_metrics
from locfix_core.proto.acquisition_result import (
    AcquisitionFailure,
    AcquisitionResult,
    AcquisitionSuccess,
    ErrorKind,
    RecommendedAction,
)
from locfix_core.proto.location_sample import LocationSample
from locfix_core.providers import LocationPlatform
from .orchestrator import AcquisitionOrchestrator

logger = logging.getLogger(__name__)

MSG_PERMISSION_REQUIRED = "Fine and coarse location permissions are required"
MSG_GPS_DISABLED = "GPS is disabled; enable location services to continue"
MSG_CALIBRATE_DEVICE = "No valid location could be acquired; calibrate the device and retry"

# Only NO_VALID_LOCATION has a known remediation when it arrives as an error
RECOMMENDED_ACTIONS = {
    ErrorKind.NO_VALID_LOCATION: RecommendedAction.CALIBRATE_DEVICE,
}


class AcquisitionService:
    """
    Owns cross-call location state and runs the acquisition sequence.

    State:
        last_known_location: Externally supplied prior trusted fix, used
            by the distance check
        last_successful_location: Updated on every fully validated fix,
            preferred proximity reference
        registered_reference_location: Externally supplied fixed anchor,
            proximity reference until a successful fix exists

    Usage:
        service = AcquisitionService(platform, AcquisitionConfig())
        service.set_registered_reference_location(shop)
        result = await service.acquire()
        if result.success:
            print(result.location)
        else:
            print(result.error_kind, result.recommended_action)
    """

    def __init__(
        self,
        platform: LocationPlatform,
        config: Optional[AcquisitionConfig] = None,
        orchestrator: Optional[AcquisitionOrchestrator] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        """
        Initialize service.

        Args:
            platform: Host capabilities (permissions, GPS state, providers)
            config: Thresholds and timeouts (uses defaults if None)
            orchestrator: Custom orchestrator (built from platform if None)
            clock: Returns current epoch milliseconds (wall clock if None)
        """
        self.platform = platform
        self.config = config or AcquisitionConfig()
        self.orchestrator = orchestrator or AcquisitionOrchestrator.from_platform(
            platform, self.config
        )
        self.validation = ValidationPipeline(self.config, clock=clock)
        self.proximity = ProximityGuard(self.config)
        self.metrics = get_metrics()

        self._last_known_location: Optional[LocationSample] = None
        self._last_successful_location: Optional[LocationSample] = None
        self._registered_reference_location: Optional[LocationSample] = None

        self._lock: Optional[asyncio.Lock] = None

    @property
    def last_known_location(self) -> Optional[LocationSample]:
        return self._last_known_location

    @property
    def last_successful_location(self) -> Optional[LocationSample]:
        return self._last_successful_location

    @property
    def registered_reference_location(self) -> Optional[LocationSample]:
        return self._registered_reference_location

    def set_last_known_location(self, sample: LocationSample) -> None:
        """Replace the prior trusted fix used by the distance check."""
        self._last_known_location = sample
        logger.info(f"Last known location set: {sample}")

    def set_registered_reference_location(self, sample: LocationSample) -> None:
        """Replace the fixed reference point used by the proximity guard."""
        self._registered_reference_location = sample
        logger.info(f"Registered reference location set: {sample}")

    async def acquire(self) -> AcquisitionResult:
        """
        Acquire, validate and proximity-check one fix.

        Returns:
            AcquisitionSuccess or AcquisitionFailure; never raises for
            acquisition problems
        """
        if self._lock is None:
            self._lock = asyncio.Lock()

        async with self._lock:
            self.metrics.increment('acquisitions_started')
            logger.info("Starting location acquisition")

            try:
                result = await self._acquire_locked()
            except LocationAcquisitionError as e:
                result = self._map_error(e.error_kind, e.message)
            except Exception as e:
                logger.exception("Unexpected error during acquisition")
                result = self._map_error(ErrorKind.UNEXPECTED_ERROR, str(e) or type(e).__name__)

            if result.success:
                self.metrics.increment('acquisitions_succeeded')
            else:
                self.metrics.increment('acquisitions_failed')
                self.metrics.increment(f'failed_{result.error_kind.value.lower()}')
                logger.warning(f"Acquisition failed: {result.error_kind.value}: {result.message}")

            return result

    async def _acquire_locked(self) -> AcquisitionResult:
        if not self.platform.has_fine_and_coarse_location_permission():
            return AcquisitionFailure(
                ErrorKind.PERMISSION_DENIED,
                MSG_PERMISSION_REQUIRED,
                RecommendedAction.REQUEST_PERMISSIONS,
            )

        if not self.platform.is_gps_provider_enabled():
            return AcquisitionFailure(
                ErrorKind.GPS_DISABLED,
                MSG_GPS_DISABLED,
                RecommendedAction.ENABLE_GPS,
            )

        fix = await self.orchestrator.acquire()
        if fix is None:
            return AcquisitionFailure(
                ErrorKind.NO_VALID_LOCATION,
                MSG_CALIBRATE_DEVICE,
                RecommendedAction.CALIBRATE_DEVICE,
            )

        validation = self.validation.validate(fix, last_known=self._last_known_location)
        if not validation.is_valid:
            return AcquisitionFailure(ErrorKind.VALIDATION_FAILED, validation.reason)

        proximity = self.proximity.check(
            fix,
            last_successful=self._last_successful_location,
            registered_reference=self._registered_reference_location,
        )
        if not proximity.is_valid:
            return AcquisitionFailure(ErrorKind.PROXIMITY_FAILED, proximity.reason)

        self._last_successful_location = fix
        logger.info(f"Location validated and verified: {fix}")

        return AcquisitionSuccess(location=fix, validation=validation, proximity=proximity)

    @staticmethod
    def _map_error(error_kind: ErrorKind, message: str) -> AcquisitionFailure:
        """Map a raised error to a failure; the action comes from RECOMMENDED_ACTIONS."""
        action = RECOMMENDED_ACTIONS.get(error_kind)
        if action is RecommendedAction.CALIBRATE_DEVICE:
            message = MSG_CALIBRATE_DEVICE
        return AcquisitionFailure(error_kind, message, action)

    def get_statistics(self) -> dict:
        """Get acquisition statistics."""
        return {
            'started': self.metrics.get_counter('acquisitions_started'),
            'succeeded': self.metrics.get_counter('acquisitions_succeeded'),
            'failed': self.metrics.get_counter('acquisitions_failed'),
            'validation': self.validation.get_statistics(),
            'last_race': (
                self.orchestrator.last_race.to_dict() if self.orchestrator.last_race else None
            ),
        }
