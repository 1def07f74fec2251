"""
Proximity guard.

Checks a validated fix against a reference location: the last successful
fix if there is one, otherwise the registered reference point. With no
reference at all (first acquisition) the check passes trivially.
"""

import logging
from typing import Optional

from locfix_core.config import AcquisitionConfig
from locfix_core.metrics import get_metrics
from locfix_core.proto.acquisition_result import ValidationOutcome
from locfix_core.proto.location_sample import LocationSample
from .geodesy import distance_m

logger = logging.getLogger(__name__)

NO_REFERENCE = "No reference location available"


class ProximityGuard:
    """Reject fixes farther than proximity_threshold_m from the reference."""

    def __init__(self, config: Optional[AcquisitionConfig] = None):
        self.config = config or AcquisitionConfig()
        self.metrics = get_metrics()

    @staticmethod
    def select_reference(
        last_successful: Optional[LocationSample],
        registered_reference: Optional[LocationSample],
    ) -> Optional[LocationSample]:
        """Last successful fix takes priority over the registered reference."""
        return last_successful if last_successful is not None else registered_reference

    def check(
        self,
        sample: LocationSample,
        last_successful: Optional[LocationSample] = None,
        registered_reference: Optional[LocationSample] = None,
    ) -> ValidationOutcome:
        """
        Check distance from the selected reference.

        Args:
            sample: Fix to check
            last_successful: Last fully validated fix (preferred reference)
            registered_reference: Fixed anchor point (fallback reference)

        Returns:
            ValidationOutcome; on pass the reason reports the distance
        """
        reference = self.select_reference(last_successful, registered_reference)

        if reference is None:
            logger.info("Proximity check passed: no reference location")
            self.metrics.increment('proximity_passed')
            return ValidationOutcome.passed(NO_REFERENCE, check="proximity")

        distance = distance_m(sample, reference)
        limit_m = self.config.proximity_threshold_m
        self.metrics.record_histogram('proximity_distance_m', distance)

        if distance > limit_m:
            self.metrics.increment_drop('proximity_exceeded')
            logger.warning(f"Proximity check failed: {distance:.0f}m from reference")
            return ValidationOutcome.failed(
                f"Location is {int(distance)}m from the reference location "
                f"(limit {int(limit_m)}m)",
                check="proximity",
            )

        self.metrics.increment('proximity_passed')
        return ValidationOutcome.passed(
            f"Location is within {int(distance)}m of the reference location",
            check="proximity",
        )
