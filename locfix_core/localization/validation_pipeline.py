"""
Validation pipeline for a winning location fix.

Sequential, short-circuiting checks:
1. Recency: now - captured_at_ms must not exceed recency_threshold_ms
2. Accuracy: accuracy_m must not exceed accuracy_threshold_m
3. Distance from last known fix (only when one is set):
   - last known fix fresh enough: great-circle distance <= max_distance_km
   - last known fix too old: handled per stale_reference_policy
     (FAIL: staleness is itself a failure; SKIP: distance check skipped)

Both thresholds are inclusive: a value equal to the threshold passes.
"""

import logging
import time
from typing import Callable, Optional

from locfix_core.config import AcquisitionConfig, StaleReferencePolicy
from locfix_core.metrics import get_metrics
from locfix_core.proto.acquisition_result import ValidationOutcome
from locfix_core.proto.location_sample import LocationSample
from .geodesy import distance_km

logger = logging.getLogger(__name__)

ALL_CRITERIA_MET = "All validation criteria met"


def epoch_ms() -> int:
    """Current wall-clock time in Unix epoch milliseconds."""
    return int(time.time() * 1000)


class ValidationPipeline:
    """
    Validate a fix against recency, accuracy and distance criteria.

    Usage:
        pipeline = ValidationPipeline(config)
        outcome = pipeline.validate(fix, last_known=service.last_known_location)
        if not outcome.is_valid:
            print(outcome.reason)
    """

    def __init__(
        self,
        config: Optional[AcquisitionConfig] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        """
        Initialize validation pipeline.

        Args:
            config: Thresholds (uses defaults if None)
            clock: Returns current epoch milliseconds (wall clock if None)
        """
        self.config = config or AcquisitionConfig()
        self.clock = clock or epoch_ms
        self.metrics = get_metrics()

    def validate(
        self,
        sample: LocationSample,
        last_known: Optional[LocationSample] = None,
    ) -> ValidationOutcome:
        """
        Run all applicable checks, stopping at the first failure.

        Args:
            sample: Fix to validate
            last_known: Prior trusted fix for the distance check (optional)

        Returns:
            ValidationOutcome; reason is ALL_CRITERIA_MET on success
        """
        now_ms = self.clock()

        checks = (
            lambda: self.check_recency(sample, now_ms),
            lambda: self.check_accuracy(sample),
            lambda: self.check_distance(sample, last_known, now_ms),
        )
        for check in checks:
            outcome = check()
            if outcome is not None and not outcome.is_valid:
                logger.warning(f"Validation failed ({outcome.check}): {outcome.reason}")
                return outcome

        self.metrics.increment('validations_passed')
        return ValidationOutcome.passed(ALL_CRITERIA_MET)

    def check_recency(self, sample: LocationSample, now_ms: int) -> ValidationOutcome:
        age_ms = sample.age_ms(now_ms)
        limit_ms = self.config.recency_threshold_ms

        if age_ms > limit_ms:
            self.metrics.increment_drop('stale_fix')
            return ValidationOutcome.failed(
                f"Location is not recent: captured {age_ms}ms ago (limit {limit_ms}ms)",
                check="recency",
            )

        return ValidationOutcome.passed(f"Location captured {age_ms}ms ago", check="recency")

    def check_accuracy(self, sample: LocationSample) -> ValidationOutcome:
        limit_m = self.config.accuracy_threshold_m
        self.metrics.record_histogram('fix_accuracy_m', sample.accuracy_m)

        if sample.accuracy_m > limit_m:
            self.metrics.increment_drop('low_accuracy')
            return ValidationOutcome.failed(
                f"Location accuracy {sample.accuracy_m:.1f}m exceeds threshold {limit_m:.1f}m",
                check="accuracy",
            )

        return ValidationOutcome.passed(
            f"Location accuracy {sample.accuracy_m:.1f}m", check="accuracy"
        )

    def check_distance(
        self,
        sample: LocationSample,
        last_known: Optional[LocationSample],
        now_ms: int,
    ) -> Optional[ValidationOutcome]:
        """
        Compare against the last known fix.

        Returns:
            None when there is nothing to compare against (no last known
            fix, or a stale one under the SKIP policy)
        """
        if last_known is None:
            return None

        reference_age_ms = last_known.age_ms(now_ms)
        age_limit_ms = self.config.last_known_location_age_ms

        if reference_age_ms > age_limit_ms:
            if self.config.stale_reference_policy is StaleReferencePolicy.SKIP:
                logger.info(f"Skipping distance check: last known location is "
                            f"{reference_age_ms}ms old (limit {age_limit_ms}ms)")
                return None

            self.metrics.increment_drop('stale_reference')
            return ValidationOutcome.failed(
                f"Last known location is too old to compare against: "
                f"{reference_age_ms}ms old (limit {age_limit_ms}ms)",
                check="stale_reference",
            )

        distance = distance_km(sample, last_known)
        self.metrics.record_histogram('validation_distance_km', distance)

        if distance > self.config.max_distance_km:
            self.metrics.increment_drop('distance_exceeded')
            return ValidationOutcome.failed(
                f"Distance from last known location {distance:.2f}km exceeds "
                f"{self.config.max_distance_km:.2f}km",
                check="distance",
            )

        return ValidationOutcome.passed(
            f"Distance from last known location {distance:.2f}km", check="distance"
        )

    def get_statistics(self) -> dict:
        """Get validation statistics."""
        return {
            'passed': self.metrics.get_counter('validations_passed'),
            'stale_fix': self.metrics.get_drop_count('stale_fix'),
            'low_accuracy': self.metrics.get_drop_count('low_accuracy'),
            'distance_exceeded': self.metrics.get_drop_count('distance_exceeded'),
            'stale_reference': self.metrics.get_drop_count('stale_reference'),
        }
