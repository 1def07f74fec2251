"""
Acquisition Output Schema.

ValidationOutcome is produced by every check (a reason is always present,
also on success). AcquisitionResult is the terminal answer of one
acquire() call: either AcquisitionSuccess or AcquisitionFailure.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .location_sample import LocationSample


class ErrorKind(str, Enum):
    """Failure classification the host branches on."""

    PERMISSION_DENIED = "PERMISSION_DENIED"
    GPS_DISABLED = "GPS_DISABLED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    PROXIMITY_FAILED = "PROXIMITY_FAILED"
    NO_VALID_LOCATION = "NO_VALID_LOCATION"
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


class RecommendedAction(str, Enum):
    """Remediation the host may offer the user."""

    REQUEST_PERMISSIONS = "REQUEST_PERMISSIONS"
    ENABLE_GPS = "ENABLE_GPS"
    CALIBRATE_DEVICE = "CALIBRATE_DEVICE"


@dataclass(frozen=True)
class ValidationOutcome:
    """
    Result of a single validation or proximity check.

    Attributes:
        is_valid: True if the check passed
        reason: Human-readable explanation (mandatory, also on success)
        check: Name of the check that produced this outcome
    """

    is_valid: bool
    reason: str
    check: str = "all"

    def __post_init__(self):
        """Validate outcome."""
        if not self.reason:
            raise ValueError("ValidationOutcome requires a reason")

    @classmethod
    def passed(cls, reason: str, check: str = "all") -> 'ValidationOutcome':
        return cls(is_valid=True, reason=reason, check=check)

    @classmethod
    def failed(cls, reason: str, check: str) -> 'ValidationOutcome':
        return cls(is_valid=False, reason=reason, check=check)

    def to_dict(self) -> dict:
        return {'is_valid': self.is_valid, 'reason': self.reason, 'check': self.check}


@dataclass(frozen=True)
class AcquisitionSuccess:
    """
    Validated fix.

    Attributes:
        location: Winning fix that passed every check
        validation: Outcome of the validation pipeline
        proximity: Outcome of the proximity guard
    """

    location: LocationSample
    validation: ValidationOutcome
    proximity: ValidationOutcome

    @property
    def success(self) -> bool:
        return True

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'success': True,
            'location': self.location.to_dict(),
            'validation': self.validation.to_dict(),
            'proximity': self.proximity.to_dict(),
        }


@dataclass(frozen=True)
class AcquisitionFailure:
    """
    Classified acquisition failure.

    Attributes:
        error_kind: Failure classification
        message: Human-readable message
        recommended_action: Suggested remediation, None when unknown
    """

    error_kind: ErrorKind
    message: str
    recommended_action: Optional[RecommendedAction] = None

    @property
    def success(self) -> bool:
        return False

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'success': False,
            'error_kind': self.error_kind.value,
            'message': self.message,
            'recommended_action': (
                self.recommended_action.value if self.recommended_action else None
            ),
        }


AcquisitionResult = Union[AcquisitionSuccess, AcquisitionFailure]
