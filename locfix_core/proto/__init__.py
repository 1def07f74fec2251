"""
Protocol Module: Data model shared by every component.

- LocationSample / LocationSource: a single fix and where it came from
- ValidationOutcome: pass/fail plus a mandatory reason
- AcquisitionResult: AcquisitionSuccess | AcquisitionFailure
- CircleVerificationResult: external verification answer (data only)
"""

from .location_sample import (
    LocationSample,
    LocationSource,
)
from .acquisition_result import (
    AcquisitionFailure,
    AcquisitionResult,
    AcquisitionSuccess,
    ErrorKind,
    RecommendedAction,
    ValidationOutcome,
)
from .circle_verification import CircleVerificationResult

__all__ = [
    'LocationSample',
    'LocationSource',
    'AcquisitionFailure',
    'AcquisitionResult',
    'AcquisitionSuccess',
    'ErrorKind',
    'RecommendedAction',
    'ValidationOutcome',
    'CircleVerificationResult',
]
