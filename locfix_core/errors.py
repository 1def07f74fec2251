"""
Exceptions raised across component boundaries.

Only conditions that must abort an acquisition are raised; per-source
misses and business-rule failures are returned as data
(None, ValidationOutcome, AcquisitionFailure).
"""

from locfix_core.proto.acquisition_result import ErrorKind


class LocationAcquisitionError(Exception):
    """
    Base class for errors that terminate an acquisition.

    Attributes:
        error_kind: Classification used when the service maps the error
            to an AcquisitionFailure
    """

    error_kind: ErrorKind = ErrorKind.UNEXPECTED_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ProviderDisabledError(LocationAcquisitionError):
    """A location provider was switched off while a request was in flight."""

    error_kind = ErrorKind.GPS_DISABLED

    def __init__(self, provider: str = "gps"):
        super().__init__(f"Location provider '{provider}' was disabled during acquisition")
        self.provider = provider
