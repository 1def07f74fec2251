"""
Circle verification result schema.

Answer of an external "is this fix inside the allowed circle" service.
No client for that service lives in this package; hosts that call it
carry the answer around in this shape.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class CircleVerificationResult:
    """
    External circle verification answer.

    Attributes:
        success: True if the service accepted the fix
        api_response: Raw response body
        timestamp_ms: Time the response was received (Unix epoch ms)
    """

    success: bool
    api_response: str
    timestamp_ms: int

    def to_dict(self) -> dict:
        return {
            'success': self.success,
            'api_response': self.api_response,
            'timestamp_ms': self.timestamp_ms,
        }
