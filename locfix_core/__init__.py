"""
Location Fix (locfix) Core Package.

Acquires a single trustworthy location fix by racing GPS, Network and Fused
location sources under cascading timeouts, then validating the winner.

Package structure:
- proto: Data model (samples, outcomes, results)
- providers: Platform boundary and per-source adapters
- localization: Geodesy, validation pipeline, proximity guard
- domain: Acquisition orchestrator and service facade
- metrics: Diagnostics, counters, histograms
- io: Simulated platform for demos and tests
"""

__version__ = "0.1.0"
__author__ = "locfix team"

from .config import AcquisitionConfig, StaleReferencePolicy
from .domain import AcquisitionOrchestrator, AcquisitionService
from .errors import LocationAcquisitionError, ProviderDisabledError
from .proto import (
    AcquisitionFailure,
    AcquisitionResult,
    AcquisitionSuccess,
    ErrorKind,
    LocationSample,
    LocationSource,
    RecommendedAction,
    ValidationOutcome,
)

__all__ = [
    'AcquisitionConfig',
    'StaleReferencePolicy',
    'AcquisitionOrchestrator',
    'AcquisitionService',
    'LocationAcquisitionError',
    'ProviderDisabledError',
    'AcquisitionFailure',
    'AcquisitionResult',
    'AcquisitionSuccess',
    'ErrorKind',
    'LocationSample',
    'LocationSource',
    'RecommendedAction',
    'ValidationOutcome',
]
