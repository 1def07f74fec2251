"""
Domain Module: Acquisition orchestration and the service facade.

Implements:
- Cascading-timeout race over GPS, Network and Fused providers
- Acquisition sequence (pre-checks, race, validation, proximity)
- Cross-call location state
"""

from .orchestrator import (
    PRIORITY_ORDER,
    AcquisitionOrchestrator,
    RaceReport,
)
from .acquisition_service import (
    RECOMMENDED_ACTIONS,
    AcquisitionService,
)

__all__ = [
    'PRIORITY_ORDER',
    'AcquisitionOrchestrator',
    'RaceReport',
    'RECOMMENDED_ACTIONS',
    'AcquisitionService',
]
