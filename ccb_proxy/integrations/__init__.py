"""
Integrations layer.
This package contains all code used to communicate with Church Community Builder (CCB):
- HTTP clients for the CCB api.php endpoint (real and mock)
- The retry policy wrapped around every outbound call
- XML envelope decoding and projection into normalized form responses

Key rule:
- Routes MUST NOT call CCB directly.
- Routes should call FormResponseService (under ccb_proxy/integrations/policy).

Switching implementations:
- The selection of mock vs real clients happens in ONE place (ccb_proxy/api/main.py).
"""

from .contracts.form_responses import NormalizedFormResponse, RequestSpec
from .errors import (
    CancellationError,
    DecodeError,
    RetryExhaustedError,
    ServiceError,
    TransportError,
    UpstreamReportedError,
    UpstreamStatusError,
)
from .policy.form_response_service import FormResponseService

__all__ = [
    "CancellationError",
    "DecodeError",
    "FormResponseService",
    "NormalizedFormResponse",
    "RequestSpec",
    "RetryExhaustedError",
    "ServiceError",
    "TransportError",
    "UpstreamReportedError",
    "UpstreamStatusError",
]
