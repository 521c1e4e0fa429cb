"""
Contracts (data models).

This folder defines the request/response shapes for the CCB integration:
- Form response request parameters
- The decoded CCB XML envelope
- The normalized form response returned to callers

Both mock and real HTTP clients should use these contracts.
"""

from .form_responses import (
    FormAnswers,
    FormResponsesSection,
    Individual,
    NormalizedFormResponse,
    ProfileField,
    RawFormResponse,
    RequestSpec,
    UpstreamEnvelope,
    UpstreamErrorEntry,
    UpstreamResponse,
)

__all__ = [
    "FormAnswers",
    "FormResponsesSection",
    "Individual",
    "NormalizedFormResponse",
    "ProfileField",
    "RawFormResponse",
    "RequestSpec",
    "UpstreamEnvelope",
    "UpstreamErrorEntry",
    "UpstreamResponse",
]
