"""
Form response contracts.

Defines the shapes that flow through the CCB form-response pipeline:
- RequestSpec: what to ask CCB for (one per outbound call)
- UpstreamEnvelope and friends: the CCB XML envelope, decoded into a tree
- NormalizedFormResponse: the flattened, JSON-friendly output unit

These contracts must be used by both:
- clients/mocks/ccb.py (canned envelopes for development/testing)
- clients/real_http/ccb.py (real API calls)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Optional, Tuple


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RequestSpec:
    form_id: int
    modified_since: Optional[date] = None  # day precision only
    page: int = 1
    page_size: int = 25

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError(f"page must be >= 1; got {self.page}.")
        if self.page_size < 1:
            raise ValueError(f"page_size must be >= 1; got {self.page_size}.")


@dataclass(frozen=True)
class UpstreamResponse:
    """Status and body of a single HTTP attempt against CCB."""
    status_code: int
    content: bytes = b""
    url: str = ""

    def text(self) -> str:
        # Best effort: never raises, so it can't mask the caller's own error.
        return self.content.decode("utf-8", errors="replace")


# ---------------------------------------------------------------------------
# Upstream envelope (mirrors the CCB XML schema)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProfileField:
    name: str
    text: str


@dataclass(frozen=True)
class FormAnswers:
    """Question titles and chosen answers, paired by index."""
    titles: Tuple[str, ...] = ()
    choices: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Individual:
    id: str
    name: str


@dataclass(frozen=True)
class RawFormResponse:
    id: str
    form_id: str
    created: str = ""
    modified: str = ""
    profile_fields: Tuple[ProfileField, ...] = ()
    answers: FormAnswers = field(default_factory=FormAnswers)
    individual: Optional[Individual] = None
    payment_info: str = ""


@dataclass(frozen=True)
class FormResponsesSection:
    count: int
    responses: Tuple[RawFormResponse, ...] = ()


@dataclass(frozen=True)
class UpstreamErrorEntry:
    code: str
    type: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.code, "type": self.type, "message": self.message}


@dataclass(frozen=True)
class UpstreamEnvelope:
    """
    Decoded CCB envelope.

    Optional sections are None when absent from the XML; an empty section
    (e.g. ``<errors/>``) decodes to an empty tuple instead.
    """
    form_responses: Optional[FormResponsesSection] = None
    errors: Optional[Tuple[UpstreamErrorEntry, ...]] = None
    service: str = ""
    service_action: str = ""
    availability: str = ""
    arguments: Tuple[Tuple[str, str], ...] = ()


# ---------------------------------------------------------------------------
# Normalized output
# ---------------------------------------------------------------------------


@dataclass
class NormalizedFormResponse:
    id: str
    profile_info: Dict[str, str] = field(default_factory=dict)
    answers: Dict[str, str] = field(default_factory=dict)
    created: str = ""
    modified: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "profile_info": dict(self.profile_info),
            "answers": dict(self.answers),
            "created": self.created,
            "modified": self.modified,
        }
