"""
CCB form responses - MOCK client.

⚠️  This is a mock implementation for development and testing.
    It answers with XML shaped exactly like CCB's api.php replies, so the
    whole decode/projection pipeline runs against it. Seed data can be
    replaced through the MockCCBClient constructor.
"""

import logging
from datetime import date
from typing import Dict, List, Optional

from ccb_proxy.integrations.contracts.form_responses import (
    FormAnswers,
    FormResponsesSection,
    Individual,
    ProfileField,
    RawFormResponse,
    RequestSpec,
    UpstreamEnvelope,
    UpstreamErrorEntry,
    UpstreamResponse,
)
from ccb_proxy.integrations.clients.real_http.ccb import FORM_RESPONSES_SERVICE, build_query
from ccb_proxy.integrations.policy.ccb_xml import encode_envelope

logger = logging.getLogger(__name__)

MOCK_API_URL = "https://mock.ccbchurch.local"


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------

_MOCK_RESPONSES: List[RawFormResponse] = [
    RawFormResponse(
        id="1001",
        form_id="85",
        created="2024-01-02 09:15:00",
        modified="2024-01-02 09:15:00",
        individual=Individual(id="501", name="Jane Doe"),
        profile_fields=(
            ProfileField(name="Name", text="Jane Doe"),
            ProfileField(name="Email", text="jane@example.com"),
            ProfileField(name="Mobile Phone", text="(555) 010-2000"),
        ),
        answers=FormAnswers(
            titles=("First time visiting?", "Campus"),
            choices=("Yes", "JDD"),
        ),
    ),
    RawFormResponse(
        id="1002",
        form_id="85",
        created="2024-02-11 11:40:00",
        modified="2024-02-12 08:05:00",
        individual=Individual(id="502", name="John Smith"),
        profile_fields=(
            ProfileField(name="Name", text="John Smith"),
            ProfileField(name="Email", text="john@example.com"),
        ),
        answers=FormAnswers(
            titles=("First time visiting?", "Campus", "Prayer request"),
            choices=("No", "JDD", "Family"),
        ),
    ),
]


class MockCCBClient:
    """Same interface as CCBClient: send() returns the raw status and XML body."""

    def __init__(
        self,
        responses: Optional[List[RawFormResponse]] = None,
        known_form_ids: Optional[List[int]] = None,
    ) -> None:
        self.responses = list(_MOCK_RESPONSES if responses is None else responses)
        self.known_form_ids = set(known_form_ids) if known_form_ids is not None else None
        self.calls: List[RequestSpec] = []

    def build_url(self) -> str:
        return f"{MOCK_API_URL}/api.php"

    async def send(
        self,
        spec: RequestSpec,
        *,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> UpstreamResponse:
        self.calls.append(spec)
        logger.info(f"[MOCK] CCB form_responses request: form_id={spec.form_id} page={spec.page}")

        form_responses = None
        errors = None
        if self.known_form_ids is not None and spec.form_id not in self.known_form_ids:
            errors = (UpstreamErrorEntry(code="5", type="Invalid Argument", message="Invalid form_id"),)
        else:
            form_responses = self._page(spec)

        envelope = UpstreamEnvelope(
            form_responses=form_responses,
            errors=errors,
            service=FORM_RESPONSES_SERVICE,
            arguments=tuple(build_query(spec)),
        )
        return UpstreamResponse(status_code=200, content=encode_envelope(envelope), url=self.build_url())

    def _page(self, spec: RequestSpec) -> FormResponsesSection:
        matching = [r for r in self.responses if r.form_id == str(spec.form_id)]
        if spec.modified_since is not None:
            matching = [r for r in matching if _day(r.modified) >= spec.modified_since]

        start = (spec.page - 1) * spec.page_size
        page = matching[start:start + spec.page_size]
        return FormResponsesSection(count=len(page), responses=tuple(page))

    async def aclose(self) -> None:
        return None


def _day(timestamp: str) -> date:
    return date.fromisoformat(timestamp[:10])
