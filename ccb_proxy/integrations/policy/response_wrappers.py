from __future__ import annotations

from typing import Dict, List

from ccb_proxy.integrations.contracts.form_responses import (
    FormAnswers,
    NormalizedFormResponse,
    RawFormResponse,
    UpstreamEnvelope,
)
from ccb_proxy.integrations.errors import DecodeError, UpstreamReportedError


def project_form_responses(envelope: UpstreamEnvelope) -> List[NormalizedFormResponse]:
    """
    Flatten a decoded CCB envelope into normalized form responses.

    Raises:
        UpstreamReportedError: the envelope carries a non-empty <errors> section
        DecodeError: a form response has a different number of titles and choices
    """
    if envelope.errors:
        raise UpstreamReportedError(envelope.errors)

    # No responses is fine for empty pages.
    section = envelope.form_responses
    if section is None or section.count == 0:
        return []

    return [normalize_form_response(raw) for raw in section.responses]


def normalize_form_response(raw: RawFormResponse) -> NormalizedFormResponse:
    profile_info: Dict[str, str] = {}
    for info in raw.profile_fields:
        profile_info[info.name] = info.text

    return NormalizedFormResponse(
        id=raw.form_id,
        profile_info=profile_info,
        answers=_pair_answers(raw.id, raw.answers),
        created=raw.created,
        modified=raw.modified,
    )


def _pair_answers(response_id: str, answers: FormAnswers) -> Dict[str, str]:
    if len(answers.titles) != len(answers.choices):
        raise DecodeError(
            f"form_response {response_id!r} has {len(answers.titles)} titles "
            f"but {len(answers.choices)} choices",
            details={"form_response_id": response_id},
        )
    return dict(zip(answers.titles, answers.choices))
