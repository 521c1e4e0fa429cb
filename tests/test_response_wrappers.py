import pytest

from ccb_proxy.integrations.contracts.form_responses import (
    FormAnswers,
    FormResponsesSection,
    ProfileField,
    RawFormResponse,
    UpstreamEnvelope,
    UpstreamErrorEntry,
)
from ccb_proxy.integrations.errors import DecodeError, UpstreamReportedError
from ccb_proxy.integrations.policy.response_wrappers import (
    normalize_form_response,
    project_form_responses,
)


def _envelope(*responses, count=None, errors=None):
    return UpstreamEnvelope(
        form_responses=FormResponsesSection(
            count=len(responses) if count is None else count,
            responses=tuple(responses),
        ),
        errors=errors,
    )


def test_errors_section_wins_over_form_responses():
    errors = (UpstreamErrorEntry(code="002", type="Service Permission", message="denied"),)
    envelope = _envelope(RawFormResponse(id="1", form_id="85"), errors=errors)

    with pytest.raises(UpstreamReportedError) as exc_info:
        project_form_responses(envelope)

    assert exc_info.value.errors == list(errors)
    assert exc_info.value.details["errors"] == [{"code": "002", "type": "Service Permission", "message": "denied"}]


def test_empty_errors_section_is_not_an_error():
    envelope = _envelope(RawFormResponse(id="1", form_id="85"), errors=())
    assert [r.id for r in project_form_responses(envelope)] == ["85"]


def test_zero_count_is_an_empty_result():
    assert project_form_responses(_envelope(count=0)) == []


def test_absent_form_responses_is_an_empty_result():
    assert project_form_responses(UpstreamEnvelope()) == []


def test_zero_count_ignores_stray_records():
    envelope = _envelope(RawFormResponse(id="1", form_id="85"), count=0)
    assert project_form_responses(envelope) == []


def test_duplicate_names_and_titles_last_write_wins():
    raw = RawFormResponse(
        id="1",
        form_id="85",
        profile_fields=(
            ProfileField(name="Email", text="old@example.com"),
            ProfileField(name="Phone", text="555"),
            ProfileField(name="Email", text="new@example.com"),
        ),
        answers=FormAnswers(titles=("Q1", "Q2", "Q1"), choices=("No", "Maybe", "Yes")),
    )

    result = normalize_form_response(raw)

    assert result.profile_info == {"Email": "new@example.com", "Phone": "555"}
    assert result.answers == {"Q1": "Yes", "Q2": "Maybe"}
    assert set(result.answers) == set(raw.answers.titles)


def test_mismatched_answers_raise_decode_error():
    raw = RawFormResponse(id="7", form_id="85", answers=FormAnswers(titles=("Q1", "Q2"), choices=("Yes",)))
    with pytest.raises(DecodeError) as exc_info:
        project_form_responses(_envelope(raw))
    assert exc_info.value.details == {"form_response_id": "7"}


def test_projection_keeps_upstream_order_and_raw_timestamps():
    envelope = _envelope(
        RawFormResponse(id="1", form_id="85", created="2024-01-02 09:00:00", modified="2024-01-05"),
        RawFormResponse(id="2", form_id="86", created="2023-12-31", modified="2023-12-31"),
    )

    result = project_form_responses(envelope)

    assert [r.to_dict() for r in result] == [
        {"id": "85", "profile_info": {}, "answers": {}, "created": "2024-01-02 09:00:00", "modified": "2024-01-05"},
        {"id": "86", "profile_info": {}, "answers": {}, "created": "2023-12-31", "modified": "2023-12-31"},
    ]
