"""
CCB XML envelope decoding (and encoding, for mocks and fixtures).

A CCB reply looks like:

    <ccb_api>
      <request><parameters><argument name="srv" value="form_responses"/></parameters></request>
      <response>
        <service>form_responses</service>
        <form_responses count="1">
          <form_response id="7">
            <form id="85"/>
            <individual id="12">Jane Doe</individual>
            <created>2024-01-02</created>
            <modified>2024-01-02</modified>
            <profile_fields><profile_info name="Email">a@b.com</profile_info></profile_fields>
            <answers><title>Q1</title><choice>Yes</choice></answers>
          </form_response>
        </form_responses>
        <errors><error number="1" type="Service Permission">...</error></errors>
      </response>
    </ccb_api>

Every section below <response> is optional. Text is passed through unchanged.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from typing import Optional, Tuple, Union

from ccb_proxy.integrations.contracts.form_responses import (
    FormAnswers,
    FormResponsesSection,
    Individual,
    ProfileField,
    RawFormResponse,
    UpstreamEnvelope,
    UpstreamErrorEntry,
)
from ccb_proxy.integrations.errors import DecodeError

ROOT_TAG = "ccb_api"
XML_DECLARATION = "<?xml version='1.0' encoding='utf-8'?>\n"

_XML_INVALID_CHARS = re.compile(r"[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


def decode_envelope(raw: Union[bytes, str]) -> UpstreamEnvelope:
    try:
        root = ET.fromstring(raw)
    except (ET.ParseError, LookupError, ValueError) as e:
        # LookupError/ValueError: declared encoding is unknown or unsupported by expat.
        raise DecodeError(f"unmarshal xml body: {e}") from e

    response = root.find("response")
    if response is None:
        raise DecodeError(f"unexpected envelope: <{root.tag}> has no <response> element")

    return UpstreamEnvelope(
        form_responses=_decode_form_responses(response.find("form_responses")),
        errors=_decode_errors(response.find("errors")),
        service=_child_text(response, "service"),
        service_action=_child_text(response, "service_action"),
        availability=_child_text(response, "availability"),
        arguments=tuple(
            (arg.get("name", ""), arg.get("value", ""))
            for arg in root.findall("request/parameters/argument")
        ),
    )


def _child_text(parent: ET.Element, tag: str) -> str:
    child = parent.find(tag)
    if child is None:
        return ""
    return child.text or ""


def _decode_form_responses(section: Optional[ET.Element]) -> Optional[FormResponsesSection]:
    if section is None:
        return None
    raw_count = section.get("count", "").strip()
    try:
        count = int(raw_count) if raw_count else 0
    except ValueError as e:
        raise DecodeError(f"invalid form_responses count: {raw_count!r}") from e
    return FormResponsesSection(
        count=count,
        responses=tuple(_decode_form_response(el) for el in section.findall("form_response")),
    )


def _decode_form_response(el: ET.Element) -> RawFormResponse:
    response_id = el.get("id", "")
    form = el.find("form")
    if form is None:
        raise DecodeError(f"form_response {response_id!r} has no <form> element")

    individual = None
    individual_el = el.find("individual")
    if individual_el is not None:
        individual = Individual(id=individual_el.get("id", ""), name=individual_el.text or "")

    profile_fields: Tuple[ProfileField, ...] = ()
    profile_el = el.find("profile_fields")
    if profile_el is not None:
        profile_fields = tuple(
            ProfileField(name=info.get("name", ""), text=info.text or "")
            for info in profile_el.findall("profile_info")
        )

    answers = FormAnswers()
    answers_el = el.find("answers")
    if answers_el is not None:
        answers = FormAnswers(
            titles=tuple(t.text or "" for t in answers_el.findall("title")),
            choices=tuple(c.text or "" for c in answers_el.findall("choice")),
        )

    return RawFormResponse(
        id=response_id,
        form_id=form.get("id", ""),
        created=_child_text(el, "created"),
        modified=_child_text(el, "modified"),
        profile_fields=profile_fields,
        answers=answers,
        individual=individual,
        payment_info=_child_text(el, "payment_info"),
    )


def _decode_errors(section: Optional[ET.Element]) -> Optional[Tuple[UpstreamErrorEntry, ...]]:
    if section is None:
        return None
    return tuple(
        UpstreamErrorEntry(
            code=err.get("number", ""),
            type=err.get("type", ""),
            message=err.text or "",
        )
        for err in section.findall("error")
    )


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def encode_envelope(envelope: UpstreamEnvelope) -> bytes:
    root = ET.Element(ROOT_TAG)

    if envelope.arguments:
        params = ET.SubElement(ET.SubElement(root, "request"), "parameters")
        for name, value in envelope.arguments:
            ET.SubElement(params, "argument", {"name": name, "value": value})

    response = ET.SubElement(root, "response")
    for tag in ("service", "service_action", "availability"):
        value = getattr(envelope, tag)
        if value:
            ET.SubElement(response, tag).text = value

    if envelope.form_responses is not None:
        section = ET.SubElement(
            response, "form_responses", {"count": str(envelope.form_responses.count)}
        )
        for raw in envelope.form_responses.responses:
            _encode_form_response(section, raw)

    if envelope.errors is not None:
        errors = ET.SubElement(response, "errors")
        for entry in envelope.errors:
            ET.SubElement(errors, "error", {"number": entry.code, "type": entry.type}).text = entry.message

    for el in root.iter():
        for value in (el.text, *el.attrib.values()):
            if value and _XML_INVALID_CHARS.search(value):
                raise ValueError(f"<{el.tag}> holds a character XML 1.0 cannot represent: {value!r}")

    # ElementTree leaves \r bare in text, and parsers fold it into \n.
    body = ET.tostring(root, encoding="unicode").replace("\r", "&#13;")
    return (XML_DECLARATION + body).encode("utf-8")


def _encode_form_response(parent: ET.Element, raw: RawFormResponse) -> None:
    el = ET.SubElement(parent, "form_response", {"id": raw.id})
    ET.SubElement(el, "form", {"id": raw.form_id})
    if raw.individual is not None:
        ET.SubElement(el, "individual", {"id": raw.individual.id}).text = raw.individual.name
    ET.SubElement(el, "created").text = raw.created
    ET.SubElement(el, "modified").text = raw.modified

    profile = ET.SubElement(el, "profile_fields")
    for field in raw.profile_fields:
        ET.SubElement(profile, "profile_info", {"name": field.name}).text = field.text

    answers = ET.SubElement(el, "answers")
    for title in raw.answers.titles:
        ET.SubElement(answers, "title").text = title
    for choice in raw.answers.choices:
        ET.SubElement(answers, "choice").text = choice

    if raw.payment_info:
        ET.SubElement(el, "payment_info").text = raw.payment_info
