"""
Form Response Service for the CCB integration

Orchestrates one form-response lookup:
- send the request through the retry policy
- check the HTTP status (exactly 200 is a success)
- decode the XML envelope
- project it into normalized form responses

Every error leaving the service is labelled with the stage that raised it.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from ccb_proxy.integrations.contracts.form_responses import NormalizedFormResponse, RequestSpec
from ccb_proxy.integrations.errors import (
    CancellationError,
    ServiceError,
    UpstreamReportedError,
    UpstreamStatusError,
)
from ccb_proxy.integrations.policy.ccb_xml import decode_envelope
from ccb_proxy.integrations.policy.response_wrappers import project_form_responses
from ccb_proxy.integrations.policy.retry import RetryPolicy
from ccb_proxy.utils.logging_context import CORRELATION_ID_HEADER

logger = logging.getLogger(__name__)

STAGE_REQUEST = "request"
STAGE_DECODE = "decode"
STAGE_PROJECTION = "projection"


@dataclass
class _Progress:
    stage: str = STAGE_REQUEST


class FormResponseService:
    def __init__(self, client, retry_policy: Optional[RetryPolicy] = None):
        self.client = client
        self.retry_policy = retry_policy or RetryPolicy()

    async def get_form_responses(
        self,
        spec: RequestSpec,
        *,
        timeout: Optional[float] = None,
        correlation_id: Optional[str] = None,
    ) -> List[NormalizedFormResponse]:
        """
        Return the normalized form responses for one page of a CCB form.

        Args:
            spec: form ID, optional modified-since day, page and page size
            timeout: overall deadline in seconds covering every attempt and backoff
            correlation_id: forwarded to CCB in the Correlation-Id header

        Raises:
            ServiceError: any pipeline failure, with ``stage`` set
        """
        logger.info(
            "Getting form responses from CCB.",
            extra={"form_id": spec.form_id, "page": spec.page, "page_size": spec.page_size},
        )
        progress = _Progress()
        headers = {CORRELATION_ID_HEADER: correlation_id} if correlation_id else None

        try:
            if timeout is None:
                return await self._run(spec, progress, headers)
            return await asyncio.wait_for(self._run(spec, progress, headers), timeout)
        except asyncio.TimeoutError as e:
            logger.warning("Deadline of %ss expired during %s stage.", timeout, progress.stage)
            raise CancellationError(
                f"request cancelled after {timeout}s", stage=progress.stage
            ) from e
        except asyncio.CancelledError:
            logger.warning("Form response lookup cancelled during %s stage.", progress.stage)
            raise

    async def _run(
        self,
        spec: RequestSpec,
        progress: _Progress,
        headers: Optional[Dict[str, str]],
    ) -> List[NormalizedFormResponse]:
        try:
            response = await self.retry_policy.execute(
                lambda: self.client.send(spec, headers=headers),
                url=self.client.build_url(),
            )
            if response.status_code != 200:
                body = response.text()  # Best effort.
                logger.error(
                    "Unexpected response from CCB.",
                    extra={"ccb_status_code": response.status_code, "ccb_response": body},
                )
                raise UpstreamStatusError(response.status_code, body)

            progress.stage = STAGE_DECODE
            envelope = decode_envelope(response.content)

            progress.stage = STAGE_PROJECTION
            results = project_form_responses(envelope)
        except UpstreamReportedError as e:
            logger.error("Error returned from CCB: %s", e.details["errors"])
            e.stage = e.stage or progress.stage
            raise
        except ServiceError as e:
            e.stage = e.stage or progress.stage
            raise

        logger.info("Got %d form responses from CCB.", len(results))
        return results

    async def aclose(self) -> None:
        await self.client.aclose()
