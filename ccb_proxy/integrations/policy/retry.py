"""
Retry policy for calls to CCB.

Exponential backoff with a bounded elapsed-time budget:
- TransportError (connection failure / timeout) is permanent: re-raised at once
- 500, 502 and 503 responses are retried
- Any other status is returned as-is; the caller decides whether it is a success

State lives in a RetryState object local to one execute() call, so a single
RetryPolicy can be shared by concurrent callers.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, FrozenSet, Optional

from ccb_proxy.integrations.contracts.form_responses import UpstreamResponse
from ccb_proxy.integrations.errors import RetryExhaustedError, TransportError
from ccb_proxy.utils.config_loader import RetryConfig

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES: FrozenSet[int] = frozenset({500, 502, 503})


class RetryPhase(str, Enum):
    ATTEMPTING = "ATTEMPTING"
    BACKOFF = "BACKOFF"
    SUCCEEDED = "SUCCEEDED"
    EXHAUSTED = "EXHAUSTED"
    PERMANENT = "PERMANENT"


@dataclass
class RetryState:
    attempt: int = 0
    last_error: Optional[str] = None
    last_status: Optional[int] = None
    phase: RetryPhase = RetryPhase.ATTEMPTING

    @property
    def retry_count(self) -> int:
        return max(self.attempt - 1, 0)


class RetryPolicy:
    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        *,
        retry_statuses: FrozenSet[int] = RETRYABLE_STATUS_CODES,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.config = config or RetryConfig()
        self.retry_statuses = retry_statuses
        self._clock = clock
        self._sleep = sleep

    def should_retry(self, response: UpstreamResponse) -> bool:
        return response.status_code in self.retry_statuses

    async def execute(
        self,
        attempt: Callable[[], Awaitable[UpstreamResponse]],
        *,
        url: str = "",
    ) -> UpstreamResponse:
        state = RetryState()
        started = self._clock()
        interval = self.config.initial_interval

        while True:
            state.phase = RetryPhase.ATTEMPTING
            state.attempt += 1
            extra = self._log_extra(state, url)
            if state.retry_count:
                extra["retry_error"] = state.last_error
                extra["retry_resp_status_code"] = state.last_status
            logger.info("Calling CCB service.", extra=extra)

            try:
                response = await attempt()
            except TransportError as e:
                # No retries on this type of failure coming from invocation.
                state.phase = RetryPhase.PERMANENT
                logger.info(
                    "Got permanent error from CCB service: %s", e, extra=self._log_extra(state, url)
                )
                raise

            if not self.should_retry(response):
                state.phase = RetryPhase.SUCCEEDED
                return response

            state.last_status = response.status_code
            state.last_error = "unsuccessful response from CCB service"

            elapsed = self._clock() - started
            if elapsed + interval > self.config.max_elapsed_time:
                state.phase = RetryPhase.EXHAUSTED
                logger.warning(
                    "Giving up on CCB service after %d attempts (%.2fs elapsed, last status %s).",
                    state.attempt,
                    elapsed,
                    state.last_status,
                    extra=self._log_extra(state, url),
                )
                raise RetryExhaustedError(state.attempt, state.last_error, state.last_status)

            state.phase = RetryPhase.BACKOFF
            logger.debug(
                "Backing off %.3fs before retrying CCB.", interval, extra=self._log_extra(state, url)
            )
            await self._sleep(interval)
            interval *= self.config.multiplier

    @staticmethod
    def _log_extra(state: RetryState, url: str) -> dict:
        return {"req_url": url, "retry_count": state.retry_count, "retry_phase": state.phase.value}
