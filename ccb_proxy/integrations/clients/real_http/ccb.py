"""
Real CCB (Church Community Builder) HTTP Client.

Purpose:
- Sends a single authenticated GET to the CCB api.php endpoint
- Returns the raw status code and body; it does NOT retry or parse XML

Usage:
- Wrapped by RetryPolicy inside FormResponseService
- Wired in ccb_proxy/api/main.py when INTEGRATIONS_MODE is not "mock"

Important:
- Keep this client as the ONLY place where CCB HTTP calls are made.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

import httpx

from ccb_proxy.integrations.contracts.form_responses import RequestSpec, UpstreamResponse
from ccb_proxy.integrations.errors import TransportError
from ccb_proxy.utils.config_loader import CCBConfig

logger = logging.getLogger(__name__)

FORM_RESPONSES_SERVICE = "form_responses"


def build_query(spec: RequestSpec) -> List[Tuple[str, str]]:
    query = [
        ("srv", FORM_RESPONSES_SERVICE),
        ("page", str(spec.page)),
        ("per_page", str(spec.page_size)),
        ("form_id", str(spec.form_id)),
    ]
    if spec.modified_since is not None:
        # CCB only supports year-month-day here.
        query.append(("modified_since", spec.modified_since.strftime("%Y-%m-%d")))
    return query


class CCBClient:
    def __init__(
        self,
        config: CCBConfig,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.config = config
        self._owns_client = client is None
        # One pooled client shared by every call; httpx.AsyncClient is safe for concurrent use.
        self._client = client or httpx.AsyncClient()
        self._auth = httpx.BasicAuth(config.username, config.password)

    def build_url(self) -> str:
        return f"{self.config.api_url.rstrip('/')}/api.php"

    async def send(
        self,
        spec: RequestSpec,
        *,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> UpstreamResponse:
        url = self.build_url()
        attempt_timeout = self.config.default_timeout if timeout is None else timeout
        try:
            response = await self._client.get(
                url,
                params=build_query(spec),
                headers=headers,
                auth=self._auth,
                timeout=attempt_timeout,
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"timed out after {attempt_timeout}s calling CCB: {e!r}") from e
        except httpx.RequestError as e:
            raise TransportError(f"do request: {e!r}") from e
        except httpx.InvalidURL as e:
            raise TransportError(f"create request: {e}") from e

        logger.debug("CCB responded: status=%s url=%s bytes=%d", response.status_code, response.url, len(response.content))
        return UpstreamResponse(
            status_code=response.status_code,
            content=response.content,
            url=str(response.url),
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
