import hmac
import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from ccb_proxy.integrations.policy.form_response_service import FormResponseService
from ccb_proxy.utils.config_loader import APIConfig

logger = logging.getLogger(__name__)

AUTH_REALM = "Authorization Required"

_basic = HTTPBasic(auto_error=False, realm=AUTH_REALM)


def get_api_config(request: Request) -> APIConfig:
    return request.app.state.config.api


def get_form_response_service(request: Request) -> FormResponseService:
    return request.app.state.form_response_service


def _matches(candidate: str, expected: str) -> bool:
    return hmac.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


async def basic_auth_protection(
    credentials: Optional[HTTPBasicCredentials] = Depends(_basic),
    api_config: APIConfig = Depends(get_api_config),
) -> str:
    ok = (
        credentials is not None
        and bool(api_config.username)
        and _matches(credentials.username, api_config.username)
        and _matches(credentials.password, api_config.password)
    )
    if not ok:
        logger.info("Basic auth check failed: credentials_present=%s", credentials is not None)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing credentials",
            headers={"WWW-Authenticate": f'Basic realm="{AUTH_REALM}"'},
        )
    return credentials.username
