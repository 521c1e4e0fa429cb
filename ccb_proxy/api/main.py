"""
FastAPI application - Main entry point

Run with:
  uvicorn ccb_proxy.api.main:create_app --factory --host 0.0.0.0 --port 8080
"""

import logging
import time
from datetime import date
from types import MappingProxyType
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel, Field

from ccb_proxy import __version__
from ccb_proxy.api.dependencies import basic_auth_protection, get_form_response_service
from ccb_proxy.error_handler import ErrorHandler
from ccb_proxy.integrations.clients.mocks.ccb import MockCCBClient
from ccb_proxy.integrations.clients.real_http.ccb import CCBClient
from ccb_proxy.integrations.contracts.form_responses import RequestSpec
from ccb_proxy.integrations.errors import ServiceError
from ccb_proxy.integrations.policy.form_response_service import FormResponseService
from ccb_proxy.integrations.policy.retry import RetryPolicy
from ccb_proxy.utils.config_loader import AppConfig, load_app_config
from ccb_proxy.utils.logging_context import (
    CORRELATION_ID_HEADER,
    configure_logging,
    get_correlation_id,
    set_correlation_id,
)

logger = logging.getLogger(__name__)

error_handler = ErrorHandler()


class FormResponseModel(BaseModel):
    id: str
    profile_info: Dict[str, str] = Field(default_factory=dict)
    answers: Dict[str, str] = Field(default_factory=dict)
    created: str = ""
    modified: str = ""


class FormResponsesResponse(BaseModel):
    count: int
    responses: List[FormResponseModel] = Field(default_factory=list)


# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================


def build_form_response_service(config: AppConfig) -> FormResponseService:
    if config.integrations_mode == "mock":
        logger.info("INTEGRATIONS_MODE=mock; using MockCCBClient")
        client = MockCCBClient()
    else:
        client = CCBClient(config.ccb)
    return FormResponseService(client, RetryPolicy(config.retry))


# ============================================================================
# ROUTES
# ============================================================================

public_router = APIRouter()
admin_router = APIRouter(prefix="/admin", dependencies=[Depends(basic_auth_protection)])


@public_router.get("/", include_in_schema=False)
async def root():
    return RedirectResponse(url="/admin")


@public_router.get("/health")
async def health():
    return {"status": "ok"}


@admin_router.get("")
async def list_forms(request: Request):
    return {"forms": sorted(request.app.state.form_ids)}


@admin_router.get("/form_responses/{form_name}", response_model=FormResponsesResponse)
async def get_form_responses(
    form_name: str,
    request: Request,
    modified_since: Optional[date] = Query(default=None, description="Only responses modified since YYYY-MM-DD"),
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=25, ge=1, le=500),
    service: FormResponseService = Depends(get_form_response_service),
):
    form_id = request.app.state.form_ids.get(form_name)
    if form_id is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown form: {form_name}",
        )

    spec = RequestSpec(form_id=form_id, modified_since=modified_since, page=page, page_size=per_page)
    try:
        responses = await service.get_form_responses(
            spec,
            correlation_id=get_correlation_id(),
        )
    except ServiceError as e:
        return error_handler.handle_service_error(e, context={"form_name": form_name, "form_id": form_id})

    return {"count": len(responses), "responses": [r.to_dict() for r in responses]}


# ============================================================================
# APPLICATION
# ============================================================================


def create_app(
    config: Optional[AppConfig] = None,
    service: Optional[FormResponseService] = None,
) -> FastAPI:
    config = config or load_app_config()
    configure_logging(config.api.log_level)

    app = FastAPI(
        title="CCB Form Response Proxy",
        description="Authenticated JSON proxy for Church Community Builder form responses",
        version=__version__,
    )
    app.state.config = config
    app.state.form_ids = MappingProxyType(dict(config.api.form_ids))
    app.state.form_response_service = service or build_form_response_service(config)

    @app.middleware("http")
    async def request_logging(request: Request, call_next):
        start = time.perf_counter()
        correlation_id = set_correlation_id(request.headers.get(CORRELATION_ID_HEADER))
        log_fields = {
            "method": request.method,
            "path": request.url.path,
            "ip": request.client.host if request.client else "",
        }
        logger.info("Starting request.", extra=log_fields)

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Unhandled error while serving request.", extra=log_fields)
            response = JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"detail": "Internal server error"},
            )

        response.headers[CORRELATION_ID_HEADER] = correlation_id
        logger.info(
            "Request finished.",
            extra={
                **log_fields,
                "duration_ms": (time.perf_counter() - start) * 1000,
                "status_code": response.status_code,
            },
        )
        return response

    @app.on_event("shutdown")
    async def shutdown_event():
        """Cleanup on shutdown"""
        logger.info("Shutting down CCB Form Response Proxy...")
        await app.state.form_response_service.aclose()

    app.include_router(public_router)
    app.include_router(admin_router)
    return app
