"""Error handling helpers for the CCB form-response pipeline."""
from typing import Any, Dict, Type
import logging

from fastapi.responses import JSONResponse

from ccb_proxy.integrations.errors import (
    CancellationError,
    DecodeError,
    RetryExhaustedError,
    ServiceError,
    TransportError,
    UpstreamReportedError,
    UpstreamStatusError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: Dict[Type[ServiceError], int] = {
    TransportError: 502,
    RetryExhaustedError: 503,
    UpstreamStatusError: 502,
    DecodeError: 502,
    UpstreamReportedError: 502,
    CancellationError: 504,
}


class ErrorHandler:
    def status_code_for(self, exc: ServiceError) -> int:
        for error_type in type(exc).__mro__:
            if error_type in STATUS_BY_ERROR:
                return STATUS_BY_ERROR[error_type]
        return 500

    def handle_service_error(self, exc: ServiceError, context: Dict[str, Any] = None) -> JSONResponse:
        status_code = self.status_code_for(exc)
        logger.error(
            "CCB form response lookup failed at %s stage: %s",
            exc.stage or "unknown",
            exc,
            extra={"context": context or {}, "status_code": status_code},
        )
        return JSONResponse(status_code=status_code, content=exc.to_dict())
