"""
Errors raised by the CCB form-response pipeline.

Every error carries a ``stage`` ("request", "decode" or "projection") once it
leaves FormResponseService, so callers can tell where the pipeline broke
without inspecting the error internals.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ccb_proxy.integrations.contracts.form_responses import UpstreamErrorEntry


class ServiceError(Exception):
    code = "CCB_SERVICE_ERROR"

    def __init__(
        self,
        message: str,
        *,
        stage: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.stage:
            result["stage"] = self.stage
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        if self.stage:
            return f"{self.stage}: {self.message}"
        return self.message


class TransportError(ServiceError):
    """The request could not be built or no response was received."""

    code = "CCB_TRANSPORT_ERROR"


class RetryExhaustedError(ServiceError):
    code = "CCB_RETRY_EXHAUSTED"

    def __init__(
        self,
        attempts: int,
        last_error: Optional[str] = None,
        last_status: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            f"failed to call CCB service after {attempts} attempts: {last_error}",
            details={"attempts": attempts, "last_error": last_error, "last_status": last_status},
            **kwargs,
        )
        self.attempts = attempts
        self.last_error = last_error
        self.last_status = last_status


class UpstreamStatusError(ServiceError):
    code = "CCB_UNEXPECTED_STATUS"

    def __init__(self, status_code: int, body: str = "", **kwargs: Any) -> None:
        super().__init__(
            f"unexpected response from CCB: {status_code}",
            details={"status_code": status_code},
            **kwargs,
        )
        self.status_code = status_code
        self.body = body


class DecodeError(ServiceError):
    """Malformed XML, unexpected envelope structure, or mismatched answers."""

    code = "CCB_DECODE_ERROR"


class UpstreamReportedError(ServiceError):
    code = "CCB_REPORTED_ERROR"

    def __init__(self, errors: Sequence[UpstreamErrorEntry], **kwargs: Any) -> None:
        super().__init__(
            "errors returned from CCB response",
            details={"errors": [e.to_dict() for e in errors]},
            **kwargs,
        )
        self.errors = list(errors)


class CancellationError(ServiceError):
    """The caller's deadline expired before the pipeline finished."""

    code = "CCB_CANCELLED"
