"""
Error types shared by the platform services, and the FastAPI handlers that
render them.

Every failure leaves a service as an ``ErrorResponse`` body. Subclasses of
``AcademicAPIException`` carry their HTTP status, type string and error code
as class attributes, so raising sites only supply the message and context:

    raise NotFoundError("Event")
    raise ValidationError("name cannot be null", field="name")
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from services.common.logging_config import get_logger, log_http_error, request_id_var

logger = get_logger(__name__)


class ErrorCode(str, Enum):
    VALIDATION_FAILED = "VALIDATION_FAILED"
    INVALID_REFERENCE_KIND = "INVALID_REFERENCE_KIND"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    AUTH_FAILED = "AUTH_FAILED"
    ACCESS_DENIED = "ACCESS_DENIED"
    SERVICE_ERROR = "SERVICE_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


class ErrorResponse(BaseModel):
    """JSON body returned for every error."""

    type: str
    message: str
    details: Optional[Dict[str, Any]] = None
    timestamp: str
    request_id: str


def _current_request_id() -> str:
    return request_id_var.get() or str(uuid.uuid4())


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class AcademicAPIException(Exception):
    """
    Base class for errors raised at an operation boundary.

    Keyword arguments override the class-level status, type and code for a
    single instance. The request id is captured when the error is raised.
    """

    status_code: int = 500
    error_type: str = "internal_error"
    error_code: Optional[ErrorCode] = None

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_type: Optional[str] = None,
        error_code: Optional[ErrorCode] = None,
        status_code: Optional[int] = None,
        request_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})
        if error_type is not None:
            self.error_type = error_type
        if error_code is not None:
            self.error_code = error_code
        if status_code is not None:
            self.status_code = status_code
        self.timestamp = _utc_timestamp()
        self.request_id = request_id or _current_request_id()

    def to_error_response(self) -> ErrorResponse:
        details = dict(self.details)
        if self.error_code is not None:
            details["code"] = self.error_code.value
        return ErrorResponse(
            type=self.error_type,
            message=self.message,
            details=details or None,
            timestamp=self.timestamp,
            request_id=self.request_id,
        )


class ValidationError(AcademicAPIException):
    """A business rule rejected the input (422)."""

    status_code = 422
    error_type = "validation_error"
    error_code = ErrorCode.VALIDATION_FAILED

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        context = dict(details or {})
        if field:
            context["field"] = field
        if value is not None:
            context["value"] = str(value)
        super().__init__(message, context)
        self.field = field
        self.value = value


class NotFoundError(AcademicAPIException):
    """
    A referenced record does not exist (404).

    ``resource`` is the name the client knows the record by, so
    ``NotFoundError("Advisor").message == "Advisor not found"``.
    """

    status_code = 404
    error_type = "not_found"
    error_code = ErrorCode.NOT_FOUND

    def __init__(
        self,
        resource: str,
        identifier: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        label = f"{resource} {identifier}" if identifier else resource
        context = {**(details or {}), "resource": resource}
        if identifier:
            context["identifier"] = identifier
        super().__init__(f"{label} not found", context)
        self.resource = resource
        self.identifier = identifier


class InvalidReferenceKindError(AcademicAPIException):
    status_code = 400
    error_type = "invalid_reference_kind"
    error_code = ErrorCode.INVALID_REFERENCE_KIND

    def __init__(self, kind: Any, allowed: Optional[List[str]] = None):
        context: Dict[str, Any] = {"field": "relatedKind", "value": str(kind)}
        if allowed:
            context["allowed"] = allowed
        super().__init__("Invalid related model", context)
        self.kind = kind


class AuthError(AcademicAPIException):
    """Missing credentials (401), or insufficient permissions when raised with 403."""

    status_code = 401
    error_type = "auth_error"
    error_code = ErrorCode.AUTH_FAILED

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        code: ErrorCode = ErrorCode.AUTH_FAILED,
        status_code: int = 401,
    ):
        super().__init__(message, details, error_code=code, status_code=status_code)


class ServiceError(AcademicAPIException):
    status_code = 502
    error_type = "service_error"
    error_code = ErrorCode.SERVICE_ERROR

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        code: ErrorCode = ErrorCode.SERVICE_ERROR,
        status_code: int = 502,
    ):
        super().__init__(message, details, error_code=code, status_code=status_code)


class PersistenceError(ServiceError):
    """
    The database rejected or failed an operation (500).

    Only the operation name reaches the client. The driver error is logged
    where it was caught.
    """

    def __init__(self, operation: str, message: Optional[str] = None):
        super().__init__(
            message or "A database error occurred",
            {"operation": operation},
            code=ErrorCode.DATABASE_ERROR,
            status_code=500,
        )
        self.operation = operation


def _response(
    error_type: str, message: str, details: Optional[Dict[str, Any]]
) -> ErrorResponse:
    return ErrorResponse(
        type=error_type,
        message=message,
        details=details,
        timestamp=_utc_timestamp(),
        request_id=_current_request_id(),
    )


def exception_to_response(exc: Exception) -> ErrorResponse:
    """Render any exception; unexpected ones never expose their message."""
    if isinstance(exc, AcademicAPIException):
        return exc.to_error_response()
    if isinstance(exc, HTTPException):
        if isinstance(exc.detail, dict):
            detail = exc.detail
        else:
            detail = {"message": str(exc.detail)}
        return _response("http_error", detail.get("message", "HTTP error"), detail)
    return _response(
        "internal_error",
        "Internal server error",
        {"error_type": type(exc).__name__, "code": ErrorCode.INTERNAL_ERROR.value},
    )


def _field_path(location: Any) -> str:
    return ".".join(str(part) for part in location if part != "body")


def request_validation_to_response(exc: RequestValidationError) -> ErrorResponse:
    """One ``{field, reason}`` entry per schema violation, as a 422 body."""
    errors = [
        {
            "field": _field_path(error.get("loc", ())),
            "reason": error.get("msg", "invalid value"),
        }
        for error in exc.errors()
    ]
    return ValidationError(
        "Request validation failed",
        field=errors[0]["field"] if errors else None,
        details={"errors": errors},
    ).to_error_response()


def _render(request: Request, status_code: int, body: ErrorResponse) -> JSONResponse:
    log_http_error(
        body.type,
        body.message,
        status_code,
        request_id=body.request_id,
        details=body.details,
        path=request.url.path,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def handle_api_exception(
    request: Request, exc: AcademicAPIException
) -> JSONResponse:
    return _render(request, exc.status_code, exc.to_error_response())


async def handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return _render(request, 422, request_validation_to_response(exc))


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    return _render(request, exc.status_code, exception_to_response(exc))


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}", exc_info=exc
    )
    return _render(request, 500, exception_to_response(exc))


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers above on ``app``. Call once at startup."""
    app.exception_handler(AcademicAPIException)(handle_api_exception)
    app.exception_handler(RequestValidationError)(handle_request_validation)
    app.exception_handler(HTTPException)(handle_http_exception)
    app.exception_handler(Exception)(handle_unexpected)
