"""
structlog setup shared by the platform services.

Every log line carries the service name, and inside an HTTP request also the
request id and the caller's user id. Output is JSON in deployed environments
and structlog's console format for local development:

    setup_service_logging("events", log_level="DEBUG", log_format="text")
    logger = get_logger(__name__)
"""

import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Any, Callable, Dict, List, Optional

import structlog
from fastapi import Request, Response

REQUEST_ID_HEADER = "X-Request-Id"
USER_ID_HEADER = "X-User-Id"

# Libraries that log every statement or connection at INFO
QUIET_LOGGERS = ("aiosqlite", "httpcore", "httpx", "sqlalchemy.engine")

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
user_id_var: ContextVar[Optional[str]] = ContextVar("user_id", default=None)

logger = structlog.get_logger(__name__)


def add_request_context(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    """Copy the current request and user ids into the event, when set."""
    request_id = request_id_var.get()
    if request_id:
        event_dict.setdefault("request_id", request_id)
    user_id = user_id_var.get()
    if user_id:
        event_dict.setdefault("user_id", user_id)
    return event_dict


def service_stamper(service_name: str) -> structlog.types.Processor:
    """Processor that tags every event with ``service=service_name``."""

    def stamp(
        logger: structlog.types.WrappedLogger,
        method_name: str,
        event_dict: structlog.types.EventDict,
    ) -> structlog.types.EventDict:
        event_dict.setdefault("service", service_name)
        return event_dict

    return stamp


def setup_service_logging(
    service_name: str, log_level: str = "INFO", log_format: str = "json"
) -> None:
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    processors: List[structlog.types.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        service_stamper(service_name),
        add_request_context,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if log_format.lower() == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )
    logger.debug(f"Logging configured for {service_name}", log_format=log_format)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def create_request_logging_middleware() -> Callable:
    """
    HTTP middleware that assigns the request id and logs each response.

    The id comes from the ``X-Request-Id`` header when the caller sent one
    and is echoed back on the response. ``X-User-Id`` is set by the gateway
    in front of the services.
    """
    access_log = get_logger("http.requests")

    async def log_requests(request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request_id_var.set(request_id)
        user_id_var.set(request.headers.get(USER_ID_HEADER))

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)

        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        access_log.log(
            level,
            f"{request.method} {request.url.path} {response.status_code}",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=duration_ms,
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    return log_requests


def log_service_startup(service_name: str, **settings: Any) -> None:
    logger.info(f"Starting {service_name}", **settings)


def log_service_shutdown(service_name: str) -> None:
    logger.info(f"{service_name} shut down")


def log_http_error(
    error_type: str,
    message: str,
    status_code: int,
    request_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    **context: Any,
) -> None:
    """Log an error response: 5xx at error level, anything lower as a warning."""
    fields = {key: value for key, value in context.items() if value is not None}
    if request_id:
        fields["request_id"] = request_id
    if details:
        fields["details"] = details
    log = logger.error if status_code >= 500 else logger.warning
    log(
        f"HTTP {status_code} {error_type}: {message}",
        error_type=error_type,
        status_code=status_code,
        **fields,
    )
