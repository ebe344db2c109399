"""
Logging setup and HTTP middlewares for the task manager API.

Every record emitted while a request is being served carries that
request's id, so a login failure or a task update can be traced back
to the call that caused it.
"""

from __future__ import annotations

import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


LOGGER_NAME = "taskmanager"

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIdFilter(logging.Filter):
    """Stamp `record.request_id` ("-" outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        return True


def configure_logging(log_level: str = "INFO") -> logging.Logger:
    """
    Install a single stdout handler on the `taskmanager` logger tree.

    Calling it again replaces the handler rather than stacking a second one.
    """
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(request_id)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(RequestIdFilter())

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    logger.handlers = [handler]
    logger.propagate = False

    logging.getLogger("uvicorn.access").handlers = [handler]

    return logger


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Reuse the caller's X-Request-ID or mint a short one, and echo it back."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers["X-Request-ID"] = request_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration; 4xx/5xx go out at WARNING."""

    def __init__(self, app, exclude_paths: Optional[list[str]] = None):
        super().__init__(app)
        self.exclude_paths = exclude_paths or ["/health", "/metrics"]
        self.logger = logging.getLogger(f"{LOGGER_NAME}.requests")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.exclude_paths:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        self.logger.log(
            level,
            "%s %s -> %s (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        return response


def log_auth_event(event_type: str, email: str, success: bool, details: str = "") -> None:
    """
    Audit trail for account activity.

    Args:
        event_type: register, login, profile or password
        email: the account the event concerns
        success: failures are logged at WARNING
        details: free-form reason, usually only set on failure
    """
    logger = logging.getLogger(f"{LOGGER_NAME}.auth")
    message = f"Auth event: {event_type} | email={email} | status={'success' if success else 'failed'}"
    if details:
        message += f" | details={details}"
    logger.log(logging.INFO if success else logging.WARNING, message)


def log_crud_event(
    operation: str,
    resource_type: str,
    resource_id: int | None = None,
    user_email: str = "",
    details: str = "",
) -> None:
    logger = logging.getLogger(f"{LOGGER_NAME}.audit")
    parts = [f"CRUD: {operation.upper()} {resource_type}"]
    if resource_id is not None:
        parts[0] += f" id={resource_id}"
    if user_email:
        parts.append(f"user={user_email}")
    if details:
        parts.append(details)
    logger.info(" | ".join(parts))
