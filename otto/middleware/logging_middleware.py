"""
Request logging middleware with correlation IDs for request tracing.
"""
import logging
import time
import uuid
from contextvars import ContextVar
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

# Context variable to store request ID across async calls
request_id_var: ContextVar[str] = ContextVar("request_id", default="")
session_id_var: ContextVar[str] = ContextVar("session_id", default="")

logger = logging.getLogger(__name__)

SESSION_PATH_MARKER = "/chat/sessions/"


def get_request_id() -> str:
    """Get the current request ID from context."""
    return request_id_var.get()


def get_session_id() -> str:
    """Get the current session ID from context."""
    return session_id_var.get()


def extract_session_id(path: str) -> str:
    """Return the chat session id embedded in a /chat/sessions/{id}/... path, or ''"""
    if SESSION_PATH_MARKER not in path:
        return ""
    return path.split(SESSION_PATH_MARKER, 1)[1].split("/")[0]


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that:
    1. Assigns a unique request ID to each request
    2. Logs request start/end with timing
    3. Captures session_id from URL for chat endpoints
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())[:8]
        request_id_token = request_id_var.set(request_id)

        path = request.url.path
        session_id = extract_session_id(path) or session_id_var.get()
        session_id_token = session_id_var.set(session_id)

        start_time = time.time()
        logger.info(
            f"[{request_id}] → {request.method} {path}",
            extra={
                "request_id": request_id,
                "session_id": session_id,
                "method": request.method,
                "path": path,
                "event": "request_start",
            },
        )

        try:
            response = await call_next(request)
            duration_ms = (time.time() - start_time) * 1000

            log_level = logging.INFO if response.status_code < 400 else logging.WARNING
            logger.log(
                log_level,
                f"[{request_id}] ← {response.status_code} ({duration_ms:.0f}ms)",
                extra={
                    "request_id": request_id,
                    "session_id": session_id,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                    "event": "request_end",
                },
            )

            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"[{request_id}] ✗ Error: {str(e)[:100]} ({duration_ms:.0f}ms)",
                extra={
                    "request_id": request_id,
                    "session_id": session_id,
                    "error": str(e),
                    "duration_ms": duration_ms,
                    "event": "request_error",
                },
                exc_info=True,
            )
            raise
        finally:
            # In-process calls made during a request must not leak their ids into it
            request_id_var.reset(request_id_token)
            session_id_var.reset(session_id_token)


class ContextualLogger:
    """
    A logger wrapper that automatically includes request_id and session_id.
    Use this in your services for consistent logging.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def _format_msg(self, msg: str) -> str:
        request_id = get_request_id()
        session_id = get_session_id()
        prefix = ""
        if request_id:
            prefix = f"[{request_id}]"
        if session_id:
            prefix += f"[sess:{session_id[:8]}]"
        return f"{prefix} {msg}" if prefix else msg

    def debug(self, msg: str, *args, **kwargs):
        self.logger.debug(self._format_msg(msg), *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        self.logger.info(self._format_msg(msg), *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self.logger.warning(self._format_msg(msg), *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self.logger.error(self._format_msg(msg), *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs):
        self.logger.exception(self._format_msg(msg), *args, **kwargs)


def get_logger(name: str) -> ContextualLogger:
    """Get a contextual logger that includes request/session IDs."""
    return ContextualLogger(name)
