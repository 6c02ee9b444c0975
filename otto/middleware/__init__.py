"""
Middleware package for the API.
"""
from otto.middleware.logging_middleware import (
    ContextualLogger,
    RequestLoggingMiddleware,
    get_logger,
    get_request_id,
    get_session_id,
)

__all__ = [
    "RequestLoggingMiddleware",
    "ContextualLogger",
    "get_logger",
    "get_request_id",
    "get_session_id",
]
