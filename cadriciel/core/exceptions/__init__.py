"""
Core Exceptions Module
"""

from .base import (
    AppException,
    NotFoundException,
    PayloadTooLargeException,
    UnexpectedFieldException,
    ValidationException,
)
from .handlers import (
    INTERNAL_ERROR,
    development_error_handler,
    install_error_handlers,
    production_error_handler,
    render_error,
    resolve_status,
    select_error_handler,
    serialize_exception,
)
from .schemas import ErrorResponse

__all__ = [
    # Base Exceptions
    "AppException",
    "NotFoundException",
    "PayloadTooLargeException",
    "UnexpectedFieldException",
    "ValidationException",
    # Handlers
    "INTERNAL_ERROR",
    "development_error_handler",
    "install_error_handlers",
    "production_error_handler",
    "render_error",
    "resolve_status",
    "select_error_handler",
    "serialize_exception",
    # Schemas
    "ErrorResponse",
]
