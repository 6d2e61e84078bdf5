"""
Global Exception Handlers

Two tiers: in development the response carries the full error object,
everywhere else only the message.
"""

import traceback
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cadriciel.core.config import Settings
from cadriciel.core.logging import get_logger
from .base import AppException
from .schemas import ErrorResponse

logger = get_logger(__name__)

INTERNAL_ERROR = status.HTTP_500_INTERNAL_SERVER_ERROR


def resolve_status(exc: BaseException) -> int:
    """The error's own status if it carries one, else the internal error code"""
    code = getattr(exc, "status_code", None) or getattr(exc, "status", None)
    if isinstance(code, int) and 400 <= code < 600:
        return code
    return INTERNAL_ERROR


def error_message(exc: BaseException) -> str:
    if isinstance(exc, AppException):
        return exc.message
    if isinstance(exc, StarletteHTTPException):
        return str(exc.detail)
    if isinstance(exc, RequestValidationError):
        return "Validation failed"
    return str(exc)


def serialize_exception(exc: BaseException) -> Dict[str, Any]:
    """
    Full error object, for development responses only

    Returns:
        dict: name, message, status, details and formatted stack
    """
    details: Any = getattr(exc, "details", None)
    if isinstance(exc, RequestValidationError):
        details = {"errors": jsonable_encoder(exc.errors())}
    return {
        "name": type(exc).__name__,
        "message": error_message(exc),
        "status": getattr(exc, "status_code", None) or getattr(exc, "status", None),
        "details": details or {},
        "stack": traceback.format_exception(type(exc), exc, exc.__traceback__),
    }


def render_error(
    exc: BaseException,
    development: bool,
    status_code: Optional[int] = None,
    request: Optional[Request] = None,
) -> JSONResponse:
    """
    Build the JSON error response

    Args:
        exc: the error to render
        development: include the full error object
        status_code: overrides the status resolved from the error
        request: used for logging context only
    """
    code = status_code or resolve_status(exc)
    log_context = {"status_code": code}
    if request is not None:
        log_context.update(method=request.method, path=request.url.path)

    if code >= INTERNAL_ERROR:
        logger.error(error_message(exc), exc_info=exc, **log_context)
    else:
        logger.warning(error_message(exc), **log_context)

    body = ErrorResponse(
        message=error_message(exc),
        error=serialize_exception(exc) if development else {},
    )
    headers = getattr(exc, "headers", None) if isinstance(exc, StarletteHTTPException) else None
    return JSONResponse(
        status_code=code,
        content=body.model_dump(mode="json"),
        headers=headers,
    )


async def development_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Development error handler: prints the stack"""
    return render_error(exc, development=True, status_code=_status_override(exc), request=request)


async def production_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Production error handler: no stack leaked to the client"""
    return render_error(exc, development=False, status_code=_status_override(exc), request=request)


def _status_override(exc: Exception) -> Optional[int]:
    if isinstance(exc, RequestValidationError):
        return 422
    return None


def select_error_handler(settings: Settings) -> Callable:
    """Pick the error tier for the configured environment"""
    if settings.is_development:
        return development_error_handler
    return production_error_handler


def install_error_handlers(app: FastAPI, settings: Settings) -> None:
    """
    Register the active error tier on the application

    Errors raised by middleware outside the router are rendered by
    `ErrorBoundaryMiddleware` with the same tier.
    """
    handler = select_error_handler(settings)

    # Custom application errors
    app.add_exception_handler(AppException, handler)

    # Pydantic request validation errors
    app.add_exception_handler(RequestValidationError, handler)

    # FastAPI/Starlette HTTP errors
    app.add_exception_handler(StarletteHTTPException, handler)
