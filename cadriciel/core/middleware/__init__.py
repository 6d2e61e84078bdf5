"""
Middleware Module
Request pipeline: logging, body parsing, cookies, CORS, uploads
"""

from typing import List

from asgi_correlation_id import CorrelationIdMiddleware
from starlette.middleware import Middleware

from cadriciel.core.config import Settings
from cadriciel.infrastructure.storage import LocalStorageService
from .body_parser import JSONBodyMiddleware, URLEncodedBodyMiddleware
from .cookies import CookieParserMiddleware
from .cors import WildcardCORSMiddleware, cors_middleware
from .errors import ErrorBoundaryMiddleware
from .request_logging import RequestLoggingMiddleware
from .upload import UploadMiddleware


def build_middleware(settings: Settings, storage: LocalStorageService) -> List[Middleware]:
    """
    Ordered middleware stack, outermost first

    Args:
        settings: application settings
        storage: destination of uploaded files
    """
    return [
        Middleware(CorrelationIdMiddleware),
        Middleware(RequestLoggingMiddleware),
        # Errors from body parsing, answered with CORS headers all the same
        Middleware(
            ErrorBoundaryMiddleware,
            development=settings.is_development,
            respond_through=cors_middleware(settings),
        ),
        Middleware(JSONBodyMiddleware, limit=settings.body_limit),
        Middleware(URLEncodedBodyMiddleware, limit=settings.body_limit),
        Middleware(CookieParserMiddleware),
        cors_middleware(settings),
        # Errors from uploads and routes, rendered inside CORS
        Middleware(ErrorBoundaryMiddleware, development=settings.is_development),
        Middleware(
            UploadMiddleware,
            storage=storage,
            field=settings.upload_field,
            limit=settings.upload_limit,
        ),
    ]


__all__ = [
    "build_middleware",
    "cors_middleware",
    "CookieParserMiddleware",
    "ErrorBoundaryMiddleware",
    "JSONBodyMiddleware",
    "RequestLoggingMiddleware",
    "UploadMiddleware",
    "URLEncodedBodyMiddleware",
    "WildcardCORSMiddleware",
]
