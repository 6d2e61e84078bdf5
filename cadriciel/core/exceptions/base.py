"""
Base Exception Classes
"""

from typing import Any, Dict, Optional

from fastapi import status


class AppException(Exception):
    """
    Application base exception

    Base class of every error rendered by the error handlers. An exception
    without a status code is rendered with the internal error status.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Args:
            message: message sent back to the client
            status_code: HTTP status code, if the error carries one
            details: additional error information (development only)
        """
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"status_code={self.status_code})"
        )


class ValidationException(AppException):
    """Malformed request body (400 Bad Request)"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


class NotFoundException(AppException):
    """
    No handler served the request (404 Not Found)

    Raised by the terminal fallback of the router.
    """

    def __init__(
        self, message: str = "Not Found", details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details=details,
        )


class PayloadTooLargeException(AppException):
    """Request body over the configured limit (413)"""

    def __init__(self, limit: int, length: int):
        super().__init__(
            message="request entity too large",
            status_code=413,
            details={"limit": limit, "length": length},
        )


class UnexpectedFieldException(AppException):
    """
    Multipart file under a field the upload handler does not accept

    Carries no status code, so it is rendered as an internal error.
    """

    def __init__(self, field: str):
        super().__init__(message="Unexpected field", details={"field": field})
        self.field = field
