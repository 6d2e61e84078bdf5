"""
Request Logging Middleware
One log line per request: method, path, status, duration, size
"""

import time

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from cadriciel.core.logging import get_logger

logger = get_logger("cadriciel.access")


class RequestLoggingMiddleware:
    """
    Access log middleware

    The line is written once the response is complete, so it carries the
    final status code, including error responses rendered further in.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        status_code = 500
        content_length = None

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code, content_length
            if message["type"] == "http.response.start":
                status_code = message["status"]
                content_length = Headers(raw=message["headers"]).get(
                    "content-length"
                )
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            path = scope.get("path", "")
            if scope.get("query_string"):
                path = f"{path}?{scope['query_string'].decode('latin-1')}"
            logger.info(
                f"{scope['method']} {path} {status_code} "
                f"{duration_ms:.3f} ms - {content_length or '-'}",
                method=scope["method"],
                path=scope.get("path", ""),
                status_code=status_code,
                duration_ms=round(duration_ms, 3),
                content_length=content_length,
            )
