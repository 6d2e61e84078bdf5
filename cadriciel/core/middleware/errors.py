"""
Error Boundary Middleware
Renders errors raised outside the router (body parsing, uploads, ...)
"""

from typing import Optional

from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from cadriciel.core.exceptions import render_error


class ErrorBoundaryMiddleware:
    """
    Catches exceptions escaping the inner pipeline and renders them with the
    active error tier

    Once the response has started the exception is re-raised to the server.
    `respond_through` wraps the rendered error response, e.g. so that a
    boundary sitting outside CORS still answers with CORS headers.
    """

    def __init__(
        self,
        app: ASGIApp,
        development: bool = False,
        respond_through: Optional[Middleware] = None,
    ):
        self.app = app
        self.development = development
        self.respond_through = respond_through

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            if response_started:
                raise
            response: ASGIApp = render_error(
                exc, development=self.development, request=Request(scope)
            )
            if self.respond_through is not None:
                wrapper = self.respond_through
                response = wrapper.cls(response, *wrapper.args, **wrapper.kwargs)
            await response(scope, receive, send)
