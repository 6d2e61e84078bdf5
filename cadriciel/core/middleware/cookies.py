"""
Cookie Parsing Middleware
"""

from starlette.datastructures import Headers
from starlette.requests import cookie_parser
from starlette.types import ASGIApp, Receive, Scope, Send

from cadriciel.core.utils.asgi import scope_state


class CookieParserMiddleware:
    """Parses the Cookie header into `request.state.cookies`"""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] in ("http", "websocket"):
            cookie_header = Headers(scope=scope).get("cookie")
            scope_state(scope)["cookies"] = (
                cookie_parser(cookie_header) if cookie_header else {}
            )
        await self.app(scope, receive, send)
