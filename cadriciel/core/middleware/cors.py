"""
CORS Middleware
Cross-Origin Resource Sharing configuration
"""

from typing import Sequence

from starlette.datastructures import Headers, MutableHeaders
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from cadriciel.core.config import Settings


class WildcardCORSMiddleware(CORSMiddleware):
    """
    `CORSMiddleware` that also covers requests sent without an `Origin`

    Starlette only decorates cross-origin requests. When every origin is
    allowed, responses to same-origin and non-browser requests get
    `Access-Control-Allow-Origin: *` as well.
    """

    def __init__(
        self,
        app: ASGIApp,
        allow_origins: Sequence[str] = (),
        expose_headers: Sequence[str] = (),
        **kwargs,
    ):
        super().__init__(
            app, allow_origins=allow_origins, expose_headers=expose_headers, **kwargs
        )
        self.wildcard = "*" in allow_origins
        self.originless_headers = {"Access-Control-Allow-Origin": "*"}
        if expose_headers:
            self.originless_headers["Access-Control-Expose-Headers"] = ", ".join(
                expose_headers
            )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if (
            scope["type"] != "http"
            or not self.wildcard
            or "origin" in Headers(scope=scope)
        ):
            await super().__call__(scope, receive, send)
            return

        async def send_with_cors(message: Message) -> None:
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                headers = MutableHeaders(scope=message)
                for key, value in self.originless_headers.items():
                    headers.setdefault(key, value)
            await send(message)

        await self.app(scope, receive, send_with_cors)


def cors_middleware(settings: Settings) -> Middleware:
    """
    CORS middleware entry

    Defaults allow every origin without credentials, so every response
    carries `Access-Control-Allow-Origin: *`.

    Args:
        settings: application settings
    """
    allow_headers = (
        ["*"]
        if settings.cors_allow_headers == "*"
        else [h.strip() for h in settings.cors_allow_headers.split(",")]
    )
    return Middleware(
        WildcardCORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=[m.strip() for m in settings.cors_allow_methods.split(",")],
        allow_headers=allow_headers,
        expose_headers=["Content-Disposition"],
    )
