"""
Body Parsing Middlewares
JSON and urlencoded request bodies, exposed as `request.state.body`

The raw body is replayed unchanged, so downstream handlers can still read it.
"""

import json
from typing import Any, Callable

from starlette.types import ASGIApp, Receive, Scope, Send

from cadriciel.core.exceptions import PayloadTooLargeException, ValidationException
from cadriciel.core.utils.asgi import (
    BodyTooLarge,
    media_type,
    read_body,
    replay_receive,
    scope_state,
)
from cadriciel.core.utils.querystring import parse_extended

DEFAULT_LIMIT = 100 * 1024


class _BodyParserMiddleware:
    """Reads, parses and replays bodies of matching media types"""

    def __init__(self, app: ASGIApp, limit: int = DEFAULT_LIMIT):
        self.app = app
        self.limit = limit

    def matches(self, content_type: str) -> bool:
        raise NotImplementedError

    def parse(self, body: bytes) -> Any:
        raise NotImplementedError

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        state = scope_state(scope)
        state.setdefault("body", {})

        if not self.matches(media_type(scope)):
            await self.app(scope, receive, send)
            return

        try:
            body = await read_body(receive, limit=self.limit)
        except BodyTooLarge as exc:
            raise PayloadTooLargeException(limit=exc.limit, length=exc.length) from exc

        state["body"] = self.parse(body)
        await self.app(scope, replay_receive(body, receive), send)


class JSONBodyMiddleware(_BodyParserMiddleware):
    """`application/json` and `*/*+json` bodies"""

    def matches(self, content_type: str) -> bool:
        return content_type == "application/json" or content_type.endswith("+json")

    def parse(self, body: bytes) -> Any:
        if not body.strip():
            return {}
        try:
            value = json.loads(body)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ValidationException(
                f"Invalid JSON body: {exc}", details={"type": "entity.parse.failed"}
            ) from exc
        # Strict mode: objects and arrays only
        if not isinstance(value, (dict, list)):
            raise ValidationException(
                "Invalid JSON body: top-level value must be an object or an array",
                details={"type": "entity.parse.failed"},
            )
        return value


class URLEncodedBodyMiddleware(_BodyParserMiddleware):
    """`application/x-www-form-urlencoded` bodies, extended syntax"""

    def __init__(
        self,
        app: ASGIApp,
        limit: int = DEFAULT_LIMIT,
        parser: Callable[[str], Any] = parse_extended,
    ):
        super().__init__(app, limit=limit)
        self.parser = parser

    def matches(self, content_type: str) -> bool:
        return content_type == "application/x-www-form-urlencoded"

    def parse(self, body: bytes) -> Any:
        try:
            return self.parser(body.decode("utf-8"))
        except UnicodeDecodeError as exc:
            raise ValidationException(
                "Invalid urlencoded body", details={"type": "entity.parse.failed"}
            ) from exc
