"""
ASGI helpers shared by the body-reading middlewares
"""

from typing import Any, Dict, Optional

from starlette.datastructures import Headers
from starlette.types import Message, Receive, Scope


class BodyTooLarge(Exception):
    def __init__(self, limit: int, length: int):
        super().__init__(f"body of {length} bytes exceeds {limit}")
        self.limit = limit
        self.length = length


def media_type(scope: Scope) -> str:
    """Lower-cased media type of the request, without parameters"""
    content_type = Headers(scope=scope).get("content-type", "")
    return content_type.split(";", 1)[0].strip().lower()


async def read_body(receive: Receive, limit: Optional[int] = None) -> bytes:
    """
    Drain the request body

    Args:
        receive: ASGI receive callable
        limit: maximum accepted size in bytes

    Raises:
        BodyTooLarge: the body went over `limit`
    """
    chunks = []
    size = 0
    more_body = True
    while more_body:
        message = await receive()
        if message["type"] == "http.disconnect":
            break
        chunk = message.get("body", b"")
        size += len(chunk)
        if limit is not None and size > limit:
            raise BodyTooLarge(limit, size)
        chunks.append(chunk)
        more_body = message.get("more_body", False)
    return b"".join(chunks)


def replay_receive(body: bytes, receive: Receive) -> Receive:
    """
    Receive callable that hands `body` downstream unchanged, then defers
    to the original channel (disconnect notifications)
    """
    sent = False

    async def _receive() -> Message:
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return _receive


def scope_state(scope: Scope) -> Dict[str, Any]:
    """Backing dict of `request.state` for this scope"""
    return scope.setdefault("state", {})
