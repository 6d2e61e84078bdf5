"""
Upload Middleware
Single-file multipart uploads written to disk before the request goes on
"""

from typing import Any, Dict, Optional

from starlette.datastructures import UploadFile
from starlette.requests import Request
from starlette.types import ASGIApp, Receive, Scope, Send

from cadriciel.core.exceptions import (
    PayloadTooLargeException,
    UnexpectedFieldException,
    ValidationException,
)
from cadriciel.core.logging import get_logger
from cadriciel.core.utils.asgi import (
    BodyTooLarge,
    media_type,
    read_body,
    replay_receive,
    scope_state,
)
from cadriciel.core.utils.querystring import assign, compact
from cadriciel.infrastructure.storage import LocalStorageService, safe_filename

logger = get_logger(__name__)

DEFAULT_LIMIT = 10 * 1024 * 1024


class UploadMiddleware:
    """
    Accepts at most one file, under `field`, and stores it under its
    original name

    After the middleware ran, `request.state.file` describes the stored file
    (or is None) and `request.state.body` holds the text fields. Same-name
    uploads overwrite each other; the last completed write wins. The
    multipart body is held in memory, up to `limit` bytes.
    """

    def __init__(
        self,
        app: ASGIApp,
        storage: LocalStorageService,
        field: str = "drawing",
        limit: int = DEFAULT_LIMIT,
    ):
        self.app = app
        self.storage = storage
        self.field = field
        self.limit = limit

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        state = scope_state(scope)
        state.setdefault("body", {})
        state.setdefault("file", None)

        if media_type(scope) != "multipart/form-data":
            await self.app(scope, receive, send)
            return

        try:
            body = await read_body(receive, limit=self.limit)
        except BodyTooLarge as exc:
            raise PayloadTooLargeException(limit=exc.limit, length=exc.length) from exc

        request = Request(scope, replay_receive(body, receive))
        form = await request.form()
        try:
            fields: Dict[str, Any] = {}
            upload: Optional[UploadFile] = None
            for key, value in form.multi_items():
                if isinstance(value, UploadFile):
                    if not value.filename:
                        continue
                    if key != self.field or upload is not None:
                        raise UnexpectedFieldException(key)
                    upload = value
                else:
                    assign(fields, key, value)

            state["body"] = compact(fields)
            if upload is not None:
                state["file"] = await self.store(upload)
        finally:
            await form.close()

        await self.app(scope, replay_receive(body, receive), send)

    async def store(self, upload: UploadFile) -> Dict[str, Any]:
        try:
            filename = safe_filename(upload.filename)
        except ValueError as exc:
            raise ValidationException(str(exc)) from exc

        await upload.seek(0)
        url = await self.storage.save(upload.file, filename, upload.content_type)
        path = self.storage.full_path(filename)
        size = path.stat().st_size
        logger.info("File uploaded", fieldname=self.field, filename=filename, size=size)
        return {
            "fieldname": self.field,
            "originalname": upload.filename,
            "mimetype": upload.content_type,
            "destination": str(self.storage.base_path),
            "filename": filename,
            "path": str(path),
            "size": size,
            "url": url,
        }
