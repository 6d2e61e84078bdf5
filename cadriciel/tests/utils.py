"""
Test helpers: settings factory, a stub index router and a capturing ASGI app
"""

from typing import Any, Dict

from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

from cadriciel.core.config import Settings
from cadriciel.core.exceptions import AppException
from cadriciel.core.utils.asgi import read_body


def make_settings(tmp_path, **overrides) -> Settings:
    """Settings isolated from the environment's .env file"""
    values = {
        "upload_dir": str(tmp_path / "uploads"),
        "app_env": "development",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def build_index_router() -> APIRouter:
    """Stand-in for the externally owned index routes"""
    router = APIRouter()

    @router.api_route("/echo", methods=["GET", "POST", "PUT", "DELETE"])
    async def echo(request: Request):
        raw = await request.body()
        return {
            "method": request.method,
            "path": request.url.path,
            "query": request.url.query,
            "content_type": request.headers.get("content-type"),
            "raw": raw.decode("latin-1"),
            "body": request.state.body,
            "cookies": request.state.cookies,
            "file": request.state.file,
        }

    @router.get("/items/{item_id}")
    async def read_item(item_id: int):
        return {"item_id": item_id}

    @router.get("/boom")
    async def boom():
        raise RuntimeError("kaboom")

    @router.get("/teapot")
    async def teapot():
        raise AppException("short and stout", status_code=418)

    return router


def capture_app(captured: Dict[str, Any]):
    """ASGI app recording the scope and the body it receives"""

    async def app(scope, receive, send):
        captured["scope"] = scope
        captured["body"] = await read_body(receive)
        captured["state"] = dict(scope.get("state", {}))
        response = JSONResponse({"ok": True})
        await response(scope, receive, send)

    return app
