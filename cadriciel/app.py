"""
Cadriciel Serveur - Application
Composition root: middleware pipeline, documentation, index routes and
error handling
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import Receive, Scope, Send

from cadriciel.controllers import IndexController
from cadriciel.core.config import Settings, settings as default_settings
from cadriciel.core.exceptions import (
    NotFoundException,
    install_error_handlers,
    select_error_handler,
)
from cadriciel.core.logging import get_logger
from cadriciel.core.middleware import build_middleware
from cadriciel.core.openapi import mount_docs
from cadriciel.infrastructure.storage import LocalStorageService

logger = get_logger(__name__)


class Application:
    """
    Builds the ASGI application

    Pipeline order: request logging, JSON bodies, urlencoded bodies, cookies,
    CORS, single-file upload, static uploads. The index controller's router
    is mounted as-is, so routes it registers later are served as well.
    """

    def __init__(
        self,
        index_controller: IndexController,
        settings: Optional[Settings] = None,
        storage: Optional[LocalStorageService] = None,
    ):
        self.index_controller = index_controller
        self.settings = settings or default_settings
        self.storage = storage or LocalStorageService(
            self.settings.upload_dir, base_url=self.settings.static_prefix
        )

        self.app = FastAPI(
            title=self.settings.app_title,
            version=self.settings.app_version,
            openapi_version=self.settings.openapi_version,
            docs_url=None,
            redoc_url=None,
            openapi_url=self.settings.docs_openapi_url,
            middleware=build_middleware(self.settings, self.storage),
        )

        self.config()
        self.bind_routes()

        logger.info(
            "Application configured",
            env=self.settings.app_env,
            docs=self.settings.docs_url,
            upload_dir=str(self.storage.base_path),
        )

    def config(self) -> None:
        # Uploaded files, served as-is
        self.app.mount(
            self.settings.static_prefix,
            StaticFiles(directory=self.storage.base_path, check_dir=False),
            name="uploads",
        )

        @self.app.get("/health", tags=["Health"])
        async def health_check():
            """Service status"""
            return {
                "status": "ok",
                "service": self.settings.app_title,
                "version": self.settings.app_version,
            }

    def bind_routes(self) -> None:
        mount_docs(self.app, self.settings)
        self.app.mount(self.settings.index_prefix, self.index_controller.router)
        self.error_handling()

    def error_handling(self) -> None:
        # Requests no route served end up here
        fallback = self.app.router.default

        async def not_found(scope: Scope, receive: Receive, send: Send) -> None:
            if scope["type"] != "http":
                await fallback(scope, receive, send)
                return
            raise NotFoundException("Not Found")

        self.app.router.default = not_found

        install_error_handlers(self.app, self.settings)

        # A path served for other methods only, or unknown to a mounted router,
        # is still "Not Found"
        tier = select_error_handler(self.settings)

        async def http_error(request: Request, exc: StarletteHTTPException):
            if exc.status_code == 405 or (
                exc.status_code == 404 and exc.detail == "Not Found"
            ):
                return await tier(request, NotFoundException("Not Found"))
            return await tier(request, exc)

        self.app.add_exception_handler(StarletteHTTPException, http_error)
