"""
Cadriciel Serveur - Entry point

    uvicorn cadriciel.main:app
"""

import uvicorn

from cadriciel.app import Application
from cadriciel.controllers import IndexController
from cadriciel.core.config import settings
from cadriciel.core.logging import configure_logging

configure_logging(settings)

app = Application(IndexController(), settings=settings).app


def run() -> None:
    """Start the server on the configured host and port"""
    uvicorn.run(
        "cadriciel.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
        access_log=False,
    )


if __name__ == "__main__":
    run()
