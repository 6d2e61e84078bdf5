"""
Pytest Configuration and Fixtures
"""

from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from cadriciel.app import Application
from cadriciel.controllers import IndexController
from cadriciel.tests.utils import build_index_router, make_settings


@pytest.fixture
def settings(tmp_path):
    """Development settings with a temporary upload directory"""
    return make_settings(tmp_path, app_env="development")


@pytest.fixture
def production_settings(tmp_path):
    return make_settings(tmp_path, app_env="production")


@pytest.fixture
def application(settings) -> Application:
    return Application(IndexController(build_index_router()), settings=settings)


@pytest.fixture
def production_application(production_settings) -> Application:
    return Application(IndexController(build_index_router()), settings=production_settings)


@pytest.fixture
async def client(application) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the development application"""
    transport = ASGITransport(app=application.app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def production_client(production_application) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the production application"""
    transport = ASGITransport(app=production_application.app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
