"""
Request Logging Middleware Unit Tests
"""

from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient

from cadriciel.core.middleware import RequestLoggingMiddleware


async def _ok_app(scope, receive, send):
    await send(
        {
            "type": "http.response.start",
            "status": 201,
            "headers": [(b"content-length", b"2")],
        }
    )
    await send({"type": "http.response.body", "body": b"ok"})


class TestRequestLoggingMiddleware:
    async def test_logs_method_path_status(self):
        app = RequestLoggingMiddleware(_ok_app)

        with patch("cadriciel.core.middleware.request_logging.logger") as mock_logger:
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
                await client.post("/api/index/things?page=2")

        mock_logger.info.assert_called_once()
        message = mock_logger.info.call_args.args[0]
        kwargs = mock_logger.info.call_args.kwargs
        assert message.startswith("POST /api/index/things?page=2 201 ")
        assert message.endswith(" ms - 2")
        assert kwargs["method"] == "POST"
        assert kwargs["path"] == "/api/index/things"
        assert kwargs["status_code"] == 201
        assert kwargs["content_length"] == "2"
        assert kwargs["duration_ms"] >= 0

    async def test_logs_even_when_app_raises(self):
        async def failing(scope, receive, send):
            raise RuntimeError("kaboom")

        app = RequestLoggingMiddleware(failing)

        with patch("cadriciel.core.middleware.request_logging.logger") as mock_logger:
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
                with pytest.raises(RuntimeError):
                    await client.get("/")

        assert mock_logger.info.call_args.kwargs["status_code"] == 500
