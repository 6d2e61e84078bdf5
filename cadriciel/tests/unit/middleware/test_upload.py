"""
Upload Middleware Unit Tests
"""

import pytest
from httpx import ASGITransport, AsyncClient

from cadriciel.core.exceptions import PayloadTooLargeException, UnexpectedFieldException
from cadriciel.core.middleware import UploadMiddleware
from cadriciel.infrastructure.storage import LocalStorageService


class TestUploadMiddleware:
    @pytest.fixture
    def storage(self, tmp_path):
        return LocalStorageService(tmp_path / "uploads", base_url="/retrieve-images")

    @pytest.fixture
    def seen(self):
        return {}

    @pytest.fixture
    def app(self, storage, seen):
        async def downstream(scope, receive, send):
            # The file must already be on disk when the next stage runs
            seen["on_disk"] = sorted(p.name for p in storage.base_path.iterdir())
            seen["state"] = dict(scope["state"])
            body = b""
            more = True
            while more:
                message = await receive()
                body += message.get("body", b"")
                more = message.get("more_body", False)
            seen["raw"] = body
            await send({"type": "http.response.start", "status": 204, "headers": []})
            await send({"type": "http.response.body", "body": b""})

        return UploadMiddleware(downstream, storage=storage, field="drawing")

    @pytest.fixture
    async def client(self, app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac

    async def test_file_stored_before_downstream(self, client, storage, seen):
        response = await client.post(
            "/",
            files={"drawing": ("cat.png", b"\x89PNG fake", "image/png")},
            data={"title": "my cat"},
        )

        assert response.status_code == 204
        assert seen["on_disk"] == ["cat.png"]
        assert (storage.base_path / "cat.png").read_bytes() == b"\x89PNG fake"

    async def test_file_described_in_state(self, client, storage, seen):
        await client.post(
            "/",
            files={"drawing": ("cat.png", b"12345", "image/png")},
            data={"title": "my cat", "tags[]": ["a", "b"]},
        )

        file = seen["state"]["file"]
        assert file["fieldname"] == "drawing"
        assert file["originalname"] == "cat.png"
        assert file["filename"] == "cat.png"
        assert file["mimetype"] == "image/png"
        assert file["size"] == 5
        assert file["destination"] == str(storage.base_path)
        assert file["path"] == str(storage.base_path / "cat.png")
        assert file["url"] == "/retrieve-images/cat.png"
        assert seen["state"]["body"] == {"title": "my cat", "tags": ["a", "b"]}

    async def test_raw_body_replayed(self, client, seen):
        await client.post("/", files={"drawing": ("a.txt", b"hello", "text/plain")})

        assert b"hello" in seen["raw"]
        assert b'name="drawing"' in seen["raw"]

    async def test_same_name_overwrites(self, client, storage):
        await client.post("/", files={"drawing": ("dup.txt", b"first", "text/plain")})
        await client.post("/", files={"drawing": ("dup.txt", b"second", "text/plain")})

        assert (storage.base_path / "dup.txt").read_bytes() == b"second"

    async def test_path_components_stripped(self, client, storage, seen):
        await client.post("/", files={"drawing": ("../../evil.sh", b"x", "text/plain")})

        assert seen["state"]["file"]["filename"] == "evil.sh"
        assert (storage.base_path / "evil.sh").exists()

    async def test_text_only_multipart(self, client, seen):
        content = (
            b"--XyZ\r\n"
            b'Content-Disposition: form-data; name="title"\r\n\r\n'
            b"no file\r\n"
            b"--XyZ--\r\n"
        )
        await client.post(
            "/", content=content, headers={"content-type": "multipart/form-data; boundary=XyZ"}
        )

        assert seen["state"]["file"] is None
        assert seen["state"]["body"] == {"title": "no file"}

    async def test_unexpected_field_rejected(self, client, storage):
        with pytest.raises(UnexpectedFieldException) as exc_info:
            await client.post("/", files={"photo": ("cat.png", b"x", "image/png")})

        assert exc_info.value.field == "photo"
        assert list(storage.base_path.iterdir()) == []

    async def test_second_file_rejected(self, client):
        with pytest.raises(UnexpectedFieldException):
            await client.post(
                "/",
                files=[
                    ("drawing", ("a.png", b"a", "image/png")),
                    ("drawing", ("b.png", b"b", "image/png")),
                ],
            )

    async def test_non_multipart_untouched(self, client, storage, seen):
        await client.post("/", content=b"raw", headers={"content-type": "text/plain"})

        assert seen["state"]["file"] is None
        assert seen["raw"] == b"raw"
        assert list(storage.base_path.iterdir()) == []

    async def test_body_over_limit_rejected(self, storage):
        async def downstream(scope, receive, send):
            raise AssertionError("oversized upload reached the next stage")

        app = UploadMiddleware(downstream, storage=storage, limit=64)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            with pytest.raises(PayloadTooLargeException) as exc_info:
                await ac.post("/", files={"drawing": ("big.bin", b"x" * 1024, "application/octet-stream")})

        assert exc_info.value.status_code == 413
        assert exc_info.value.details["limit"] == 64
        assert list(storage.base_path.iterdir()) == []
