"""Integration tests for a read-only mount (uploads and deletes denied)."""

from collections.abc import Callable
from pathlib import Path

import pytest
from httpx import AsyncClient
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from tests.conftest import JABBERWOCKY, upload_part


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    data = tmp_path / "data"
    data.mkdir()
    (data / "jabberwocky.txt").write_bytes(JABBERWOCKY)
    (data / "hideous name.txt").write_bytes(b"hideous")
    return data


@pytest.fixture
def error_calls() -> list[tuple[int, str]]:
    return []


@pytest.fixture
def client(
    make_client: Callable[..., AsyncClient],
    data_dir: Path,
    error_calls: list[tuple[int, str]],
) -> AsyncClient:
    def record_error(request: Request, status_code: int, message: str) -> Response:
        error_calls.append((status_code, message))
        return PlainTextResponse(f"custom: {message}", status_code=status_code)

    return make_client(
        path=str(data_dir), post=False, delete=False, errorHandler=record_error
    )


class TestReadOnlyMount:
    """Listing and reading work; writes are denied outright."""

    async def test_upload_denied(
        self, client: AsyncClient, error_calls: list[tuple[int, str]]
    ) -> None:
        resp = await client.post("/api/files", files=[upload_part("jabberwocky.txt")])
        assert resp.status_code == 403
        assert resp.content == b""
        assert error_calls == []

    async def test_list(self, client: AsyncClient) -> None:
        resp = await client.get("/api/files")
        assert resp.status_code == 200
        body = sorted(resp.json(), key=lambda entry: entry["name"])
        assert len(body) == 2

        assert body[0]["name"] == "hideous name.txt"
        assert body[0]["ext"] == "txt"
        assert body[0]["size"] == 7
        assert "created" in body[0]

        assert body[1]["name"] == "jabberwocky.txt"
        assert body[1]["ext"] == "txt"
        assert body[1]["size"] == len(JABBERWOCKY)

    async def test_list_with_trailing_slash(self, client: AsyncClient) -> None:
        resp = await client.get("/api/files/")
        assert resp.status_code == 200
        assert len(resp.json()) == 2

    async def test_read(self, client: AsyncClient) -> None:
        resp = await client.get("/api/files/jabberwocky.txt")
        assert resp.status_code == 200
        assert resp.content == JABBERWOCKY
        assert "slithy toves" in resp.text
        assert resp.headers["content-type"].startswith("text/plain")

    async def test_read_escaped_name(self, client: AsyncClient) -> None:
        resp = await client.get("/api/files/hideous%20name.txt")
        assert resp.status_code == 200
        assert resp.content == b"hideous"

    async def test_read_missing(
        self, client: AsyncClient, error_calls: list[tuple[int, str]]
    ) -> None:
        resp = await client.get("/api/files/missing.txt")
        assert resp.status_code == 404
        assert resp.text == "custom: File not found"
        assert error_calls == [(404, "File not found")]

    async def test_delete_denied(
        self, client: AsyncClient, data_dir: Path, error_calls: list[tuple[int, str]]
    ) -> None:
        resp = await client.delete("/api/files/jabberwocky.txt")
        assert resp.status_code == 403
        assert (data_dir / "jabberwocky.txt").exists()
        assert error_calls == []

    async def test_move_denied_by_default(self, client: AsyncClient) -> None:
        resp = await client.request(
            "MOVE", "/api/files/jabberwocky.txt", headers={"Destination": "poem.txt"}
        )
        assert resp.status_code == 403

    async def test_head_follows_get(self, client: AsyncClient) -> None:
        resp = await client.head("/api/files")
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/json"

        resp = await client.head("/api/files/jabberwocky.txt")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/plain")

        resp = await client.head("/api/files/missing.txt")
        assert resp.status_code == 404

    async def test_unsupported_method(self, client: AsyncClient) -> None:
        resp = await client.put("/api/files/jabberwocky.txt", content=b"x")
        assert resp.status_code == 405


class TestMissingRoot:
    """A storage root that does not exist yet lists as empty."""

    async def test_empty_listing(
        self, make_client: Callable[..., AsyncClient], storage: Path
    ) -> None:
        client = make_client(path=str(storage))
        resp = await client.get("/api/files")
        assert resp.status_code == 200
        assert resp.json() == []

    async def test_root_is_a_file(
        self, make_client: Callable[..., AsyncClient], tmp_path: Path
    ) -> None:
        target = tmp_path / "plain.txt"
        target.write_bytes(b"x")
        client = make_client(path=str(target))
        resp = await client.get("/api/files")
        assert resp.status_code == 400
        assert resp.text == "Not a directory"
