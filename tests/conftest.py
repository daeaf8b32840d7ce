"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from starlette.requests import Request

from filecrud.api.file_router import FileCrud
from filecrud.core.context import FileRequestContext
from filecrud.core.crud_config import FileCrudConfig

JABBERWOCKY = (
    b"'Twas brillig, and the slithy toves\n"
    b"Did gyre and gimble in the wabe:\n"
    b"All mimsy were the borogoves,\n"
    b"And the mome raths outgrabe.\n"
)


# --- Storage ---


@pytest.fixture
def storage(tmp_path: Path) -> Path:
    """Storage root that does not exist until something is uploaded."""
    return tmp_path / "storage"


def upload_part(
    name: str, content: bytes = JABBERWOCKY, field: str = "file"
) -> tuple[str, tuple[str, bytes, str]]:
    """Build one multi-part file entry for httpx ``files=``."""
    return (field, (name, content, "text/plain"))


# --- Request helpers ---


def make_request(
    path_params: dict[str, str] | None = None,
    headers: dict[str, str] | None = None,
    method: str = "GET",
) -> Request:
    """Create a bare Starlette request without going through a router."""
    scope = {
        "type": "http",
        "method": method,
        "path": "/",
        "headers": [
            (key.lower().encode(), value.encode())
            for key, value in (headers or {}).items()
        ],
        "path_params": path_params or {},
        "query_string": b"",
    }
    return Request(scope)


def make_context(
    root: Path, path: str | None = None, **options: Any
) -> FileRequestContext:
    """Create a request context rooted at ``root``."""
    config = FileCrudConfig(storage_root=str(root), **options)
    return FileRequestContext(request=make_request(), settings=config, path=path)


# --- App & client fixtures ---


@pytest.fixture
async def make_client() -> AsyncGenerator[Callable[..., AsyncClient], None]:
    """Factory building a client for an app that mounts one FileCrud."""
    clients: list[AsyncClient] = []

    def _make(prefix: str = "/api/files", **options: Any) -> AsyncClient:
        application = FastAPI()
        application.include_router(FileCrud(**options).router, prefix=prefix)
        transport = ASGITransport(app=application)
        client = AsyncClient(transport=transport, base_url="http://test")
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()
