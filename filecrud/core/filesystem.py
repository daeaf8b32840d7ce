"""Filesystem capability used by the file handlers."""

import os
from typing import Protocol

import aiofiles
import aiofiles.os


class FileSystem(Protocol):
    """The narrow set of filesystem calls the handlers depend on.

    Every method raises ``OSError`` subclasses on failure; callers translate
    them into typed application errors.
    """

    async def stat(self, path: str) -> os.stat_result: ...

    async def listdir(self, path: str) -> list[str]: ...

    async def makedirs(self, path: str) -> None: ...

    async def read_bytes(self, path: str) -> bytes: ...

    async def write_bytes(self, path: str, content: bytes) -> None: ...

    async def remove(self, path: str) -> None: ...

    async def rename(self, source: str, destination: str) -> None: ...


class LocalFileSystem:
    """Local disk access through aiofiles' thread-pool wrappers."""

    async def stat(self, path: str) -> os.stat_result:
        return await aiofiles.os.stat(path)

    async def listdir(self, path: str) -> list[str]:
        return await aiofiles.os.listdir(path)

    async def makedirs(self, path: str) -> None:
        await aiofiles.os.makedirs(path, exist_ok=True)

    async def read_bytes(self, path: str) -> bytes:
        async with aiofiles.open(path, "rb") as f:
            return await f.read()

    async def write_bytes(self, path: str, content: bytes) -> None:
        async with aiofiles.open(path, "wb") as f:
            await f.write(content)

    async def remove(self, path: str) -> None:
        await aiofiles.os.remove(path)

    async def rename(self, source: str, destination: str) -> None:
        await aiofiles.os.rename(source, destination)
