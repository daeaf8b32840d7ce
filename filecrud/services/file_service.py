"""Listing, reading, deleting and moving stored files."""

import os
import stat
from datetime import UTC, datetime

import structlog

from filecrud.core.context import FileRequestContext
from filecrud.core.exceptions import (
    DirectoryError,
    FileValidationError,
    NotFoundError,
    StorageIOError,
)
from filecrud.core.filesystem import FileSystem
from filecrud.core.paths import is_within, resolve_relative
from filecrud.schemas.file_schema import ListingEntry

logger = structlog.get_logger()


def _extension(name: str) -> str:
    return os.path.splitext(name)[1].lower().removeprefix(".")


class FileService:
    """One-shot file operations against a request's storage root."""

    def __init__(self, filesystem: FileSystem) -> None:
        self._fs = filesystem

    async def list_files(self, ctx: FileRequestContext) -> list[ListingEntry]:
        """List the immediate entries of the storage root.

        A root that does not exist yet lists as empty. Entries come back in
        directory enumeration order. ``created_at`` is the status-change time;
        stored files are never modified in place, so it stands in for the
        creation time.
        """
        root = ctx.root
        try:
            root_stat = await self._fs.stat(root)
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise StorageIOError(f"Directory access error - {exc}") from exc
        if not stat.S_ISDIR(root_stat.st_mode):
            raise DirectoryError("Not a directory")

        try:
            names = await self._fs.listdir(root)
        except OSError as exc:
            raise StorageIOError(f"Directory access error - {exc}") from exc

        entries = []
        for name in names:
            try:
                entry_stat = await self._fs.stat(os.path.join(root, name))
            except FileNotFoundError:
                # Dangling symlink, or removed since the directory was read.
                logger.debug("Skipping vanished entry", root=root, name=name)
                continue
            except OSError as exc:
                raise StorageIOError(f"Directory access error - {exc}") from exc
            entries.append(
                ListingEntry(
                    name=os.path.basename(name),
                    extension=_extension(name),
                    size_bytes=entry_stat.st_size,
                    created_at=datetime.fromtimestamp(entry_stat.st_ctime, tz=UTC),
                )
            )
        return entries

    async def read_file(self, ctx: FileRequestContext) -> tuple[str, bytes]:
        """Return the absolute path and contents of the requested file."""
        path = resolve_relative(ctx.root, ctx.path or "")
        try:
            file_stat = await self._fs.stat(path)
            if stat.S_ISDIR(file_stat.st_mode):
                raise DirectoryError("Not a file")
            content = await self._fs.read_bytes(path)
        except FileNotFoundError as exc:
            raise NotFoundError() from exc
        except OSError as exc:
            raise StorageIOError(f"File access error - {exc}") from exc
        return path, content

    async def delete_file(self, ctx: FileRequestContext) -> None:
        path = resolve_relative(ctx.root, ctx.path or "")
        try:
            await self._fs.remove(path)
        except OSError as exc:
            logger.warning("Delete failed", path=path, error=str(exc))
            raise StorageIOError(f"Delete failed - {exc}") from exc
        logger.info("File deleted", path=path)

    async def move_file(self, ctx: FileRequestContext, destination: str | None) -> str:
        """Rename a file within its own directory.

        Only the final component of ``destination`` is used, so a move can
        never leave the source's directory.
        """
        if not destination:
            raise FileValidationError("Destination header not specified")
        new_name = os.path.basename(destination.rstrip("/"))
        if new_name in ("", ".", ".."):
            raise FileValidationError("Destination must name a file")
        if not ctx.path:
            raise FileValidationError("No file path specified")

        source = resolve_relative(ctx.root, ctx.path)
        target = os.path.join(os.path.dirname(source), new_name)
        if not is_within(ctx.root, target):
            raise FileValidationError("Destination must name a file")

        try:
            await self._fs.rename(source, target)
        except OSError as exc:
            logger.warning("Move failed", source=source, target=target, error=str(exc))
            raise StorageIOError(f"Move failed - {exc}") from exc
        logger.info("File moved", source=source, target=target)
        return target
