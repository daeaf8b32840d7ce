"""Tests for FileService listing, read, delete and move."""

import os
from datetime import datetime
from pathlib import Path

import pytest

from filecrud.core.exceptions import (
    DirectoryError,
    FileValidationError,
    NotFoundError,
    PathEscapeError,
    StorageIOError,
)
from filecrud.core.filesystem import LocalFileSystem
from filecrud.services.file_service import FileService
from tests.conftest import JABBERWOCKY, make_context


@pytest.fixture
def service() -> FileService:
    return FileService(LocalFileSystem())


@pytest.fixture
def root(tmp_path: Path) -> Path:
    root = tmp_path / "storage"
    root.mkdir()
    (root / "jabberwocky.txt").write_bytes(JABBERWOCKY)
    (root / "Notes.MD").write_bytes(b"# hi\n")
    (root / "README").write_bytes(b"")
    return root


class TestListFiles:
    """Directory listings."""

    async def test_missing_root_lists_empty(
        self, service: FileService, tmp_path: Path
    ) -> None:
        ctx = make_context(tmp_path / "nope")
        assert await service.list_files(ctx) == []

    async def test_root_that_is_a_file(self, service: FileService, tmp_path: Path) -> None:
        target = tmp_path / "plain.txt"
        target.write_bytes(b"x")
        with pytest.raises(DirectoryError) as exc_info:
            await service.list_files(make_context(target))
        assert exc_info.value.message == "Not a directory"

    async def test_entries(self, service: FileService, root: Path) -> None:
        entries = {entry.name: entry for entry in await service.list_files(make_context(root))}
        assert set(entries) == {"jabberwocky.txt", "Notes.MD", "README"}

        poem = entries["jabberwocky.txt"]
        assert poem.extension == "txt"
        assert poem.size_bytes == len(JABBERWOCKY)
        assert isinstance(poem.created_at, datetime)
        assert poem.created_at.tzinfo is not None

        assert entries["Notes.MD"].extension == "md"
        assert entries["README"].extension == ""
        assert entries["README"].size_bytes == 0

    async def test_dangling_symlink_skipped(
        self, service: FileService, root: Path
    ) -> None:
        (root / "dangling").symlink_to(root / "gone.txt")
        names = {entry.name for entry in await service.list_files(make_context(root))}
        assert names == {"jabberwocky.txt", "Notes.MD", "README"}

    async def test_wire_names(self, service: FileService, root: Path) -> None:
        entries = await service.list_files(make_context(root))
        dumped = entries[0].model_dump(mode="json", by_alias=True)
        assert set(dumped) == {"name", "ext", "size", "created"}


class TestReadFile:
    """Reading a single file."""

    async def test_reads_content(self, service: FileService, root: Path) -> None:
        path, content = await service.read_file(make_context(root, "jabberwocky.txt"))
        assert path == str(root / "jabberwocky.txt")
        assert content == JABBERWOCKY

    async def test_missing_file(self, service: FileService, root: Path) -> None:
        with pytest.raises(NotFoundError):
            await service.read_file(make_context(root, "missing.txt"))

    async def test_escape_rejected_before_io(
        self, service: FileService, root: Path
    ) -> None:
        (root.parent / "secret.txt").write_bytes(b"secret")
        with pytest.raises(PathEscapeError):
            await service.read_file(make_context(root, "../secret.txt"))

    async def test_directory_is_not_a_file(
        self, service: FileService, root: Path
    ) -> None:
        (root / "nested").mkdir()
        with pytest.raises(DirectoryError):
            await service.read_file(make_context(root, "nested"))


class TestDeleteFile:
    """Deleting files."""

    async def test_deletes(self, service: FileService, root: Path) -> None:
        await service.delete_file(make_context(root, "README"))
        assert not (root / "README").exists()

    async def test_missing_file_is_io_error(
        self, service: FileService, root: Path
    ) -> None:
        with pytest.raises(StorageIOError) as exc_info:
            await service.delete_file(make_context(root, "missing.txt"))
        assert exc_info.value.status_code == 400

    async def test_escape_rejected(self, service: FileService, root: Path) -> None:
        outside = root.parent / "keep.txt"
        outside.write_bytes(b"keep")
        with pytest.raises(PathEscapeError):
            await service.delete_file(make_context(root, "../keep.txt"))
        assert outside.exists()


class TestMoveFile:
    """Renaming files within their directory."""

    async def test_requires_destination(self, service: FileService, root: Path) -> None:
        with pytest.raises(FileValidationError) as exc_info:
            await service.move_file(make_context(root, "README"), None)
        assert exc_info.value.message == "Destination header not specified"
        assert (root / "README").exists()

    async def test_renames(self, service: FileService, root: Path) -> None:
        target = await service.move_file(make_context(root, "README"), "README.txt")
        assert target == str(root / "README.txt")
        assert (root / "README.txt").exists()
        assert not (root / "README").exists()

    async def test_only_basename_honoured(self, service: FileService, root: Path) -> None:
        (root / "nested").mkdir()
        (root / "nested" / "a.txt").write_bytes(b"a")
        target = await service.move_file(
            make_context(root, "nested/a.txt"), "/elsewhere/../../b.txt"
        )
        assert target == os.path.join(root, "nested", "b.txt")
        assert (root / "nested" / "b.txt").exists()

    @pytest.mark.parametrize("destination", ["..", "somewhere/.", "/"])
    async def test_rejects_nameless_destination(
        self, service: FileService, root: Path, destination: str
    ) -> None:
        with pytest.raises(FileValidationError):
            await service.move_file(make_context(root, "README"), destination)

    async def test_requires_source_path(self, service: FileService, root: Path) -> None:
        with pytest.raises(FileValidationError) as exc_info:
            await service.move_file(make_context(root), "new.txt")
        assert exc_info.value.message == "No file path specified"

    async def test_missing_source_is_io_error(
        self, service: FileService, root: Path
    ) -> None:
        with pytest.raises(StorageIOError):
            await service.move_file(make_context(root, "missing.txt"), "new.txt")
