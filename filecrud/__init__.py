"""Mountable file CRUD endpoint for FastAPI applications."""

from filecrud.api.file_router import FileCrud
from filecrud.core.context import FileRequestContext
from filecrud.core.crud_config import FileCrudConfig, plain_error_handler
from filecrud.core.exceptions import (
    AuthorizationDenied,
    AuthorizationError,
    ConfigurationError,
    DirectoryError,
    FileCrudError,
    FileValidationError,
    NotFoundError,
    PathEscapeError,
    StorageIOError,
    UploadError,
)
from filecrud.core.filesystem import FileSystem, LocalFileSystem
from filecrud.core.security import bearer_token_step
from filecrud.core.settings import NamingPolicy
from filecrud.schemas.file_schema import ListingEntry, UploadedFile

__all__ = [
    "AuthorizationDenied",
    "AuthorizationError",
    "ConfigurationError",
    "DirectoryError",
    "FileCrud",
    "FileCrudConfig",
    "FileCrudError",
    "FileRequestContext",
    "FileSystem",
    "FileValidationError",
    "ListingEntry",
    "LocalFileSystem",
    "NamingPolicy",
    "NotFoundError",
    "PathEscapeError",
    "StorageIOError",
    "UploadError",
    "UploadedFile",
    "bearer_token_step",
    "plain_error_handler",
]
