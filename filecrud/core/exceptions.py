"""File CRUD exception classes and handlers."""

from fastapi import Request
from fastapi.responses import JSONResponse


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, code: str, status_code: int = 400) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)


class FileCrudError(AppException):
    """Base class for errors raised while serving a file operation."""


# --- Configuration (500) ---


class ConfigurationError(FileCrudError):
    """Invalid mount configuration or storage root computation."""

    def __init__(self, message: str = "Invalid file storage configuration") -> None:
        super().__init__(message=message, code="CONFIGURATION_ERROR", status_code=500)


# --- Bad request (400) ---


class PathEscapeError(FileCrudError):
    """Resolved path lies outside the storage root."""

    def __init__(self) -> None:
        super().__init__(
            message="File outside of storage directory",
            code="PATH_ESCAPE",
            status_code=400,
        )


class DirectoryError(FileCrudError):
    """Path exists but is not of the expected type."""

    def __init__(self, message: str = "Not a directory") -> None:
        super().__init__(message=message, code="DIRECTORY_ERROR", status_code=400)


class UploadError(FileCrudError):
    """Upload batch rejected (empty, too few or too many files)."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="UPLOAD_ERROR", status_code=400)


class StorageIOError(FileCrudError):
    """Generic filesystem failure."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="STORAGE_IO_ERROR", status_code=400)


class FileValidationError(FileCrudError):
    """Required request data is missing or malformed."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="VALIDATION_ERROR", status_code=400)


# --- Authentication (401) ---


class AuthenticationError(FileCrudError):
    """Base authentication error."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message=message, code="AUTHENTICATION_ERROR", status_code=401)


class TokenExpiredError(FileCrudError):
    """Token has expired."""

    def __init__(self) -> None:
        super().__init__(
            message="Token has expired",
            code="TOKEN_EXPIRED",
            status_code=401,
        )


class InvalidTokenError(FileCrudError):
    """Token is invalid."""

    def __init__(self) -> None:
        super().__init__(
            message="Invalid token",
            code="INVALID_TOKEN",
            status_code=401,
        )


# --- Authorization (403) ---


class AuthorizationError(FileCrudError):
    """A gate step failed. Rendered through the error handler."""

    def __init__(self, message: str = "Insufficient permissions") -> None:
        super().__init__(message=message, code="AUTHORIZATION_ERROR", status_code=403)


class AuthorizationDenied(FileCrudError):
    """Hard denial. Always answered with a bare 403, never via the error handler."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message=message, code="ACCESS_DENIED", status_code=403)


# --- Not Found (404) ---


class NotFoundError(FileCrudError):
    """File or directory not found."""

    def __init__(self, message: str = "File not found") -> None:
        super().__init__(message=message, code="FILE_NOT_FOUND", status_code=404)


# --- Exception Handler ---


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Central exception handler for AppException."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": {
                "code": exc.code,
                "message": exc.message,
            },
        },
    )
