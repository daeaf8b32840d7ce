"""File CRUD endpoint: method dispatch, gating and response rendering."""

import inspect
import mimetypes
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from fastapi import APIRouter
from pydantic import ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from filecrud.core.context import FileRequestContext
from filecrud.core.crud_config import FileCrudConfig
from filecrud.core.exceptions import (
    AuthorizationDenied,
    ConfigurationError,
    FileCrudError,
    FileValidationError,
)
from filecrud.core.filesystem import FileSystem, LocalFileSystem
from filecrud.core.gates import GateRunner
from filecrud.core.paths import resolve_root
from filecrud.services.file_service import FileService
from filecrud.services.upload_service import UploadService

logger = structlog.get_logger()

METHODS = ["GET", "HEAD", "POST", "MOVE", "DELETE"]


def select_operation(method: str, path: str | None) -> str | None:
    """Map an HTTP method (and path parameter presence) to an operation name."""
    match method:
        case "GET" | "HEAD":
            return "get" if path else "list"
        case "POST":
            return "post"
        case "MOVE":
            return "move"
        case "DELETE":
            return "delete"
        case _:
            return None


class FileCrud:
    """A mountable list/read/upload/move/delete surface over one storage root.

    Build it from a ``FileCrudConfig`` or from keyword options and include
    ``router`` in an application under a prefix::

        files = FileCrud(path="/srv/uploads", delete=False)
        app.include_router(files.router, prefix="/api/files")

    Prefix path parameters (``/api/assets/{id}``) are visible to a callable
    storage root through ``request.path_params``.
    """

    def __init__(
        self,
        config: FileCrudConfig | None = None,
        *,
        filesystem: FileSystem | None = None,
        **options: Any,
    ) -> None:
        if config is None:
            try:
                config = FileCrudConfig(**options)
            except ValidationError as exc:
                raise ConfigurationError(f"Invalid file storage options: {exc}") from exc
        elif options:
            raise ConfigurationError("Pass either a FileCrudConfig or options, not both")

        self.config = config
        self.filesystem = filesystem or LocalFileSystem()
        self._gates = GateRunner(config.gates)
        self._files = FileService(self.filesystem)
        self._uploads = UploadService(self.filesystem, self._gates)
        self._handlers: dict[str, Callable[[FileRequestContext], Awaitable[Response]]] = {
            "list": self._list,
            "get": self._get,
            "post": self._uploads.upload,
            "move": self._move,
            "delete": self._delete,
        }

        self.router = APIRouter()
        for route_path in ("", "/{path:path}"):
            self.router.add_api_route(
                route_path,
                self.dispatch,
                methods=METHODS,
                response_model=None,
                include_in_schema=False,
            )

    async def dispatch(self, request: Request) -> Response:
        """Serve one request end to end."""
        path = request.path_params.get("path") or None
        operation = select_operation(request.method, path)
        if operation is None:
            return Response(status_code=405)

        try:
            if operation == "delete" and not path:
                raise FileValidationError("No file path specified")

            root = await resolve_root(self.config, request)
            ctx = FileRequestContext(
                request=request,
                settings=self.config.resolved(root),
                path=path,
            )
            handler = self._handlers[operation]
            return await self._gates.run(ctx, operation, lambda: handler(ctx))
        except AuthorizationDenied:
            return Response(status_code=403)
        except FileCrudError as exc:
            logger.warning(
                "File operation failed",
                operation=operation,
                path=path,
                status_code=exc.status_code,
                code=exc.code,
                message=exc.message,
            )
            return await self._render_error(request, exc)

    async def _render_error(self, request: Request, exc: FileCrudError) -> Response:
        response = self.config.error_handler(request, exc.status_code, exc.message)
        if inspect.isawaitable(response):
            response = await response
        return response

    # --- Operations ---

    async def _list(self, ctx: FileRequestContext) -> Response:
        entries = await self._files.list_files(ctx)
        return JSONResponse(
            [entry.model_dump(mode="json", by_alias=True) for entry in entries]
        )

    async def _get(self, ctx: FileRequestContext) -> Response:
        file_path, content = await self._files.read_file(ctx)
        media_type, _ = mimetypes.guess_type(file_path)
        return Response(content, media_type=media_type or "application/octet-stream")

    async def _move(self, ctx: FileRequestContext) -> Response:
        await self._files.move_file(ctx, ctx.request.headers.get("destination"))
        return Response(status_code=200)

    async def _delete(self, ctx: FileRequestContext) -> Response:
        await self._files.delete_file(ctx)
        return Response(status_code=200)
