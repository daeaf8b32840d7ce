"""Multi-file upload orchestration."""

import os

import structlog
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from filecrud.core.context import FileRequestContext
from filecrud.core.exceptions import StorageIOError, UploadError
from filecrud.core.filesystem import FileSystem
from filecrud.core.gates import GateRunner
from filecrud.core.paths import resolve_relative
from filecrud.core.settings import NamingPolicy
from filecrud.schemas.file_schema import UploadedFile

logger = structlog.get_logger()


async def collect_uploads(request: Request, field_name: str | None) -> list[UploadedFile]:
    """Read every uploaded file from the multi-part body into memory.

    With ``field_name`` set only that field is captured, otherwise every file
    part is.
    """
    uploads: list[UploadedFile] = []
    try:
        async with request.form() as form:
            for key, value in form.multi_items():
                if not isinstance(value, UploadFile):
                    continue
                if field_name and key != field_name:
                    continue
                content = await value.read()
                uploads.append(
                    UploadedFile(
                        original_name=value.filename or "",
                        field_name=key,
                        content=content,
                        size=len(content),
                        content_type=value.content_type,
                    )
                )
    except HTTPException as exc:
        raise UploadError(f"Malformed upload - {exc.detail}") from exc
    except MultiPartException as exc:
        raise UploadError(f"Malformed upload - {exc.message}") from exc
    return uploads


def check_cardinality(count: int, expect_count: int, limit_count: int) -> None:
    """Validate the size of a whole upload batch."""
    if count == 0:
        raise UploadError("No files uploaded")
    if expect_count and count < expect_count:
        raise UploadError("Less than expected files uploaded")
    if limit_count and count > limit_count:
        raise UploadError("More than file limit uploaded")


class UploadService:
    """Store an upload batch under the request's storage root.

    The batch is validated as a whole (cardinality and destinations) before
    the first write. Files are then written one after another; a failed write
    fails the request but files already written are left in place.
    """

    def __init__(self, filesystem: FileSystem, gate_runner: GateRunner) -> None:
        self._fs = filesystem
        self._gates = gate_runner

    def destination_for(self, ctx: FileRequestContext, upload: UploadedFile) -> str:
        """Absolute, escape-checked destination of one uploaded file."""
        match ctx.settings.naming_policy:
            case NamingPolicy.PARAM_NAME:
                segment = ctx.path or ""
            case NamingPolicy.PARAM_DIRECTORY:
                segment = os.path.join(ctx.path or "", upload.original_name)
            case _:
                segment = upload.original_name

        destination = resolve_relative(ctx.root, segment)
        if destination == ctx.root:
            raise UploadError("Cannot determine a file name for upload")
        return destination

    async def upload(self, ctx: FileRequestContext) -> Response:
        settings = ctx.settings
        if settings.naming_policy is not NamingPolicy.UPLOAD_NAME and not ctx.path:
            raise UploadError("No filename given in path")

        field_name = None if settings.accepts_any_field else settings.field_name
        ctx.files = await collect_uploads(ctx.request, field_name)
        check_cardinality(
            len(ctx.files), settings.expect_count, settings.effective_limit
        )
        destinations = [self.destination_for(ctx, upload) for upload in ctx.files]

        try:
            await self._fs.makedirs(ctx.root)
        except OSError as exc:
            raise StorageIOError(f"Cannot create storage directory - {exc}") from exc

        await self._write_all(ctx, destinations)
        logger.info(
            "Upload stored",
            root=ctx.root,
            count=len(ctx.files),
            naming_policy=str(settings.naming_policy),
        )
        return await self._post_process(ctx)

    async def _write_all(self, ctx: FileRequestContext, destinations: list[str]) -> None:
        make_dirs = ctx.settings.naming_policy is NamingPolicy.PARAM_DIRECTORY
        for index, (upload, destination) in enumerate(zip(ctx.files, destinations)):
            try:
                if make_dirs:
                    await self._fs.makedirs(os.path.dirname(destination))
                await self._fs.write_bytes(destination, upload.content)
            except OSError as exc:
                logger.warning(
                    "Upload write failed",
                    destination=destination,
                    written=index,
                    total=len(destinations),
                    error=str(exc),
                )
                raise StorageIOError(
                    f"Failed to store {upload.original_name} - {exc}"
                ) from exc
            upload.storage_path = destination

    async def _post_process(self, ctx: FileRequestContext) -> Response:
        async def stored() -> Response:
            return JSONResponse({})

        steps = ctx.settings.post_processing
        if not steps:
            return await stored()
        response = await self._gates.run_chain(ctx, steps, stored)
        return response if response is not None else await stored()
