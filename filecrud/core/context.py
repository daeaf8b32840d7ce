"""Per-request state threaded through gates and handlers."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from starlette.requests import Request

from filecrud.schemas.file_schema import UploadedFile

if TYPE_CHECKING:
    from filecrud.core.crud_config import FileCrudConfig


@dataclass
class FileRequestContext:
    """Everything one request accumulates on its way through the pipeline.

    ``settings`` is the request-scoped copy of the mount configuration with
    a concrete storage root. ``state`` is free for gate steps to share data
    with later steps and post-processing.
    """

    request: Request
    settings: "FileCrudConfig"
    path: str | None = None
    files: list[UploadedFile] = field(default_factory=list)
    state: dict[str, Any] = field(default_factory=dict)

    @property
    def root(self) -> str:
        return self.settings.storage_root
