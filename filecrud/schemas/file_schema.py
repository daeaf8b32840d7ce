"""File listing and upload schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ListingEntry(BaseModel):
    """One directory entry as returned by a listing."""

    model_config = ConfigDict(frozen=True)

    name: str
    extension: str = Field(serialization_alias="ext")
    size_bytes: int = Field(serialization_alias="size")
    created_at: datetime = Field(serialization_alias="created")


class UploadedFile(BaseModel):
    """A file captured from a multi-part upload.

    ``storage_path`` is filled in once the file has been written.
    """

    original_name: str
    field_name: str
    content: bytes = Field(repr=False)
    size: int
    content_type: str | None = None
    storage_path: str | None = None
