"""File upload configuration."""

from enum import StrEnum

from pydantic import BaseModel


class NamingPolicy(StrEnum):
    """How an uploaded file's destination path is computed."""

    UPLOAD_NAME = "upload"
    PARAM_NAME = "param"
    PARAM_DIRECTORY = "dir"


class UploadConfig(BaseModel, frozen=True):
    """Upload defaults shared by every mounted endpoint."""

    field_name: str
    expect_count: int
    limit_count: int
    naming_policy: NamingPolicy
