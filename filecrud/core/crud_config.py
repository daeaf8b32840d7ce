"""Configuration of one mounted file CRUD endpoint."""

import os
from typing import Annotated, Any

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from filecrud.core.config import settings
from filecrud.core.exceptions import ConfigurationError
from filecrud.core.gates import (
    GATE_NAMES,
    Allow,
    Deny,
    Gate,
    GateRunner,
    parse_gate,
    parse_steps,
)
from filecrud.core.paths import normalize_root
from filecrud.core.settings import NamingPolicy

_POLICY_NAMES = {
    "uploadName": NamingPolicy.UPLOAD_NAME,
    "paramName": NamingPolicy.PARAM_NAME,
    "paramDirectory": NamingPolicy.PARAM_DIRECTORY,
}


def plain_error_handler(request: Request, status_code: int, message: str) -> Response:
    """Default error presentation: status code plus a plain-text message."""
    return PlainTextResponse(message, status_code=status_code)


def _parse_policy(value: Any) -> Any:
    return _POLICY_NAMES.get(value, value) if isinstance(value, str) else value


def _require_callable(value: Any) -> Any:
    if not callable(value):
        raise ConfigurationError(f"Error handler {value!r} is not callable")
    return value


GateField = Annotated[Any, BeforeValidator(parse_gate)]


class FileCrudConfig(BaseModel):
    """Immutable settings for one file CRUD endpoint.

    Legacy option names (``path``, ``field``, ``expect``, ``limit``,
    ``postPath`` ...) are accepted next to the canonical ones. Unset upload
    options fall back to the process-wide ``settings``.
    """

    model_config = ConfigDict(frozen=True)

    base_path: str = Field(
        default_factory=lambda: settings.storage.base_path,
        validation_alias=AliasChoices("base_path", "basePath"),
    )
    storage_root: Any = Field(
        validation_alias=AliasChoices("storage_root", "path", "storageRoot"),
    )
    field_name: str | None = Field(
        default_factory=lambda: settings.upload.field_name,
        validation_alias=AliasChoices("field_name", "field", "fieldName"),
    )
    expect_count: int = Field(
        default_factory=lambda: settings.upload.expect_count,
        ge=0,
        validation_alias=AliasChoices("expect_count", "expect", "expectCount"),
    )
    limit_count: int = Field(
        default_factory=lambda: settings.upload.limit_count,
        ge=0,
        validation_alias=AliasChoices("limit_count", "limit", "limitCount"),
    )
    naming_policy: Annotated[NamingPolicy, BeforeValidator(_parse_policy)] = Field(
        default_factory=lambda: settings.upload.naming_policy,
        validation_alias=AliasChoices(
            "naming_policy", "post_path", "postPath", "namingPolicy"
        ),
    )

    list_gate: GateField = Field(
        default=Allow(), validation_alias=AliasChoices("list_gate", "list")
    )
    get_gate: GateField = Field(
        default=Allow(), validation_alias=AliasChoices("get_gate", "get")
    )
    post_gate: GateField = Field(
        default=Allow(), validation_alias=AliasChoices("post_gate", "post")
    )
    move_gate: GateField = Field(
        default=Deny(), validation_alias=AliasChoices("move_gate", "move")
    )
    delete_gate: GateField = Field(
        default=Allow(), validation_alias=AliasChoices("delete_gate", "delete")
    )

    post_processing: Annotated[Any, BeforeValidator(parse_steps)] = Field(
        default=(),
        validation_alias=AliasChoices("post_processing", "postProcessing"),
    )
    error_handler: Annotated[Any, BeforeValidator(_require_callable)] = Field(
        default=plain_error_handler,
        validation_alias=AliasChoices("error_handler", "errorHandler"),
    )

    @field_validator("storage_root", mode="before")
    @classmethod
    def _normalize_storage_root(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, os.PathLike):
            value = os.fspath(value)
        if isinstance(value, str):
            if not value:
                raise ConfigurationError(
                    "Cannot use filecrud without specifying a storage path"
                )
            return normalize_root(info.data.get("base_path", ""), value)
        if callable(value):
            return value
        raise ConfigurationError(
            "Storage path must be a string, a path or a callable"
        )

    @model_validator(mode="after")
    def _check_gate_aliases(self) -> "FileCrudConfig":
        GateRunner(self.gates).validate()
        return self

    # --- Derived views ---

    @property
    def gates(self) -> dict[str, Gate]:
        """Gates keyed by operation name."""
        return {name: getattr(self, f"{name}_gate") for name in GATE_NAMES}

    @property
    def is_dynamic(self) -> bool:
        """Whether the storage root is computed per request."""
        return callable(self.storage_root)

    @property
    def effective_limit(self) -> int:
        """Upload limit in force; a single named target takes one file only."""
        if self.naming_policy is NamingPolicy.PARAM_NAME:
            return 1
        return self.limit_count

    @property
    def accepts_any_field(self) -> bool:
        """Whether uploads are captured from every multi-part field."""
        return not self.field_name

    def resolved(self, storage_root: str) -> "FileCrudConfig":
        """Request-scoped copy with a concrete storage root."""
        return self.model_copy(update={"storage_root": storage_root})
