"""Application configuration using Pydantic Settings V2."""

from functools import cached_property
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from filecrud.core.settings import (
    AppConfig,
    AuthConfig,
    NamingPolicy,
    ServerConfig,
    StorageConfig,
    UploadConfig,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Flat fields are loaded directly from environment variables.
    Domain properties provide grouped access (e.g. settings.upload.field_name).
    The storage and upload groups double as the defaults every mounted
    ``FileCrud`` falls back to.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = Field(
        default="filecrud",
        description="Application name",
    )
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    debug: bool = Field(
        default=True,
        description="Debug mode",
    )

    # Storage
    files_base_path: str = Field(
        default="",
        description="Prefix joined in front of relative storage roots",
    )
    files_root: str = Field(
        default="./data/files",
        description="Storage root served by the demo application",
    )
    files_mount_prefix: str = Field(
        default="/api/files",
        description="URL prefix the demo application mounts the file route on",
    )

    # Upload
    files_field: str = Field(
        default="file",
        description="Multi-part field holding uploads (empty accepts any field)",
    )
    files_expect: int = Field(
        default=0,
        ge=0,
        description="Minimum number of files per upload (0 = no minimum)",
    )
    files_limit: int = Field(
        default=0,
        ge=0,
        description="Maximum number of files per upload (0 = no maximum)",
    )
    files_naming_policy: NamingPolicy = Field(
        default=NamingPolicy.UPLOAD_NAME,
        description="How uploaded files are named: upload, param or dir",
    )

    # Server
    host: str = Field(
        default="0.0.0.0",
        description="Server host",
    )
    port: int = Field(
        default=8004,
        ge=1,
        le=65535,
        description="Server port",
    )
    rate_limit: str = Field(
        default="120/minute",
        description="Default per-client rate limit",
    )

    # JWT gate
    files_jwt_secret_key: SecretStr = Field(
        default=SecretStr(""),
        description="JWT secret guarding write operations (empty disables)",
    )
    files_jwt_algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm",
    )
    files_write_roles: str = Field(
        default="admin,user",
        description="Comma-separated roles allowed to upload, move and delete",
    )

    # --- Domain properties ---

    @cached_property
    def app(self) -> AppConfig:
        """Application environment configuration."""
        return AppConfig(
            name=self.app_name,
            env=self.app_env,
            debug=self.debug,
        )

    @cached_property
    def storage(self) -> StorageConfig:
        """Storage root configuration."""
        return StorageConfig(
            base_path=self.files_base_path,
            root=self.files_root,
            mount_prefix=self.files_mount_prefix,
        )

    @cached_property
    def upload(self) -> UploadConfig:
        """Upload defaults."""
        return UploadConfig(
            field_name=self.files_field,
            expect_count=self.files_expect,
            limit_count=self.files_limit,
            naming_policy=self.files_naming_policy,
        )

    @cached_property
    def server(self) -> ServerConfig:
        """Server configuration."""
        return ServerConfig(
            host=self.host,
            port=self.port,
            rate_limit=self.rate_limit,
        )

    @cached_property
    def auth(self) -> AuthConfig:
        """JWT gate configuration."""
        return AuthConfig(
            secret_key=self.files_jwt_secret_key,
            algorithm=self.files_jwt_algorithm,
            write_roles=self.files_write_roles,
        )

    # --- Convenience properties (delegate to domain configs) ---

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app.is_development


# Global settings instance
settings = Settings()
