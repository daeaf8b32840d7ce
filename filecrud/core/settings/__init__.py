"""Domain-specific configuration models."""

from filecrud.core.settings.app_config import AppConfig
from filecrud.core.settings.auth_config import AuthConfig
from filecrud.core.settings.server_config import ServerConfig
from filecrud.core.settings.storage_config import StorageConfig
from filecrud.core.settings.upload_config import NamingPolicy, UploadConfig

__all__ = [
    "AppConfig",
    "AuthConfig",
    "NamingPolicy",
    "ServerConfig",
    "StorageConfig",
    "UploadConfig",
]
