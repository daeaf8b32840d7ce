"""Storage root configuration."""

from pydantic import BaseModel


class StorageConfig(BaseModel, frozen=True):
    """Where files live and where the CRUD route is mounted."""

    base_path: str
    root: str
    mount_prefix: str

    @property
    def normalized_prefix(self) -> str:
        """Mount prefix with a single leading slash and no trailing slash."""
        prefix = "/" + self.mount_prefix.strip("/")
        return "" if prefix == "/" else prefix
