"""JWT gate configuration."""

from pydantic import BaseModel, SecretStr


class AuthConfig(BaseModel, frozen=True):
    """Bearer token settings for the write gates of the demo app."""

    secret_key: SecretStr
    algorithm: str
    write_roles: str

    @property
    def enabled(self) -> bool:
        """Token checks are only wired in when a secret is configured."""
        return bool(self.secret_key.get_secret_value())

    @property
    def write_roles_list(self) -> list[str]:
        """Roles allowed to upload, move and delete."""
        return [role.strip() for role in self.write_roles.split(",") if role.strip()]
