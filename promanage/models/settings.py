"""Per-user connection settings."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from promanage.models.git import GitProvider
from promanage.models.project import ConnectionType, StoreModel


class GitConnection(StoreModel):
    """A linked Git provider account. Secrets are stored encrypted only."""

    base_url: str | None = None
    username: str | None = None
    password_enc: str | None = None
    token_enc: str | None = None
    connected: bool = False

    @property
    def has_credentials(self) -> bool:
        return bool(self.token_enc) or (bool(self.username) and bool(self.password_enc))


class UserSettings(StoreModel):
    """Connection settings for one user."""

    default_connection_type: ConnectionType | None = None
    connection_username: str | None = None
    connection_password_enc: str | None = None
    git: dict[GitProvider, GitConnection] = Field(default_factory=dict)

    def connection(self, provider: GitProvider) -> GitConnection:
        """Get the connection for a provider, creating an empty one."""
        return self.git.setdefault(provider, GitConnection())

    def public_view(self) -> dict[str, Any]:
        """Settings as JSON without any encrypted field."""
        data = self.model_dump(mode="json", by_alias=True, exclude={"connection_password_enc"})
        for conn in data.get("git", {}).values():
            conn.pop("passwordEnc", None)
            conn.pop("tokenEnc", None)
        return data
