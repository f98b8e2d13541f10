"""Git provider credential models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, SecretStr


class GitProvider(str, Enum):
    """Supported Git hosting providers."""
    GITHUB = "github"
    GITLAB = "gitlab"
    GITEA = "gitea"


class GitCredentials(BaseModel):
    """Credentials for one provider, held only for the duration of a call.

    Password and token are secrets: they never show up in ``repr`` or dumps.
    Empty strings count as absent.
    """

    provider: GitProvider = GitProvider.GITHUB
    base_url: str | None = Field(default=None, description="Instance URL (gitea: required)")
    username: str | None = None
    password: SecretStr | None = None
    token: SecretStr | None = None

    @property
    def token_value(self) -> str:
        return self.token.get_secret_value() if self.token else ""

    @property
    def password_value(self) -> str:
        return self.password.get_secret_value() if self.password else ""

    @property
    def has_token(self) -> bool:
        return bool(self.token_value)

    @property
    def has_basic(self) -> bool:
        return bool(self.username) and bool(self.password_value)


class VerifyResult(BaseModel):
    """Outcome of a credential verification call."""

    ok: bool
    status: int | None = Field(default=None, description="HTTP status, 400/500 for local failures")
