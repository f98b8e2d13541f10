"""Gitea provider.

API Documentation: https://docs.gitea.com/api/

Self-hosted only, so a base URL is mandatory. Authentication prefers an
access token (``Authorization: token <t>``) over HTTP Basic.
"""

from __future__ import annotations

import base64

from promanage.models.git import GitProvider
from promanage.providers.base import GitHostConfig, GitHostProvider


GITEA_CONFIG = GitHostConfig(
    id=GitProvider.GITEA,
    name="Gitea",
    default_base_url=None,  # no public instance
    api_path="/api/v1",
    token_header="Authorization",
    token_prefix="token ",
)


class GiteaProvider(GitHostProvider):
    """Gitea API provider implementation."""

    config = GITEA_CONFIG

    async def fetch_readme(self, owner: str, repo: str) -> str | None:
        # Contents API returns JSON metadata with the file base64-encoded
        url = f"{self.api_root}/repos/{owner}/{repo}/contents/README.md"
        response = await self._get(url)
        if not response.is_success:
            return None
        data = response.json()
        encoded = data.get("content") or ""
        return base64.b64decode(encoded).decode("utf-8")
