"""GitHub provider.

API Documentation: https://docs.github.com/en/rest

Authentication: HTTP Basic when username and password are both given,
otherwise a Bearer token. The API host is fixed.
"""

from __future__ import annotations

from promanage.models.git import GitProvider
from promanage.providers.base import GitHostConfig, GitHostProvider


GITHUB_CONFIG = GitHostConfig(
    id=GitProvider.GITHUB,
    name="GitHub",
    default_base_url="https://api.github.com",
    fixed_base_url=True,
    token_header="Authorization",
    token_prefix="Bearer ",
    prefer_basic=True,
)

# Makes the readme endpoint return the file body instead of JSON metadata
RAW_MEDIA_TYPE = "application/vnd.github.v3.raw"


class GitHubProvider(GitHostProvider):
    """GitHub API provider implementation."""

    config = GITHUB_CONFIG

    async def fetch_readme(self, owner: str, repo: str) -> str | None:
        url = f"{self.api_root}/repos/{owner}/{repo}/readme"
        response = await self._get(url, headers={"Accept": RAW_MEDIA_TYPE})
        if not response.is_success:
            return None
        return response.text
