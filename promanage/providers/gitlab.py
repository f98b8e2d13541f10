"""GitLab provider.

API Documentation: https://docs.gitlab.com/ee/api/

Works against gitlab.com by default or any self-hosted instance.
Authentication prefers a personal access token in the ``PRIVATE-TOKEN``
header over HTTP Basic.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

from promanage.models.git import GitProvider
from promanage.providers.base import GitHostConfig, GitHostProvider

logger = logging.getLogger(__name__)


GITLAB_CONFIG = GitHostConfig(
    id=GitProvider.GITLAB,
    name="GitLab",
    default_base_url="https://gitlab.com",
    api_path="/api/v4",
    token_header="PRIVATE-TOKEN",
    token_prefix="",
)

# Tried in order, first success wins
README_REFS = ("main", "master")


class GitLabProvider(GitHostProvider):
    """GitLab API provider implementation."""

    config = GITLAB_CONFIG

    async def fetch_readme(self, owner: str, repo: str) -> str | None:
        project_id = quote(f"{owner}/{repo}", safe="")
        url = f"{self.api_root}/projects/{project_id}/repository/files/README.md/raw"
        for ref in README_REFS:
            response = await self._get(url, params={"ref": ref})
            if response.is_success:
                return response.text
            logger.debug("No README on %s/%s@%s (HTTP %d)", owner, repo, ref, response.status_code)
        return None
