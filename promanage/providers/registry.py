"""Provider registry and one-shot entry points.

Maps each :class:`GitProvider` to its implementation so callers never branch
on the provider themselves.
"""

from __future__ import annotations

import httpx

from promanage.models.git import GitCredentials, GitProvider, VerifyResult
from promanage.providers.base import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT, GitHostProvider
from promanage.providers.gitea import GiteaProvider
from promanage.providers.github import GitHubProvider
from promanage.providers.gitlab import GitLabProvider


PROVIDER_CLASSES: dict[GitProvider, type[GitHostProvider]] = {
    GitProvider.GITHUB: GitHubProvider,
    GitProvider.GITLAB: GitLabProvider,
    GitProvider.GITEA: GiteaProvider,
}


def list_providers() -> list[GitProvider]:
    """List all supported provider IDs."""
    return list(PROVIDER_CLASSES.keys())


def get_provider(
    credentials: GitCredentials,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = DEFAULT_USER_AGENT,
    gitlab_url: str | None = None,
) -> GitHostProvider:
    """Create the provider matching ``credentials.provider``."""
    provider_class = PROVIDER_CLASSES[credentials.provider]
    default_base_url = gitlab_url if credentials.provider == GitProvider.GITLAB else None
    return provider_class(
        credentials,
        client=client,
        timeout=timeout,
        user_agent=user_agent,
        default_base_url=default_base_url,
    )


async def verify_git_connection(
    credentials: GitCredentials,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = DEFAULT_USER_AGENT,
    gitlab_url: str | None = None,
) -> VerifyResult:
    """Verify credentials with a single request. Never raises for bad input or I/O."""
    async with get_provider(
        credentials, client=client, timeout=timeout, user_agent=user_agent, gitlab_url=gitlab_url
    ) as provider:
        return await provider.verify()


async def fetch_readme_first_line(
    credentials: GitCredentials,
    repo_url: str,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = DEFAULT_USER_AGENT,
    gitlab_url: str | None = None,
) -> str | None:
    """First line of the repository README, or None when it cannot be determined."""
    async with get_provider(
        credentials, client=client, timeout=timeout, user_agent=user_agent, gitlab_url=gitlab_url
    ) as provider:
        return await provider.fetch_readme_first_line(repo_url)
