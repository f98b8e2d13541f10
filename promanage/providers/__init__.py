"""Git hosting providers.

Each provider implements the same two operations with its own endpoints and
auth header:

- ``verify``: one authenticated "current user" request
- ``fetch_readme_first_line``: first line of a repository README
"""

from promanage.providers.base import (
    GitHostConfig,
    GitHostProvider,
    first_line,
    parse_owner_repo,
)
from promanage.providers.gitea import GiteaProvider
from promanage.providers.github import GitHubProvider
from promanage.providers.gitlab import GitLabProvider
from promanage.providers.registry import (
    PROVIDER_CLASSES,
    fetch_readme_first_line,
    get_provider,
    list_providers,
    verify_git_connection,
)

__all__ = [
    # Base classes
    "GitHostConfig",
    "GitHostProvider",
    "first_line",
    "parse_owner_repo",
    # Providers
    "GitHubProvider",
    "GitLabProvider",
    "GiteaProvider",
    # Registry
    "PROVIDER_CLASSES",
    "get_provider",
    "list_providers",
    "verify_git_connection",
    "fetch_readme_first_line",
]
