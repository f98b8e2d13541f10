"""Base Git hosting provider with shared auth and request handling.

Every provider supports the same two operations:
1. Verify credentials with one authenticated "current user" request
2. Fetch the first line of a repository README

Subclasses only describe their endpoints and how the README body is decoded.
"""

from __future__ import annotations

import base64
import logging
import re
from abc import ABC, abstractmethod
from typing import Any

import httpx
from pydantic import BaseModel, Field

from promanage.errors import MissingCredentials, TransportFailure
from promanage.models.git import GitCredentials, GitProvider, VerifyResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
DEFAULT_USER_AGENT = "ProManageApp"

# [scheme://][user@]host[:/]owner/repo[.git]
_REPO_URL_RE = re.compile(r"[^:@/]+[:/]([^/:]+)/([^/]+?)(?:\.git)?/?$")
_LINE_SPLIT_RE = re.compile(r"\r?\n")


def parse_owner_repo(repo_url: str) -> tuple[str, str] | None:
    """Extract ``(owner, repo)`` from an HTTPS or SCP-style remote URL."""
    match = _REPO_URL_RE.search(repo_url.strip())
    if not match:
        return None
    return match.group(1), match.group(2)


def first_line(text: str) -> str:
    """First line of a text, stripped of surrounding whitespace."""
    return _LINE_SPLIT_RE.split(text, maxsplit=1)[0].strip()


def basic_auth(username: str, password: str) -> str:
    encoded = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {encoded}"


class GitHostConfig(BaseModel):
    """Static description of a Git hosting provider."""
    id: GitProvider
    name: str
    default_base_url: str | None = Field(
        default=None, description="Used when credentials carry no base URL"
    )
    fixed_base_url: bool = Field(default=False, description="Ignore any base URL override")
    api_path: str = Field(default="", description="API root below the base URL")
    user_endpoint: str = "/user"
    token_header: str = "Authorization"
    token_prefix: str = ""  # e.g. "Bearer " or "token "
    prefer_basic: bool = False  # Basic auth wins when both are present


class GitHostProvider(ABC):
    """Abstract base class for Git hosting providers.

    A provider is bound to one set of credentials. The HTTP client is created
    lazily unless one is injected; injected clients are not closed here.
    """

    config: GitHostConfig

    def __init__(
        self,
        credentials: GitCredentials,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        default_base_url: str | None = None,
    ) -> None:
        if credentials.provider != self.config.id:
            raise ValueError(
                f"{self.config.name} provider cannot use {credentials.provider.value} credentials"
            )
        self.credentials = credentials
        self.timeout = timeout
        self.user_agent = user_agent
        self._default_base_url = default_base_url or self.config.default_base_url
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "GitHostProvider":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    @property
    def base_url(self) -> str:
        """Instance root without trailing slash.

        Raises:
            MissingCredentials: The provider needs a base URL and none is set.
        """
        if self.config.fixed_base_url:
            root = self.config.default_base_url or ""
        else:
            root = self.credentials.base_url or self._default_base_url or ""
        root = root.rstrip("/")
        if not root:
            raise MissingCredentials(f"{self.config.name} requires a base URL")
        return root

    @property
    def api_root(self) -> str:
        return f"{self.base_url}{self.config.api_path}"

    def get_auth_headers(self) -> dict[str, str]:
        """Build the authentication header for the current credentials.

        Raises:
            MissingCredentials: Neither a token nor username and password are set.
        """
        creds = self.credentials
        use_basic = creds.has_basic and (self.config.prefer_basic or not creds.has_token)
        if use_basic:
            return {"Authorization": basic_auth(creds.username or "", creds.password_value)}
        if creds.has_token:
            return {self.config.token_header: f"{self.config.token_prefix}{creds.token_value}"}
        raise MissingCredentials(
            f"{self.config.name} needs a token or a username and password"
        )

    def build_headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {"User-Agent": self.user_agent}
        headers.update(self.get_auth_headers())
        if extra:
            headers.update(extra)
        return headers

    async def _get(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Issue one authenticated GET.

        Raises:
            MissingCredentials: Before any I/O when credentials are incomplete
                or cannot be sent as an HTTP header.
            TransportFailure: The request did not produce an HTTP response.
        """
        try:
            request_headers = self.build_headers(headers)
            return await self.client.get(url, params=params, headers=request_headers)
        except UnicodeEncodeError as e:
            # Header values must be ASCII
            raise MissingCredentials(
                f"{self.config.name} credentials contain characters not allowed in a header"
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportFailure(f"{self.config.name} request to {url} failed: {e!r}") from e

    async def verify(self) -> VerifyResult:
        """Confirm the credentials with a lightweight current-user request."""
        try:
            url = f"{self.api_root}{self.config.user_endpoint}"
            response = await self._get(url)
        except MissingCredentials as e:
            logger.debug("Skipping %s verification: %s", self.config.id.value, e)
            return VerifyResult(ok=False, status=400)
        except TransportFailure as e:
            logger.warning("%s", e)
            return VerifyResult(ok=False, status=500)

        if not response.is_success:
            logger.info(
                "%s rejected credentials with HTTP %d", self.config.name, response.status_code
            )
        return VerifyResult(ok=response.is_success, status=response.status_code)

    async def fetch_readme_first_line(self, repo_url: str) -> str | None:
        """Fetch the README of ``repo_url`` and return its first line.

        Returns None for unparseable URLs, missing credentials, HTTP errors,
        undecodable content and transport failures.
        """
        parsed = parse_owner_repo(repo_url)
        if parsed is None:
            logger.debug("Not a repository URL: %s", repo_url)
            return None
        owner, repo = parsed

        try:
            text = await self.fetch_readme(owner, repo)
        except MissingCredentials as e:
            logger.debug("Skipping %s README fetch: %s", self.config.id.value, e)
            return None
        except TransportFailure as e:
            logger.warning("%s", e)
            return None
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Could not decode %s README for %s/%s: %s", self.config.name, owner, repo, e)
            return None

        if text is None:
            return None
        return first_line(text)

    @abstractmethod
    async def fetch_readme(self, owner: str, repo: str) -> str | None:
        """Fetch the full README text, or None on a non-success response."""
        ...
