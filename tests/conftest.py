"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import base64
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest
from fastapi.testclient import TestClient
from pydantic import SecretStr

from promanage.config import AppConfig
from promanage.models.git import GitCredentials, GitProvider
from promanage.models.project import ProjectRecord
from promanage.service import ProManage

README_TEXT = "ProManage Demo - tracks things\r\nSecond line\n\nMore text\n"

Reply = httpx.Response | Exception | Callable[[httpx.Request], httpx.Response]


class ProviderStub:
    """Answers provider requests from a URL table and records every request.

    Unknown URLs get a 404.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.replies: dict[str, Reply] = {}

    def on(self, url: str, reply: Reply) -> None:
        self.replies[url] = reply

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.replies.get(str(request.url), httpx.Response(404, json={"message": "Not Found"}))
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(request)
        return reply

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport)

    @property
    def urls(self) -> list[str]:
        return [str(r.url) for r in self.requests]


def gitea_contents(text: str) -> dict[str, Any]:
    """Gitea contents API payload for a file."""
    return {
        "name": "README.md",
        "path": "README.md",
        "type": "file",
        "encoding": "base64",
        "content": base64.b64encode(text.encode("utf-8")).decode("ascii"),
    }


@pytest.fixture
def stub() -> ProviderStub:
    return ProviderStub()


@pytest.fixture
def readme_text() -> str:
    return README_TEXT


@pytest.fixture
def gitea_payload():
    """Factory for Gitea contents API payloads."""
    return gitea_contents


@pytest.fixture
def github_token_creds() -> GitCredentials:
    return GitCredentials(provider=GitProvider.GITHUB, token=SecretStr("ghp_test"))


@pytest.fixture
def github_basic_creds() -> GitCredentials:
    return GitCredentials(
        provider=GitProvider.GITHUB,
        username="octocat",
        password=SecretStr("hunter2"),
        token=SecretStr("ghp_test"),
    )


@pytest.fixture
def gitea_creds() -> GitCredentials:
    return GitCredentials(
        provider=GitProvider.GITEA,
        base_url="https://git.example.com/",
        token=SecretStr("gitea_test"),
    )


@pytest.fixture
def gitlab_creds() -> GitCredentials:
    return GitCredentials(provider=GitProvider.GITLAB, token=SecretStr("glpat_test"))


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """A project folder with a desc.txt and all three media folders."""
    root = tmp_path / "project"
    (root / "photos").mkdir(parents=True)
    (root / "videos").mkdir()
    (root / "models").mkdir()

    (root / "desc.txt").write_text(
        "main: Garden statue restoration\n"
        "Phase one of three\n"
        "cat.png: A cat on the wall\n"
        "statue: The finished statue\n",
        encoding="utf-8",
    )
    (root / "photos" / "cat.png").write_bytes(b"png")
    (root / "photos" / "unknown.xyz").write_bytes(b"?")
    (root / "photos" / "nested").mkdir()
    (root / "videos" / "walkthrough.MP4").write_bytes(b"mp4")
    (root / "models" / "statue.OBJ").write_bytes(b"obj")
    return root


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    return AppConfig(data_dir=tmp_path / "data", secret=SecretStr("test-secret"))


@pytest.fixture
def app(app_config: AppConfig, stub: ProviderStub) -> ProManage:
    """ProManage instance with provider traffic routed to the stub."""
    return ProManage(app_config, transport=stub.transport)


@pytest.fixture
def project(project_root: Path) -> ProjectRecord:
    return ProjectRecord(
        id="p1",
        user_id="u1",
        name="Statue",
        description="Old description",
        storage_location=str(project_root),
    )


@pytest.fixture
def api_client(app: ProManage) -> TestClient:
    """Test client for the FastAPI app."""
    from promanage.api import create_app

    return TestClient(create_app(app=app))


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"X-User-Id": "u1"}


# Markers for test categories
def pytest_configure(config):
    config.addinivalue_line("markers", "mock: tests using mocked provider responses")
    config.addinivalue_line("markers", "integration: tests requiring real provider credentials")
    config.addinivalue_line("markers", "slow: tests that talk to remote hosts")
