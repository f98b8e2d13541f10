"""Application configuration."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, SecretStr

ENV_PREFIX = "PROMANAGE_"


class AppConfig(BaseModel):
    """Runtime configuration for the backend."""

    data_dir: Path = Field(default=Path("./data"), description="Directory holding store.json")
    secret: SecretStr = Field(
        default=SecretStr("dev-secret-change-me"),
        description="Secret the credential encryption key is derived from",
    )
    http_timeout: float = Field(default=10.0, description="Timeout for provider requests (seconds)")
    user_agent: str = Field(default="ProManageApp")
    gitlab_url: str = Field(default="https://gitlab.com", description="Default GitLab instance")
    api_prefix: str = Field(default="/api")

    @property
    def store_path(self) -> Path:
        return self.data_dir / "store.json"

    @classmethod
    def from_yaml(cls, path: Path) -> "AppConfig":
        """Load configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls.model_validate(data)


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for name in AppConfig.model_fields:
        value = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
        if value:
            overrides[name] = value
    return overrides


def load_config(path: Path | None = None) -> AppConfig:
    """Build the configuration: defaults, then the YAML file, then environment.

    Environment variables are named ``PROMANAGE_<FIELD>``, e.g.
    ``PROMANAGE_DATA_DIR`` or ``PROMANAGE_HTTP_TIMEOUT``.
    """
    data: dict[str, Any] = {}
    if path is not None and path.exists():
        data = AppConfig.from_yaml(path).model_dump()
    data.update(_env_overrides())
    return AppConfig.model_validate(data)
