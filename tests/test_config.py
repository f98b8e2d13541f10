"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

from promanage.config import AppConfig, load_config


class TestConfig:
    """Tests for defaults, YAML files and environment overrides."""

    def test_defaults(self, monkeypatch):
        for name in AppConfig.model_fields:
            monkeypatch.delenv(f"PROMANAGE_{name.upper()}", raising=False)

        config = load_config()

        assert config.data_dir == Path("./data")
        assert config.store_path == Path("./data") / "store.json"
        assert config.gitlab_url == "https://gitlab.com"
        assert config.user_agent == "ProManageApp"

    def test_yaml(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PROMANAGE_HTTP_TIMEOUT", raising=False)
        monkeypatch.delenv("PROMANAGE_GITLAB_URL", raising=False)
        path = tmp_path / "promanage.yaml"
        path.write_text("gitlab_url: https://lab.internal\nhttp_timeout: 3.5\n")

        config = load_config(path)

        assert config.gitlab_url == "https://lab.internal"
        assert config.http_timeout == 3.5

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "promanage.yaml"
        path.write_text("data_dir: /from/yaml\n")
        monkeypatch.setenv("PROMANAGE_DATA_DIR", str(tmp_path / "env"))
        monkeypatch.setenv("PROMANAGE_SECRET", "from-env")

        config = load_config(path)

        assert config.data_dir == tmp_path / "env"
        assert config.secret.get_secret_value() == "from-env"

    def test_missing_file_ignored(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PROMANAGE_API_PREFIX", raising=False)

        config = load_config(tmp_path / "absent.yaml")

        assert config.api_prefix == "/api"

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert AppConfig.from_yaml(path).http_timeout == 10.0

    def test_secret_hidden(self):
        config = AppConfig(secret="hunter2")

        assert "hunter2" not in repr(config)
