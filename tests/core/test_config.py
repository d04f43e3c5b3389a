"""
Tests for taskboard configuration.
"""

import pytest
from pathlib import Path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("TASKBOARD_API_URL", "TASKBOARD_TOKEN", "TASKBOARD_TIMEOUT", "MY_TOKEN"):
        monkeypatch.delenv(name, raising=False)


def test_default_config():
    """Test default configuration values."""
    from taskboard.config import TaskboardConfig

    config = TaskboardConfig()

    assert config.api.base_url == "http://localhost:4000"
    assert config.api.tasks_path == "/api/tasks"
    assert config.auth.token is None
    assert config.views.default_filter == "all"
    assert config.views.default_sort == "newest"
    assert config.views.recent_limit == 3


def test_load_config_without_file():
    """Test loading config when no file exists."""
    from taskboard.config import load_config

    config = load_config(Path("/nonexistent/config.yaml"))

    assert config.api.base_url == "http://localhost:4000"
    assert config.token is None


def test_load_config_from_file(temp_config_dir):
    """Test loading values from YAML."""
    from taskboard.config import load_config

    config_file = temp_config_dir / "config.yaml"
    config_file.write_text(
        "api:\n"
        "  base_url: https://tasks.example.com\n"
        "  timeout: 5\n"
        "auth:\n"
        "  token: file-token\n"
        "views:\n"
        "  default_filter: week\n"
        "  default_sort: priority\n"
    )

    config = load_config(config_file)

    assert config.api.base_url == "https://tasks.example.com"
    assert config.api.timeout == 5.0
    assert config.api.tasks_path == "/api/tasks"
    assert config.token == "file-token"
    assert config.views.default_filter == "week"
    assert config.views.default_sort == "priority"
    assert config.views.recent_limit == 3


def test_load_config_with_env_override(monkeypatch):
    """Test environment variable overrides."""
    from taskboard.config import load_config

    monkeypatch.setenv("TASKBOARD_API_URL", "https://api.test")
    monkeypatch.setenv("TASKBOARD_TOKEN", "env-token")
    monkeypatch.setenv("TASKBOARD_TIMEOUT", "12.5")

    config = load_config(Path("/nonexistent/config.yaml"))

    assert config.api.base_url == "https://api.test"
    assert config.token == "env-token"
    assert config.api.timeout == 12.5


def test_custom_token_env(monkeypatch, temp_config_dir):
    """Test reading the token from a configured variable."""
    from taskboard.config import load_config

    config_file = temp_config_dir / "config.yaml"
    config_file.write_text("auth:\n  token_env: MY_TOKEN\n")
    monkeypatch.setenv("MY_TOKEN", "custom")

    config = load_config(config_file)

    assert config.token == "custom"


def test_invalid_timeout_env_ignored(monkeypatch):
    """Test that a bad timeout keeps the default."""
    from taskboard.config import load_config

    monkeypatch.setenv("TASKBOARD_TIMEOUT", "soon")

    config = load_config(Path("/nonexistent/config.yaml"))

    assert config.api.timeout == 30.0


def test_broken_yaml_falls_back_to_defaults(temp_config_dir):
    """Test that an unparseable file does not raise."""
    from taskboard.config import load_config

    config_file = temp_config_dir / "config.yaml"
    config_file.write_text("api: [unclosed\n")

    config = load_config(config_file)

    assert config.api.base_url == "http://localhost:4000"


def test_config_to_dict_masks_secrets():
    """Test that to_dict masks sensitive values."""
    from taskboard.config import AuthConfig, TaskboardConfig

    config = TaskboardConfig(auth=AuthConfig(token="supersecrettoken123"))

    result = config.to_dict()

    assert "supersecrettoken123" not in str(result)
    assert result["auth"]["token"] == "supe..."

    short = TaskboardConfig(auth=AuthConfig(token="abc")).to_dict()
    assert short["auth"]["token"] == "***"


def test_save_and_load_config(temp_config_dir):
    """Test saving and loading config."""
    from taskboard.config import (
        ApiConfig,
        AuthConfig,
        TaskboardConfig,
        ViewConfig,
        load_config,
        save_config,
    )

    config_file = temp_config_dir / "config.yaml"

    config = TaskboardConfig(
        api=ApiConfig(base_url="https://tasks.example.com", timeout=10.0),
        auth=AuthConfig(token="saved-token"),
        views=ViewConfig(default_sort="oldest", recent_limit=5),
    )

    save_config(config, config_file)

    assert config_file.exists()
    assert config_file.stat().st_mode & 0o777 == 0o600

    loaded = load_config(config_file)

    assert loaded.api.base_url == "https://tasks.example.com"
    assert loaded.api.timeout == 10.0
    assert loaded.token == "saved-token"
    assert loaded.views.default_sort == "oldest"
    assert loaded.views.recent_limit == 5


def test_save_skips_token_from_env(monkeypatch, temp_config_dir):
    """Test that an environment token is never written to disk."""
    from taskboard.config import load_config, save_config

    monkeypatch.setenv("TASKBOARD_TOKEN", "env-only")
    config_file = temp_config_dir / "config.yaml"

    save_config(load_config(config_file), config_file)

    assert "env-only" not in config_file.read_text()


def test_get_client_rejects_bad_url():
    """Test API URL validation in the client factory."""
    from taskboard.api.factory import get_client, reset_client
    from taskboard.config import ApiConfig, TaskboardConfig

    reset_client()
    try:
        with pytest.raises(ValueError) as exc:
            get_client(TaskboardConfig(api=ApiConfig(base_url="localhost:4000")))
        assert "Invalid API base URL" in str(exc.value)
    finally:
        reset_client()


def test_get_client_is_singleton():
    """Test that the factory returns one shared client."""
    from taskboard.api.factory import get_client, reset_client
    from taskboard.api.http import HttpTaskClient
    from taskboard.config import ApiConfig, TaskboardConfig

    reset_client()
    try:
        config = TaskboardConfig(api=ApiConfig(base_url="https://tasks.example.com"))
        client = get_client(config)

        assert isinstance(client, HttpTaskClient)
        assert client.base_url == "https://tasks.example.com"
        assert get_client() is client
    finally:
        reset_client()
