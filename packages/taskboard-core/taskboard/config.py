"""
Taskboard Configuration

Loads settings from ~/.taskboard/config.yaml with environment variable overrides.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional
import os
import logging

import yaml

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".taskboard"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

DEFAULT_TOKEN_ENV = "TASKBOARD_TOKEN"


@dataclass
class ApiConfig:
    """Remote task API settings."""

    base_url: str = "http://localhost:4000"
    tasks_path: str = "/api/tasks"
    timeout: float = 30.0


@dataclass
class AuthConfig:
    """Credential settings."""

    token: Optional[str] = None
    token_env: str = DEFAULT_TOKEN_ENV


@dataclass
class ViewConfig:
    """Initial view state for a board."""

    default_filter: str = "all"
    default_sort: str = "newest"
    recent_limit: int = 3


@dataclass
class TaskboardConfig:
    """
    Complete Taskboard configuration.

    Loaded from ~/.taskboard/config.yaml with environment variable overrides.
    """

    api: ApiConfig = field(default_factory=ApiConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    views: ViewConfig = field(default_factory=ViewConfig)

    @property
    def token(self) -> Optional[str]:
        return self.auth.token

    def to_dict(self) -> dict:
        """Convert to dictionary for display (masks secrets)."""
        result = asdict(self)

        token = result.get("auth", {}).get("token")
        if token:
            result["auth"]["token"] = token[:4] + "..." if len(token) > 12 else "***"

        return result


def _parse_api_config(data: dict) -> ApiConfig:
    """Parse API configuration from YAML data."""
    api_data = data.get("api", {}) or {}
    defaults = ApiConfig()

    return ApiConfig(
        base_url=api_data.get("base_url", defaults.base_url),
        tasks_path=api_data.get("tasks_path", defaults.tasks_path),
        timeout=float(api_data.get("timeout", defaults.timeout)),
    )


def _parse_auth_config(data: dict) -> AuthConfig:
    """Parse auth configuration from YAML data."""
    auth_data = data.get("auth", {}) or {}

    return AuthConfig(
        token=auth_data.get("token"),
        token_env=auth_data.get("token_env", DEFAULT_TOKEN_ENV),
    )


def _parse_view_config(data: dict) -> ViewConfig:
    """Parse view defaults from YAML data."""
    view_data = data.get("views", {}) or {}
    defaults = ViewConfig()

    return ViewConfig(
        default_filter=view_data.get("default_filter", defaults.default_filter),
        default_sort=view_data.get("default_sort", defaults.default_sort),
        recent_limit=int(view_data.get("recent_limit", defaults.recent_limit)),
    )


def load_config(config_path: Optional[Path] = None) -> TaskboardConfig:
    """
    Load configuration from file with environment variable overrides.

    Args:
        config_path: Optional path to config file. Defaults to ~/.taskboard/config.yaml

    Returns:
        TaskboardConfig instance
    """
    config_file = config_path or CONFIG_FILE
    config = TaskboardConfig()

    if config_file.exists():
        try:
            with open(config_file, 'r') as f:
                data = yaml.safe_load(f) or {}

            config.api = _parse_api_config(data)
            config.auth = _parse_auth_config(data)
            config.views = _parse_view_config(data)

        except yaml.YAMLError as e:
            logger.warning(f"Could not parse config file at {config_file}: {e}")
        except (OSError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Unexpected error loading config from {config_file}: {e}")

    # Environment variable overrides
    if os.environ.get("TASKBOARD_API_URL"):
        config.api.base_url = os.environ["TASKBOARD_API_URL"]

    if os.environ.get("TASKBOARD_TIMEOUT"):
        try:
            config.api.timeout = float(os.environ["TASKBOARD_TIMEOUT"])
        except ValueError:
            logger.warning(f"Ignoring invalid TASKBOARD_TIMEOUT: {os.environ['TASKBOARD_TIMEOUT']}")

    token_env = config.auth.token_env or DEFAULT_TOKEN_ENV
    if os.environ.get(token_env):
        config.auth.token = os.environ[token_env]

    return config


def save_config(config: TaskboardConfig, config_path: Optional[Path] = None) -> None:
    """
    Save configuration to file.

    The token is only written when it did not come from the environment.

    Args:
        config: TaskboardConfig instance to save
        config_path: Optional path to config file. Defaults to ~/.taskboard/config.yaml
    """
    config_file = config_path or CONFIG_FILE

    config_file.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "api": {
            "base_url": config.api.base_url,
            "tasks_path": config.api.tasks_path,
            "timeout": config.api.timeout,
        },
        "auth": {},
        "views": {
            "default_filter": config.views.default_filter,
            "default_sort": config.views.default_sort,
            "recent_limit": config.views.recent_limit,
        },
    }

    if config.auth.token_env != DEFAULT_TOKEN_ENV:
        data["auth"]["token_env"] = config.auth.token_env
    if config.auth.token and config.auth.token != os.environ.get(config.auth.token_env):
        data["auth"]["token"] = config.auth.token

    with open(config_file, 'w') as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    # Secure permissions (readable only by owner)
    config_file.chmod(0o600)

    logger.info(f"Configuration saved to {config_file}")


# Cached config instance
_config: Optional[TaskboardConfig] = None


def get_config() -> TaskboardConfig:
    """Get cached config instance, loading if needed."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> TaskboardConfig:
    """Force reload config from file."""
    global _config
    _config = load_config()
    return _config
