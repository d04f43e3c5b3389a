"""
API client factory.

Creates the task API client based on configuration.
"""

import logging

from taskboard.api.interface import TaskAPIClient

logger = logging.getLogger(__name__)

# Global client instance (singleton pattern)
_client: TaskAPIClient | None = None


def get_client(config=None) -> TaskAPIClient:
    """
    Get or create the task API client based on configuration.

    Uses singleton pattern - returns same client instance on subsequent calls.

    Args:
        config: Optional TaskboardConfig. If not provided, loads from default location.

    Returns:
        TaskAPIClient instance

    Raises:
        ValueError: If the API configuration is invalid
    """
    global _client

    if _client is not None:
        return _client

    if config is None:
        from taskboard.config import load_config
        config = load_config()

    base_url = (config.api.base_url or "").strip()
    if not base_url.startswith(("http://", "https://")):
        raise ValueError(
            f"Invalid API base URL: {base_url!r}. "
            "Set api.base_url in config or TASKBOARD_API_URL env var."
        )

    from taskboard.api.http import HttpTaskClient

    _client = HttpTaskClient(
        base_url=base_url,
        tasks_path=config.api.tasks_path,
        timeout=config.api.timeout,
    )
    logger.info(f"Using HTTP task API: {base_url}")

    return _client


async def init_client(config=None) -> TaskAPIClient:
    """
    Initialize the API client and connect.

    Args:
        config: Optional TaskboardConfig

    Returns:
        Connected TaskAPIClient instance
    """
    client = get_client(config)
    await client.connect()
    return client


async def close_client() -> None:
    """Close the global client."""
    global _client

    if _client is not None:
        await _client.close()
        _client = None


def reset_client() -> None:
    """
    Reset the global client instance.

    Useful for testing or when configuration changes.
    """
    global _client
    _client = None
