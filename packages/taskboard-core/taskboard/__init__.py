"""
Taskboard Core Library

Task list client: normalization, in-memory store, derived views and
optimistic mutations over a remote task API.
"""

__version__ = "0.1.0"

from taskboard.api import TaskAPIClient, get_client
from taskboard.config import TaskboardConfig, load_config
from taskboard.services import TaskBoard

__all__ = [
    "load_config",
    "TaskboardConfig",
    "get_client",
    "TaskAPIClient",
    "TaskBoard",
]
