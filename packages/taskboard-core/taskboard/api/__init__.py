"""
Remote task API access.
"""

from taskboard.api.factory import close_client, get_client, init_client
from taskboard.api.http import HttpTaskClient
from taskboard.api.interface import TaskAPIClient

__all__ = [
    "TaskAPIClient",
    "HttpTaskClient",
    "get_client",
    "init_client",
    "close_client",
]
