"""
Business logic services for Taskboard.
"""

from taskboard.services.board import TaskBoard
from taskboard.services.mutations import MutationCoordinator
from taskboard.services.store import TaskStore

__all__ = [
    "TaskBoard",
    "TaskStore",
    "MutationCoordinator",
]
