"""
Core data models for Taskboard.
"""

from taskboard.models.mutation import MutationKind, MutationOutcome, MutationState, ReloadOutcome
from taskboard.models.stats import TaskStats
from taskboard.models.task import Subtask, Task

__all__ = [
    "Task",
    "Subtask",
    "TaskStats",
    "MutationKind",
    "MutationState",
    "MutationOutcome",
    "ReloadOutcome",
]
