"""
Task model for Taskboard.

The canonical in-memory shape of a task, independent of how the backend
happened to encode it.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, List

# Recognized priority values (canonical, lowercase)
TASK_PRIORITIES = ("low", "medium", "high")

# Sort weight per priority; anything else weighs 0
PRIORITY_WEIGHTS = {"high": 3, "medium": 2, "low": 1}

DEFAULT_TITLE = "Untitled"


@dataclass
class Subtask:
    """A checklist item inside a task. Only used for progress."""

    title: Optional[str] = None
    completed: bool = False

    def to_dict(self) -> dict:
        return {"title": self.title, "completed": self.completed}


@dataclass
class Task:
    """
    A canonical task record.

    Attributes:
        id: Opaque stable identifier (non-empty, unique within a store)
        title: Display title (never empty)
        description: Optional longer text
        priority: low, medium or high when recognized; other values kept as-is
        completed: Always a real boolean
        due_date: Optional due timestamp (compared by calendar day)
        created_at: Optional creation timestamp
        subtasks: Ordered checklist items
        extra: Any other fields the backend sent, preserved verbatim
    """

    id: str
    title: str = DEFAULT_TITLE
    description: Optional[str] = None
    priority: Optional[str] = None
    completed: bool = False
    due_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    subtasks: List[Subtask] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def priority_weight(self) -> int:
        """Sort weight of the priority (0 when unrecognized)."""
        if not isinstance(self.priority, str):
            return 0
        return PRIORITY_WEIGHTS.get(self.priority.lower(), 0)

    def copy(self) -> "Task":
        """Return an independent copy (subtasks and extra duplicated)."""
        return Task(
            id=self.id,
            title=self.title,
            description=self.description,
            priority=self.priority,
            completed=self.completed,
            due_date=self.due_date,
            created_at=self.created_at,
            subtasks=[Subtask(st.title, st.completed) for st in self.subtasks],
            extra=dict(self.extra),
        )

    def to_dict(self) -> dict:
        """
        Convert to the external dictionary shape.

        Both identifier spellings are emitted and always agree.
        """
        result = dict(self.extra)
        result.update({
            "_id": self.id,
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "completed": self.completed,
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "subtasks": [st.to_dict() for st in self.subtasks],
        })
        return result

    @classmethod
    def from_dict(cls, data: dict) -> Optional["Task"]:
        """
        Create a Task from a loosely-typed record.

        Returns None when the record carries no identifier.
        """
        from taskboard.services.normalizer import normalize_task

        return normalize_task(data)
