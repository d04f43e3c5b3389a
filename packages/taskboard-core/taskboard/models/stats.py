"""
Aggregate statistics over a task snapshot.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class TaskStats:
    """
    Derived counts for a task collection.

    Never stored; recomputed from the current snapshot.
    """

    total: int = 0
    completed: int = 0
    pending: int = 0
    completion_percentage: int = 0
    low: int = 0
    medium: int = 0
    high: int = 0

    def to_dict(self) -> dict:
        """Convert to the dashboard's key names."""
        return {
            "total": self.total,
            "completed": self.completed,
            "pending": self.pending,
            "completionPercentage": self.completion_percentage,
            "lowPriority": self.low,
            "mediumPriority": self.medium,
            "highPriority": self.high,
        }
