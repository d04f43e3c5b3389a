"""
In-memory task store.

The single owner of canonical Task records for a session. Readers get
copies; writers go through replace_all, apply_local, remove and restore.
"""

import logging
from collections.abc import Callable, Iterable
from typing import Any

from taskboard.models.task import Task
from taskboard.services.normalizer import canonical_priority, is_completed

logger = logging.getLogger(__name__)

# Fields a local patch may touch
PATCHABLE_FIELDS = frozenset({
    "title", "description", "priority", "completed",
    "due_date", "created_at", "subtasks", "extra",
})

Subscriber = Callable[[tuple[Task, ...]], Any]


class TaskStore:
    """
    Insertion-ordered, de-duplicated collection of tasks.

    Every write swaps or edits the internal mapping without awaiting, so an
    asyncio reader never sees a half-applied change. Subscribers are told
    about every change with a fresh snapshot.
    """

    def __init__(self):
        self._tasks: dict[str, Task] = {}
        self._subscribers: list[Subscriber] = []
        self._version = 0

    @property
    def version(self) -> int:
        """Change counter, incremented on every write."""
        return self._version

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def ids(self) -> list[str]:
        return list(self._tasks)

    def get(self, task_id: str) -> Task | None:
        """Get a copy of one task, or None."""
        task = self._tasks.get(task_id)
        return task.copy() if task else None

    def snapshot(self) -> tuple[Task, ...]:
        """Immutable sequence of task copies, in store order."""
        return tuple(task.copy() for task in self._tasks.values())

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback invoked with the new snapshot after each change.

        Returns:
            A function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _changed(self) -> None:
        self._version += 1
        if not self._subscribers:
            return
        snapshot = self.snapshot()
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception as e:
                logger.error(f"Task store subscriber failed: {e}")

    def replace_all(self, tasks: Iterable[Task]) -> None:
        """
        Atomically replace the whole collection.

        The first occurrence of a duplicated id wins.
        """
        fresh: dict[str, Task] = {}
        for task in tasks:
            if task.id in fresh:
                logger.debug(f"Ignoring duplicate task id: {task.id}")
                continue
            fresh[task.id] = task.copy()

        self._tasks = fresh
        self._changed()

    def apply_local(self, task_id: str, patch: dict[str, Any]) -> Task | None:
        """
        Update fields of a single task.

        Args:
            task_id: Task identifier
            patch: Field name to new value (canonical field names)

        Returns:
            Copy of the task before the patch, or None if the id is unknown
            (in which case nothing happens)
        """
        unknown = set(patch) - PATCHABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot patch fields: {', '.join(sorted(unknown))}")

        current = self._tasks.get(task_id)
        if current is None:
            return None

        previous = current.copy()
        updated = current.copy()
        for name, value in patch.items():
            if name == "completed":
                value = is_completed(value)
            elif name == "priority":
                value = canonical_priority(value)
            setattr(updated, name, value)

        self._tasks[task_id] = updated
        self._changed()
        return previous

    def remove(self, task_id: str) -> tuple[int, Task] | None:
        """
        Delete a task.

        Returns:
            (position, task) it occupied, or None if it was not present
        """
        if task_id not in self._tasks:
            return None

        position = list(self._tasks).index(task_id)
        task = self._tasks[task_id]
        self._tasks = {k: v for k, v in self._tasks.items() if k != task_id}
        self._changed()
        return position, task.copy()

    def restore(self, task: Task, position: int | None = None) -> bool:
        """
        Put a previously removed task back at its old position.

        No-op if the id is present again (a reload already brought it back).

        Returns:
            True if the task was inserted
        """
        if task.id in self._tasks:
            return False

        items = list(self._tasks.items())
        if position is None or position > len(items):
            position = len(items)
        items.insert(max(position, 0), (task.id, task.copy()))
        self._tasks = dict(items)
        self._changed()
        return True

    def clear(self) -> None:
        """Drop every task (logout / session end)."""
        self._tasks = {}
        self._changed()
