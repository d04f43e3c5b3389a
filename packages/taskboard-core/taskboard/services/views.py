"""
Derived views over a task snapshot.

Statistics, filters and sort orders. Nothing here mutates its input or keeps
state; call again whenever the store changes.
"""

from collections.abc import Iterable, Sequence
from datetime import date, timedelta, timezone
from typing import Optional

from taskboard.models.stats import TaskStats
from taskboard.models.task import TASK_PRIORITIES, Task
from taskboard.services.normalizer import is_completed, is_pending

FILTER_OPTIONS = ("all", "today", "week", "high", "medium", "low")

FILTER_LABELS = {
    "all": "All Tasks",
    "today": "Today's Tasks",
    "week": "This Week",
    "high": "High Priority",
    "medium": "Medium Priority",
    "low": "Low Priority",
}

SORT_OPTIONS = ("newest", "oldest", "priority")

# How far ahead the "week" filter reaches, inclusive
WEEK_SPAN = timedelta(days=7)


def completion_percentage(completed: int, total: int) -> int:
    """Rounded percentage (halves round up); 0 when there is nothing."""
    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)


def _priority_key(task: Task) -> Optional[str]:
    if isinstance(task.priority, str):
        return task.priority.lower()
    return None


def compute_stats(tasks: Iterable[Task]) -> TaskStats:
    """
    Compute dashboard statistics.

    Args:
        tasks: Task snapshot

    Returns:
        TaskStats with totals, completion rate and priority breakdown
    """
    total = 0
    completed = 0
    by_priority = dict.fromkeys(TASK_PRIORITIES, 0)

    for task in tasks:
        total += 1
        if is_completed(task.completed):
            completed += 1
        priority = _priority_key(task)
        if priority in by_priority:
            by_priority[priority] += 1

    return TaskStats(
        total=total,
        completed=completed,
        pending=total - completed,
        completion_percentage=completion_percentage(completed, total),
        low=by_priority["low"],
        medium=by_priority["medium"],
        high=by_priority["high"],
    )


def due_day(task: Task) -> Optional[date]:
    """Calendar day of the due date, in local time for aware timestamps."""
    due = task.due_date
    if due is None:
        return None
    if due.tzinfo is not None:
        due = due.astimezone()
    return due.date()


def matches_filter(task: Task, filter_key: str, today: Optional[date] = None) -> bool:
    """
    Check a task against a filter key.

    Unknown keys behave like "all". Tasks without a due date never match
    "today" or "week".
    """
    key = filter_key.lower() if isinstance(filter_key, str) else "all"
    today = today or date.today()

    if key == "today":
        day = due_day(task)
        return day is not None and day == today

    if key == "week":
        day = due_day(task)
        return day is not None and today <= day <= today + WEEK_SPAN

    if key in TASK_PRIORITIES:
        return _priority_key(task) == key

    return True


def filter_tasks(
    tasks: Iterable[Task],
    filter_key: str = "all",
    today: Optional[date] = None,
) -> list[Task]:
    """Tasks matching a filter key, in input order."""
    today = today or date.today()
    return [t for t in tasks if matches_filter(t, filter_key, today)]


def _created_key(task: Task) -> float:
    # Missing dates rank below every real one
    created = task.created_at
    if created is None:
        return float("-inf")
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created.timestamp()


def sort_tasks(tasks: Iterable[Task], sort_key: str = "newest") -> list[Task]:
    """
    Sort tasks for display. The sort is stable.

    newest: created_at descending
    oldest: created_at ascending
    priority: high, medium, low, then unrecognized

    Unknown keys keep input order.
    """
    items = list(tasks)
    key = sort_key.lower() if isinstance(sort_key, str) else ""

    if key == "newest":
        return sorted(items, key=_created_key, reverse=True)
    if key == "oldest":
        return sorted(items, key=_created_key)
    if key == "priority":
        return sorted(items, key=lambda t: t.priority_weight, reverse=True)
    return items


def pending_tasks(tasks: Iterable[Task], sort_key: str = "newest") -> list[Task]:
    """Tasks not completed, sorted for the pending view."""
    return sort_tasks((t for t in tasks if is_pending(t.completed)), sort_key)


def subtask_progress(task: Task) -> float:
    """Percentage of completed subtasks; 0.0 when there are none."""
    if not task.subtasks:
        return 0.0
    done = sum(1 for st in task.subtasks if is_completed(st.completed))
    return done / len(task.subtasks) * 100


def recent_tasks(tasks: Sequence[Task], limit: int = 3) -> list[Task]:
    """The first few tasks, for the recent activity panel."""
    return list(tasks[:max(limit, 0)])


def due_label(task: Task, today: Optional[date] = None) -> str:
    """Short due date label: "Today", "Mar 05" or "-"."""
    day = due_day(task)
    if day is None:
        return "-"
    if day == (today or date.today()):
        return "Today"
    return day.strftime("%b %d")


def created_label(task: Task) -> str:
    if task.created_at is None:
        return "No date"
    return f"Created {task.created_at.strftime('%b %d')}"

