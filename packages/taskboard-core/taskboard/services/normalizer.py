"""
Canonical task normalizer.

Turns whatever the backend sent into canonical Task records. Every function
here is pure and tolerant: bad input yields defaults, never exceptions.
"""

import logging
from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any, Optional

from taskboard.models.task import DEFAULT_TITLE, TASK_PRIORITIES, Subtask, Task

logger = logging.getLogger(__name__)

# Keys that hold the response list when the payload is wrapped
PAYLOAD_LIST_KEYS = ("tasks", "data")

# Source keys consumed into canonical fields (everything else goes to extra)
_CONSUMED_KEYS = frozenset({
    "_id", "id", "title", "description", "priority", "completed",
    "dueDate", "due_date", "createdAt", "created_at", "subtasks",
})


def is_completed(value: Any) -> bool:
    """
    The completion predicate.

    True for the boolean True, the number 1, or the string "yes" in any case.
    Everything else, including None and unrecognized strings, is False.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.lower() == "yes"
    return False


def is_pending(value: Any) -> bool:
    """A task is pending whenever it is not completed (None included)."""
    return not is_completed(value)


def extract_records(payload: Any) -> list:
    """
    Find the task list inside a response payload.

    Accepts a bare list, or a mapping holding the list under "tasks" or
    "data". Any other shape yields an empty list.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping):
        for key in PAYLOAD_LIST_KEYS:
            if isinstance(payload.get(key), list):
                return payload[key]
    logger.debug(f"Unrecognized task payload shape: {type(payload).__name__}")
    return []


def resolve_id(record: Mapping) -> Optional[str]:
    """Resolve the identifier, preferring "_id" over "id"."""
    for key in ("_id", "id"):
        value = record.get(key)
        if value is None or isinstance(value, bool):
            continue
        value = str(value)
        if value:
            return value
    return None


def canonical_priority(value: Any) -> Optional[str]:
    """Lowercase recognized priorities; keep anything else as given."""
    if value is None:
        return None
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TASK_PRIORITIES:
            return lowered
        return value
    return str(value)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a timestamp from the forms the backend is known to send.

    Supports datetime, date, ISO-8601 strings and epoch milliseconds.
    Returns None for anything unparseable.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def _first(record: Mapping, *keys: str) -> Any:
    for key in keys:
        if record.get(key) is not None:
            return record[key]
    return None


def _title(value: Any) -> str:
    if value is None:
        return DEFAULT_TITLE
    text = value if isinstance(value, str) else str(value)
    return text if text.strip() else DEFAULT_TITLE


def _subtasks(value: Any) -> list[Subtask]:
    if not isinstance(value, list):
        return []
    result = []
    for item in value:
        if isinstance(item, Subtask):
            result.append(Subtask(item.title, item.completed))
        elif isinstance(item, Mapping):
            title = item.get("title")
            result.append(Subtask(
                title=str(title) if title is not None else None,
                completed=is_completed(item.get("completed")),
            ))
    return result


def normalize_task(record: Any) -> Optional[Task]:
    """
    Normalize one record into a canonical Task.

    Returns None when the record has no usable identifier.
    """
    if isinstance(record, Task):
        return record.copy()
    if not isinstance(record, Mapping):
        return None

    task_id = resolve_id(record)
    if task_id is None:
        return None

    description = record.get("description")
    if description is not None and not isinstance(description, str):
        description = str(description)

    return Task(
        id=task_id,
        title=_title(record.get("title")),
        description=description,
        priority=canonical_priority(record.get("priority")),
        completed=is_completed(record.get("completed")),
        due_date=parse_timestamp(_first(record, "dueDate", "due_date")),
        created_at=parse_timestamp(_first(record, "createdAt", "created_at")),
        subtasks=_subtasks(record.get("subtasks")),
        extra={k: v for k, v in record.items() if k not in _CONSUMED_KEYS},
    )


def normalize_tasks(payload: Any) -> list[Task]:
    """
    Normalize a whole response payload.

    Records without an identifier are dropped.
    """
    tasks = []
    dropped = 0
    for record in extract_records(payload):
        task = normalize_task(record)
        if task is None:
            dropped += 1
            continue
        tasks.append(task)

    if dropped:
        logger.debug(f"Dropped {dropped} task record(s) without an identifier")
    return tasks


def update_payload(edited: Any) -> dict:
    """
    Build the canonical update payload for an edited task.

    Always sends title, description, priority, dueDate and completed, with
    completed reduced to a real boolean.
    """
    if isinstance(edited, Task):
        return {
            "title": edited.title,
            "description": edited.description,
            "priority": edited.priority,
            "dueDate": edited.due_date.isoformat() if edited.due_date else None,
            "completed": edited.completed,
        }

    due = _first(edited, "dueDate", "due_date")
    if isinstance(due, (datetime, date)):
        due = due.isoformat()

    return {
        "title": edited.get("title"),
        "description": edited.get("description"),
        "priority": canonical_priority(edited.get("priority")),
        "dueDate": due,
        "completed": is_completed(edited.get("completed")),
    }
