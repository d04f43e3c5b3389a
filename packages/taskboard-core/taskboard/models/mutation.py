"""
Mutation and reload outcome records.

The board settles every user action into one of these, so the
presentation layer can await a result instead of catching exceptions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class MutationKind(str, Enum):
    TOGGLE = "toggle"
    SAVE = "save"
    DELETE = "delete"
    CREATE = "create"


class MutationState(str, Enum):
    """
    Lifecycle of a single mutation.

    idle -> pending (local patch applied) -> confirmed | rolled_back
    """

    IDLE = "idle"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"


@dataclass
class MutationOutcome:
    """
    Settled result of a mutation.

    `state` is CONFIRMED or ROLLED_BACK once settled; for SAVE and CREATE,
    ROLLED_BACK means "failed" with no local change undone.
    """

    kind: MutationKind
    task_id: Optional[str]
    state: MutationState = MutationState.IDLE
    error: Optional[Exception] = None
    unauthorized: bool = False
    result: Any = None

    @property
    def ok(self) -> bool:
        return self.state == MutationState.CONFIRMED

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "task_id": self.task_id,
            "state": self.state.value,
            "ok": self.ok,
            "error": str(self.error) if self.error else None,
            "unauthorized": self.unauthorized,
        }


@dataclass
class ReloadOutcome:
    """Settled result of a full reload."""

    sequence: int
    ok: bool = False
    stale: bool = False
    count: int = 0
    error: Optional[Exception] = None
    unauthorized: bool = False

    def to_dict(self) -> dict:
        return {
            "sequence": self.sequence,
            "ok": self.ok,
            "stale": self.stale,
            "count": self.count,
            "error": str(self.error) if self.error else None,
            "unauthorized": self.unauthorized,
        }
