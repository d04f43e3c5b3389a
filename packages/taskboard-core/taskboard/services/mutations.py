"""
Optimistic mutation coordinator.

Every user mutation goes through one state machine:

    idle -> pending (local patch applied) -> confirmed | rolled_back

Kinds differ only in what they apply locally, how they undo it, and what
they do after the server confirms.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from taskboard.api.interface import TaskAPIClient
from taskboard.errors import TaskboardError, UnauthorizedError
from taskboard.models.mutation import MutationKind, MutationOutcome, MutationState
from taskboard.models.task import Task
from taskboard.services.normalizer import is_completed, resolve_id, update_payload
from taskboard.services.store import TaskStore

logger = logging.getLogger(__name__)


class MutationCoordinator:
    """
    Applies local changes before the remote call settles, then confirms or
    rolls them back.

    Overlapping mutations on the same task follow last-writer-wins: a toggle
    only rolls back if nothing newer touched the task in the meantime, and a
    rollback on a task that has since been deleted does nothing. Only a
    confirmed save supersedes a pending toggle. A toggle that fails while a
    delete of the same task is in flight hands its old completion value to
    the delete, which restores the task with it if the delete fails too.
    Rollbacks started before reset() are dropped.
    """

    def __init__(
        self,
        store: TaskStore,
        client: TaskAPIClient,
        *,
        on_unauthorized: Callable[[Exception], Any] | None = None,
        reload: Callable[[], Awaitable[Any]] | None = None,
    ):
        """
        Initialize the coordinator.

        Args:
            store: The session's task store
            client: Remote task API client
            on_unauthorized: Called once per unauthorized failure (sync or async)
            reload: Full reload, awaited after confirmed saves and creates
        """
        self.store = store
        self.client = client
        self._on_unauthorized = on_unauthorized
        self._reload = reload
        self._generations: dict[str, int] = {}
        self._epoch = 0
        # Ids with a delete in flight, and the completion to restore them with
        self._deleting: set[str] = set()
        self._reverts: dict[str, bool] = {}
        self._in_flight: list[MutationOutcome] = []

    @property
    def in_flight(self) -> list[MutationOutcome]:
        """Mutations currently waiting on the server."""
        return list(self._in_flight)

    def reset(self) -> None:
        """Forget every pending rollback. Called when the session ends."""
        self._epoch += 1
        self._generations.clear()
        self._reverts.clear()

    def _touch(self, task_id: str) -> int:
        generation = self._generations.get(task_id, 0) + 1
        self._generations[task_id] = generation
        return generation

    def _is_latest(self, task_id: str, generation: int) -> bool:
        return self._generations.get(task_id) == generation

    async def _notify_unauthorized(self, error: Exception) -> None:
        if self._on_unauthorized is None:
            return
        result = self._on_unauthorized(error)
        if inspect.isawaitable(result):
            await result

    async def _run(
        self,
        kind: MutationKind,
        task_id: str | None,
        call: Callable[[], Awaitable[Any]],
        rollback: Callable[[], None] | None = None,
        on_success: Callable[[], Awaitable[Any]] | None = None,
    ) -> MutationOutcome:
        outcome = MutationOutcome(kind=kind, task_id=task_id, state=MutationState.PENDING)
        epoch = self._epoch
        self._in_flight.append(outcome)

        try:
            outcome.result = await call()
        except TaskboardError as e:
            outcome.error = e
            if rollback is not None and epoch == self._epoch:
                rollback()
            outcome.state = MutationState.ROLLED_BACK

            if isinstance(e, UnauthorizedError):
                outcome.unauthorized = True
                logger.warning(f"{kind.value} {task_id}: unauthorized, ending session")
                await self._notify_unauthorized(e)
            else:
                logger.warning(f"{kind.value} {task_id} failed, rolled back: {e}")
            return outcome
        except Exception:
            if rollback is not None and epoch == self._epoch:
                rollback()
            outcome.state = MutationState.ROLLED_BACK
            raise
        finally:
            self._in_flight.remove(outcome)

        outcome.state = MutationState.CONFIRMED
        logger.debug(f"{kind.value} {task_id} confirmed")

        if on_success is not None:
            await on_success()
        return outcome

    async def _reload_after_success(self) -> None:
        if self._reload is not None:
            await self._reload()

    async def toggle_completion(self, task: Task, *, token: str | None) -> MutationOutcome:
        """
        Flip a task's completion state.

        The new value is in the store before the remote call is issued. On
        failure the completion flag is reverted.
        """
        task_id = task.id
        current = self.store.get(task_id) or task
        new_value = not is_completed(current.completed)

        generation = self._touch(task_id)
        previous = self.store.apply_local(task_id, {"completed": new_value})

        def rollback() -> None:
            if previous is None:
                return
            if not self._is_latest(task_id, generation):
                logger.debug(f"Skipping toggle rollback for {task_id}: superseded")
                return
            if task_id not in self.store:
                if task_id in self._deleting:
                    self._reverts[task_id] = previous.completed
                return
            self.store.apply_local(task_id, {"completed": previous.completed})

        return await self._run(
            MutationKind.TOGGLE,
            task_id,
            lambda: self.client.update_task(task_id, {"completed": new_value}, token=token),
            rollback=rollback,
        )

    async def save(self, edited: Task | dict, *, token: str | None) -> MutationOutcome:
        """
        Send an edited task to the server.

        Nothing is applied locally; a confirmed save triggers a full reload.
        """
        task_id = edited.id if isinstance(edited, Task) else resolve_id(edited)
        if not task_id:
            raise ValueError("Cannot save a task without an identifier")

        payload = update_payload(edited)

        async def on_success() -> None:
            self._touch(task_id)
            await self._reload_after_success()

        return await self._run(
            MutationKind.SAVE,
            task_id,
            lambda: self.client.update_task(task_id, payload, token=token),
            on_success=on_success,
        )

    async def delete(self, task: Task, *, token: str | None) -> MutationOutcome:
        """
        Delete a task.

        Removed from the store immediately; put back at its old position if
        the server refuses.
        """
        task_id = task.id
        removed = self.store.remove(task_id)
        self._deleting.add(task_id)

        def rollback() -> None:
            if removed is None:
                return
            position, original = removed
            if task_id in self._reverts:
                original.completed = self._reverts[task_id]
            self.store.restore(original, position)

        try:
            return await self._run(
                MutationKind.DELETE,
                task_id,
                lambda: self.client.delete_task(task_id, token=token),
                rollback=rollback,
            )
        finally:
            self._deleting.discard(task_id)
            self._reverts.pop(task_id, None)

    async def create(self, fields: Task | dict, *, token: str | None) -> MutationOutcome:
        """Create a task on the server, then reload."""
        payload = update_payload(fields)

        outcome = await self._run(
            MutationKind.CREATE,
            None,
            lambda: self.client.create_task(payload, token=token),
            on_success=self._reload_after_success,
        )
        created = outcome.result
        if isinstance(created, dict) and isinstance(created.get("task"), dict):
            created = created["task"]
        if outcome.ok and isinstance(created, dict):
            outcome.task_id = resolve_id(created)
        return outcome
