"""
Task Board for Taskboard.

The session-level object the presentation layer talks to: it owns the
credential, the task store, the mutation coordinator and the current
filter/sort keys.
"""

import inspect
import logging
from collections.abc import Callable
from datetime import date
from typing import Any

from taskboard.api.interface import TaskAPIClient
from taskboard.errors import MalformedResponseError, TaskboardError, UnauthorizedError
from taskboard.models.mutation import MutationOutcome, ReloadOutcome
from taskboard.models.stats import TaskStats
from taskboard.models.task import Task
from taskboard.services import views
from taskboard.services.mutations import MutationCoordinator
from taskboard.services.normalizer import normalize_task, normalize_tasks
from taskboard.services.store import TaskStore

logger = logging.getLogger(__name__)


class TaskBoard:
    """
    A user's task session.

    Reads are always derived from the store's current snapshot. Mutations
    and reloads settle into outcome records instead of raising.
    """

    def __init__(
        self,
        client: TaskAPIClient,
        *,
        token: str | None = None,
        on_session_end: Callable[[], Any] | None = None,
        filter_key: str = "all",
        sort_key: str = "newest",
        recent_limit: int = 3,
        today: Callable[[], date] | None = None,
    ):
        """
        Initialize a board.

        Args:
            client: Remote task API client
            token: Bearer credential, if already logged in
            on_session_end: Called when the server rejects the credential
            filter_key: Initial dashboard filter
            sort_key: Initial pending-view sort
            recent_limit: Size of the recent activity list
            today: Clock for calendar filters (defaults to date.today)
        """
        self.client = client
        self.store = TaskStore()
        self._token = token
        self._on_session_end = on_session_end
        self._filter_key = filter_key
        self._sort_key = sort_key
        self.recent_limit = recent_limit
        self._today = today or date.today
        self._reload_seq = 0
        self.load_error: Exception | None = None

        self.mutations = MutationCoordinator(
            self.store,
            client,
            on_unauthorized=self._end_session,
            reload=self.reload,
        )

    @classmethod
    def from_config(cls, config=None, client: TaskAPIClient | None = None, **kwargs) -> "TaskBoard":
        """
        Build a board from configuration.

        Args:
            config: Optional TaskboardConfig. Loads the default one if omitted.
            client: Optional client. Uses the global client if omitted.
        """
        if config is None:
            from taskboard.config import get_config
            config = get_config()
        if client is None:
            from taskboard.api import get_client
            client = get_client(config)

        kwargs.setdefault("token", config.auth.token)
        kwargs.setdefault("filter_key", config.views.default_filter)
        kwargs.setdefault("sort_key", config.views.default_sort)
        kwargs.setdefault("recent_limit", config.views.recent_limit)
        return cls(client, **kwargs)

    # ---- session ----

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    def login(self, token: str) -> None:
        """Start a session with a new credential."""
        self._token = token
        self.load_error = None

    def logout(self) -> None:
        """End the session: drop the credential and every task."""
        self._token = None
        # In-flight reloads belong to the old session
        self._reload_seq += 1
        self.mutations.reset()
        self.store.clear()

    async def _end_session(self, error: Exception | None = None) -> None:
        if self._token is None:
            logger.debug("Session already ended")
            return

        self.logout()
        logger.info(f"Session ended: {error or 'credential rejected'}")

        if self._on_session_end is not None:
            result = self._on_session_end()
            if inspect.isawaitable(result):
                await result

    # ---- loading ----

    async def reload(self) -> ReloadOutcome:
        """
        Replace the store with the server's task list.

        Only the most recently started reload may apply its result; older
        responses are reported as stale and dropped.
        """
        self._reload_seq += 1
        sequence = self._reload_seq
        outcome = ReloadOutcome(sequence=sequence)

        try:
            payload = await self.client.list_tasks(token=self._token)
        except MalformedResponseError as e:
            logger.warning(f"Malformed task list, treating as empty: {e}")
            payload = None
        except UnauthorizedError as e:
            outcome.error = e
            outcome.unauthorized = True
            if sequence != self._reload_seq:
                # Superseded by a newer reload or session
                outcome.stale = True
                logger.debug(f"Ignoring unauthorized stale reload #{sequence}")
                return outcome
            self.load_error = e
            await self._end_session(e)
            return outcome
        except TaskboardError as e:
            outcome.error = e
            if sequence != self._reload_seq:
                outcome.stale = True
                return outcome
            self.load_error = e
            logger.warning(f"Could not load tasks: {e}")
            return outcome

        if sequence != self._reload_seq:
            outcome.stale = True
            logger.debug(f"Discarding stale reload #{sequence} (latest #{self._reload_seq})")
            return outcome

        tasks = normalize_tasks(payload)
        self.store.replace_all(tasks)
        self.load_error = None

        outcome.ok = True
        outcome.count = len(self.store)
        logger.info(f"Loaded {outcome.count} tasks")
        return outcome

    # ---- views ----

    def today(self) -> date:
        return self._today()

    @property
    def filter_key(self) -> str:
        return self._filter_key

    @filter_key.setter
    def filter_key(self, value: str) -> None:
        if value not in views.FILTER_OPTIONS:
            logger.debug(f"Unknown filter {value!r}, showing all tasks")
        self._filter_key = value

    @property
    def sort_key(self) -> str:
        return self._sort_key

    @sort_key.setter
    def sort_key(self, value: str) -> None:
        if value not in views.SORT_OPTIONS:
            logger.debug(f"Unknown sort {value!r}, keeping store order")
        self._sort_key = value

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self.store.snapshot()

    @property
    def stats(self) -> TaskStats:
        return views.compute_stats(self.store.snapshot())

    @property
    def visible_tasks(self) -> list[Task]:
        """Tasks matching the current filter."""
        return views.filter_tasks(self.store.snapshot(), self._filter_key, self.today())

    @property
    def pending(self) -> list[Task]:
        """Pending tasks in the current sort order."""
        return views.pending_tasks(self.store.snapshot(), self._sort_key)

    @property
    def recent(self) -> list[Task]:
        return views.recent_tasks(self.store.snapshot(), self.recent_limit)

    def progress(self, task_id: str) -> float:
        task = self.store.get(task_id)
        return views.subtask_progress(task) if task else 0.0

    # ---- mutations ----

    def _resolve(self, task: Task | dict | str) -> Task:
        if isinstance(task, Task):
            return task
        if isinstance(task, str):
            found = self.store.get(task)
            if found is None:
                raise ValueError(f"Task not found: {task}")
            return found
        normalized = normalize_task(task)
        if normalized is None:
            raise ValueError("Task has no identifier")
        return normalized

    async def toggle_completion(self, task: Task | dict | str) -> MutationOutcome:
        return await self.mutations.toggle_completion(self._resolve(task), token=self._token)

    async def save(self, edited: Task | dict) -> MutationOutcome:
        return await self.mutations.save(edited, token=self._token)

    async def delete(self, task: Task | dict | str) -> MutationOutcome:
        return await self.mutations.delete(self._resolve(task), token=self._token)

    async def create(self, fields: Task | dict) -> MutationOutcome:
        return await self.mutations.create(fields, token=self._token)
