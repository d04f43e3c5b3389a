"""
Abstract task API client interface.

The board and the mutation coordinator only talk to this interface; the
credential is passed into every call explicitly.
"""

from abc import ABC, abstractmethod
from typing import Any

from taskboard.errors import MissingCredentialError


class TaskAPIClient(ABC):
    """
    Abstract base class for remote task API clients.

    Implementations must:
    - Raise MissingCredentialError before any network attempt without a token
    - Raise UnauthorizedError when the server rejects the token
    - Raise NetworkError / ServerError for other failures
    """

    @abstractmethod
    async def connect(self) -> None:
        """Open underlying connections."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release underlying connections."""
        pass

    @abstractmethod
    async def list_tasks(self, *, token: str | None) -> Any:
        """
        Fetch the raw task list payload.

        Returns:
            The decoded response body, shape unknown (list or wrapper dict)
        """
        pass

    @abstractmethod
    async def create_task(self, fields: dict, *, token: str | None) -> Any:
        """
        Create a task.

        Args:
            fields: Task fields in the external shape

        Returns:
            Raw task record from the server
        """
        pass

    @abstractmethod
    async def update_task(self, task_id: str, fields: dict, *, token: str | None) -> Any:
        """
        Update fields of one task.

        Args:
            task_id: Task identifier
            fields: Fields to change, external shape

        Returns:
            Raw task record from the server
        """
        pass

    @abstractmethod
    async def delete_task(self, task_id: str, *, token: str | None) -> bool:
        """Delete one task. Returns True on success."""
        pass

    @staticmethod
    def require_token(token: str | None) -> str:
        """Fail fast when no credential is available."""
        if not token:
            raise MissingCredentialError()
        return token
