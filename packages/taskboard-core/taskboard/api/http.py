"""
HTTP task API client using httpx.

Routes:
    GET    {tasks_path}/gp          list tasks
    POST   {tasks_path}/gp          create task
    PUT    {tasks_path}/{id}/gp     update task
    DELETE {tasks_path}/{id}/gp     delete task

All requests carry "Authorization: Bearer <token>".
"""

import logging
from typing import Any, Optional

import httpx

from taskboard.api.interface import TaskAPIClient
from taskboard.errors import (
    MalformedResponseError,
    NetworkError,
    ServerError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)


class HttpTaskClient(TaskAPIClient):
    """
    Task API client over HTTP.

    Uses a shared httpx.AsyncClient, created on connect() or lazily on the
    first request.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:4000",
        tasks_path: str = "/api/tasks",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Server root, e.g. http://localhost:4000
            tasks_path: Path of the task resource
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.tasks_path = "/" + tasks_path.strip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def connect(self) -> None:
        if self._client is not None:
            return

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        )
        logger.info(f"Task API client connected: {self.base_url}{self.tasks_path}")

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Task API client closed")

    def _collection_url(self) -> str:
        return f"{self.tasks_path}/gp"

    def _item_url(self, task_id: str) -> str:
        return f"{self.tasks_path}/{task_id}/gp"

    async def _request(
        self,
        method: str,
        url: str,
        token: str | None,
        json: dict | None = None,
    ) -> httpx.Response:
        token = self.require_token(token)
        if self._client is None:
            await self.connect()

        try:
            response = await self._client.request(
                method,
                url,
                json=json,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.TransportError as e:
            raise NetworkError(f"{method} {url} failed: {e}") from e

        if response.status_code == 401:
            raise UnauthorizedError(f"{method} {url} rejected the credential")
        if response.status_code >= 400:
            raise ServerError(
                f"{method} {url} failed: {response.status_code} {response.text[:200]}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Response is not JSON: {e}") from e

    async def list_tasks(self, *, token: str | None) -> Any:
        response = await self._request("GET", self._collection_url(), token)
        return self._decode(response)

    async def create_task(self, fields: dict, *, token: str | None) -> Any:
        response = await self._request("POST", self._collection_url(), token, json=fields)
        return self._decode(response)

    async def update_task(self, task_id: str, fields: dict, *, token: str | None) -> Any:
        response = await self._request("PUT", self._item_url(task_id), token, json=fields)
        return self._decode(response)

    async def delete_task(self, task_id: str, *, token: str | None) -> bool:
        await self._request("DELETE", self._item_url(task_id), token)
        return True
