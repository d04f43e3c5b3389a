"""
Pytest configuration and fixtures for taskboard tests.
"""

import asyncio
import sys
from pathlib import Path

import pytest

# Configure pytest-asyncio
pytest_plugins = ["pytest_asyncio"]

# Add packages to path for testing
packages_dir = Path(__file__).parent.parent / "packages"
sys.path.insert(0, str(packages_dir / "taskboard-core"))
sys.path.insert(0, str(packages_dir / "taskboard-mcp"))

from taskboard.api.interface import TaskAPIClient  # noqa: E402


class FakeTaskClient(TaskAPIClient):
    """
    In-memory task API client for tests.

    - Records every call in `calls`
    - `errors[method]` makes that method raise
    - `hold(method)` makes the next call of that method wait until released
    """

    def __init__(self, payload=None):
        self.payload = payload if payload is not None else []
        self.calls: list[tuple] = []
        self.errors: dict[str, Exception] = {}
        self.gates: dict[str, list[asyncio.Event]] = {}
        self.connected = False

    def hold(self, method: str) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates.setdefault(method, []).append(gate)
        return gate

    def calls_to(self, method: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == method]

    async def _call(self, method: str, token, *args):
        self.require_token(token)
        self.calls.append((method, *args))
        gates = self.gates.get(method)
        if gates:
            await gates.pop(0).wait()
        error = self.errors.get(method)
        if error is not None:
            raise error

    async def connect(self) -> None:
        self.connected = True

    async def close(self) -> None:
        self.connected = False

    async def list_tasks(self, *, token):
        payload = self.payload
        await self._call("list_tasks", token)
        return payload

    async def create_task(self, fields, *, token):
        await self._call("create_task", token, fields)
        return {"_id": "created-1", **fields}

    async def update_task(self, task_id, fields, *, token):
        await self._call("update_task", token, task_id, fields)
        return {"_id": task_id, **fields}

    async def delete_task(self, task_id, *, token):
        await self._call("delete_task", token, task_id)
        return True


@pytest.fixture
def fake_client():
    """A fake API client with an empty task list."""
    return FakeTaskClient()


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory."""
    config_dir = tmp_path / ".taskboard"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def sample_records():
    """Task records the way the backend tends to send them."""
    return [
        {
            "_id": "t1",
            "title": "Write report",
            "description": "Quarterly numbers",
            "priority": "High",
            "completed": "Yes",
            "dueDate": "2025-03-10T00:00:00",
            "createdAt": "2025-03-01T09:00:00",
            "owner": "u1",
        },
        {
            "id": "t2",
            "title": "Call plumber",
            "priority": "low",
            "completed": 0,
            "createdAt": "2025-03-03T09:00:00",
        },
        {
            "_id": "t3",
            "title": "Plan trip",
            "priority": "medium",
            "completed": None,
            "dueDate": "2025-03-12",
            "subtasks": [{"title": "flights", "completed": True}, {"title": "hotel"}],
        },
    ]
