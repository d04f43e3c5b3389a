"""
Taskboard MCP Server

Exposes a task board session as MCP tools: snapshot, statistics, filter and
sort views, and the mutation triggers.
"""

import asyncio
import logging
import sys
from typing import Optional

from mcp.server.fastmcp import FastMCP

from taskboard.models.task import Task
from taskboard.services import views

# Initialize FastMCP server
mcp = FastMCP("taskboard")

logger = logging.getLogger(__name__)

# Global state
_board = None


def _session_ended() -> None:
    logger.warning("Credential rejected by the task API; log in again with taskboard_login")


async def ensure_initialized():
    """Ensure the board exists and has attempted its first load."""
    global _board
    if _board is not None:
        return _board

    from taskboard.api import init_client
    from taskboard.config import load_config
    from taskboard.services import TaskBoard

    config = load_config()
    client = await init_client(config)
    _board = TaskBoard.from_config(config, client=client, on_session_end=_session_ended)

    if _board.is_authenticated:
        await _board.reload()

    logger.info("Taskboard initialized")
    return _board


def _task_view(task: Task, board) -> dict:
    """Task dict with the display helpers filled in."""
    result = task.to_dict()
    result["dueLabel"] = views.due_label(task, board.today())
    result["createdLabel"] = views.created_label(task)
    result["progress"] = views.subtask_progress(task)
    return result


# =============================================================================
# SESSION TOOLS
# =============================================================================

@mcp.tool()
async def taskboard_login(token: str) -> dict:
    """
    Start a session with a bearer token and load tasks.

    Args:
        token: API bearer token

    Returns:
        Load result
    """
    board = await ensure_initialized()
    board.login(token)
    outcome = await board.reload()
    return outcome.to_dict()


@mcp.tool()
async def taskboard_reload() -> dict:
    """
    Reload the task list from the server.

    Returns:
        Load result and fresh statistics
    """
    board = await ensure_initialized()
    outcome = await board.reload()

    return {
        **outcome.to_dict(),
        "stats": board.stats.to_dict(),
    }


# =============================================================================
# VIEW TOOLS
# =============================================================================

@mcp.tool()
async def taskboard_list(filter: Optional[str] = None) -> dict:
    """
    List tasks through the dashboard filter.

    Args:
        filter: all, today, week, high, medium or low (default: current filter)

    Returns:
        Matching tasks
    """
    board = await ensure_initialized()
    if filter is not None:
        board.filter_key = filter

    tasks = board.visible_tasks
    return {
        "filter": board.filter_key,
        "label": views.FILTER_LABELS.get(board.filter_key, views.FILTER_LABELS["all"]),
        "tasks": [_task_view(t, board) for t in tasks],
        "count": len(tasks),
    }


@mcp.tool()
async def taskboard_pending(sort_by: Optional[str] = None) -> dict:
    """
    List tasks waiting to be completed.

    Args:
        sort_by: newest, oldest or priority (default: current sort)

    Returns:
        Pending tasks in sort order
    """
    board = await ensure_initialized()
    if sort_by is not None:
        board.sort_key = sort_by

    tasks = board.pending
    return {
        "sort_by": board.sort_key,
        "tasks": [_task_view(t, board) for t in tasks],
        "count": len(tasks),
    }


@mcp.tool()
async def taskboard_stats() -> dict:
    """
    Dashboard statistics and recent activity.

    Returns:
        Counts, completion percentage, priority breakdown, recent tasks
    """
    board = await ensure_initialized()

    return {
        "stats": board.stats.to_dict(),
        "recent": [_task_view(t, board) for t in board.recent],
        "load_error": str(board.load_error) if board.load_error else None,
    }


@mcp.tool()
async def taskboard_show(task_id: str) -> dict:
    """
    Get one task.

    Args:
        task_id: Task identifier

    Returns:
        Full task details with labels and subtask progress
    """
    board = await ensure_initialized()
    task = board.store.get(task_id)

    if not task:
        return {"error": f"Task not found: {task_id}"}

    return _task_view(task, board)


@mcp.tool()
async def taskboard_set_view(
    filter: Optional[str] = None,
    sort_by: Optional[str] = None,
) -> dict:
    """
    Change the dashboard filter and/or the pending sort order.

    Args:
        filter: all, today, week, high, medium or low
        sort_by: newest, oldest or priority

    Returns:
        The active view keys
    """
    board = await ensure_initialized()
    if filter is not None:
        board.filter_key = filter
    if sort_by is not None:
        board.sort_key = sort_by

    return {"filter": board.filter_key, "sort_by": board.sort_key}


# =============================================================================
# MUTATION TOOLS
# =============================================================================

@mcp.tool()
async def taskboard_toggle(task_id: str) -> dict:
    """
    Flip a task between completed and pending.

    Args:
        task_id: Task identifier

    Returns:
        Mutation outcome
    """
    board = await ensure_initialized()
    if task_id not in board.store:
        return {"error": f"Task not found: {task_id}"}

    outcome = await board.toggle_completion(task_id)
    return outcome.to_dict()


@mcp.tool()
async def taskboard_save(
    task_id: str,
    title: Optional[str] = None,
    description: Optional[str] = None,
    priority: Optional[str] = None,
    due_date: Optional[str] = None,
    completed: Optional[str] = None,
) -> dict:
    """
    Edit a task. Unset arguments keep their current value.

    Args:
        task_id: Task identifier
        title: New title
        description: New description
        priority: low, medium or high
        due_date: ISO date, e.g. 2025-03-01
        completed: yes or no

    Returns:
        Mutation outcome
    """
    board = await ensure_initialized()
    task = board.store.get(task_id)

    if not task:
        return {"error": f"Task not found: {task_id}"}

    edited = task.to_dict()
    if title is not None:
        edited["title"] = title
    if description is not None:
        edited["description"] = description
    if priority is not None:
        edited["priority"] = priority
    if due_date is not None:
        edited["dueDate"] = due_date
    if completed is not None:
        edited["completed"] = completed

    outcome = await board.save(edited)
    return outcome.to_dict()


@mcp.tool()
async def taskboard_delete(task_id: str) -> dict:
    """
    Delete a task.

    Args:
        task_id: Task identifier

    Returns:
        Mutation outcome
    """
    board = await ensure_initialized()
    if task_id not in board.store:
        return {"error": f"Task not found: {task_id}"}

    outcome = await board.delete(task_id)
    return outcome.to_dict()


@mcp.tool()
async def taskboard_create(
    title: str,
    description: Optional[str] = None,
    priority: str = "low",
    due_date: Optional[str] = None,
) -> dict:
    """
    Create a new task.

    Args:
        title: Task title
        description: Optional description
        priority: low, medium or high (default low)
        due_date: Optional ISO date

    Returns:
        Mutation outcome
    """
    board = await ensure_initialized()

    outcome = await board.create({
        "title": title,
        "description": description,
        "priority": priority,
        "dueDate": due_date,
        "completed": False,
    })
    return outcome.to_dict()


# =============================================================================
# UTILITY TOOLS
# =============================================================================

@mcp.tool()
async def taskboard_health() -> dict:
    """
    Check the session state.

    Returns:
        Authentication status, task count and last load error
    """
    board = await ensure_initialized()
    client = board.client

    return {
        "status": "unhealthy" if board.load_error else "healthy",
        "authenticated": board.is_authenticated,
        "api": getattr(client, "base_url", None),
        "task_count": len(board.store),
        "load_error": str(board.load_error) if board.load_error else None,
    }


def create_server() -> FastMCP:
    """Return the configured MCP server."""
    return mcp


# =============================================================================
# CLI ENTRY POINT
# =============================================================================

def main():
    """Main entry point for taskboard-mcp command."""
    import argparse

    parser = argparse.ArgumentParser(description="Taskboard MCP Server")
    parser.add_argument("command", nargs="?", default="serve", help="Command to run (serve, check)")
    args = parser.parse_args()

    # stdout belongs to the MCP protocol
    logging.basicConfig(
        level=logging.INFO,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "check":
        async def do_check():
            board = await ensure_initialized()
            stats = board.stats
            print(f"{stats.total} tasks, {stats.completed} completed ({stats.completion_percentage}%)")
            if board.load_error:
                print(f"Load error: {board.load_error}")

        asyncio.run(do_check())
    else:
        mcp.run()


if __name__ == "__main__":
    main()
