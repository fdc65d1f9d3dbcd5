"""
Fire-and-forget task tracking.

Tasks are kept referenced until they finish so they cannot be garbage
collected mid-flight, and are drained on shutdown.
"""

import asyncio
import logging

logger = logging.getLogger(__name__)

_pending_tasks: set[asyncio.Task] = set()


def _on_done(task: asyncio.Task) -> None:
    _pending_tasks.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(f"Background task {task.get_name()} failed: {exc}")


def schedule_background(coro, name: str = None) -> asyncio.Task:
    """
    Schedule a coroutine to run after the current request returns.

    Failures are logged by the done callback and never reach the caller.
    """
    task = asyncio.create_task(coro, name=name)
    _pending_tasks.add(task)
    task.add_done_callback(_on_done)
    return task


def pending_count() -> int:
    return len(_pending_tasks)


async def await_pending_tasks(timeout: float = 5.0) -> None:
    """Wait for pending background tasks, used on shutdown and in tests."""
    if not _pending_tasks:
        return

    logger.info(f"Draining {len(_pending_tasks)} background task(s)")
    try:
        await asyncio.wait_for(
            asyncio.gather(*_pending_tasks, return_exceptions=True),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        logger.warning(f"{len(_pending_tasks)} background task(s) still running after {timeout}s")
