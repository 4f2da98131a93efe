"""
Fire-and-forget execution of secondary actions.

A side effect (usually an outbound notification) must never block or roll
back the mutation that triggered it.  From async code the call is moved to
a worker thread and tracked as a background task; from sync code it runs
inline.  Either way a failure is logged and swallowed.
"""
import asyncio
import logging
from typing import Callable, Set

from asgiref.sync import sync_to_async

logger = logging.getLogger(__name__)

_pending: Set[asyncio.Task] = set()


def _name(func: Callable) -> str:
    return getattr(func, '__qualname__', repr(func))


def _log_task_failure(task: asyncio.Task) -> None:
    _pending.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error('side effect %s failed: %s', task.get_name(), exc, exc_info=exc)


def run_safely(func: Callable, *args, **kwargs):
    try:
        return func(*args, **kwargs)
    except Exception:
        logger.exception('side effect %s failed', _name(func))
        return None


def fire_and_forget(func: Callable, *args, **kwargs) -> None:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None
    if loop is None:
        run_safely(func, *args, **kwargs)
        return
    coro = sync_to_async(func, thread_sensitive=False)(*args, **kwargs)
    task = loop.create_task(coro, name=_name(func))
    _pending.add(task)
    task.add_done_callback(_log_task_failure)


async def drain() -> None:
    """Wait until every side effect scheduled so far has finished."""
    while True:
        waiting = [t for t in _pending if not t.done()]
        if not waiting:
            return
        await asyncio.gather(*waiting, return_exceptions=True)
