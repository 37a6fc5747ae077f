"""
Continuation Delivery

Runs future continuations on a later turn, never inside the call that
registered them.
"""

import asyncio
import logging
from collections import deque
from typing import Any, Callable, Deque, Optional, Tuple

from ..exceptions import FutureNotReady

logger = logging.getLogger(__name__)


class Reactor:
    """
    Single-threaded continuation scheduler.

    Uses the running asyncio event loop when there is one; otherwise
    callbacks wait in the reactor's own FIFO queue until ``run()`` or
    ``run_until_complete()`` drains it.
    """

    _ready: Deque[Tuple[Callable[..., Any], tuple]] = deque()

    @staticmethod
    def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            return None

    @classmethod
    def call_soon(cls, callback: Callable[..., Any], *args: Any) -> None:
        """
        Schedule ``callback(*args)`` for a later turn.

        Args:
            callback: Function to run
            *args: Positional arguments for the callback
        """
        loop = cls._running_loop()
        if loop is not None:
            cls.attach(loop)
            loop.call_soon(callback, *args)
        else:
            cls._ready.append((callback, args))

    @classmethod
    def attach(cls, loop: asyncio.AbstractEventLoop) -> int:
        """
        Move queued callbacks onto ``loop``, keeping their order.

        Work scheduled before the loop started (e.g. a ``drive()`` at import
        time) continues once the loop runs.

        Returns:
            Number of callbacks moved
        """
        count = 0
        while cls._ready:
            callback, args = cls._ready.popleft()
            loop.call_soon(callback, *args)
            count += 1
        return count

    @classmethod
    def _run_once(cls) -> None:
        callback, args = cls._ready.popleft()
        try:
            callback(*args)
        except Exception:
            logger.exception(f"Exception in callback {callback!r}")

    @classmethod
    def run(cls) -> int:
        """
        Drain the ready queue.

        Callbacks scheduled while draining run in the same call.

        Returns:
            Number of callbacks executed
        """
        count = 0
        while cls._ready:
            cls._run_once()
            count += 1
        return count

    @classmethod
    def run_until_complete(cls, future) -> None:
        """
        Drain the ready queue until ``future`` settles.

        Raises:
            FutureNotReady: If the queue runs dry with the future still pending
        """
        while not future.done():
            if not cls._ready:
                raise FutureNotReady(f"{future!r} cannot settle: no pending callbacks")
            cls._run_once()

    @classmethod
    def pending(cls) -> int:
        """Number of callbacks waiting in the ready queue."""
        return len(cls._ready)

    @classmethod
    def reset(cls) -> None:
        """Drop every queued callback."""
        if cls._ready:
            logger.warning(f"Discarding {len(cls._ready)} pending callbacks")
        cls._ready.clear()
