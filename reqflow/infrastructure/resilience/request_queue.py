"""Bounded-parallelism FIFO executor for calls to critical endpoints."""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from functools import partial
from typing import Any, Awaitable, Callable, Deque, Optional

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENT = 8


@dataclass
class QueueTask:
    """A waiting or running unit of work and the future its submitter awaits."""
    invoke: Callable[[], Awaitable[Any]]
    result: asyncio.Future
    runner: Optional[asyncio.Task] = None


class RequestQueue:
    """Runs at most `max_concurrent` submitted tasks at once, in submission order."""

    def __init__(self, max_concurrent: int = DEFAULT_MAX_CONCURRENT):
        if max_concurrent <= 0:
            raise ValueError("max_concurrent must be positive.")
        self.max_concurrent = max_concurrent
        self._waiting: Deque[QueueTask] = deque()
        self._running = 0
        self.peak_running = 0
        logger.info(f"RequestQueue initialized: max_concurrent={max_concurrent}")

    @property
    def running(self) -> int:
        return self._running

    @property
    def waiting(self) -> int:
        return len(self._waiting)

    async def submit(self, invoke: Callable[[], Awaitable[Any]]) -> Any:
        """Queues `invoke` and returns its result once it has run.

        Cancelling the awaiting caller drops the task if it is still waiting,
        or cancels it if it is already running.
        """
        loop = asyncio.get_running_loop()
        task = QueueTask(invoke=invoke, result=loop.create_future())
        task.result.add_done_callback(partial(self._on_result_done, task))
        self._waiting.append(task)
        self._dispatch()
        return await task.result

    def _dispatch(self) -> None:
        while self._running < self.max_concurrent and self._waiting:
            task = self._waiting.popleft()
            if task.result.done():
                continue
            self._running += 1
            self.peak_running = max(self.peak_running, self._running)
            task.runner = asyncio.ensure_future(task.invoke())
            task.runner.add_done_callback(partial(self._on_runner_done, task))
            logger.debug(f"Dispatched queued task: running={self._running}, waiting={len(self._waiting)}")

    def _on_runner_done(self, task: QueueTask, runner: asyncio.Task) -> None:
        # The slot is released whatever the outcome
        self._running -= 1
        if not task.result.done():
            if runner.cancelled():
                task.result.cancel()
            elif runner.exception() is not None:
                task.result.set_exception(runner.exception())
            else:
                task.result.set_result(runner.result())
        elif not runner.cancelled():
            # Submitter is gone; retrieve the exception so asyncio does not warn
            runner.exception()
        self._dispatch()

    def _on_result_done(self, task: QueueTask, result: asyncio.Future) -> None:
        if not result.cancelled():
            return
        if task.runner is None:
            if task in self._waiting:
                self._waiting.remove(task)
        elif not task.runner.done():
            task.runner.cancel()
