"""
Cancellable timers scoped to one owner's lifetime.

Every timer a dashboard starts lives in its TimerGroup; `cancel_all()` on
teardown stops them all so nothing keeps writing into a discarded view.
"""

import asyncio
import inspect
import logging
from typing import Any, Callable

logger = logging.getLogger("scheduler")

# plain function or coroutine function
Callback = Callable[[], Any]


async def _invoke(callback: Callback) -> None:
    result = callback()
    if inspect.isawaitable(result):
        await result


class TimerGroup:
    def __init__(self, name: str = "timers"):
        self.name = name
        self._tasks: set[asyncio.Task] = set()
        self.closed = False

    def __len__(self) -> int:
        return len(self._tasks)

    def _track(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def every(self, interval: float, callback: Callback) -> asyncio.Task:
        """Run `callback` every `interval` seconds until cancelled."""

        async def _loop():
            while not self.closed:
                await asyncio.sleep(interval)
                try:
                    await _invoke(callback)
                except Exception:
                    logger.exception("[%s] periodic callback failed", self.name)

        return self._track(_loop())

    def after(self, delay: float, callback: Callback) -> asyncio.Task:
        """Run `callback` once after `delay` seconds unless cancelled first."""

        async def _once():
            await asyncio.sleep(delay)
            await _invoke(callback)

        return self._track(_once())

    async def cancel_all(self) -> None:
        self.closed = True
        current = asyncio.current_task()
        tasks = [t for t in self._tasks if t is not current]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
