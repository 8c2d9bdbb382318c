"""Cancellable countdown tick source."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class CountdownTimer:
    """
    Fire a callback once per interval until cancelled.

    The timer owns a single asyncio task. Starting again cancels any previous
    task first, so a stale task can never tick a new session. A tick that is
    already due but has not run yet is discarded by ``cancel()``.

    Usage:
        timer = CountdownTimer(controller.tick, interval=1.0)
        timer.start()
        ...
        timer.cancel()
        await timer.aclose()
    """

    def __init__(self, on_tick: Callable[[], None], interval: float = 1.0):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._on_tick = on_tick
        self.interval = interval
        self._task: asyncio.Task[None] | None = None
        self._retired: list[asyncio.Task[None]] = []

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Begin ticking. Requires a running event loop."""
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> None:
        """Stop ticking. Safe to call from inside the tick callback."""
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        self._retired = [t for t in self._retired if not t.done()]
        self._retired.append(task)

    async def aclose(self) -> None:
        """Cancel and wait for every task this timer created."""
        self.cancel()
        current = asyncio.current_task()
        pending = [t for t in self._retired if t is not current]
        self._retired.clear()
        await asyncio.gather(*pending, return_exceptions=True)

    async def _run(self) -> None:
        try:
            while True:
                await asyncio.sleep(self.interval)
                if self._task is not asyncio.current_task():
                    break
                try:
                    self._on_tick()
                except Exception as e:
                    logger.error("Tick handler failed", exc_info=e)
        except asyncio.CancelledError:
            pass
