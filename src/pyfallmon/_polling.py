"""Fixed-period asyncio tasks with start/stop and manual ticking."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from typing import Any

_logger = logging.getLogger(__name__)

TickCallback = Callable[[], Awaitable[Any]]
SleepFn = Callable[[float], Awaitable[Any]]


class PeriodicTask:
    """Run an async callback once per ``interval`` seconds.

    Ticks of one task never overlap: the next tick starts only after the
    previous callback returned. If a tick overruns, the missed ticks are
    skipped rather than queued.

    The callback is expected to recover from its own transient errors.
    Anything it lets escape stops the task; the error is logged, kept in
    :attr:`error` and re-raised from :meth:`join`.

    ``clock`` and ``sleep`` can be replaced to drive the schedule
    deterministically; tests may also skip the schedule entirely and call
    :meth:`run_once`.
    """

    def __init__(
        self,
        name: str,
        interval: float,
        callback: TickCallback,
        *,
        clock: Callable[[], float] | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.name = name
        self.interval = interval
        self._callback = callback
        self._clock = clock
        self._sleep = sleep
        self._task: asyncio.Task[None] | None = None
        self._tick_lock = asyncio.Lock()
        self.ticks = 0
        self.skipped_ticks = 0
        self.error: BaseException | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> Any:
        """Run a single tick now, serialized with scheduled ticks."""
        async with self._tick_lock:
            result = await self._callback()
            self.ticks += 1
            return result

    def start(self) -> None:
        if self.is_running:
            return
        previous = self._task
        if previous is not None and not previous.cancelled():
            # Retrieve so asyncio does not warn; the error was logged and is kept on self.error.
            previous.exception()
        self.error = None
        self._task = asyncio.create_task(self._run(), name=f"pyfallmon-{self.name}")
        _logger.info("Started %s loop (interval=%.2fs)", self.name, self.interval)

    async def stop(self) -> None:
        """Cancel the task and wait for it to finish."""
        task = self._task
        self._task = None
        if task is None:
            return
        if task.done():
            if not task.cancelled():
                # Retrieve so asyncio does not warn; the error was logged and is kept on self.error.
                task.exception()
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        _logger.info("Stopped %s loop after %d tick(s)", self.name, self.ticks)

    async def join(self) -> None:
        """Wait for the task to end, re-raising the error that stopped it."""
        if self._task is None:
            if self.error is not None:
                raise self.error
            return
        await self._task

    async def _run(self) -> None:
        clock = self._clock or asyncio.get_running_loop().time
        next_at = clock()
        try:
            while True:
                await self.run_once()
                next_at += self.interval
                now = clock()
                if now > next_at:
                    missed = int((now - next_at) // self.interval) + 1
                    self.skipped_ticks += missed
                    next_at += missed * self.interval
                    _logger.debug("%s tick overran; skipping %d tick(s)", self.name, missed)
                await self._sleep(max(0.0, next_at - now))
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self.error = exc
            _logger.error("%s loop stopped by %s", self.name, type(exc).__name__, exc_info=True)
            raise
