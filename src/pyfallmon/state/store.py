"""In-memory monitor state.

Holds the latest device counts, the notification ledger and per-loop
failure bookkeeping.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict

from pyfallmon.models.stats import DeviceStats
from pyfallmon.state.ledger import NotificationLedger


def _utcnow() -> datetime:
    return datetime.now(UTC)


class LoopHealth(BaseModel):
    model_config = ConfigDict(frozen=True)

    failures: int = 0
    consecutive_failures: int = 0
    last_error: str | None = None
    last_success_at: datetime | None = None
    last_failure_at: datetime | None = None


class MonitorState:
    """Shared state written by the polling loops and read by the UI.

    Every value is published by swapping a reference to an immutable
    object, so readers see either the old or the new value, never a mix.
    """

    def __init__(
        self,
        *,
        ledger: NotificationLedger | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._device_stats: DeviceStats | None = None
        self._health: dict[str, LoopHealth] = {}
        self.ledger = ledger if ledger is not None else NotificationLedger()

    @property
    def device_stats(self) -> DeviceStats | None:
        return self._device_stats

    def publish_device_stats(self, stats: DeviceStats) -> None:
        """Replace the device counts wholesale."""
        self._device_stats = stats

    def record_success(self, loop: str) -> None:
        with self._lock:
            previous = self._health.get(loop, LoopHealth())
            self._health[loop] = previous.model_copy(
                update={"consecutive_failures": 0, "last_success_at": self._clock()}
            )

    def record_failure(self, loop: str, exc: BaseException) -> LoopHealth:
        with self._lock:
            previous = self._health.get(loop, LoopHealth())
            health = previous.model_copy(
                update={
                    "failures": previous.failures + 1,
                    "consecutive_failures": previous.consecutive_failures + 1,
                    "last_error": str(exc),
                    "last_failure_at": self._clock(),
                }
            )
            self._health[loop] = health
        return health

    def health(self, loop: str) -> LoopHealth:
        return self._health.get(loop, LoopHealth())

    def failure_count(self, loop: str) -> int:
        return self.health(loop).failures
