"""Wall-clock text for the dashboard."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from pyfallmon._constants import TIMESTAMP_FORMAT


def format_timestamp(moment: datetime) -> str:
    """Format *moment* as ``YYYY-MM-DD HH:MM:SS`` (24-hour)."""
    return moment.strftime(TIMESTAMP_FORMAT)


def _local_now() -> datetime:
    return datetime.now().astimezone()


class Clock:
    """Holds the most recently formatted local time."""

    def __init__(self, now: Callable[[], datetime] = _local_now) -> None:
        self._now = now
        self._text = format_timestamp(now())

    @property
    def now_text(self) -> str:
        return self._text

    def tick(self) -> str:
        self._text = format_timestamp(self._now())
        return self._text

    async def async_tick(self) -> str:
        return self.tick()
