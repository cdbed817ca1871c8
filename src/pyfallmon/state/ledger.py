"""Append-only notification ledger.

This is the only component allowed to hand out notification ids.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Sequence

from pyfallmon.exceptions import InvariantViolation
from pyfallmon.models.notification import Notification

_logger = logging.getLogger(__name__)


class NotificationLedger:
    """In-memory, monotonically numbered log of notifications.

    Reads return immutable tuples, so a snapshot handed to the presentation
    layer never changes under it, whatever is appended later.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: tuple[Notification, ...] = ()

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def max_id(self) -> int:
        entries = self._entries
        return entries[-1].id if entries else 0

    @property
    def next_id(self) -> int:
        return self.max_id + 1

    def snapshot(self) -> tuple[Notification, ...]:
        """Point-in-time, read-only view in id order."""
        return self._entries

    def append(self, batch: Sequence[Notification]) -> None:
        """Append a batch whose ids were assigned by the caller.

        The whole batch is checked before anything is stored; ids must be
        strictly increasing and above the current maximum.
        """
        with self._lock:
            self._append_locked(tuple(batch))

    def issue(self, messages: Iterable[str]) -> tuple[Notification, ...]:
        """Number *messages* and append them as one batch.

        Id assignment and the append happen under the same lock, so two
        concurrent callers can never be handed the same id.
        """
        with self._lock:
            start = (self._entries[-1].id if self._entries else 0) + 1
            batch = tuple(Notification(id=start + offset, message=text) for offset, text in enumerate(messages))
            self._append_locked(batch)
        return batch

    def _append_locked(self, batch: tuple[Notification, ...]) -> None:
        if not batch:
            return
        current_max = self._entries[-1].id if self._entries else 0
        last = current_max
        for notification in batch:
            if notification.id <= last:
                raise InvariantViolation(
                    f"notification id {notification.id} is not greater than {last}",
                    offending_id=notification.id,
                    current_max_id=current_max,
                )
            last = notification.id
        self._entries = self._entries + batch
        _logger.debug("Ledger now holds %d notification(s), max id %d", len(self._entries), last)
