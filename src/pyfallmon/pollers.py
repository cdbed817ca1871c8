"""Polling cycles for device stats and the sensor feed.

Each poller runs one fetch-and-apply cycle per call to ``poll_once``:
``idle -> fetching -> applying | skipping -> idle``. Transport and
protocol failures are recovered here: they are logged, counted in the
monitor state, and the cycle is skipped without touching published data.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TypeVar

from pyfallmon._api.sensor_feed import fetch_sensor_snapshot
from pyfallmon._api.stats import fetch_device_stats
from pyfallmon._constants import LOOP_DEVICE_STATS, LOOP_SENSOR_FEED
from pyfallmon._transport import Transport
from pyfallmon.exceptions import FallMonProtocolError, FallMonTransportError, InvariantViolation
from pyfallmon.ingestion.differ import SnapshotDiffer
from pyfallmon.models.notification import Notification, fall_detected_message
from pyfallmon.models.stats import DeviceStats
from pyfallmon.state.events import PollOutcome, PollPhase
from pyfallmon.state.store import MonitorState

_logger = logging.getLogger(__name__)

T = TypeVar("T")

_RECOVERABLE = (FallMonTransportError, FallMonProtocolError)


def _notify(listener: Callable[[T], None] | None, value: T) -> None:
    """Call a presentation listener; its failures must not stop polling."""
    if listener is None:
        return
    try:
        listener(value)
    except Exception:
        _logger.exception("Listener %r raised", listener)


class _Poller:
    name: str = ""

    def __init__(self, transport: Transport, state: MonitorState) -> None:
        self._transport = transport
        self._state = state
        self._phase = PollPhase.IDLE

    @property
    def phase(self) -> PollPhase:
        return self._phase

    def _skip(self, exc: Exception) -> PollOutcome:
        self._phase = PollPhase.SKIPPING
        health = self._state.record_failure(self.name, exc)
        _logger.warning(
            "%s poll failed (%d consecutive, %d total): %s",
            self.name,
            health.consecutive_failures,
            health.failures,
            exc,
        )
        return PollOutcome(loop=self.name, phase=PollPhase.SKIPPING, error=str(exc))


class DeviceStatsPoller(_Poller):
    """Publishes the latest device counts; failures keep the previous value."""

    name = LOOP_DEVICE_STATS

    def __init__(
        self,
        transport: Transport,
        state: MonitorState,
        *,
        on_device_stats: Callable[[DeviceStats], None] | None = None,
    ) -> None:
        super().__init__(transport, state)
        self._on_device_stats = on_device_stats

    async def poll_once(self) -> PollOutcome:
        self._phase = PollPhase.FETCHING
        try:
            try:
                stats = await fetch_device_stats(self._transport)
            except _RECOVERABLE as exc:
                return self._skip(exc)

            self._phase = PollPhase.APPLYING
            self._state.publish_device_stats(stats)
            self._state.record_success(self.name)
            _notify(self._on_device_stats, stats)
            return PollOutcome(loop=self.name, phase=PollPhase.APPLYING)
        finally:
            self._phase = PollPhase.IDLE


class SensorFeedPoller(_Poller):
    """Turns growth of the sensor feed into fall notifications.

    The fetch, diff and ledger append of one cycle run under a lock, so a
    cycle never diffs against a baseline another cycle is still updating.
    After an :class:`InvariantViolation` the poller refuses further cycles.
    """

    name = LOOP_SENSOR_FEED

    def __init__(
        self,
        transport: Transport,
        state: MonitorState,
        *,
        differ: SnapshotDiffer | None = None,
        on_notification: Callable[[Notification], None] | None = None,
    ) -> None:
        super().__init__(transport, state)
        self._differ = differ if differ is not None else SnapshotDiffer()
        self._on_notification = on_notification
        self._cycle_lock = asyncio.Lock()
        self._fault: InvariantViolation | None = None

    @property
    def differ(self) -> SnapshotDiffer:
        return self._differ

    @property
    def fault(self) -> InvariantViolation | None:
        return self._fault

    async def poll_once(self) -> PollOutcome:
        async with self._cycle_lock:
            if self._fault is not None:
                raise self._fault
            self._phase = PollPhase.FETCHING
            try:
                return await self._cycle()
            finally:
                self._phase = PollPhase.IDLE

    async def _cycle(self) -> PollOutcome:
        try:
            snapshot = await fetch_sensor_snapshot(self._transport)
        except _RECOVERABLE as exc:
            return self._skip(exc)

        self._phase = PollPhase.APPLYING
        appended = self._differ.detect(snapshot)
        issued: tuple[Notification, ...] = ()
        if appended:
            try:
                issued = self._state.ledger.issue(fall_detected_message(record) for record in appended)
            except InvariantViolation as exc:
                self._fault = exc
                raise
        self._differ.advance(snapshot)
        self._state.record_success(self.name)

        if issued:
            _logger.info(
                "%d new fall event(s), notifications %d-%d",
                len(issued),
                issued[0].id,
                issued[-1].id,
            )
            for notification in issued:
                _notify(self._on_notification, notification)
        return PollOutcome(loop=self.name, phase=PollPhase.APPLYING, emitted=len(issued))
