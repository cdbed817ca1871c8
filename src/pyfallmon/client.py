"""High-level async client for the fall-detection monitoring service."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from pyfallmon._api.fall_detection import submit_fall_report as _submit_fall_report
from pyfallmon._constants import LOOP_CLOCK
from pyfallmon._polling import PeriodicTask
from pyfallmon._transport import HttpTransport, Transport
from pyfallmon.clock import Clock
from pyfallmon.config import FallMonConfig
from pyfallmon.exceptions import FallMonError
from pyfallmon.models.notification import Notification
from pyfallmon.models.sensor import SensorRecord
from pyfallmon.models.stats import DeviceStats
from pyfallmon.pollers import DeviceStatsPoller, SensorFeedPoller
from pyfallmon.state.events import PollOutcome
from pyfallmon.state.store import MonitorState

_logger = logging.getLogger(__name__)


class FallMonClient:
    """Async client that keeps a live view of the fall-detection service.

    Usage::

        async with FallMonClient(config) as client:
            client.start()
            ...
            print(client.total_devices, client.fall_count)

    Three loops run once per ``config.poll_interval``: the clock, the
    device-stats poller and the sensor-feed poller. They are independent;
    a failing endpoint only affects its own loop.
    """

    def __init__(
        self,
        config: FallMonConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        clock: Clock | None = None,
        on_notification: Callable[[Notification], None] | None = None,
        on_device_stats: Callable[[DeviceStats], None] | None = None,
    ) -> None:
        self._config = config.validate()
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = None
        self._clock = clock if clock is not None else Clock()
        self._state = MonitorState()
        self._on_notification = on_notification
        self._on_device_stats = on_device_stats
        self._stats_poller: DeviceStatsPoller | None = None
        self._feed_poller: SensorFeedPoller | None = None
        self._tasks: list[PeriodicTask] = []

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FallMonClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._attach_transport(HttpTransport(self._config, self._http_session))
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None

    def _attach_transport(self, transport: Transport) -> None:
        self._transport = transport
        self._stats_poller = DeviceStatsPoller(
            transport,
            self._state,
            on_device_stats=self._on_device_stats,
        )
        self._feed_poller = SensorFeedPoller(
            transport,
            self._state,
            on_notification=self._on_notification,
        )

    def _require_pollers(self) -> tuple[DeviceStatsPoller, SensorFeedPoller]:
        if self._stats_poller is None or self._feed_poller is None:
            raise FallMonError("Client not initialized. Use 'async with FallMonClient(...) as client:'")
        return self._stats_poller, self._feed_poller

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise FallMonError("Client not initialized. Use 'async with FallMonClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Polling loops
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return any(task.is_running for task in self._tasks)

    def start(self) -> None:
        """Start the clock, device-stats and sensor-feed loops.

        Calling this again restarts any loop that was stopped by an error
        and leaves running loops alone. A sensor-feed loop halted by an
        :class:`InvariantViolation` stops again on its first tick.
        """
        stats_poller, feed_poller = self._require_pollers()
        if not self._tasks:
            interval = self._config.poll_interval
            self._tasks = [
                PeriodicTask(LOOP_CLOCK, interval, self._clock.async_tick),
                PeriodicTask(stats_poller.name, interval, stats_poller.poll_once),
                PeriodicTask(feed_poller.name, interval, feed_poller.poll_once),
            ]
        for task in self._tasks:
            task.start()

    async def stop(self) -> None:
        """Stop every loop and abort in-flight requests."""
        tasks, self._tasks = self._tasks, []
        await asyncio.gather(*(task.stop() for task in tasks))

    async def run_forever(self) -> None:
        """Run the loops until cancelled, re-raising a fatal loop error."""
        self.start()
        try:
            await asyncio.gather(*(task.join() for task in self._tasks))
        finally:
            await self.stop()

    async def poll_device_stats(self) -> PollOutcome:
        """Run one device-stats cycle outside the schedule."""
        stats_poller, _ = self._require_pollers()
        return await stats_poller.poll_once()

    async def poll_sensor_feed(self) -> PollOutcome:
        """Run one sensor-feed cycle outside the schedule."""
        _, feed_poller = self._require_pollers()
        return await feed_poller.poll_once()

    # ------------------------------------------------------------------
    # Presentation read surface
    # ------------------------------------------------------------------

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def now_text(self) -> str:
        return self._clock.now_text

    @property
    def device_stats(self) -> DeviceStats | None:
        return self._state.device_stats

    @property
    def total_devices(self) -> int:
        stats = self._state.device_stats
        return stats.total_count if stats is not None else 0

    @property
    def notifications(self) -> tuple[Notification, ...]:
        return self._state.ledger.snapshot()

    @property
    def fall_count(self) -> int:
        return len(self._state.ledger)

    # ------------------------------------------------------------------
    # Manual test injection
    # ------------------------------------------------------------------

    async def submit_fall_report(self, record: SensorRecord | None = None) -> Any:
        """Send one fall report and return the service's decoded reply.

        Without *record*, a stationary test record for
        ``config.test_device_id`` stamped with the current clock text is sent.
        The report does not touch the ledger; if the service stores it, it
        shows up through the sensor-feed loop like any other event.

        Raises
        ------
        SubmissionFailed
            If the request failed or was rejected.
        """
        transport = self._require_transport()
        if record is None:
            record = SensorRecord.test_record(self._config.test_device_id, self._clock.tick())
        return await _submit_fall_report(self._config, transport, record)
