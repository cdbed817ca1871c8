from __future__ import annotations

from datetime import UTC, datetime

from pyfallmon.exceptions import FallMonTransportError
from pyfallmon.models.stats import DeviceStats
from pyfallmon.state.store import MonitorState


def _dt() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


def test_device_stats_replaced_wholesale() -> None:
    state = MonitorState(clock=_dt)
    first = DeviceStats(active_count=3, total_count=10)
    second = DeviceStats(active_count=1, total_count=11)

    assert state.device_stats is None
    state.publish_device_stats(first)
    state.publish_device_stats(second)

    assert state.device_stats is second


def test_failure_and_success_bookkeeping() -> None:
    state = MonitorState(clock=_dt)

    state.record_failure("device_stats", FallMonTransportError("refused"))
    health = state.record_failure("device_stats", FallMonTransportError("timed out"))

    assert health.failures == 2
    assert health.consecutive_failures == 2
    assert health.last_error == "timed out"
    assert health.last_failure_at == _dt()

    state.record_success("device_stats")
    health = state.health("device_stats")
    assert health.failures == 2
    assert health.consecutive_failures == 0
    assert health.last_success_at == _dt()


def test_loops_are_tracked_independently() -> None:
    state = MonitorState(clock=_dt)

    state.record_failure("device_stats", FallMonTransportError("refused"))

    assert state.failure_count("device_stats") == 1
    assert state.failure_count("sensor_feed") == 0


def test_default_ledger_is_created() -> None:
    state = MonitorState()

    assert len(state.ledger) == 0
