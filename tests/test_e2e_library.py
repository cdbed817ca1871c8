from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import pytest

from pyfallmon.client import FallMonClient
from pyfallmon.clock import Clock
from pyfallmon.config import FallMonConfig
from pyfallmon.exceptions import (
    FallMonError,
    FallMonProtocolError,
    FallMonTransportError,
    InvariantViolation,
    SubmissionFailed,
)
from pyfallmon.models.notification import Notification
from pyfallmon.models.sensor import SensorRecord
from pyfallmon.pollers import DeviceStatsPoller
from pyfallmon.state.ledger import NotificationLedger


@dataclass
class FakeFallBackend:
    records: list[dict[str, Any]] = field(default_factory=list)
    stats: dict[str, Any] = field(default_factory=lambda: {"status_0_count": 3, "total_devices": 10})
    calls: dict[str, int] = field(default_factory=dict)
    reports: list[dict[str, Any]] = field(default_factory=list)
    fail_endpoints: set[str] = field(default_factory=set)
    store_reports: bool = False

    def _record_call(self, endpoint: str) -> None:
        self.calls[endpoint] = self.calls.get(endpoint, 0) + 1

    def add_fall(self, device_id: str) -> None:
        self.records.append(
            {
                "device_id": device_id,
                "time": "2026-01-01 12:00:00",
                "acc_x": 0.0,
                "acc_y": 0.0,
                "acc_z": 9.81,
                "gyro_x": 0.0,
                "gyro_y": 0.0,
                "gyro_z": 0.0,
            }
        )

    async def get_json(self, endpoint: str) -> Any:
        self._record_call(endpoint)
        if endpoint in self.fail_endpoints:
            raise FallMonTransportError(f"Request to {endpoint} failed: refused", endpoint=endpoint)
        if endpoint == "/get_device_stats":
            return dict(self.stats)
        if endpoint == "/show_data":
            return {"data": [dict(item) for item in self.records]}
        raise FallMonProtocolError(f"HTTP 404 from {endpoint}", status_code=404, endpoint=endpoint)

    async def post_json(self, endpoint: str, payload: Mapping[str, Any]) -> Any:
        self._record_call(endpoint)
        if endpoint in self.fail_endpoints:
            raise FallMonProtocolError(f"HTTP 500 from {endpoint}", status_code=500, endpoint=endpoint)
        self.reports.append(dict(payload))
        if self.store_reports:
            self.records.append({k: v for k, v in payload.items() if k != "api_key"})
        return {"result": "fall detected", "device_id": payload.get("device_id")}


@pytest.fixture
def config() -> FallMonConfig:
    return FallMonConfig(
        base_url="http://fall-backend.test",
        api_key="test-api-key",
        poll_interval=0.01,
        request_timeout=0.01,
    )


@pytest.fixture
def backend(monkeypatch: pytest.MonkeyPatch) -> FakeFallBackend:
    fake_backend = FakeFallBackend()

    async def fake_get_json(_self: Any, endpoint: str) -> Any:
        return await fake_backend.get_json(endpoint)

    async def fake_post_json(_self: Any, endpoint: str, payload: Mapping[str, Any]) -> Any:
        return await fake_backend.post_json(endpoint, payload)

    monkeypatch.setattr("pyfallmon._transport.HttpTransport.get_json", fake_get_json)
    monkeypatch.setattr("pyfallmon._transport.HttpTransport.post_json", fake_post_json)
    return fake_backend


def _fixed_clock() -> Clock:
    return Clock(now=lambda: datetime(2026, 1, 1, 12, 0, 0))


async def _wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0.005)

    await asyncio.wait_for(_poll(), timeout)


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_manual_cycles(config: FallMonConfig, backend: FakeFallBackend) -> None:
    async with FallMonClient(config, clock=_fixed_clock()) as client:
        assert client.total_devices == 0
        assert client.fall_count == 0

        await client.poll_device_stats()
        assert client.total_devices == 10
        assert client.device_stats is not None
        assert client.device_stats.active_count == 3

        backend.add_fall("d1")
        await client.poll_sensor_feed()
        assert [(n.id, n.message) for n in client.notifications] == [(1, "d1 Fall detected")]

        backend.fail_endpoints.add("/get_device_stats")
        await client.poll_device_stats()
        assert client.total_devices == 10

        backend.add_fall("d2")
        backend.add_fall("d3")
        await client.poll_sensor_feed()
        assert client.fall_count == 3
        assert [n.id for n in client.notifications] == [1, 2, 3]


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_loops_pick_up_new_falls(config: FallMonConfig, backend: FakeFallBackend) -> None:
    seen: list[Notification] = []

    async with FallMonClient(config, on_notification=seen.append) as client:
        client.start()
        assert client.is_running

        await _wait_for(lambda: client.total_devices == 10)
        backend.add_fall("d1")
        await _wait_for(lambda: client.fall_count == 1)
        backend.add_fall("d2")
        await _wait_for(lambda: client.fall_count == 2)

        await client.stop()
        assert not client.is_running

    assert [n.message for n in seen] == ["d1 Fall detected", "d2 Fall detected"]
    assert backend.calls["/show_data"] >= 3


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_feed_outage_does_not_stall_stats(config: FallMonConfig, backend: FakeFallBackend) -> None:
    backend.fail_endpoints.add("/show_data")

    async with FallMonClient(config) as client:
        client.start()
        await _wait_for(lambda: client.state.failure_count("sensor_feed") >= 2)
        backend.stats = {"status_0_count": 1, "total_devices": 12}
        await _wait_for(lambda: client.total_devices == 12)

        backend.add_fall("d1")
        backend.fail_endpoints.clear()
        await _wait_for(lambda: client.fall_count == 1)


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_submit_default_test_record(config: FallMonConfig, backend: FakeFallBackend) -> None:
    async with FallMonClient(config, clock=_fixed_clock()) as client:
        result = await client.submit_fall_report()

        assert result == {"result": "fall detected", "device_id": "test7"}
        assert backend.reports == [
            {
                "device_id": "test7",
                "time": "2026-01-01 12:00:00",
                "acc_x": 0.0,
                "acc_y": 0.0,
                "acc_z": 9.81,
                "gyro_x": 0.0,
                "gyro_y": 0.0,
                "gyro_z": 0.0,
                "api_key": "test-api-key",
            }
        ]
        # The report never writes to the ledger directly.
        assert client.fall_count == 0


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_submitted_report_arrives_through_feed(config: FallMonConfig, backend: FakeFallBackend) -> None:
    backend.store_reports = True

    async with FallMonClient(config, clock=_fixed_clock()) as client:
        await client.submit_fall_report(SensorRecord.test_record("bench-2", "2026-01-01 12:00:00"))
        await client.poll_sensor_feed()

        assert [n.message for n in client.notifications] == ["bench-2 Fall detected"]


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_submit_failure(config: FallMonConfig, backend: FakeFallBackend) -> None:
    backend.fail_endpoints.add("/fall-detection")

    async with FallMonClient(config) as client:
        with pytest.raises(SubmissionFailed) as exc_info:
            await client.submit_fall_report()

        assert isinstance(exc_info.value.__cause__, FallMonProtocolError)
        assert client.fall_count == 0
        assert backend.calls["/fall-detection"] == 1


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_invariant_violation_escalates(
    config: FallMonConfig,
    backend: FakeFallBackend,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def broken_issue(_self: NotificationLedger, _messages: Any) -> Any:
        raise InvariantViolation("ids out of order")

    monkeypatch.setattr("pyfallmon.state.ledger.NotificationLedger.issue", broken_issue)
    backend.add_fall("d1")

    async with FallMonClient(config) as client:
        with pytest.raises(InvariantViolation):
            await asyncio.wait_for(client.run_forever(), timeout=2.0)
        assert not client.is_running


@pytest.mark.asyncio
async def test_client_requires_context_manager(config: FallMonConfig) -> None:
    client = FallMonClient(config)

    with pytest.raises(FallMonError, match="not initialized"):
        client.start()
    with pytest.raises(FallMonError, match="not initialized"):
        await client.submit_fall_report()


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_start_restarts_loop_stopped_by_error(
    config: FallMonConfig,
    backend: FakeFallBackend,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    original = DeviceStatsPoller.poll_once
    broken = True

    async def poll_once(self: DeviceStatsPoller) -> Any:
        if broken:
            raise RuntimeError("presentation bug")
        return await original(self)

    monkeypatch.setattr("pyfallmon.pollers.DeviceStatsPoller.poll_once", poll_once)

    async with FallMonClient(config) as client:
        client.start()
        backend.add_fall("d1")
        await _wait_for(lambda: client.fall_count == 1)
        await _wait_for(lambda: not client._tasks[1].is_running)  # noqa: SLF001
        assert client.is_running

        broken = False
        client.start()
        await _wait_for(lambda: client.total_devices == 10)
