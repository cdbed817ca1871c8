"""Sensor feed endpoint.

Endpoint:
  - GET /show_data -> {"data": [<sensor record>, ...]}

The service returns every record it holds on each call; callers diff
consecutive snapshots to find new events.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from pyfallmon._constants import SENSOR_FEED_ENDPOINT
from pyfallmon._transport import Transport
from pyfallmon.exceptions import FallMonProtocolError
from pyfallmon.models.sensor import SensorRecord, SensorSnapshot

_logger = logging.getLogger(__name__)


def parse_snapshot(body: Any) -> SensorSnapshot:
    """Validate a ``/show_data`` body into an ordered tuple of records.

    Only the shape of the list can reject a snapshot: a non-object body,
    ``data`` that is not a list, or an item that is not an object. Bad
    sensor values inside a record fall back to defaults, since diffing
    depends on the list length alone.
    """
    if not isinstance(body, dict):
        raise FallMonProtocolError(
            f"{SENSOR_FEED_ENDPOINT} returned {type(body).__name__}, expected an object",
            endpoint=SENSOR_FEED_ENDPOINT,
        )
    items = body.get("data")
    if not isinstance(items, list):
        raise FallMonProtocolError(
            f"{SENSOR_FEED_ENDPOINT} 'data' is {type(items).__name__}, expected a list",
            endpoint=SENSOR_FEED_ENDPOINT,
        )

    records: list[SensorRecord] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise FallMonProtocolError(
                f"{SENSOR_FEED_ENDPOINT} item {index} is {type(item).__name__}, expected an object",
                endpoint=SENSOR_FEED_ENDPOINT,
            )
        try:
            records.append(SensorRecord.model_validate(item))
        except ValidationError as exc:
            raise FallMonProtocolError(
                f"{SENSOR_FEED_ENDPOINT} item {index} rejected: {exc.error_count()} invalid field(s)",
                endpoint=SENSOR_FEED_ENDPOINT,
            ) from exc
    return tuple(records)


async def fetch_sensor_snapshot(transport: Transport) -> SensorSnapshot:
    """Fetch and validate the full sensor feed."""
    body = await transport.get_json(SENSOR_FEED_ENDPOINT)
    snapshot = parse_snapshot(body)
    _logger.debug("Sensor feed returned %d record(s)", len(snapshot))
    return snapshot
