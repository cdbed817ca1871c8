"""Device statistics endpoint.

Endpoint:
  - GET /get_device_stats -> {"status_0_count": int, "total_devices": int}
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from pyfallmon._constants import DEVICE_STATS_ENDPOINT
from pyfallmon._transport import Transport
from pyfallmon.exceptions import FallMonProtocolError
from pyfallmon.models.stats import DeviceStats

_logger = logging.getLogger(__name__)


async def fetch_device_stats(transport: Transport) -> DeviceStats:
    """Fetch the current device counts.

    Raises
    ------
    FallMonTransportError
        If the service could not be reached in time.
    FallMonProtocolError
        If the response is not a JSON object carrying both counts.
    """
    body = await transport.get_json(DEVICE_STATS_ENDPOINT)
    if not isinstance(body, dict):
        raise FallMonProtocolError(
            f"{DEVICE_STATS_ENDPOINT} returned {type(body).__name__}, expected an object",
            endpoint=DEVICE_STATS_ENDPOINT,
        )
    try:
        stats = DeviceStats.model_validate(body)
    except ValidationError as exc:
        raise FallMonProtocolError(
            f"{DEVICE_STATS_ENDPOINT} body rejected: {exc.error_count()} invalid field(s)",
            endpoint=DEVICE_STATS_ENDPOINT,
        ) from exc
    _logger.debug("Device stats active=%d total=%d", stats.active_count, stats.total_count)
    return stats
