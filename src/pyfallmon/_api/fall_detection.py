"""Manual fall report endpoint.

Endpoint:
  - POST /fall-detection  (sensor record + api_key, JSON)
"""

from __future__ import annotations

import logging
from typing import Any

from pyfallmon._constants import FALL_DETECTION_ENDPOINT
from pyfallmon._transport import Transport
from pyfallmon.config import FallMonConfig
from pyfallmon.exceptions import FallMonProtocolError, FallMonTransportError, SubmissionFailed
from pyfallmon.models.requests import FallReport
from pyfallmon.models.sensor import SensorRecord

_logger = logging.getLogger(__name__)


async def submit_fall_report(
    config: FallMonConfig,
    transport: Transport,
    record: SensorRecord,
) -> Any:
    """Send one fall report to the service.

    Exactly one request is made; there is no retry.

    Parameters
    ----------
    config : FallMonConfig
        Client configuration (provides the API key).
    transport : Transport
        HTTP transport.
    record : SensorRecord
        The record to report.

    Returns
    -------
    Any
        The decoded JSON response, passed through unchanged.

    Raises
    ------
    SubmissionFailed
        If the request failed or the service rejected it.
    """
    report = FallReport(record=record, api_key=config.api_key)
    try:
        result = await transport.post_json(FALL_DETECTION_ENDPOINT, report.to_payload())
    except (FallMonTransportError, FallMonProtocolError) as exc:
        raise SubmissionFailed(
            f"Fall report for {record.device_id or '<no device>'} failed: {exc}",
            endpoint=FALL_DETECTION_ENDPOINT,
        ) from exc
    _logger.info("Fall report for %s accepted", record.device_id)
    return result
