"""Sensor record model for the ``/show_data`` feed."""

from __future__ import annotations

import logging
import math
from typing import Any

from pydantic import AliasChoices, Field, ValidationInfo, field_validator

from pyfallmon.models._base import FallMonBaseModel

_logger = logging.getLogger(__name__)

Vector3 = tuple[float, float, float]


class SensorRecord(FallMonBaseModel):
    """One fall event as stored by the service.

    Records have no reliable identity of their own; the feed is diffed by
    position, so ``device_id`` may legitimately be empty.

    Parameters
    ----------
    device_id : str
        Reporting device. Empty when the service did not populate it.
    time : str
        Event timestamp exactly as the service formatted it.
    acc_x, acc_y, acc_z : float
        Accelerometer reading in m/s².
    gyro_x, gyro_y, gyro_z : float
        Gyroscope reading.
    """

    device_id: str = Field(default="", validation_alias=AliasChoices("device_id", "deviceId"))
    time: str = Field(default="", validation_alias=AliasChoices("time", "timestamp"))
    acc_x: float = 0.0
    acc_y: float = 0.0
    acc_z: float = 0.0
    gyro_x: float = 0.0
    gyro_y: float = 0.0
    gyro_z: float = 0.0

    @field_validator("device_id", "time", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any, info: ValidationInfo) -> str:
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        _logger.warning("Ignoring unusable %s=%r in sensor record", info.field_name, value)
        return ""

    @field_validator("acc_x", "acc_y", "acc_z", "gyro_x", "gyro_y", "gyro_z", mode="before")
    @classmethod
    def _coerce_float(cls, value: Any, info: ValidationInfo) -> float:
        # Unusable readings become 0.0; the record still counts as a fall event.
        try:
            result = float(value)
        except (TypeError, ValueError):
            result = math.nan
        if isinstance(value, bool) or math.isnan(result):
            _logger.warning("Ignoring unusable %s=%r in sensor record", info.field_name, value)
            return 0.0
        return result

    @property
    def acc(self) -> Vector3:
        return (self.acc_x, self.acc_y, self.acc_z)

    @property
    def gyro(self) -> Vector3:
        return (self.gyro_x, self.gyro_y, self.gyro_z)

    def to_payload(self) -> dict[str, Any]:
        """Wire representation (snake_case keys, as the service stores them)."""
        return self.model_dump()

    @classmethod
    def test_record(cls, device_id: str, timestamp: str) -> SensorRecord:
        """Build the stationary record used for manual test injection."""
        return cls(
            device_id=device_id,
            time=timestamp,
            acc_x=0.0,
            acc_y=0.0,
            acc_z=9.81,
            gyro_x=0.0,
            gyro_y=0.0,
            gyro_z=0.0,
        )


SensorSnapshot = tuple[SensorRecord, ...]
"""All records the service holds at one poll, in source order."""
