"""Notification model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from pyfallmon._constants import FALL_DETECTED_SUFFIX, UNKNOWN_DEVICE_ID
from pyfallmon.models.sensor import SensorRecord


def fall_detected_message(record: SensorRecord) -> str:
    device_id = record.device_id.strip() or UNKNOWN_DEVICE_ID
    return f"{device_id} {FALL_DETECTED_SUFFIX}"


class Notification(BaseModel):
    """One entry of the fall-event feed.

    Parameters
    ----------
    id : int
        1-based sequence number, assigned by the ledger and never reused.
    message : str
        Human-readable text, e.g. ``"d1 Fall detected"``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: int = Field(ge=1)
    message: str

    @classmethod
    def fall_detected(cls, notification_id: int, record: SensorRecord) -> Notification:
        return cls(id=notification_id, message=fall_detected_message(record))
