"""Typed models for fall-detection service payloads."""

from pyfallmon.models.notification import Notification, fall_detected_message
from pyfallmon.models.requests import FallReport
from pyfallmon.models.sensor import SensorRecord, SensorSnapshot, Vector3
from pyfallmon.models.stats import DeviceStats

__all__ = [
    "DeviceStats",
    "FallReport",
    "Notification",
    "SensorRecord",
    "SensorSnapshot",
    "Vector3",
    "fall_detected_message",
]
