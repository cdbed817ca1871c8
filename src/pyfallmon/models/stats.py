"""Device statistics model."""

from __future__ import annotations

from pydantic import AliasChoices, Field

from pyfallmon.models._base import FallMonBaseModel


class DeviceStats(FallMonBaseModel):
    """Device counts reported by ``/get_device_stats``.

    Both counts are required; a body missing either one is rejected as a
    whole rather than merged with the previous value.
    """

    active_count: int = Field(ge=0, validation_alias=AliasChoices("status_0_count", "active_count"))
    total_count: int = Field(ge=0, validation_alias=AliasChoices("total_devices", "total_count"))
