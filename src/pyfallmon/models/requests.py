"""Pydantic request models for client entrypoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from pyfallmon.models.sensor import SensorRecord


class FallReport(BaseModel):
    """Body of ``POST /fall-detection``: a sensor record plus the API key."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    record: SensorRecord
    api_key: str

    def to_payload(self) -> dict[str, Any]:
        payload = self.record.to_payload()
        payload["api_key"] = self.api_key
        return payload
