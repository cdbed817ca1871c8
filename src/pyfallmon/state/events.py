"""Poll cycle phases and outcomes."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class PollPhase(StrEnum):
    IDLE = "idle"
    FETCHING = "fetching"
    APPLYING = "applying"
    SKIPPING = "skipping"


class PollOutcome(BaseModel):
    """What one poll cycle did.

    ``phase`` is the terminal phase of the cycle: ``APPLYING`` when the
    fetched data was incorporated, ``SKIPPING`` when the cycle was a no-op
    because of a fetch or parse failure.
    """

    model_config = ConfigDict(frozen=True)

    loop: str
    phase: PollPhase
    emitted: int = Field(default=0, ge=0, description="Notifications appended this cycle")
    error: str | None = None
    finished_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def applied(self) -> bool:
        return self.phase == PollPhase.APPLYING
