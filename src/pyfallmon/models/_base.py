"""Base model for fall-detection service payloads.

Every wire model inherits from :class:`FallMonBaseModel` which provides:

* frozen instances, so a record read from the service cannot change
  after it was diffed.
* ``extra="ignore"`` so additional server-side columns do not break
  parsing.
* A ``model_validator(mode="before")`` that drops explicit ``null``
  values so the field default is used instead.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


class FallMonBaseModel(BaseModel):
    """Base for fall-detection service response models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        return {key: value for key, value in values.items() if value is not None}
