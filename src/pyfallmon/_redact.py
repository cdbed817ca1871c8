"""Masking of credentials in logged request bodies."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_SECRET_FIELDS: frozenset[str] = frozenset({"api_key"})


def redact_for_log(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Copy of a flat JSON body with secret fields masked."""
    return {key: "<redacted>" if key in _SECRET_FIELDS else value for key, value in payload.items()}
