"""Client configuration for pyfallmon."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyfallmon._constants import (
    BASE_URL,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_TEST_DEVICE_ID,
)
from pyfallmon.exceptions import FallMonConfigError


def _env_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise FallMonConfigError(f"{name} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class FallMonConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Root URL of the fall-detection service. A trailing ``/`` is ignored.
    api_key : str
        Pre-provisioned key sent with manual fall reports. Never logged.
    poll_interval : float
        Period in seconds of every polling loop.
    request_timeout : float
        Upper bound in seconds for a single HTTP round-trip. Must not
        exceed ``poll_interval`` so a slow service cannot build a backlog.
    test_device_id : str
        Device id used by the default manual test record.
    """

    base_url: str = BASE_URL
    api_key: str = ""
    poll_interval: float = DEFAULT_POLL_INTERVAL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    test_device_id: str = DEFAULT_TEST_DEVICE_ID

    @property
    def root_url(self) -> str:
        return self.base_url.rstrip("/")

    def url(self, endpoint: str) -> str:
        return f"{self.root_url}{endpoint}"

    def validate(self) -> FallMonConfig:
        """Check value ranges, returning ``self`` so calls can be chained."""
        if not self.root_url:
            raise FallMonConfigError("base_url must be non-empty")
        if self.poll_interval <= 0:
            raise FallMonConfigError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.request_timeout <= 0:
            raise FallMonConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        if self.request_timeout > self.poll_interval:
            raise FallMonConfigError(
                f"request_timeout ({self.request_timeout}s) must not exceed poll_interval ({self.poll_interval}s)"
            )
        return self

    @classmethod
    def from_env(cls, **overrides: Any) -> FallMonConfig:
        """Create configuration from environment variables.

        Reads ``FALLMON_BASE_URL``, ``FALLMON_API_KEY``,
        ``FALLMON_POLL_INTERVAL``, ``FALLMON_REQUEST_TIMEOUT`` and
        ``FALLMON_TEST_DEVICE_ID``. Explicit keyword arguments override
        environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "FALLMON_BASE_URL": "base_url",
            "FALLMON_API_KEY": "api_key",
            "FALLMON_TEST_DEVICE_ID": "test_device_id",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        # Numeric fields, handle separately
        for env_key, field_name in (
            ("FALLMON_POLL_INTERVAL", "poll_interval"),
            ("FALLMON_REQUEST_TIMEOUT", "request_timeout"),
        ):
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
