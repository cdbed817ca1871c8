"""Custom exception hierarchy for pyfallmon."""

from __future__ import annotations


class FallMonError(Exception):
    """Base exception for all pyfallmon errors."""


class FallMonConfigError(FallMonError):
    """Invalid or missing configuration."""


class FallMonTransportError(FallMonError):
    """Connection-level failure (refused, reset, DNS, timeout)."""

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class FallMonProtocolError(FallMonError):
    """The service answered, but not with something usable.

    Covers non-2xx statuses, bodies that are not JSON, and JSON that does
    not have the expected shape.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class InvariantViolation(FallMonError):
    """A notification batch would break the ledger's id ordering.

    This is never a transient condition. The loop that hit it stops
    appending and the error is re-raised to whoever awaits the loop.
    """

    def __init__(self, message: str, *, offending_id: int | None = None, current_max_id: int = 0) -> None:
        self.offending_id = offending_id
        self.current_max_id = current_max_id
        super().__init__(message)


class SubmissionFailed(FallMonError):
    """A manual fall report could not be delivered.

    The underlying transport or protocol error is chained as ``__cause__``.
    """

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


TransportError = FallMonTransportError
ProtocolError = FallMonProtocolError
