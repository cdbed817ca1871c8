"""pyfallmon - Async monitoring client for a fall-detection sensor network."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyfallmon")
except PackageNotFoundError:
    __version__ = "0+local"
from pyfallmon.client import FallMonClient
from pyfallmon.clock import Clock, format_timestamp
from pyfallmon.config import FallMonConfig
from pyfallmon.exceptions import (
    FallMonConfigError,
    FallMonError,
    FallMonProtocolError,
    FallMonTransportError,
    InvariantViolation,
    ProtocolError,
    SubmissionFailed,
    TransportError,
)
from pyfallmon.ingestion.differ import SnapshotDiffer
from pyfallmon.models import DeviceStats, FallReport, Notification, SensorRecord, SensorSnapshot
from pyfallmon.state.events import PollOutcome, PollPhase
from pyfallmon.state.ledger import NotificationLedger
from pyfallmon.state.store import LoopHealth, MonitorState

__all__ = [
    "__version__",
    "Clock",
    "DeviceStats",
    "FallMonClient",
    "FallMonConfig",
    "FallMonConfigError",
    "FallMonError",
    "FallMonProtocolError",
    "FallMonTransportError",
    "FallReport",
    "InvariantViolation",
    "LoopHealth",
    "MonitorState",
    "Notification",
    "NotificationLedger",
    "PollOutcome",
    "PollPhase",
    "ProtocolError",
    "SensorRecord",
    "SensorSnapshot",
    "SnapshotDiffer",
    "SubmissionFailed",
    "TransportError",
    "format_timestamp",
]
