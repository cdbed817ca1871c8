"""Suffix differencing for an append-only feed.

Records have no reliable key, so new records are found by position: the
records past the end of the previous snapshot are the new ones. This is
only correct while the service appends without deleting or reordering.
"""

from __future__ import annotations

import logging

from pyfallmon.models.sensor import SensorSnapshot

_logger = logging.getLogger(__name__)


class SnapshotDiffer:
    """Tracks the diff baseline for the sensor feed.

    Detection and baseline advance are separate steps so the caller can
    advance only once the detected records were recorded successfully.
    """

    def __init__(self, baseline: SensorSnapshot = ()) -> None:
        self._baseline: SensorSnapshot = baseline

    @property
    def baseline(self) -> SensorSnapshot:
        return self._baseline

    def detect(self, current: SensorSnapshot) -> SensorSnapshot:
        """Return the records appended since the baseline, in source order."""
        new_count = len(current) - len(self._baseline)
        if new_count <= 0:
            return ()
        return current[-new_count:]

    def advance(self, current: SensorSnapshot) -> bool:
        """Adopt *current* as the baseline unless it is shorter.

        A shrinking feed keeps the old baseline; adopting it would make the
        next real growth look smaller than it is. Returns whether the
        baseline moved.
        """
        if len(current) < len(self._baseline):
            _logger.warning(
                "Sensor feed shrank from %d to %d record(s); keeping previous baseline",
                len(self._baseline),
                len(current),
            )
            return False
        self._baseline = current
        return True

    def diff(self, current: SensorSnapshot) -> SensorSnapshot:
        """Detect new records and advance in one step."""
        appended = self.detect(current)
        self.advance(current)
        return appended
