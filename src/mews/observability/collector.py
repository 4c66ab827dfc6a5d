"""Build collector — records pipeline activity into the event log.

The render pipeline and the plugin registry report through a single
collector so a build's records end up in one ``EventLog``.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.

"""

from __future__ import annotations

from mews.observability.events import (
    ActivityReport,
    EventProcessed,
    UnitSkipped,
    UnitWritten,
    now_ns,
)
from mews.observability.log import EventLog


class BuildCollector:
    """Unified record collector for a build.

    Args:
        log: The EventLog to store records in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    def record_write(
        self,
        collection: str,
        unit_id: str,
        destination: str,
        *,
        size_bytes: int = 0,
    ) -> None:
        """Record a written unit."""
        self._log.append(
            UnitWritten(
                collection=collection,
                unit_id=unit_id,
                destination=destination,
                size_bytes=size_bytes,
                timestamp_ns=now_ns(),
            )
        )

    def record_skip(self, collection: str, unit_id: str, *, reason: str = "") -> None:
        """Record a unit skipped without being written."""
        self._log.append(
            UnitSkipped(
                collection=collection,
                unit_id=unit_id,
                reason=reason,
                timestamp_ns=now_ns(),
            )
        )

    def record_event(
        self,
        event_name: str,
        *,
        handlers: int = 0,
        duration_ms: float = 0.0,
    ) -> None:
        """Record a completed plugin event chain."""
        self._log.append(
            EventProcessed(
                event_name=event_name,
                handlers=handlers,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_activity(self, report: ActivityReport) -> None:
        """Record an activity timing report."""
        self._log.append(report)
