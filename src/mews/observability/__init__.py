"""Build observability — activity timing and a unified record log.

Records produced during a build:
- **UnitWritten / UnitSkipped**: per-unit outcome of a write batch
- **EventProcessed**: a plugin event chain that ran
- **ActivityReport**: mean duration of a named stage per collection

Quick Start:
    >>> from mews.observability import ActivityTimer, BuildCollector, EventLog
    >>> collector = BuildCollector(EventLog())
    >>> timer = ActivityTimer()

"""

from mews.observability.activity import Activity, ActivityTimer
from mews.observability.collector import BuildCollector
from mews.observability.events import (
    ActivityReport,
    BuildRecord,
    EventProcessed,
    UnitSkipped,
    UnitWritten,
    now_ns,
)
from mews.observability.log import EventLog

__all__ = [
    "Activity",
    "ActivityReport",
    "ActivityTimer",
    "BuildCollector",
    "BuildRecord",
    "EventLog",
    "EventProcessed",
    "UnitSkipped",
    "UnitWritten",
    "now_ns",
]
