"""Build event model.

Defines the structured records produced while a site is written:
per-unit write/skip records, plugin event invocations and the activity
timing reports emitted after each write batch.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

"""

import time
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class UnitWritten:
    """A file or collection page was rendered and written.

    Attributes:
        collection: Id of the owning collection.
        unit_id: Id of the written unit.
        destination: Output path.
        size_bytes: Bytes written.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    collection: str
    unit_id: str
    destination: str
    size_bytes: int
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class UnitSkipped:
    """A unit was skipped without rendering or writing.

    Attributes:
        collection: Id of the owning collection.
        unit_id: Id of the skipped unit.
        reason: Human-readable reason.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    collection: str
    unit_id: str
    reason: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class EventProcessed:
    """A plugin event chain ran to completion.

    Attributes:
        event_name: Name of the event.
        handlers: Number of handlers invoked.
        duration_ms: Time spent in the chain.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    event_name: str
    handlers: int
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ActivityReport:
    """Mean duration of one named activity over a write batch.

    Attributes:
        collection: Id of the collection the batch belonged to.
        name: Event or operation name (e.g. ``file.render``).
        mean_ms: Arithmetic mean of all spans, rounded half up.
        samples: Number of complete spans.
        timestamp_ns: Monotonic nanosecond timestamp.
        open_mark: Trailing start timestamp that never got an end, if any.

    """

    collection: str
    name: str
    mean_ms: int
    samples: int
    timestamp_ns: int
    open_mark: int | None = None


type BuildRecord = UnitWritten | UnitSkipped | EventProcessed | ActivityReport


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
