"""Activity timer — named timestamp spans reduced to mean durations.

Each activity owns an ordered list of timestamps.  Consecutive pairs are
read as (start, end) spans::

    timer = ActivityTimer()
    aid = timer.get_or_create("file.render")
    timer.mark(aid)
    # ... render ...
    timer.mark(aid)
    durations = timer.destroy(aid)   # [elapsed_ms]

A render pipeline keeps one timer per collection and calls ``report()``
once a write batch settles; activities never outlive a batch.

"""

from __future__ import annotations

import math
import statistics
import sys
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from mews._types import ActivityID
from mews.observability.events import ActivityReport, now_ns

_NS_PER_MS = 1_000_000


@dataclass(slots=True)
class Activity:
    """Timestamps recorded for one named activity."""

    name: str
    timestamps: list[int] = field(default_factory=list)

    @property
    def open_mark(self) -> int | None:
        """Trailing start timestamp that has no matching end, if any."""
        if len(self.timestamps) % 2:
            return self.timestamps[-1]
        return None

    def durations(self) -> list[float]:
        """Pairwise (end - start) spans in milliseconds."""
        stamps = self.timestamps
        return [
            (stamps[i + 1] - stamps[i]) / _NS_PER_MS
            for i in range(0, len(stamps) - 1, 2)
        ]


class ActivityTimer:
    """Per-collection registry of named activities.

    Args:
        clock: Nanosecond clock; defaults to the monotonic clock.

    """

    __slots__ = ("_activities", "_clock", "_ids", "_next_id")

    def __init__(self, clock: Callable[[], int] = now_ns) -> None:
        self._clock = clock
        self._ids: dict[str, ActivityID] = {}
        self._activities: dict[ActivityID, Activity] = {}
        self._next_id = 1

    def get_or_create(self, name: str) -> ActivityID:
        """Return the id for *name*, creating the activity on first use."""
        activity_id = self._ids.get(name)
        if activity_id is None:
            activity_id = self._next_id
            self._next_id += 1
            self._ids[name] = activity_id
            self._activities[activity_id] = Activity(name=name)
        return activity_id

    def mark(self, activity_id: ActivityID) -> None:
        """Append the current timestamp to an activity."""
        self._activities[activity_id].timestamps.append(self._clock())

    @contextmanager
    def span(self, name: str) -> Iterator[None]:
        """Time the enclosed block as one (start, end) pair of *name*.

        Both timestamps are appended together when the block exits, so
        spans from concurrently running tasks never interleave.

        """
        activity_id = self.get_or_create(name)
        start = self._clock()
        try:
            yield
        finally:
            self._activities[activity_id].timestamps.extend((start, self._clock()))

    def get(self, activity_id: ActivityID) -> Activity:
        """Return the live activity for *activity_id*."""
        return self._activities[activity_id]

    def destroy(self, activity_id: ActivityID) -> list[float]:
        """Discard an activity and return its span durations in milliseconds."""
        activity = self._activities.pop(activity_id)
        del self._ids[activity.name]
        return activity.durations()

    @property
    def names(self) -> tuple[str, ...]:
        """Names of live activities, in creation order."""
        return tuple(self._ids)

    def report(self, collection_id: str, *, verbose: bool = False) -> list[ActivityReport]:
        """Destroy every activity and return one mean-duration report per name.

        Means are rounded half up.  An unpaired trailing mark is carried on
        the report as ``open_mark`` and warned about on stderr.  Activities
        with neither a complete span nor an open mark produce no report.
        With *verbose*, one summary line per report is printed to stderr.

        """
        reports: list[ActivityReport] = []
        for name, activity_id in list(self._ids.items()):
            open_mark = self._activities[activity_id].open_mark
            durations = self.destroy(activity_id)
            if not durations and open_mark is None:
                continue
            if open_mark is not None:
                print(f"  warn: {collection_id}: {name} has an unpaired mark", file=sys.stderr)
            reports.append(ActivityReport(
                collection=collection_id,
                name=name,
                mean_ms=math.floor(statistics.mean(durations) + 0.5) if durations else 0,
                samples=len(durations),
                timestamp_ns=now_ns(),
                open_mark=open_mark,
            ))

        if verbose:
            for r in reports:
                print(f"  {r.collection}: {r.name} {r.mean_ms}ms (x{r.samples})", file=sys.stderr)

        return reports
