"""Render pipeline — drives output units from "ready to render" to "written".

Per unit, in order:
    1. before-render event       (optional, timed under the event name)
    2. ``unit.render(template, site_data)``   (timed as ``file.render``)
    3. after-render event        (optional, result replaces the content)
    4. ``collection.beforeWrite`` over (unit, content)
    5. storage write             (timed as ``storage.write``)
    6. ``collection.afterWrite`` over (unit, content)

A unit without a template is skipped with a warning: no events fire and
nothing is written.

Units of one batch run concurrently.  The batch settles only when every
unit has finished; timings are then reported once per activity name and
the activities discarded.  Failed units do not stop the others: after the
batch settles a single :class:`WriteBatchError` carries every failure.

"""

from __future__ import annotations

import asyncio
import sys
import time
from collections.abc import Awaitable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from mews._errors import MissingTemplateError, WriteBatchError
from mews.observability.activity import ActivityTimer
from mews.plugin.events import Event

if TYPE_CHECKING:
    from mews._types import EventName, OutputUnit, SiteData
    from mews.observability.collector import BuildCollector
    from mews.observability.events import ActivityReport
    from mews.plugin.registry import PluginRegistry
    from mews.storage import Storage

RENDER_ACTIVITY = "file.render"
WRITE_ACTIVITY = "storage.write"


@dataclass(frozen=True, slots=True)
class WrittenUnit:
    """Outcome of one unit in a write batch.

    Attributes:
        unit_id: Id of the file or page.
        destination: Output path (the unit's destination even when skipped).
        size_bytes: Bytes written; 0 when skipped.
        skipped: True when the unit was not rendered or written.
        duration_ms: Wall-clock time spent on the unit.

    """

    unit_id: str
    destination: Path
    size_bytes: int
    skipped: bool
    duration_ms: float


class RenderPipeline:
    """Renders and writes units for one collection.

    Args:
        collection_id: Id used in warnings, records and timing reports.
        registry: Plugin registry the lifecycle events are fired on.
        storage: Write capability.
        encoding: Text encoding passed to the storage write.
        collector: Optional record collector.
        timer: Activity timer; a fresh one per pipeline by default.
        report_timings: Print timing lines to stderr after each batch.

    """

    __slots__ = (
        "_collector",
        "_encoding",
        "_registry",
        "_report_timings",
        "_storage",
        "collection_id",
        "timer",
    )

    def __init__(
        self,
        collection_id: str,
        registry: PluginRegistry,
        storage: Storage,
        *,
        encoding: str = "utf-8",
        collector: BuildCollector | None = None,
        timer: ActivityTimer | None = None,
        report_timings: bool = False,
    ) -> None:
        self.collection_id = collection_id
        self._registry = registry
        self._storage = storage
        self._encoding = encoding
        self._collector = collector
        self.timer = timer if timer is not None else ActivityTimer()
        self._report_timings = report_timings

    async def write_unit(
        self,
        unit: OutputUnit,
        template: str | None,
        site_data: SiteData,
        *,
        before_render: EventName | None = None,
        after_render: EventName | None = None,
    ) -> WrittenUnit:
        """Render and write one unit, or skip it if *template* is missing."""
        t0 = time.perf_counter()
        try:
            template = self._require_template(unit, template)
        except MissingTemplateError as exc:
            print(f"  warn: {exc}", file=sys.stderr)
            if self._collector is not None:
                self._collector.record_skip(self.collection_id, unit.id, reason=str(exc))
            return WrittenUnit(
                unit_id=unit.id,
                destination=unit.destination,
                size_bytes=0,
                skipped=True,
                duration_ms=(time.perf_counter() - t0) * 1000,
            )

        if before_render:
            await self._fire(before_render, unit)

        with self.timer.span(RENDER_ACTIVITY):
            content = unit.render(template, site_data)

        if after_render:
            content = await self._fire(after_render, content)

        unit, content, size = await self.write_to_storage(unit, content)

        return WrittenUnit(
            unit_id=unit.id,
            destination=unit.destination,
            size_bytes=size,
            skipped=False,
            duration_ms=(time.perf_counter() - t0) * 1000,
        )

    async def write_to_storage(
        self, unit: OutputUnit, content: str,
    ) -> tuple[OutputUnit, str, int]:
        """Fire the write events around the storage write.

        Returns the unit and content as left by ``collection.beforeWrite``
        handlers, and the number of bytes written.

        """
        unit, content = await self._fire(Event.COLLECTION_BEFORE_WRITE, unit, content)

        with self.timer.span(WRITE_ACTIVITY):
            size = await self._storage.write(unit.destination, content, self._encoding)

        await self._fire(Event.COLLECTION_AFTER_WRITE, unit, content)

        if self._collector is not None:
            self._collector.record_write(
                self.collection_id, unit.id, str(unit.destination), size_bytes=size,
            )
        return unit, content, size

    async def run_batch(
        self, jobs: Iterable[tuple[str, Awaitable[WrittenUnit]]],
    ) -> list[WrittenUnit]:
        """Run ``(unit_id, job)`` pairs concurrently, join on all, then report timings.

        Raises:
            WriteBatchError: After every job has settled, if any job failed.

        """
        pending = list(jobs)
        outcomes = await asyncio.gather(
            *(job for _, job in pending), return_exceptions=True,
        )

        self.report()

        results: list[WrittenUnit] = []
        failures: list[tuple[str, BaseException]] = []
        for (unit_id, _), outcome in zip(pending, outcomes, strict=True):
            if isinstance(outcome, WrittenUnit):
                results.append(outcome)
            elif isinstance(outcome, Exception):
                failures.append((unit_id, outcome))
            else:
                # CancelledError and friends are not unit failures
                raise outcome

        if failures:
            raise WriteBatchError(self.collection_id, failures, results)
        return results

    def report(self) -> list[ActivityReport]:
        """Reduce and discard every activity of the finished batch."""
        reports = self.timer.report(self.collection_id, verbose=self._report_timings)
        if self._collector is not None:
            for report in reports:
                self._collector.record_activity(report)
        return reports

    async def _fire(self, event_name: EventName, *args: Any) -> Any:
        """Process an event, timed under an activity named after it."""
        with self.timer.span(str(event_name)):
            return await self._registry.process_event(event_name, *args)

    def _require_template(self, unit: OutputUnit, template: str | None) -> str:
        if not template:
            msg = (
                f"No template found when trying to write in collection "
                f"{self.collection_id} for {unit.id}"
            )
            raise MissingTemplateError(msg)
        return template

