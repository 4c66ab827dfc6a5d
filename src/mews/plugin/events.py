"""Built-in lifecycle events and their declared argument counts.

Event names share a flat ``<scope>.<phase>`` string namespace.  The built-in
events are members of :class:`Event`; because ``Event`` is a ``StrEnum`` a
member and its string value name the same handler chain.  Plugins may also
use free-form strings for their own extension points.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Event(StrEnum):
    """Lifecycle events fired by the collection render pipeline."""

    FILE_BEFORE_RENDER = "file.beforeRender"
    FILE_AFTER_RENDER = "file.afterRender"
    PAGE_BEFORE_RENDER = "page.beforeRender"
    PAGE_AFTER_RENDER = "page.afterRender"
    COLLECTION_BEFORE_WRITE = "collection.beforeWrite"
    COLLECTION_AFTER_WRITE = "collection.afterWrite"


@dataclass(frozen=True, slots=True)
class EventSpec:
    """Declared shape of a built-in event.

    Attributes:
        event: The event.
        arguments: Names of the positional arguments handlers receive.

    """

    event: Event
    arguments: tuple[str, ...]

    @property
    def arity(self) -> int:
        return len(self.arguments)


EVENT_SPECS: dict[str, EventSpec] = {
    spec.event.value: spec
    for spec in (
        EventSpec(Event.FILE_BEFORE_RENDER, ("file",)),
        EventSpec(Event.FILE_AFTER_RENDER, ("content",)),
        EventSpec(Event.PAGE_BEFORE_RENDER, ("page",)),
        EventSpec(Event.PAGE_AFTER_RENDER, ("content",)),
        EventSpec(Event.COLLECTION_BEFORE_WRITE, ("unit", "content")),
        EventSpec(Event.COLLECTION_AFTER_WRITE, ("unit", "content")),
    )
}


def get_spec(event_name: str) -> EventSpec | None:
    """Return the declared spec for a built-in event, or None for custom names."""
    return EVENT_SPECS.get(str(event_name))
