"""Event log — queryable, thread-safe store of build records.

Stores a bounded ring buffer of ``BuildRecord`` objects for inspection.
Supports querying by record type, time range, and collection.

Thread Safety:
    All methods are protected by a ``threading.Lock``, so a log may be
    shared between builds running in different threads.

"""

import threading
from collections import deque

from mews.observability.events import BuildRecord


class EventLog:
    """Bounded record store with query support.

    Records are stored in a ring buffer (deque with maxlen).  When the
    buffer is full, the oldest records are discarded automatically.

    Args:
        max_events: Maximum number of records to retain.

    """

    __slots__ = ("_events", "_lock")

    def __init__(self, max_events: int = 10_000) -> None:
        self._events: deque[BuildRecord] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def append(self, event: BuildRecord) -> None:
        """Record an event in the log."""
        with self._lock:
            self._events.append(event)

    def query(
        self,
        *,
        event_type: type | None = None,
        since_ns: int = 0,
        collection: str | None = None,
        limit: int = 100,
    ) -> list[BuildRecord]:
        """Query records with optional filters.

        Args:
            event_type: Only return records of this type.
            since_ns: Only return records after this timestamp (nanoseconds).
            collection: Only return records of this collection (exact match).
            limit: Maximum number of records to return.

        Returns:
            List of matching records, most recent first.

        """
        with self._lock:
            results: list[BuildRecord] = []
            for event in reversed(self._events):
                if len(results) >= limit:
                    break

                if event_type is not None and not isinstance(event, event_type):
                    continue

                if since_ns and event.timestamp_ns < since_ns:
                    continue

                if collection is not None and getattr(event, "collection", None) != collection:
                    continue

                results.append(event)

            return results

    def clear(self) -> int:
        """Clear all records and return the count that was cleared."""
        with self._lock:
            count = len(self._events)
            self._events.clear()
            return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
