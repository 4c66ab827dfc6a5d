"""Mews error hierarchy.

All mews-specific errors inherit from MewsError for easy catching.
"""

from __future__ import annotations

from typing import Any


class MewsError(Exception):
    """Base error for all mews operations."""


class ConfigError(MewsError):
    """Invalid or missing configuration."""


class ContentError(MewsError):
    """Error in content processing (discovery, parsing, front matter)."""


class MissingTemplateError(ContentError):
    """An output unit has no template configured.

    Non-fatal: the render pipeline catches it, warns, and skips the unit.
    """


class PluginError(MewsError):
    """Error loading a plugin or running one of its handlers."""


class ArityMismatchError(PluginError):
    """A handler returned a value whose shape does not match its input.

    Attributes:
        event_name: Event whose chain was running.
        expected: Number of arguments the chain carries.
        actual: What the handler returned, described for the message.

    """

    def __init__(self, event_name: str, expected: int, actual: Any) -> None:
        self.event_name = event_name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Handler for {event_name!r} must return {expected} "
            f"argument{'s' if expected != 1 else ''} or None, got {actual}"
        )


class HandlerSignatureError(PluginError):
    """A handler cannot accept the arguments of the event it was added to."""


class ExportError(MewsError):
    """Error during render or write."""


class WriteBatchError(ExportError):
    """One or more units of a write batch failed.

    Raised only after every unit of the batch has settled.

    Attributes:
        failures: ``(unit_id, exception)`` for every failed unit.
        results: Records of the units that completed.

    """

    def __init__(
        self,
        collection_id: str,
        failures: list[tuple[str, BaseException]],
        results: list[Any] | None = None,
    ) -> None:
        self.collection_id = collection_id
        self.failures = failures
        self.results = results or []
        first_id, first_exc = failures[0]
        super().__init__(
            f"{len(failures)} unit(s) failed in collection {collection_id!r}; "
            f"first: {first_id}: {first_exc}"
        )
