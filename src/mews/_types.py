"""Shared type definitions for mews."""

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Protocol

# Name of a plugin extension point (e.g. "file.beforeRender")
type EventName = str

# Plugin handler: N positional arguments in, None / value / N-sequence out
type Handler = Callable[..., Any]

# Site-wide data shared by every rendered template
type SiteData = Mapping[str, Any]

# Opaque activity identifier handed out by ActivityTimer
type ActivityID = int


class OutputUnit(Protocol):
    """Anything the render pipeline can render and write: a File or a page."""

    id: str

    @property
    def destination(self) -> Path: ...

    def render(self, template: str, site_data: SiteData) -> str: ...
