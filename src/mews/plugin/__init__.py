"""Plugin system — named extension points in the build lifecycle.

Public API::

    from mews.plugin import Event, PluginRegistry

    registry = PluginRegistry()
    registry.add_handler(Event.FILE_AFTER_RENDER, minify)
    html = await registry.process_event(Event.FILE_AFTER_RENDER, html)
"""

from mews.plugin.events import EVENT_SPECS, Event, EventSpec, get_spec
from mews.plugin.loader import (
    ENTRY_POINT_GROUP,
    load_plugin_module,
    load_plugins,
    load_plugins_from_directory,
    load_plugins_from_entry_points,
)
from mews.plugin.registry import PluginRegistry

__all__ = [
    "ENTRY_POINT_GROUP",
    "EVENT_SPECS",
    "Event",
    "EventSpec",
    "PluginRegistry",
    "get_spec",
    "load_plugin_module",
    "load_plugins",
    "load_plugins_from_directory",
    "load_plugins_from_entry_points",
]
