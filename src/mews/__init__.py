"""Mews — a static site builder with a plugin event pipeline.

Content files are grouped into named collections, paginated, rendered
through Kida templates and written to the output directory.  Plugins hook
into the pipeline at fixed lifecycle events and may replace the data
flowing through them.

Quick start::

    import mews

    mews.build("my-site/")

Plugins::

    from mews import Event

    def register(registry):
        registry.add_handler(Event.FILE_AFTER_RENDER, lambda html: html.strip())

"""

# PEP 703: Declare this module as free-threading safe
_Py_mod_gil = 0

__version__ = "0.1.0-dev"
__all__ = [
    "Event",
    "MewsConfig",
    "PluginRegistry",
    "__version__",
    "build",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import mews`` fast while providing a clean top-level API.
    """
    if name == "MewsConfig":
        from mews.config import MewsConfig

        return MewsConfig

    if name == "build":
        from mews.app import build

        return build

    if name == "Event":
        from mews.plugin.events import Event

        return Event

    if name == "PluginRegistry":
        from mews.plugin.registry import PluginRegistry

        return PluginRegistry

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
