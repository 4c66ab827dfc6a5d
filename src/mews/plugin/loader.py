"""Plugin loader — import plugin modules and let them register handlers.

Plugins come from three places, loaded in this order:

    1. Dotted module names listed in ``MewsConfig.plugins``
    2. Python files in the site's ``plugins/`` directory (sorted by path)
    3. Installed distributions exposing the ``mews.plugins`` entry-point group

Every plugin module (or entry-point object) must provide a callable
``register(registry)``::

    # plugins/minify.py
    from mews.plugin import Event

    def register(registry):
        registry.add_handler(Event.FILE_AFTER_RENDER, lambda html: html.strip())

"""

from __future__ import annotations

import importlib
import importlib.metadata
import importlib.util
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from mews._errors import PluginError

if TYPE_CHECKING:
    from mews.config import MewsConfig
    from mews.plugin.registry import PluginRegistry

ENTRY_POINT_GROUP = "mews.plugins"

_REGISTER_NAME = "register"


def load_plugins(registry: PluginRegistry, config: MewsConfig) -> list[str]:
    """Load every configured plugin into *registry*.

    Returns:
        Names of the plugins that were registered, in load order.

    Raises:
        PluginError: If a plugin cannot be imported or has no ``register``.

    """
    loaded: list[str] = []
    for module_name in config.plugins:
        loaded.append(load_plugin_module(registry, module_name))
    loaded.extend(load_plugins_from_directory(registry, config.plugins_path))
    loaded.extend(load_plugins_from_entry_points(registry))
    return loaded


def load_plugin_module(registry: PluginRegistry, module_name: str) -> str:
    """Import *module_name* and call its ``register(registry)``."""
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        msg = f"Failed to import plugin {module_name!r}: {exc}"
        raise PluginError(msg) from exc
    _register(registry, module, module_name)
    return module_name


def load_plugins_from_directory(registry: PluginRegistry, plugins_dir: Path) -> list[str]:
    """Load every public ``.py`` file in *plugins_dir*.

    Skips files whose names start with ``_`` and anything under
    ``__pycache__``.  Returns an empty list when the directory is missing.

    """
    if not plugins_dir.is_dir():
        return []

    loaded: list[str] = []
    for py_file in sorted(plugins_dir.rglob("*.py")):
        if py_file.name.startswith("_"):
            continue
        if "__pycache__" in py_file.parts:
            continue

        module = _load_module(py_file, plugins_dir)
        _register(registry, module, str(py_file))
        loaded.append(py_file.stem)
    return loaded


def load_plugins_from_entry_points(
    registry: PluginRegistry,
    group: str = ENTRY_POINT_GROUP,
) -> list[str]:
    """Load plugins advertised by installed distributions."""
    loaded: list[str] = []
    for entry_point in importlib.metadata.entry_points(group=group):
        try:
            target = entry_point.load()
        except Exception as exc:
            msg = f"Failed to load plugin entry point {entry_point.name!r}: {exc}"
            raise PluginError(msg) from exc
        _register(registry, target, entry_point.name)
        loaded.append(entry_point.name)
    return loaded


def _load_module(py_file: Path, plugins_dir: Path) -> Any:
    """Import a Python file as a module without touching ``sys.path``."""
    relative = py_file.relative_to(plugins_dir)
    module_name = "mews_plugins." + ".".join(relative.with_suffix("").parts)

    spec = importlib.util.spec_from_file_location(module_name, py_file)
    if spec is None or spec.loader is None:
        msg = f"Failed to load plugin module {py_file}"
        raise PluginError(msg)

    try:
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        spec.loader.exec_module(module)
    except Exception as exc:
        msg = f"Failed to load plugin module {py_file}: {exc}"
        raise PluginError(msg) from exc

    return module


def _register(registry: PluginRegistry, target: Any, name: str) -> None:
    """Call ``register(registry)`` on a module, or *target* itself if callable."""
    register = getattr(target, _REGISTER_NAME, None)
    if register is None and callable(target):
        register = target
    if not callable(register):
        msg = f"Plugin {name!r} must define a callable 'register(registry)'"
        raise PluginError(msg)
    register(registry)
