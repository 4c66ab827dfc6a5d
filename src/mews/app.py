"""Build entry point — load config, plugins and content, then write the site.

Usage::

    import mews

    result = mews.build("my-site/")

"""

from __future__ import annotations

import asyncio
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from mews.config_loader import load_config

if TYPE_CHECKING:
    from mews.collection.pipeline import WrittenUnit
    from mews.config import MewsConfig
    from mews.observability.collector import BuildCollector
    from mews.plugin.registry import PluginRegistry
    from mews.render import TemplateRenderer
    from mews.storage import Storage


@dataclass(frozen=True, slots=True)
class BuildResult:
    """Aggregate result of a full build.

    Attributes:
        written: Every unit outcome, skipped units included.
        plugins: Names of the plugins that were loaded.
        duration_ms: Total wall-clock time for the build.
        output_dir: Absolute path to the output directory.

    """

    written: tuple[WrittenUnit, ...]
    plugins: tuple[str, ...]
    duration_ms: float
    output_dir: Path

    @property
    def total_written(self) -> int:
        return sum(1 for w in self.written if not w.skipped)

    @property
    def total_skipped(self) -> int:
        return sum(1 for w in self.written if w.skipped)


async def build_site(
    config: MewsConfig,
    *,
    registry: PluginRegistry | None = None,
    renderer: TemplateRenderer | None = None,
    storage: Storage | None = None,
    collector: BuildCollector | None = None,
) -> BuildResult:
    """Build the site described by *config*.

    Collaborators default to the filesystem storage, a Kida renderer over
    the templates directory and a fresh plugin registry loaded from config.

    Raises:
        ConfigError: On invalid configuration.
        PluginError: If a plugin fails to load.
        ContentError: If a content file cannot be parsed.
        WriteBatchError: If any unit of a collection failed to write.

    """
    from mews.content.loader import discover_files
    from mews.plugin.loader import load_plugins
    from mews.plugin.registry import PluginRegistry
    from mews.render import KidaRenderer
    from mews.site import Site
    from mews.storage import FileSystemStorage

    t0 = time.perf_counter()

    plugins: list[str] = []
    if registry is None:
        registry = PluginRegistry(collector)
        plugins = load_plugins(registry, config)
    if renderer is None:
        renderer = KidaRenderer([config.templates_path])
    if storage is None:
        storage = FileSystemStorage()

    files = discover_files(config.content_path, config.output_path, renderer=renderer)

    site = Site(config, registry, storage, renderer=renderer, collector=collector)
    site.populate(files)
    written = await site.write()

    return BuildResult(
        written=tuple(written),
        plugins=tuple(plugins),
        duration_ms=(time.perf_counter() - t0) * 1000,
        output_dir=config.output_path,
    )


def build(root: str | Path = ".", **kwargs: object) -> BuildResult:
    """Build the site at *root* and print a summary to stderr.

    Args:
        root: Path to the site root directory.
        **kwargs: Override MewsConfig fields.

    """
    from mews.observability import BuildCollector, EventLog

    config = load_config(Path(root), **kwargs)
    collector = BuildCollector(EventLog())
    result = asyncio.run(build_site(config, collector=collector))
    _print_build_summary(result)
    return result


def _print_build_summary(result: BuildResult) -> None:
    """Print build completion summary to stderr."""
    lines = [
        "",
        "─" * 41,
        f"  Wrote {result.total_written} file{'s' if result.total_written != 1 else ''}",
    ]
    if result.total_skipped:
        lines.append(f"  Skipped {result.total_skipped} without a template")
    if result.plugins:
        lines.append(f"  Plugins: {', '.join(result.plugins)}")
    lines.append(f"  Output: {result.output_dir}")
    lines.append(f"  Done in {result.duration_ms:.0f}ms")

    print("\n".join(lines), file=sys.stderr)
