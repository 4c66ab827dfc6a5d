"""Site — owns the collections of a build and the data templates see."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from mews.collection.base import Collection

if TYPE_CHECKING:
    from mews.collection.file import File
    from mews.collection.pipeline import WrittenUnit
    from mews.config import MewsConfig
    from mews.observability.collector import BuildCollector
    from mews.plugin.registry import PluginRegistry
    from mews.render import TemplateRenderer
    from mews.storage import Storage


class Site:
    """All collections of one build.

    Args:
        config: Frozen site configuration.
        registry: Plugin registry shared by every collection.
        storage: Write capability shared by every collection.
        renderer: Template renderer shared by every file and page.
        collector: Optional record collector.

    """

    def __init__(
        self,
        config: MewsConfig,
        registry: PluginRegistry,
        storage: Storage,
        *,
        renderer: TemplateRenderer | None = None,
        collector: BuildCollector | None = None,
    ) -> None:
        self.config = config
        self.registry = registry
        self.renderer = renderer
        self.files: list[File] = []
        self.collections: dict[str, Collection] = {
            collection_config.name: Collection(
                collection_config,
                self.get_config,
                registry,
                storage,
                renderer=renderer,
                collector=collector,
            )
            for collection_config in config.collections
        }

    def get_config(self) -> MewsConfig:
        return self.config

    @property
    def data(self) -> dict[str, Any]:
        """Site-wide template data: ``site`` settings and every collection's data."""
        return {
            "site": dict(self.config.site),
            "collections": {name: c.data for name, c in self.collections.items()},
        }

    def populate(self, files: Iterable[File]) -> Site:
        """Hand *files* to every collection."""
        self.files = list(files)
        for collection in self.collections.values():
            collection.populate(self.files)
        return self

    async def write(self) -> list[WrittenUnit]:
        """Write every collection, one batch per collection, in config order.

        Raises:
            WriteBatchError: From the first collection whose batch failed.

        """
        site_data = self.data
        written: list[WrittenUnit] = []
        for collection in self.collections.values():
            written.extend(await collection.write(site_data))
        return written
