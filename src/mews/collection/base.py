"""Collection — a named group of files sharing render and pagination settings."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable, Sequence
from datetime import date, datetime, time
from pathlib import Path
from typing import TYPE_CHECKING, Any

from mews._errors import ConfigError, ContentError
from mews.collection import linker
from mews.collection.page import CollectionPage
from mews.collection.pipeline import RenderPipeline, WrittenUnit
from mews.plugin.events import Event

if TYPE_CHECKING:
    from mews._types import SiteData
    from mews.collection.file import File
    from mews.config import CollectionConfig, MewsConfig, SortConfig
    from mews.observability.collector import BuildCollector
    from mews.plugin.registry import PluginRegistry
    from mews.render import TemplateRenderer
    from mews.storage import Storage


class Collection:
    """A named collection of files, optionally paginated.

    Membership is decided, in order of precedence, by:
        - ``static``: every file belongs
        - ``path``: files whose source lives under the configured directory
        - ``metadata``: files whose metadata key names this collection

    Args:
        config: Collection settings.
        get_config: Delegate returning the site-wide config.
        registry: Plugin registry lifecycle events are fired on.
        storage: Write capability.
        renderer: Template renderer handed to the pages this collection creates.
        collector: Optional record collector.

    """

    def __init__(
        self,
        config: CollectionConfig,
        get_config: Callable[[], MewsConfig],
        registry: PluginRegistry,
        storage: Storage,
        *,
        renderer: TemplateRenderer | None = None,
        collector: BuildCollector | None = None,
    ) -> None:
        self.config = config
        self.id = config.name
        self.name = config.name
        self._get_config = get_config
        self._renderer = renderer

        #: Data exposed to templates.
        self.data: dict[str, Any] = {}
        self.files: list[File] = []
        self.pages: list[CollectionPage] = []

        site_config = get_config()
        self.pipeline = RenderPipeline(
            self.id,
            registry,
            storage,
            encoding=site_config.encoding,
            collector=collector,
            report_timings=site_config.report_timings,
        )

    @property
    def path(self) -> Path | None:
        """Absolute directory whose files belong to this collection."""
        if self.config.path is None:
            return None
        return (self._get_config().content_path / self.config.path).resolve()

    @property
    def template(self) -> str | None:
        return self.config.template

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def is_member(self, file: File) -> bool:
        """Whether *file* belongs to this collection (ignoring filters)."""
        if self.config.static:
            return True

        path = self.path
        if path is not None:
            if file.source is None:
                return False
            return file.source.resolve().is_relative_to(path)

        if self.config.metadata is not None:
            value = file.metadata.get(self.config.metadata)
            if isinstance(value, str):
                return value == self.name
            if isinstance(value, Iterable):
                return self.name in value
            return False

        return False

    def is_filtered(self, file: File) -> bool:
        """Whether *file* is excluded by the configured metadata filters."""
        for key, excluded in self.config.filter.items():
            if key in file.metadata and file.metadata[key] in excluded:
                return True
        return False

    def populate(self, files: Iterable[File]) -> Collection:
        """Select, sort and paginate this collection's files from *files*.

        With a permalink pattern, members are copied with this collection's
        permalink; the files passed in are never modified, so several
        collections can share them.

        Raises:
            ConfigError: If the permalink pattern cannot be formatted.
            ContentError: If the sort key values cannot be ordered.

        """
        members = [f for f in files if self.is_member(f) and not self.is_filtered(f)]

        pattern = self.config.permalink
        if pattern:
            members = [
                f if "permalink" in f.metadata
                else dataclasses.replace(
                    f,
                    permalink=self._format("permalink", pattern, slug=f.slug, collection=self.name),
                )
                for f in members
            ]

        self.files = self.sort_files(members, self.config.sort)
        self.data["files"] = [f.data for f in self.files]

        if self.config.pagination is not None:
            self.paginate()
            self.link_pages()

        return self

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------

    def create_page(self, index: int, page_id: str | None = None) -> CollectionPage:
        """Create a CollectionPage for position *index*.

        The first page uses ``permalink_index``; later pages use
        ``permalink_page`` with ``{page}`` replaced by the page number.

        Raises:
            TypeError: If *index* is not an integer.

        """
        if isinstance(index, bool) or not isinstance(index, int):
            msg = "Must give an integer index when creating a CollectionPage."
            raise TypeError(msg)

        pagination = self.config.pagination
        if pagination is None:
            permalink = f"/{self.name}/" if index == 0 else f"/{self.name}/page/{index + 1}/"
        elif index == 0:
            permalink = pagination.permalink_index
        else:
            permalink = self._format(
                "permalink_page", pagination.permalink_page, page=index + 1,
            )

        return CollectionPage(
            id=page_id if page_id is not None else f"{self.id}:{index}",
            index=index,
            permalink=permalink,
            output_dir=self._get_config().output_path,
            renderer=self._renderer,
        )

    def paginate(self) -> list[CollectionPage]:
        """Split the collection's files into pages of ``pagination.size``.

        A collection with no files still gets its index page.

        """
        pagination = self.config.pagination
        size = pagination.size if pagination is not None and pagination.size else None
        size = size or max(len(self.files), 1)

        self.pages = []
        for index, start in enumerate(range(0, max(len(self.files), 1), size)):
            page = self.create_page(index)
            page.files = self.files[start:start + size]
            self.pages.append(page)
        return self.pages

    def link_pages(
        self,
        should_link_previous: linker.LinkPredicate | None = None,
        should_link_next: linker.LinkPredicate | None = None,
    ) -> Collection:
        """Link sibling pages and expose their data to templates.

        Without explicit predicates the ``pagination.link_pages`` flag picks
        between linking every neighbour and linking none.

        """
        enabled = self.config.pagination is None or self.config.pagination.link_pages
        default = linker.always if enabled else linker.never
        self.data["pages"] = linker.link_pages(
            self.pages,
            should_link_previous or default,
            should_link_next or default,
        )
        return self

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    async def write_file(self, file: File, site_data: SiteData) -> WrittenUnit:
        """Render and write one file of this collection."""
        return await self.pipeline.write_unit(
            file,
            self.config.template,
            site_data,
            before_render=Event.FILE_BEFORE_RENDER,
            after_render=Event.FILE_AFTER_RENDER,
        )

    async def write_page(self, page: CollectionPage, site_data: SiteData) -> WrittenUnit:
        """Render and write one pagination page of this collection."""
        pagination = self.config.pagination
        return await self.pipeline.write_unit(
            page,
            pagination.template if pagination is not None else None,
            site_data,
            before_render=Event.PAGE_BEFORE_RENDER,
            after_render=Event.PAGE_AFTER_RENDER,
        )

    async def write(self, site_data: SiteData) -> list[WrittenUnit]:
        """Write every file and page of this collection as one batch.

        Raises:
            WriteBatchError: If any unit failed, after all units settled.

        """
        jobs = [(f.id, self.write_file(f, site_data)) for f in self.files]
        jobs.extend((p.id, self.write_page(p, site_data)) for p in self.pages)
        return await self.pipeline.run_batch(jobs)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def sort_files(files: Sequence[File], sort: SortConfig | None) -> list[File]:
        """Sort files by a metadata key; files missing the key sort last.

        Values of different types never compare directly.  Numbers sort
        before dates and dates before strings; other types follow, grouped
        by type name.

        Raises:
            ContentError: If values of the same kind cannot be ordered,
                e.g. naive and timezone-aware datetimes.

        """
        files = list(files)
        if sort is None or not sort.key:
            return files

        present = [f for f in files if f.metadata.get(sort.key) is not None]
        missing = [f for f in files if f.metadata.get(sort.key) is None]
        try:
            present.sort(
                key=lambda f: _sort_key(f.metadata[sort.key]),
                reverse=sort.order == "descending",
            )
        except TypeError as exc:
            msg = f"Cannot sort files by {sort.key!r}: {exc}"
            raise ContentError(msg) from exc
        return present + missing

    def _format(self, option: str, pattern: str, **values: Any) -> str:
        try:
            return pattern.format(**values)
        except (KeyError, IndexError, ValueError) as exc:
            msg = f"Collection {self.name!r}: cannot format {option} {pattern!r}: {exc!r}"
            raise ConfigError(msg) from exc

    def __repr__(self) -> str:
        return f"Collection({self.name!r}, files={len(self.files)}, pages={len(self.pages)})"


def _sort_key(value: Any) -> tuple[int, str, Any]:
    """Rank *value* by kind so mixed metadata types still order totally."""
    if isinstance(value, (int, float)):
        return (0, "", value)
    if isinstance(value, datetime):
        return (1, "", value)
    if isinstance(value, date):
        return (1, "", datetime.combine(value, time.min))
    if isinstance(value, str):
        return (2, "", value)
    return (3, type(value).__name__, value)
