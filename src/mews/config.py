"""Mews configuration.

MewsConfig is the central configuration object, frozen after creation.
Collection settings live in CollectionConfig, one per named collection.
"""

from __future__ import annotations

import string
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from mews._errors import ConfigError

_SORT_ORDERS = frozenset({"ascending", "descending"})

# Placeholders each permalink pattern may use
_FILE_FIELDS = frozenset({"slug", "collection"})
_PAGE_FIELDS = frozenset({"page"})


def _check_placeholders(name: str, option: str, pattern: object, allowed: frozenset[str]) -> None:
    """Raise ConfigError unless *pattern* only uses the *allowed* placeholders."""
    if not isinstance(pattern, str):
        msg = f"Collection {name!r}: {option} must be a string"
        raise ConfigError(msg)
    try:
        fields: set[str] = set()
        pending = [pattern]
        while pending:
            for _, field_name, format_spec, _ in string.Formatter().parse(pending.pop()):
                if field_name is not None:
                    fields.add(field_name)
                if format_spec:
                    pending.append(format_spec)
    except ValueError as exc:
        msg = f"Collection {name!r}: malformed {option} {pattern!r}: {exc}"
        raise ConfigError(msg) from exc
    unknown = sorted(fields - allowed)
    if unknown:
        msg = (
            f"Collection {name!r}: {option} {pattern!r} uses unknown placeholder(s) "
            f"{', '.join(repr(f) for f in unknown)}; allowed: {', '.join(sorted(allowed))}"
        )
        raise ConfigError(msg)


@dataclass(frozen=True, slots=True)
class SortConfig:
    """How files inside a collection are ordered.

    Attributes:
        key: Metadata key to sort by.
        order: ``ascending`` or ``descending``.

    """

    key: str
    order: Literal["ascending", "descending"] = "ascending"


@dataclass(frozen=True, slots=True)
class PaginationConfig:
    """Pagination settings for a collection.

    Attributes:
        template: Template used to render each collection page.
        size: Number of files per page (``None`` puts everything on one page).
        permalink_index: Permalink of the first page.
        permalink_page: Permalink of later pages; ``{page}`` is replaced by
            the 1-based page number.
        link_pages: Whether pages get previous/next links.

    """

    template: str | None = None
    size: int | None = None
    permalink_index: str = "/"
    permalink_page: str = "/page/{page}/"
    link_pages: bool = True


@dataclass(frozen=True, slots=True)
class CollectionConfig:
    """Configuration for one named collection.

    Attributes:
        name: Unique collection name, also its id.
        path: Directory (relative to the content dir) whose files belong here.
        template: Template used to render each file individually.
        metadata: Metadata key listing the collections a file belongs to.
        permalink: Permalink pattern for files; ``{slug}`` and
            ``{collection}`` are substituted.
        sort: Optional ordering of files.
        pagination: Optional pagination settings.
        filter: Metadata values that exclude a file, e.g. ``{"draft": [True]}``.
        static: Static collections include every file.

    """

    name: str
    path: str | None = None
    template: str | None = None
    metadata: str | None = None
    permalink: str | None = None
    sort: SortConfig | None = None
    pagination: PaginationConfig | None = None
    filter: Mapping[str, tuple[Any, ...]] = field(default_factory=dict)
    static: bool = False

    @classmethod
    def from_mapping(cls, name: str, data: Mapping[str, Any]) -> CollectionConfig:
        """Build a CollectionConfig from a parsed config-file section.

        Raises:
            ConfigError: On an empty name, a section that is not a mapping,
                malformed sort/pagination/filter values or unknown permalink
                placeholders.

        """
        if not isinstance(name, str) or not name:
            msg = "Collection requires a name."
            raise ConfigError(msg)
        if not isinstance(data, Mapping):
            msg = f"Collection {name!r}: settings must be a mapping"
            raise ConfigError(msg)

        sort = None
        sort_data = data.get("sort")
        if sort_data is not None:
            if not isinstance(sort_data, Mapping) or "key" not in sort_data:
                msg = f"Collection {name!r}: sort needs a 'key'"
                raise ConfigError(msg)
            order = sort_data.get("order", "ascending")
            if order not in _SORT_ORDERS:
                msg = f"Collection {name!r}: sort order must be ascending or descending, got {order!r}"
                raise ConfigError(msg)
            sort = SortConfig(key=str(sort_data["key"]), order=order)

        pagination = None
        page_data = data.get("pagination")
        if page_data is not None:
            if not isinstance(page_data, Mapping):
                msg = f"Collection {name!r}: pagination must be a mapping"
                raise ConfigError(msg)
            size = page_data.get("size")
            # bool is an int subclass but never a meaningful page size
            if size is not None and (isinstance(size, bool) or not isinstance(size, int)):
                msg = f"Collection {name!r}: pagination size must be a number"
                raise ConfigError(msg)
            if size is not None and size < 1:
                msg = f"Collection {name!r}: pagination size must be positive"
                raise ConfigError(msg)
            permalink_page = page_data.get("permalink_page", "/page/{page}/")
            _check_placeholders(name, "permalink_page", permalink_page, _PAGE_FIELDS)
            pagination = PaginationConfig(
                template=page_data.get("template"),
                size=size,
                permalink_index=page_data.get("permalink_index", "/"),
                permalink_page=permalink_page,
                link_pages=bool(page_data.get("link_pages", True)),
            )

        filter_data = data.get("filter") or {}
        if not isinstance(filter_data, Mapping):
            msg = f"Collection {name!r}: filter must be a mapping of key -> values"
            raise ConfigError(msg)
        filters: dict[str, tuple[Any, ...]] = {}
        for key, values in filter_data.items():
            if isinstance(values, (list, tuple, set, frozenset)):
                filters[key] = tuple(values)
            else:
                filters[key] = (values,)

        permalink = data.get("permalink")
        if permalink is not None:
            _check_placeholders(name, "permalink", permalink, _FILE_FIELDS)

        return cls(
            name=name,
            path=data.get("path"),
            template=data.get("template"),
            metadata=data.get("metadata"),
            permalink=permalink,
            sort=sort,
            pagination=pagination,
            filter=filters,
            static=bool(data.get("static", False)),
        )


@dataclass(frozen=True, slots=True)
class MewsConfig:
    """Configuration for a mews build.

    Attributes:
        root: Path to the site root directory.
              Always resolved to an absolute path on construction.
        output: Output directory for written files.
        content_dir: Directory containing content files.
        templates_dir: Directory containing kida templates.
        plugins_dir: Directory scanned for plugin modules.
        plugins: Dotted module names of plugins to import.
        encoding: Text encoding used when writing output.
        report_timings: Print per-collection activity timings after each batch.
        site: Site-wide data exposed to templates as ``site``.
        collections: One entry per configured collection.

    """

    root: Path = field(default_factory=Path.cwd)
    output: Path = field(default_factory=lambda: Path("dist"))
    content_dir: str = "content"
    templates_dir: str = "templates"
    plugins_dir: str = "plugins"
    plugins: tuple[str, ...] = ()
    encoding: str = "utf-8"
    report_timings: bool = True
    site: Mapping[str, Any] = field(default_factory=dict)
    collections: tuple[CollectionConfig, ...] = ()

    def __post_init__(self) -> None:
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())

    @property
    def content_path(self) -> Path:
        """Absolute path to content directory."""
        return self.root / self.content_dir

    @property
    def templates_path(self) -> Path:
        """Absolute path to templates directory."""
        return self.root / self.templates_dir

    @property
    def plugins_path(self) -> Path:
        """Absolute path to plugins directory."""
        return self.root / self.plugins_dir

    @property
    def output_path(self) -> Path:
        """Absolute path to output directory."""
        if self.output.is_absolute():
            return self.output
        return self.root / self.output

    def get_collection(self, name: str) -> CollectionConfig | None:
        """Return the collection config called *name*, if any."""
        for collection in self.collections:
            if collection.name == name:
                return collection
        return None
