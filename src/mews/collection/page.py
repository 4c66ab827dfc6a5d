"""CollectionPage — one page of a paginated collection.

Pages refer to their siblings by index into the owning collection's page
list, never by holding each other.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from mews._errors import ExportError
from mews.collection.file import permalink_to_filepath

if TYPE_CHECKING:
    from mews._types import SiteData
    from mews.collection.file import File
    from mews.render import TemplateRenderer


@dataclass(slots=True, eq=False)
class CollectionPage:
    """A page listing a slice of a collection's files.

    Attributes:
        id: Page id.
        index: 0-based position in the collection's page list.
        permalink: URL path of this page.
        output_dir: Root of the build output.
        files: Files listed on this page.
        previous_index: Index of the linked previous page, if any.
        next_index: Index of the linked next page, if any.

    """

    id: str
    index: int
    permalink: str
    output_dir: Path
    files: list[File] = field(default_factory=list)
    previous_index: int | None = None
    next_index: int | None = None
    renderer: TemplateRenderer | None = field(default=None, repr=False)
    _arena: Sequence[CollectionPage] = field(default=(), repr=False)

    @property
    def destination(self) -> Path:
        """Absolute output path derived from the permalink."""
        return permalink_to_filepath(self.permalink, self.output_dir)

    @property
    def number(self) -> int:
        """1-based page number."""
        return self.index + 1

    @property
    def previous(self) -> CollectionPage | None:
        """The linked previous sibling, resolved through the page list."""
        if self.previous_index is None:
            return None
        return self._arena[self.previous_index]

    @property
    def next(self) -> CollectionPage | None:
        """The linked next sibling, resolved through the page list."""
        if self.next_index is None:
            return None
        return self._arena[self.next_index]

    def attach(self, pages: Sequence[CollectionPage]) -> None:
        """Resolve sibling indices against *pages* from now on."""
        self._arena = pages

    def summary(self) -> dict[str, Any]:
        return {"index": self.index, "number": self.number, "permalink": self.permalink}

    @property
    def data(self) -> dict[str, Any]:
        """Template-facing projection of the page."""
        previous = self.previous
        following = self.next
        return {
            "id": self.id,
            "index": self.index,
            "number": self.number,
            "permalink": self.permalink,
            "files": [f.data for f in self.files],
            "previous": previous.summary() if previous is not None else None,
            "next": following.summary() if following is not None else None,
        }

    def render(self, template: str, site_data: SiteData) -> str:
        """Render the page through *template* with site-wide data."""
        if self.renderer is None:
            msg = f"Page {self.id!r} has no template renderer"
            raise ExportError(msg)
        return self.renderer.render(template, {**site_data, "page": self.data})
