"""File — one content item that can be rendered and written on its own."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Any

from mews._errors import ExportError

if TYPE_CHECKING:
    from mews._types import SiteData
    from mews.render import TemplateRenderer


def permalink_to_filepath(permalink: str, output_dir: Path) -> Path:
    """Convert a URL permalink to an output file path.

    Clean URL convention:
        ``/``                  -> ``output/index.html``
        ``/about/``           -> ``output/about/index.html``
        ``/docs/intro``       -> ``output/docs/intro/index.html``
        ``/feed.xml``         -> ``output/feed.xml``

    """
    clean = permalink.strip("/")
    if not clean:
        return output_dir / "index.html"
    if not permalink.endswith("/") and PurePosixPath(clean).suffix:
        return output_dir / clean
    return output_dir / clean / "index.html"


@dataclass(slots=True, eq=False)
class File:
    """A content item.

    Attributes:
        id: Unique id, usually the source path relative to the content dir.
        slug: URL-friendly name derived from the source path.
        permalink: URL path the file is published at.
        output_dir: Root of the build output.
        source: Source file on disk, if any.
        content: Rendered body (HTML).
        metadata: Front matter.
        renderer: Template renderer used by :meth:`render`.

    """

    id: str
    slug: str
    permalink: str
    output_dir: Path
    source: Path | None = None
    content: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    renderer: TemplateRenderer | None = field(default=None, repr=False)

    @property
    def destination(self) -> Path:
        """Absolute output path derived from the permalink."""
        return permalink_to_filepath(self.permalink, self.output_dir)

    @property
    def data(self) -> dict[str, Any]:
        """Template-facing projection of the file."""
        data = dict(self.metadata)
        data.update(
            id=self.id,
            slug=self.slug,
            permalink=self.permalink,
            content=self.content,
        )
        return data

    def render(self, template: str, site_data: SiteData) -> str:
        """Render the file through *template* with site-wide data."""
        if self.renderer is None:
            msg = f"File {self.id!r} has no template renderer"
            raise ExportError(msg)
        return self.renderer.render(template, {**site_data, "file": self.data})
