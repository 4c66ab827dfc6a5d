"""Shared test fixtures for mews."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pytest

from mews.collection.file import File
from mews.config import CollectionConfig, MewsConfig
from mews.observability import BuildCollector, EventLog
from mews.plugin.registry import PluginRegistry


class MemoryStorage:
    """Storage that keeps written content in a dict keyed by destination."""

    def __init__(self) -> None:
        self.writes: dict[Path, str] = {}
        self.calls: list[tuple[Path, str, str]] = []

    async def write(self, destination: Path, content: str, encoding: str = "utf-8") -> int:
        self.calls.append((destination, content, encoding))
        self.writes[destination] = content
        return len(content.encode(encoding))


class StubRenderer:
    """Renderer that formats ``template:<id>`` with the unit's id."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def render(self, template: str, context: Mapping[str, Any]) -> str:
        self.calls.append((template, dict(context)))
        unit = context.get("file") or context.get("page") or {}
        return f"<{template}>{unit.get('id', '')}</{template}>"


@pytest.fixture
def registry() -> PluginRegistry:
    return PluginRegistry()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def renderer() -> StubRenderer:
    return StubRenderer()


@pytest.fixture
def collector() -> BuildCollector:
    return BuildCollector(EventLog())


@pytest.fixture
def site_config(tmp_path: Path) -> MewsConfig:
    return MewsConfig(root=tmp_path, report_timings=False)


@pytest.fixture
def tmp_site(tmp_path: Path) -> Path:
    """Create a minimal site with content, templates and a config file."""
    content = tmp_path / "content"
    (content / "blog").mkdir(parents=True)
    (content / "index.md").write_text("---\ntitle: Home\n---\n\n# Welcome\n")
    (content / "blog" / "first.md").write_text(
        "---\ntitle: First\ndate: 2024-01-01\n---\n\nHello.\n"
    )
    (content / "blog" / "second.md").write_text(
        "---\ntitle: Second\ndate: 2024-02-01\n---\n\nAgain.\n"
    )
    (content / "blog" / "draft.md").write_text(
        "---\ntitle: Draft\ndraft: true\n---\n\nNot yet.\n"
    )

    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "post.html").write_text("<article>{{ file.title }}</article>\n")
    (templates / "list.html").write_text("<ul>{{ page.number }}</ul>\n")

    (tmp_path / "mews.yaml").write_text(
        "site:\n"
        "  title: Test Site\n"
        "collections:\n"
        "  blog:\n"
        "    path: blog\n"
        "    template: post.html\n"
        "    permalink: /archive/{slug}/\n"
        "    sort:\n"
        "      key: date\n"
        "      order: descending\n"
        "    filter:\n"
        "      draft: [true]\n"
        "    pagination:\n"
        "      template: list.html\n"
        "      size: 1\n"
        "      permalink_index: /blog/\n"
        "      permalink_page: /blog/page/{page}/\n"
    )
    return tmp_path


def make_file(
    file_id: str,
    *,
    output_dir: Path = Path("/out"),
    permalink: str | None = None,
    source: Path | None = None,
    metadata: dict[str, Any] | None = None,
    renderer: Any = None,
) -> File:
    """Create a File without touching the filesystem."""
    slug = file_id.rsplit(".", 1)[0]
    return File(
        id=file_id,
        slug=slug,
        permalink=permalink if permalink is not None else f"/{slug}/",
        output_dir=output_dir,
        source=source,
        content=f"<p>{file_id}</p>",
        metadata=metadata or {},
        renderer=renderer,
    )


def make_collection_config(name: str = "posts", **data: Any) -> CollectionConfig:
    """Build a CollectionConfig the way the config loader does."""
    return CollectionConfig.from_mapping(name, data)
