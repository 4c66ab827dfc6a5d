"""Content loader — turn files under ``content/`` into File objects.

Recognised sources:

    content/about.md            -> slug "about",         permalink "/about/"
    content/blog/first-post.md  -> slug "blog/first-post"
    content/index.md            -> slug "",              permalink "/"
    content/docs/_index.md      -> slug "docs"

Markdown bodies are rendered to HTML with Patitas; ``.html`` bodies are
used as-is.  Both may start with a YAML front matter block delimited by
``---`` lines.  A ``permalink`` key in front matter overrides the derived
permalink.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from mews._errors import ContentError
from mews.collection.file import File

if TYPE_CHECKING:
    from mews.render import TemplateRenderer

CONTENT_SUFFIXES: frozenset[str] = frozenset({".md", ".markdown", ".html"})

_INDEX_STEMS = frozenset({"index", "_index"})


def split_front_matter(source: str) -> tuple[dict[str, Any], str]:
    """Split YAML front matter from a document.

    Frontmatter is delimited by ``---`` on its own line at the start of the
    file.  Documents without front matter return an empty mapping and the
    source unchanged.

    Raises:
        ContentError: If the front matter is not valid YAML or not a mapping.

    """
    if not source.startswith("---"):
        return {}, source
    end = source.find("\n---", 3)
    if end == -1:
        return {}, source

    raw = source[3:end]
    try:
        metadata = yaml.safe_load(raw) or {}
    except yaml.YAMLError as exc:
        msg = f"Invalid front matter: {exc}"
        raise ContentError(msg) from exc
    if not isinstance(metadata, dict):
        msg = f"Front matter must be a mapping, got {type(metadata).__name__}"
        raise ContentError(msg)

    # Skip past the closing "---" line
    body_start = source.find("\n", end + 4)
    body = "" if body_start == -1 else source[body_start + 1:]
    return metadata, body.lstrip("\n")


def derive_slug(source: Path, content_dir: Path) -> str:
    """Derive a URL slug from a file's position under *content_dir*."""
    relative = source.relative_to(content_dir).with_suffix("")
    parts = list(relative.parts)
    if parts and parts[-1] in _INDEX_STEMS:
        parts.pop()
    return "/".join(parts)


def discover_files(
    content_dir: Path,
    output_dir: Path,
    *,
    renderer: TemplateRenderer | None = None,
) -> list[File]:
    """Load every content file under *content_dir*, sorted by path.

    Returns an empty list when the directory does not exist.

    Raises:
        ContentError: If a file cannot be read or parsed.

    """
    if not content_dir.is_dir():
        return []

    markdown = None
    files: list[File] = []
    for source in sorted(content_dir.rglob("*")):
        if not source.is_file() or source.suffix not in CONTENT_SUFFIXES:
            continue

        try:
            text = source.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            msg = f"Failed to read {source}: {exc}"
            raise ContentError(msg) from exc

        try:
            metadata, body = split_front_matter(text)
        except ContentError as exc:
            msg = f"{source}: {exc}"
            raise ContentError(msg) from exc

        if source.suffix == ".html":
            html = body
        else:
            if markdown is None:
                from patitas import Markdown

                markdown = Markdown(plugins=["table"])
            html = markdown(body)

        slug = derive_slug(source, content_dir)
        permalink = str(metadata.get("permalink") or (f"/{slug}/" if slug else "/"))
        files.append(File(
            id=source.relative_to(content_dir).as_posix(),
            slug=slug,
            permalink=permalink,
            output_dir=output_dir,
            source=source,
            content=html,
            metadata=metadata,
            renderer=renderer,
        ))

    return files
