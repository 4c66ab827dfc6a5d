"""Content layer — discovery and parsing of source documents."""

from mews.content.loader import (
    CONTENT_SUFFIXES,
    derive_slug,
    discover_files,
    split_front_matter,
)

__all__ = [
    "CONTENT_SUFFIXES",
    "derive_slug",
    "discover_files",
    "split_front_matter",
]
