"""Pagination linker — previous/next relations across an ordered page list.

Linking policy is supplied by the caller as two predicates, so a collection
can, for example, disable links entirely or stop at a boundary without this
module knowing why.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from mews.collection.page import CollectionPage

type LinkPredicate = Callable[[CollectionPage, CollectionPage], bool]


def always(candidate: CollectionPage, current: CollectionPage) -> bool:
    """Link every neighbour."""
    return True


def never(candidate: CollectionPage, current: CollectionPage) -> bool:
    """Link no neighbour."""
    return False


def link_pages(
    pages: Sequence[CollectionPage],
    should_link_previous: LinkPredicate = always,
    should_link_next: LinkPredicate = always,
) -> list[dict[str, Any]]:
    """Assign sibling indices across *pages*.

    For page ``i``, ``should_link_previous(pages[i-1], pages[i])`` decides the
    backward link and ``should_link_next(pages[i+1], pages[i])`` the forward
    one.  Predicates are only consulted where a neighbour exists, so the
    first page never has a previous link and the last never has a next link.

    Returns:
        Every page's data projection, in the original order.

    """
    last = len(pages) - 1
    for i, page in enumerate(pages):
        page.attach(pages)
        page.previous_index = None
        page.next_index = None

        if i > 0 and should_link_previous(pages[i - 1], page):
            page.previous_index = i - 1

        if i < last and should_link_next(pages[i + 1], page):
            page.next_index = i + 1

    return [page.data for page in pages]
