"""Collections — grouping, pagination and the render/write pipeline.

Public API::

    from mews.collection import Collection, File, link_pages

    collection = Collection(config, get_config, registry, storage, renderer=renderer)
    collection.populate(files)
    written = await collection.write(site_data)
"""

from mews.collection.base import Collection
from mews.collection.file import File, permalink_to_filepath
from mews.collection.linker import LinkPredicate, always, link_pages, never
from mews.collection.page import CollectionPage
from mews.collection.pipeline import RenderPipeline, WrittenUnit

__all__ = [
    "Collection",
    "CollectionPage",
    "File",
    "LinkPredicate",
    "RenderPipeline",
    "WrittenUnit",
    "always",
    "link_pages",
    "never",
    "permalink_to_filepath",
]
