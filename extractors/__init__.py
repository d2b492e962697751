"""Extractors package: turns the parsed export tree into model records."""

from .entity_extractor import EntityExtractor, UnknownAuthorError
from .image_linker import link_images
from .meta_filter import MetaFilter, TRANSFORMS

__all__ = [
    'EntityExtractor',
    'UnknownAuthorError',
    'MetaFilter',
    'TRANSFORMS',
    'link_images'
]
