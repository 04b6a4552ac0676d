"""Object store backends."""

from .base import ObjectMetadata, ObjectStore, PrefixListing
from .content import ContentRef, LazyContentRef, UrlContentRef
from .local import LocalObjectStore
from .memory import MemoryObjectStore

__all__ = [
    "ContentRef",
    "LazyContentRef",
    "LocalObjectStore",
    "MemoryObjectStore",
    "ObjectMetadata",
    "ObjectStore",
    "PrefixListing",
    "UrlContentRef",
]
