"""Interface for flat, key-addressed object storage."""

import asyncio
import datetime
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from flatdir.exceptions import NotFoundException

from .content import ContentRef

__all__ = [
    "ObjectMetadata",
    "PrefixListing",
    "ObjectStore",
]


@dataclass(frozen=True)
class ObjectMetadata:
    """Metadata describing one stored object."""

    key: str
    size: int
    content_type: str
    updated_at: datetime.datetime
    attributes: dict[str, str] = field(default_factory=dict, hash=False)


@dataclass
class PrefixListing:
    """One level of a prefix listing.

    ``sub_prefixes`` are full prefixes without a trailing slash and ``objects``
    are full keys, both in the store's iteration order.
    """

    sub_prefixes: list[str] = field(default_factory=list)
    objects: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.sub_prefixes and not self.objects


class ObjectStore(ABC):
    """Interface for a flat object store.

    The store has no directories, no rename and no move. Keys never start
    with a slash and segments are separated by ``/``. Implementations raise
    ``NotFoundException`` for absent keys and ``BackendUnavailableException``
    for I/O failures.
    """

    @abstractmethod
    async def list_by_prefix(self, prefix: str) -> PrefixListing:
        """List immediate sub-prefixes and objects directly under ``prefix``."""

    @abstractmethod
    async def get_metadata(self, key: str) -> ObjectMetadata:
        """Return metadata for an object."""

    @abstractmethod
    async def get_content_ref(self, key: str) -> ContentRef:
        """Return a lazy reference to an object's content."""

    @abstractmethod
    async def put_object(
        self,
        key: str,
        data: bytes,
        content_type: str,
        attributes: dict[str, str] | None = None,
    ) -> None:
        """Write an object, replacing any existing object at ``key``."""

    @abstractmethod
    async def delete_object(self, key: str) -> None:
        """Delete an object; deleting an absent key succeeds."""

    async def list_recursive(self, prefix: str) -> list[str]:
        """Return every object key below ``prefix`` at any depth."""
        listing = await self.list_by_prefix(prefix)
        keys = list(listing.objects)
        if listing.sub_prefixes:
            nested = await asyncio.gather(
                *(self.list_recursive(sub) for sub in listing.sub_prefixes)
            )
            for sub_keys in nested:
                keys.extend(sub_keys)
        return keys

    async def exists(self, key: str) -> bool:
        """Check if an object exists."""
        try:
            await self.get_metadata(key)
        except NotFoundException:
            return False
        return True
