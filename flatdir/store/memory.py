"""In-memory object store."""

import datetime
import logging
from dataclasses import dataclass, field

from flatdir.exceptions import InvalidPathException, NotFoundException

from .base import ObjectMetadata, ObjectStore, PrefixListing
from .content import ContentRef, LazyContentRef

logger = logging.getLogger(__name__)


@dataclass
class _StoredObject:
    data: bytes
    content_type: str
    updated_at: datetime.datetime
    attributes: dict[str, str] = field(default_factory=dict)


def check_key(key: str) -> None:
    """Reject keys that cannot be stored."""
    if not key or key.startswith("/") or key.endswith("/"):
        raise InvalidPathException(f"Invalid storage key: {key!r}")


class MemoryObjectStore(ObjectStore):
    """Process-local object store, iterating in insertion order."""

    def __init__(self) -> None:
        self._objects: dict[str, _StoredObject] = {}

    async def list_by_prefix(self, prefix: str) -> PrefixListing:
        start = f"{prefix}/" if prefix else ""
        listing = PrefixListing()
        seen: set[str] = set()
        for key in self._objects:
            if not key.startswith(start):
                continue
            rest = key[len(start) :]
            if "/" in rest:
                sub_prefix = start + rest.split("/", 1)[0]
                if sub_prefix not in seen:
                    seen.add(sub_prefix)
                    listing.sub_prefixes.append(sub_prefix)
            else:
                listing.objects.append(key)
        return listing

    def _get(self, key: str) -> _StoredObject:
        if (obj := self._objects.get(key)) is None:
            raise NotFoundException(f"Object {key} not found")
        return obj

    async def get_metadata(self, key: str) -> ObjectMetadata:
        obj = self._get(key)
        return ObjectMetadata(
            key=key,
            size=len(obj.data),
            content_type=obj.content_type,
            updated_at=obj.updated_at,
            attributes=dict(obj.attributes),
        )

    async def get_content_ref(self, key: str) -> ContentRef:
        self._get(key)

        async def load() -> bytes:
            return self._get(key).data

        return LazyContentRef(key, load)

    async def put_object(
        self,
        key: str,
        data: bytes,
        content_type: str,
        attributes: dict[str, str] | None = None,
    ) -> None:
        check_key(key)
        self._objects[key] = _StoredObject(
            data=bytes(data),
            content_type=content_type,
            updated_at=datetime.datetime.now(datetime.timezone.utc),
            attributes=dict(attributes or {}),
        )
        logger.debug(f"Put {key} ({len(data)} bytes, {content_type})")

    async def delete_object(self, key: str) -> None:
        if self._objects.pop(key, None) is not None:
            logger.debug(f"Deleted {key}")

    def __len__(self) -> int:
        return len(self._objects)

    def keys(self) -> list[str]:
        """Return all stored keys."""
        return list(self._objects)
