"""Synthesizes a folder hierarchy from flat prefix listings."""

import asyncio
import logging

from flatdir.constants import DEFAULT_MAX_CONCURRENCY, PLACEHOLDER_CONTENT_TYPE
from flatdir.exceptions import NamespaceException, NotFoundException
from flatdir.models.node import FileNode, FolderNode, Listing, VirtualNode
from flatdir.store.base import ObjectMetadata, ObjectStore
from flatdir.utils import paths

logger = logging.getLogger(__name__)

__all__ = [
    "NamespaceBuilder",
    "is_placeholder",
]


def is_placeholder(metadata: ObjectMetadata) -> bool:
    """Return True for folder marker objects."""
    return metadata.content_type == PLACEHOLDER_CONTENT_TYPE


class NamespaceBuilder:
    """Builds virtual folder and file nodes from the store's current state.

    Nothing is cached: every call reflects the store as it is now, so callers
    list again after each mutation.
    """

    def __init__(
        self, store: ObjectStore, max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    ) -> None:
        self.store = store
        self._semaphore = asyncio.Semaphore(max_concurrency)

    async def list(self, path: str) -> Listing:
        """List the folders and files directly inside ``path``.

        Sub-prefixes always become folders. Objects become files unless they
        are placeholders. An object whose metadata cannot be fetched is left
        out of the listing; a failure of the prefix listing itself is raised.
        """
        prefix = paths.normalize(path)
        listing = await self.store.list_by_prefix(prefix)

        folders = [FolderNode.from_prefix(sub) for sub in listing.sub_prefixes]
        results = await asyncio.gather(
            *(self._build_file(key) for key in listing.objects)
        )
        files = [node for node in results if node is not None]

        logger.debug(
            f"Listed {prefix!r}: {len(folders)} folders, {len(files)} files "
            f"({len(listing.objects) - len(files)} skipped)"
        )
        return Listing(path=paths.to_display(prefix), folders=folders, files=files)

    async def list_folders(self, path: str = paths.ROOT) -> "list[FolderNode]":
        """List only the sub-folders of ``path``, without fetching metadata."""
        listing = await self.store.list_by_prefix(paths.normalize(path))
        return [FolderNode.from_prefix(sub) for sub in listing.sub_prefixes]

    async def stat(self, path: str) -> VirtualNode:
        """Resolve a single path to a file or folder node."""
        key = paths.normalize(path)
        if not key:
            return FolderNode(key="", name="", path="")
        try:
            metadata = await self.store.get_metadata(key)
        except NotFoundException:
            pass
        else:
            if not is_placeholder(metadata):
                return await self._to_file_node(metadata)
        listing = await self.store.list_by_prefix(key)
        if listing.is_empty:
            raise NotFoundException(f"No file or folder at {path}")
        return FolderNode.from_prefix(key)

    async def _to_file_node(self, metadata: ObjectMetadata) -> FileNode:
        content_ref = await self.store.get_content_ref(metadata.key)
        return FileNode(
            key=metadata.key,
            name=paths.name_of(metadata.key),
            path=metadata.key,
            size=metadata.size,
            content_type=metadata.content_type,
            modified_at=metadata.updated_at,
            content_ref=content_ref,
        )

    async def _build_file(self, key: str) -> FileNode | None:
        async with self._semaphore:
            try:
                metadata = await self.store.get_metadata(key)
                if is_placeholder(metadata):
                    return None
                return await self._to_file_node(metadata)
            except NamespaceException as err:
                logger.warning(f"Skipping {key} in listing: {err}")
                return None
