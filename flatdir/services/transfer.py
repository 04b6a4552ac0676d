"""Mutating operations built from store primitives.

The store cannot rename, move or delete a prefix, so every such operation is
a sequence of independent get/put/delete calls. Each call's outcome is
recorded separately and a failure never rolls back steps that already
completed. Every step is safe to repeat: a put overwrites, deleting an
absent key succeeds, and a source that is gone while its destination exists
counts as already moved.
"""

import asyncio
import logging
import mimetypes
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any, TypeVar

from flatdir.constants import (
    DEFAULT_MAX_CONCURRENCY,
    FALLBACK_CONTENT_TYPE,
    FOLDER_MARKER_ATTRIBUTE,
    FOLDER_MARKER_VALUE,
    PLACEHOLDER_CONTENT_TYPE,
    PLACEHOLDER_NAME,
)
from flatdir.exceptions import (
    InvalidPathException,
    NameConflictException,
    NamespaceException,
    NotFoundException,
    UnsupportedOperationException,
)
from flatdir.models.node import FileNode, FolderNode, VirtualNode
from flatdir.models.report import (
    DeleteReport,
    KeyOutcome,
    NodeOutcome,
    RenameReport,
    TransferReport,
    UploadReport,
)
from flatdir.store.base import ObjectStore
from flatdir.store.content import ContentRef
from flatdir.utils import paths

from .clipboard import ClipboardMode, ClipboardRegister

logger = logging.getLogger(__name__)

__all__ = [
    "TransferEngine",
    "UploadItem",
    "guess_content_type",
]

_T = TypeVar("_T")


@dataclass
class UploadItem:
    """One file of a multi-file upload."""

    name: str
    data: bytes
    content_type: str | None = None


def guess_content_type(name: str, content_type: str | None = None) -> str:
    """Pick the content type to store an uploaded file with.

    The placeholder marker type is never used for regular files, otherwise
    the file would disappear from listings.
    """
    if not content_type:
        content_type, _ = mimetypes.guess_type(name)
    if not content_type or content_type == PLACEHOLDER_CONTENT_TYPE:
        return FALLBACK_CONTENT_TYPE
    return content_type


class TransferEngine:
    """Upload, folder creation, bulk delete, rename and paste."""

    def __init__(
        self, store: ObjectStore, max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    ) -> None:
        self.store = store
        self._semaphore = asyncio.Semaphore(max_concurrency)

    async def _call(self, func: Callable[..., Awaitable[_T]], *args: Any) -> _T:
        """Run one store call within the concurrency limit."""
        async with self._semaphore:
            return await func(*args)

    async def upload(
        self,
        target_folder: str,
        name: str,
        data: bytes,
        content_type: str | None = None,
    ) -> str:
        """Write a file into a folder, replacing any file with the same name."""
        key = paths.join(paths.normalize(target_folder), paths.validate_name(name))
        stored_type = guess_content_type(name, content_type)
        if content_type == PLACEHOLDER_CONTENT_TYPE:
            logger.warning(f"Storing {key} as {stored_type}: {content_type} is reserved")
        await self.store.put_object(key, data, stored_type)
        logger.info(f"Uploaded {key} ({len(data)} bytes)")
        return key

    async def upload_many(
        self, target_folder: str, items: Iterable[UploadItem]
    ) -> UploadReport:
        """Upload several files one after another, recording each outcome."""
        report = UploadReport()
        for item in items:
            outcome = KeyOutcome(key=item.name)
            try:
                outcome.key = await self.upload(
                    target_folder, item.name, item.data, item.content_type
                )
                outcome.written = True
            except NamespaceException as err:
                logger.warning(f"Failed to upload {item.name}: {err}")
                outcome.fail(err)
            report.keys.append(outcome)
        return report

    async def create_folder(self, target_folder: str, name: str) -> FolderNode:
        """Create a folder by writing its placeholder object.

        Creating a folder that already exists rewrites its placeholder and is
        otherwise a no-op.
        """
        folder_key = paths.join(
            paths.normalize(target_folder), paths.validate_name(name)
        )
        placeholder_key = paths.join(folder_key, PLACEHOLDER_NAME)
        try:
            await self.store.put_object(
                placeholder_key,
                b"",
                PLACEHOLDER_CONTENT_TYPE,
                {FOLDER_MARKER_ATTRIBUTE: FOLDER_MARKER_VALUE},
            )
        except InvalidPathException:
            raise
        except NamespaceException as err:
            raise NameConflictException(
                f"Failed to create folder {folder_key}: {err}"
            ) from err
        logger.info(f"Created folder {folder_key}")
        return FolderNode.from_prefix(folder_key)

    async def delete_many(self, nodes: Iterable[VirtualNode]) -> DeleteReport:
        """Delete files and folders, each independently of the others."""
        unique = list({node.key: node for node in nodes}.values())
        outcomes = await asyncio.gather(*(self._delete_node(node) for node in unique))
        report = DeleteReport(nodes=list(outcomes))
        logger.info(
            f"Deleted {len(report.succeeded_nodes)} of {len(unique)} nodes "
            f"({report.status.value})"
        )
        return report

    async def _delete_node(self, node: VirtualNode) -> NodeOutcome:
        outcome = NodeOutcome(key=node.key, is_folder=node.is_folder)
        if isinstance(node, FileNode):
            outcome.keys.append(await self._delete_key(node.key))
            return outcome

        if not node.path:
            err = InvalidPathException("Cannot delete the root folder")
            outcome.error_kind, outcome.error_msg = err.kind, str(err)
            return outcome
        try:
            keys = await self._call(self.store.list_recursive, node.path)
        except NamespaceException as err:
            logger.warning(f"Failed to enumerate folder {node.path}: {err}")
            outcome.error_kind, outcome.error_msg = err.kind, str(err)
            return outcome

        placeholder_key = paths.join(node.path, PLACEHOLDER_NAME)
        descendants = [key for key in keys if key != placeholder_key]
        outcome.keys.extend(
            await asyncio.gather(*(self._delete_key(key) for key in descendants))
        )
        # The placeholder goes last so a partially deleted folder stays visible.
        placeholder = await self._delete_key(placeholder_key)
        if placeholder_key in keys or not placeholder.success:
            outcome.keys.append(placeholder)
        return outcome

    async def _delete_key(self, key: str) -> KeyOutcome:
        outcome = KeyOutcome(key=key)
        try:
            await self._call(self.store.delete_object, key)
            outcome.removed = True
        except NamespaceException as err:
            logger.warning(f"Failed to delete {key}: {err}")
            outcome.fail(err)
        return outcome

    async def rename(self, node: VirtualNode, new_name: str) -> RenameReport:
        """Rename a file or folder within its parent folder.

        Files are copied to the new key and the old key is deleted. Folders
        do the same for every descendant key. A failure part way leaves some
        keys under the old name and some under the new one; the report says
        which.
        """
        paths.validate_name(new_name)
        new_key = paths.join(paths.parent_key(node.key), new_name)
        report = RenameReport(
            key=node.key, new_key=new_key, is_folder=node.is_folder, new_name=new_name
        )
        if new_key == node.key:
            return report

        if isinstance(node, FileNode):
            report.keys.append(
                await self._transfer_key(node.key, new_key, node.content_ref)
            )
        else:
            if not node.path:
                raise InvalidPathException("Cannot rename the root folder")
            try:
                keys = await self._call(self.store.list_recursive, node.path)
            except NamespaceException as err:
                logger.warning(f"Failed to enumerate folder {node.path}: {err}")
                report.fail(err)
                return report
            if not keys:
                report.fail(NotFoundException(f"Folder {node.path} is empty or gone"))
                return report
            old_prefix = f"{node.path}/"
            outcomes = await asyncio.gather(
                *(
                    self._transfer_key(key, f"{new_key}/{key[len(old_prefix):]}")
                    for key in keys
                )
            )
            report.keys.extend(outcomes)

        logger.info(f"Renamed {node.key} to {new_key} ({report.status.value})")
        return report

    async def _transfer_key(
        self,
        key: str,
        new_key: str,
        content_ref: ContentRef | None = None,
        remove: bool = True,
    ) -> KeyOutcome:
        """Copy one object to ``new_key`` and optionally delete the source."""
        outcome = KeyOutcome(key=key, new_key=new_key)
        try:
            metadata = await self._call(self.store.get_metadata, key)
        except NotFoundException as err:
            if remove and await self._already_moved(new_key):
                logger.debug(f"{key} already moved to {new_key}")
                outcome.written = outcome.removed = True
            else:
                outcome.fail(err)
            return outcome
        except NamespaceException as err:
            outcome.fail(err)
            return outcome

        try:
            if content_ref is None:
                content_ref = await self._call(self.store.get_content_ref, key)
            data = await self._call(content_ref.read)
            await self._call(
                self.store.put_object,
                new_key,
                data,
                metadata.content_type,
                metadata.attributes,
            )
            outcome.written = True
            if remove:
                await self._call(self.store.delete_object, key)
                outcome.removed = True
        except NamespaceException as err:
            logger.warning(f"Failed to transfer {key} to {new_key}: {err}")
            outcome.fail(err)
        return outcome

    async def _already_moved(self, new_key: str) -> bool:
        try:
            return await self._call(self.store.exists, new_key)
        except NamespaceException:
            return False

    async def paste_from(
        self, clipboard: ClipboardRegister, target_folder: str
    ) -> str | None:
        """Paste the clipboard's file into ``target_folder``.

        Returns the new key, or None when the clipboard is empty. A cut is
        cleared from the clipboard only once the source has been deleted.
        """
        entry = clipboard.entry
        if entry is None:
            return None
        node = entry.node
        if not isinstance(node, FileNode):
            raise UnsupportedOperationException(
                f"Pasting folders is not supported: {node.key}"
            )
        cut = entry.mode == ClipboardMode.CUT
        target_key = paths.join(paths.normalize(target_folder), node.name)
        if target_key == node.key:
            logger.info(f"Paste of {node.key} onto itself skipped")
            if cut:
                clipboard.clear()
            return target_key

        outcome = await self._transfer_key(
            node.key, target_key, node.content_ref, remove=cut
        )
        report = TransferReport(key=node.key, new_key=target_key, keys=[outcome])
        report.raise_for_status()
        if cut:
            clipboard.clear()
        logger.info(f"Pasted {node.key} to {target_key} ({entry.mode.value})")
        return target_key
