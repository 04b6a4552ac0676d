"""Interactive browsing session over a namespace."""

import logging

from flatdir.constants import DEFAULT_MAX_CONCURRENCY
from flatdir.exceptions import NamespaceException
from flatdir.models.node import FileNode, FolderNode, Listing, VirtualNode
from flatdir.models.report import DeleteReport, OperationStatus, RenameReport
from flatdir.store.base import ObjectStore
from flatdir.utils import paths

from .clipboard import ClipboardRegister, SelectionSet
from .namespace import NamespaceBuilder
from .preview import Preview, load_preview
from .transfer import TransferEngine, UploadItem

logger = logging.getLogger(__name__)

__all__ = [
    "ExplorerSession",
]


class ExplorerSession:
    """State of one client browsing the store.

    Holds the current folder, its latest listing, the selection and the
    clipboard. Mutations go through the transfer engine and are followed by
    a fresh listing, since the store is the only source of truth.

    Listing responses can arrive out of order. Each navigation takes a new
    generation number and a response is applied only if no newer navigation
    started in the meantime.
    """

    def __init__(
        self, store: ObjectStore, max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    ) -> None:
        self.namespace = NamespaceBuilder(store, max_concurrency)
        self.transfer = TransferEngine(store, max_concurrency)
        self.selection = SelectionSet()
        self.clipboard = ClipboardRegister()
        self.current_path = paths.ROOT
        self.listing: Listing | None = None
        self._generation = 0

    async def navigate(self, path: str) -> Listing | None:
        """Make ``path`` the current folder and list it.

        Returns the listing, or None if a newer navigation superseded this
        one before its response arrived. If listing fails the session stays
        on its previous folder.
        """
        display_path = paths.to_display(paths.normalize(path))
        self._generation += 1
        generation = self._generation

        listing = await self.namespace.list(display_path)
        if generation != self._generation:
            logger.debug(f"Discarding stale listing of {display_path}")
            return None
        self.current_path = display_path
        self.listing = listing
        return listing

    async def refresh(self) -> Listing | None:
        return await self.navigate(self.current_path)

    async def _refresh_after_failure(self) -> None:
        """Refresh without hiding the error of the operation that failed."""
        try:
            await self.refresh()
        except NamespaceException as err:
            logger.warning(f"Failed to refresh {self.current_path}: {err}")

    def breadcrumbs(self) -> list[paths.Breadcrumb]:
        return paths.breadcrumbs(self.current_path)

    async def sidebar(self) -> list[FolderNode]:
        """Top-level folders shown next to the listing."""
        return await self.namespace.list_folders(paths.ROOT)

    async def open_parent(self) -> Listing | None:
        return await self.navigate(paths.parent(self.current_path))

    async def upload(self, items: list[UploadItem]) -> None:
        report = await self.transfer.upload_many(self.current_path, items)
        if report.success:
            await self.refresh()
            return
        await self._refresh_after_failure()
        report.raise_for_status()

    async def create_folder(self, name: str) -> FolderNode:
        folder = await self.transfer.create_folder(self.current_path, name)
        await self.refresh()
        return folder

    async def rename(self, node: VirtualNode, new_name: str) -> RenameReport:
        report = await self.transfer.rename(node, new_name)
        await self.refresh()
        return report

    def toggle_selection(self, node: VirtualNode) -> bool:
        return self.selection.toggle(node)

    async def delete_selected(self) -> DeleteReport:
        """Delete every selected node.

        Nodes that were deleted leave the selection; failed ones stay
        selected so the user can retry them.
        """
        report = await self.transfer.delete_many(self.selection.nodes)
        if report.status == OperationStatus.SUCCEEDED:
            self.selection.clear()
        else:
            self.selection.discard_keys(report.succeeded_nodes)
        await self.refresh()
        return report

    def copy(self, node: VirtualNode) -> None:
        self.clipboard.mark_for_copy(node)

    def cut(self, node: VirtualNode) -> None:
        self.clipboard.mark_for_cut(node)

    async def paste(self) -> str | None:
        """Paste the clipboard into the current folder."""
        try:
            new_key = await self.transfer.paste_from(
                self.clipboard, self.current_path
            )
        except NamespaceException:
            await self._refresh_after_failure()
            raise
        await self.refresh()
        return new_key

    async def preview(self, node: FileNode) -> Preview:
        return await load_preview(node)
