import asyncio

import pytest

from flatdir.exceptions import (
    BackendUnavailableException,
    PartialFailureException,
    UnsupportedOperationException,
)
from flatdir.models.node import FileNode, FolderNode
from flatdir.models.report import OperationStatus
from flatdir.services.explorer import ExplorerSession
from flatdir.services.preview import PreviewCategory
from flatdir.services.transfer import UploadItem
from flatdir.utils.paths import Breadcrumb
from tests.fakes import FakeObjectStore


@pytest.fixture
async def session(store: FakeObjectStore) -> ExplorerSession:
    session = ExplorerSession(store)
    await session.create_folder("docs")
    await session.navigate("/docs")
    await session.upload([UploadItem("a.txt", b"A"), UploadItem("b.txt", b"B")])
    await session.create_folder("sub")
    await session.navigate("/")
    return session


async def test_navigate(session: ExplorerSession) -> None:
    listing = await session.navigate("/docs")

    assert listing is not None
    assert session.current_path == "/docs"
    assert session.listing is listing
    assert [f.name for f in listing.folders] == ["sub"]
    assert [f.name for f in listing.files] == ["a.txt", "b.txt"]
    assert session.breadcrumbs() == [
        Breadcrumb(label="Root", path="/"),
        Breadcrumb(label="docs", path="/docs"),
    ]

    listing = await session.open_parent()
    assert listing is not None
    assert session.current_path == "/"
    assert [f.name for f in listing.folders] == ["docs"]


async def test_sidebar(session: ExplorerSession) -> None:
    await session.navigate("/docs/sub")
    assert await session.sidebar() == [FolderNode.from_prefix("docs")]


async def test_last_navigation_wins(
    store: FakeObjectStore, session: ExplorerSession
) -> None:
    gate = asyncio.Event()
    store.list_gates["docs"] = gate

    slow = asyncio.create_task(session.navigate("/docs"))
    await asyncio.sleep(0)
    fast = await session.navigate("/docs/sub")
    gate.set()

    assert await slow is None
    assert fast is not None
    assert session.current_path == "/docs/sub"
    assert session.listing is fast


async def test_upload_refreshes(session: ExplorerSession) -> None:
    await session.navigate("/docs/sub")
    await session.upload([UploadItem("c.txt", b"C")])

    assert session.listing is not None
    assert [f.name for f in session.listing.files] == ["c.txt"]


async def test_upload_partial_failure(
    store: FakeObjectStore, session: ExplorerSession
) -> None:
    await session.navigate("/docs/sub")
    store.fail_put.add("docs/sub/d.txt")

    with pytest.raises(PartialFailureException):
        await session.upload([UploadItem("c.txt", b"C"), UploadItem("d.txt", b"D")])

    assert session.listing is not None
    assert [f.name for f in session.listing.files] == ["c.txt"]


async def test_rename_refreshes(session: ExplorerSession) -> None:
    listing = await session.navigate("/docs")
    assert listing is not None
    node = listing.find("a.txt")
    assert node is not None

    report = await session.rename(node, "z.txt")

    assert report.success
    assert session.listing is not None
    assert [f.name for f in session.listing.files] == ["b.txt", "z.txt"]


async def test_delete_selected(session: ExplorerSession) -> None:
    listing = await session.navigate("/docs")
    assert listing is not None
    for node in listing.nodes:
        assert session.toggle_selection(node)

    report = await session.delete_selected()

    assert report.status == OperationStatus.SUCCEEDED
    assert len(session.selection) == 0
    assert session.listing is not None
    assert session.listing.nodes == []


async def test_delete_selected_keeps_failures(
    store: FakeObjectStore, session: ExplorerSession
) -> None:
    listing = await session.navigate("/docs")
    assert listing is not None
    for node in listing.files:
        session.toggle_selection(node)
    store.fail_delete.add("docs/b.txt")

    report = await session.delete_selected()

    assert report.status == OperationStatus.PARTIAL
    assert session.selection.ids == {"docs/b.txt"}
    assert session.listing is not None
    assert [f.name for f in session.listing.files] == ["b.txt"]


async def test_cut_and_paste(session: ExplorerSession) -> None:
    listing = await session.navigate("/docs")
    assert listing is not None
    node = listing.find("a.txt")
    assert isinstance(node, FileNode)
    session.cut(node)

    await session.navigate("/docs/sub")
    assert await session.paste() == "docs/sub/a.txt"

    assert not session.clipboard
    assert session.listing is not None
    assert [f.name for f in session.listing.files] == ["a.txt"]
    assert (await session.namespace.list("/docs")).find("a.txt") is None


async def test_copy_and_paste(session: ExplorerSession) -> None:
    listing = await session.navigate("/docs")
    assert listing is not None
    node = listing.find("b.txt")
    assert isinstance(node, FileNode)
    session.copy(node)

    await session.navigate("/")
    assert await session.paste() == "b.txt"
    assert session.clipboard
    assert (await session.namespace.list("/docs")).find("b.txt") is not None


async def test_preview(session: ExplorerSession) -> None:
    listing = await session.navigate("/docs")
    assert listing is not None
    node = listing.find("a.txt")
    assert isinstance(node, FileNode)

    preview = await session.preview(node)
    assert preview.category == PreviewCategory.TEXT
    assert preview.text == "A"


async def test_failed_navigation_keeps_current_folder(
    store: FakeObjectStore, session: ExplorerSession
) -> None:
    before = await session.navigate("/docs")
    store.fail_list.add("docs/sub")

    with pytest.raises(BackendUnavailableException):
        await session.navigate("/docs/sub")

    assert session.current_path == "/docs"
    assert session.listing is before
    assert session.breadcrumbs()[-1] == Breadcrumb(label="docs", path="/docs")


async def test_paste_error_survives_failed_refresh(
    store: FakeObjectStore, session: ExplorerSession
) -> None:
    listing = await session.navigate("/docs")
    assert listing is not None
    node = listing.find("a.txt")
    assert isinstance(node, FileNode)
    session.cut(node)
    await session.navigate("/docs/sub")
    store.fail_delete.add("docs/a.txt")
    store.fail_list.add("docs/sub")

    with pytest.raises(PartialFailureException) as exc_info:
        await session.paste()

    assert exc_info.value.report is not None
    assert exc_info.value.report.failed_keys == ["docs/a.txt"]
    assert session.clipboard


async def test_paste_folder_error_survives_failed_refresh(
    store: FakeObjectStore, session: ExplorerSession
) -> None:
    session.copy(FolderNode.from_prefix("docs/sub"))
    store.fail_list.add("")

    with pytest.raises(UnsupportedOperationException):
        await session.paste()
