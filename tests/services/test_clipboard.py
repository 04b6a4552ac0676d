import datetime

from flatdir.models.node import FileNode, FolderNode
from flatdir.services.clipboard import ClipboardMode, ClipboardRegister, SelectionSet
from flatdir.store.content import LazyContentRef


async def _empty() -> bytes:
    return b""


def _file(key: str) -> FileNode:
    return FileNode(
        key=key,
        name=key.rsplit("/", 1)[-1],
        path=key,
        size=0,
        content_type="text/plain",
        modified_at=datetime.datetime(2025, 1, 1, tzinfo=datetime.timezone.utc),
        content_ref=LazyContentRef(key, _empty),
    )


def test_clipboard_holds_one_entry() -> None:
    clipboard = ClipboardRegister()
    assert not clipboard
    assert clipboard.entry is None

    a = _file("docs/a.txt")
    b = FolderNode.from_prefix("docs/sub")
    clipboard.mark_for_copy(a)
    clipboard.mark_for_cut(b)

    assert clipboard
    assert clipboard.node == b
    assert clipboard.mode == ClipboardMode.CUT

    clipboard.clear()
    assert clipboard.node is None
    assert clipboard.mode is None


def test_selection_toggle() -> None:
    selection = SelectionSet()
    a = _file("docs/a.txt")
    sub = FolderNode.from_prefix("docs/sub")

    assert selection.toggle(a)
    assert selection.toggle(sub)
    assert a in selection
    assert "docs/sub" in selection
    assert len(selection) == 2

    assert not selection.toggle(a)
    assert a not in selection
    assert selection.ids == {"docs/sub"}


def test_selection_select_is_idempotent() -> None:
    selection = SelectionSet()
    a = _file("docs/a.txt")
    selection.select(a)
    selection.select(_file("docs/a.txt"))
    assert selection.nodes == [a]

    selection.deselect(a)
    selection.deselect(a)
    assert len(selection) == 0


def test_selection_discard_keys() -> None:
    selection = SelectionSet()
    for key in ("a.txt", "b.txt", "c.txt"):
        selection.select(_file(key))

    selection.discard_keys(["a.txt", "c.txt", "missing"])
    assert [node.key for node in selection] == ["b.txt"]

    selection.clear()
    assert list(selection) == []
