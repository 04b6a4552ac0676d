"""Clipboard and multi-selection state.

Both are plain in-process state with no store access; the transfer engine
consumes them.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from flatdir.models.node import VirtualNode

__all__ = [
    "ClipboardMode",
    "ClipboardEntry",
    "ClipboardRegister",
    "SelectionSet",
]


class ClipboardMode(str, Enum):
    """Whether a paste keeps or removes the source."""

    COPY = "copy"
    CUT = "cut"


@dataclass(frozen=True)
class ClipboardEntry:
    node: VirtualNode
    mode: ClipboardMode


class ClipboardRegister:
    """Single-slot clipboard; each copy or cut replaces the previous entry."""

    def __init__(self) -> None:
        self._entry: ClipboardEntry | None = None

    @property
    def entry(self) -> ClipboardEntry | None:
        return self._entry

    @property
    def node(self) -> VirtualNode | None:
        return self._entry.node if self._entry else None

    @property
    def mode(self) -> ClipboardMode | None:
        return self._entry.mode if self._entry else None

    def mark_for_copy(self, node: VirtualNode) -> None:
        self._entry = ClipboardEntry(node, ClipboardMode.COPY)

    def mark_for_cut(self, node: VirtualNode) -> None:
        self._entry = ClipboardEntry(node, ClipboardMode.CUT)

    def clear(self) -> None:
        self._entry = None

    def __bool__(self) -> bool:
        return self._entry is not None


class SelectionSet:
    """Nodes selected for a bulk action, keyed by node id."""

    def __init__(self) -> None:
        self._nodes: dict[str, VirtualNode] = {}

    def select(self, node: VirtualNode) -> None:
        self._nodes[node.id] = node

    def deselect(self, node: VirtualNode) -> None:
        self._nodes.pop(node.id, None)

    def toggle(self, node: VirtualNode) -> bool:
        """Flip membership of ``node``; returns True if it is now selected."""
        if node.id in self._nodes:
            del self._nodes[node.id]
            return False
        self._nodes[node.id] = node
        return True

    def discard_keys(self, keys: Iterable[str]) -> None:
        """Remove the nodes with the given ids."""
        for key in keys:
            self._nodes.pop(key, None)

    def clear(self) -> None:
        self._nodes.clear()

    @property
    def ids(self) -> set[str]:
        return set(self._nodes)

    @property
    def nodes(self) -> list[VirtualNode]:
        return list(self._nodes.values())

    def __contains__(self, node: object) -> bool:
        node_id = getattr(node, "id", node)
        return node_id in self._nodes

    def __iter__(self) -> Iterator[VirtualNode]:
        return iter(list(self._nodes.values()))

    def __len__(self) -> int:
        return len(self._nodes)
