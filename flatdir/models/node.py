"""Virtual nodes synthesized from the flat store."""

import datetime
from dataclasses import dataclass, field

from flatdir.store.content import ContentRef
from flatdir.utils import paths

__all__ = [
    "FolderNode",
    "FileNode",
    "VirtualNode",
    "Listing",
]


@dataclass(frozen=True)
class FolderNode:
    """A folder derived from a key prefix.

    Nothing is stored for the folder itself: it exists while at least one
    object (possibly a placeholder) lives under ``path + "/"``.
    """

    key: str
    name: str
    path: str

    @property
    def id(self) -> str:
        return self.key

    @property
    def is_folder(self) -> bool:
        return True

    @classmethod
    def from_prefix(cls, prefix: str) -> "FolderNode":
        """Build a folder node from a storage prefix."""
        return cls(key=prefix, name=paths.name_of(prefix), path=prefix)


@dataclass(frozen=True)
class FileNode:
    """A file backed one-to-one by a stored object."""

    key: str
    name: str
    path: str
    size: int
    content_type: str
    modified_at: datetime.datetime
    content_ref: ContentRef = field(compare=False, repr=False)

    @property
    def id(self) -> str:
        return self.key

    @property
    def is_folder(self) -> bool:
        return False

    @property
    def parent_path(self) -> str:
        """Return the prefix of the folder holding this file."""
        return paths.parent_key(self.key)


VirtualNode = FolderNode | FileNode


@dataclass
class Listing:
    """Result of listing one folder level.

    Both sequences keep the order the store returned them in.
    """

    path: str
    folders: list[FolderNode] = field(default_factory=list)
    files: list[FileNode] = field(default_factory=list)

    @property
    def nodes(self) -> list[VirtualNode]:
        return [*self.folders, *self.files]

    @property
    def keys(self) -> set[str]:
        return {node.key for node in self.nodes}

    def sorted(self) -> "Listing":
        """Return a copy in display order (case-insensitive by name)."""
        return Listing(
            path=self.path,
            folders=sorted(self.folders, key=lambda n: n.name.lower()),
            files=sorted(self.files, key=lambda n: n.name.lower()),
        )

    def find(self, name: str) -> VirtualNode | None:
        """Return the node with the given name, if listed."""
        for node in self.nodes:
            if node.name == name:
                return node
        return None
