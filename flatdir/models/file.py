"""Serializable views of virtual nodes."""

from dataclasses import dataclass, field

from mashumaro import field_options

from .base import BaseModel
from .node import FileNode, Listing, VirtualNode


@dataclass
class NodeVO(BaseModel):
    """Object representing a file or folder."""

    id: str
    name: str
    path: str
    is_folder: bool = field(metadata=field_options(alias="isFolder"))
    size: int = 0
    content_type: str | None = field(
        metadata=field_options(alias="contentType"), default=None
    )
    modified_at: str | None = field(
        metadata=field_options(alias="modifiedAt"), default=None
    )  # ISO 8601
    url: str | None = None


@dataclass
class ListingVO(BaseModel):
    """Object representing the contents of one folder."""

    path: str
    folders: list[NodeVO] = field(default_factory=list)
    files: list[NodeVO] = field(default_factory=list)


def to_node_vo(node: VirtualNode) -> NodeVO:
    """Convert a virtual node to its serializable view."""
    if isinstance(node, FileNode):
        return NodeVO(
            id=node.id,
            name=node.name,
            path=node.path,
            is_folder=False,
            size=node.size,
            content_type=node.content_type,
            modified_at=node.modified_at.isoformat(),
            url=node.content_ref.url,
        )
    return NodeVO(id=node.id, name=node.name, path=node.path, is_folder=True)


def to_listing_vo(listing: Listing) -> ListingVO:
    return ListingVO(
        path=listing.path,
        folders=[to_node_vo(node) for node in listing.folders],
        files=[to_node_vo(node) for node in listing.files],
    )
