"""Preview classification by file extension."""

import logging
from dataclasses import dataclass
from enum import Enum

from flatdir.models.node import FileNode

logger = logging.getLogger(__name__)

__all__ = [
    "PreviewCategory",
    "Preview",
    "classify",
    "load_preview",
]

IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "bmp", "webp"})
TEXT_EXTENSIONS = frozenset({"txt", "md", "json", "js", "css", "html", "xml"})
VIDEO_EXTENSIONS = frozenset({"mp4", "webm", "mov", "avi", "mkv"})

DEFAULT_MAX_TEXT_BYTES = 1024 * 1024


class PreviewCategory(str, Enum):
    """How a file can be previewed."""

    IMAGE = "image"
    TEXT = "text"
    VIDEO = "video"
    OTHER = "other"


def classify(name: str) -> PreviewCategory:
    """Classify a file name by the text after its last dot, case-insensitively.

    Dotfiles such as ``.md`` count as having that extension.
    """
    extension = name.rsplit(".", 1)[-1].lower() if "." in name else ""
    if extension in IMAGE_EXTENSIONS:
        return PreviewCategory.IMAGE
    if extension in TEXT_EXTENSIONS:
        return PreviewCategory.TEXT
    if extension in VIDEO_EXTENSIONS:
        return PreviewCategory.VIDEO
    return PreviewCategory.OTHER


@dataclass
class Preview:
    """Preview of a file.

    ``text`` is only loaded for text files; images and videos are shown from
    ``url`` when the store provides one.
    """

    category: PreviewCategory
    url: str | None = None
    text: str | None = None
    truncated: bool = False


async def load_preview(
    node: FileNode, max_bytes: int = DEFAULT_MAX_TEXT_BYTES
) -> Preview:
    """Build the preview for a file, reading content only for text files."""
    category = classify(node.name)
    preview = Preview(category=category, url=node.content_ref.url)
    if category != PreviewCategory.TEXT:
        return preview
    data = await node.content_ref.read()
    if len(data) > max_bytes:
        logger.debug(f"Truncating preview of {node.key} to {max_bytes} bytes")
        data = data[:max_bytes]
        preview.truncated = True
    preview.text = data.decode("utf-8", errors="replace")
    return preview
