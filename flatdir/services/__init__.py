"""Namespace services built on an object store."""

from .clipboard import ClipboardMode, ClipboardRegister, SelectionSet
from .explorer import ExplorerSession
from .namespace import NamespaceBuilder
from .preview import PreviewCategory, classify
from .transfer import TransferEngine, UploadItem

__all__ = [
    "ClipboardMode",
    "ClipboardRegister",
    "ExplorerSession",
    "NamespaceBuilder",
    "PreviewCategory",
    "SelectionSet",
    "TransferEngine",
    "UploadItem",
    "classify",
]
