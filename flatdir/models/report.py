"""Reports produced by composite namespace operations.

A composite operation (bulk delete, rename, multi-file upload) is carried out
as many independent store calls. Each call's outcome is recorded instead of
aborting the whole operation, and the report summarizes the result as
succeeded, partial or failed.
"""

from dataclasses import dataclass, field
from enum import Enum

from mashumaro import field_options

from flatdir.exceptions import (
    ErrorKind,
    NamespaceException,
    OperationFailedException,
    PartialFailureException,
)

from .base import BaseModel

__all__ = [
    "OperationStatus",
    "KeyOutcome",
    "NodeOutcome",
    "BaseReport",
    "DeleteReport",
    "TransferReport",
    "RenameReport",
    "UploadReport",
]


class OperationStatus(str, Enum):
    """Overall outcome of a composite operation."""

    SUCCEEDED = "succeeded"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class KeyOutcome(BaseModel):
    """Outcome of the store calls made for a single key."""

    key: str
    """Key the step operated on."""

    new_key: str | None = field(metadata=field_options(alias="newKey"), default=None)
    """Destination key for copy and move steps."""

    written: bool = False
    """Whether content was put at the destination key."""

    removed: bool = False
    """Whether the source key was deleted."""

    error_kind: ErrorKind | None = field(
        metadata=field_options(alias="errorKind"), default=None
    )
    error_msg: str | None = field(metadata=field_options(alias="errorMsg"), default=None)

    @property
    def success(self) -> bool:
        return self.error_kind is None

    def fail(self, err: NamespaceException) -> None:
        """Record the error that stopped this step."""
        self.error_kind = err.kind
        self.error_msg = str(err)


def _status(outcomes: list[bool]) -> OperationStatus:
    if all(outcomes):
        return OperationStatus.SUCCEEDED
    if any(outcomes):
        return OperationStatus.PARTIAL
    return OperationStatus.FAILED


@dataclass
class BaseReport(BaseModel):
    """Base class for composite operation reports."""

    @property
    def status(self) -> OperationStatus:
        raise NotImplementedError

    @property
    def failed_keys(self) -> list[str]:
        raise NotImplementedError

    @property
    def success(self) -> bool:
        return self.status == OperationStatus.SUCCEEDED

    def raise_for_status(self) -> None:
        """Raise if the operation did not fully succeed."""
        status = self.status
        if status == OperationStatus.PARTIAL:
            raise PartialFailureException(
                f"Operation partially failed for: {', '.join(self.failed_keys)}", self
            )
        if status == OperationStatus.FAILED:
            raise OperationFailedException(
                f"Operation failed for: {', '.join(self.failed_keys)}", self
            )


@dataclass
class NodeOutcome(BaseModel):
    """Outcome of deleting one selected node."""

    key: str
    is_folder: bool = field(metadata=field_options(alias="isFolder"), default=False)
    error_kind: ErrorKind | None = field(
        metadata=field_options(alias="errorKind"), default=None
    )
    error_msg: str | None = field(metadata=field_options(alias="errorMsg"), default=None)
    keys: list[KeyOutcome] = field(default_factory=list)
    """Per-key outcomes; for a file this is the file itself."""

    @property
    def success(self) -> bool:
        return self.error_kind is None and all(k.success for k in self.keys)

    @property
    def failed_keys(self) -> list[str]:
        if self.error_kind is not None and not self.keys:
            return [self.key]
        return [k.key for k in self.keys if not k.success]


@dataclass
class DeleteReport(BaseReport):
    """Report of a bulk delete."""

    nodes: list[NodeOutcome] = field(default_factory=list)

    @property
    def status(self) -> OperationStatus:
        return _status([node.success for node in self.nodes])

    @property
    def failed_keys(self) -> list[str]:
        return [key for node in self.nodes for key in node.failed_keys]

    @property
    def succeeded_nodes(self) -> list[str]:
        return [node.key for node in self.nodes if node.success]

    @property
    def failed_nodes(self) -> list[str]:
        return [node.key for node in self.nodes if not node.success]


@dataclass
class TransferReport(BaseReport):
    """Report of moving or copying one node to a new key."""

    key: str = ""
    new_key: str = field(metadata=field_options(alias="newKey"), default="")
    is_folder: bool = field(metadata=field_options(alias="isFolder"), default=False)
    error_kind: ErrorKind | None = field(
        metadata=field_options(alias="errorKind"), default=None
    )
    """Failure that prevented any per-key work (e.g. listing the folder)."""

    error_msg: str | None = field(metadata=field_options(alias="errorMsg"), default=None)
    keys: list[KeyOutcome] = field(default_factory=list)

    @property
    def status(self) -> OperationStatus:
        if self.error_kind is not None:
            return OperationStatus.FAILED
        if all(k.success for k in self.keys):
            return OperationStatus.SUCCEEDED
        # A key that was written but not removed still changed the store.
        if any(k.success or k.written for k in self.keys):
            return OperationStatus.PARTIAL
        return OperationStatus.FAILED

    @property
    def failed_keys(self) -> list[str]:
        if self.error_kind is not None:
            return [self.key]
        return [k.key for k in self.keys if not k.success]

    def fail(self, err: NamespaceException) -> None:
        self.error_kind = err.kind
        self.error_msg = str(err)


@dataclass
class RenameReport(TransferReport):
    """Report of renaming a file or folder."""

    new_name: str = field(metadata=field_options(alias="newName"), default="")


@dataclass
class UploadReport(BaseReport):
    """Report of uploading several files into one folder."""

    keys: list[KeyOutcome] = field(default_factory=list)

    @property
    def status(self) -> OperationStatus:
        return _status([k.success for k in self.keys])

    @property
    def failed_keys(self) -> list[str]:
        return [k.key for k in self.keys if not k.success]
