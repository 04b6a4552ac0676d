"""Exceptions raised by the namespace layer."""

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models.report import BaseReport

__all__ = [
    "ErrorKind",
    "NamespaceException",
    "InvalidPathException",
    "BackendUnavailableException",
    "NameConflictException",
    "NotFoundException",
    "PartialFailureException",
    "OperationFailedException",
    "UnsupportedOperationException",
]


class ErrorKind(str, Enum):
    """Category of a failure, recorded in operation reports."""

    INVALID_PATH = "InvalidPath"
    BACKEND_UNAVAILABLE = "BackendUnavailable"
    NAME_CONFLICT = "NameConflict"
    NOT_FOUND = "NotFound"
    PARTIAL_FAILURE = "PartialFailure"
    OPERATION_FAILED = "OperationFailed"
    UNSUPPORTED = "Unsupported"


class NamespaceException(Exception):
    """Base exception for namespace operations."""

    kind: ErrorKind = ErrorKind.BACKEND_UNAVAILABLE


class InvalidPathException(NamespaceException):
    """Exception raised when a path or name is malformed."""

    kind = ErrorKind.INVALID_PATH


class BackendUnavailableException(NamespaceException):
    """Exception raised when the object store cannot be reached."""

    kind = ErrorKind.BACKEND_UNAVAILABLE


class NameConflictException(NamespaceException):
    """Exception raised when a put collides with existing state."""

    kind = ErrorKind.NAME_CONFLICT


class NotFoundException(NamespaceException):
    """Exception raised when operating on a key that no longer exists."""

    kind = ErrorKind.NOT_FOUND


class UnsupportedOperationException(NamespaceException):
    """Exception raised for operations the namespace does not implement."""

    kind = ErrorKind.UNSUPPORTED


class _ReportException(NamespaceException):
    def __init__(self, message: str, report: "BaseReport | None" = None) -> None:
        super().__init__(message)
        self.report = report


class PartialFailureException(_ReportException):
    """Exception raised when some, but not all, steps of a composite failed."""

    kind = ErrorKind.PARTIAL_FAILURE


class OperationFailedException(_ReportException):
    """Exception raised when every step of a composite operation failed."""

    kind = ErrorKind.OPERATION_FAILED
