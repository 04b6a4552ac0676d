"""Conversion between display paths and storage keys.

Display paths are what a user sees (``/docs/a.txt``, ``/`` for the root).
Storage keys never start with a slash (``docs/a.txt``) and the root is the
empty prefix.
"""

from dataclasses import dataclass

from flatdir.exceptions import InvalidPathException

__all__ = [
    "ROOT",
    "Breadcrumb",
    "normalize",
    "join",
    "parent",
    "parent_key",
    "name_of",
    "to_display",
    "validate_name",
    "breadcrumbs",
]

ROOT = "/"


def _check_segments(prefix: str, original: str) -> None:
    for segment in prefix.split("/"):
        if not segment:
            raise InvalidPathException(f"Empty path segment in {original!r}")
        if segment in (".", ".."):
            raise InvalidPathException(f"Relative path segment in {original!r}")


def normalize(display_path: str) -> str:
    """Return the storage prefix for a display path."""
    if display_path in ("", ROOT):
        return ""
    prefix = display_path[1:] if display_path.startswith("/") else display_path
    _check_segments(prefix, display_path)
    return prefix


def join(prefix: str, name: str) -> str:
    """Join a storage prefix and a relative name into a key."""
    if not name:
        raise InvalidPathException("Name cannot be empty")
    key = f"{prefix}/{name}" if prefix else name
    _check_segments(key, key)
    return key


def parent(display_path: str) -> str:
    """Return the display path of the enclosing folder."""
    prefix = normalize(display_path)
    if not prefix:
        return ROOT
    return to_display(parent_key(prefix))


def parent_key(key: str) -> str:
    """Return the prefix that contains a key; the root is ``""``."""
    if "/" not in key:
        return ""
    return key.rsplit("/", 1)[0]


def name_of(key: str) -> str:
    """Return the last segment of a key."""
    return key.rsplit("/", 1)[-1]


def to_display(prefix: str) -> str:
    return f"/{prefix}"


def validate_name(name: str) -> str:
    """Check that a name is a single valid path segment."""
    if not name or not name.strip():
        raise InvalidPathException("Name cannot be empty")
    if "/" in name:
        raise InvalidPathException(f"Name cannot contain '/': {name!r}")
    if name in (".", ".."):
        raise InvalidPathException(f"Invalid name: {name!r}")
    return name


@dataclass(frozen=True)
class Breadcrumb:
    """One clickable element of the location bar."""

    label: str
    path: str


def breadcrumbs(display_path: str) -> list[Breadcrumb]:
    """Return the chain of folders from the root down to ``display_path``."""
    prefix = normalize(display_path)
    crumbs = [Breadcrumb(label="Root", path=ROOT)]
    if not prefix:
        return crumbs
    segments = prefix.split("/")
    for index, segment in enumerate(segments):
        crumbs.append(
            Breadcrumb(label=segment, path=to_display("/".join(segments[: index + 1])))
        )
    return crumbs
