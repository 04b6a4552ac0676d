"""Local filesystem implementation of the flat object store."""

import asyncio
import datetime
import logging
import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path

import aiofiles
import aiohttp
from mashumaro import field_options
from mashumaro.config import BaseConfig
from mashumaro.mixins.json import DataClassJSONMixin

from flatdir.exceptions import (
    BackendUnavailableException,
    InvalidPathException,
    NotFoundException,
)
from flatdir.utils.url_signer import UrlSigner

from .base import ObjectMetadata, ObjectStore, PrefixListing
from .content import ContentRef, LazyContentRef, UrlContentRef
from .memory import check_key

logger = logging.getLogger(__name__)

DATA_SUFFIX = ".__data__"
META_SUFFIX = ".__meta__"
_TEMP_SUFFIX = ".tmp"


def _holds_objects(directory: str) -> bool:
    """Return True if any object is stored at any depth below ``directory``."""
    for _, _, files in os.walk(directory):
        if any(name.endswith(DATA_SUFFIX) for name in files):
            return True
    return False


@dataclass
class _Sidecar(DataClassJSONMixin):
    """Metadata persisted next to each object."""

    content_type: str = field(metadata=field_options(alias="contentType"))
    updated_at: datetime.datetime = field(metadata=field_options(alias="updatedAt"))
    attributes: dict[str, str] = field(default_factory=dict)

    class Config(BaseConfig):
        serialize_by_alias = True


class LocalObjectStore(ObjectStore):
    """Object store keeping each key as a file under a root directory.

    Path structure: <root>/objects/<prefix dirs>/<name>.__data__ with a JSON
    sidecar <name>.__meta__ next to it. Directories exist only while they hold
    objects; they are pruned when their last object is deleted.

    When a ``url_signer`` is configured, content references carry a signed
    URL served by ``flatdir.server.app``; with an ``http_session`` as well the
    content is fetched over HTTP through that URL.
    """

    def __init__(
        self,
        storage_root: Path,
        url_signer: UrlSigner | None = None,
        base_url: str = "",
        http_session: aiohttp.ClientSession | None = None,
    ) -> None:
        """Create a local object store instance."""
        self.root = storage_root / "objects"
        self.root.mkdir(parents=True, exist_ok=True)
        self._url_signer = url_signer
        self._base_url = base_url
        self._http_session = http_session

    def _dir_path(self, prefix: str) -> Path:
        if not prefix:
            return self.root
        return self.root.joinpath(*self._segments(prefix))

    def _segments(self, key: str) -> list[str]:
        segments = key.split("/")
        for segment in segments:
            if segment in ("", ".", ".."):
                raise InvalidPathException(f"Invalid storage key: {key!r}")
            if segment.endswith((DATA_SUFFIX, META_SUFFIX, _TEMP_SUFFIX)):
                raise InvalidPathException(f"Reserved name in storage key: {key!r}")
        return segments

    def _paths(self, key: str) -> tuple[Path, Path]:
        check_key(key)
        *dirs, name = self._segments(key)
        parent = self.root.joinpath(*dirs)
        return parent / f"{name}{DATA_SUFFIX}", parent / f"{name}{META_SUFFIX}"

    def _scan(self, prefix: str) -> PrefixListing:
        listing = PrefixListing()
        directory = self._dir_path(prefix)
        if not directory.is_dir():
            return listing
        start = f"{prefix}/" if prefix else ""
        for entry in sorted(os.scandir(directory), key=lambda e: e.name):
            if entry.is_dir():
                if _holds_objects(entry.path):
                    listing.sub_prefixes.append(start + entry.name)
            elif entry.name.endswith(DATA_SUFFIX):
                listing.objects.append(start + entry.name[: -len(DATA_SUFFIX)])
        return listing

    async def list_by_prefix(self, prefix: str) -> PrefixListing:
        if prefix:
            self._segments(prefix)
        try:
            return await asyncio.to_thread(self._scan, prefix)
        except OSError as err:
            raise BackendUnavailableException(
                f"Failed to list prefix {prefix!r}: {err}"
            ) from err

    async def get_metadata(self, key: str) -> ObjectMetadata:
        data_path, meta_path = self._paths(key)
        try:
            stat = await asyncio.to_thread(data_path.stat)
            async with aiofiles.open(meta_path, "r", encoding="utf-8") as f:
                sidecar = _Sidecar.from_json(await f.read())
        except FileNotFoundError as err:
            raise NotFoundException(f"Object {key} not found") from err
        except OSError as err:
            raise BackendUnavailableException(
                f"Failed to read metadata for {key}: {err}"
            ) from err
        return ObjectMetadata(
            key=key,
            size=stat.st_size,
            content_type=sidecar.content_type,
            updated_at=sidecar.updated_at,
            attributes=dict(sidecar.attributes),
        )

    async def read_object(self, key: str) -> bytes:
        """Read full object content."""
        data_path, _ = self._paths(key)
        try:
            async with aiofiles.open(data_path, "rb") as f:
                return await f.read()
        except FileNotFoundError as err:
            raise NotFoundException(f"Object {key} not found") from err
        except OSError as err:
            raise BackendUnavailableException(f"Failed to read {key}: {err}") from err

    async def get_content_ref(self, key: str) -> ContentRef:
        data_path, _ = self._paths(key)
        if not await asyncio.to_thread(data_path.exists):
            raise NotFoundException(f"Object {key} not found")
        url = None
        if self._url_signer is not None:
            url = self._url_signer.sign_url(key, self._base_url)
            if self._http_session is not None:
                return UrlContentRef(key, url, self._http_session)
        return LazyContentRef(key, lambda: self.read_object(key), url=url)

    async def _write_atomic(self, path: Path, data: bytes) -> None:
        # Write to temp file and move for atomicity
        temp_path = path.with_name(
            f"{path.name}.{secrets.token_hex(4)}{_TEMP_SUFFIX}"
        )
        try:
            async with aiofiles.open(temp_path, "wb") as f:
                await f.write(data)
            await asyncio.to_thread(temp_path.replace, path)
        except Exception:
            await asyncio.to_thread(temp_path.unlink, missing_ok=True)
            raise

    async def put_object(
        self,
        key: str,
        data: bytes,
        content_type: str,
        attributes: dict[str, str] | None = None,
    ) -> None:
        data_path, meta_path = self._paths(key)
        sidecar = _Sidecar(
            content_type=content_type,
            updated_at=datetime.datetime.now(datetime.timezone.utc),
            attributes=dict(attributes or {}),
        )
        try:
            await asyncio.to_thread(data_path.parent.mkdir, parents=True, exist_ok=True)
            await self._write_atomic(data_path, data)
            await self._write_atomic(meta_path, sidecar.to_json().encode("utf-8"))
        except OSError as err:
            raise BackendUnavailableException(f"Failed to write {key}: {err}") from err
        logger.debug(f"Put {key} ({len(data)} bytes, {content_type})")

    def _prune(self, directory: Path) -> None:
        """Remove empty directories up to the root."""
        try:
            while directory != self.root and directory.is_dir():
                if any(directory.iterdir()):
                    return
                directory.rmdir()
                directory = directory.parent
        except OSError as err:
            # A concurrent put may have repopulated the directory.
            logger.debug(f"Stopped pruning at {directory}: {err}")

    async def delete_object(self, key: str) -> None:
        data_path, meta_path = self._paths(key)
        try:
            await asyncio.to_thread(data_path.unlink, missing_ok=True)
            await asyncio.to_thread(meta_path.unlink, missing_ok=True)
            await asyncio.to_thread(self._prune, data_path.parent)
        except OSError as err:
            raise BackendUnavailableException(f"Failed to delete {key}: {err}") from err
        logger.debug(f"Deleted {key}")
