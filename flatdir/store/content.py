"""Lazy references to object content."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

import aiohttp

from flatdir.exceptions import BackendUnavailableException, NotFoundException

logger = logging.getLogger(__name__)

__all__ = [
    "ContentRef",
    "LazyContentRef",
    "UrlContentRef",
]


class ContentRef(ABC):
    """Capability to fetch the bytes of one stored object.

    Holding a reference does not read anything; ``read`` fetches the current
    content from the backend each time it is called.
    """

    def __init__(self, key: str, url: str | None = None) -> None:
        self.key = key
        self.url = url
        """Fetchable location of the content, when the backend provides one."""

    @abstractmethod
    async def read(self) -> bytes:
        """Fetch the full content."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key={self.key!r})"


class LazyContentRef(ContentRef):
    """Content reference resolved by a backend callback."""

    def __init__(
        self,
        key: str,
        loader: Callable[[], Awaitable[bytes]],
        url: str | None = None,
    ) -> None:
        super().__init__(key, url)
        self._loader = loader

    async def read(self) -> bytes:
        return await self._loader()


class UrlContentRef(ContentRef):
    """Content reference fetched over HTTP from a (signed) URL."""

    def __init__(self, key: str, url: str, session: aiohttp.ClientSession) -> None:
        super().__init__(key, url)
        self._session = session

    async def read(self) -> bytes:
        assert self.url is not None
        try:
            async with self._session.get(self.url) as response:
                if response.status == 404:
                    raise NotFoundException(f"Object {self.key} not found")
                response.raise_for_status()
                return await response.read()
        except aiohttp.ClientError as err:
            logger.warning(f"Failed to fetch content for {self.key}: {err}")
            raise BackendUnavailableException(
                f"Failed to fetch content for {self.key}: {err}"
            ) from err
