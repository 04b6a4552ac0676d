"""Signed URLs for object content.

A signed URL grants read access to a single storage key for a limited time.
The signature is an HMAC-SHA256 over the key, a millisecond timestamp and a
random nonce.
"""

import datetime
import hashlib
import hmac
import logging
import time
import uuid
from dataclasses import dataclass
from urllib.parse import quote, urlencode

logger = logging.getLogger(__name__)

__all__ = [
    "CONTENT_ROUTE",
    "UrlSigner",
]

CONTENT_ROUTE = "/content/"
DEFAULT_MAX_AGE = datetime.timedelta(minutes=15)
CLOCK_SKEW_MS = 5000


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class SignedKey:
    """The fields covered by a content URL signature."""

    key: str
    timestamp: int
    nonce: str

    def payload(self) -> bytes:
        # Length prefix keeps keys containing the separator unambiguous.
        return f"{len(self.key)}:{self.key}|{self.timestamp}|{self.nonce}".encode()

    def digest(self, secret_key: bytes) -> str:
        return hmac.new(secret_key, self.payload(), hashlib.sha256).hexdigest()


class UrlSigner:
    """Signs and verifies content URLs with a shared secret."""

    def __init__(self, secret_key: str) -> None:
        if not secret_key:
            raise ValueError("Secret key cannot be empty")
        self._secret_key = secret_key.encode("utf-8")

    def sign(self, key: str) -> tuple[str, int, str]:
        """Return ``(signature, timestamp, nonce)`` for a storage key."""
        signed = SignedKey(key, _now_ms(), uuid.uuid4().hex)
        return signed.digest(self._secret_key), signed.timestamp, signed.nonce

    def sign_url(self, key: str, base_url: str = "") -> str:
        """Return a signed content URL for a storage key.

        The URL points at the content route of ``flatdir.server.app`` below
        ``base_url``; an empty base yields a server-relative URL.
        """
        signature, timestamp, nonce = self.sign(key)
        query = urlencode(
            {"signature": signature, "timestamp": timestamp, "nonce": nonce}
        )
        return f"{base_url.rstrip('/')}{CONTENT_ROUTE}{quote(key)}?{query}"

    def verify(
        self,
        key: str,
        signature: str,
        timestamp: int,
        nonce: str,
        max_age: datetime.timedelta = DEFAULT_MAX_AGE,
    ) -> bool:
        """Check a signature presented for ``key``.

        Fails for missing fields, for timestamps older than ``max_age`` and
        for timestamps too far in the future.
        """
        if not (signature and timestamp and nonce):
            return False
        age_ms = _now_ms() - timestamp
        if age_ms > max_age.total_seconds() * 1000 or age_ms < -CLOCK_SKEW_MS:
            logger.info(f"Rejected signature for {key}: timestamp age {age_ms}ms")
            return False
        expected = SignedKey(key, timestamp, nonce).digest(self._secret_key)
        return hmac.compare_digest(expected, signature)
