"""Configuration for flatdir.

Settings are read from ``<config_dir>/config.yaml`` and then overridden by
``FLATDIR_*`` environment variables. The file is never written.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Self

import yaml
from mashumaro.mixins.dict import DataClassDictMixin

from flatdir.constants import DEFAULT_MAX_CONCURRENCY
from flatdir.utils.url_signer import UrlSigner

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.yaml"
DEFAULT_CONFIG_DIR = "config"


@dataclass
class ServerConfig(DataClassDictMixin):
    """Settings for the signed content server."""

    host: str = "127.0.0.1"
    port: int = 8080
    base_url: str = ""
    """Public URL prefix for signed content links; derived from host/port if empty."""

    secret_key: str = ""
    """Key for signing content URLs.

    Processes that issue links and the server that checks them must share it.
    Without one, listings carry no content URLs.
    """

    def public_url(self) -> str:
        return self.base_url or f"http://{self.host}:{self.port}"

    def url_signer(self) -> UrlSigner | None:
        """Return a signer for content URLs, if a secret is configured."""
        if not self.secret_key:
            return None
        return UrlSigner(self.secret_key)


@dataclass
class ExplorerConfig(DataClassDictMixin):
    """Top level configuration."""

    storage_dir: str = "storage"
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    server: ServerConfig = field(default_factory=ServerConfig)

    @classmethod
    def load(cls, config_dir: str | Path = DEFAULT_CONFIG_DIR) -> Self:
        """Load configuration from a directory, applying env overrides."""
        config_file = Path(config_dir) / CONFIG_FILE
        data: dict = {}
        if config_file.exists():
            logger.info(f"Loading config from {config_file}")
            with open(config_file) as f:
                data = yaml.safe_load(f) or {}
        config = cls.from_dict(data)

        if storage_dir := os.getenv("FLATDIR_STORAGE_DIR"):
            config.storage_dir = storage_dir
        if max_concurrency := os.getenv("FLATDIR_MAX_CONCURRENCY"):
            config.max_concurrency = int(max_concurrency)
        if host := os.getenv("FLATDIR_HOST"):
            config.server.host = host
        if port := os.getenv("FLATDIR_PORT"):
            config.server.port = int(port)
        if base_url := os.getenv("FLATDIR_BASE_URL"):
            config.server.base_url = base_url
        if secret_key := os.getenv("FLATDIR_SECRET_KEY"):
            config.server.secret_key = secret_key

        if config.max_concurrency < 1:
            raise ValueError(
                f"max_concurrency must be positive, got {config.max_concurrency}"
            )
        return config

    @property
    def storage_path(self) -> Path:
        return Path(self.storage_dir)
