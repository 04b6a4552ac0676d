"""Root conftest for all tests."""

import os
from collections.abc import Generator
from pathlib import Path
from typing import Awaitable, Callable
from unittest.mock import patch

import pytest
from aiohttp.test_utils import TestClient
from aiohttp.web import Application

from flatdir.services.namespace import NamespaceBuilder
from flatdir.services.transfer import TransferEngine
from tests.fakes import FakeObjectStore

# Type alias for the aiohttp_client fixture - shared across all tests
AiohttpClient = Callable[[Application], Awaitable[TestClient]]


@pytest.fixture(autouse=True)
def clean_env() -> Generator[None, None, None]:
    """Hide any FLATDIR_* variables from the developer's environment."""
    env = {k: v for k, v in os.environ.items() if not k.startswith("FLATDIR_")}
    with patch.dict(os.environ, env, clear=True):
        yield


@pytest.fixture
def storage_root(tmp_path: Path) -> Generator[Path, None, None]:
    """Storage directory for local store tests."""
    storage_root = tmp_path / "storage"
    storage_root.mkdir(parents=True)
    yield storage_root


@pytest.fixture(name="store")
def store_fixture() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture(name="namespace")
def namespace_fixture(store: FakeObjectStore) -> NamespaceBuilder:
    return NamespaceBuilder(store)


@pytest.fixture(name="transfer")
def transfer_fixture(store: FakeObjectStore) -> TransferEngine:
    return TransferEngine(store)
