from pathlib import Path

import pytest
from aiohttp.test_utils import TestClient

from flatdir.exceptions import NotFoundException
from flatdir.server.app import create_app
from flatdir.store.content import UrlContentRef
from flatdir.store.local import LocalObjectStore
from flatdir.utils.url_signer import UrlSigner
from tests.conftest import AiohttpClient


@pytest.fixture
def url_signer() -> UrlSigner:
    return UrlSigner("test-secret")


@pytest.fixture
async def store(storage_root: Path, url_signer: UrlSigner) -> LocalObjectStore:
    store = LocalObjectStore(storage_root, url_signer=url_signer)
    await store.put_object("docs/a.txt", b"Hello World", "text/plain")
    return store


@pytest.fixture
async def client(
    aiohttp_client: AiohttpClient, store: LocalObjectStore, url_signer: UrlSigner
) -> TestClient:
    return await aiohttp_client(create_app(store, url_signer))


async def test_serve_signed_content(
    client: TestClient, url_signer: UrlSigner
) -> None:
    resp = await client.get(url_signer.sign_url("docs/a.txt"))
    assert resp.status == 200
    assert resp.content_type == "text/plain"
    assert await resp.read() == b"Hello World"


async def test_invalid_signature(client: TestClient, url_signer: UrlSigner) -> None:
    url = url_signer.sign_url("docs/a.txt").replace("signature=", "signature=00")
    resp = await client.get(url)
    assert resp.status == 403
    data = await resp.json()
    assert data["error"] == "Invalid signature"

    resp = await client.get("/content/docs/a.txt")
    assert resp.status == 403

    # A signature for one key does not grant access to another
    other = url_signer.sign_url("docs/b.txt").replace("docs/b.txt", "docs/a.txt")
    resp = await client.get(other)
    assert resp.status == 403


async def test_missing_object(client: TestClient, url_signer: UrlSigner) -> None:
    resp = await client.get(url_signer.sign_url("docs/missing.txt"))
    assert resp.status == 404


async def test_reserved_key(client: TestClient, url_signer: UrlSigner) -> None:
    resp = await client.get(url_signer.sign_url("docs/a.txt.__data__"))
    assert resp.status == 400


async def test_url_content_ref(
    client: TestClient, storage_root: Path, url_signer: UrlSigner
) -> None:
    remote = LocalObjectStore(
        storage_root,
        url_signer=url_signer,
        base_url=str(client.make_url("/")),
        http_session=client.session,
    )
    ref = await remote.get_content_ref("docs/a.txt")
    assert isinstance(ref, UrlContentRef)
    assert await ref.read() == b"Hello World"

    await remote.delete_object("docs/a.txt")
    with pytest.raises(NotFoundException):
        await ref.read()
