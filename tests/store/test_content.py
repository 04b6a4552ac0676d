from flatdir.store.content import LazyContentRef


async def test_lazy_content_ref_reads_on_demand() -> None:
    calls = 0

    async def load() -> bytes:
        nonlocal calls
        calls += 1
        return b"data"

    ref = LazyContentRef("docs/a.txt", load, url="http://example/a")
    assert calls == 0
    assert await ref.read() == b"data"
    assert await ref.read() == b"data"
    assert calls == 2
    assert ref.url == "http://example/a"
    assert repr(ref) == "LazyContentRef(key='docs/a.txt')"
