# -*- coding: utf-8 -*-

import pytest

from sfs import InMemoryMetadataStore, MetadataStore, StoredFile


def make_record(id="1", hash="abc", path="/"):
    return StoredFile(id=id, name="a.txt", extension=".txt", hash=hash,
                      size=3, type="document", last_modified=0, path=path)


@pytest.mark.asyncio
async def test_metadata_store_interface():
    store = MetadataStore()

    with pytest.raises(NotImplementedError):
        await store.get_file_by_id("1")
    with pytest.raises(NotImplementedError):
        await store.get_file_by_hash("abc")
    with pytest.raises(NotImplementedError):
        await store.create_file(make_record())


def test_metadata_store_uid():
    store = MetadataStore()

    assert isinstance(store.uid(), str)
    assert store.uid() != store.uid()


@pytest.mark.asyncio
async def test_in_memory_store():
    store = InMemoryMetadataStore()
    created = await store.create_file(make_record())

    assert created == make_record()
    assert await store.get_file_by_id("1") == make_record()
    assert await store.get_file_by_hash("abc") == make_record()
    assert await store.get_file_by_id("2") is None
    assert await store.get_file_by_hash("def") is None
    assert len(store) == 1


@pytest.mark.asyncio
async def test_in_memory_store_copies_records():
    store = InMemoryMetadataStore()
    created = await store.create_file(make_record())
    created.url = "https://cdn.x/files/1"
    created.extra["owner"] = "ana"

    stored = await store.get_file_by_id("1")
    assert stored.url is None
    assert stored.extra == {}


@pytest.mark.asyncio
async def test_in_memory_store_duplicate_id():
    store = InMemoryMetadataStore([make_record()])

    with pytest.raises(ValueError):
        await store.create_file(make_record(hash="def"))



@pytest.mark.asyncio
async def test_in_memory_store_by_hash_prefers_path():
    store = InMemoryMetadataStore([make_record("1", path="/a"),
                                   make_record("2", path="/b")])

    assert {record.id for record in store.by_hash("abc")} == {"1", "2"}
    assert (await store.get_file_by_hash("abc", path="/b")).id == "2"
    assert (await store.get_file_by_hash("abc", path="/a")).id == "1"
    assert (await store.get_file_by_hash("abc", path="/c")).id == "1"
    assert (await store.get_file_by_hash("abc")).id == "1"
