# -*- coding: utf-8 -*-

import asyncio

import pytest

import sfs

MASK = "https://cdn.x/files"


class SpyStore(sfs.InMemoryMetadataStore):
    """In-memory store counting calls, with failures that tests can switch on."""

    def __init__(self, records=None):
        super(SpyStore, self).__init__(records)
        self.calls = {"get_file_by_id": 0, "get_file_by_hash": 0,
                      "create_file": 0}
        self.fail_create = None
        self.fail_lookup = None
        self.delay = 0

    async def get_file_by_id(self, id):
        self.calls["get_file_by_id"] += 1
        if self.fail_lookup is not None:
            raise self.fail_lookup
        return await super(SpyStore, self).get_file_by_id(id)

    async def get_file_by_hash(self, hash, path=None):
        self.calls["get_file_by_hash"] += 1
        if self.fail_lookup is not None:
            raise self.fail_lookup
        await asyncio.sleep(self.delay)
        return await super(SpyStore, self).get_file_by_hash(hash, path)

    async def create_file(self, record):
        self.calls["create_file"] += 1
        await asyncio.sleep(self.delay)
        if self.fail_create is not None:
            raise self.fail_create
        return await super(SpyStore, self).create_file(record)


@pytest.fixture
def testpath(tmpdir):
    return tmpdir.mkdir("sfs")


@pytest.fixture
def store():
    return SpyStore()


@pytest.fixture
def storage(testpath, store):
    return sfs.FileStorage(str(testpath), mask=MASK, store=store)


@pytest.fixture
def upload():
    return sfs.Upload("report.pdf", b"%PDF-1.4 quarterly numbers")
