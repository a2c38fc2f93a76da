"""
Collection test configuration.

The `store` fixture runs contract tests against every CommitStore:
MemoryStore, CouchDBStore over a fake CouchDB transport, and a live CouchDB
when COUCHDB_URL is set (skipped otherwise).
"""

from __future__ import annotations

import os
import uuid
from contextlib import asynccontextmanager

import pytest
import pytest_asyncio

from hub.collection.couchdb_store import CouchDBStore
from hub.collection.store import MemoryStore
from hub.collection.tests.fake_couchdb import FakeCouchDB


@asynccontextmanager
async def fake_couchdb_store(fake: FakeCouchDB):
    """CouchDBStore over the fake transport, database and indices created."""
    store = CouchDBStore(fake.client(), "hub")
    await store.ensure_database()
    await store.ensure_indices()
    fake.requests.clear()
    try:
        yield store
    finally:
        await store.close()


@asynccontextmanager
async def live_couchdb_store():
    """CouchDBStore on a throwaway database of a real CouchDB."""
    url = os.getenv("COUCHDB_URL")
    if not url:
        pytest.skip("COUCHDB_URL not set")

    db_name = f"hub_test_{uuid.uuid4().hex[:12]}"
    store = CouchDBStore.connect(
        url,
        db_name,
        username=os.getenv("COUCHDB_USER", ""),
        password=os.getenv("COUCHDB_PASSWORD", ""),
    )
    try:
        await store.ensure_database()
        await store.ensure_indices()
        yield store
    finally:
        await store.client.delete(f"/{db_name}")
        await store.close()


@pytest.fixture
def fake_couchdb():
    return FakeCouchDB()


@pytest_asyncio.fixture
async def couchdb_store(fake_couchdb):
    async with fake_couchdb_store(fake_couchdb) as store:
        yield store


@pytest_asyncio.fixture(params=["memory", "couchdb", "couchdb_live"])
async def store(request):
    if request.param == "memory":
        yield MemoryStore()
    elif request.param == "couchdb":
        async with fake_couchdb_store(FakeCouchDB()) as s:
            yield s
    else:
        async with live_couchdb_store() as s:
            yield s
