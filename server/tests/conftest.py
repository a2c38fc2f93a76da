"""
Pytest configuration and fixtures for hub store server tests.

The app is served from a MemoryStore so no CouchDB is needed.
"""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio

from hub.collection.store import MemoryStore
from server.config import Settings
from server.main import create_app
from server.services.hub_service import HubService


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def settings():
    return Settings(couchdb_url="http://couchdb.test:5984", couchdb_name="hub", page_size=2)


@pytest.fixture
def service(memory_store, settings):
    return HubService(memory_store, settings.page_size)


@pytest_asyncio.fixture
async def async_client(memory_store, settings):
    """Async HTTP client against the ASGI app."""
    app = create_app(settings=settings, store=memory_store)
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
