"""
Hub store FastAPI application.

Entry point for the API server. Run with an ASGI server, e.g.
`uvicorn server.main:app`.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from hub.collection.couchdb_store import CouchDBStore
from hub.collection.store import CommitStore
from server.config import DEFAULT_PAGE_SIZE, Settings
from server.routes import hub as hub_routes
from server.services.hub_service import HubService

logger = logging.getLogger(__name__)


async def build_store(settings: Settings) -> CouchDBStore:
    """
    Construct the CouchDB store from settings.

    Raises StoreConfigError for unusable settings and BackendError if the
    database or indices cannot be created.
    """
    store = CouchDBStore.connect(
        settings.couchdb_url,
        settings.couchdb_name,
        username=settings.couchdb_user,
        password=settings.couchdb_password,
        timeout=settings.couchdb_timeout,
    )
    if settings.create_indices:
        try:
            await store.ensure_database()
            await store.ensure_indices()
        except Exception:
            await store.close()
            raise
    return store


def create_app(settings: Settings | None = None, store: CommitStore | None = None) -> FastAPI:
    """
    Build the application.

    With a store given (tests, embedding), it is served as-is and left open on
    shutdown. Otherwise settings (or Settings.from_env() when absent) are
    used at startup to build a CouchDB store owned by the app.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned: CommitStore | None = None
        if store is None:
            active = settings or Settings.from_env()
            owned = await build_store(active)
            app.state.hub_service = HubService(owned, active.page_size)
            logger.info("hub store connected to CouchDB database %s", active.couchdb_name)

        yield

        if owned is not None:
            await owned.close()
            logger.info("hub store closed")

    app = FastAPI(
        title="Hub Store",
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )
    if store is not None:
        page_size = settings.page_size if settings else DEFAULT_PAGE_SIZE
        app.state.hub_service = HubService(store, page_size)

    app.include_router(hub_routes.router)

    @app.get("/health")
    async def health():
        """Health check endpoint for uptime monitoring."""
        return {"status": "ok"}

    return app


app = create_app()
