"""
CouchDBStore adapter for the hub collection layer.

Implements the CommitStore contract on CouchDB's HTTP API using Mango
queries. Every commit is stored as a new document wrapped in an Envelope;
queries go through the two indices declared in selectors.INDICES.

Result order is index order: the indexed fields, then the document _id that
CouchDB assigned on write. It is never re-sorted here since the skip offset
of the paging protocol depends on it.

Consistency: on a single node a successful write is visible to the next
_find (Mango indices are brought up to date at query time). On a cluster
the store inherits CouchDB's quorum semantics. Pages are a best-effort
snapshot: writes landing between two page requests can shift rows across
the skip offset.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from hub.collection.envelope import Envelope
from hub.collection.errors import BackendError, StoreConfigError
from hub.collection.filters import Filter
from hub.collection.paging import Paging, QueryResult, decode_skip_token, split_page
from hub.collection.selectors import (
    DESIGN_DOC,
    INDICES,
    commit_query_params,
    object_query_params,
)
from hub.collection.store import CommitStore
from hub.collection.types import Commit

logger = logging.getLogger(__name__)

# CouchDB applies a default limit of 25 to _find, so unbounded queries are
# read in batches of this many rows.
DEFAULT_UNBOUNDED_BATCH_SIZE = 1000


class CouchDBStore(CommitStore):
    """
    CouchDB-backed commit store.

    The httpx client is shared by all operations and may be used from
    concurrent tasks; the store itself holds no other state.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        db_name: str,
        *,
        unbounded_batch_size: int = DEFAULT_UNBOUNDED_BATCH_SIZE,
    ):
        if not db_name:
            raise StoreConfigError("failed to initialize CouchDB store: no database name specified")
        if unbounded_batch_size <= 0:
            raise StoreConfigError(
                f"failed to initialize CouchDB store: batch size must be > 0, got {unbounded_batch_size}"
            )
        self.client = client
        self.db_name = db_name
        self.unbounded_batch_size = unbounded_batch_size
        self._db_path = "/" + quote(db_name, safe="")

    @classmethod
    def connect(
        cls,
        url: str,
        db_name: str,
        *,
        username: str = "",
        password: str = "",
        timeout: float = 30.0,
        unbounded_batch_size: int = DEFAULT_UNBOUNDED_BATCH_SIZE,
    ) -> CouchDBStore:
        """
        Build a store with its own client for the CouchDB server at url.

        Raises StoreConfigError on missing or unusable settings; no network
        call is made here.
        """
        if not url:
            raise StoreConfigError("failed to initialize CouchDB store: no URL specified")
        try:
            base_url = httpx.URL(url)
        except httpx.InvalidURL as e:
            raise StoreConfigError(f"failed to initialize CouchDB store: invalid URL {url!r}: {e}") from e
        if base_url.scheme not in ("http", "https") or not base_url.host:
            raise StoreConfigError(f"failed to initialize CouchDB store: invalid URL {url!r}")
        if not db_name:
            raise StoreConfigError("failed to initialize CouchDB store: no database name specified")

        auth = httpx.BasicAuth(username, password) if username else None
        client = httpx.AsyncClient(base_url=base_url, auth=auth, timeout=timeout)
        return cls(client, db_name, unbounded_batch_size=unbounded_batch_size)

    # -----------------------------------------------------------------------
    # Setup
    # -----------------------------------------------------------------------

    async def ensure_database(self) -> None:
        """Create the database if it does not exist yet."""
        response = await self._request(
            "CreateDatabase", {"db": self.db_name}, "PUT", self._db_path, allow=(412,)
        )
        if response.status_code == 412:
            logger.debug("couchdb: database %s already exists", self.db_name)
        else:
            logger.info("couchdb: created database %s", self.db_name)

    async def ensure_indices(self) -> None:
        """Create the objectquery and commitquery indices (no-op if present)."""
        for name, definition in INDICES.items():
            response = await self._request(
                "CreateIndex",
                {"db": self.db_name, "index": name},
                "POST",
                f"{self._db_path}/_index",
                json={"index": definition, "ddoc": DESIGN_DOC, "name": name, "type": "json"},
            )
            result = _json(response, "CreateIndex", {"index": name}).get("result")
            logger.info("couchdb: index %s/%s %s", DESIGN_DOC, name, result)

    # -----------------------------------------------------------------------
    # CommitStore
    # -----------------------------------------------------------------------

    async def write(self, commit: Commit) -> None:
        envelope = Envelope.from_commit(commit)
        await self._request(
            "Write",
            {"oid": envelope.object_id, "rev": commit.header.revision},
            "POST",
            self._db_path,
            json=envelope.to_document(),
        )

    async def commit_query(
        self,
        object_id: str,
        filter: Filter | None = None,
        paging: Paging | None = None,
    ) -> QueryResult:
        f = filter or Filter()
        return await self._query(
            "CommitQuery",
            {"oid": object_id, "revs": f.revs},
            lambda p: commit_query_params(object_id, f, p),
            paging or Paging(),
        )

    async def object_query(
        self,
        interface: str,
        context: str,
        type_name: str,
        filter: Filter | None = None,
        paging: Paging | None = None,
    ) -> QueryResult:
        f = filter or Filter()
        return await self._query(
            "ObjectQuery",
            {"interface": interface, "context": context, "type": type_name, "oids": f.oids},
            lambda p: object_query_params(interface, context, type_name, f, p),
            paging or Paging(),
        )

    async def close(self) -> None:
        await self.client.aclose()

    # -----------------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------------

    async def _query(
        self,
        operation: str,
        context: dict[str, Any],
        build: Callable[[Paging], dict[str, Any]],
        paging: Paging,
    ) -> QueryResult:
        if paging.bounded:
            return await self._page(operation, context, build(paging), paging)

        commits: list[Commit] = []
        batch = Paging(size=self.unbounded_batch_size, skip_token=paging.skip_token)
        while True:
            result = await self._page(operation, context, build(batch), batch)
            commits.extend(result.commits)
            if not result.skip_token:
                return QueryResult(commits, "")
            batch = Paging(size=self.unbounded_batch_size, skip_token=result.skip_token)

    async def _page(
        self,
        operation: str,
        context: dict[str, Any],
        params: dict[str, Any],
        paging: Paging,
    ) -> QueryResult:
        response = await self._request(
            operation, {**context, "params": params}, "POST", f"{self._db_path}/_find", json=params
        )
        body = _json(response, operation, context)
        if body.get("warning"):
            logger.warning("couchdb: %s warning for params=%s: %s", operation, params, body["warning"])

        docs, token = split_page(body.get("docs", []), paging.size, decode_skip_token(paging.skip_token))
        commits: list[Commit] = []
        for doc in docs:
            try:
                commits.append(Envelope.model_validate(doc).commit)
            except ValidationError as e:
                raise BackendError(
                    operation,
                    {**context, "doc": doc.get("_id")},
                    f"failed to unmarshal envelope doc: {e}",
                ) from e
        logger.debug("couchdb: %s returned %d commits, next=%r", operation, len(commits), token)
        return QueryResult(commits, token)

    async def _request(
        self,
        operation: str,
        context: dict[str, Any],
        method: str,
        path: str,
        *,
        json: Any = None,
        allow: tuple[int, ...] = (),
    ) -> httpx.Response:
        try:
            response = await self.client.request(method, path, json=json)
        except httpx.HTTPError as e:
            logger.warning("couchdb: %s failed for %s: %s", operation, context, e)
            raise BackendError(operation, context, f"{type(e).__name__}: {e}") from e
        if response.is_error and response.status_code not in allow:
            logger.warning(
                "couchdb: %s failed for %s: HTTP %d %s",
                operation,
                context,
                response.status_code,
                response.text,
            )
            raise BackendError(operation, context, f"HTTP {response.status_code}: {response.text}")
        return response


def _json(response: httpx.Response, operation: str, context: dict[str, Any]) -> dict[str, Any]:
    try:
        return response.json()
    except ValueError as e:
        raise BackendError(operation, context, f"invalid JSON response: {e}") from e
