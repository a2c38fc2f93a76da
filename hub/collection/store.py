"""
Hub Collection: Store Contract

The interface callers use to append commits and read them back, plus an
in-memory implementation for tests and local runs.

Operations are independent remote calls. No retries happen here; retry
policy belongs to the caller.
"""

from __future__ import annotations

import logging
from typing import Any

from hub.collection.envelope import Envelope
from hub.collection.filters import Filter
from hub.collection.paging import Paging, QueryResult, decode_skip_token, split_page
from hub.collection.selectors import (
    commit_query_params,
    in_index,
    matches,
    object_query_params,
)
from hub.collection.types import Commit

logger = logging.getLogger(__name__)


class CommitStore:
    """
    Abstract commit store.
    Implement with CouchDB for production, or in-memory for tests.
    """

    async def write(self, commit: Commit) -> None:
        """
        Append a commit. It becomes visible to subsequent queries.

        Writing the same revision twice may store a duplicate; callers mint
        revisions with a collision-resistant random ID.
        """
        raise NotImplementedError

    async def commit_query(
        self,
        object_id: str,
        filter: Filter | None = None,
        paging: Paging | None = None,
    ) -> QueryResult:
        """
        All commits of one object, optionally only those whose revision is in
        filter.revs. filter.oids is ignored. An unknown object yields an empty
        result.
        """
        raise NotImplementedError

    async def object_query(
        self,
        interface: str,
        context: str,
        type_name: str,
        filter: Filter | None = None,
        paging: Paging | None = None,
    ) -> QueryResult:
        """
        Create commits of objects with the given interface/context/type,
        narrowed by filter.oids (OR) and filter.metadata_filters (AND).
        Raises UnsupportedFilter for unknown filter operators.
        """
        raise NotImplementedError

    async def close(self) -> None:
        """Release the backend client."""


class MemoryStore(CommitStore):
    """
    In-memory store for testing.

    Keeps envelopes in insertion order and answers the same compiled queries
    the CouchDB adapter sends, so paging behaves identically. Natural result
    order is insertion order.
    """

    def __init__(self) -> None:
        self.documents: list[dict[str, Any]] = []

    async def write(self, commit: Commit) -> None:
        self.documents.append(Envelope.from_commit(commit).to_document())

    async def commit_query(
        self,
        object_id: str,
        filter: Filter | None = None,
        paging: Paging | None = None,
    ) -> QueryResult:
        paging = paging or Paging()
        params = commit_query_params(object_id, filter or Filter(), paging)
        return self._run(params, paging)

    async def object_query(
        self,
        interface: str,
        context: str,
        type_name: str,
        filter: Filter | None = None,
        paging: Paging | None = None,
    ) -> QueryResult:
        paging = paging or Paging()
        params = object_query_params(interface, context, type_name, filter or Filter(), paging)
        return self._run(params, paging)

    def find(self, params: dict[str, Any]) -> list[dict[str, Any]]:
        """Execute a compiled query and return matching documents."""
        _, index_name = params["use_index"]
        rows = [
            doc
            for doc in self.documents
            if in_index(index_name, doc) and matches(params["selector"], doc)
        ]
        skip = params.get("skip", 0)
        limit = params.get("limit")
        return rows[skip:] if limit is None else rows[skip : skip + limit]

    def _run(self, params: dict[str, Any], paging: Paging) -> QueryResult:
        docs = self.find(params)
        page, token = split_page(docs, paging.size, decode_skip_token(paging.skip_token))
        logger.debug("memory store: %d rows for %s, next=%r", len(page), params["use_index"], token)
        return QueryResult([Envelope.model_validate(doc).commit for doc in page], token)
