"""
Hub request dispatch.

Maps the three request kinds onto the CommitStore contract and renders
store failures as hub error responses: caller mistakes (unknown filter
operators, bad skip tokens, undecodable commits) are bad requests, anything
else is a server error.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from hub.collection.commits import decode_protected, object_id_for
from hub.collection.errors import (
    InvalidSkipToken,
    MalformedCommit,
    StoreError,
    UnsupportedFilter,
)
from hub.collection.filters import Filter
from hub.collection.paging import Paging
from hub.collection.store import CommitStore
from hub.collection.types import Commit
from server.models.requests import (
    REQUEST_TYPES,
    CommitQueryRequest,
    ObjectQueryRequest,
    WriteRequest,
)
from server.models.responses import (
    BaseResponse,
    CommitQueryResponse,
    ErrorResponse,
    ObjectMetadata,
    ObjectQueryResponse,
    WriteResponse,
)

logger = logging.getLogger(__name__)


class HubServiceError(Exception):
    """A request failed; carries the error response to hand back."""

    def __init__(self, response: ErrorResponse) -> None:
        super().__init__(response.developer_message)
        self.response = response

    @property
    def status_code(self) -> int:
        return 400 if self.response.error_code == "bad_request" else 500


def bad_request(msg: str, target: str = "") -> HubServiceError:
    return HubServiceError(ErrorResponse(error_code="bad_request", developer_message=msg, target=target))


def server_error(msg: str) -> HubServiceError:
    return HubServiceError(ErrorResponse(error_code="server_error", developer_message=msg))


class HubService:
    """Serves hub requests from a CommitStore. Query pages hold page_size commits."""

    def __init__(self, store: CommitStore, page_size: int) -> None:
        self.store = store
        self.page_size = page_size

    async def service_request(self, body: dict[str, Any]) -> BaseResponse:
        """
        Handle one decoded request body.

        Raises:
            HubServiceError: with a bad_request or server_error response
        """
        request_type = body.get("@type") if isinstance(body, dict) else None
        model = REQUEST_TYPES.get(request_type) if isinstance(request_type, str) else None
        if model is None:
            raise bad_request("unsupported request type", str(request_type))
        try:
            request = model.model_validate(body)
        except ValidationError as e:
            raise bad_request(f"invalid {request_type}: {e}", request_type) from e

        if isinstance(request, WriteRequest):
            return await self.write(request.commit)
        if isinstance(request, CommitQueryRequest):
            return await self.commit_query(request)
        return await self.object_query(request)

    async def write(self, commit: Commit) -> WriteResponse:
        """Store the commit and return every revision of its object."""
        try:
            protected = decode_protected(commit)
        except MalformedCommit as e:
            logger.warning("failed to decode commit %s: %s", commit.header.revision, e)
            raise bad_request(f"invalid commit: {e}", "commit") from e
        object_id = object_id_for(commit, protected)
        if not object_id:
            raise bad_request("commit does not identify an object", "commit.protected.object_id")

        try:
            await self.store.write(commit)
        except StoreError as e:
            logger.error("failed to commit to store: %s", e)
            raise server_error(f"failed to commit to store: {e}") from e

        try:
            commits, _ = await self.store.commit_query(object_id, Filter(), Paging())
        except StoreError as e:
            logger.error("failed to query commits from store: %s", e)
            raise server_error(f"failed to query commits from store: {e}") from e
        return WriteResponse(revisions=[c.header.revision for c in commits])

    async def commit_query(self, request: CommitQueryRequest) -> CommitQueryResponse:
        query = request.query
        try:
            commits, token = await self.store.commit_query(
                query.object_id,
                Filter(revs=query.revision),
                Paging(size=self.page_size, skip_token=query.skip_token),
            )
        except InvalidSkipToken as e:
            raise bad_request(f"invalid skip token: {e}", "query.skip_token") from e
        except StoreError as e:
            logger.error("failed to execute CommitQuery against store: %s", e)
            raise server_error(f"failed to execute CommitQuery against store: {e}") from e
        return CommitQueryResponse(commits=commits, skip_token=token or None)

    async def object_query(self, request: ObjectQueryRequest) -> ObjectQueryResponse:
        query = request.query
        try:
            commits, token = await self.store.object_query(
                query.interface,
                query.context,
                query.type,
                Filter(
                    oids=query.object_id,
                    metadata_filters=[f.to_metadata_filter() for f in query.filters],
                ),
                Paging(size=self.page_size, skip_token=query.skip_token),
            )
        except UnsupportedFilter as e:
            logger.warning("invalid filters in ObjectQuery: %s", e)
            raise bad_request(f"invalid filters: {e}", "query.filters") from e
        except InvalidSkipToken as e:
            raise bad_request(f"invalid skip token: {e}", "query.skip_token") from e
        except StoreError as e:
            logger.error("failed to execute ObjectQuery against store: %s", e)
            raise server_error(f"failed to execute ObjectQuery against store: {e}") from e

        objects: list[ObjectMetadata] = []
        for commit in commits:
            try:
                protected = decode_protected(commit)
            except MalformedCommit as e:
                logger.error("stored commit %s is malformed: %s", commit.header.revision, e)
                raise server_error(str(e)) from e
            objects.append(ObjectMetadata.from_commit(object_id_for(commit, protected), commit, protected))
        return ObjectQueryResponse(objects=objects, skip_token=token or None)
