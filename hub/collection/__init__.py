"""
Hub Collection: the commit log.

Components:
  types / commits : commit envelope, protected metadata, object identity
  filters / paging: query vocabulary and the N+1 page boundary
  selectors       : compiles queries onto the objectquery/commitquery indices
  store           : CommitStore contract + MemoryStore
  couchdb_store   : CouchDB adapter
"""

from hub.collection.commits import (
    create_commit,
    decode_payload,
    decode_protected,
    derive_object_id,
    update_commit,
)
from hub.collection.couchdb_store import CouchDBStore
from hub.collection.errors import (
    BackendError,
    InvalidSkipToken,
    MalformedCommit,
    StoreConfigError,
    StoreError,
    UnsupportedFilter,
)
from hub.collection.filters import Filter, MetadataFilter, as_condition
from hub.collection.paging import Paging, QueryResult
from hub.collection.store import CommitStore, MemoryStore
from hub.collection.types import Commit, Header, Protected, ProtectedMeta

__all__ = [
    "Commit",
    "Header",
    "Protected",
    "ProtectedMeta",
    "decode_protected",
    "decode_payload",
    "derive_object_id",
    "create_commit",
    "update_commit",
    "Filter",
    "MetadataFilter",
    "as_condition",
    "Paging",
    "QueryResult",
    "CommitStore",
    "MemoryStore",
    "CouchDBStore",
    "StoreError",
    "MalformedCommit",
    "UnsupportedFilter",
    "InvalidSkipToken",
    "BackendError",
    "StoreConfigError",
]
