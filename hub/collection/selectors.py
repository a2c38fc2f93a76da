"""
Hub Collection: Query Compiler

Compiles (Filter, Paging) into Mango-style find queries against the two
envelope indices, and evaluates the selector subset the compiler emits so
that in-process stores answer exactly the queries CouchDB would.

Query shape:

    {
      "selector": {...},
      "use_index": ["hub", "objectquery"],
      "skip": 14,      # absent on the first page
      "limit": 8       # page size + 1, absent when unbounded
    }
"""

from __future__ import annotations

from typing import Any

from hub.collection.filters import Filter, as_condition
from hub.collection.paging import Paging, decode_skip_token
from hub.collection.types import CREATE

DESIGN_DOC = "hub"
OBJECT_QUERY_INDEX = "objectquery"
COMMIT_QUERY_INDEX = "commitquery"

# Index definitions in CouchDB _index form. objectquery only holds create
# commits; commitquery holds every commit keyed by its derived object ID.
INDICES: dict[str, dict[str, Any]] = {
    OBJECT_QUERY_INDEX: {
        "fields": ["interface", "context", "type"],
        "partial_filter_selector": {"operation": CREATE},
    },
    COMMIT_QUERY_INDEX: {
        "fields": ["objectID"],
    },
}

REVISION_FIELD = "commit.header.rev"


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------


def object_query_params(
    interface: str,
    context: str,
    type_name: str,
    filter: Filter,
    paging: Paging,
) -> dict[str, Any]:
    """
    Query for the objectquery index.

    Always matches interface AND context AND type on create commits. If oids
    are given, results are narrowed to those objects; metadata filters are
    AND-combined on top. Raises UnsupportedFilter or InvalidSkipToken.
    """
    selector: dict[str, Any] = {
        "interface": interface,
        "context": context,
        "type": type_name,
        "operation": CREATE,
    }
    conditions: list[dict[str, Any]] = []
    if filter.oids:
        conditions.append({"$or": [{"objectID": oid} for oid in filter.oids]})
    for f in filter.metadata_filters:
        conditions.append(as_condition(f))
    if conditions:
        selector["$and"] = conditions
    return _with_paging(
        {"selector": selector, "use_index": [DESIGN_DOC, OBJECT_QUERY_INDEX]},
        paging,
    )


def commit_query_params(object_id: str, filter: Filter, paging: Paging) -> dict[str, Any]:
    """
    Query for the commitquery index.

    Matches every commit of the object; if revs are given, only commits with
    one of those revisions. filter.oids and metadata filters are ignored.
    """
    selector: dict[str, Any] = {"objectID": object_id}
    if filter.revs:
        selector["$or"] = [{REVISION_FIELD: rev} for rev in filter.revs]
    return _with_paging(
        {"selector": selector, "use_index": [DESIGN_DOC, COMMIT_QUERY_INDEX]},
        paging,
    )


def _with_paging(params: dict[str, Any], paging: Paging) -> dict[str, Any]:
    skip = decode_skip_token(paging.skip_token)
    if skip:
        params["skip"] = skip
    if paging.bounded:
        params["limit"] = paging.size + 1
    return params


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

_MISSING = object()


def _lookup(document: dict[str, Any], path: str) -> Any:
    value: Any = document
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _field_matches(value: Any, condition: Any) -> bool:
    if isinstance(condition, dict) and len(condition) == 1:
        (op, operand), = condition.items()
        if op == "$eq":
            return value is not _MISSING and value == operand
        if op.startswith("$"):
            raise ValueError(f"unsupported selector operator {op!r}")
    return value is not _MISSING and value == condition


def matches(selector: dict[str, Any], document: dict[str, Any]) -> bool:
    """True if the document satisfies the selector (equality, $eq, $and, $or)."""
    for key, condition in selector.items():
        if key == "$and":
            if not all(matches(sub, document) for sub in condition):
                return False
        elif key == "$or":
            if not any(matches(sub, document) for sub in condition):
                return False
        elif key.startswith("$"):
            raise ValueError(f"unsupported selector operator {key!r}")
        elif not _field_matches(_lookup(document, key), condition):
            return False
    return True


def in_index(index_name: str, document: dict[str, Any]) -> bool:
    """True if the document is covered by the named index."""
    definition = INDICES[index_name]
    partial = definition.get("partial_filter_selector")
    if partial and not matches(partial, document):
        return False
    return all(_lookup(document, f) is not _MISSING for f in definition["fields"])
