"""
Hub Collection: Query Filters

Narrowing criteria shared by every store. A metadata filter compiles to one
selector condition; add a new operator by adding an entry to _OPERATORS.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from hub.collection.errors import UnsupportedFilter


@dataclass
class MetadataFilter:
    """Match on a denormalized metadata field of a commit (e.g. `name`)."""

    field: str
    operator: str
    value: Any

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "type": self.operator, "value": self.value}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> MetadataFilter:
        return cls(field=d["field"], operator=d["type"], value=d.get("value"))


@dataclass
class Filter:
    """
    Criteria narrowing the results of a query.

    oids and revs are OR-sets; metadata_filters are AND-combined.
    An empty Filter matches everything the enclosing query already scopes.
    """

    oids: list[str] = field(default_factory=list)
    revs: list[str] = field(default_factory=list)
    metadata_filters: list[MetadataFilter] = field(default_factory=list)


def _eq_condition(f: MetadataFilter) -> dict[str, Any]:
    # $eq compares dict and list values literally.
    return {f.field: {"$eq": f.value}}


_OPERATORS: dict[str, Callable[[MetadataFilter], dict[str, Any]]] = {
    "eq": _eq_condition,
}


def as_condition(f: MetadataFilter) -> dict[str, Any]:
    """Return a selector condition for the filter. Raises UnsupportedFilter."""
    if not f.field or any(part.startswith("$") for part in f.field.split(".")):
        raise UnsupportedFilter(f"filter field {f.field!r} not supported")
    op = _OPERATORS.get(f.operator)
    if op is None:
        raise UnsupportedFilter(
            f"filter type {f.operator!r} not supported for filter "
            f"field={f.field!r} value={f.value!r}"
        )
    return op(f)
