"""Hub request models. The `@type` field selects the request kind."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from hub.collection.filters import MetadataFilter
from hub.collection.types import Commit

HUB_CONTEXT = "https://schema.identity.foundation/0.1"


class BaseRequest(BaseModel):
    """Fields common to every hub request."""

    model_config = ConfigDict(populate_by_name=True)

    context: str = Field(default=HUB_CONTEXT, alias="@context")
    iss: str = ""
    aud: str = ""
    sub: str = ""


class WriteRequest(BaseRequest):
    type: Literal["WriteRequest"] = Field(default="WriteRequest", alias="@type")
    commit: Commit


class CommitQuery(BaseModel):
    object_id: str
    revision: list[str] = Field(default_factory=list)
    skip_token: str = ""


class CommitQueryRequest(BaseRequest):
    type: Literal["CommitQueryRequest"] = Field(default="CommitQueryRequest", alias="@type")
    query: CommitQuery


class QueryFilter(BaseModel):
    """Metadata filter as it appears on the wire: `type` is the operator."""

    field: str
    type: str
    value: Any = None

    def to_metadata_filter(self) -> MetadataFilter:
        return MetadataFilter(field=self.field, operator=self.type, value=self.value)


class ObjectQuery(BaseModel):
    interface: str
    context: str
    type: str
    object_id: list[str] = Field(default_factory=list)
    filters: list[QueryFilter] = Field(default_factory=list)
    skip_token: str = ""


class ObjectQueryRequest(BaseRequest):
    type: Literal["ObjectQueryRequest"] = Field(default="ObjectQueryRequest", alias="@type")
    query: ObjectQuery


REQUEST_TYPES: dict[str, type[BaseRequest]] = {
    "WriteRequest": WriteRequest,
    "CommitQueryRequest": CommitQueryRequest,
    "ObjectQueryRequest": ObjectQueryRequest,
}
