"""Hub response models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from hub.collection.types import Commit, Protected
from server.models.requests import HUB_CONTEXT


class BaseResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    context: str = Field(default=HUB_CONTEXT, alias="@context")
    developer_message: str = ""

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class WriteResponse(BaseResponse):
    """Revisions of the written object, the new commit included."""

    type: Literal["WriteResponse"] = Field(default="WriteResponse", alias="@type")
    revisions: list[str]


class CommitQueryResponse(BaseResponse):
    type: Literal["CommitQueryResponse"] = Field(default="CommitQueryResponse", alias="@type")
    commits: list[Commit]
    skip_token: str | None = None


class ObjectMetadata(BaseModel):
    """Summary of an object, rendered from its create commit."""

    interface: str
    context: str
    type: str
    id: str
    commit_strategy: str
    sub: str
    created_at: str
    created_by: str

    @classmethod
    def from_commit(cls, object_id: str, commit: Commit, protected: Protected) -> ObjectMetadata:
        return cls(
            interface=protected.interface,
            context=protected.context,
            type=protected.type,
            id=object_id,
            commit_strategy=protected.commit_strategy,
            sub=protected.sub,
            created_at=protected.committed_at,
            created_by=commit.header.issuer,
        )


class ObjectQueryResponse(BaseResponse):
    type: Literal["ObjectQueryResponse"] = Field(default="ObjectQueryResponse", alias="@type")
    objects: list[ObjectMetadata]
    skip_token: str | None = None


class ErrorResponse(BaseResponse):
    type: Literal["ErrorResponse"] = Field(default="ErrorResponse", alias="@type")
    error_code: Literal["bad_request", "server_error"]
    target: str = ""
    user_message: str = ""
