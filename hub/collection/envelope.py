"""
Hub Collection: Storage Envelope

Commits are persisted inside an envelope that pins each one to its object ID
and denormalizes the fields the two query indices are built on, so that
neither query needs a join or has to decode `protected` server-side.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from hub.collection.commits import decode_protected, object_id_for
from hub.collection.types import Commit


class Envelope(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    object_id: str = Field(alias="objectID")
    interface: str = ""
    context: str = ""
    type: str = ""
    name: str = ""
    operation: str = ""
    commit: Commit

    @classmethod
    def from_commit(cls, commit: Commit) -> Envelope:
        """Wrap a commit. Raises MalformedCommit if `protected` cannot be decoded."""
        protected = decode_protected(commit)
        return cls(
            object_id=object_id_for(commit, protected),
            interface=protected.interface,
            context=protected.context,
            type=protected.type,
            name=protected.meta.name if protected.meta else "",
            operation=protected.operation,
            commit=commit,
        )

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
