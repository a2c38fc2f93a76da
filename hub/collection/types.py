"""
Hub Collection: Shared Types

Wire shapes of the commit log. A commit is a detached-JWS style record:
`protected` and `payload` are base64-encoded JSON, `header` carries the
unprotected revision and issuer.

    {
      "protected": "eyJpbnRlcmZhY2UiOi...",
      "header": {"rev": "3a9c...", "iss": "did:example:123456"},
      "payload": "eyJAY29udGV4dCI6...",
      "signature": "..."
    }
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

CREATE = "create"
UPDATE = "update"
DELETE = "delete"  # reserved, never written by this layer

OPERATIONS: set[str] = {CREATE, UPDATE, DELETE}


# ---------------------------------------------------------------------------
# Commit envelope
# ---------------------------------------------------------------------------


class Header(BaseModel):
    """Unprotected commit header. `revision` is minted by the writer."""

    model_config = ConfigDict(populate_by_name=True)

    revision: str = Field(default="", alias="rev")
    issuer: str = Field(default="", alias="iss")


class Commit(BaseModel):
    """One signed, append-only record creating or updating an object."""

    model_config = ConfigDict(populate_by_name=True)

    protected: str = ""
    header: Header = Field(default_factory=Header)
    payload: str = ""
    signature: str = ""

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)


# ---------------------------------------------------------------------------
# Protected metadata (decoded from Commit.protected)
# ---------------------------------------------------------------------------


class ProtectedMeta(BaseModel):
    """Indexed labels attached to a commit."""

    name: str = ""


class Protected(BaseModel):
    """
    Signature-protected commit metadata.

    object_id is only meaningful for non-create operations; a create commit's
    object is identified by its own revision.
    """

    interface: str = ""
    context: str = ""
    type: str = ""
    operation: str = ""
    committed_at: str = ""
    commit_strategy: str = ""
    sub: str = ""
    kid: str = ""
    object_id: str | None = None
    meta: ProtectedMeta | None = None
