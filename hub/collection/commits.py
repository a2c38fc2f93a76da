"""
Hub Collection: Commit Helpers

Decoding of the base64 JSON blocks, object identity derivation, and factory
functions for building well-formed (unsigned) commits. The factories are
used by writers that mint new commits and by tests to build them concisely.
"""

from __future__ import annotations

import base64
import binascii
import json
import uuid
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from hub.collection.errors import MalformedCommit
from hub.collection.types import CREATE, UPDATE, Commit, Header, Protected, ProtectedMeta


def _b64decode(value: str, what: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedCommit(f"commit {what} is not valid base64: {e}") from e


def _b64encode(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def decode_protected(commit: Commit) -> Protected:
    """Decode the commit's protected block. Raises MalformedCommit."""
    raw = _b64decode(commit.protected, "protected")
    try:
        return Protected.model_validate_json(raw)
    except ValidationError as e:
        raise MalformedCommit(f"commit protected is not a valid protected header: {e}") from e


def decode_payload(commit: Commit) -> Any:
    """Decode the commit's payload into plain JSON data. Raises MalformedCommit."""
    raw = _b64decode(commit.payload, "payload")
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedCommit(f"commit payload is not valid JSON: {e}") from e


def encode_protected(protected: Protected) -> str:
    return _b64encode(protected.model_dump_json(exclude_none=True).encode("utf-8"))


def encode_payload(payload: Any) -> str:
    return _b64encode(json.dumps(payload).encode("utf-8"))


def object_id_for(commit: Commit, protected: Protected) -> str:
    """Object identity given an already decoded protected block."""
    if protected.operation == CREATE:
        return commit.header.revision
    return protected.object_id or ""


def derive_object_id(commit: Commit) -> str:
    """
    Return the ID of the object this commit creates or modifies.

    For create commits the object's ID is the commit's own revision. For every
    other operation it is the protected object_id, which may be empty; empty
    is returned as-is and left for the caller to reject.
    """
    return object_id_for(commit, decode_protected(commit))


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def new_revision() -> str:
    """Collision-resistant revision identifier."""
    return uuid.uuid4().hex


def make_commit(
    operation: str,
    payload: Any,
    *,
    interface: str = "Collections",
    context: str = "http://schema.org",
    type: str = "MusicPlaylist",
    object_id: str | None = None,
    name: str | None = None,
    sub: str = "did:example:abc123",
    kid: str = "did:example:123456#key-abc",
    issuer: str = "did:example:123456",
    commit_strategy: str = "basic",
    committed_at: str | None = None,
    revision: str | None = None,
) -> Commit:
    """
    Build a complete commit from minimal inputs.

    The signature is left empty; signing happens outside the collection layer.
    """
    protected = Protected(
        interface=interface,
        context=context,
        type=type,
        operation=operation,
        committed_at=committed_at or datetime.now(UTC).isoformat(),
        commit_strategy=commit_strategy,
        sub=sub,
        kid=kid,
        object_id=object_id,
        meta=ProtectedMeta(name=name) if name is not None else None,
    )
    return Commit(
        protected=encode_protected(protected),
        header=Header(revision=revision or new_revision(), issuer=issuer),
        payload=encode_payload(payload),
    )


def create_commit(payload: Any, **kwargs: Any) -> Commit:
    """A commit creating a new object; the object's ID will be its revision."""
    return make_commit(CREATE, payload, **kwargs)


def update_commit(object_id: str, payload: Any, **kwargs: Any) -> Commit:
    """A commit updating the object identified by object_id."""
    return make_commit(UPDATE, payload, object_id=object_id, **kwargs)
