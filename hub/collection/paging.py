"""
Hub Collection: Paging

Generic paging options and the page boundary algorithm shared by every
backend. Only the skip token encoding is backend specific, and all current
backends use the same one: the absolute row offset as a decimal string.

A bounded page of N rows is fetched by asking the engine for N+1 rows. If the
extra row comes back there is more to read, and the token points at the
offset right after the returned page. This avoids a separate count query.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, TypeVar

from hub.collection.errors import InvalidSkipToken
from hub.collection.types import Commit

T = TypeVar("T")

# Offsets past this many digits are never issued.
MAX_SKIP_TOKEN_DIGITS = 18


@dataclass
class Paging:
    """
    Page size and continuation token.

    size == 0 means unbounded: every matching row and no token.
    skip_token is opaque to callers; feed back the one a query returned.
    """

    size: int = 0
    skip_token: str = ""

    def __post_init__(self) -> None:
        if self.size < 0:
            raise ValueError(f"page size must be >= 0, got {self.size}")

    @property
    def bounded(self) -> bool:
        return self.size > 0


class QueryResult(NamedTuple):
    """One page of commits plus the token for the next page ("" when done)."""

    commits: list[Commit]
    skip_token: str


def decode_skip_token(token: str) -> int:
    """Absolute row offset encoded in a skip token. Empty token is offset 0."""
    if not token:
        return 0
    if len(token) > MAX_SKIP_TOKEN_DIGITS or not (token.isascii() and token.isdigit()):
        raise InvalidSkipToken(f"invalid skip token {token[:32]!r}")
    try:
        return int(token)
    except ValueError as e:
        raise InvalidSkipToken(f"invalid skip token {token!r}: {e}") from e


def encode_skip_token(offset: int) -> str:
    return str(offset)


def split_page(rows: list[T], size: int, offset: int) -> tuple[list[T], str]:
    """
    Apply the N+1 page boundary to rows fetched with limit=size+1.

    Returns the rows to hand back and the next skip token. Unbounded
    (size == 0) and short fetches are terminal pages with an empty token.
    """
    if size <= 0 or len(rows) <= size:
        return rows, ""
    return rows[:size], encode_skip_token(offset + size)
