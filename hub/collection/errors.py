"""
Hub Collection: Errors

Every failure in the collection layer is returned to the caller as one of
these exceptions. Nothing here terminates the process.
"""

from __future__ import annotations

from typing import Any


class StoreError(Exception):
    """Base exception for all collection store failures."""


class MalformedCommit(StoreError):
    """The commit's protected header or payload could not be decoded."""


class UnsupportedFilter(StoreError):
    """A metadata filter uses an operator the store does not know.

    Callers map this to a bad request, so it must never be raised for
    backend failures.
    """

    def __init__(self, msg: str) -> None:
        super().__init__(msg)
        self.msg = msg


class InvalidSkipToken(StoreError):
    """The skip token handed back by the caller is not one the store issued."""


class BackendError(StoreError):
    """The backing document store failed to execute an operation."""

    def __init__(self, operation: str, params: dict[str, Any], cause: str) -> None:
        rendered = " ".join(f"{k}={v!r}" for k, v in params.items())
        super().__init__(f"failed to execute {operation} for {rendered}: {cause}")
        self.operation = operation
        self.params = params
        self.cause = cause


class StoreConfigError(StoreError):
    """The store cannot be constructed from the given configuration."""
