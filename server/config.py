"""
Hub store configuration: all environment variables in one place.

Settings are read once at startup with Settings.from_env() and passed into
the store and service constructors. There is no module-level instance.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from hub.collection.errors import StoreConfigError

ENV_PREFIX = "HUB_STORE_"

DEFAULT_PAGE_SIZE = 50
DEFAULT_COUCHDB_TIMEOUT = 30.0


@dataclass(frozen=True)
class Settings:
    """Application settings."""

    # CouchDB
    couchdb_url: str
    couchdb_name: str
    couchdb_user: str = ""
    couchdb_password: str = ""
    couchdb_timeout: float = DEFAULT_COUCHDB_TIMEOUT
    create_indices: bool = False

    # Queries
    page_size: int = DEFAULT_PAGE_SIZE

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """
        Build settings from HUB_STORE_* variables.

        Raises StoreConfigError for missing required values or values that
        do not parse.
        """
        env = os.environ if environ is None else environ

        def get(key: str, default: str = "") -> str:
            return env.get(ENV_PREFIX + key, default).strip()

        url = get("COUCHDB_URL")
        if not url:
            raise StoreConfigError(f"{ENV_PREFIX}COUCHDB_URL environment variable is required")
        name = get("COUCHDB_NAME")
        if not name:
            raise StoreConfigError(f"{ENV_PREFIX}COUCHDB_NAME environment variable is required")

        page_size = _parse_int("PAGE_SIZE", get("PAGE_SIZE", str(DEFAULT_PAGE_SIZE)))
        if page_size < 0:
            raise StoreConfigError(f"{ENV_PREFIX}PAGE_SIZE must be >= 0, got {page_size}")

        timeout = _parse_float("COUCHDB_TIMEOUT", get("COUCHDB_TIMEOUT", str(DEFAULT_COUCHDB_TIMEOUT)))

        return cls(
            couchdb_url=url,
            couchdb_name=name,
            couchdb_user=get("COUCHDB_USER"),
            couchdb_password=get("COUCHDB_PASSWORD"),
            couchdb_timeout=timeout,
            create_indices=get("CREATE_INDICES").lower() in ("1", "true", "yes"),
            page_size=page_size,
        )


def _parse_int(key: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as e:
        raise StoreConfigError(f"{ENV_PREFIX}{key} must be an integer, got {raw!r}") from e


def _parse_float(key: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as e:
        raise StoreConfigError(f"{ENV_PREFIX}{key} must be a number, got {raw!r}") from e
    if value <= 0:
        raise StoreConfigError(f"{ENV_PREFIX}{key} must be > 0, got {raw!r}")
    return value
