"""Connection settings for the practice database.

The URL comes from ``DATABASE_URL`` when set (hosted Postgres usually hands
out a ``postgres://`` or ``postgresql://`` URL), otherwise from the
``PG_HOST``/``PG_PORT``/``PG_USER``/``PG_PASSWORD``/``PG_DATABASE`` parts
used by the local docker-compose stack.

Two spellings of the same database are derived from it: the asyncpg URL the
API and the ``otassess-cleanup`` job run on, and the psycopg2 URL Alembic
migrates with.  Pool sizing is read once into ``PoolSettings``.
"""

import os
from dataclasses import dataclass

_ASYNC_SCHEME = "postgresql+asyncpg://"
_SYNC_SCHEME = "postgresql://"
_KNOWN_SCHEMES = ("postgresql+asyncpg://", "postgresql+psycopg2://", "postgresql://", "postgres://")


@dataclass(frozen=True)
class PoolSettings:
    """Connection pool sizing for the async engine."""

    size: int = 5
    max_overflow: int = 10
    # Seconds before a pooled connection is replaced
    recycle: int = 1800
    echo: bool = False


def load_pool_settings() -> PoolSettings:
    return PoolSettings(
        size=int(os.getenv("PG_POOL_SIZE", "5")),
        max_overflow=int(os.getenv("PG_MAX_OVERFLOW", "10")),
        recycle=int(os.getenv("PG_POOL_RECYCLE", "1800")),
        echo=os.getenv("DB_ECHO", "").lower() in ("1", "true", "yes"),
    )


def _url_from_parts() -> str:
    host = os.getenv("PG_HOST", "localhost")
    port = os.getenv("PG_PORT", "5432")
    user = os.getenv("PG_USER", "otassess")
    password = os.getenv("PG_PASSWORD", "otassess")
    database = os.getenv("PG_DATABASE", "otassess")
    return f"{_SYNC_SCHEME}{user}:{password}@{host}:{port}/{database}"


def _with_scheme(url: str, scheme: str) -> str:
    for known in _KNOWN_SCHEMES:
        if url.startswith(known):
            return scheme + url[len(known):]
    return url


def get_sync_url() -> str:
    """psycopg2 URL for Alembic."""
    return _with_scheme(os.getenv("DATABASE_URL") or _url_from_parts(), _SYNC_SCHEME)


def get_async_url() -> str:
    """asyncpg URL for the runtime engine."""
    return _with_scheme(os.getenv("DATABASE_URL") or _url_from_parts(), _ASYNC_SCHEME)
