"""Process-wide async engine for the practice database.

The API creates the engine on startup (``/health`` pings it) and hands out
one session per request from ``get_session_factory()``; the cleanup job
opens its own session from the same factory.  Sessions keep attributes
after commit so route handlers can serialise rows they just wrote.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from otassess_db.config import get_async_url, load_pool_settings

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        pool = load_pool_settings()
        _engine = create_async_engine(
            get_async_url(),
            echo=pool.echo,
            pool_size=pool.size,
            max_overflow=pool.max_overflow,
            pool_recycle=pool.recycle,
            pool_pre_ping=True,
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            bind=get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factory


async def dispose_engine() -> None:
    """Close pooled connections; the next ``get_engine()`` starts fresh."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
