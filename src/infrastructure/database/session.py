"""Database engine and session management."""

from functools import lru_cache

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from core.config import settings


@lru_cache
def get_engine() -> AsyncEngine:
    """Create the async engine on first use.

    Only the ``sql`` store backend touches the database, so nothing connects
    (or imports a driver) until this is called.
    """
    # Supabase/PgBouncer transaction pooling breaks asyncpg's statement cache.
    connect_args: dict = {}
    if "pooler.supabase.com" in settings.database_url:
        connect_args["statement_cache_size"] = 0

    return create_async_engine(
        settings.async_database_url,
        echo=settings.debug,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the async session factory bound to the shared engine."""
    return async_sessionmaker(
        bind=get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
