"""Database engine layer for the Portfolio CMS.

Provides async engine (aiomysql) for application runtime (FastAPI) and sync
engine (pymysql) for Alembic migrations and seed scripts. Session factories
are configured with autoflush=False and expire_on_commit=False for explicit
transaction control.
"""

from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import sessionmaker

from .config import settings


def _pool_kwargs(url: str, pool_size: int, max_overflow: int) -> dict[str, Any]:
    # SQLite engines use a static/singleton pool that rejects sizing args
    if url.startswith("sqlite"):
        return {}
    return {
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_pre_ping": settings.db_pool_pre_ping,
        "pool_recycle": 3600,
    }


# ---------------------------------------------------------------------------
# Async engine (for application runtime -- aiomysql)
# ---------------------------------------------------------------------------
async_engine = create_async_engine(
    settings.async_database_url,
    echo=settings.debug,
    **_pool_kwargs(
        settings.async_database_url, settings.db_pool_size, settings.db_max_overflow
    ),
)

# Async session factory
async_session_factory = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    autoflush=False,
    expire_on_commit=False,
)

# ---------------------------------------------------------------------------
# Sync engine (for Alembic, seeds, one-off scripts -- pymysql)
# ---------------------------------------------------------------------------
sync_engine = create_engine(
    settings.sync_database_url,
    echo=settings.debug,
    **_pool_kwargs(settings.sync_database_url, 5, 0),
)

# Sync session factory
sync_session_factory = sessionmaker(
    sync_engine,
    autoflush=False,
    expire_on_commit=False,
)
