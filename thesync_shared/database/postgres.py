import os
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()

AsyncSessionFactory = async_sessionmaker[AsyncSession]


def _ssl_connect_args() -> dict[str, Any]:
    """Return asyncpg ``connect_args`` when DATABASE_SSL=require."""
    if os.environ.get("DATABASE_SSL", "").lower() != "require":
        return {}
    return {"connect_args": {"ssl": "require"}}


def get_async_engine(database_url: str, **kwargs: Any) -> AsyncEngine:
    options: dict[str, Any] = {"pool_pre_ping": True, **_ssl_connect_args()}
    if database_url.startswith("postgresql"):
        # Pool sizing only applies to the queue pool used by server backends.
        options.update(pool_size=5, max_overflow=10, pool_recycle=3600)
    options.update(kwargs)
    return create_async_engine(database_url, **options)


def get_async_session_factory(
    database_url: str,
    *,
    expire_on_commit: bool = False,
    **engine_kwargs: Any,
) -> AsyncSessionFactory:
    engine = get_async_engine(database_url, **engine_kwargs)
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=expire_on_commit,
        autoflush=False,
    )
