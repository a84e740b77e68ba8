"""
Async Redis client backing the session and OTP cache.

Uses a module-level singleton so a single connection pool is reused per
process.  The pool is created lazily on first call to get_redis_client().
Routes receive it through the get_redis dependency so tests can swap in an
in-memory double.
"""
from __future__ import annotations

import redis.asyncio as aioredis
from fastapi import Depends

from thesync.config import Settings, get_settings
from thesync_shared.database.redis_client import get_redis_client as _create_client

_client: aioredis.Redis | None = None


def get_redis_client(redis_url: str) -> aioredis.Redis:
    """Return (and lazily create) the module-level async Redis client."""
    global _client
    if _client is None:
        _client = _create_client(redis_url)
    return _client


async def close_redis_client() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


def get_redis(settings: Settings = Depends(get_settings)) -> aioredis.Redis:
    return get_redis_client(settings.redis_url)
