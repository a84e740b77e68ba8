"""
ARQ task queue — API-side job enqueuing.

The FastAPI API process uses this to push jobs into Redis.
Worker processes (thesync.worker) consume them independently.
"""
from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlparse

from arq import ArqRedis, create_pool
from arq.connections import RedisSettings

from thesync.exceptions import TaskQueueUnavailable

logger = logging.getLogger(__name__)

QUEUE_NAME = "thesync:tasks"

_pool: ArqRedis | None = None


def redis_settings_from_url(url: str) -> RedisSettings:
    """Parse a redis:// URL into ARQ RedisSettings."""
    parsed = urlparse(url)
    return RedisSettings(
        host=parsed.hostname or "localhost",
        port=parsed.port or 6379,
        database=int(parsed.path.lstrip("/") or 0),
        username=parsed.username,
        password=parsed.password,
    )


async def init_pool(redis_url: str) -> None:
    """Initialize the ARQ Redis connection pool. Called once at API startup."""
    global _pool
    _pool = await create_pool(redis_settings_from_url(redis_url), default_queue_name=QUEUE_NAME)
    logger.info("ARQ task queue pool initialized")


async def close_pool() -> None:
    """Close the ARQ Redis pool. Called at API shutdown."""
    global _pool
    if _pool:
        await _pool.aclose()
        _pool = None
        logger.info("ARQ task queue pool closed")


def get_pool() -> ArqRedis:
    """FastAPI dependency for routes that inspect or cancel jobs directly."""
    if _pool is None:
        raise TaskQueueUnavailable()
    return _pool


async def enqueue(function_name: str, *args: Any, **kwargs: Any) -> str | None:
    """
    Enqueue a job for the worker.

    Returns the job ID or None if enqueue failed.  Never raises: callers treat
    background work as fire-and-forget.
    """
    if _pool is None:
        logger.error("ARQ pool not initialized — cannot enqueue %s", function_name)
        return None
    try:
        job = await _pool.enqueue_job(function_name, *args, **kwargs)
        if job:
            logger.info("Enqueued %s → job %s", function_name, job.job_id)
            return job.job_id
        return None
    except Exception:
        logger.exception("Failed to enqueue %s", function_name)
        return None
