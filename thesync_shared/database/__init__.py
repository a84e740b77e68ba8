from thesync_shared.database.postgres import Base, AsyncSessionFactory, get_async_session_factory
from thesync_shared.database.redis_client import RedisClient, get_redis_client

__all__ = [
    "Base",
    "AsyncSessionFactory",
    "get_async_session_factory",
    "RedisClient",
    "get_redis_client",
]
