"""Redis storage layer for workflow caching."""

from gateflow.storage.redis.cache import RedisCache
from gateflow.storage.redis.connection import RedisConnection

__all__ = ["RedisCache", "RedisConnection"]
