"""
Redis client lifecycle for the workflow cache.

Cached workflows are raw serialized bytes, so responses are never decoded.
"""

import logging
from typing import Optional

from redis.asyncio import ConnectionPool, Redis

from gateflow.config import get_settings
from gateflow.config.settings import RedisSettings

logger = logging.getLogger(__name__)


class RedisConnection:
    """Connection pool and client used by RedisCache."""

    def __init__(self, settings: Optional[RedisSettings] = None):
        self.settings = settings or get_settings().redis
        self._pool: Optional[ConnectionPool] = None
        self._client: Optional[Redis] = None

    async def __aenter__(self) -> "RedisConnection":
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @property
    def client(self) -> Redis:
        if self._client is None:
            raise RuntimeError("Redis connection is not open")
        return self._client

    async def open(self) -> None:
        """
        Build the pool and check the server answers.

        Raises:
            RedisError: If the server cannot be reached
        """
        if self._client is not None:
            return

        self._pool = ConnectionPool(
            host=self.settings.host,
            port=self.settings.port,
            db=self.settings.db,
            password=self.settings.password,
            max_connections=self.settings.max_connections,
            socket_timeout=self.settings.socket_timeout,
            socket_connect_timeout=self.settings.socket_connect_timeout,
        )
        client = Redis(connection_pool=self._pool)
        try:
            await client.ping()
        except Exception:
            await self._release(client)
            raise

        self._client = client
        logger.info(
            f"Workflow cache connected to {self.settings.host}:{self.settings.port}/{self.settings.db}"
        )

    async def close(self) -> None:
        if self._client is None:
            return
        await self._release(self._client)
        self._client = None
        logger.info("Workflow cache connection closed")

    async def _release(self, client: Redis) -> None:
        await client.aclose()
        if self._pool is not None:
            await self._pool.disconnect()
            self._pool = None
