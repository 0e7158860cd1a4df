"""
Redis cache layer for workflow snapshots.

Redis is used as a cache layer - PostgreSQL is the source of truth.
"""

import logging
from typing import Optional
from uuid import UUID

import redis.asyncio as redis

from gateflow.config import get_settings
from gateflow.core.exceptions import DecodeError
from gateflow.core.models import Workflow
from gateflow.core.serialization import deserialize, serialize

logger = logging.getLogger(__name__)


class RedisCache:
    """
    Redis cache for serialized workflows.

    Entries are the same bytes the database stores, kept for
    ``redis.workflow_ttl`` seconds.
    """

    # Key prefixes
    WORKFLOW_PREFIX = "gf:workflow:"

    def __init__(self, client: redis.Redis, ttl: Optional[int] = None):
        self.client = client
        self.ttl = ttl or get_settings().redis.workflow_ttl

    def _key(self, workflow_id: UUID) -> str:
        return f"{self.WORKFLOW_PREFIX}{workflow_id}"

    async def cache_workflow(self, workflow: Workflow) -> None:
        """Cache a workflow snapshot."""
        await self.client.setex(self._key(workflow.id), self.ttl, serialize(workflow))

    async def get_workflow(self, workflow_id: UUID) -> Optional[Workflow]:
        """
        Get a cached workflow.

        An entry that no longer decodes is evicted and reported as a miss.
        """
        data = await self.client.get(self._key(workflow_id))
        if data is None:
            return None

        try:
            return deserialize(data)
        except DecodeError as e:
            logger.warning(f"Evicting undecodable cache entry for workflow {workflow_id}: {e}")
            await self.delete_workflow(workflow_id)
            return None

    async def delete_workflow(self, workflow_id: UUID) -> None:
        """Remove a workflow from the cache."""
        await self.client.delete(self._key(workflow_id))
