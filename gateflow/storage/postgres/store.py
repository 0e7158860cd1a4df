"""
PostgreSQL-backed workflow store.

Each operation runs in its own session. Database and cache failures are
reported as StorageError.
"""

import logging
from typing import Optional
from uuid import UUID

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from gateflow.core.events import Event
from gateflow.core.exceptions import StorageError
from gateflow.core.models import Workflow, WorkflowSummary
from gateflow.storage.base import RecordedEvent, WorkflowStore
from gateflow.storage.postgres.database import Database
from gateflow.storage.postgres.repository import WorkflowRepository
from gateflow.storage.redis.cache import RedisCache

logger = logging.getLogger(__name__)


class PostgresWorkflowStore(WorkflowStore):
    """
    Workflow store on PostgreSQL with an optional Redis read-through cache.

    The database is written first; the cache is refreshed only after the
    transaction commits.
    """

    def __init__(self, database: Database, cache: Optional[RedisCache] = None):
        self.database = database
        self.cache = cache

    async def create_user(self, user_id: UUID, name: str) -> None:
        try:
            async with self.database.session() as session:
                await WorkflowRepository(session).create_user(user_id, name)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to create user {user_id}: {e}") from e

    async def save(self, workflow: Workflow) -> None:
        try:
            async with self.database.session() as session:
                await WorkflowRepository(session).save_workflow(workflow)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to save workflow {workflow.id}: {e}") from e

        if self.cache is not None:
            try:
                await self.cache.cache_workflow(workflow)
            except RedisError as e:
                await self._evict(workflow.id)
                raise StorageError(f"Failed to cache workflow {workflow.id}: {e}") from e

    async def load(self, workflow_id: UUID) -> Optional[Workflow]:
        if self.cache is not None:
            try:
                cached = await self.cache.get_workflow(workflow_id)
            except RedisError as e:
                raise StorageError(f"Failed to read cached workflow {workflow_id}: {e}") from e
            if cached is not None:
                logger.debug(f"Cache hit for workflow {workflow_id}")
                return cached

        try:
            async with self.database.session() as session:
                workflow = await WorkflowRepository(session).load_workflow(workflow_id)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load workflow {workflow_id}: {e}") from e

        if workflow is not None and self.cache is not None:
            try:
                await self.cache.cache_workflow(workflow)
            except RedisError as e:
                raise StorageError(f"Failed to cache workflow {workflow_id}: {e}") from e
        return workflow

    async def get_active_workflows_for_user(self, user_id: UUID) -> list[Workflow]:
        try:
            async with self.database.session() as session:
                return await WorkflowRepository(session).get_active_workflows_for_user(user_id)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load workflows for user {user_id}: {e}") from e

    async def list_workflows(self) -> list[WorkflowSummary]:
        try:
            async with self.database.session() as session:
                return await WorkflowRepository(session).list_workflows()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list workflows: {e}") from e

    async def record_event(self, user_id: UUID, event: Event) -> None:
        try:
            async with self.database.session() as session:
                await WorkflowRepository(session).save_event(user_id, event)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to record {event.type} event for user {user_id}: {e}") from e

    async def list_events(self, user_id: Optional[UUID] = None) -> list[RecordedEvent]:
        try:
            async with self.database.session() as session:
                return await WorkflowRepository(session).list_events(user_id)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list events: {e}") from e

    async def _evict(self, workflow_id: UUID) -> None:
        try:
            await self.cache.delete_workflow(workflow_id)
        except RedisError as e:
            logger.warning(f"Could not evict stale cache entry for workflow {workflow_id}: {e}")
