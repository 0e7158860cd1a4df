"""
Workflow engine.

Owns the load -> dispatch -> save cycle around the pure dispatcher:
- Workflow registration and validation
- Event recording and routing to a user's active workflows
- Per-workflow serialization of concurrent events
- Persisting failed workflows before surfacing the error
"""

import asyncio
import logging
from collections import defaultdict
from typing import Optional
from uuid import UUID

from gateflow.config import get_settings
from gateflow.core.dispatcher import WorkflowDispatcher
from gateflow.core.events import Event
from gateflow.core.exceptions import DispatchError, WorkflowNotFoundError
from gateflow.core.models import DispatchResult, Workflow
from gateflow.storage.base import WorkflowStore

logger = logging.getLogger(__name__)


class WorkflowEngine:
    """
    Event-driven front end to the dispatcher.

    Events for the same workflow are applied one at a time; distinct
    workflows are dispatched concurrently.
    """

    def __init__(
        self,
        store: WorkflowStore,
        dispatcher: Optional[WorkflowDispatcher] = None,
    ):
        self.store = store
        self.dispatcher = dispatcher or WorkflowDispatcher(
            max_cascade_depth=get_settings().dispatch.max_cascade_depth,
        )
        self._locks: defaultdict[UUID, asyncio.Lock] = defaultdict(asyncio.Lock)

    # ==================== Users ====================

    async def create_user(self, user_id: UUID, name: str) -> None:
        """Register a workflow owner."""
        await self.store.create_user(user_id, name)
        logger.info(f"User created: {user_id} ({name})")

    # ==================== Workflows ====================

    async def start_workflow(self, workflow: Workflow) -> Workflow:
        """
        Persist a new workflow.

        The workflow was validated when it was constructed; starting it only
        stores it so events can be routed to it.
        """
        async with self._locks[workflow.id]:
            await self.store.save(workflow)
            if workflow.is_terminal:
                self._drop_lock(workflow.id)

        logger.info(
            f"Workflow started: {workflow.id} ({workflow.name or 'unnamed'}) "
            f"for user {workflow.user_id}, active nodes {workflow.active_node_ids()}"
        )
        return workflow

    async def get_workflow(self, workflow_id: UUID) -> Workflow:
        """Load a workflow or raise WorkflowNotFoundError."""
        workflow = await self.store.load(workflow_id)
        if workflow is None:
            raise WorkflowNotFoundError(workflow_id)
        return workflow

    # ==================== Events ====================

    async def submit_event(self, workflow_id: UUID, event: Event) -> DispatchResult:
        """
        Apply an event to one workflow.

        Args:
            workflow_id: Target workflow
            event: Incoming event

        Returns:
            DispatchResult of the dispatch

        Raises:
            WorkflowNotFoundError: If the workflow does not exist
            DispatchError: If dispatch failed; the FAILED workflow is saved first
        """
        async with self._locks[workflow_id]:
            workflow = await self.store.load(workflow_id)
            if workflow is None:
                self._drop_lock(workflow_id)
                raise WorkflowNotFoundError(workflow_id)
            await self.store.record_event(workflow.user_id, event)
            return await self._dispatch(workflow, event)

    async def submit_user_event(
        self,
        user_id: UUID,
        event: Event,
    ) -> dict[UUID, DispatchResult]:
        """
        Record an event for a user and apply it to each of their active workflows.

        The event is recorded once. A dispatch failure on one workflow stops
        routing and is raised after that workflow is saved.
        """
        await self.store.record_event(user_id, event)

        results: dict[UUID, DispatchResult] = {}
        for candidate in await self.store.get_active_workflows_for_user(user_id):
            async with self._locks[candidate.id]:
                # Reload under the lock; another event may have advanced it.
                workflow = await self.store.load(candidate.id)
                if workflow is None or workflow.is_terminal:
                    self._drop_lock(candidate.id)
                    continue
                results[workflow.id] = await self._dispatch(workflow, event)

        logger.info(f"Routed {event.type} event for user {user_id} to {len(results)} workflows")
        return results

    async def _dispatch(self, workflow: Workflow, event: Event) -> DispatchResult:
        """Dispatch under the caller's lock and persist the outcome."""
        try:
            result = self.dispatcher.process_event(workflow, event)
        except DispatchError:
            await self.store.save(workflow)
            raise
        finally:
            if workflow.is_terminal:
                self._drop_lock(workflow.id)

        await self.store.save(workflow)

        if result.newly_activated or result.newly_completed:
            logger.info(
                f"Workflow {workflow.id} advanced on {event.type}: "
                f"activated {result.newly_activated}, completed {result.newly_completed}"
            )
        return result

    def _drop_lock(self, workflow_id: UUID) -> None:
        """Forget the lock of a workflow that can no longer change."""
        self._locks.pop(workflow_id, None)
