"""
In-memory workflow store.

Keeps workflows in their serialized form, so every load goes through the
same decode path as the database store. Used by tests and the demo.
"""

import asyncio
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from gateflow.core.events import Event
from gateflow.core.models import Workflow, WorkflowSummary
from gateflow.core.serialization import deserialize, serialize
from gateflow.core.state_machine import WorkflowStatus
from gateflow.storage.base import RecordedEvent, WorkflowStore


class InMemoryWorkflowStore(WorkflowStore):
    """Process-local store. Not shared between processes."""

    def __init__(self):
        self._users: dict[UUID, str] = {}
        self._workflows: dict[UUID, bytes] = {}
        self._summaries: dict[UUID, WorkflowSummary] = {}
        self._events: list[RecordedEvent] = []
        self._lock = asyncio.Lock()

    async def create_user(self, user_id: UUID, name: str) -> None:
        async with self._lock:
            self._users.setdefault(user_id, name)

    async def save(self, workflow: Workflow) -> None:
        data = serialize(workflow)
        async with self._lock:
            self._workflows[workflow.id] = data
            self._summaries[workflow.id] = WorkflowSummary(
                id=workflow.id,
                user_id=workflow.user_id,
                name=workflow.name,
                status=workflow.status,
                updated_at=datetime.now(timezone.utc),
            )

    async def load(self, workflow_id: UUID) -> Optional[Workflow]:
        async with self._lock:
            data = self._workflows.get(workflow_id)
        if data is None:
            return None
        return deserialize(data)

    async def get_active_workflows_for_user(self, user_id: UUID) -> list[Workflow]:
        async with self._lock:
            payloads = [
                self._workflows[summary.id]
                for summary in self._summaries.values()
                if summary.user_id == user_id and summary.status == WorkflowStatus.ACTIVE
            ]
        return [deserialize(data) for data in payloads]

    async def list_workflows(self) -> list[WorkflowSummary]:
        async with self._lock:
            return list(self._summaries.values())

    async def record_event(self, user_id: UUID, event: Event) -> None:
        async with self._lock:
            self._events.append(RecordedEvent(id=uuid4(), user_id=user_id, event=event))

    async def list_events(self, user_id: Optional[UUID] = None) -> list[RecordedEvent]:
        async with self._lock:
            return [e for e in self._events if user_id is None or e.user_id == user_id]

    @property
    def users(self) -> dict[UUID, str]:
        """Registered users by id."""
        return dict(self._users)
