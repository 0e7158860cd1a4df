"""
Storage collaborator interface.

The engine depends only on this interface. Every operation is async and
may fail with StorageError; failures are surfaced, never retried here.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from gateflow.core.events import Event
from gateflow.core.models import Workflow, WorkflowSummary


class RecordedEvent(BaseModel):
    """An event as stored by ``record_event``."""

    id: UUID
    user_id: UUID
    event: Event
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class WorkflowStore(ABC):
    """Persistence for workflows, users and the event log."""

    @abstractmethod
    async def create_user(self, user_id: UUID, name: str) -> None:
        """Create a user. Creating an existing user is a no-op."""

    @abstractmethod
    async def save(self, workflow: Workflow) -> None:
        """Insert or replace a workflow."""

    @abstractmethod
    async def load(self, workflow_id: UUID) -> Optional[Workflow]:
        """Load a workflow, or None if it does not exist."""

    @abstractmethod
    async def get_active_workflows_for_user(self, user_id: UUID) -> list[Workflow]:
        """Load every ACTIVE workflow owned by a user."""

    @abstractmethod
    async def list_workflows(self) -> list[WorkflowSummary]:
        """List all stored workflows without decoding their graphs."""

    @abstractmethod
    async def record_event(self, user_id: UUID, event: Event) -> None:
        """Append an event to the user's event log."""

    @abstractmethod
    async def list_events(self, user_id: Optional[UUID] = None) -> list[RecordedEvent]:
        """List recorded events oldest first, optionally for one user."""
