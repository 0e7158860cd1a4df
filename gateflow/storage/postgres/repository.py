"""
Repository layer for workflow data access.

Provides high-level data access methods with proper transaction handling.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import and_, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from gateflow.core.events import Event, event_from_record
from gateflow.core.models import Workflow, WorkflowSummary
from gateflow.core.serialization import deserialize, serialize
from gateflow.core.state_machine import WorkflowStatus
from gateflow.storage.base import RecordedEvent
from gateflow.storage.postgres.models import EventModel, UserModel, WorkflowModel


class WorkflowRepository:
    """
    Repository for users, workflows and events.

    All methods operate within the provided session's transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # ==================== User Operations ====================

    async def create_user(self, user_id: UUID, name: str) -> None:
        """Create a user; an existing id is left untouched."""
        await self.session.execute(
            insert(UserModel)
            .values(id=user_id, name=name)
            .on_conflict_do_nothing(index_elements=[UserModel.id])
        )

    # ==================== Workflow Operations ====================

    async def save_workflow(self, workflow: Workflow) -> None:
        """Insert a workflow or replace its data and status."""
        statement = insert(WorkflowModel).values(
            id=workflow.id,
            user_id=workflow.user_id,
            name=workflow.name,
            data=serialize(workflow),
            status=workflow.status.value,
        )
        await self.session.execute(
            statement.on_conflict_do_update(
                index_elements=[WorkflowModel.id],
                set_={
                    "data": statement.excluded.data,
                    "status": statement.excluded.status,
                    "updated_at": func.now(),
                },
            )
        )

    async def load_workflow(
        self,
        workflow_id: UUID,
        user_id: Optional[UUID] = None,
    ) -> Optional[Workflow]:
        """Load a workflow by ID, optionally scoped to its owner."""
        query = select(WorkflowModel.data).where(WorkflowModel.id == workflow_id)
        if user_id is not None:
            query = query.where(WorkflowModel.user_id == user_id)

        result = await self.session.execute(query)
        data = result.scalar_one_or_none()

        if data is None:
            return None
        return deserialize(data)

    async def get_active_workflows_for_user(self, user_id: UUID) -> list[Workflow]:
        """Load every active workflow of a user."""
        result = await self.session.execute(
            select(WorkflowModel.data)
            .where(
                and_(
                    WorkflowModel.user_id == user_id,
                    WorkflowModel.status == WorkflowStatus.ACTIVE.value,
                )
            )
            .order_by(WorkflowModel.created_at)
        )
        return [deserialize(data) for data in result.scalars().all()]

    async def list_workflows(self) -> list[WorkflowSummary]:
        """List workflows without decoding their graphs."""
        result = await self.session.execute(
            select(
                WorkflowModel.id,
                WorkflowModel.user_id,
                WorkflowModel.name,
                WorkflowModel.status,
                WorkflowModel.updated_at,
            ).order_by(WorkflowModel.created_at)
        )
        return [
            WorkflowSummary(
                id=row.id,
                user_id=row.user_id,
                name=row.name,
                status=WorkflowStatus(row.status),
                updated_at=row.updated_at,
            )
            for row in result.all()
        ]

    # ==================== Event Operations ====================

    async def save_event(self, user_id: UUID, event: Event) -> None:
        """Append an event to the log."""
        self.session.add(
            EventModel(
                user_id=user_id,
                event_type=event.type,
                event_data=event.event_data(),
            )
        )
        await self.session.flush()

    async def list_events(self, user_id: Optional[UUID] = None) -> list[RecordedEvent]:
        """List events oldest first."""
        query = select(EventModel).order_by(EventModel.created_at)
        if user_id is not None:
            query = query.where(EventModel.user_id == user_id)

        result = await self.session.execute(query)
        return [
            RecordedEvent(
                id=model.id,
                user_id=model.user_id,
                event=event_from_record(model.event_type, model.event_data),
                created_at=model.created_at,
            )
            for model in result.scalars().all()
        ]
