"""PostgreSQL storage layer."""

from gateflow.storage.postgres.models import Base, EventModel, UserModel, WorkflowModel
from gateflow.storage.postgres.repository import WorkflowRepository
from gateflow.storage.postgres.database import Database
from gateflow.storage.postgres.store import PostgresWorkflowStore

__all__ = [
    "Base",
    "UserModel",
    "WorkflowModel",
    "EventModel",
    "WorkflowRepository",
    "Database",
    "PostgresWorkflowStore",
]
