"""Storage layer for workflow persistence."""

from gateflow.storage.base import RecordedEvent, WorkflowStore
from gateflow.storage.memory import InMemoryWorkflowStore

__all__ = ["RecordedEvent", "WorkflowStore", "InMemoryWorkflowStore"]
