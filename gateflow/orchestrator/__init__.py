"""Workflow engine coordinating storage and dispatch."""

from gateflow.orchestrator.engine import WorkflowEngine

__all__ = ["WorkflowEngine"]
