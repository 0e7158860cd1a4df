"""
Exception hierarchy for the gated workflow engine.

Construction errors are raised while a workflow is built, dispatch errors
while an event is processed, decode errors while persisted state is read.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from gateflow.core.graph import ValidationResult


class GateflowError(Exception):
    """Base class for all engine errors."""


class WorkflowConstructionError(GateflowError):
    """Raised when a workflow graph fails structural validation."""

    def __init__(self, result: "ValidationResult"):
        self.result = result
        messages = "; ".join(f"{e.code}: {e.message}" for e in result.errors)
        super().__init__(f"Workflow validation failed: {messages}")

    @property
    def codes(self) -> list[str]:
        """Error codes reported by the validator."""
        return [e.code for e in self.result.errors]


class InvalidStateTransitionError(GateflowError):
    """Raised when a node status would move backward or skip a step."""

    def __init__(self, from_state: str, to_state: str, message: str = ""):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid state transition from {from_state} to {to_state}"
            + (f": {message}" if message else "")
        )


class DispatchError(GateflowError):
    """Raised when an event dispatch aborts. The workflow is marked FAILED."""

    def __init__(self, message: str, node_id: Optional[int] = None):
        self.node_id = node_id
        super().__init__(message)


class HookExecutionError(DispatchError):
    """Raised when a node behavior hook throws."""

    def __init__(self, node_id: int, hook: str, error: BaseException):
        self.hook = hook
        self.error = error
        super().__init__(
            f"Behavior hook {hook} failed on node {node_id}: {error}",
            node_id=node_id,
        )


class CascadeLimitError(DispatchError):
    """Raised when a cascade exceeds the configured depth."""


class UnknownTypeTagError(GateflowError):
    """Raised when a registry has no entry for a type tag."""

    def __init__(self, kind: str, tag: str):
        self.kind = kind
        self.tag = tag
        super().__init__(f"Unknown {kind} type tag: {tag!r}")


class DuplicateTypeTagError(GateflowError):
    """Raised when a type tag is registered twice."""


class DecodeError(GateflowError):
    """Raised when serialized workflow or event data cannot be reconstructed."""


class StorageError(GateflowError):
    """Raised when the storage collaborator fails. Never retried here."""


class WorkflowNotFoundError(GateflowError):
    """Raised when a workflow id has no stored workflow."""

    def __init__(self, workflow_id):
        self.workflow_id = workflow_id
        super().__init__(f"Workflow not found: {workflow_id}")
