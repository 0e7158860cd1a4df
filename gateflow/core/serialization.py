"""
Byte-stable encoding of workflows and events.

Workflows are encoded as compact JSON with a fixed field order. Conditions
and behaviors are written as ``{"type", "data"}`` pairs and rebuilt from
their registries on decode; an unknown tag is a decode failure, never a
silently substituted placeholder.
"""

from typing import Union

from pydantic import ValidationError

from gateflow.core.events import Event, event_adapter
from gateflow.core.exceptions import (
    DecodeError,
    UnknownTypeTagError,
    WorkflowConstructionError,
)
from gateflow.core.models import Workflow


def serialize(workflow: Workflow) -> bytes:
    """Encode a workflow, including node statuses, edges and behaviors."""
    return workflow.model_dump_json().encode("utf-8")


def deserialize(data: Union[bytes, str]) -> Workflow:
    """
    Decode a workflow produced by ``serialize``.

    Raises:
        DecodeError: If the data is malformed, references an unknown
            condition or behavior tag, or describes an invalid graph
    """
    try:
        return Workflow.model_validate_json(data)
    except (ValidationError, UnknownTypeTagError, WorkflowConstructionError) as e:
        raise DecodeError(f"Cannot decode workflow: {e}") from e


def serialize_event(event: Event) -> bytes:
    """Encode an event."""
    return event_adapter.dump_json(event)


def deserialize_event(data: Union[bytes, str]) -> Event:
    """
    Decode an event produced by ``serialize_event``.

    Raises:
        DecodeError: If the data is not a known event
    """
    try:
        return event_adapter.validate_json(data)
    except ValidationError as e:
        raise DecodeError(f"Cannot decode event: {e}") from e
