"""
External events understood by workflows.

Events are a tagged union discriminated by ``type``. Adding a variant
requires a matching condition in ``gateflow.core.conditions``.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class EventType(str, Enum):
    """Supported event discriminators."""

    USER_ACTIVITY = "user_activity"
    TIMER = "timer"


class UserActivityEvent(BaseModel):
    """The user did something. No payload."""

    model_config = ConfigDict(frozen=True)

    type: Literal["user_activity"] = "user_activity"

    def event_data(self) -> Optional[dict[str, Any]]:
        return None


class TimerEvent(BaseModel):
    """A timer fired."""

    model_config = ConfigDict(frozen=True)

    type: Literal["timer"] = "timer"
    timer_id: str = Field(..., description="Correlation id of the fired timer")

    def event_data(self) -> Optional[dict[str, Any]]:
        return {"timer_id": self.timer_id}


Event = Annotated[Union[UserActivityEvent, TimerEvent], Field(discriminator="type")]

event_adapter: TypeAdapter[Event] = TypeAdapter(Event)


def event_from_record(event_type: str, event_data: Optional[dict[str, Any]]) -> Event:
    """Rebuild an event from its stored type and JSON data columns."""
    payload: dict[str, Any] = dict(event_data or {})
    payload["type"] = event_type
    return event_adapter.validate_python(payload)
