"""
Atomic predicates over events.

A condition is identified by a stable type tag plus optional string data,
so it can be rebuilt from persisted state through ``condition_registry``.
"""

from abc import ABC, abstractmethod
from typing import ClassVar, Optional

from gateflow.core.events import Event, TimerEvent, UserActivityEvent
from gateflow.core.registry import TypeRegistry


class Condition(ABC):
    """Base class for gate conditions. Implementations must be pure."""

    type_tag: ClassVar[str]

    @abstractmethod
    def evaluate(self, event: Event) -> bool:
        """Return True if the event satisfies this condition."""

    def condition_data(self) -> Optional[str]:
        """String-encoded parameters, or None when the condition has none."""
        return None

    @classmethod
    def from_data(cls, data: Optional[str]) -> "Condition":
        """Rebuild the condition from its string-encoded parameters."""
        return cls()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Condition):
            return NotImplemented
        return (self.type_tag, self.condition_data()) == (other.type_tag, other.condition_data())

    def __hash__(self) -> int:
        return hash((self.type_tag, self.condition_data()))

    def __repr__(self) -> str:
        data = self.condition_data()
        return f"{type(self).__name__}({data!r})" if data is not None else f"{type(self).__name__}()"


condition_registry: TypeRegistry[Condition] = TypeRegistry("condition")


@condition_registry.register
class UserActivityCondition(Condition):
    """Satisfied by any user activity event."""

    type_tag = "user_activity"

    def evaluate(self, event: Event) -> bool:
        return isinstance(event, UserActivityEvent)


@condition_registry.register
class TimerCondition(Condition):
    """Satisfied by a timer event with a matching timer id."""

    type_tag = "timer"

    def __init__(self, timer_id: str):
        self.timer_id = timer_id

    def evaluate(self, event: Event) -> bool:
        return isinstance(event, TimerEvent) and event.timer_id == self.timer_id

    def condition_data(self) -> Optional[str]:
        return self.timer_id

    @classmethod
    def from_data(cls, data: Optional[str]) -> "TimerCondition":
        if data is None:
            raise ValueError("timer condition requires a timer id")
        return cls(data)
