"""
Unit tests for type-tag registries.
"""

import pytest

from gateflow.core.behaviors import (
    EmptyBehavior,
    FinishNodeBehavior,
    LogBehavior,
    NodeBehavior,
    TimerNodeBehavior,
    behavior_registry,
)
from gateflow.core.conditions import TimerCondition, UserActivityCondition, condition_registry
from gateflow.core.exceptions import DuplicateTypeTagError, UnknownTypeTagError
from gateflow.core.registry import TypeRegistry


class TestTypeRegistry:
    """Tests for the generic registry."""

    def test_register_and_create(self):
        registry: TypeRegistry[NodeBehavior] = TypeRegistry("behavior")
        registry.register(LogBehavior)

        behavior = registry.create("log", "hi")

        assert isinstance(behavior, LogBehavior)
        assert behavior.message == "hi"
        assert "log" in registry
        assert registry.list_types() == ["log"]

    def test_register_is_idempotent_for_same_class(self):
        registry: TypeRegistry[NodeBehavior] = TypeRegistry("behavior")
        registry.register(LogBehavior)
        registry.register(LogBehavior)

        assert registry.list_types() == ["log"]

    def test_duplicate_tag_rejected(self):
        registry: TypeRegistry[NodeBehavior] = TypeRegistry("behavior")
        registry.register(LogBehavior)

        class OtherLog(NodeBehavior):
            type_tag = "log"

        with pytest.raises(DuplicateTypeTagError):
            registry.register(OtherLog)

    def test_unknown_tag(self):
        registry: TypeRegistry[NodeBehavior] = TypeRegistry("behavior")

        with pytest.raises(UnknownTypeTagError) as exc_info:
            registry.create("missing")

        assert exc_info.value.kind == "behavior"
        assert exc_info.value.tag == "missing"

    def test_class_without_tag_rejected(self):
        registry: TypeRegistry[NodeBehavior] = TypeRegistry("behavior")

        class Untagged:
            pass

        with pytest.raises(ValueError):
            registry.register(Untagged)

    def test_unregister(self):
        registry: TypeRegistry[NodeBehavior] = TypeRegistry("behavior")
        registry.register(LogBehavior)

        registry.unregister("log")
        registry.unregister("log")

        assert registry.get("log") is None


class TestBuiltinRegistries:
    """Built-in conditions and behaviors are registered on import."""

    def test_builtin_conditions(self):
        assert condition_registry.get("user_activity") is UserActivityCondition
        assert condition_registry.get("timer") is TimerCondition

    def test_builtin_behaviors(self):
        assert behavior_registry.get("empty") is EmptyBehavior
        assert behavior_registry.get("timer") is TimerNodeBehavior
        assert behavior_registry.get("finish") is FinishNodeBehavior
        assert behavior_registry.get("log") is LogBehavior

    def test_timer_condition_from_data(self):
        assert condition_registry.create("timer", "9") == TimerCondition("9")

        with pytest.raises(ValueError):
            condition_registry.create("timer", None)

    def test_timer_behavior_returns_its_id(self):
        behavior = behavior_registry.create("timer", "abc")

        assert behavior.on_activated() == "abc"

    def test_default_behaviors_return_nothing(self):
        assert EmptyBehavior().on_activated() is None
        assert EmptyBehavior().on_completed() is None
        assert LogBehavior("x").on_activated() is None


class TestRegistryDecode:
    """Tests for rebuilding values from their persisted form."""

    def test_decode_tagged_object(self):
        assert condition_registry.decode({"type": "timer", "data": "3"}) == TimerCondition("3")
        assert behavior_registry.decode({"type": "empty"}) == EmptyBehavior()

    @pytest.mark.parametrize(
        "value",
        [
            "timer",
            {"data": "3"},
            {"type": ["timer"], "data": "3"},
            {"type": 7},
            {"type": "timer", "data": 3},
            {"type": "timer", "data": {"id": "3"}},
        ],
    )
    def test_malformed_value_rejected(self, value):
        with pytest.raises(ValueError):
            condition_registry.decode(value)

    def test_unknown_tag(self):
        with pytest.raises(UnknownTypeTagError):
            behavior_registry.decode({"type": "teleport", "data": None})
