"""
Type-tag registry for polymorphic, persistable values.

Conditions and node behaviors are stored as a string discriminator plus
optional string data. A registry maps each discriminator to the class that
rebuilds the value, so persisted workflows never embed executable code.
"""

from typing import Any, Callable, Generic, Optional, TypeVar

from gateflow.core.exceptions import DuplicateTypeTagError, UnknownTypeTagError

T = TypeVar("T")


class TypeRegistry(Generic[T]):
    """
    Registry of reconstructible types keyed by type tag.

    Registered classes expose a ``type_tag`` class attribute and a
    ``from_data(data)`` classmethod.
    """

    def __init__(self, kind: str):
        self.kind = kind
        self._types: dict[str, type[T]] = {}

    def register(self, cls: type[T]) -> type[T]:
        """
        Register a class under its ``type_tag``. Usable as a decorator.

        Raises:
            DuplicateTypeTagError: If the tag is already registered
        """
        tag = getattr(cls, "type_tag", None)
        if not tag:
            raise ValueError(f"{cls.__name__} has no type_tag")

        existing = self._types.get(tag)
        if existing is not None and existing is not cls:
            raise DuplicateTypeTagError(
                f"{self.kind} type tag {tag!r} already registered by {existing.__name__}"
            )

        self._types[tag] = cls
        return cls

    def unregister(self, tag: str) -> None:
        """Remove a tag. Unknown tags are ignored."""
        self._types.pop(tag, None)

    def get(self, tag: str) -> Optional[type[T]]:
        """Get the class registered for a tag."""
        return self._types.get(tag)

    def create(self, tag: str, data: Optional[str] = None) -> T:
        """
        Reconstruct a value from its tag and data.

        Raises:
            UnknownTypeTagError: If no class is registered for the tag
        """
        cls = self._types.get(tag)
        if cls is None:
            raise UnknownTypeTagError(self.kind, tag)
        factory: Callable[[Optional[str]], T] = getattr(cls, "from_data")
        return factory(data)

    def decode(self, value: Any) -> T:
        """
        Reconstruct a value from its persisted ``{"type", "data"}`` form.

        Raises:
            ValueError: If the value is not a string tag with optional string data
            UnknownTypeTagError: If no class is registered for the tag
        """
        if not isinstance(value, dict) or "type" not in value:
            raise ValueError(f"{self.kind} must be an object with a 'type' tag")

        tag = value["type"]
        data = value.get("data")
        if not isinstance(tag, str):
            raise ValueError(f"{self.kind} type tag must be a string, got {type(tag).__name__}")
        if data is not None and not isinstance(data, str):
            raise ValueError(f"{self.kind} data must be a string or null, got {type(data).__name__}")

        return self.create(tag, data)

    def __contains__(self, tag: object) -> bool:
        return tag in self._types

    def list_types(self) -> list[str]:
        """List registered tags in registration order."""
        return list(self._types.keys())
