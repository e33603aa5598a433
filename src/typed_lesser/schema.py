"""Schema class for declaring element types."""

from __future__ import annotations

from typing import Any, Iterable

from typed_lesser.parsing import TypeParser
from typed_lesser.slice import TypedSlice
from typed_lesser.types import TypeDefinition, TypeRegistry


class Schema:
    """Parsed type declarations."""

    def __init__(self, registry: TypeRegistry) -> None:
        """Initialize a schema.

        Args:
            registry: Type registry with all type definitions.
        """
        self.registry = registry

    @classmethod
    def parse(cls, type_definitions: str) -> Schema:
        """Parse type declarations and create a schema.

        Args:
            type_definitions: DSL string declaring types.

        Returns:
            A new Schema instance.
        """
        parser = TypeParser()
        return cls(parser.parse(type_definitions))

    def get_type(self, name: str) -> TypeDefinition:
        """Get a type definition by name.

        Raises:
            KeyError: If the type is not found.
        """
        return self.registry.get_or_raise(name)

    def list_types(self) -> list[str]:
        """List all registered type names."""
        return self.registry.list_types()

    def make_slice(self, type_name: str, values: Iterable[Any] = ()) -> TypedSlice:
        """Create a TypedSlice of the named element type.

        Args:
            type_name: Name of the element type.
            values: Initial values (dict or tuple for composites, list for
                   arrays, scalar for primitives).
        """
        return TypedSlice(self.get_type(type_name), values)
