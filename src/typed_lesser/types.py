"""Type definitions for the typed_lesser library."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class PrimitiveType(Enum):
    """Built-in primitive types that can appear as a comparison leaf."""

    BOOL = "bool"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    UINTPTR = "uintptr"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    COMPLEX64 = "complex64"
    COMPLEX128 = "complex128"
    STRING = "string"
    CHAN = "chan"
    FUNC = "func"
    MAP = "map"
    POINTER = "pointer"
    UNSAFE_POINTER = "unsafe_pointer"

    @property
    def size_bytes(self) -> int:
        """Return the size in bytes for this primitive type."""
        return _SIZES[self]

    @property
    def alignment(self) -> int:
        """Return the natural alignment in bytes.

        Complex numbers align like their component float; strings align
        like the uint32 pair in their header.
        """
        if self.is_complex:
            return self.size_bytes // 2
        if self is PrimitiveType.STRING:
            return 4
        return self.size_bytes

    @property
    def struct_format(self) -> str:
        """Return the little-endian struct format for one value."""
        return _FORMATS[self]

    @property
    def is_integer(self) -> bool:
        return self in _INTEGERS

    @property
    def is_float(self) -> bool:
        return self in (PrimitiveType.FLOAT32, PrimitiveType.FLOAT64)

    @property
    def is_complex(self) -> bool:
        return self in (PrimitiveType.COMPLEX64, PrimitiveType.COMPLEX128)

    @property
    def is_reference(self) -> bool:
        """Opaque handles ordered by identity, never dereferenced."""
        return self in _REFERENCES


_SIZES: dict[PrimitiveType, int] = {
    PrimitiveType.BOOL: 1,
    PrimitiveType.INT8: 1,
    PrimitiveType.INT16: 2,
    PrimitiveType.INT32: 4,
    PrimitiveType.INT64: 8,
    PrimitiveType.UINT8: 1,
    PrimitiveType.UINT16: 2,
    PrimitiveType.UINT32: 4,
    PrimitiveType.UINT64: 8,
    PrimitiveType.UINTPTR: 8,
    PrimitiveType.FLOAT32: 4,
    PrimitiveType.FLOAT64: 8,
    PrimitiveType.COMPLEX64: 8,
    PrimitiveType.COMPLEX128: 16,
    PrimitiveType.STRING: 8,  # (start, length) into the string heap
    PrimitiveType.CHAN: 8,
    PrimitiveType.FUNC: 8,
    PrimitiveType.MAP: 8,
    PrimitiveType.POINTER: 8,
    PrimitiveType.UNSAFE_POINTER: 8,
}

_FORMATS: dict[PrimitiveType, str] = {
    PrimitiveType.BOOL: "<?",
    PrimitiveType.INT8: "<b",
    PrimitiveType.INT16: "<h",
    PrimitiveType.INT32: "<i",
    PrimitiveType.INT64: "<q",
    PrimitiveType.UINT8: "<B",
    PrimitiveType.UINT16: "<H",
    PrimitiveType.UINT32: "<I",
    PrimitiveType.UINT64: "<Q",
    PrimitiveType.UINTPTR: "<Q",
    PrimitiveType.FLOAT32: "<f",
    PrimitiveType.FLOAT64: "<d",
    PrimitiveType.COMPLEX64: "<ff",
    PrimitiveType.COMPLEX128: "<dd",
    PrimitiveType.STRING: "<II",
    PrimitiveType.CHAN: "<Q",
    PrimitiveType.FUNC: "<Q",
    PrimitiveType.MAP: "<Q",
    PrimitiveType.POINTER: "<Q",
    PrimitiveType.UNSAFE_POINTER: "<Q",
}

_INTEGERS = frozenset(
    {
        PrimitiveType.INT8,
        PrimitiveType.INT16,
        PrimitiveType.INT32,
        PrimitiveType.INT64,
        PrimitiveType.UINT8,
        PrimitiveType.UINT16,
        PrimitiveType.UINT32,
        PrimitiveType.UINT64,
        PrimitiveType.UINTPTR,
    }
)

_REFERENCES = frozenset(
    {
        PrimitiveType.CHAN,
        PrimitiveType.FUNC,
        PrimitiveType.MAP,
        PrimitiveType.POINTER,
        PrimitiveType.UNSAFE_POINTER,
    }
)


# Platform-width integer names, registered as aliases
PLATFORM_ALIASES: dict[str, str] = {"int": "int64", "uint": "uint64", "byte": "uint8"}

# Size of an opaque handle (interface values, nested slices)
HANDLE_SIZE = 8

# Field name that marks a padding/placeholder field excluded from ordering
DISCARD_FIELD = "_"


def _align(offset: int, alignment: int) -> int:
    return (offset + alignment - 1) // alignment * alignment


@dataclass
class TypeDefinition:
    """Base class for all type definitions."""

    name: str

    @property
    def size_bytes(self) -> int:
        """Return the size in bytes for storing a value of this type inline."""
        raise NotImplementedError

    @property
    def alignment(self) -> int:
        """Return the alignment in bytes of a value of this type."""
        raise NotImplementedError

    @property
    def kind(self) -> str:
        """Return a short name for the category of this type."""
        raise NotImplementedError

    @property
    def is_array(self) -> bool:
        """Return whether this type is a fixed-size array type."""
        return False

    @property
    def is_slice(self) -> bool:
        """Return whether this type is a variable-length slice type."""
        return False

    def resolve_base_type(self) -> TypeDefinition:
        """Resolve through aliases to get the underlying type."""
        return self


@dataclass
class PrimitiveTypeDefinition(TypeDefinition):
    """Type definition wrapping a primitive type."""

    primitive: PrimitiveType

    @property
    def size_bytes(self) -> int:
        return self.primitive.size_bytes

    @property
    def alignment(self) -> int:
        return self.primitive.alignment

    @property
    def kind(self) -> str:
        return self.primitive.value


@dataclass
class AliasTypeDefinition(TypeDefinition):
    """Type definition for 'define X as Y' aliases."""

    base_type: TypeDefinition

    @property
    def size_bytes(self) -> int:
        return self.base_type.size_bytes

    @property
    def alignment(self) -> int:
        return self.base_type.alignment

    @property
    def kind(self) -> str:
        return self.base_type.kind

    @property
    def is_array(self) -> bool:
        return self.base_type.is_array

    def resolve_base_type(self) -> TypeDefinition:
        """Resolve through aliases to get the underlying type."""
        return self.base_type.resolve_base_type()


@dataclass
class ArrayTypeDefinition(TypeDefinition):
    """Type definition for fixed-size array types (e.g., int16[4]).

    Elements are stored inline and back to back: element k starts at
    k * element_type.size_bytes.
    """

    element_type: TypeDefinition
    length: int = 0

    @property
    def size_bytes(self) -> int:
        return self.element_type.size_bytes * self.length

    @property
    def alignment(self) -> int:
        return self.element_type.alignment

    @property
    def kind(self) -> str:
        return "array"

    @property
    def is_array(self) -> bool:
        return True


@dataclass
class SliceTypeDefinition(TypeDefinition):
    """Type definition for variable-length sequences (e.g., string[]).

    Stored as an opaque handle to a Python list. Slices can be declared and
    stored but have no defined ordering.
    """

    element_type: TypeDefinition

    @property
    def size_bytes(self) -> int:
        return HANDLE_SIZE

    @property
    def alignment(self) -> int:
        return HANDLE_SIZE

    @property
    def kind(self) -> str:
        return "slice"

    @property
    def is_slice(self) -> bool:
        return True


@dataclass
class InterfaceTypeDefinition(TypeDefinition):
    """Type definition for open values whose concrete type varies per element.

    Stored as an opaque handle to the Python object. Interface values have
    no defined ordering.
    """

    @property
    def size_bytes(self) -> int:
        return HANDLE_SIZE

    @property
    def alignment(self) -> int:
        return HANDLE_SIZE

    @property
    def kind(self) -> str:
        return "interface"


@dataclass
class FieldDefinition:
    """Definition of a field within a composite type."""

    name: str
    type_def: TypeDefinition

    @property
    def is_discard(self) -> bool:
        """Return whether this is a placeholder field excluded from ordering."""
        return self.name == DISCARD_FIELD


@dataclass
class CompositeTypeDefinition(TypeDefinition):
    """Type definition for composite types (structs).

    Fields are laid out in declaration order, each at the next multiple of
    its own alignment. The record is padded to a multiple of its alignment
    (the largest field alignment) so consecutive records stay aligned.
    """

    fields: list[FieldDefinition] = field(default_factory=list)

    @property
    def alignment(self) -> int:
        return max((f.type_def.alignment for f in self.fields), default=1)

    @property
    def size_bytes(self) -> int:
        """Return the total record size including trailing padding."""
        end = 0
        for f, offset in self.layout():
            end = offset + f.type_def.size_bytes
        return _align(end, self.alignment)

    @property
    def kind(self) -> str:
        return "composite"

    def layout(self) -> list[tuple[FieldDefinition, int]]:
        """Return (field, byte offset) pairs in declaration order."""
        result: list[tuple[FieldDefinition, int]] = []
        offset = 0
        for f in self.fields:
            offset = _align(offset, f.type_def.alignment)
            result.append((f, offset))
            offset += f.type_def.size_bytes
        return result

    def get_field(self, name: str) -> FieldDefinition | None:
        """Get a field by name."""
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def get_field_offset(self, name: str) -> int:
        """Get the byte offset of a field within the composite record."""
        for f, offset in self.layout():
            if f.name == name:
                return offset
        raise KeyError(f"Field '{name}' not found in type '{self.name}'")


class TypeRegistry:
    """Registry of all defined types."""

    def __init__(self) -> None:
        self._types: dict[str, TypeDefinition] = {}
        self._register_builtins()

    def _register_builtins(self) -> None:
        """Register primitive types, platform aliases and the open 'any' type."""
        for pt in PrimitiveType:
            self._types[pt.value] = PrimitiveTypeDefinition(name=pt.value, primitive=pt)
        for alias, base in PLATFORM_ALIASES.items():
            self._types[alias] = AliasTypeDefinition(name=alias, base_type=self._types[base])
        self._types["any"] = InterfaceTypeDefinition(name="any")

    def register(self, type_def: TypeDefinition) -> None:
        """Register a type definition."""
        if type_def.name in self._types:
            raise ValueError(f"Type '{type_def.name}' is already defined")
        self._types[type_def.name] = type_def

    def get(self, name: str) -> TypeDefinition | None:
        """Get a type by name."""
        return self._types.get(name)

    def get_or_raise(self, name: str) -> TypeDefinition:
        """Get a type by name, raising if not found."""
        type_def = self._types.get(name)
        if type_def is None:
            raise KeyError(f"Type '{name}' not found")
        return type_def

    def get_array_type(self, element_type_name: str, length: int) -> ArrayTypeDefinition:
        """Get or create a fixed-size array type for the given element type."""
        if length < 0:
            raise ValueError(f"Array length must not be negative, got {length}")
        array_name = f"{element_type_name}[{length}]"
        existing = self._types.get(array_name)
        if existing is not None:
            if not isinstance(existing, ArrayTypeDefinition):
                raise TypeError(f"Type '{array_name}' exists but is not an array type")
            return existing

        element_type = self.get_or_raise(element_type_name)
        array_type = ArrayTypeDefinition(name=array_name, element_type=element_type, length=length)
        self._types[array_name] = array_type
        return array_type

    def get_slice_type(self, element_type_name: str) -> SliceTypeDefinition:
        """Get or create a slice type for the given element type."""
        slice_name = f"{element_type_name}[]"
        existing = self._types.get(slice_name)
        if existing is not None:
            if not isinstance(existing, SliceTypeDefinition):
                raise TypeError(f"Type '{slice_name}' exists but is not a slice type")
            return existing

        element_type = self.get_or_raise(element_type_name)
        slice_type = SliceTypeDefinition(name=slice_name, element_type=element_type)
        self._types[slice_name] = slice_type
        return slice_type

    def list_types(self) -> list[str]:
        """List all registered type names."""
        return list(self._types.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._types
