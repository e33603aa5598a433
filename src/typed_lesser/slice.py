"""Packed, index-addressable storage for values of one element type."""

from __future__ import annotations

import struct
from typing import Any, Iterable, Iterator

from typed_lesser.types import (
    DISCARD_FIELD,
    ArrayTypeDefinition,
    CompositeTypeDefinition,
    InterfaceTypeDefinition,
    PrimitiveType,
    PrimitiveTypeDefinition,
    SliceTypeDefinition,
    TypeDefinition,
)

_HANDLE = struct.Struct("<Q")
_STRING_HEADER = struct.Struct("<II")


class TypedSlice:
    """A growable sequence of fixed-size records of a single element type.

    Element i occupies bytes [i * element_size, (i + 1) * element_size) of
    ``data``. Variable-size and opaque values are kept out of line:

    - strings store a (start, length) header pointing into ``heap``, which
      holds their UTF-8 bytes;
    - references, interface values and nested slices store an 8-byte handle
      (the object's identity) and the object itself is held in a handle
      table so that it stays alive and can be read back.

    ``data`` and ``heap`` keep their identity across every mutation, so
    anything bound to them (such as a comparator) sees the live contents.
    """

    def __init__(self, element_type: TypeDefinition, values: Iterable[Any] = ()) -> None:
        """Initialize a slice.

        Args:
            element_type: Type of every element.
            values: Initial values, appended in order.
        """
        self.element_type = element_type
        self._element_size = element_type.size_bytes
        self._data = bytearray()
        self._heap = bytearray()
        self._handles: dict[int, Any] = {}
        self._count = 0
        self.extend(values)

    @property
    def element_size(self) -> int:
        """Return the size in bytes of one element."""
        return self._element_size

    @property
    def data(self) -> bytearray:
        """Return the packed element buffer."""
        return self._data

    @property
    def heap(self) -> bytearray:
        """Return the string heap."""
        return self._heap

    def offset_of(self, index: int) -> int:
        """Get byte offset for an element index."""
        return index * self._element_size

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[Any]:
        for i in range(self._count):
            yield self[i]

    def __repr__(self) -> str:
        return f"TypedSlice({self.element_type.name}, {self.to_list()!r})"

    def _check_index(self, index: int) -> int:
        if index < 0:
            index += self._count
        if index < 0 or index >= self._count:
            raise IndexError(f"Index {index} out of range [0, {self._count})")
        return index

    def __getitem__(self, index: int) -> Any:
        index = self._check_index(index)
        return self._read(self.element_type, self.offset_of(index))

    def __setitem__(self, index: int, value: Any) -> None:
        """Overwrite one element.

        The replaced element's string bytes and handles stay in the heap and
        handle table until compact(), clear() or copy_from() runs.
        """
        index = self._check_index(index)
        start = self.offset_of(index)
        self._data[start : start + self._element_size] = self._serialize(value, self.element_type)

    def append(self, value: Any) -> None:
        """Append a value to the end of the slice."""
        self._data += self._serialize(value, self.element_type)
        self._count += 1

    def extend(self, values: Iterable[Any]) -> None:
        """Append every value in order."""
        for value in values:
            self.append(value)

    def swap(self, i: int, j: int) -> None:
        """Exchange the elements at i and j in place."""
        size = self._element_size
        a, b = i * size, j * size
        data = self._data
        data[a : a + size], data[b : b + size] = data[b : b + size], data[a : a + size]

    def clear(self) -> None:
        """Remove all elements, keeping the same buffers."""
        del self._data[:]
        del self._heap[:]
        self._handles.clear()
        self._count = 0

    def copy_from(self, other: TypedSlice) -> None:
        """Replace the contents with a copy of another slice of the same type."""
        if other.element_type is not self.element_type:
            raise ValueError(
                f"Cannot copy a slice of '{other.element_type.name}' "
                f"into a slice of '{self.element_type.name}'"
            )
        self._data[:] = other._data
        self._heap[:] = other._heap
        self._handles = dict(other._handles)
        self._count = other._count
        self.compact()

    def compact(self) -> None:
        """Drop string bytes and handles that no element refers to any more.

        String headers are rewritten in place; ``data`` and ``heap`` stay the
        same objects.
        """
        heap = bytearray()
        handles: dict[int, Any] = {}
        for i in range(self._count):
            self._relocate(self.element_type, self.offset_of(i), heap, handles)
        self._heap[:] = heap
        self._handles = handles

    def to_list(self) -> list[Any]:
        """Return all elements as decoded Python values."""
        return list(self)

    # Encoding

    def _serialize(self, value: Any, type_def: TypeDefinition) -> bytes:
        """Serialize a value of the given type to its inline bytes."""
        base = type_def.resolve_base_type()
        if isinstance(base, PrimitiveTypeDefinition):
            return self._serialize_primitive(value, base.primitive)
        elif isinstance(base, CompositeTypeDefinition):
            return self._serialize_composite(value, base)
        elif isinstance(base, ArrayTypeDefinition):
            return self._serialize_array(value, base)
        elif isinstance(base, SliceTypeDefinition):
            return self._store_handle(None if value is None else list(value))
        elif isinstance(base, InterfaceTypeDefinition):
            return self._store_handle(value)
        raise TypeError(f"Cannot serialize type: {type_def.name}")

    def _serialize_primitive(self, value: Any, primitive: PrimitiveType) -> bytes:
        """Serialize a primitive value."""
        if primitive.is_complex:
            value = complex(value)
            return struct.pack(primitive.struct_format, value.real, value.imag)
        elif primitive is PrimitiveType.STRING:
            if isinstance(value, str):
                encoded = value.encode("utf-8", "surrogateescape")
            else:
                encoded = bytes(value)
            start = len(self._heap)
            self._heap += encoded
            return _STRING_HEADER.pack(start, len(encoded))
        elif primitive.is_reference:
            if isinstance(value, int) and not isinstance(value, bool):
                if not 0 <= value < 1 << 64:
                    raise ValueError(f"Address out of range for {primitive.value}: {value}")
                return _HANDLE.pack(value)
            return self._store_handle(value)
        return struct.pack(primitive.struct_format, value)

    def _serialize_composite(self, value: Any, type_def: CompositeTypeDefinition) -> bytes:
        """Serialize a composite value.

        Accepts a dict keyed by field name (missing fields are zeroed) or a
        tuple/list in declaration order.
        """
        if isinstance(value, (list, tuple)):
            if len(value) != len(type_def.fields):
                raise ValueError(
                    f"Expected {len(type_def.fields)} values for '{type_def.name}', got {len(value)}"
                )
            items: list[Any] = list(value)
        elif isinstance(value, dict):
            unknown = set(value) - {f.name for f in type_def.fields}
            if unknown:
                raise ValueError(f"Unknown fields for '{type_def.name}': {sorted(unknown)}")
            items = [value.get(f.name) for f in type_def.fields]
        else:
            raise TypeError(f"Expected dict or tuple for composite type, got {type(value)}")

        record = bytearray(type_def.size_bytes)
        for (f, offset), item in zip(type_def.layout(), items):
            if item is None:
                continue
            size = f.type_def.size_bytes
            record[offset : offset + size] = self._serialize(item, f.type_def)
        return bytes(record)

    def _serialize_array(self, value: Any, type_def: ArrayTypeDefinition) -> bytes:
        """Serialize a fixed-size array."""
        items = list(value)
        if len(items) != type_def.length:
            raise ValueError(
                f"Expected {type_def.length} elements for '{type_def.name}', got {len(items)}"
            )
        return b"".join(self._serialize(item, type_def.element_type) for item in items)

    def _store_handle(self, value: Any) -> bytes:
        """Keep an object alive in the handle table and return its handle bytes."""
        if value is None:
            return _HANDLE.pack(0)
        handle = id(value)
        self._handles[handle] = value
        return _HANDLE.pack(handle)

    def _relocate(
        self, type_def: TypeDefinition, offset: int, heap: bytearray, handles: dict[int, Any]
    ) -> None:
        """Copy the live out-of-line parts of the value at offset into heap and handles."""
        base = type_def.resolve_base_type()
        if isinstance(base, PrimitiveTypeDefinition):
            if base.primitive is PrimitiveType.STRING:
                start, length = _STRING_HEADER.unpack_from(self._data, offset)
                _STRING_HEADER.pack_into(self._data, offset, len(heap), length)
                heap += self._heap[start : start + length]
            elif base.primitive.is_reference:
                self._keep_handle(offset, handles)
        elif isinstance(base, CompositeTypeDefinition):
            for f, field_offset in base.layout():
                self._relocate(f.type_def, offset + field_offset, heap, handles)
        elif isinstance(base, ArrayTypeDefinition):
            step = base.element_type.size_bytes
            for k in range(base.length):
                self._relocate(base.element_type, offset + k * step, heap, handles)
        elif isinstance(base, (SliceTypeDefinition, InterfaceTypeDefinition)):
            self._keep_handle(offset, handles)

    def _keep_handle(self, offset: int, handles: dict[int, Any]) -> None:
        handle = _HANDLE.unpack_from(self._data, offset)[0]
        if handle in self._handles:
            handles[handle] = self._handles[handle]

    # Decoding

    def _read(self, type_def: TypeDefinition, offset: int) -> Any:
        """Decode the value of the given type stored at offset in ``data``."""
        base = type_def.resolve_base_type()
        if isinstance(base, PrimitiveTypeDefinition):
            return self._read_primitive(base.primitive, offset)
        elif isinstance(base, CompositeTypeDefinition):
            return {
                f.name: self._read(f.type_def, offset + field_offset)
                for f, field_offset in base.layout()
                if f.name != DISCARD_FIELD
            }
        elif isinstance(base, ArrayTypeDefinition):
            step = base.element_type.size_bytes
            return [self._read(base.element_type, offset + k * step) for k in range(base.length)]
        elif isinstance(base, (SliceTypeDefinition, InterfaceTypeDefinition)):
            handle = _HANDLE.unpack_from(self._data, offset)[0]
            return self._handles.get(handle)
        raise TypeError(f"Cannot deserialize type: {type_def.name}")

    def _read_primitive(self, primitive: PrimitiveType, offset: int) -> Any:
        """Decode a primitive value."""
        if primitive.is_complex:
            real, imag = struct.unpack_from(primitive.struct_format, self._data, offset)
            return complex(real, imag)
        elif primitive is PrimitiveType.STRING:
            start, length = _STRING_HEADER.unpack_from(self._data, offset)
            return self._heap[start : start + length].decode("utf-8", "surrogateescape")
        elif primitive.is_reference:
            handle = _HANDLE.unpack_from(self._data, offset)[0]
            if handle == 0:
                return None
            return self._handles.get(handle, handle)
        return struct.unpack_from(primitive.struct_format, self._data, offset)[0]
