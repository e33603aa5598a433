"""Less functions for sorting a TypedSlice by index.

Ordering rules, applied leaf by leaf:

- bool compares false before true
- integers, floats and strings order by <
- NaN compares less than every non-NaN float; two NaNs tie
- complex compares real, then imaginary
- chan, func, map, pointer and unsafe_pointer compare by identity
- composites compare each non-discard field in turn
- arrays compare each element in turn

The element type is flattened once into an ordered list of leaves. Each leaf
becomes a closure that reads its value straight out of the slice's buffer
with a precompiled struct reader and returns -1, 0 or 1. The less function
walks those comparators in order and stops at the first one that is not a
tie. No type inspection happens while comparing.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import Callable, Iterator

from typed_lesser.errors import InvalidArgument, UnsupportedType
from typed_lesser.slice import TypedSlice
from typed_lesser.types import (
    ArrayTypeDefinition,
    CompositeTypeDefinition,
    PrimitiveType,
    PrimitiveTypeDefinition,
    TypeDefinition,
)

logger = logging.getLogger(__name__)

Predicate = Callable[[int, int], bool]
Compare = Callable[[int, int], int]


@dataclass(frozen=True)
class LeafPath:
    """One primitively comparable value inside an element."""

    primitive: PrimitiveType
    offset: int
    path: str


def of(collection: TypedSlice) -> Predicate:
    """Return a less function suitable for sort_slice.

    The returned function reports whether element i sorts strictly before
    element j. It reads the slice's live contents on every call, so it stays
    valid while the slice is sorted in place, cleared and refilled.

    Raises:
        InvalidArgument: If collection is not a TypedSlice.
        UnsupportedType: If the element type contains an interface or slice.
    """
    if not isinstance(collection, TypedSlice):
        raise InvalidArgument(f"slice argument is not a TypedSlice: {type(collection).__name__}")

    leaves = leaf_paths(collection.element_type)
    less = _chain(collection, leaves)
    logger.debug(
        "Built less function for %s with %d leaves", collection.element_type.name, len(leaves)
    )
    return less


Of = of


def leaf_paths(type_def: TypeDefinition) -> list[LeafPath]:
    """Flatten a type into its comparison leaves, highest priority first.

    Raises:
        UnsupportedType: If an interface or slice type is reachable.
    """
    return list(_walk(type_def, 0, ""))


def _walk(type_def: TypeDefinition, offset: int, path: str) -> Iterator[LeafPath]:
    base = type_def.resolve_base_type()
    if isinstance(base, PrimitiveTypeDefinition):
        yield LeafPath(base.primitive, offset, path)
    elif isinstance(base, ArrayTypeDefinition):
        step = base.element_type.size_bytes
        for k in range(base.length):
            yield from _walk(base.element_type, offset + k * step, f"{path}[{k}]")
    elif isinstance(base, CompositeTypeDefinition):
        for f, field_offset in base.layout():
            if f.is_discard:
                continue
            field_path = f"{path}.{f.name}" if path else f.name
            yield from _walk(f.type_def, offset + field_offset, field_path)
    else:
        raise UnsupportedType(type_def.name, base.kind)


def _chain(s: TypedSlice, leaves: list[LeafPath]) -> Predicate:
    """Compile the leaves into one less function.

    Comparators are built from the last leaf back to the first and consulted
    first to last; a tie moves on to the next comparator. The loop keeps the
    stack depth constant however many leaves the element has.
    """
    compares: list[Compare] = []
    for leaf in reversed(leaves):
        compares.extend(reversed(_LEAF_BUILDERS[leaf.primitive](s, leaf.offset, leaf.primitive)))
    compares.reverse()
    if not compares:
        return _never_less
    if len(compares) == 1:
        (compare,) = compares

        def less_one(i: int, j: int) -> bool:
            return compare(i, j) < 0

        return less_one

    chain = tuple(compares)

    def less(i: int, j: int) -> bool:
        for compare in chain:
            c = compare(i, j)
            if c:
                return c < 0
        return False

    return less


def _never_less(i: int, j: int) -> bool:
    return False


def _compare_bool(s: TypedSlice, off: int, primitive: PrimitiveType) -> list[Compare]:
    data, size = s.data, s.element_size
    unpack = struct.Struct(primitive.struct_format).unpack_from

    def compare(i: int, j: int) -> int:
        va = unpack(data, size * i + off)[0]
        vb = unpack(data, size * j + off)[0]
        if va == vb:
            return 0
        return 1 if va else -1

    return [compare]


def _compare_ordered(s: TypedSlice, off: int, primitive: PrimitiveType) -> list[Compare]:
    """Integers and opaque identities: plain numeric <."""
    data, size = s.data, s.element_size
    unpack = struct.Struct(primitive.struct_format).unpack_from

    def compare(i: int, j: int) -> int:
        va = unpack(data, size * i + off)[0]
        vb = unpack(data, size * j + off)[0]
        if va == vb:
            return 0
        return -1 if va < vb else 1

    return [compare]


def _compare_float(s: TypedSlice, off: int, primitive: PrimitiveType) -> list[Compare]:
    data, size = s.data, s.element_size
    unpack = struct.Struct(primitive.struct_format).unpack_from

    def compare(i: int, j: int) -> int:
        va = unpack(data, size * i + off)[0]
        vb = unpack(data, size * j + off)[0]
        if va == vb:
            return 0
        if va != va:
            # two NaNs tie
            return 0 if vb != vb else -1
        if vb != vb or va > vb:
            return 1
        return -1

    return [compare]


def _compare_complex(s: TypedSlice, off: int, primitive: PrimitiveType) -> list[Compare]:
    if primitive is PrimitiveType.COMPLEX64:
        part = PrimitiveType.FLOAT32
    else:
        part = PrimitiveType.FLOAT64
    return _compare_float(s, off, part) + _compare_float(s, off + part.size_bytes, part)


def _compare_string(s: TypedSlice, off: int, primitive: PrimitiveType) -> list[Compare]:
    data, heap, size = s.data, s.heap, s.element_size
    header = struct.Struct(primitive.struct_format).unpack_from

    def compare(i: int, j: int) -> int:
        start, length = header(data, size * i + off)
        va = heap[start : start + length]
        start, length = header(data, size * j + off)
        vb = heap[start : start + length]
        if va == vb:
            return 0
        return -1 if va < vb else 1

    return [compare]


_LEAF_BUILDERS: dict[PrimitiveType, Callable[[TypedSlice, int, PrimitiveType], list[Compare]]] = {
    PrimitiveType.BOOL: _compare_bool,
    PrimitiveType.INT8: _compare_ordered,
    PrimitiveType.INT16: _compare_ordered,
    PrimitiveType.INT32: _compare_ordered,
    PrimitiveType.INT64: _compare_ordered,
    PrimitiveType.UINT8: _compare_ordered,
    PrimitiveType.UINT16: _compare_ordered,
    PrimitiveType.UINT32: _compare_ordered,
    PrimitiveType.UINT64: _compare_ordered,
    PrimitiveType.UINTPTR: _compare_ordered,
    PrimitiveType.FLOAT32: _compare_float,
    PrimitiveType.FLOAT64: _compare_float,
    PrimitiveType.COMPLEX64: _compare_complex,
    PrimitiveType.COMPLEX128: _compare_complex,
    PrimitiveType.STRING: _compare_string,
    PrimitiveType.CHAN: _compare_ordered,
    PrimitiveType.FUNC: _compare_ordered,
    PrimitiveType.MAP: _compare_ordered,
    PrimitiveType.POINTER: _compare_ordered,
    PrimitiveType.UNSAFE_POINTER: _compare_ordered,
}
