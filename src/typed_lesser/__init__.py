"""Typed Lesser - less functions for sorting runtime-typed collections."""

from typed_lesser.errors import InvalidArgument, LesserError, UnsupportedType
from typed_lesser.lesser import LeafPath, Of, Predicate, leaf_paths, of
from typed_lesser.parsing import TypeParser
from typed_lesser.schema import Schema
from typed_lesser.slice import TypedSlice
from typed_lesser.sort import slice_is_sorted, sort_slice, sort_slice_stable
from typed_lesser.types import (
    DISCARD_FIELD,
    AliasTypeDefinition,
    ArrayTypeDefinition,
    CompositeTypeDefinition,
    FieldDefinition,
    InterfaceTypeDefinition,
    PrimitiveType,
    PrimitiveTypeDefinition,
    SliceTypeDefinition,
    TypeDefinition,
    TypeRegistry,
)

__all__ = [
    # Main API
    "of",
    "Of",
    "Predicate",
    "leaf_paths",
    "LeafPath",
    "Schema",
    "TypeParser",
    "TypedSlice",
    # Sorting
    "sort_slice",
    "sort_slice_stable",
    "slice_is_sorted",
    # Errors
    "LesserError",
    "InvalidArgument",
    "UnsupportedType",
    # Type definitions
    "DISCARD_FIELD",
    "TypeDefinition",
    "PrimitiveType",
    "PrimitiveTypeDefinition",
    "AliasTypeDefinition",
    "ArrayTypeDefinition",
    "SliceTypeDefinition",
    "InterfaceTypeDefinition",
    "CompositeTypeDefinition",
    "FieldDefinition",
    "TypeRegistry",
]

__version__ = "0.1.0"
