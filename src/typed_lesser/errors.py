"""Exceptions raised while building comparators."""

from __future__ import annotations


class LesserError(Exception):
    """Base class for typed_lesser errors."""


class InvalidArgument(LesserError, TypeError):
    """The argument is not a collection that can be ordered by index."""


class UnsupportedType(LesserError, TypeError):
    """A type reachable from the element type has no defined ordering."""

    def __init__(self, type_name: str, kind: str) -> None:
        super().__init__(f"un-sortable type {type_name} (kind {kind})")
        self.type_name = type_name
        self.kind = kind
