"""Parsing module for the type declaration DSL."""

from typed_lesser.parsing.type_parser import TypeParser

__all__ = [
    "TypeParser",
]
