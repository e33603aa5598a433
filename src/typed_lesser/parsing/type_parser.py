"""Parser for the type declaration DSL."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import ply.yacc as yacc

from typed_lesser.parsing.type_lexer import TypeLexer
from typed_lesser.types import (
    DISCARD_FIELD,
    AliasTypeDefinition,
    CompositeTypeDefinition,
    FieldDefinition,
    TypeDefinition,
    TypeRegistry,
)

logger = logging.getLogger(__name__)


@dataclass
class TypeRef:
    """Reference to a type, possibly wrapped in arrays or slices.

    Each entry of ``dims`` wraps the type to its left: an int is a fixed
    array length, None is a slice. ``int8[2][]`` is a slice of int8[2].
    """

    name: str
    dims: list[int | None] = field(default_factory=list)


@dataclass
class FieldSpec:
    """Specification for a field before resolution."""

    name: str
    type_ref: TypeRef | None = None  # None means type name matches field name


@dataclass
class TypeSpec:
    """Specification for a composite type before resolution."""

    name: str
    fields: list[FieldSpec]


@dataclass
class AliasSpec:
    """Specification for an alias before resolution."""

    name: str
    base_type_ref: TypeRef


class TypeParser:
    """Parser for the type declaration DSL."""

    tokens = TypeLexer.tokens

    def __init__(self) -> None:
        self.lexer = TypeLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore
        self.registry: TypeRegistry = TypeRegistry()
        self._specs: list[AliasSpec | TypeSpec] = []

    def p_schema(self, p: yacc.YaccProduction) -> None:
        """schema : statement_list"""
        p[0] = p[1]

    def p_schema_empty(self, p: yacc.YaccProduction) -> None:
        """schema :"""
        p[0] = []

    def p_statement_list_single(self, p: yacc.YaccProduction) -> None:
        """statement_list : statement"""
        p[0] = [p[1]]

    def p_statement_list_multiple(self, p: yacc.YaccProduction) -> None:
        """statement_list : statement_list statement"""
        p[0] = p[1]
        p[0].append(p[2])

    def p_statement(self, p: yacc.YaccProduction) -> None:
        """statement : alias_def
                     | type_def"""
        p[0] = p[1]

    def p_alias_def(self, p: yacc.YaccProduction) -> None:
        """alias_def : DEFINE IDENTIFIER AS type_ref"""
        p[0] = AliasSpec(name=p[2], base_type_ref=p[4])

    def p_type_def(self, p: yacc.YaccProduction) -> None:
        """type_def : IDENTIFIER LBRACE field_list RBRACE
                    | IDENTIFIER LBRACE field_list COMMA RBRACE"""
        p[0] = TypeSpec(name=p[1], fields=p[3])

    def p_type_def_empty(self, p: yacc.YaccProduction) -> None:
        """type_def : IDENTIFIER LBRACE RBRACE"""
        p[0] = TypeSpec(name=p[1], fields=[])

    def p_field_list_single(self, p: yacc.YaccProduction) -> None:
        """field_list : field"""
        p[0] = [p[1]]

    def p_field_list_multiple(self, p: yacc.YaccProduction) -> None:
        """field_list : field_list COMMA field"""
        p[0] = p[1] + [p[3]]

    def p_field_with_type(self, p: yacc.YaccProduction) -> None:
        """field : IDENTIFIER COLON type_ref"""
        p[0] = FieldSpec(name=p[1], type_ref=p[3])

    def p_field_implicit_type(self, p: yacc.YaccProduction) -> None:
        """field : IDENTIFIER"""
        p[0] = FieldSpec(name=p[1], type_ref=None)

    def p_type_ref_simple(self, p: yacc.YaccProduction) -> None:
        """type_ref : IDENTIFIER"""
        p[0] = TypeRef(name=p[1])

    def p_type_ref_array(self, p: yacc.YaccProduction) -> None:
        """type_ref : type_ref LBRACKET INTEGER RBRACKET"""
        p[0] = TypeRef(name=p[1].name, dims=p[1].dims + [p[3]])

    def p_type_ref_slice(self, p: yacc.YaccProduction) -> None:
        """type_ref : type_ref LBRACKET RBRACKET"""
        p[0] = TypeRef(name=p[1].name, dims=p[1].dims + [None])

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Syntax error at '{p.value}' (line {p.lineno})")
        else:
            raise SyntaxError("Syntax error at end of input")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, **kwargs)

    def parse(self, data: str) -> TypeRegistry:
        """Parse type declarations and return a populated TypeRegistry."""
        if self.parser is None:
            self.build(debug=False, write_tables=False)

        self.registry = TypeRegistry()
        self.lexer.lexer.lineno = 1

        specs = self.parser.parse(data, lexer=self.lexer.lexer)
        self._specs = specs if specs is not None else []

        self._resolve_specs()
        logger.debug("Resolved %d type declarations", len(self._specs))

        return self.registry

    def _resolve_type_ref(self, type_ref: TypeRef) -> TypeDefinition:
        """Resolve a type reference to a type definition."""
        type_def = self.registry.get_or_raise(type_ref.name)
        for dim in type_ref.dims:
            if dim is None:
                type_def = self.registry.get_slice_type(type_def.name)
            else:
                type_def = self.registry.get_array_type(type_def.name, dim)
        return type_def

    def _resolve_fields(self, spec: TypeSpec) -> list[FieldDefinition]:
        fields: list[FieldDefinition] = []
        seen: set[str] = set()
        for field_spec in spec.fields:
            if field_spec.name != DISCARD_FIELD:
                if field_spec.name in seen:
                    raise ValueError(f"Duplicate field '{field_spec.name}' in type '{spec.name}'")
                seen.add(field_spec.name)
            if field_spec.type_ref is None:
                field_type = self.registry.get_or_raise(field_spec.name)
            else:
                field_type = self._resolve_type_ref(field_spec.type_ref)
            fields.append(FieldDefinition(name=field_spec.name, type_def=field_type))
        return fields

    def _resolve_specs(self) -> None:
        """Resolve all specs into type definitions.

        Declarations may refer to types declared later, so resolution runs in
        passes: each pass registers every spec whose dependencies already
        exist. Composites hold their fields by value, so a cycle can never
        resolve and is reported along with unknown names.
        """
        unresolved: list[AliasSpec | TypeSpec] = list(self._specs)

        while unresolved:
            still_unresolved: list[AliasSpec | TypeSpec] = []

            for spec in unresolved:
                try:
                    if isinstance(spec, AliasSpec):
                        base_type = self._resolve_type_ref(spec.base_type_ref)
                        self.registry.register(
                            AliasTypeDefinition(name=spec.name, base_type=base_type)
                        )
                    else:
                        fields = self._resolve_fields(spec)
                        self.registry.register(
                            CompositeTypeDefinition(name=spec.name, fields=fields)
                        )
                except KeyError:
                    # Dependency not yet resolved
                    still_unresolved.append(spec)

            if len(still_unresolved) == len(unresolved):
                remaining = [s.name for s in still_unresolved]
                raise ValueError(f"Cannot resolve types: {remaining}")
            unresolved = still_unresolved
