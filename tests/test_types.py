"""Tests for the type system."""

import pytest

from typed_lesser.types import (
    AliasTypeDefinition,
    ArrayTypeDefinition,
    CompositeTypeDefinition,
    FieldDefinition,
    InterfaceTypeDefinition,
    PrimitiveType,
    PrimitiveTypeDefinition,
    SliceTypeDefinition,
    TypeRegistry,
)


class TestPrimitiveType:
    """Tests for PrimitiveType enum."""

    def test_size_bytes(self):
        """Test size_bytes for all primitive types."""
        assert PrimitiveType.BOOL.size_bytes == 1
        assert PrimitiveType.INT8.size_bytes == 1
        assert PrimitiveType.UINT8.size_bytes == 1
        assert PrimitiveType.INT16.size_bytes == 2
        assert PrimitiveType.UINT16.size_bytes == 2
        assert PrimitiveType.INT32.size_bytes == 4
        assert PrimitiveType.UINT32.size_bytes == 4
        assert PrimitiveType.INT64.size_bytes == 8
        assert PrimitiveType.UINT64.size_bytes == 8
        assert PrimitiveType.UINTPTR.size_bytes == 8
        assert PrimitiveType.FLOAT32.size_bytes == 4
        assert PrimitiveType.FLOAT64.size_bytes == 8
        assert PrimitiveType.COMPLEX64.size_bytes == 8
        assert PrimitiveType.COMPLEX128.size_bytes == 16
        assert PrimitiveType.STRING.size_bytes == 8
        assert PrimitiveType.POINTER.size_bytes == 8

    def test_alignment(self):
        """Test complex and string alignment follows their components."""
        assert PrimitiveType.COMPLEX64.alignment == 4
        assert PrimitiveType.COMPLEX128.alignment == 8
        assert PrimitiveType.STRING.alignment == 4
        assert PrimitiveType.INT16.alignment == 2

    def test_categories(self):
        """Test kind predicates."""
        assert PrimitiveType.UINTPTR.is_integer
        assert not PrimitiveType.UINTPTR.is_reference
        assert PrimitiveType.MAP.is_reference
        assert PrimitiveType.FLOAT32.is_float
        assert PrimitiveType.COMPLEX128.is_complex
        assert not PrimitiveType.BOOL.is_integer


class TestAliasTypeDefinition:
    """Tests for AliasTypeDefinition."""

    def test_chained_aliases(self):
        """Test alias pointing to another alias."""
        base = PrimitiveTypeDefinition(name="int64", primitive=PrimitiveType.INT64)
        alias1 = AliasTypeDefinition(name="id", base_type=base)
        alias2 = AliasTypeDefinition(name="user_id", base_type=alias1)

        assert alias2.size_bytes == 8
        assert alias2.alignment == 8
        assert alias2.kind == "int64"
        assert alias2.resolve_base_type() is base


class TestArrayTypeDefinition:
    """Tests for fixed-size arrays."""

    def test_array_of_primitive(self):
        """Test array of primitive type."""
        element = PrimitiveTypeDefinition(name="int16", primitive=PrimitiveType.INT16)
        array = ArrayTypeDefinition(name="int16[3]", element_type=element, length=3)

        assert array.size_bytes == 6
        assert array.alignment == 2
        assert array.is_array is True
        assert array.kind == "array"

    def test_zero_length(self):
        """Test an empty array takes no space."""
        element = PrimitiveTypeDefinition(name="int64", primitive=PrimitiveType.INT64)
        assert ArrayTypeDefinition(name="int64[0]", element_type=element, length=0).size_bytes == 0


class TestCompositeTypeDefinition:
    """Tests for CompositeTypeDefinition layout."""

    def test_padding(self):
        """Test fields are aligned and the record is padded to its alignment."""
        registry = TypeRegistry()
        composite = CompositeTypeDefinition(
            name="Padded",
            fields=[
                FieldDefinition(name="a", type_def=registry.get("uint8")),
                FieldDefinition(name="b", type_def=registry.get("int32")),
                FieldDefinition(name="c", type_def=registry.get("uint8")),
            ],
        )

        assert [offset for _, offset in composite.layout()] == [0, 4, 8]
        assert composite.alignment == 4
        assert composite.size_bytes == 12

    def test_string_then_int64(self):
        """Test a string header followed by an 8-byte integer."""
        registry = TypeRegistry()
        composite = CompositeTypeDefinition(
            name="TStringInt",
            fields=[
                FieldDefinition(name="S", type_def=registry.get("string")),
                FieldDefinition(name="I", type_def=registry.get("int")),
            ],
        )

        assert composite.get_field_offset("S") == 0
        assert composite.get_field_offset("I") == 8
        assert composite.size_bytes == 16

    def test_get_field(self):
        """Test getting a field by name."""
        registry = TypeRegistry()
        composite = CompositeTypeDefinition(
            name="Point",
            fields=[FieldDefinition(name="x", type_def=registry.get("int32"))],
        )

        assert composite.get_field("x").name == "x"
        assert composite.get_field("y") is None
        with pytest.raises(KeyError):
            composite.get_field_offset("y")

    def test_discard_field(self):
        """Test the placeholder field name."""
        registry = TypeRegistry()
        assert FieldDefinition(name="_", type_def=registry.get("int8")).is_discard
        assert not FieldDefinition(name="_x", type_def=registry.get("int8")).is_discard

    def test_empty(self):
        """Test a record without fields."""
        composite = CompositeTypeDefinition(name="Empty")
        assert composite.size_bytes == 0
        assert composite.alignment == 1


class TestTypeRegistry:
    """Tests for TypeRegistry."""

    def test_builtins(self):
        """Test primitives, platform aliases and the open type are registered."""
        registry = TypeRegistry()

        for pt in PrimitiveType:
            assert pt.value in registry
        assert registry.get("int").resolve_base_type().name == "int64"
        assert registry.get("uint").resolve_base_type().name == "uint64"
        assert registry.get("byte").resolve_base_type().name == "uint8"
        assert isinstance(registry.get("any"), InterfaceTypeDefinition)

    def test_register_duplicate(self):
        """Test registering a name twice fails."""
        registry = TypeRegistry()
        with pytest.raises(ValueError):
            registry.register(CompositeTypeDefinition(name="int32"))

    def test_get_or_raise(self):
        """Test unknown names raise KeyError."""
        with pytest.raises(KeyError):
            TypeRegistry().get_or_raise("nope")

    def test_array_and_slice_types_are_cached(self):
        """Test derived types are created once and reused."""
        registry = TypeRegistry()
        array = registry.get_array_type("int8", 4)
        assert registry.get_array_type("int8", 4) is array
        assert array.name == "int8[4]"

        slice_type = registry.get_slice_type("string")
        assert registry.get_slice_type("string") is slice_type
        assert isinstance(slice_type, SliceTypeDefinition)
        assert slice_type.is_slice

    def test_negative_array_length(self):
        """Test negative array lengths are rejected."""
        with pytest.raises(ValueError):
            TypeRegistry().get_array_type("int8", -1)
