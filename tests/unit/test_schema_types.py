"""
Unit tests for the schema type model.
"""

import pytest

from promptshape.errors import SchemaError
from promptshape.schema.types import (
    INT,
    STRING,
    ArrayType,
    ClassType,
    EnumType,
    EnumValue,
    FieldDef,
    Primitive,
    TypeRegistry,
    iter_named_types,
    type_name,
)


def make_enum(name, *values):
    return EnumType(name, tuple(EnumValue(v) for v in values))


class TestTypeNodes:
    """Test construction of type nodes."""

    def test_unknown_primitive_kind(self):
        """Test that only the four primitive kinds exist."""
        with pytest.raises(SchemaError, match="Unknown primitive kind"):
            Primitive("decimal")

    def test_duplicate_enum_value(self):
        """Test that enum values must be unique."""
        with pytest.raises(SchemaError, match="Duplicate value 'A'"):
            make_enum("Letter", "A", "B", "A")

    def test_duplicate_field(self):
        """Test that class fields must be unique."""
        with pytest.raises(SchemaError, match="Duplicate field 'x'"):
            ClassType("Point", (FieldDef("x", INT), FieldDef("x", INT)))

    def test_enum_lookup(self):
        """Test enum value helpers."""
        letter = make_enum("Letter", "A", "B")

        assert letter.value_names() == ("A", "B")
        assert letter.has_value("B")
        assert not letter.has_value("b")

    def test_class_lookup(self):
        """Test class field helpers."""
        point = ClassType("Point", (FieldDef("x", INT), FieldDef("y", INT, optional=True)))

        assert point.field_names() == ("x", "y")
        assert point.get_field("y").optional is True
        assert point.get_field("z") is None

    def test_nodes_are_immutable(self):
        """Test that nodes cannot be modified after construction."""
        letter = make_enum("Letter", "A")
        with pytest.raises(AttributeError):
            letter.name = "Other"

    def test_type_name(self):
        """Test human-readable type names."""
        letter = make_enum("Letter", "A")

        assert type_name(STRING) == "string"
        assert type_name(letter) == "Letter"
        assert type_name(ArrayType(ArrayType(letter))) == "Letter[][]"


class TestIterNamedTypes:
    """Test traversal of referenced types."""

    def test_visits_fields_in_order(self):
        """Test that nested types are yielded depth first in field order."""
        color = make_enum("Color", "Red")
        size = make_enum("Size", "S")
        inner = ClassType("Inner", (FieldDef("size", size),))
        outer = ClassType("Outer", (FieldDef("colors", ArrayType(color)), FieldDef("inner", inner)))

        names = [t.name for t in iter_named_types(outer)]

        assert names == ["Outer", "Color", "Inner", "Size"]

    def test_shared_types_yielded_once(self):
        """Test that a type referenced twice is yielded once."""
        color = make_enum("Color", "Red")
        pair = ClassType("Pair", (FieldDef("a", color), FieldDef("b", color)))

        assert [t.name for t in iter_named_types(pair)] == ["Pair", "Color"]

    def test_primitive_has_no_named_types(self):
        """Test that primitives reference nothing."""
        assert list(iter_named_types(ArrayType(INT))) == []


class TestTypeRegistry:
    """Test the read-only type registry."""

    def test_of_collects_references(self):
        """Test that TypeRegistry.of registers referenced types too."""
        color = make_enum("Color", "Red")
        shirt = ClassType("Shirt", (FieldDef("color", color),))

        registry = TypeRegistry.of(shirt)

        assert "Color" in registry
        assert len(registry) == 2
        assert registry.enums == (color,)
        assert registry.classes == (shirt,)

    def test_of_rejects_conflicts(self):
        """Test that two different types with one name are rejected."""
        with pytest.raises(SchemaError, match="Conflicting definitions"):
            TypeRegistry.of(make_enum("Color", "Red"), make_enum("Color", "Blue"))

    def test_key_must_match_name(self):
        """Test that registry keys are the type names."""
        with pytest.raises(SchemaError, match="does not match"):
            TypeRegistry(types={"Colour": make_enum("Color", "Red")})

    def test_get_unknown(self):
        """Test that unknown names raise SchemaError."""
        with pytest.raises(SchemaError, match="Unknown type: Ghost"):
            TypeRegistry().get("Ghost")

    def test_types_are_frozen(self):
        """Test that the registry mapping cannot be mutated."""
        registry = TypeRegistry.of(make_enum("Color", "Red"))

        with pytest.raises(TypeError):
            registry.types["Size"] = make_enum("Size", "S")
