"""
Unit tests for prompt rendering.
"""

import pytest

from promptshape.coercion import EnumMember
from promptshape.overrides import OverrideEntry, compile_profile
from promptshape.render import render, render_shape, render_value
from promptshape.schema.types import INT, ArrayType, ClassType, EnumType, EnumValue, FieldDef, TypeRegistry


class TestRenderEnum:
    """Test rendering enums in values mode."""

    def test_default_profile(self, sentiment, default_profile):
        """Test one canonical name per line."""
        assert render(sentiment, default_profile) == "Positive\nNegative\nNeutral"

    def test_without_profile(self, sentiment):
        """Test that no profile means canonical names."""
        assert render(sentiment) == "Positive\nNegative\nNeutral"

    def test_rename_description_and_skip(self, sentiment, cheerful_profile):
        """Test renamed, described and skipped values."""
        text = render(sentiment, cheerful_profile)

        assert text == "Good: Upbeat tone\nBad"
        assert "Neutral" not in text

    def test_deterministic(self, sentiment, cheerful_profile):
        """Test that rendering twice gives identical text."""
        assert render(sentiment, cheerful_profile) == render(sentiment, cheerful_profile)


class TestRenderShape:
    """Test rendering classes, arrays and nested enums."""

    def test_class_default(self, person, default_profile):
        """Test a class with canonical field names."""
        assert render(person, default_profile) == '{ "name": string, "age": int }'

    def test_described_field(self, person, cheerful_profile):
        """Test that a description replaces the field's type."""
        assert render(person, cheerful_profile) == '{ "name": string, "years": age in whole years }'

    def test_nested_class(self, review, default_profile):
        """Test nested classes, enums, arrays and optional fields."""
        expected = (
            '{ "author": { "name": string, "age": int }, "sentiment": string, "score": float, '
            '"tags": string[], "colors": string[] | null, "recommended": bool | null }'
        )
        assert render(review, default_profile) == expected

    def test_inline_enums(self, review, cheerful_profile):
        """Test enum alternatives inside a shape."""
        text = render(review, cheerful_profile, inline_enums=True)

        assert '"sentiment": "Good" | "Bad",' in text
        assert '"colors": ("Red" | "Green" | "Blue")[] | null' in text
        assert "Neutral" not in text

    def test_array_of_classes(self, person, cheerful_profile):
        """Test one [] per array level."""
        node = ArrayType(ArrayType(person))

        assert render(node, cheerful_profile) == '{ "name": string, "years": age in whole years }[][]'

    def test_array_of_enum(self, sentiment):
        """Test that a top-level enum array lists its alternatives."""
        assert render(ArrayType(sentiment)) == '("Positive" | "Negative" | "Neutral")[]'
        assert render(ArrayType(ArrayType(sentiment))) == '("Positive" | "Negative" | "Neutral")[][]'
        assert render_shape(ArrayType(sentiment)) == "string[]"

    def test_array_of_enum_with_profile(self, sentiment, cheerful_profile):
        """Test that skipped values stay out of a top-level enum array."""
        assert render(ArrayType(sentiment), cheerful_profile) == '("Good" | "Bad")[]'

    def test_single_value_enum_not_parenthesized(self):
        """Test that one alternative needs no parentheses."""
        only = EnumType("Only", (EnumValue("One"),))

        assert render_shape(ArrayType(only), inline_enums=True) == '"One"[]'

    def test_empty_class(self):
        """Test a class without fields."""
        assert render(ClassType("Empty", ())) == "{}"

    def test_primitive(self):
        """Test a bare primitive."""
        assert render(INT) == "int"
        assert render(ArrayType(INT)) == "int[]"

    def test_quotes_escaped(self):
        """Test that display names are emitted as JSON strings."""
        point = ClassType("Point", (FieldDef("x", INT),))
        profile = compile_profile(
            TypeRegistry.of(point),
            {"Point": [OverrideEntry("x", rename='the "x"')]},
        )

        assert render(point, profile) == '{ "the \\"x\\"": int }'


class TestRenderValue:
    """Test rendering single enum values."""

    def test_renamed(self, sentiment, cheerful_profile):
        """Test the display form of a renamed value."""
        assert render_value(sentiment, "Positive", cheerful_profile) == "Good"
        assert render_value(sentiment, EnumMember("Sentiment", "Negative"), cheerful_profile) == "Bad"

    def test_skipped_value(self, sentiment, cheerful_profile):
        """Test that skipped values have no display form."""
        with pytest.raises(ValueError, match="skipped in variant 'cheerful'"):
            render_value(sentiment, "Neutral", cheerful_profile)

    def test_unknown_value(self, sentiment):
        """Test an undeclared value."""
        with pytest.raises(ValueError, match="has no value 'Maybe'"):
            render_value(sentiment, "Maybe")
