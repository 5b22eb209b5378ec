"""
Unit tests for locating and loading JSON-like text.
"""

import pytest

from promptshape.coercion.jsonish import (
    MAX_DEPTH,
    find_segment,
    first_container,
    is_null,
    load_segment,
    nesting_depth,
    normalize_quotes,
    strip_code_fences,
    unquote,
)


class TestStripCodeFences:
    """Test markdown fence removal."""

    def test_fence_with_language(self):
        """Test a fenced block with a language tag."""
        text = 'Here you go:\n```json\n{"a": 1}\n```\nThanks'
        assert strip_code_fences(text) == '{"a": 1}'

    def test_inline_fence(self):
        """Test that a single word is not mistaken for a language tag."""
        assert strip_code_fences("```Positive```") == "Positive"

    def test_unclosed_fence(self):
        """Test truncated output with an unclosed fence."""
        assert strip_code_fences('```json\n{"a": 1') == '{"a": 1'

    def test_no_fence(self):
        """Test that text without fences is unchanged."""
        assert strip_code_fences("plain answer") == "plain answer"


class TestUnquote:
    """Test scalar unquoting."""

    def test_double_quotes_decode_escapes(self):
        """Test JSON escapes in double-quoted strings."""
        assert unquote('"line\\nbreak"') == "line\nbreak"

    def test_single_quotes(self):
        """Test single-quoted strings."""
        assert unquote("'it\\'s'") == "it's"

    def test_unterminated(self):
        """Test a string cut off by truncation."""
        assert unquote('"Jo') == "Jo"

    def test_bare(self):
        """Test that bare text is only stripped."""
        assert unquote("  Jo  ") == "Jo"

    def test_null_tokens(self):
        """Test null-like values."""
        assert is_null("null")
        assert is_null(" None ")
        assert is_null("")
        assert is_null(None)
        assert not is_null('"null"')


class TestFindSegment:
    """Test locating containers."""

    def test_object_in_prose(self):
        """Test an object surrounded by prose with apostrophes."""
        text = "Here's what I found: {\"name\": \"Jo\"} and that's it"
        assert find_segment(text, "{") == '{"name": "Jo"}'

    def test_nested_brackets(self):
        """Test that nested containers stay balanced."""
        text = 'x [[1, 2], [3]] y'
        assert find_segment(text, "[") == "[[1, 2], [3]]"

    def test_brackets_inside_strings(self):
        """Test that brackets in strings are not counted."""
        text = '{"note": "use } carefully", "n": 1}'
        assert find_segment(text, "{") == text

    def test_truncated_container_closed(self):
        """Test that unclosed containers are closed at the end."""
        assert find_segment('{"tags": ["a", "b"', "{") == '{"tags": ["a", "b"]}'

    def test_truncated_string_closed(self):
        """Test that an unterminated string is closed too."""
        assert find_segment('{"name": "Jo', "{") == '{"name": "Jo"}'

    def test_array_inside_object(self):
        """Test that a container nested in another one is found."""
        assert find_segment('{"labels": ["a"]} then [2, 3]', "[") == '["a"]'

    def test_missing(self):
        """Test text without the container."""
        assert find_segment("no brackets here", "[") is None

    def test_first_container(self):
        """Test which container opens first."""
        assert first_container('see {"a": [1]}') == "{"
        assert first_container("none") is None



class TestLoadSegment:
    """Test repairing and loading located containers."""

    def test_loose_object(self):
        """Test unquoted and single-quoted keys with a trailing comma."""
        assert load_segment("{name: 'Jo', \"age\": 5,}") == {"name": "Jo", "age": 5}

    def test_trailing_comma_in_array(self):
        """Test an array with a trailing comma."""
        assert load_segment('["a", "b",]') == ["a", "b"]

    def test_nested_values(self):
        """Test that nested containers load as nested data."""
        assert load_segment('{"a": {"b": [1, 2]}, "c": [3]}') == {"a": {"b": [1, 2]}, "c": [3]}

    def test_smart_quotes(self):
        """Test typographic quotes."""
        assert load_segment("[“a”, “b”]") == ["a", "b"]

    def test_truncated_segment(self):
        """Test a segment closed by find_segment."""
        segment = find_segment('{"tags": ["a", "b"', "{")
        assert load_segment(segment) == {"tags": ["a", "b"]}

    def test_too_deep(self):
        """Test that deeply nested input is refused before loading."""
        segment = "[" * (MAX_DEPTH + 1) + "]" * (MAX_DEPTH + 1)

        with pytest.raises(ValueError, match="levels deep"):
            load_segment(segment)

    def test_at_depth_limit(self):
        """Test that nesting up to the limit still loads."""
        segment = '{"a": ' * (MAX_DEPTH - 1) + "{}" + "}" * (MAX_DEPTH - 1)
        assert isinstance(load_segment(segment), dict)


class TestNestingDepth:
    """Test measuring bracket nesting."""

    def test_depth(self):
        """Test mixed containers."""
        assert nesting_depth('{"a": [1, {"b": []}]}') == 4
        assert nesting_depth("plain") == 0

    def test_brackets_inside_strings(self):
        """Test that brackets in strings do not count."""
        assert nesting_depth('{"note": "[[[[["}') == 1


def test_normalize_quotes():
    """Test typographic quote replacement."""
    assert normalize_quotes("“a” ‘b’") == "\"a\" 'b'"
