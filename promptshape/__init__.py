"""
promptshape: Typed prompt schemas with a forgiving output parser

promptshape renders declared output types into prompt text and parses the
model's free-form answer back into typed values, using one override profile
(renames, descriptions, skipped enum values) for both directions so that
renamed and hidden members round-trip correctly.

Key Features:
    - Immutable schema model (primitives, enums, classes, arrays)
    - Per-variant overrides compiled and validated once, at schema-load time
    - Deterministic prompt rendering
    - Tolerant parsing: fenced, unquoted, trailing-comma or truncated JSON,
      case-insensitive and in-sentence enum matches, scalar-to-list coercion
    - Structured failures with the offending text and field path

Quick Start:
    ```python
    from promptshape import PromptSchema

    schema = PromptSchema.from_documents(
        {"enums": {"Sentiment": ["Positive", "Negative", "Neutral"]}},
        {"cheerful": {"Sentiment": {"Positive": "Good", "Neutral": {"skip": True}}}},
    )

    print(schema.render("Sentiment", variant="cheerful"))
    # Good
    # Negative

    result = schema.parse("The review is good!", "Sentiment", variant="cheerful")
    print(result.value.name)  # Positive
    ```

Architecture:
    1. Schema: Type declarations -> immutable TypeRegistry
    2. Overrides: Variant declarations -> compiled, cached OverrideProfile
    3. Render: (type, profile) -> prompt text
    4. Coercion: (completion, type, profile) -> Success or Failure
"""

__version__ = "0.1.0"

from promptshape.api import PromptSchema  # noqa: F401
from promptshape.coercion import ParseOptions, parse  # noqa: F401
from promptshape.errors import ProfileError, PromptShapeError, SchemaError  # noqa: F401
from promptshape.overrides import OverrideProfile, ProfileResolver, compile_profile  # noqa: F401
from promptshape.render import render, render_value  # noqa: F401

__all__ = [
    "PromptSchema",
    "ParseOptions",
    "parse",
    "ProfileError",
    "PromptShapeError",
    "SchemaError",
    "OverrideProfile",
    "ProfileResolver",
    "compile_profile",
    "render",
    "render_value",
]
