"""
Forgiving parser (coercion engine).

This module turns raw LLM completions into typed values, using the same type
and override profile the prompt was rendered with.

Components:
    - coercer: parse() and the Coercer doing layered recovery per type kind
    - jsonish: Locating JSON-like text and loading it with json_repair
    - result: Success/Failure results and typed values
    - error_formatter: Human-readable failure messages

Parse Flow:
    1. Strip markdown code fences
    2. Locate the expected structure ({...} for classes, [...] for arrays)
    3. Split it into raw keys/elements, tolerating common JSON mistakes
    4. Coerce each raw piece against its type, recursively
    5. Return Success (with recovered element failures as warnings) or Failure

Example:
    ```python
    from promptshape.coercion import parse

    result = parse("positive", sentiment, profile)
    if result.is_success:
        print(result.value.name)  # "Positive"
    ```
"""

from promptshape.coercion.result import (
    ABSENT,
    ClassInstance,
    EnumMember,
    Failure,
    ParseErrorKind,
    ParseResult,
    Success,
    TypedValue,
    to_python,
)
from promptshape.coercion.coercer import DEFAULT_OPTIONS, Coercer, ParseOptions, parse
from promptshape.coercion.error_formatter import format_failure, format_failures, suggest_fix

__all__ = [
    "ABSENT",
    "ClassInstance",
    "EnumMember",
    "Failure",
    "ParseErrorKind",
    "ParseResult",
    "Success",
    "TypedValue",
    "to_python",
    "DEFAULT_OPTIONS",
    "Coercer",
    "ParseOptions",
    "parse",
    "format_failure",
    "format_failures",
    "suggest_fix",
]
