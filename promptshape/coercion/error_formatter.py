"""
Error formatter - convert parse failures to user-friendly messages.

This module provides utilities for formatting parse failures in a way that
helps users understand what went wrong and how to fix the prompt or retry.
"""

from typing import Sequence

from promptshape.coercion.result import Failure, ParseErrorKind

_MAX_RAW = 80


def format_failure(failure: Failure) -> str:
    """
    Format a failure with its offending text.

    Args:
        failure: Parse failure

    Returns:
        str: Multi-line description
    """
    lines = [
        f"Parse failure at {failure.location}",
        f"   Problem: {failure.message or failure.kind.value}",
        f"   Kind: {failure.kind.value}",
        f"   Got: {_preview(failure.raw_text)}",
    ]
    return "\n".join(lines)


def format_failures(failures: Sequence[Failure]) -> str:
    """
    Format several failures (e.g. the warnings of a Success) as a numbered list.

    Example:
        ```python
        print(format_failures(result.warnings))
        # 2 element(s) could not be parsed:
        #   1. At [1]: no value of Sentiment found
        #      Got: 'maybe'
        ```
    """
    if not failures:
        return "No parse failures"

    lines = [f"{len(failures)} element(s) could not be parsed:"]
    for i, failure in enumerate(failures, 1):
        lines.append(f"  {i}. At {failure.location}: {failure.message}")
        lines.append(f"     Got: {_preview(failure.raw_text)}")
    return "\n".join(lines)


def suggest_fix(failure: Failure) -> str:
    """
    Suggest how to avoid a parse failure.

    Args:
        failure: Parse failure

    Returns:
        str: Suggested fix
    """
    if failure.kind == ParseErrorKind.MISSING_REQUIRED_FIELD:
        return f"Ask the model to always include '{failure.path}', or mark the field optional"

    elif failure.kind == ParseErrorKind.SKIPPED_VALUE_PRODUCED:
        return "The model chose a value this variant hides; retry, or stop skipping that value"

    elif failure.kind == ParseErrorKind.AMBIGUOUS_MATCH:
        return "Rename the colliding values so their display names differ"

    else:
        return "Check that the prompt includes the rendered output format"


def _preview(text: str) -> str:
    text = text.strip()
    if len(text) > _MAX_RAW:
        text = text[:_MAX_RAW - 3] + "..."
    return repr(text)
