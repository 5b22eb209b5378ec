"""
Locating and loading JSON-like text.

LLM output is rarely clean JSON: it arrives wrapped in prose or markdown
fences, with unquoted or single-quoted keys, trailing commas, smart quotes, or
cut off before the closing bracket. These helpers find the container the
caller expects and hand it to `json_repair`, which turns it into plain Python
data. The coercion engine then coerces that data against the expected type.

Functions:
    - normalize_quotes: Replace typographic quotes with ASCII ones
    - strip_code_fences: Return the body of the first markdown code fence
    - first_container: Which bracket ("{" or "[") opens first
    - find_segment: First balanced container starting with a given bracket
    - nesting_depth: Deepest bracket nesting of a segment
    - load_segment: Repair and load a segment with json_repair
    - unquote: Strip one level of quoting from a scalar
    - is_null: Whether a raw value stands for "no value"
"""

import json
import re
from typing import Any, Optional, Tuple

from json_repair import repair_json

# Deeper containers are refused before loading, so that hostile input cannot
# exhaust the interpreter stack
MAX_DEPTH = 64

_SMART_QUOTES = str.maketrans({
    "“": '"', "”": '"', "„": '"', "‟": '"',
    "‘": "'", "’": "'", "‚": "'", "‛": "'",
})

# A language tag only counts when it is followed by a newline, so that
# ```Positive``` keeps "Positive" as the body
_FENCE_RE = re.compile(r"```(?:[ \t]*[\w+-]+[ \t]*\n|[ \t]*\n?)(.*?)```", re.DOTALL)

_OPENERS = {"{": "}", "[": "]"}
_CLOSERS = "}]"
_NULL_TOKENS = ("null", "none", "undefined", "nil", "")


def normalize_quotes(text: str) -> str:
    return text.translate(_SMART_QUOTES)


def strip_code_fences(text: str) -> str:
    """
    Return the body of the first markdown code fence, or `text` unchanged.

    A fence that is opened but never closed (truncated output) loses its
    opening line only.
    """
    match = _FENCE_RE.search(text)
    if match is not None:
        return match.group(1).strip()

    stripped = text.lstrip()
    if stripped.startswith("```"):
        newline = stripped.find("\n")
        return stripped[newline + 1:].strip() if newline != -1 else stripped[3:].strip()
    return text


def unquote(text: str) -> str:
    """
    Strip surrounding whitespace and one level of matching quotes.

    Double-quoted text is decoded as a JSON string literal when possible, so
    escapes such as \\n and \\" are resolved.
    """
    s = text.strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in "\"'":
        if s[0] == '"':
            try:
                value = json.loads(s)
                if isinstance(value, str):
                    return value
            except ValueError:
                pass
        return s[1:-1].replace("\\" + s[0], s[0])
    if s[:1] in ("\"", "'") and s.count(s[0]) == 1:
        # Unterminated literal from truncated output
        return s[1:].strip()
    return s


def is_null(value: Any) -> bool:
    """Whether a loaded or raw value stands for "no value" (null, None, empty)."""
    if value is None:
        return True
    return isinstance(value, str) and value.strip().lower() in _NULL_TOKENS


def first_container(text: str) -> Optional[str]:
    for ch in text:
        if ch in _OPENERS:
            return ch
    return None


def find_segment(text: str, opener: str) -> Optional[str]:
    """
    Find the first container opened by `opener` and return it balanced.

    Quotes are only treated as string delimiters inside containers, because
    prose before the JSON is full of apostrophes. Containers that are never
    closed are closed at the end of the text.

    Args:
        text: Text to search
        opener: "{" or "["

    Returns:
        The container text including its brackets, or None if there is none
    """
    depth = 0
    i = 0
    n = len(text)
    while i < n:
        if depth > 0 and _opens_string(text, i):
            i, _ = _string_end(text, i)
            continue
        ch = text[i]
        if ch == opener:
            end, missing = _container_end(text, i)
            return text[i:end] + missing
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS and depth > 0:
            depth -= 1
        i += 1
    return None


def nesting_depth(segment: str) -> int:
    """Deepest bracket nesting of `segment`, ignoring brackets inside strings."""
    depth = deepest = 0
    i = 0
    n = len(segment)
    while i < n:
        if depth > 0 and _opens_string(segment, i):
            i, _ = _string_end(segment, i)
            continue
        ch = segment[i]
        if ch in _OPENERS:
            depth += 1
            deepest = max(deepest, depth)
        elif ch in _CLOSERS and depth > 0:
            depth -= 1
        i += 1
    return deepest


def load_segment(segment: str) -> Any:
    """
    Repair and load a container located by find_segment.

    Args:
        segment: "{...}" or "[...]" text

    Returns:
        The loaded dict, list or scalar (json_repair returns "" when nothing
        can be recovered)

    Raises:
        ValueError: If the segment nests deeper than MAX_DEPTH
    """
    depth = nesting_depth(segment)
    if depth > MAX_DEPTH:
        raise ValueError(f"nested {depth} levels deep (limit {MAX_DEPTH})")
    return repair_json(normalize_quotes(segment), return_objects=True)


def _opens_string(text: str, i: int) -> bool:
    ch = text[i]
    if ch == '"':
        return True
    if ch != "'":
        return False
    # A single quote only opens a string where a key or value can start;
    # elsewhere it is an apostrophe
    j = i - 1
    while j >= 0 and text[j].isspace():
        j -= 1
    return j < 0 or text[j] in "{[,:"


def _string_end(text: str, i: int) -> Tuple[int, bool]:
    """Index just past the string literal opened at `i`, and whether it was closed."""
    quote = text[i]
    j = i + 1
    n = len(text)
    while j < n:
        ch = text[j]
        if ch == "\\":
            j += 2
            continue
        if ch == quote:
            return j + 1, True
        j += 1
    return n, False


def _container_end(text: str, i: int) -> Tuple[int, str]:
    """
    Index just past the container opened at `i`, plus the text needed to
    close it when the input ends first.
    """
    stack = []
    j = i
    n = len(text)
    while j < n:
        if stack and _opens_string(text, j):
            quote = text[j]
            j, closed = _string_end(text, j)
            if not closed:
                return n, quote + "".join(reversed(stack))
            continue
        ch = text[j]
        if ch in _OPENERS:
            stack.append(_OPENERS[ch])
        elif ch in _CLOSERS:
            # Mismatched closers still close the innermost container
            if stack:
                stack.pop()
            if not stack:
                return j + 1, ""
        j += 1
    return n, "".join(reversed(stack))
