"""
Forgiving parser - coerce raw LLM output into typed values.

The parser inverts the stringifier: it receives the raw completion text plus
the same type and override profile that produced the prompt, and recovers a
typed value. Every kind goes through layered recovery and stops at the first
layer that succeeds:

    1. exact match          ("Positive")
    2. normalized match     ("  POSITIVE. ")
    3. contains/token match ("The sentiment is positive overall")
    4. structural recovery  (fenced, unquoted, trailing-comma, truncated JSON)
    5. failure              (a Failure result, never an exception)

Containers are located in the raw text and loaded with json_repair; the
loaded values (or the raw text, for scalars) are then coerced recursively.
Display names are matched through the profile, so renamed fields and values
resolve back to their canonical names and skipped enum values are refused.

Usage:
    ```python
    from promptshape.coercion import parse

    result = parse('{name: "Jo", age: 5,}', person, profile)
    if result.is_success:
        print(result.value["age"])  # 5
    else:
        print(result.kind, result.path)
    ```
"""

import json
import logging
import math
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from promptshape.coercion.jsonish import (
    find_segment,
    first_container,
    is_null,
    load_segment,
    normalize_quotes,
    strip_code_fences,
    unquote,
)
from promptshape.coercion.result import (
    ABSENT,
    ClassInstance,
    EnumMember,
    Failure,
    ParseErrorKind,
    ParseResult,
    Success,
)
from promptshape.overrides.types import EnumChoice, OverrideProfile, normalize_name
from promptshape.schema.types import ArrayType, ClassType, EnumType, Primitive, TypeNode

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"[-+]?(?:(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?|\.\d+)(?:[eE][-+]?\d+)?")
_BOOLEANS = {"true": True, "yes": True, "1": True, "false": False, "no": False, "0": False}
# Wrapping that models put around a bare answer: quotes, markdown emphasis,
# code ticks and sentence punctuation
_WRAPPING = " \t\r\n\"'`*_.,;:!?()"


@dataclass(frozen=True)
class ParseOptions:
    """
    Parser configuration.

    Attributes:
        allow_substring_match: Accept an enum display name found as a whole
            word inside longer text
        allow_singleton_array: Wrap a lone element as a one-element array when
            no array brackets are present
        allow_partial_arrays: Keep the parseable elements of an array and
            report the others as warnings, instead of failing outright
        strip_code_fences: Parse the body of a markdown code fence
    """

    allow_substring_match: bool = True
    allow_singleton_array: bool = True
    allow_partial_arrays: bool = True
    strip_code_fences: bool = True


DEFAULT_OPTIONS = ParseOptions()


def parse(
    raw_text: str,
    node: TypeNode,
    profile: Optional[OverrideProfile] = None,
    options: Optional[ParseOptions] = None,
    path: str = "",
) -> ParseResult:
    """
    Parse raw model output as a value of `node`.

    Args:
        raw_text: Completion text exactly as returned by the model
        node: Expected type
        profile: Override profile the prompt was rendered with (default: none)
        options: Parser configuration (default: ParseOptions())
        path: Name of the root value, used as the prefix of failure paths

    Returns:
        ParseResult: Success with the typed value, or a Failure

    Example:
        ```python
        result = parse("I'd say POSITIVE.", sentiment, profile)
        assert result.value == EnumMember("Sentiment", "Positive")
        ```
    """
    coercer = Coercer(profile or OverrideProfile.empty(), options or DEFAULT_OPTIONS)
    text = raw_text if isinstance(raw_text, str) else ""
    if coercer.options.strip_code_fences:
        text = strip_code_fences(text)
    return coercer.coerce(text, node, path)


class Coercer:
    """
    Recursive coercion of text or loaded JSON values against a type under one
    profile.

    Holds no mutable state, so a single instance may be shared across threads.

    Attributes:
        profile: Override profile used to map display names
        options: Parser configuration
    """

    def __init__(self, profile: OverrideProfile, options: ParseOptions = DEFAULT_OPTIONS):
        self.profile = profile
        self.options = options

    def coerce(self, value: Any, node: TypeNode, path: str = "") -> ParseResult:
        """
        Dispatch on the kind of `node`.

        `value` is raw text at the top level and a loaded JSON value (dict,
        list, str, number, bool or None) below it.
        """
        if isinstance(node, Primitive):
            return self.coerce_primitive(value, node, path)
        if isinstance(node, EnumType):
            return self.coerce_enum(value, node, path)
        if isinstance(node, ArrayType):
            return self.coerce_array(value, node, path)
        if isinstance(node, ClassType):
            return self.coerce_class(value, node, path)
        raise TypeError(f"Not a schema type: {node!r}")

    # ---------------- primitives ----------------

    def coerce_primitive(self, value: Any, node: Primitive, path: str) -> ParseResult:
        if node.kind == "string":
            if isinstance(value, str):
                return Success(unquote(value))
            if value is None or isinstance(value, (dict, list)):
                return _failure(ParseErrorKind.UNPARSABLE_STRUCTURE, value, path, "expected a string")
            return Success(_as_text(value))

        if node.kind == "bool":
            if isinstance(value, bool):
                return Success(value)
            token = _as_text(value).strip(_WRAPPING).lower()
            if token in _BOOLEANS:
                return Success(_BOOLEANS[token])
            return _failure(ParseErrorKind.UNPARSABLE_STRUCTURE, value, path, "expected a boolean")

        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            return _failure(ParseErrorKind.UNPARSABLE_STRUCTURE, value, path, f"expected {node.kind}")

        if isinstance(value, (int, float)):
            number = float(value)
            digits = str(value) if isinstance(value, int) else None
        else:
            match = _NUMBER_RE.search(value)
            if match is None:
                return _failure(ParseErrorKind.UNPARSABLE_STRUCTURE, value, path, f"expected {node.kind}, found no number")
            digits = match.group().replace(",", "")
            number = float(digits)

        if not math.isfinite(number):
            return _failure(ParseErrorKind.UNPARSABLE_STRUCTURE, value, path, f"number out of range: {value}")
        if node.kind == "float":
            return Success(number)
        if digits is not None and re.fullmatch(r"[-+]?\d+", digits):
            return Success(int(digits))
        return Success(int(round(number)))

    # ---------------- enums ----------------

    def coerce_enum(self, value: Any, node: EnumType, path: str) -> ParseResult:
        candidate = value
        # A single-key object stands for its value: {"sentiment": "Positive"}.
        # Each round either descends one level or stops, and loaded containers
        # are at most MAX_DEPTH deep, so this terminates
        while True:
            if isinstance(candidate, dict) and len(candidate) == 1:
                candidate = next(iter(candidate.values()))
                continue
            if isinstance(candidate, str) and unquote(candidate).startswith("{"):
                segment = find_segment(normalize_quotes(unquote(candidate)), "{")
                try:
                    loaded = load_segment(segment) if segment else None
                except ValueError as e:
                    return _failure(ParseErrorKind.UNPARSABLE_STRUCTURE, value, path, str(e))
                if isinstance(loaded, dict) and len(loaded) == 1:
                    candidate = loaded
                    continue
            break

        text = unquote(candidate) if isinstance(candidate, str) else _as_text(candidate)
        choices = self.profile.enum_choices(node)
        normalized = normalize_name(text)

        keys = []
        for key in (normalized, normalize_name(text.strip(_WRAPPING))):
            if key and key not in keys:
                keys.append(key)

        for key in keys:
            matches = self._exact_matches(node, choices, key)
            if len(matches) > 1:
                return _failure(
                    ParseErrorKind.AMBIGUOUS_MATCH,
                    value,
                    path,
                    f"'{text}' matches {', '.join(c.name for c in matches)} of {node.name}",
                )
            if matches:
                if matches[0].skip:
                    return self._skipped(value, node, matches[0], path)
                return Success(EnumMember(node.name, matches[0].name))

        skipped: List[EnumChoice] = []
        if self.options.allow_substring_match and normalized:
            for choice in choices:
                pattern = r"(?<!\w)" + re.escape(normalize_name(choice.display)) + r"(?!\w)"
                if re.search(pattern, normalized) is None:
                    continue
                if not choice.skip:
                    logger.debug(f"{node.name}: '{choice.display}' found inside '{text[:60]}'")
                    return Success(EnumMember(node.name, choice.name))
                skipped.append(choice)

        if skipped:
            return self._skipped(value, node, skipped[0], path)
        return _failure(ParseErrorKind.UNPARSABLE_STRUCTURE, value, path, f"no value of {node.name} found")

    def _exact_matches(self, node: EnumType, choices, key: str) -> List[EnumChoice]:
        # Compiled profiles carry a reverse index that is unique by construction
        canonical = self.profile.canonical_for(node.name, key)
        if canonical is not None:
            return [c for c in choices if c.name == canonical]
        if self.profile.table(node.name) is not None:
            return []
        return [c for c in choices if normalize_name(c.display) == key]

    def _skipped(self, value: Any, node: EnumType, choice: EnumChoice, path: str) -> Failure:
        return _failure(
            ParseErrorKind.SKIPPED_VALUE_PRODUCED,
            value,
            path,
            f"'{choice.display}' is not an accepted value of {node.name} in variant {self.profile.variant}",
        )

    # ---------------- arrays ----------------

    def coerce_array(self, value: Any, node: ArrayType, path: str) -> ParseResult:
        if isinstance(value, list):
            return self._coerce_items(value, node, path)
        if not isinstance(value, str):
            return self._singleton(value, node, path)

        stripped = value.strip()
        if not stripped:
            return _failure(ParseErrorKind.UNPARSABLE_STRUCTURE, value, path, "empty output")

        normalized = normalize_quotes(stripped)
        singleton_failure = None
        # An object where a list of objects is expected is most likely one
        # element; only if it is not, look for an array inside it
        if isinstance(node.element, ClassType) and first_container(normalized) == "{":
            result = self._singleton(stripped, node, path)
            if result.is_success:
                return result
            singleton_failure = result

        segment = find_segment(normalized, "[")
        if segment is not None:
            try:
                loaded = load_segment(segment)
            except ValueError as e:
                return _failure(ParseErrorKind.UNPARSABLE_STRUCTURE, segment, path, str(e))
            if isinstance(loaded, list):
                return self._coerce_items(loaded, node, path)

        if singleton_failure is not None:
            return singleton_failure
        return self._singleton(stripped, node, path)

    def _singleton(self, value: Any, node: ArrayType, path: str) -> ParseResult:
        if self.options.allow_singleton_array:
            result = self.coerce(value, node.element, f"{path}[0]")
            if result.is_success:
                return Success((result.value,), result.warnings)
        return _failure(ParseErrorKind.UNPARSABLE_STRUCTURE, value, path, "no array found")

    def _coerce_items(self, items: list, node: ArrayType, path: str) -> ParseResult:
        values = []
        warnings: List[Failure] = []

        for index, item in enumerate(items):
            result = self.coerce(item, node.element, f"{path}[{index}]")
            if result.is_success:
                values.append(result.value)
                warnings.extend(result.warnings)
                continue
            if not self.options.allow_partial_arrays:
                return result
            logger.debug(f"Dropping array element {result.location}: {result.message}")
            warnings.append(result)

        if items and not values:
            return _failure(
                ParseErrorKind.UNPARSABLE_STRUCTURE,
                items,
                path,
                f"none of the {len(items)} elements could be parsed",
            )
        return Success(tuple(values), tuple(warnings))

    # ---------------- classes ----------------

    def coerce_class(self, value: Any, node: ClassType, path: str) -> ParseResult:
        raw = value
        if isinstance(value, str):
            segment = find_segment(normalize_quotes(value), "{")
            if segment is None:
                return _failure(ParseErrorKind.UNPARSABLE_STRUCTURE, value, path, f"no object found for {node.name}")
            try:
                value = load_segment(segment)
            except ValueError as e:
                return _failure(ParseErrorKind.UNPARSABLE_STRUCTURE, segment, path, str(e))
            raw = segment

        if not isinstance(value, dict):
            return _failure(ParseErrorKind.UNPARSABLE_STRUCTURE, raw, path, f"expected an object for {node.name}")

        entries = {normalize_name(str(key)): item for key, item in value.items()}

        fields = []
        warnings: List[Failure] = []
        for field, view in zip(node.fields, self.profile.field_views(node)):
            field_path = f"{path}.{field.name}" if path else field.name
            item = entries.get(normalize_name(view.display))

            if is_null(item):
                if field.optional:
                    fields.append((field.name, ABSENT))
                    continue
                return _failure(
                    ParseErrorKind.MISSING_REQUIRED_FIELD,
                    raw,
                    field_path,
                    f"missing required field '{view.display}'",
                )

            result = self.coerce(item, field.type, field_path)
            if not result.is_success:
                if not field.optional:
                    return result
                warnings.append(result)
                fields.append((field.name, ABSENT))
                continue

            fields.append((field.name, result.value))
            warnings.extend(result.warnings)

        return Success(ClassInstance(node.name, tuple(fields)), tuple(warnings))


def _as_text(value: Any) -> str:
    """Text form of a loaded value, for matching and failure reports."""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def _failure(kind: ParseErrorKind, raw: Union[str, Any], path: str, message: str) -> Failure:
    return Failure(kind=kind, raw_text=_as_text(raw), path=path, message=message)
