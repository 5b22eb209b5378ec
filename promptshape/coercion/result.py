"""
Parse results and typed values.

A parse never raises on malformed model output. It returns either a `Success`
carrying a typed value (plus any recovered element-level problems as
warnings) or a `Failure` describing what went wrong and where.

Typed values mirror the schema model:
    Primitive   -> str / int / float / bool
    EnumType    -> EnumMember (canonical name, never the display name)
    ClassType   -> ClassInstance (ordered field name -> value pairs)
    ArrayType   -> tuple of values
    missing optional field -> ABSENT
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, Tuple, Union


class ParseErrorKind(str, Enum):
    """Why a parse failed."""

    UNPARSABLE_STRUCTURE = "UnparsableStructure"
    MISSING_REQUIRED_FIELD = "MissingRequiredField"
    AMBIGUOUS_MATCH = "AmbiguousMatch"
    SKIPPED_VALUE_PRODUCED = "SkippedValueProduced"


class _Absent:
    """Marker for an optional field the output did not contain."""

    _instance = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()


@dataclass(frozen=True)
class EnumMember:
    """
    A parsed enum value.

    Attributes:
        enum: Name of the enum type
        name: Canonical value name
    """

    enum: str
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ClassInstance:
    """
    A parsed class value.

    Attributes:
        type_name: Name of the class type
        fields: (canonical field name, value) pairs in declaration order
    """

    type_name: str
    fields: Tuple[Tuple[str, Any], ...] = ()

    def __getitem__(self, name: str) -> Any:
        for key, value in self.fields:
            if key == name:
                return value
        raise KeyError(name)

    def __iter__(self) -> Iterator[str]:
        return (key for key, _ in self.fields)

    def __contains__(self, name: object) -> bool:
        return any(key == name for key, _ in self.fields)

    def get(self, name: str, default: Any = None) -> Any:
        try:
            return self[name]
        except KeyError:
            return default

    def keys(self) -> Tuple[str, ...]:
        return tuple(key for key, _ in self.fields)

    def to_dict(self) -> Dict[str, Any]:
        """Plain-Python view (see `to_python`)."""
        return to_python(self)


TypedValue = Union[str, int, float, bool, EnumMember, ClassInstance, Tuple[Any, ...], _Absent]


@dataclass(frozen=True)
class Failure:
    """
    A structured parse failure.

    Attributes:
        kind: Failure category
        raw_text: The offending raw substring
        path: Dotted location of the failure, e.g. "person[2].age"
        message: Human-readable explanation
    """

    kind: ParseErrorKind
    raw_text: str
    path: str = ""
    message: str = ""

    @property
    def is_success(self) -> bool:
        return False

    @property
    def location(self) -> str:
        return self.path or "root"

    def __str__(self) -> str:
        return f"{self.kind.value} at {self.location}: {self.message}"


@dataclass(frozen=True)
class Success:
    """
    A successful parse.

    Attributes:
        value: The typed value
        warnings: Element-level failures that were recovered from
    """

    value: Any
    warnings: Tuple[Failure, ...] = ()

    @property
    def is_success(self) -> bool:
        return True


ParseResult = Union[Success, Failure]


def to_python(value: Any) -> Any:
    """
    Convert a typed value to plain Python data.

    Enum members become their canonical names, class instances become dicts,
    arrays become lists and ABSENT becomes None.

    Example:
        ```python
        result = parse('{"name": "Jo", "age": 5}', person, profile)
        to_python(result.value)  # {"name": "Jo", "age": 5}
        ```
    """
    if value is ABSENT:
        return None
    if isinstance(value, EnumMember):
        return value.name
    if isinstance(value, ClassInstance):
        return {key: to_python(item) for key, item in value.fields}
    if isinstance(value, tuple):
        return [to_python(item) for item in value]
    return value
