"""
Type definitions for the in-memory schema model.

The schema model is a closed set of immutable nodes. Every downstream component
(stringifier, coercion engine, profile compiler) dispatches over exactly these
kinds:

Type Hierarchy:
    TypeNode
    ├── Primitive: string, int, float or bool
    ├── EnumType: named, ordered set of EnumValue
    ├── ClassType: named, ordered set of FieldDef
    └── ArrayType: homogeneous sequence of an element TypeNode

Enum and class types are identified by name. A TypeRegistry holds every named
type of one schema and guarantees names are unique.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Mapping, Optional, Tuple, Union

from promptshape.errors import SchemaError

PRIMITIVE_KINDS = ("string", "int", "float", "bool")


@dataclass(frozen=True)
class Primitive:
    """
    A scalar type.

    Attributes:
        kind: One of "string", "int", "float", "bool"
    """

    kind: str

    def __post_init__(self) -> None:
        if self.kind not in PRIMITIVE_KINDS:
            raise SchemaError(f"Unknown primitive kind: {self.kind}")


@dataclass(frozen=True)
class EnumValue:
    """A single enum member, identified by its canonical (code-facing) name."""

    name: str


@dataclass(frozen=True)
class EnumType:
    """
    A named enum.

    Attributes:
        name: Enum name, unique within a registry
        values: Members in declaration order
    """

    name: str
    values: Tuple[EnumValue, ...] = ()

    def __post_init__(self) -> None:
        seen = set()
        for value in self.values:
            if value.name in seen:
                raise SchemaError(f"Duplicate value '{value.name}' in enum {self.name}")
            seen.add(value.name)

    def value_names(self) -> Tuple[str, ...]:
        return tuple(v.name for v in self.values)

    def has_value(self, name: str) -> bool:
        return any(v.name == name for v in self.values)


@dataclass(frozen=True)
class FieldDef:
    """
    A class field.

    Attributes:
        name: Canonical field name
        type: Field type
        optional: Whether the field may be absent from parsed output
    """

    name: str
    type: "TypeNode"
    optional: bool = False


@dataclass(frozen=True)
class ClassType:
    """
    A named record type.

    Attributes:
        name: Class name, unique within a registry
        fields: Fields in declaration order
    """

    name: str
    fields: Tuple[FieldDef, ...] = ()

    def __post_init__(self) -> None:
        seen = set()
        for f in self.fields:
            if f.name in seen:
                raise SchemaError(f"Duplicate field '{f.name}' in class {self.name}")
            seen.add(f.name)

    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def get_field(self, name: str) -> Optional[FieldDef]:
        for f in self.fields:
            if f.name == name:
                return f
        return None


@dataclass(frozen=True)
class ArrayType:
    """A homogeneous sequence of `element`."""

    element: "TypeNode"


TypeNode = Union[Primitive, EnumType, ClassType, ArrayType]
NamedType = Union[EnumType, ClassType]

STRING = Primitive("string")
INT = Primitive("int")
FLOAT = Primitive("float")
BOOL = Primitive("bool")


def type_name(node: TypeNode) -> str:
    """
    Human-readable name of a type, e.g. "int", "Person", "Sentiment[]".
    """
    if isinstance(node, Primitive):
        return node.kind
    if isinstance(node, ArrayType):
        return f"{type_name(node.element)}[]"
    return node.name


def iter_named_types(node: TypeNode) -> Iterator[NamedType]:
    """
    Yield every enum and class reachable from `node`, each once, depth first.
    """
    seen = set()
    stack = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, ArrayType):
            stack.append(current.element)
        elif isinstance(current, (EnumType, ClassType)):
            if current.name in seen:
                continue
            seen.add(current.name)
            yield current
            if isinstance(current, ClassType):
                # Reversed so fields are visited in declaration order
                stack.extend(f.type for f in reversed(current.fields))


@dataclass(frozen=True)
class TypeRegistry:
    """
    Read-only collection of the named types of one schema.

    Built once at schema-load time and shared for the lifetime of the process.

    Attributes:
        types: Mapping of type name to EnumType/ClassType, in declaration order
    """

    types: Mapping[str, NamedType] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name, node in self.types.items():
            if node.name != name:
                raise SchemaError(f"Registry key '{name}' does not match type name '{node.name}'")
        # Freeze the mapping so a published registry cannot be mutated
        object.__setattr__(self, "types", MappingProxyType(dict(self.types)))

    @classmethod
    def of(cls, *nodes: NamedType) -> "TypeRegistry":
        """
        Build a registry from types, including every type they reference.

        Example:
            ```python
            sentiment = EnumType("Sentiment", (EnumValue("Positive"),))
            registry = TypeRegistry.of(sentiment)
            ```
        """
        types = {}
        for node in nodes:
            for named in iter_named_types(node):
                existing = types.get(named.name)
                if existing is not None and existing != named:
                    raise SchemaError(f"Conflicting definitions for type '{named.name}'")
                types[named.name] = named
        return cls(types=types)

    def __contains__(self, name: object) -> bool:
        return name in self.types

    def __iter__(self) -> Iterator[str]:
        return iter(self.types)

    def __len__(self) -> int:
        return len(self.types)

    def get(self, name: str) -> NamedType:
        """
        Look up a named type.

        Raises:
            SchemaError: If no type with that name is registered
        """
        try:
            return self.types[name]
        except KeyError:
            raise SchemaError(f"Unknown type: {name}") from None

    @property
    def enums(self) -> Tuple[EnumType, ...]:
        return tuple(t for t in self.types.values() if isinstance(t, EnumType))

    @property
    def classes(self) -> Tuple[ClassType, ...]:
        return tuple(t for t in self.types.values() if isinstance(t, ClassType))
