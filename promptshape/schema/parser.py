"""
Declaration parser - converts schema declaration documents to a TypeRegistry.

The schema-loading layer hands us already-parsed declarations (a dict, usually
read from JSON). This module checks their shape, resolves type references
and produces the immutable registry used everywhere else.

Declaration format:
    ```json
    {
        "enums": {
            "Sentiment": ["Positive", "Negative", "Neutral"]
        },
        "classes": {
            "Person": {
                "name": "string",
                "age": "int",
                "mood": "Sentiment?",
                "scores": "float[]"
            }
        }
    }
    ```

Type expressions are a type name (`string`, `int`, `float`, `bool` or a
declared enum/class) followed by any number of `[]` suffixes and an optional
trailing `?` marking the field optional.

Usage:
    ```python
    from promptshape.schema import load_registry

    registry = load_registry(document)
    person = registry.get("Person")
    ```
"""

import re
from typing import Any, Callable, Dict, List, Tuple

from jsonschema import Draft7Validator

from promptshape.errors import SchemaError
from promptshape.schema.types import (
    PRIMITIVE_KINDS,
    ArrayType,
    ClassType,
    EnumType,
    EnumValue,
    FieldDef,
    NamedType,
    Primitive,
    TypeNode,
    TypeRegistry,
)

_TYPE_EXPR_RE = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_]*)\s*((?:\[\s*\]\s*)*)(\?)?\s*$")

DECLARATIONS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "enums": {
            "type": "object",
            "additionalProperties": {
                "type": "array",
                "items": {"type": "string", "minLength": 1},
                "uniqueItems": True,
            },
        },
        "classes": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "additionalProperties": {
                    "type": "string",
                    "pattern": _TYPE_EXPR_RE.pattern,
                },
            },
        },
    },
    "additionalProperties": False,
}


def validate_declarations(document: Dict[str, Any]) -> None:
    """
    Check that a declaration document is well-formed.

    Args:
        document: Declaration dictionary

    Raises:
        SchemaError: Listing every shape violation found

    Example:
        ```python
        validate_declarations({"enums": {"Color": "red"}})  # Raises SchemaError
        ```
    """
    messages = collect_document_errors(document, DECLARATIONS_SCHEMA)
    if messages:
        raise SchemaError("Invalid schema declarations:\n  " + "\n  ".join(messages))


def collect_document_errors(document: Any, json_schema: Dict[str, Any]) -> List[str]:
    """
    Validate `document` against a JSON Schema and describe every error.

    Returns:
        List of "<path>: <message>" strings, empty when the document is valid
    """
    validator = Draft7Validator(json_schema)
    messages = []
    for error in sorted(validator.iter_errors(document), key=lambda e: list(map(str, e.path))):
        path = ".".join(str(p) for p in error.path) if error.path else "root"
        messages.append(f"{path}: {error.message}")
    return messages


def load_registry(document: Dict[str, Any]) -> TypeRegistry:
    """
    Build a TypeRegistry from a declaration document.

    Classes may reference each other in any order. Enums come first in the
    registry, followed by classes in declaration order.

    Args:
        document: Declaration dictionary (see module docstring)

    Returns:
        TypeRegistry: Immutable registry of every declared type

    Raises:
        SchemaError: If the document is malformed, a name is declared twice or
            shadows a primitive, a reference is unknown, or classes form a cycle
    """
    validate_declarations(document)

    enum_decls: Dict[str, List[str]] = document.get("enums", {})
    class_decls: Dict[str, Dict[str, str]] = document.get("classes", {})

    for name in list(enum_decls) + list(class_decls):
        if name in PRIMITIVE_KINDS:
            raise SchemaError(f"Type name '{name}' shadows a primitive type")
    for name in enum_decls:
        if name in class_decls:
            raise SchemaError(f"'{name}' is declared both as an enum and as a class")

    types: Dict[str, NamedType] = {}
    for name, values in enum_decls.items():
        types[name] = EnumType(name=name, values=tuple(EnumValue(v) for v in values))

    building: List[str] = []

    def build_class(name: str) -> ClassType:
        existing = types.get(name)
        if isinstance(existing, ClassType):
            return existing
        if name in building:
            cycle = " -> ".join(building[building.index(name):] + [name])
            raise SchemaError(f"Class reference cycle: {cycle}")

        building.append(name)
        fields = []
        for field_name, expr in class_decls[name].items():
            try:
                node, optional = _parse_type_expr(expr, lookup)
            except SchemaError as e:
                raise SchemaError(f"{name}.{field_name}: {e}") from None
            fields.append(FieldDef(name=field_name, type=node, optional=optional))
        building.pop()

        cls = ClassType(name=name, fields=tuple(fields))
        types[name] = cls
        return cls

    def lookup(name: str) -> TypeNode:
        if name in PRIMITIVE_KINDS:
            return Primitive(name)
        if name in enum_decls:
            return types[name]
        if name in class_decls:
            return build_class(name)
        raise SchemaError(f"Unknown type: {name}")

    for name in class_decls:
        build_class(name)

    # Re-key in declaration order (enums first, then classes)
    ordered = {name: types[name] for name in list(enum_decls) + list(class_decls)}
    return TypeRegistry(types=ordered)


def parse_type_expr(expr: str, registry: TypeRegistry) -> Tuple[TypeNode, bool]:
    """
    Resolve a type expression such as "Person[]?" against a registry.

    Args:
        expr: Type expression
        registry: Registry providing enum and class names

    Returns:
        Tuple of (type node, optional flag)

    Raises:
        SchemaError: If the expression is malformed or names an unknown type

    Example:
        ```python
        node, optional = parse_type_expr("Sentiment[]?", registry)
        # ArrayType(element=EnumType("Sentiment", ...)), True
        ```
    """

    def lookup(name: str) -> TypeNode:
        if name in PRIMITIVE_KINDS:
            return Primitive(name)
        return registry.get(name)

    return _parse_type_expr(expr, lookup)


def _parse_type_expr(expr: str, lookup: Callable[[str], TypeNode]) -> Tuple[TypeNode, bool]:
    match = _TYPE_EXPR_RE.match(expr)
    if match is None:
        raise SchemaError(f"Invalid type expression: '{expr}'")

    base, suffixes, question = match.groups()
    node = lookup(base)
    for _ in range(suffixes.count("[")):
        node = ArrayType(element=node)
    return node, question is not None
