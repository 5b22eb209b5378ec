"""
Schema model and schema loading.

This module holds the immutable type model shared by rendering and parsing,
plus the loaders that build it from declaration documents or pydantic models.

Components:
    - types: TypeNode definitions (Primitive, EnumType, ClassType, ArrayType) and TypeRegistry
    - parser: Build a TypeRegistry from a declaration document
    - pydantic_adapter: Build a TypeRegistry from pydantic models and enums

Example:
    ```python
    from promptshape.schema import load_registry

    registry = load_registry({
        "enums": {"Sentiment": ["Positive", "Negative"]},
        "classes": {"Review": {"text": "string", "sentiment": "Sentiment"}},
    })
    review = registry.get("Review")
    ```
"""

from promptshape.schema.types import (
    ArrayType,
    ClassType,
    EnumType,
    EnumValue,
    FieldDef,
    Primitive,
    TypeNode,
    TypeRegistry,
    type_name,
)
from promptshape.schema.parser import load_registry, parse_type_expr, validate_declarations
from promptshape.schema.pydantic_adapter import (
    build_model,
    is_pydantic_model,
    overrides_from_models,
    registry_from_models,
)

__all__ = [
    "ArrayType",
    "ClassType",
    "EnumType",
    "EnumValue",
    "FieldDef",
    "Primitive",
    "TypeNode",
    "TypeRegistry",
    "type_name",
    "load_registry",
    "parse_type_expr",
    "validate_declarations",
    "build_model",
    "is_pydantic_model",
    "overrides_from_models",
    "registry_from_models",
]
