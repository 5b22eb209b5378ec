"""
Pydantic adapter - build the schema model from pydantic models and enums.

Lets callers declare output types the usual Python way and still get the
immutable TypeRegistry the rest of the package works with. Field aliases and
descriptions become overrides of a variant, so prompts show them while code
keeps the attribute names.

Supported annotations:
    - str, int, float, bool
    - enum.Enum subclasses (members identified by name)
    - pydantic.BaseModel subclasses
    - List[X], Sequence[X], Tuple[X, ...], list[X]
    - Optional[X] / X | None (marks the field optional)

Example:
    ```python
    from enum import Enum
    from pydantic import BaseModel, Field

    class Sentiment(Enum):
        POSITIVE = "positive"
        NEGATIVE = "negative"

    class Review(BaseModel):
        text: str = Field(description="the review, verbatim")
        sentiment: Sentiment

    registry = registry_from_models(Review)
    overrides = overrides_from_models(Review)
    ```
"""

import collections.abc
import enum
import types
import typing
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel

from promptshape.errors import SchemaError
from promptshape.schema.types import (
    BOOL,
    FLOAT,
    INT,
    STRING,
    ArrayType,
    ClassType,
    EnumType,
    EnumValue,
    FieldDef,
    NamedType,
    TypeNode,
    TypeRegistry,
)

_SCALARS = {str: STRING, int: INT, float: FLOAT, bool: BOOL}
_SEQUENCE_ORIGINS = (list, tuple, collections.abc.Sequence)
_UNION_TYPES = tuple(t for t in (Union, getattr(types, "UnionType", None)) if t is not None)


def is_pydantic_model(obj: Any) -> bool:
    """Whether `obj` is a pydantic BaseModel subclass."""
    return isinstance(obj, type) and issubclass(obj, BaseModel)


def registry_from_models(*models: type) -> TypeRegistry:
    """
    Build a TypeRegistry from pydantic models and Enum classes.

    Every model and enum reachable from the arguments is registered.

    Raises:
        SchemaError: On unsupported annotations, name clashes or reference cycles
    """
    converter = _ModelConverter()
    for model in models:
        if is_pydantic_model(model):
            converter.convert_model(model)
        elif isinstance(model, type) and issubclass(model, enum.Enum):
            converter.convert_enum(model)
        else:
            raise SchemaError(f"Expected a pydantic model or Enum class, got {model!r}")
    return TypeRegistry(types=converter.types)


def overrides_from_models(*models: type, variant: str = "default") -> Dict[str, Dict[str, list]]:
    """
    Turn field aliases and descriptions into override declarations.

    Args:
        models: Pydantic models to inspect (nested models are included)
        variant: Variant the overrides are declared for

    Returns:
        Variant -> type name -> list of OverrideEntry, suitable for ProfileResolver
    """
    # Imported here to keep promptshape.schema free of a package-level
    # dependency on promptshape.overrides
    from promptshape.overrides.types import OverrideEntry

    per_type: Dict[str, list] = {}
    for model in _iter_models(models):
        entries = []
        for name, info in model.model_fields.items():
            if info.alias or info.description:
                entries.append(OverrideEntry(target=name, rename=info.alias, description=info.description))
        if entries:
            per_type[model.__name__] = entries
    return {variant: per_type}


def build_model(model: type, value: Any) -> BaseModel:
    """
    Instantiate `model` from a parsed class value.

    Enum fields are converted from canonical member names to members and absent
    optional fields are left to the model's defaults.

    Args:
        model: Pydantic model class the value was parsed for
        value: A ClassInstance produced by the parser

    Returns:
        BaseModel: Validated model instance
    """
    return model.model_validate(_to_model_input(model, value))


def _to_model_input(annotation: Any, value: Any) -> Any:
    # Imported here for the same reason as in overrides_from_models
    from promptshape.coercion.result import ABSENT, ClassInstance, EnumMember

    inner, _ = _unwrap_optional(annotation)

    if isinstance(value, ClassInstance) and is_pydantic_model(inner):
        data = {}
        for name, field_value in value.fields:
            info = inner.model_fields[name]
            if field_value is ABSENT:
                # Optional[X] without a default is still required by pydantic
                if info.is_required():
                    data[info.alias or name] = None
                continue
            data[info.alias or name] = _to_model_input(info.annotation, field_value)
        return data
    if isinstance(value, EnumMember) and isinstance(inner, type) and issubclass(inner, enum.Enum):
        return inner[value.name]
    if isinstance(value, tuple):
        args = typing.get_args(inner)
        element = args[0] if args else Any
        return [_to_model_input(element, item) for item in value]
    return value


def _unwrap_optional(annotation: Any) -> Tuple[Any, bool]:
    if typing.get_origin(annotation) in _UNION_TYPES:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) != 1:
            raise SchemaError(f"Unions other than Optional[X] are not supported: {annotation}")
        return args[0], True
    return annotation, False


def _iter_models(models: Tuple[type, ...]) -> List[type]:
    seen: List[type] = []
    stack = [m for m in models if is_pydantic_model(m)]
    while stack:
        model = stack.pop(0)
        if model in seen:
            continue
        seen.append(model)
        for info in model.model_fields.values():
            stack.extend(_nested_models(info.annotation))
    return seen


def _nested_models(annotation: Any) -> List[type]:
    if is_pydantic_model(annotation):
        return [annotation]
    found = []
    for arg in typing.get_args(annotation):
        found.extend(_nested_models(arg))
    return found


class _ModelConverter:
    """Walks model annotations, registering each enum and model once."""

    def __init__(self) -> None:
        self.types: Dict[str, NamedType] = {}
        self._sources: Dict[str, type] = {}
        self._building: List[str] = []

    def _claim(self, name: str, source: type) -> Optional[NamedType]:
        owner = self._sources.get(name)
        if owner is not None and owner is not source:
            raise SchemaError(f"Two different types are named '{name}'")
        return self.types.get(name)

    def convert_enum(self, enum_cls: type) -> EnumType:
        existing = self._claim(enum_cls.__name__, enum_cls)
        if existing is not None:
            return existing
        node = EnumType(
            name=enum_cls.__name__,
            values=tuple(EnumValue(member.name) for member in enum_cls),
        )
        self._sources[node.name] = enum_cls
        self.types[node.name] = node
        return node

    def convert_model(self, model: type) -> ClassType:
        name = model.__name__
        existing = self._claim(name, model)
        if existing is not None:
            return existing
        if name in self._building:
            raise SchemaError(f"Model reference cycle: {' -> '.join(self._building + [name])}")

        self._building.append(name)
        fields = []
        for field_name, info in model.model_fields.items():
            inner, optional = _unwrap_optional(info.annotation)
            try:
                node = self.convert_annotation(inner)
            except SchemaError as e:
                raise SchemaError(f"{name}.{field_name}: {e}") from None
            fields.append(FieldDef(name=field_name, type=node, optional=optional or not info.is_required()))
        self._building.pop()

        node = ClassType(name=name, fields=tuple(fields))
        self._sources[name] = model
        self.types[name] = node
        return node

    def convert_annotation(self, annotation: Any) -> TypeNode:
        if annotation in _SCALARS:
            return _SCALARS[annotation]
        if isinstance(annotation, type) and issubclass(annotation, enum.Enum):
            return self.convert_enum(annotation)
        if is_pydantic_model(annotation):
            return self.convert_model(annotation)

        origin = typing.get_origin(annotation)
        if origin in _SEQUENCE_ORIGINS:
            args = [a for a in typing.get_args(annotation) if a is not Ellipsis]
            if len(args) != 1:
                raise SchemaError(f"Sequences need exactly one element type: {annotation}")
            return ArrayType(element=self.convert_annotation(args[0]))
        if origin in _UNION_TYPES:
            raise SchemaError(f"Optional is only supported at field level: {annotation}")

        raise SchemaError(f"Unsupported annotation: {annotation}")
