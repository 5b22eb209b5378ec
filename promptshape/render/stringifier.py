"""
Stringifier - render schema types as prompt text.

Rendering is a pure function of (type, profile): the same inputs always give
byte-identical text, which keeps golden-prompt tests stable.

Rendering rules:
    Primitive   -> its keyword: string, int, float, bool
    EnumType    -> one line per value, "display: description" or "display"
                   (skipped values omitted); inside an object shape the enum
                   renders as `string`, or as `"A" | "B"` with inline_enums
    ClassType   -> { "display": type, ... } on a single line; a described field
                   shows its description instead of its type
    ArrayType   -> element rendering followed by one [] per nesting level

Example:
    ```python
    from promptshape.render import render

    print(render(sentiment, profile))
    # Good: Upbeat tone
    # Negative

    print(render(ArrayType(person), profile))
    # { "name": string, "years": age in whole years }[]
    ```
"""

import json
from typing import Optional, Union

from promptshape.coercion.result import EnumMember
from promptshape.overrides.types import OverrideProfile
from promptshape.schema.types import ArrayType, ClassType, EnumType, Primitive, TypeNode


def render(node: TypeNode, profile: Optional[OverrideProfile] = None, inline_enums: bool = False) -> str:
    """
    Render a type as prompt text.

    A top-level enum renders in "values" mode (one line per value); everything
    else renders as a single-line shape. A top-level array of enums always
    lists its alternatives, since no surrounding text names them.

    Args:
        node: Type to render
        profile: Override profile (default: no overrides)
        inline_enums: Render enums nested in shapes as their alternatives
            instead of `string`

    Returns:
        str: Prompt fragment
    """
    profile = profile or OverrideProfile.empty()
    if isinstance(node, EnumType):
        return render_enum_values(node, profile)
    if isinstance(_innermost(node), EnumType):
        inline_enums = True
    return render_shape(node, profile, inline_enums)


def _innermost(node: TypeNode) -> TypeNode:
    while isinstance(node, ArrayType):
        node = node.element
    return node


def render_enum_values(node: EnumType, profile: Optional[OverrideProfile] = None) -> str:
    """Render an enum's accepted values, one per line, in declaration order."""
    profile = profile or OverrideProfile.empty()
    lines = []
    for choice in profile.enum_choices(node):
        if choice.skip:
            continue
        lines.append(f"{choice.display}: {choice.description}" if choice.description else choice.display)
    return "\n".join(lines)


def render_shape(node: TypeNode, profile: Optional[OverrideProfile] = None, inline_enums: bool = False) -> str:
    """
    Render a type in "json" mode, as it appears inside an object shape.
    """
    profile = profile or OverrideProfile.empty()

    if isinstance(node, Primitive):
        return node.kind

    if isinstance(node, EnumType):
        if not inline_enums:
            return "string"
        return " | ".join(_quote(c.display) for c in profile.enum_choices(node) if not c.skip)

    if isinstance(node, ArrayType):
        inner = render_shape(node.element, profile, inline_enums)
        if isinstance(node.element, EnumType) and " | " in inner:
            # Parenthesize alternatives so the suffix applies to all of them
            inner = f"({inner})"
        return f"{inner}[]"

    if isinstance(node, ClassType):
        if not node.fields:
            return "{}"
        parts = []
        for field, view in zip(node.fields, profile.field_views(node)):
            if view.description:
                shown = view.description
            else:
                shown = render_shape(field.type, profile, inline_enums)
                if field.optional:
                    shown = f"{shown} | null"
            parts.append(f"{_quote(view.display)}: {shown}")
        return "{ " + ", ".join(parts) + " }"

    raise TypeError(f"Not a schema type: {node!r}")


def render_value(node: EnumType, value: Union[str, EnumMember], profile: Optional[OverrideProfile] = None) -> str:
    """
    Render the display form of one enum value.

    Args:
        node: Enum the value belongs to
        value: Canonical value name or parsed EnumMember
        profile: Override profile (default: no overrides)

    Raises:
        ValueError: If the value does not exist or is skipped in this profile
    """
    profile = profile or OverrideProfile.empty()
    name = value.name if isinstance(value, EnumMember) else value
    if not node.has_value(name):
        raise ValueError(f"Enum {node.name} has no value '{name}'")
    if profile.is_skipped(node.name, name):
        raise ValueError(f"{node.name}.{name} is skipped in variant '{profile.variant}'")
    return profile.display_name(node.name, name)


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)
