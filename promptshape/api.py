"""
High-level Python API for promptshape.

`PromptSchema` bundles a type registry with its override declarations and a
profile cache, so callers can render and parse by type name and variant:

    ```python
    from promptshape import PromptSchema

    schema = PromptSchema.from_documents(declarations, overrides)
    schema.compile_all()

    prompt_fragment = schema.render("Review", variant="cheerful")
    result = schema.parse(completion, "Review", variant="cheerful")
    ```

Type names may be type expressions, so "Review[]" renders and parses a list
of reviews under the profile of "Review".
"""

import logging
from typing import Any, Dict, Optional, Tuple

from promptshape.coercion.coercer import ParseOptions, parse
from promptshape.coercion.result import ParseResult
from promptshape.errors import ProfileError
from promptshape.overrides.loader import load_overrides
from promptshape.overrides.resolver import ProfileResolver
from promptshape.overrides.types import DEFAULT_VARIANT, OverrideProfile, RawOverrides
from promptshape.render.stringifier import render, render_value
from promptshape.schema.parser import load_registry, parse_type_expr
from promptshape.schema.pydantic_adapter import overrides_from_models, registry_from_models
from promptshape.schema.types import ArrayType, EnumType, Primitive, TypeNode, TypeRegistry

logger = logging.getLogger(__name__)


class PromptSchema:
    """
    A schema plus its variants.

    Attributes:
        registry: Declared types
        resolver: Compiled-profile cache shared by render and parse
    """

    def __init__(self, registry: TypeRegistry, overrides: Optional[RawOverrides] = None):
        self.registry = registry
        self.resolver = ProfileResolver(registry, overrides)

    @classmethod
    def from_documents(
        cls,
        declarations: Dict[str, Any],
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "PromptSchema":
        """
        Build from a declaration document and an optional overrides document.

        Raises:
            SchemaError: If the declarations are invalid
            ProfileError: If the overrides document is malformed
        """
        registry = load_registry(declarations)
        return cls(registry, load_overrides(overrides) if overrides else None)

    @classmethod
    def from_models(cls, *models: type, variant: str = DEFAULT_VARIANT) -> "PromptSchema":
        """
        Build from pydantic models; field aliases and descriptions become
        overrides of `variant`.
        """
        return cls(registry_from_models(*models), overrides_from_models(*models, variant=variant))

    @property
    def variants(self) -> Tuple[str, ...]:
        return self.resolver.variants

    def compile_all(self) -> int:
        """Compile every (type, variant) profile; raises ProfileError on the first broken variant."""
        count = self.resolver.compile_all()
        logger.info(f"Compiled {count} profiles for {len(self.registry)} types")
        return count

    def resolve_profile(self, type_name: str, variant: str = DEFAULT_VARIANT) -> OverrideProfile:
        """Compiled profile for a type expression under `variant`."""
        _, profile = self._resolve(type_name, variant)
        return profile

    def render(self, type_name: str, variant: str = DEFAULT_VARIANT, inline_enums: bool = False) -> str:
        """Render a type expression as prompt text."""
        node, profile = self._resolve(type_name, variant)
        return render(node, profile, inline_enums=inline_enums)

    def render_value(self, enum_name: str, value: str, variant: str = DEFAULT_VARIANT) -> str:
        """Display form of one enum value under `variant`."""
        node, profile = self._resolve(enum_name, variant)
        if not isinstance(node, EnumType):
            raise ValueError(f"{enum_name} is not an enum")
        return render_value(node, value, profile)

    def parse(
        self,
        raw_text: str,
        type_name: str,
        variant: str = DEFAULT_VARIANT,
        options: Optional[ParseOptions] = None,
        path: str = "",
    ) -> ParseResult:
        """
        Parse a raw completion as a value of a type expression.

        Raises only for configuration errors (unknown type or variant); bad
        model output is reported through the returned Failure.
        """
        node, profile = self._resolve(type_name, variant)
        return parse(raw_text, node, profile, options=options, path=path)

    def _resolve(self, type_expr: str, variant: str) -> Tuple[TypeNode, OverrideProfile]:
        node, _ = parse_type_expr(type_expr, self.registry)
        root = node
        while isinstance(root, ArrayType):
            root = root.element
        if isinstance(root, Primitive):
            if variant not in self.resolver.variants:
                raise ProfileError(f"Unknown variant '{variant}' (declared: {', '.join(self.variants)})")
            return node, OverrideProfile.empty(variant)
        return node, self.resolver.resolve(root.name, variant)
