"""
Override profiles: per-variant renames, descriptions and skips.

Components:
    - types: OverrideEntry, TypeOverrides and OverrideProfile definitions
    - resolver: compile_profile and the ProfileResolver cache
    - loader: Read override declarations from a document

Example:
    ```python
    from promptshape.overrides import OverrideEntry, ProfileResolver

    overrides = {
        "cheerful": {
            "Sentiment": [
                OverrideEntry("Positive", rename="Good"),
                OverrideEntry("Neutral", skip=True),
            ]
        }
    }
    resolver = ProfileResolver(registry, overrides)
    profile = resolver.resolve("Sentiment", "cheerful")
    ```
"""

from promptshape.overrides.types import (
    DEFAULT_VARIANT,
    EnumChoice,
    FieldView,
    OverrideEntry,
    OverrideProfile,
    RawOverrides,
    TypeOverrides,
    normalize_name,
)
from promptshape.overrides.resolver import ProfileResolver, compile_profile
from promptshape.overrides.loader import load_overrides, validate_overrides

__all__ = [
    "DEFAULT_VARIANT",
    "EnumChoice",
    "FieldView",
    "OverrideEntry",
    "OverrideProfile",
    "RawOverrides",
    "TypeOverrides",
    "normalize_name",
    "ProfileResolver",
    "compile_profile",
    "load_overrides",
    "validate_overrides",
]
