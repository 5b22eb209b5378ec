"""
Override profile definitions.

An override table says how the members of one named type are shown to the
model: a field or enum value can be renamed, described, or (enum values only)
skipped. Overrides live apart from the schema so one schema can carry several
variants without being duplicated.

    OverrideEntry      one target (canonical name) of one type
    TypeOverrides      compiled table for one type: entries + reverse index
    OverrideProfile    the tables of one variant, for every type it covers

Profiles are produced by `promptshape.overrides.resolver.compile_profile` and
are read-only once built.
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Sequence, Tuple

from promptshape.schema.types import ClassType, EnumType

DEFAULT_VARIANT = "default"

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_name(text: str) -> str:
    """
    Comparison form of a display name: trimmed, whitespace collapsed, case-folded.

    Both the collision check at compile time and the enum matcher at parse time
    go through this function, so anything that collides here is ambiguous.
    """
    return _WHITESPACE_RE.sub(" ", text.strip()).casefold()


@dataclass(frozen=True)
class OverrideEntry:
    """
    Display override for one field or enum value.

    Attributes:
        target: Canonical name of the field or enum value
        rename: Display name shown to the model instead of `target`
        description: Annotation shown alongside (enums) or in place of the type (fields)
        skip: Hide the enum value from rendering and parsing
    """

    target: str
    rename: Optional[str] = None
    description: Optional[str] = None
    skip: bool = False


# variant -> type name -> entries
RawOverrides = Mapping[str, Mapping[str, Sequence[OverrideEntry]]]


@dataclass(frozen=True)
class EnumChoice:
    """One enum value as the model sees it under a profile."""

    name: str
    display: str
    description: Optional[str] = None
    skip: bool = False


@dataclass(frozen=True)
class FieldView:
    """One class field as the model sees it under a profile."""

    name: str
    display: str
    description: Optional[str] = None


@dataclass(frozen=True)
class TypeOverrides:
    """
    Compiled override table for one named type.

    Attributes:
        type_name: The enum or class these overrides belong to
        entries: Canonical name -> OverrideEntry
        reverse: Normalized display name -> canonical name
    """

    type_name: str
    entries: Mapping[str, OverrideEntry] = field(default_factory=dict)
    reverse: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))
        object.__setattr__(self, "reverse", MappingProxyType(dict(self.reverse)))

    def display(self, canonical: str) -> str:
        entry = self.entries.get(canonical)
        if entry is not None and entry.rename:
            return entry.rename
        return canonical

    def description(self, canonical: str) -> Optional[str]:
        entry = self.entries.get(canonical)
        return entry.description if entry is not None else None

    def is_skipped(self, canonical: str) -> bool:
        entry = self.entries.get(canonical)
        return entry.skip if entry is not None else False


@dataclass(frozen=True)
class OverrideProfile:
    """
    All override tables of one variant.

    Types without a table render and parse under their canonical names.

    Attributes:
        variant: Variant identifier
        tables: Type name -> TypeOverrides
        root: Type the profile was resolved for, if any
    """

    variant: str = DEFAULT_VARIANT
    tables: Mapping[str, TypeOverrides] = field(default_factory=dict)
    root: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "tables", MappingProxyType(dict(self.tables)))

    @classmethod
    def empty(cls, variant: str = DEFAULT_VARIANT) -> "OverrideProfile":
        """Profile without any overrides: everything shows its canonical name."""
        return cls(variant=variant)

    def table(self, type_name: str) -> Optional[TypeOverrides]:
        return self.tables.get(type_name)

    def display_name(self, type_name: str, canonical: str) -> str:
        table = self.tables.get(type_name)
        return table.display(canonical) if table is not None else canonical

    def description(self, type_name: str, canonical: str) -> Optional[str]:
        table = self.tables.get(type_name)
        return table.description(canonical) if table is not None else None

    def is_skipped(self, type_name: str, canonical: str) -> bool:
        table = self.tables.get(type_name)
        return table.is_skipped(canonical) if table is not None else False

    def canonical_for(self, type_name: str, display: str) -> Optional[str]:
        """
        Reverse lookup: canonical name for a display name, compared normalized.

        Returns None when the type has no compiled table or nothing matches.
        """
        table = self.tables.get(type_name)
        if table is None:
            return None
        return table.reverse.get(normalize_name(display))

    def enum_choices(self, enum: EnumType) -> Tuple[EnumChoice, ...]:
        """Every value of `enum` in declaration order, skipped ones included."""
        return tuple(
            EnumChoice(
                name=v.name,
                display=self.display_name(enum.name, v.name),
                description=self.description(enum.name, v.name),
                skip=self.is_skipped(enum.name, v.name),
            )
            for v in enum.values
        )

    def field_views(self, cls: ClassType) -> Tuple[FieldView, ...]:
        """Every field of `cls` in declaration order."""
        return tuple(
            FieldView(
                name=f.name,
                display=self.display_name(cls.name, f.name),
                description=self.description(cls.name, f.name),
            )
            for f in cls.fields
        )
