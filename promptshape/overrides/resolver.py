"""
Profile compilation and caching.

Compiling a profile validates a variant's override declarations against the
schema and builds the lookup tables shared by the stringifier and the parser.
It runs at schema-load time so misconfiguration fails before any request is
served.

Cache Structure:
    ProfileResolver._profiles
    ├── ("Person", "default")     -> OverrideProfile
    ├── ("Person", "cheerful")    -> OverrideProfile
    └── ("Sentiment", "cheerful") -> OverrideProfile

Cache Keys:
    - (type name, variant id)
    - The cache is append-only: it is bounded by the number of declared
      (type, variant) pairs, so nothing is ever evicted

Usage:
    ```python
    from promptshape.overrides import ProfileResolver

    resolver = ProfileResolver(registry, overrides)
    resolver.compile_all()           # fail fast at startup

    profile = resolver.resolve("Person", "cheerful")
    ```
"""

import logging
import threading
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from promptshape.errors import ProfileError
from promptshape.overrides.types import (
    DEFAULT_VARIANT,
    OverrideEntry,
    OverrideProfile,
    RawOverrides,
    TypeOverrides,
    normalize_name,
)
from promptshape.schema.types import ClassType, EnumType, NamedType, TypeRegistry, iter_named_types

logger = logging.getLogger(__name__)


def compile_profile(
    registry: TypeRegistry,
    raw_overrides: Mapping[str, Sequence[OverrideEntry]],
    variant: str = DEFAULT_VARIANT,
    root: Optional[str] = None,
) -> OverrideProfile:
    """
    Compile one variant's override declarations into an OverrideProfile.

    Every declaration of the variant is validated, whatever `root` is. The
    resulting profile has a table for each type reachable from `root`, or for
    every registered type when `root` is None.

    Args:
        registry: Schema the overrides refer to
        raw_overrides: Type name -> override entries for this variant
        variant: Variant identifier recorded on the profile
        root: Type the profile is being resolved for

    Returns:
        OverrideProfile: Immutable compiled profile

    Raises:
        ProfileError: On unknown types or targets, skip on a class field,
            duplicate entries, display-name collisions, or an enum whose
            values are all skipped

    Example:
        ```python
        profile = compile_profile(
            registry,
            {"Sentiment": [OverrideEntry("Positive", rename="Good")]},
            variant="cheerful",
        )
        assert profile.display_name("Sentiment", "Positive") == "Good"
        ```
    """
    entries_by_type = _validate_entries(registry, raw_overrides, variant)

    if root is None:
        covered: List[NamedType] = list(registry.types.values())
    else:
        if root not in registry:
            raise ProfileError(f"Variant '{variant}': unknown type '{root}'")
        covered = list(iter_named_types(registry.get(root)))

    tables = {}
    for node in covered:
        entries = entries_by_type.get(node.name, {})
        tables[node.name] = TypeOverrides(
            type_name=node.name,
            entries=entries,
            reverse=_build_reverse_index(node, entries, variant),
        )

    return OverrideProfile(variant=variant, tables=tables, root=root)


def _validate_entries(
    registry: TypeRegistry,
    raw_overrides: Mapping[str, Sequence[OverrideEntry]],
    variant: str,
) -> Dict[str, Dict[str, OverrideEntry]]:
    """Check every declaration against the schema and index it by target."""
    result: Dict[str, Dict[str, OverrideEntry]] = {}

    for type_name, entries in raw_overrides.items():
        if type_name not in registry:
            raise ProfileError(f"Variant '{variant}': overrides reference unknown type '{type_name}'")
        node = registry.get(type_name)

        by_target: Dict[str, OverrideEntry] = {}
        for entry in entries:
            where = f"Variant '{variant}', {type_name}.{entry.target}"

            if isinstance(node, EnumType):
                if not node.has_value(entry.target):
                    raise ProfileError(f"{where}: enum {type_name} has no value '{entry.target}'")
            elif isinstance(node, ClassType):
                if node.get_field(entry.target) is None:
                    raise ProfileError(f"{where}: class {type_name} has no field '{entry.target}'")
                if entry.skip:
                    raise ProfileError(f"{where}: skip is only allowed on enum values")

            if entry.rename is not None and not entry.rename.strip():
                raise ProfileError(f"{where}: rename must not be empty")
            if entry.target in by_target:
                raise ProfileError(f"{where}: declared more than once")

            by_target[entry.target] = entry

        if isinstance(node, EnumType) and node.values:
            if all(by_target.get(v.name, OverrideEntry(v.name)).skip for v in node.values):
                raise ProfileError(f"Variant '{variant}': every value of enum {type_name} is skipped")

        result[type_name] = by_target

    return result


def _build_reverse_index(
    node: NamedType,
    entries: Mapping[str, OverrideEntry],
    variant: str,
) -> Dict[str, str]:
    """
    Map normalized display names back to canonical names.

    Two members that normalize to the same display name would make parsing
    ambiguous, so they are rejected here rather than at parse time.
    """
    if isinstance(node, EnumType):
        members = node.value_names()
    else:
        members = node.field_names()

    reverse: Dict[str, str] = {}
    for canonical in members:
        entry = entries.get(canonical)
        display = entry.rename if entry is not None and entry.rename else canonical
        key = normalize_name(display)
        other = reverse.get(key)
        if other is not None:
            raise ProfileError(
                f"Variant '{variant}': {node.name}.{canonical} and {node.name}.{other} "
                f"both display as '{display}'"
            )
        reverse[key] = canonical
    return reverse


class ProfileResolver:
    """
    Compile-once cache of override profiles.

    Readers never observe a partially built profile: a profile is published to
    the cache only after compilation completes, and compilation of a missing key
    happens under a lock, so concurrent first uses of the same key compile once
    and all receive the same object.

    Attributes:
        registry: Schema shared by every profile
        overrides: Variant -> type name -> override entries
    """

    def __init__(self, registry: TypeRegistry, overrides: Optional[RawOverrides] = None):
        """
        Initialize the resolver.

        Args:
            registry: Schema the overrides refer to
            overrides: Raw override declarations per variant (default: none)
        """
        self.registry = registry
        self.overrides: Dict[str, Mapping[str, Sequence[OverrideEntry]]] = dict(overrides or {})
        self.overrides.setdefault(DEFAULT_VARIANT, {})

        self._profiles: Dict[Tuple[str, str], OverrideProfile] = {}
        self._lock = threading.Lock()
        # Guards the counters on the lock-free hit path
        self._stats_lock = threading.Lock()
        self._hits = 0
        self._misses = 0

        logger.debug(
            f"ProfileResolver initialized with {len(registry)} types, "
            f"{len(self.overrides)} variants"
        )

    @property
    def variants(self) -> Tuple[str, ...]:
        return tuple(self.overrides)

    def resolve(self, type_name: str, variant: str = DEFAULT_VARIANT) -> OverrideProfile:
        """
        Get the compiled profile for (type_name, variant), compiling on first use.

        Args:
            type_name: Root type of the profile
            variant: Variant identifier

        Returns:
            OverrideProfile: Cached profile covering `type_name` and every
            type it references

        Raises:
            ProfileError: If the variant is not declared, the type is unknown,
                or the variant's overrides do not compile
        """
        key = (type_name, variant)

        profile = self._profiles.get(key)
        if profile is not None:
            self._count_hit()
            logger.debug(f"Profile cache hit for {type_name}/{variant}")
            return profile

        with self._lock:
            profile = self._profiles.get(key)
            if profile is not None:
                self._count_hit()
                return profile

            with self._stats_lock:
                self._misses += 1
            if variant not in self.overrides:
                raise ProfileError(f"Unknown variant '{variant}' (declared: {', '.join(self.variants)})")

            profile = compile_profile(
                self.registry,
                self.overrides[variant],
                variant=variant,
                root=type_name,
            )
            self._profiles[key] = profile

        logger.info(f"Compiled profile for {type_name}/{variant} ({len(profile.tables)} tables)")
        return profile

    def _count_hit(self) -> None:
        with self._stats_lock:
            self._hits += 1

    def compile_all(self) -> int:
        """
        Compile every (type, variant) pair up front.

        Call this at schema-load time so that a broken variant is reported
        before any request is served.

        Returns:
            int: Number of profiles in the cache afterwards
        """
        for variant in self.variants:
            for type_name in self.registry:
                self.resolve(type_name, variant)
        return len(self._profiles)

    def get_stats(self) -> Dict:
        """
        Get cache statistics.

        Returns:
            Dict with hit/miss counts, hit rate and number of cached profiles

        Example:
            ```python
            stats = resolver.get_stats()
            print(f"Hit rate: {stats['hit_rate']:.1%}")
            ```
        """
        with self._stats_lock:
            hits, misses = self._hits, self._misses
        total = hits + misses
        return {
            'hits': hits,
            'misses': misses,
            'hit_rate': hits / total if total > 0 else 0,
            'num_entries': len(self._profiles),
            'variants': list(self.variants),
        }
