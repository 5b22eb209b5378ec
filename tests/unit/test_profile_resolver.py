"""
Unit tests for override profile compilation and caching.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from promptshape.errors import ProfileError
from promptshape.overrides import (
    OverrideEntry,
    OverrideProfile,
    ProfileResolver,
    compile_profile,
    load_overrides,
    normalize_name,
    validate_overrides,
)


class TestNormalizeName:
    """Test display name normalization."""

    def test_case_and_whitespace(self):
        """Test that case and inner whitespace are ignored."""
        assert normalize_name("  Very   Good\n") == "very good"
        assert normalize_name("GOOD") == normalize_name("good")


class TestCompileProfile:
    """Test validation and compilation of one variant."""

    def test_renames_and_descriptions(self, registry):
        """Test that a compiled profile reports display names."""
        profile = compile_profile(
            registry,
            {"Sentiment": [OverrideEntry("Positive", rename="Good", description="Upbeat tone")]},
            variant="cheerful",
        )

        assert profile.variant == "cheerful"
        assert profile.display_name("Sentiment", "Positive") == "Good"
        assert profile.display_name("Sentiment", "Negative") == "Negative"
        assert profile.description("Sentiment", "Positive") == "Upbeat tone"
        assert profile.canonical_for("Sentiment", "  GOOD ") == "Positive"

    def test_covers_reachable_types(self, registry):
        """Test that a rooted profile has tables for referenced types only."""
        profile = compile_profile(registry, {}, root="Person")

        assert set(profile.tables) == {"Person"}
        assert profile.root == "Person"

    def test_unrooted_profile_covers_registry(self, registry):
        """Test that a profile without a root covers every type."""
        profile = compile_profile(registry, {})

        assert set(profile.tables) == set(registry)

    def test_unknown_type(self, registry):
        """Test overrides for an undeclared type."""
        with pytest.raises(ProfileError, match="unknown type 'Ghost'"):
            compile_profile(registry, {"Ghost": [OverrideEntry("x")]})

    def test_unknown_enum_value(self, registry):
        """Test overrides for an undeclared enum value."""
        with pytest.raises(ProfileError, match="has no value 'Maybe'"):
            compile_profile(registry, {"Sentiment": [OverrideEntry("Maybe", rename="Perhaps")]})

    def test_unknown_field(self, registry):
        """Test overrides for an undeclared field."""
        with pytest.raises(ProfileError, match="has no field 'email'"):
            compile_profile(registry, {"Person": [OverrideEntry("email", rename="mail")]})

    def test_skip_on_field(self, registry):
        """Test that fields cannot be skipped."""
        with pytest.raises(ProfileError, match="skip is only allowed on enum values"):
            compile_profile(registry, {"Person": [OverrideEntry("age", skip=True)]})

    def test_empty_rename(self, registry):
        """Test that a rename must not be blank."""
        with pytest.raises(ProfileError, match="rename must not be empty"):
            compile_profile(registry, {"Sentiment": [OverrideEntry("Positive", rename="  ")]})

    def test_duplicate_entry(self, registry):
        """Test that each target is declared once per variant."""
        with pytest.raises(ProfileError, match="declared more than once"):
            compile_profile(registry, {
                "Sentiment": [OverrideEntry("Positive", rename="Good"), OverrideEntry("Positive", skip=True)],
            })

    def test_display_collision(self, registry):
        """Test that two values cannot share a display name."""
        with pytest.raises(ProfileError, match="both display as"):
            compile_profile(registry, {"Sentiment": [OverrideEntry("Positive", rename="NEGATIVE")]})

    def test_field_display_collision(self, registry):
        """Test that two fields cannot share a display name."""
        with pytest.raises(ProfileError, match="both display as"):
            compile_profile(registry, {"Person": [OverrideEntry("age", rename="Name")]})

    def test_all_values_skipped(self, registry):
        """Test that an enum must keep at least one value."""
        entries = [OverrideEntry(v, skip=True) for v in ("Positive", "Negative", "Neutral")]
        with pytest.raises(ProfileError, match="every value of enum Sentiment is skipped"):
            compile_profile(registry, {"Sentiment": entries})

    def test_invalid_entries_fail_for_any_root(self, registry):
        """Test that a broken declaration fails even for unrelated roots."""
        with pytest.raises(ProfileError):
            compile_profile(registry, {"Person": [OverrideEntry("age", skip=True)]}, root="Sentiment")

    def test_enum_choices(self, registry, sentiment):
        """Test enum choices in declaration order, skipped ones flagged."""
        profile = compile_profile(registry, {
            "Sentiment": [OverrideEntry("Neutral", skip=True), OverrideEntry("Positive", rename="Good")],
        })

        choices = profile.enum_choices(sentiment)

        assert [c.name for c in choices] == ["Positive", "Negative", "Neutral"]
        assert [c.display for c in choices] == ["Good", "Negative", "Neutral"]
        assert [c.skip for c in choices] == [False, False, True]

    def test_empty_profile(self):
        """Test that the empty profile shows canonical names."""
        profile = OverrideProfile.empty()

        assert profile.display_name("Sentiment", "Positive") == "Positive"
        assert profile.canonical_for("Sentiment", "Positive") is None
        assert not profile.is_skipped("Sentiment", "Neutral")


class TestProfileResolver:
    """Test the compile-once profile cache."""

    def test_default_variant_always_exists(self, registry):
        """Test that a resolver without overrides has the default variant."""
        resolver = ProfileResolver(registry)

        assert resolver.variants == ("default",)
        assert resolver.resolve("Person").variant == "default"

    def test_variants_from_document(self, resolver):
        """Test variants declared in the overrides document."""
        assert set(resolver.variants) == {"cheerful", "terse", "default"}

    def test_unknown_variant(self, resolver):
        """Test that undeclared variants are an error."""
        with pytest.raises(ProfileError, match="Unknown variant 'grumpy'"):
            resolver.resolve("Sentiment", "grumpy")

    def test_unknown_type(self, resolver):
        """Test that unknown root types are an error."""
        with pytest.raises(ProfileError, match="unknown type 'Ghost'"):
            resolver.resolve("Ghost", "default")

    def test_cache_hit_returns_same_object(self, resolver):
        """Test that a second resolve is served from the cache."""
        first = resolver.resolve("Review", "cheerful")
        second = resolver.resolve("Review", "cheerful")

        assert first is second
        stats = resolver.get_stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["num_entries"] == 1

    def test_variants_cached_separately(self, resolver):
        """Test that each variant gets its own profile."""
        cheerful = resolver.resolve("Sentiment", "cheerful")
        default = resolver.resolve("Sentiment", "default")

        assert cheerful is not default
        assert cheerful.display_name("Sentiment", "Positive") == "Good"
        assert default.display_name("Sentiment", "Positive") == "Positive"

    def test_compile_all(self, resolver, registry):
        """Test compiling every (type, variant) pair."""
        count = resolver.compile_all()

        assert count == len(registry) * len(resolver.variants)

    def test_compile_all_reports_broken_variant(self, registry):
        """Test that compile_all fails on a broken variant."""
        resolver = ProfileResolver(registry, {"bad": {"Person": [OverrideEntry("age", skip=True)]}})

        with pytest.raises(ProfileError, match="Variant 'bad'"):
            resolver.compile_all()

    def test_concurrent_resolve_compiles_once(self, resolver):
        """Test that concurrent first uses of a key share one profile."""
        barrier = threading.Barrier(8)

        def resolve():
            barrier.wait()
            return resolver.resolve("Review", "cheerful")

        with ThreadPoolExecutor(max_workers=8) as executor:
            profiles = list(executor.map(lambda _: resolve(), range(8)))

        assert all(p is profiles[0] for p in profiles)
        assert resolver.get_stats()["misses"] == 1
        assert profiles[0].display_name("Person", "age") == "years"

    def test_concurrent_hits_all_counted(self, resolver):
        """Test that hits from many threads are all counted."""
        resolver.resolve("Review", "cheerful")

        with ThreadPoolExecutor(max_workers=8) as executor:
            list(executor.map(lambda _: resolver.resolve("Review", "cheerful"), range(400)))

        stats = resolver.get_stats()
        assert stats["misses"] == 1
        assert stats["hits"] == 400


class TestLoadOverrides:
    """Test reading override documents."""

    def test_load_fixture(self, overrides_document):
        """Test the fixture document."""
        overrides = load_overrides(overrides_document)

        sentiment = {e.target: e for e in overrides["cheerful"]["Sentiment"]}
        assert sentiment["Positive"] == OverrideEntry("Positive", rename="Good", description="Upbeat tone")
        assert sentiment["Negative"] == OverrideEntry("Negative", rename="Bad")
        assert sentiment["Neutral"].skip is True

    def test_unknown_entry_key(self):
        """Test that entries only accept rename, description and skip."""
        with pytest.raises(ProfileError, match="Invalid override declarations"):
            validate_overrides({"v": {"Sentiment": {"Positive": {"label": "Good"}}}})

    def test_empty_rename_shorthand(self):
        """Test that the rename shorthand must not be empty."""
        with pytest.raises(ProfileError):
            validate_overrides({"v": {"Sentiment": {"Positive": ""}}})
