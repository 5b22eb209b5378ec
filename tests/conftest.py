"""
Shared fixtures: the review schema and its override variants.
"""

import json
from pathlib import Path

import pytest

from promptshape.overrides import ProfileResolver, load_overrides
from promptshape.schema import load_registry

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(*parts: str):
    with open(FIXTURES_DIR.joinpath(*parts), encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def declarations():
    """Declaration document with Sentiment, Color, Person and Review."""
    return load_fixture("schemas", "review.json")


@pytest.fixture
def overrides_document():
    """Overrides document with the "cheerful" and "terse" variants."""
    return load_fixture("overrides", "review.json")


@pytest.fixture
def registry(declarations):
    return load_registry(declarations)


@pytest.fixture
def resolver(registry, overrides_document):
    return ProfileResolver(registry, load_overrides(overrides_document))


@pytest.fixture
def sentiment(registry):
    return registry.get("Sentiment")


@pytest.fixture
def person(registry):
    return registry.get("Person")


@pytest.fixture
def review(registry):
    return registry.get("Review")


@pytest.fixture
def default_profile(resolver):
    return resolver.resolve("Review", "default")


@pytest.fixture
def cheerful_profile(resolver):
    return resolver.resolve("Review", "cheerful")
