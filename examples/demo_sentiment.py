#!/usr/bin/env python3
"""
Demo: Sentiment labels under two prompt variants.

This demonstrates one schema rendered and parsed under:
- The default variant: canonical value names
- A "cheerful" variant: renamed and described values, one value skipped

The completions are typical chat-model answers, so no model is needed.
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from promptshape import PromptSchema
from promptshape.coercion import format_failure, to_python


def main():
    print("=" * 60)
    print("promptshape Demo: Sentiment Variants")
    print("=" * 60)

    schema = PromptSchema.from_documents(
        {"enums": {"Sentiment": ["Positive", "Negative", "Neutral"]}},
        {
            "cheerful": {
                "Sentiment": {
                    "Positive": {"rename": "Good", "description": "Upbeat tone"},
                    "Negative": {"rename": "Bad", "description": "Complaints or frustration"},
                    "Neutral": {"skip": True},
                }
            }
        },
    )
    schema.compile_all()

    for variant in schema.variants:
        print("\n" + "=" * 60)
        print(f"Variant: {variant}")
        print("=" * 60)
        print("\nPrompt fragment:")
        print(schema.render("Sentiment", variant=variant))

    completions = [
        "Good",
        "I'd say the customer sounds **positive**.",
        '{"sentiment": "bad"}',
        "Neutral",
        '["Good", "Bad"]',
    ]

    for variant in schema.variants:
        print("\n" + "=" * 60)
        print(f"Parsing under variant: {variant}")
        print("=" * 60)

        for completion in completions:
            result = schema.parse(completion, "Sentiment", variant=variant)
            print(f"\n{completion!r}")
            if result.is_success:
                print(f"  ✓ {to_python(result.value)}")
            else:
                print("  ✗ " + format_failure(result).replace("\n", "\n    "))

    result = schema.parse('["Good", "Bad"]', "Sentiment[]", variant="cheerful")
    print(f"\nAs a list: {to_python(result.value)}")


if __name__ == "__main__":
    main()
