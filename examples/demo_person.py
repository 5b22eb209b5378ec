#!/usr/bin/env python3
"""
Demo: Person records declared with pydantic models.

This demonstrates:
- Declaring output types as pydantic models and enums
- Field aliases and descriptions shown to the model
- Parsing a messy completion into a validated model instance
- Recovered problems reported as warnings
"""

import sys
from enum import Enum
from pathlib import Path
from typing import List, Optional

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pydantic import BaseModel, Field

from promptshape import PromptSchema
from promptshape.coercion import format_failures
from promptshape.schema import build_model


class Role(Enum):
    ENGINEER = "engineer"
    MANAGER = "manager"
    DESIGNER = "designer"


class Person(BaseModel):
    name: str = Field(description="full name")
    age: int = Field(alias="years", description="age in whole years")
    role: Role
    skills: List[str]
    email: Optional[str] = None


COMPLETION = """Sure, here are the people from the text:

```json
[
  {name: "Ada Lovelace", years: "36", role: "Engineer", skills: ["math", "poetry"],},
  {name: "Grace Hopper", years: 85, role: "the manager", skills: "COBOL"},
  {name: "Nobody", role: "intern", skills: []}
]
```
"""


def main():
    print("=" * 60)
    print("promptshape Demo: Person Records from Pydantic Models")
    print("=" * 60)

    schema = PromptSchema.from_models(Person)

    print("\nPrompt fragment:")
    print(schema.render("Person[]", inline_enums=True))

    print("\nCompletion:")
    print(COMPLETION)

    result = schema.parse(COMPLETION, "Person[]", path="people")
    if not result.is_success:
        print(f"✗ {result}")
        return

    print("=" * 60)
    print("Parsed People")
    print("=" * 60)
    for value in result.value:
        person = build_model(Person, value)
        print(f"✓ {person!r}")

    if result.warnings:
        print()
        print(format_failures(result.warnings))


if __name__ == "__main__":
    main()
