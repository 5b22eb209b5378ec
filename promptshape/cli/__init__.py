"""
Command-line interface module.

This module provides a rich terminal interface for promptshape using Typer and Rich.

Commands:
    - render: Render a type as prompt text under a variant
    - parse: Parse a model completion into a typed value
    - check: Compile every variant and report override errors

Example Usage:
    ```bash
    # Render the prompt fragment for a type
    promptshape render \\
        --schema schema.json \\
        --overrides overrides.json \\
        --variant cheerful \\
        --type "Review[]"

    # Parse a completion
    promptshape parse \\
        --schema schema.json \\
        --type Review \\
        --input completion.txt \\
        --output review.json

    # Fail fast on broken overrides (e.g. in CI)
    promptshape check --schema schema.json --overrides overrides.json
    ```
"""

from .main import app

__all__ = ["app"]
