"""
Override document loading.

Override declarations arrive as a dict (usually read from JSON), keyed by
variant, then by type, then by canonical field or value name:

    ```json
    {
        "cheerful": {
            "Sentiment": {
                "Positive": {"rename": "Good", "description": "Upbeat tone"},
                "Neutral": {"skip": true}
            },
            "Person": {
                "age": {"rename": "years", "description": "age in whole years"}
            }
        }
    }
    ```

A bare string is shorthand for a rename: `{"Positive": "Good"}`.
"""

from typing import Any, Dict, List

from promptshape.errors import ProfileError
from promptshape.overrides.types import OverrideEntry
from promptshape.schema.parser import collect_document_errors

_ENTRY_SCHEMA: Dict[str, Any] = {
    "oneOf": [
        {"type": "string", "minLength": 1},
        {
            "type": "object",
            "properties": {
                "rename": {"type": "string", "minLength": 1},
                "description": {"type": "string"},
                "skip": {"type": "boolean"},
            },
            "additionalProperties": False,
        },
    ]
}

OVERRIDES_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": {
        "type": "object",
        "additionalProperties": {
            "type": "object",
            "additionalProperties": _ENTRY_SCHEMA,
        },
    },
}


def validate_overrides(document: Dict[str, Any]) -> None:
    """
    Check that an overrides document is well-formed.

    Only the document's shape is checked here; whether targets exist in the
    schema is checked when profiles are compiled.

    Raises:
        ProfileError: Listing every shape violation found
    """
    messages = collect_document_errors(document, OVERRIDES_SCHEMA)
    if messages:
        raise ProfileError("Invalid override declarations:\n  " + "\n  ".join(messages))


def load_overrides(document: Dict[str, Any]) -> Dict[str, Dict[str, List[OverrideEntry]]]:
    """
    Convert an overrides document into raw override entries.

    Args:
        document: Variant -> type -> target -> entry declaration

    Returns:
        Dict of variant -> type name -> list of OverrideEntry, in document order

    Raises:
        ProfileError: If the document is malformed
    """
    validate_overrides(document)

    result: Dict[str, Dict[str, List[OverrideEntry]]] = {}
    for variant, types in document.items():
        per_type: Dict[str, List[OverrideEntry]] = {}
        for type_name, targets in types.items():
            entries = []
            for target, declared in targets.items():
                if isinstance(declared, str):
                    entries.append(OverrideEntry(target=target, rename=declared))
                else:
                    entries.append(
                        OverrideEntry(
                            target=target,
                            rename=declared.get("rename"),
                            description=declared.get("description"),
                            skip=declared.get("skip", False),
                        )
                    )
            per_type[type_name] = entries
        result[variant] = per_type
    return result
