"""
Exception hierarchy.

Only configuration problems raise. Malformed LLM output never does: the
coercion engine reports it as a `Failure` result instead.
"""


class PromptShapeError(Exception):
    """Base class for all promptshape errors."""


class SchemaError(PromptShapeError, ValueError):
    """A type declaration is malformed, references an unknown type, or is cyclic."""


class ProfileError(PromptShapeError, ValueError):
    """
    Override declarations are inconsistent with the schema.

    Raised at profile compile time (schema-load time) for unknown targets,
    skip flags on class fields, and display-name collisions.
    """
