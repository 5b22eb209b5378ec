"""
CLI command implementations.

This module contains the business logic for each CLI command:
- render: Render a type as prompt text
- parse: Parse a model completion against a type
- check: Compile every variant of a schema
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.markup import escape

from promptshape.api import PromptSchema
from promptshape.coercion.coercer import ParseOptions
from promptshape.coercion.result import to_python
from promptshape.errors import PromptShapeError
from promptshape.overrides.resolver import compile_profile

from .display import (
    console,
    print_failure,
    print_header,
    print_info,
    print_json,
    print_error,
    print_profile_table,
    print_prompt,
    print_resolver_stats,
    print_separator,
    print_success,
    print_warning,
    print_warnings,
)


def load_json_file(path: Path, what: str = "JSON") -> Dict[str, Any]:
    """
    Load and parse a JSON document.

    Args:
        path: Path to the JSON file
        what: What the file holds, for error messages

    Returns:
        Parsed dictionary

    Raises:
        ValueError: If the file doesn't exist or isn't valid JSON
    """
    if not path.exists():
        raise ValueError(f"{what} file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {what} file: {e}")


def load_schema(schema_path: Path, overrides_path: Optional[Path], quiet: bool = False) -> PromptSchema:
    """
    Load declarations and overrides into a PromptSchema, exiting on error.

    Args:
        schema_path: Path to the declaration document
        overrides_path: Optional path to the overrides document
        quiet: Suppress progress messages
    """
    try:
        declarations = load_json_file(schema_path, "schema")
        overrides = load_json_file(overrides_path, "overrides") if overrides_path else None
        schema = PromptSchema.from_documents(declarations, overrides)
    except (ValueError, PromptShapeError) as e:
        print_error(f"Failed to load schema: {e}")
        raise SystemExit(1)

    if not quiet:
        print_success(f"Loaded {len(schema.registry)} types from: {escape(str(schema_path))}")
        if overrides_path:
            print_success(f"Loaded variants {escape(', '.join(schema.variants))} from: {escape(str(overrides_path))}")
    return schema


def render_command(
    schema_path: Path,
    type_name: str,
    overrides_path: Optional[Path],
    variant: str,
    inline_enums: bool,
    plain: bool,
) -> None:
    """
    Execute the render command.

    Args:
        schema_path: Path to the declaration document
        type_name: Type expression to render
        overrides_path: Optional path to the overrides document
        variant: Variant to render under
        inline_enums: Render enums inside shapes as their alternatives
        plain: Print only the rendered text, for piping
    """
    if not plain:
        print_header("promptshape - Render")
    schema = load_schema(schema_path, overrides_path, quiet=plain)

    try:
        text = schema.render(type_name, variant=variant, inline_enums=inline_enums)
    except PromptShapeError as e:
        print_error(f"Render failed: {e}")
        raise SystemExit(1)

    if plain:
        typer.echo(text)
        return

    print_separator()
    print_info(f"Type: [bold]{escape(type_name)}[/bold]")
    print_info(f"Variant: [bold]{escape(variant)}[/bold]")
    print_prompt(text)
    print_profile_table(schema.resolve_profile(type_name, variant))


def parse_command(
    schema_path: Path,
    type_name: str,
    text: Optional[str],
    input_path: Optional[Path],
    overrides_path: Optional[Path],
    variant: str,
    allow_substring: bool,
    root_path: str,
    output_path: Optional[Path],
) -> None:
    """
    Execute the parse command.

    Args:
        schema_path: Path to the declaration document
        type_name: Type expression to parse as
        text: Completion text given on the command line
        input_path: File holding the completion text
        overrides_path: Optional path to the overrides document
        variant: Variant the prompt was rendered with
        allow_substring: Accept enum names found inside longer text
        root_path: Name of the root value in failure paths
        output_path: Optional path to save the parsed value as JSON
    """
    print_header("promptshape - Parse")
    schema = load_schema(schema_path, overrides_path)

    if input_path is not None:
        if not input_path.exists():
            print_error(f"Input file not found: {input_path}")
            raise SystemExit(1)
        raw_text = input_path.read_text(encoding="utf-8")
    elif text is not None:
        raw_text = text
    else:
        print_error("No completion provided. Use --text or --input")
        raise SystemExit(1)

    options = ParseOptions(allow_substring_match=allow_substring)

    try:
        result = schema.parse(raw_text, type_name, variant=variant, options=options, path=root_path)
    except PromptShapeError as e:
        print_error(f"Parse failed: {e}")
        raise SystemExit(1)

    console.print()
    if not result.is_success:
        print_error("Output could not be parsed")
        print_failure(result)
        raise SystemExit(1)

    value = to_python(result.value)
    print_success("Parsed successfully")
    print_json(value, title=f"{type_name} ({variant})")
    print_warnings(result.warnings)

    if output_path:
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, "w", encoding="utf-8") as f:
                json.dump(value, f, indent=2, ensure_ascii=False)
            print_success(f"Output saved to: {escape(str(output_path))}")
        except OSError as e:
            print_warning(f"Failed to save output: {e}")


def check_command(schema_path: Path, overrides_path: Optional[Path], show_overrides: bool) -> None:
    """
    Execute the check command: compile every (type, variant) profile.

    Args:
        schema_path: Path to the declaration document
        overrides_path: Optional path to the overrides document
        show_overrides: Print the override table of each variant
    """
    print_header("promptshape - Check")
    schema = load_schema(schema_path, overrides_path)

    print_separator()
    print_info("Compiling profiles...")

    try:
        count = schema.compile_all()
    except PromptShapeError as e:
        print_error(f"Invalid overrides: {e}")
        raise SystemExit(1)

    print_success(f"All {count} profiles compiled")

    if show_overrides:
        for variant in schema.variants:
            profile = compile_profile(schema.registry, schema.resolver.overrides[variant], variant=variant)
            print_profile_table(profile)

    print_resolver_stats(schema.resolver.get_stats())
