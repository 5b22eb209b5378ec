"""
Main CLI entry point using Typer.

This module defines the command-line interface for promptshape using Typer.
It provides three commands: render, parse, and check.
"""

from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from promptshape.overrides.types import DEFAULT_VARIANT
from promptshape.utils import setup_logging

from .commands import check_command, parse_command, render_command
from .display import console, print_error


app = typer.Typer(
    name="promptshape",
    help="promptshape - Typed prompt schemas with a forgiving output parser",
    add_completion=False,
    rich_markup_mode="rich"
)

SchemaOption = Annotated[
    Path,
    typer.Option("--schema", "-s", help="Path to schema declarations (JSON)", exists=True, file_okay=True, dir_okay=False)
]
OverridesOption = Annotated[
    Optional[Path],
    typer.Option("--overrides", "-o", help="Path to override declarations (JSON)", exists=True, file_okay=True, dir_okay=False)
]
VariantOption = Annotated[
    str,
    typer.Option("--variant", "-V", help="Variant whose overrides apply")
]


@app.command("render")
def render(
    schema: SchemaOption,
    type_name: Annotated[
        str,
        typer.Option("--type", "-t", help="Type expression to render, e.g. Person or Sentiment[]")
    ],
    overrides: OverridesOption = None,
    variant: VariantOption = DEFAULT_VARIANT,
    inline_enums: Annotated[
        bool,
        typer.Option("--inline-enums", help="Render enums inside objects as their alternatives")
    ] = False,
    plain: Annotated[
        bool,
        typer.Option("--plain", help="Print only the rendered text")
    ] = False,
) -> None:
    """
    Render a type as prompt text.

    Example:
        promptshape render --schema schema.json --type Person \\
            --overrides overrides.json --variant cheerful
    """
    try:
        render_command(
            schema_path=schema,
            type_name=type_name,
            overrides_path=overrides,
            variant=variant,
            inline_enums=inline_enums,
            plain=plain
        )
    except Exception as e:
        print_error(f"Command failed: {e}")
        raise typer.Exit(code=1)


@app.command("parse")
def parse(
    schema: SchemaOption,
    type_name: Annotated[
        str,
        typer.Option("--type", "-t", help="Type expression to parse as")
    ],
    text: Annotated[
        Optional[str],
        typer.Option("--text", help="Model completion text")
    ] = None,
    input_file: Annotated[
        Optional[Path],
        typer.Option("--input", "-i", help="File holding the model completion", file_okay=True, dir_okay=False)
    ] = None,
    overrides: OverridesOption = None,
    variant: VariantOption = DEFAULT_VARIANT,
    substring: Annotated[
        bool,
        typer.Option("--substring/--no-substring", help="Accept enum values found inside longer text")
    ] = True,
    root: Annotated[
        str,
        typer.Option("--root", help="Name of the root value in failure paths")
    ] = "",
    output: Annotated[
        Optional[Path],
        typer.Option("--output", help="Path to save the parsed value as JSON")
    ] = None,
) -> None:
    """
    Parse a model completion against a type.

    Example:
        promptshape parse --schema schema.json --type Person \\
            --text '{name: "Jo", age: 5,}'
    """
    try:
        parse_command(
            schema_path=schema,
            type_name=type_name,
            text=text,
            input_path=input_file,
            overrides_path=overrides,
            variant=variant,
            allow_substring=substring,
            root_path=root,
            output_path=output
        )
    except Exception as e:
        print_error(f"Command failed: {e}")
        raise typer.Exit(code=1)


@app.command("check")
def check(
    schema: SchemaOption,
    overrides: OverridesOption = None,
    show_overrides: Annotated[
        bool,
        typer.Option("--show-overrides", help="Print the override table of each variant")
    ] = False,
) -> None:
    """
    Compile every variant and report override errors.

    Example:
        promptshape check --schema schema.json --overrides overrides.json
    """
    try:
        check_command(
            schema_path=schema,
            overrides_path=overrides,
            show_overrides=show_overrides
        )
    except Exception as e:
        print_error(f"Command failed: {e}")
        raise typer.Exit(code=1)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit")
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log resolver and parser activity")
    ] = False,
) -> None:
    """
    promptshape - Typed prompt schemas with a forgiving output parser.

    Renders declared types into prompt text and parses model output back.
    """
    if version:
        from promptshape import __version__
        typer.echo(f"promptshape version {__version__}")
        raise typer.Exit()

    setup_logging(level="DEBUG" if verbose else "WARNING", console=console)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def cli() -> None:
    """CLI entry point for the console script."""
    app()


if __name__ == "__main__":
    cli()
