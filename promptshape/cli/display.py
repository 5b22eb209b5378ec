"""
Rich terminal display utilities for CLI.

Provides formatted output using the Rich library for:
- Rendered prompt fragments
- Syntax-highlighted parse results
- Parse failures and recovered warnings
- Override and cache statistics tables
"""

import json
from typing import Any, Dict, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from promptshape.coercion.error_formatter import suggest_fix
from promptshape.coercion.result import Failure
from promptshape.overrides.types import OverrideProfile


console = Console()


def print_header(title: str) -> None:
    """Print a formatted header."""
    console.print()
    console.print(f"[bold cyan]{escape(title)}[/bold cyan]")
    console.print("=" * len(title))
    console.print()


def print_success(message: str) -> None:
    """Print a success message with checkmark."""
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    """Print an error message with X mark."""
    console.print(f"[red]✗[/red] {escape(message)}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]⚠[/yellow] {escape(message)}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]ℹ[/blue] {message}")


def print_separator() -> None:
    """Print a visual separator line."""
    console.print("[dim]" + "─" * 70 + "[/dim]")


def print_json(data: Any, title: Optional[str] = None) -> None:
    """
    Print JSON data with syntax highlighting.

    Args:
        data: JSON-serializable data or JSON string
        title: Optional title for the panel
    """
    if isinstance(data, str):
        json_str = data
    else:
        json_str = json.dumps(data, indent=2, ensure_ascii=False)

    syntax = Syntax(json_str, "json", theme="monokai", line_numbers=False)

    if title:
        console.print(Panel(syntax, title=f"[bold]{escape(title)}[/bold]", border_style="cyan"))
    else:
        console.print(syntax)


def print_prompt(text: str, title: str = "Rendered Prompt") -> None:
    """Print a rendered prompt fragment verbatim inside a panel."""
    console.print(Panel(Text(text), title=f"[bold]{escape(title)}[/bold]", border_style="cyan"))


def print_failure(failure: Failure) -> None:
    """
    Print a parse failure with its location, offending text and a hint.

    Args:
        failure: Parse failure
    """
    table = Table(title="Parse Failure", show_header=False, title_style="bold red")
    table.add_column("Field", style="cyan", width=12)
    table.add_column("Value", style="white")

    table.add_row("Kind", Text(failure.kind.value, style="red bold"))
    table.add_row("Path", Text(failure.location))
    table.add_row("Problem", Text(failure.message))
    table.add_row("Raw text", Text(failure.raw_text.strip()[:200]))
    table.add_row("Hint", Text(suggest_fix(failure), style="yellow"))

    console.print()
    console.print(table)
    console.print()


def print_warnings(warnings: Sequence[Failure]) -> None:
    """
    Print recovered element failures in a formatted list.

    Args:
        warnings: Failures the parser recovered from
    """
    if not warnings:
        return

    console.print()
    console.print("[bold yellow]Recovered Problems:[/bold yellow]")
    for warning in warnings:
        console.print(f"  [yellow]•[/yellow] {escape(warning.location)}: {escape(warning.message)}")
    console.print()


def print_profile_table(profile: OverrideProfile, title: Optional[str] = None) -> None:
    """
    Print the overrides a profile applies.

    Args:
        profile: Compiled profile
        title: Table title (default: "Overrides (<variant>)")
    """
    table = Table(title=title or f"Overrides ({profile.variant})", show_header=True, header_style="bold cyan")
    table.add_column("Type", style="cyan")
    table.add_column("Target", style="white")
    table.add_column("Shown As", style="green")
    table.add_column("Description", style="dim")
    table.add_column("Skip", justify="center")

    for type_name, overrides in profile.tables.items():
        for target, entry in overrides.entries.items():
            table.add_row(
                type_name,
                target,
                entry.rename or target,
                entry.description or "",
                "[red]✓[/red]" if entry.skip else "",
            )

    console.print()
    console.print(table)
    console.print()


def print_resolver_stats(stats: Dict[str, Any]) -> None:
    """
    Print profile cache statistics in a table.

    Args:
        stats: Output of ProfileResolver.get_stats()
    """
    table = Table(title="Profile Cache", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="cyan", width=20)
    table.add_column("Value", style="white", width=30)

    table.add_row("Variants", ", ".join(stats["variants"]))
    table.add_row("Compiled Profiles", str(stats["num_entries"]))
    table.add_row("Cache Hits", str(stats["hits"]))
    table.add_row("Cache Misses", str(stats["misses"]))

    console.print()
    console.print(table)
    console.print()
