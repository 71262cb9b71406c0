"""Keybinding management commands for jaskmoney."""

from typing import Dict, List, Optional

import typer
from rich.markup import escape
from rich.table import Table

from jaskmoney.exceptions import KeybindingConfigError
from jaskmoney.ui.keybindings import (
    Binding,
    ConflictReport,
    ConflictSeverity,
    KeybindingConfig,
    KeyRegistry,
    Scope,
    build_default_registry,
)
from jaskmoney.utils.output import console, print_error, print_json

app = typer.Typer()


def _load_registry() -> KeyRegistry:
    """Defaults plus the user's file, as the TUI would see them."""
    registry = build_default_registry()
    report = KeybindingConfig().load_into(registry)
    if report.rejected:
        console.print(f"[yellow]Rejected {report.path}: {escape(report.error)}[/yellow]")
        console.print("[dim]The old file was moved aside and defaults restored.[/dim]")
    return registry


@app.callback(invoke_without_command=True)
def keybindings(
    ctx: typer.Context,
    list_all: bool = typer.Option(False, "--list", "-l", help="List all keybindings"),
    conflicts: bool = typer.Option(False, "--conflicts", "-c", help="Show keybinding conflicts"),
    scope: Optional[str] = typer.Option(None, "--scope", help="Filter by scope (e.g., transactions)"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """
    Manage and inspect keybindings.

    By default, shows a summary of keybindings and any conflicts.
    """
    if ctx.invoked_subcommand is not None:
        return

    registry = _load_registry()
    detected = registry.detect_conflicts()

    if json_output:
        print_json(registry.to_dict())
        return

    if conflicts:
        _show_conflicts(detected)
        return

    if list_all or scope:
        _show_all_bindings(registry, scope)
        return

    _show_summary(registry, detected)


def _show_summary(registry: KeyRegistry, conflicts: List[ConflictReport]) -> None:
    """Show keybinding summary."""
    summary = registry.summary()
    console.print("\n[bold]Keybinding Registry Summary[/bold]\n")

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="dim")
    table.add_column("Value", style="bold")

    table.add_row("Total bindings", str(summary["total_bindings"]))
    table.add_row("Bound keys", str(summary["bound_keys"]))
    table.add_row("Command bindings", str(summary["command_bindings"]))
    table.add_row("Scopes", str(summary["scopes"]))
    table.add_row("Conflicts", str(len(conflicts)))

    console.print(table)
    console.print()

    critical = sum(1 for c in conflicts if c.severity is ConflictSeverity.CRITICAL)
    info = len(conflicts) - critical
    if conflicts:
        console.print("[bold]Conflict breakdown:[/bold]")
        if critical > 0:
            console.print(f"  [red]Critical: {critical}[/red]")
        if info > 0:
            console.print(f"  [dim]Shadowing global: {info}[/dim]")
        console.print("\nRun [bold]jaskmoney keybindings --conflicts[/bold] to see details.")
    else:
        console.print("[green]No conflicts detected![/green]")

    console.print()


def _show_conflicts(conflicts: List[ConflictReport]) -> None:
    """Show keybinding conflicts."""
    if not conflicts:
        console.print("[green]No keybinding conflicts detected![/green]")
        return

    console.print(f"\n[bold]Keybinding Conflicts ({len(conflicts)})[/bold]\n")

    for severity in (ConflictSeverity.CRITICAL, ConflictSeverity.INFO):
        group = [c for c in conflicts if c.severity is severity]
        if not group:
            continue
        color = "red" if severity is ConflictSeverity.CRITICAL else "dim"
        console.print(f"[{color}][bold]{severity.value.upper()} ({len(group)})[/bold][/{color}]")

        table = Table(show_header=True, box=None)
        table.add_column("Key", style="bold")
        table.add_column("Scope")
        table.add_column("Shadowed")
        table.add_column("Bound to")
        table.add_column("Type", style="dim")

        for conflict in group[:20]:
            table.add_row(
                conflict.key,
                conflict.scope,
                f"{conflict.first.scope}.{conflict.first.action.value}",
                f"{conflict.second.scope}.{conflict.second.action.value}",
                conflict.conflict_type.value,
            )

        console.print(table)
        if len(group) > 20:
            console.print(f"  [dim]... and {len(group) - 20} more[/dim]")
        console.print()


def _show_all_bindings(registry: KeyRegistry, scope_filter: Optional[str]) -> None:
    """Show all keybindings, optionally filtered by scope."""
    scopes = registry.scopes()
    if scope_filter:
        if not registry.has_scope(scope_filter):
            console.print(f"[yellow]Unknown scope: {scope_filter}[/yellow]")
            console.print("Available scopes:")
            for name in scopes:
                console.print(f"  {name}")
            raise typer.Exit(1)
        scopes = [scope_filter]
        console.print(f"Filtered to scope: [bold]{scope_filter}[/bold]\n")

    by_scope: Dict[str, List[Binding]] = {name: registry.bindings_for_scope(name) for name in scopes}
    total = sum(len(items) for items in by_scope.values())
    console.print(f"\n[bold]All Keybindings ({total})[/bold]\n")

    for name, bindings in by_scope.items():
        console.print(f"[bold]{name}[/bold] ({len(bindings)} bindings)")

        table = Table(show_header=True, box=None, padding=(0, 1))
        table.add_column("Keys", style="bold", width=20)
        table.add_column("Action", width=24)
        table.add_column("Command", style="cyan", width=22)
        table.add_column("Help", style="dim")

        for binding in bindings:
            table.add_row(
                ", ".join(binding.keys),
                binding.action.value,
                binding.command_id or "",
                binding.help,
            )

        console.print(table)
        console.print()


@app.command()
def init():
    """Create the keybindings config file from the defaults."""
    config = KeybindingConfig()
    if config.config_path.exists():
        console.print(f"[yellow]Config file already exists at {config.config_path}[/yellow]")
        return
    path = config.write(build_default_registry())
    console.print(f"[green]Created keybindings config at {path}[/green]")


@app.command()
def reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
):
    """Overwrite the keybindings config file with the defaults."""
    config = KeybindingConfig()
    if config.config_path.exists() and not yes:
        typer.confirm(f"Overwrite {config.config_path} with default keybindings?", abort=True)
    path = config.reset_to_defaults()
    console.print(f"[green]Reset keybindings config at {path}[/green]")


@app.command()
def check():
    """Validate the keybindings config file without changing it."""
    config = KeybindingConfig()
    if not config.config_path.exists():
        console.print(f"[dim]No config file at {config.config_path}; defaults are in effect.[/dim]")
        return
    try:
        registry = config.check()
    except KeybindingConfigError as e:
        print_error(f"Invalid keybindings config: {e}")
        raise typer.Exit(1) from e

    critical = [c for c in registry.detect_conflicts() if c.severity is ConflictSeverity.CRITICAL]
    if critical:
        for conflict in critical:
            print_error(conflict.to_string())
        raise typer.Exit(1)
    console.print(f"[green]{config.config_path} is valid.[/green]")


@app.command()
def scopes():
    """List all keybinding scopes."""
    console.print("\n[bold]Available Keybinding Scopes[/bold]\n")

    overlays = [s for s in Scope if Scope.is_overlay(s)]
    others = [s for s in Scope if not Scope.is_overlay(s)]
    for title, group in (("tabs and panes", others), ("overlays", overlays)):
        console.print(f"[bold]{title}[/bold]")
        for scope in group:
            console.print(f"  {scope.value}")
        console.print()
