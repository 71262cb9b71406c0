"""Inspect the command palette from the shell."""

from typing import Dict, Optional

import typer
from rich.table import Table

from jaskmoney.ui.command_palette.default_commands import build_command_registry
from jaskmoney.ui.dispatch.effects import LoggingDomain
from jaskmoney.ui.dispatch.state import AppState
from jaskmoney.ui.keybindings import KeybindingConfig, KeyRegistry, Scope, build_default_registry
from jaskmoney.utils.output import console, print_error, print_json


def _command_keys(registry: KeyRegistry) -> Dict[str, str]:
    """command id -> first key bound to it, searching every scope."""
    keys: Dict[str, str] = {}
    for scope in registry.scopes():
        for binding in registry.bindings_for_scope(scope):
            if binding.command_id and binding.keys:
                keys.setdefault(binding.command_id, binding.keys[0])
    return keys


def commands(
    query: Optional[str] = typer.Argument(None, help="Fuzzy query, as typed into the palette"),
    scope: str = typer.Option(Scope.GLOBAL.value, "--scope", "-s", help="Scope the palette is opened from"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Search palette commands the way ctrl+k does."""
    if not Scope.is_known(scope):
        print_error(f"Unknown scope: {scope}")
        raise typer.Exit(1)

    keys = build_default_registry()
    KeybindingConfig().load_into(keys)
    registry = build_command_registry(LoggingDomain(), keys)
    matches = registry.search(query or "", scope, AppState())
    bound = _command_keys(keys)

    if json_output:
        print_json(
            [
                {
                    "id": m.command.id,
                    "label": m.command.label,
                    "category": m.command.category,
                    "score": m.score,
                    "enabled": m.enabled,
                    "disabled_reason": m.disabled_reason,
                    "key": bound.get(m.command.id, ""),
                }
                for m in matches
            ]
        )
        return

    if not matches:
        console.print(f"[yellow]No commands match {query!r} in {scope}[/yellow]")
        return

    table = Table(title=f"Commands in {scope}", show_header=True)
    table.add_column("Key", style="bold", width=10)
    table.add_column("Command", style="cyan")
    table.add_column("Label")
    table.add_column("Category", style="dim")
    table.add_column("Score", justify="right")

    for match in matches:
        label = match.command.label
        if not match.enabled:
            label = f"[dim]{label} ({match.disabled_reason})[/dim]"
        table.add_row(bound.get(match.command.id, ""), match.command.id, label, match.command.category, str(match.score))

    console.print(table)
