"""Shared console output for the jaskmoney CLI."""

import json
from typing import Any

from rich.console import Console
from rich.markup import escape

# Shared console instance for all CLI output
console = Console(color_system="auto")


def print_json(data: Any) -> None:
    """Print data as indented JSON on plain stdout, bypassing Rich markup."""
    print(json.dumps(data, indent=2, default=str))


def print_error(message: str) -> None:
    """Print ``message`` in red; brackets in it are shown literally."""
    console.print(f"[red]{escape(message)}[/red]")
