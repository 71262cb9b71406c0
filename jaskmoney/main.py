#!/usr/bin/env python3
"""
Main CLI entry point for jaskmoney
"""

import typer

from jaskmoney import __version__
from jaskmoney.commands.keybindings import app as keybindings_app
from jaskmoney.commands.palette import commands as palette_commands
from jaskmoney.utils.logging import setup_file_logging, setup_logging
from jaskmoney.utils.output import console

app = typer.Typer(help="jaskmoney - keyboard-driven personal finance", no_args_is_help=True)
app.add_typer(keybindings_app, name="keybindings", help="Manage and inspect keybindings")
app.command(name="commands")(palette_commands)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-error output"),
):
    """
    jaskmoney - keyboard-driven personal finance

    [bold]Examples:[/bold]

    Inspect keybindings:
        [cyan]jaskmoney keybindings --list --scope transactions[/cyan]

    Search the command palette:
        [cyan]jaskmoney commands budget[/cyan]

    Start the terminal UI:
        [cyan]jaskmoney tui[/cyan]
    """
    if verbose and quiet:
        typer.echo("Error: --verbose and --quiet are mutually exclusive", err=True)
        raise typer.Exit(1)
    setup_logging(verbose=verbose, quiet=quiet)


@app.command()
def version():
    """Show jaskmoney version"""
    typer.echo(f"jaskmoney version {__version__}")


@app.command()
def tui():
    """Start the keyboard router TUI."""
    from jaskmoney.ui.keybindings import KeybindingConfig
    from jaskmoney.ui.dispatch.dispatcher import Dispatcher
    from jaskmoney.ui.router_app import run_router_app

    log_file = setup_file_logging()
    try:
        run_router_app(Dispatcher.create(keybinding_config=KeybindingConfig()))
    except KeyboardInterrupt:
        pass
    except Exception as e:
        console.print(f"Error: {e} (see {log_file})", style="red")
        raise typer.Exit(1) from e


def run():
    """Entry point for the jaskmoney console script."""
    app()


if __name__ == "__main__":
    run()
