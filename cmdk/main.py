#!/usr/bin/env python3
"""
Main CLI entry point for cmdk
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.table import Table

from cmdk import __version__
from cmdk.catalogue import command_to_dict, load_catalogue_file, sample_catalogue
from cmdk.config.palette_config import load_palette_options
from cmdk.error_handling import CmdkError, handle_error, setup_logging, warn_user
from cmdk.ui.command_palette import CatalogueStore, Command, Group, rank_commands
from cmdk.utils.output import console, print_json

app = typer.Typer(
    help="cmdk - keyboard-driven command palette",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-error output"),
):
    """
    cmdk - keyboard-driven command palette

    [bold]Examples:[/bold]

    Rank a catalogue for a query:
        [cyan]cmdk search "open" --catalogue commands.json[/cyan]

    Check a catalogue for duplicate ids and unknown groups:
        [cyan]cmdk validate commands.json[/cyan]

    Try the palette interactively:
        [cyan]cmdk demo --recent settings,home[/cyan]
    """
    if verbose and quiet:
        typer.echo("Error: --verbose and --quiet are mutually exclusive", err=True)
        raise typer.Exit(1)
    setup_logging(verbose=verbose, quiet=quiet)


def _load(catalogue: Optional[Path]) -> tuple[List[Command], List[Group]]:
    if catalogue is None:
        return sample_catalogue()
    return load_catalogue_file(catalogue)


def _split_ids(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


@app.command()
def search(
    query: str = typer.Argument("", help="Query text; empty shows the grouped view"),
    catalogue: Optional[Path] = typer.Option(
        None, "--catalogue", "-c", help="Catalogue JSON file (defaults to the built-in sample)"
    ),
    recent: Optional[str] = typer.Option(
        None, "--recent", "-r", help="Comma-separated recent command ids, most recent first"
    ),
    subsequence: bool = typer.Option(
        False, "--subsequence", "-s", help="Also match label characters in order"
    ),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Show the ranked palette results for a query."""
    try:
        commands, groups = _load(catalogue)
    except CmdkError as e:
        handle_error(e, "search")
        return

    options = load_palette_options()
    store = CatalogueStore(commands, groups)
    results = rank_commands(
        query,
        store,
        _split_ids(recent),
        max_recent=options.max_recent,
        subsequence_matching=subsequence or options.subsequence_matching,
    )

    if json_output:
        print_json(
            {
                "query": query,
                "sections": [
                    {
                        "id": section.id,
                        "label": section.label,
                        "commands": [command_to_dict(c) for c in section.commands],
                    }
                    for section in results.sections
                ],
            }
        )
        return

    if not results.items:
        console.print(f"[dim]{options.empty_state_text}[/dim]")
        return

    table = Table(show_header=True, header_style="bold", box=None)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Section", style="cyan")
    table.add_column("Command")
    table.add_column("Description", style="dim")
    table.add_column("Shortcut")

    position = 0
    for section in results.sections:
        for command in section.commands:
            position += 1
            label = f"[dim strike]{command.label}[/dim strike]" if command.disabled else command.label
            table.add_row(
                str(position),
                section.label,
                label,
                command.description or "",
                " ".join(command.shortcut) if options.show_shortcut_hints else "",
            )

    console.print(table)


@app.command()
def validate(
    catalogue: Path = typer.Argument(..., help="Catalogue JSON file"),
):
    """Report duplicate ids and unknown group references in a catalogue."""
    try:
        commands, groups = load_catalogue_file(catalogue)
    except CmdkError as e:
        handle_error(e, "validate")
        return

    store = CatalogueStore(commands, groups)
    if not store.anomalies:
        console.print(
            f"[green]✓[/green] {len(store)} commands, {len(store.groups)} groups, no problems found"
        )
        return

    table = Table(title="Catalogue anomalies", show_header=True, header_style="bold")
    table.add_column("Kind", style="yellow")
    table.add_column("Id")
    table.add_column("Detail", style="dim")
    for anomaly in store.anomalies:
        table.add_row(anomaly.kind.value, anomaly.item_id, anomaly.detail)
    console.print(table)
    warn_user(
        f"{len(store.anomalies)} catalogue problem(s) were normalized",
        suggestion="Give every command a unique id and declare the groups it references.",
    )


@app.command()
def demo(
    catalogue: Optional[Path] = typer.Option(
        None, "--catalogue", "-c", help="Catalogue JSON file (defaults to the built-in sample)"
    ),
    recent: Optional[str] = typer.Option(
        None, "--recent", "-r", help="Comma-separated recent command ids, most recent first"
    ),
):
    """Open the palette in the terminal and print the chosen command."""
    from cmdk.ui.palette_app import PaletteDemoApp

    try:
        commands, groups = _load(catalogue)
    except CmdkError as e:
        handle_error(e, "demo")
        return

    selected = PaletteDemoApp(commands, groups, _split_ids(recent), load_palette_options()).run()
    if selected is None:
        console.print("[dim]No command selected[/dim]")
    else:
        console.print(f"Selected: [bold]{selected.label}[/bold] ({selected.id})")


@app.command()
def version():
    """Show cmdk version"""
    typer.echo(f"cmdk version {__version__}")


def run():
    """Entry point for the CLI"""
    app()


if __name__ == "__main__":
    run()
