import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from notegraph.core.exceptions import DataUnavailableException
from notegraph.db.note_store import InMemoryNoteStore
from notegraph.models.graph import GraphData
from notegraph.models.layout import LayoutSettings
from notegraph.services.graph_query import apply_search_filter, get_connected_nodes
from notegraph.services.graph_service import GraphService
from notegraph.services.layout import distance_summary
from notegraph.services.link_parser import extract_outgoing_links, parse_links

cli_app = typer.Typer()
console = Console()

NOTES_FILE_HELP = "JSON array of notes (id, title, tags, outgoing_links)."

def _load_graph(notes_file: Path, user: str, seed: int | None, iterations: int) -> GraphData:
    store = InMemoryNoteStore.from_json_file(notes_file, user)
    service = GraphService(store)
    return asyncio.run(service.load_graph(user, LayoutSettings(iterations=iterations), seed=seed))

def _run(notes_file: Path, user: str, seed: int | None, iterations: int = 100) -> GraphData:
    try:
        return _load_graph(notes_file, user, seed, iterations)
    except DataUnavailableException as exc:
        console.print(f"[bold red]Error:[/bold red] {exc.message}")
        raise typer.Exit(code=1)

@cli_app.command()
def graph(
    notes_file: Path = typer.Argument(..., exists=True, dir_okay=False, help=NOTES_FILE_HELP),
    user: str = typer.Option("local", "--user", "-u", help="User the notes belong to."),
    seed: int | None = typer.Option(None, "--seed", "-s", help="Seed for a reproducible layout."),
    iterations: int = typer.Option(100, "--iterations", "-i", help="Simulation iterations."),
    as_json: bool = typer.Option(False, "--json", help="Print the laid-out graph as JSON."),
):
    """
    Builds the note graph, runs the layout and prints node positions.
    """
    graph_data = _run(notes_file, user, seed, iterations)

    if as_json:
        console.print(Syntax(json.dumps(graph_data.model_dump(mode="json"), indent=2), "json", theme="solarized-dark"))
        return

    table = Table(title=f"{len(graph_data.nodes)} notes, {len(graph_data.edges)} links")
    table.add_column("Id", style="cyan")
    table.add_column("Title")
    table.add_column("Links", justify="right")
    table.add_column("x", justify="right")
    table.add_column("y", justify="right")
    for node in sorted(graph_data.nodes, key=lambda n: -n.connection_count):
        table.add_row(node.id, node.title, str(node.connection_count), f"{node.x:.1f}", f"{node.y:.1f}")
    console.print(table)

    edge_mean, pair_mean = distance_summary(graph_data)
    console.print(f"[cyan]Mean link length {edge_mean:.1f}, mean unlinked distance {pair_mean:.1f}[/cyan]")

    if graph_data.unresolved_links:
        console.print("\n[yellow]Links to missing notes:[/yellow]")
        for link in graph_data.unresolved_links:
            console.print(f"- {link.source_id} -> [[{link.target_title}]]")

@cli_app.command()
def neighbors(
    notes_file: Path = typer.Argument(..., exists=True, dir_okay=False, help=NOTES_FILE_HELP),
    node_id: str = typer.Argument(..., help="Id of the note to expand from."),
    degrees: int = typer.Option(1, "--degrees", "-d", min=0, help="Hops to follow, in either direction."),
    user: str = typer.Option("local", "--user", "-u"),
):
    """Lists the notes within N links of a note."""
    graph_data = _run(notes_file, user, seed=0, iterations=0)
    connected = get_connected_nodes(node_id, graph_data, degrees)
    if not connected:
        console.print(f"[bold red]Error:[/bold red] Note {node_id} not found.")
        raise typer.Exit(code=1)
    for node in graph_data.nodes:
        if node.id in connected:
            console.print(f"- {node.id}: {node.title}")

@cli_app.command()
def search(
    notes_file: Path = typer.Argument(..., exists=True, dir_okay=False, help=NOTES_FILE_HELP),
    query: str = typer.Argument(..., help="Substring matched against titles and tags."),
    user: str = typer.Option("local", "--user", "-u"),
):
    """Highlights the notes whose title or tags contain the query."""
    graph_data = _run(notes_file, user, seed=0, iterations=0)
    matches = apply_search_filter(query, graph_data)
    console.print(f"[cyan]{len(matches)} match(es)[/cyan]")
    for node in graph_data.nodes:
        if node.id in matches:
            console.print(f"- {node.id}: {node.title} {node.tags}")

@cli_app.command()
def links(text: str = typer.Argument(..., help="Note body to scan for [[links]].")):
    """Shows the wiki links found in a piece of text."""
    for link in parse_links(text):
        console.print(f"{link.position:>5}  {link.raw_match}  -> [green]{link.target_title}[/green]")
    console.print(f"[cyan]Stored as outgoing links:[/cyan] {extract_outgoing_links(text)}")


if __name__ == "__main__":
    cli_app()
