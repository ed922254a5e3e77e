"""CLI interface for conceptmap using Typer framework."""

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from conceptmap import __description__, __version__
from conceptmap.config import ConceptMapConfig, load_config
from conceptmap.diagnostics import create_error_collector
from conceptmap.diagram import create_generator
from conceptmap.diagram.mermaid import DEFAULT_TITLE
from conceptmap.models import Concept, ConceptGraph, load_graph
from conceptmap.reconcile import reconcile
from conceptmap.render import MermaidCliEngine, NodeGroup, RenderState, VisualTree
from conceptmap.view import ConceptMapView

app = typer.Typer(
    name="conceptmap",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()

LOG_LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"conceptmap version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, help="Show version and exit")
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable debug logging")
    ] = False,
) -> None:
    """conceptmap - Interactive mindmap diagrams for extracted concept graphs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _configure_logging(config: ConceptMapConfig) -> None:
    """Apply the configured level unless --verbose already asked for debug."""
    package_logger = logging.getLogger("conceptmap")
    if logging.getLogger().level != logging.DEBUG:
        package_logger.setLevel(LOG_LEVELS.get(config.logging.level, logging.INFO))


def _load_inputs(graph_file: Path, title: str | None) -> tuple[ConceptGraph, str]:
    """Load the concept graph, exiting with an error message on failure."""
    try:
        graph, file_title = load_graph(graph_file)
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    return graph, title or file_title or DEFAULT_TITLE


def _print_mapping(mapping: dict[NodeGroup, Concept], misses: list[str]) -> None:
    table = Table(title="Node to Concept Mapping")
    table.add_column("Group", style="cyan", no_wrap=True)
    table.add_column("Rendered Text", style="white")
    table.add_column("Concept", style="green")
    table.add_column("Type", style="blue")

    for group, concept in mapping.items():
        table.add_row(str(group.index), group.text, f"{concept.id}: {concept.label}", concept.type.value)

    console.print(table)
    if misses:
        console.print(f"[yellow]Unmatched groups:[/yellow] {len(misses)}")
        for text in misses:
            console.print(f"[dim]  - {text}[/dim]")


@app.command()
def generate(
    graph_file: Annotated[
        Path,
        typer.Argument(help="Concept graph JSON file")
    ],
    title: Annotated[
        str,
        typer.Option("--title", "-t", help="Diagram title (default: title from file or 'Mindmap')")
    ] = None,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Diagram format: mindmap, hierarchy (default: mindmap)")
    ] = "mindmap",
    out: Annotated[
        Path,
        typer.Option("--out", "-o", help="Output file path (default: stdout)")
    ] = None,
    config: Annotated[
        Path,
        typer.Option("--config", "-c", help="Configuration file path (default: search for .conceptmap.json)")
    ] = None,
) -> None:
    """Generate Mermaid diagram text from a concept graph."""
    graph, title = _load_inputs(graph_file, title)

    try:
        conceptmap_config = load_config(config)
        generator = create_generator(conceptmap_config)
        code = generator.render_diagram(graph, title, format)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if out is None:
        typer.echo(code)
        return

    with open(out, "w", encoding="utf-8") as f:
        f.write(code)
    console.print(f"[green]Diagram generated:[/green] {out}")


@app.command()
def render(
    graph_file: Annotated[
        Path,
        typer.Argument(help="Concept graph JSON file")
    ],
    title: Annotated[
        str,
        typer.Option("--title", "-t", help="Diagram title (default: title from file or 'Mindmap')")
    ] = None,
    out_dir: Annotated[
        Path,
        typer.Option("--out-dir", "-o", help="Directory for the exported SVG (default: current)")
    ] = Path("."),
    config: Annotated[
        Path,
        typer.Option("--config", "-c", help="Configuration file path (default: search for .conceptmap.json)")
    ] = None,
    timeout: Annotated[
        float,
        typer.Option("--timeout", help="Give up rendering after this many seconds")
    ] = None,
) -> None:
    """Render a concept graph with mermaid-cli and reconcile its labels."""
    graph, title = _load_inputs(graph_file, title)

    try:
        conceptmap_config = load_config(config)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    _configure_logging(conceptmap_config)

    if timeout is not None:
        render_config = conceptmap_config.render.model_copy(update={"timeout_seconds": timeout})
        conceptmap_config = conceptmap_config.model_copy(update={"render": render_config})

    collector = create_error_collector(out_dir, "render")
    engine = MermaidCliEngine(conceptmap_config.render, conceptmap_config.theme)
    view = ConceptMapView(
        engine,
        conceptmap_config,
        on_node_click=lambda concept: console.print(f"[blue]Clicked:[/blue] {concept.label}"),
        collector=collector,
    )

    console.print(f"[dim]Rendering '{title}' ({len(graph)} concepts)...[/dim]")
    result = asyncio.run(view.show(graph, title))

    if result.state == RenderState.FAILED:
        failure = result.failure
        console.print(f"[red]{failure.title}[/red]")
        console.print(f"[dim]{failure.hint}[/dim]")
        console.print(f"[red]Error details:[/red] {failure.detail}")
        diagnostics_file = collector.flush_to_filesystem()
        if diagnostics_file:
            console.print(f"[dim]Diagnostics written to {diagnostics_file}[/dim]")
        raise typer.Exit(1)

    if result.state != RenderState.READY:
        console.print(f"[yellow]Warning:[/yellow] Render {result.state.value}, nothing to export")
        raise typer.Exit(1)

    console.print(f"[green]OK[/green] Rendered {len(view.tree.groups)} groups")
    _print_mapping(view.mapping, view.misses)

    output_file = view.export(out_dir)
    console.print(f"[green]Diagram exported:[/green] {output_file}")

    collector.flush_to_filesystem()
    view.close()


@app.command("reconcile")
def reconcile_command(
    graph_file: Annotated[
        Path,
        typer.Argument(help="Concept graph JSON file")
    ],
    svg_file: Annotated[
        Path,
        typer.Argument(help="SVG previously rendered from the graph")
    ],
) -> None:
    """Map the labels of an already rendered SVG back to concepts."""
    graph, _ = _load_inputs(graph_file, None)

    if not svg_file.exists():
        console.print(f"[red]Error:[/red] SVG file not found: {svg_file}")
        raise typer.Exit(1)

    try:
        tree = VisualTree.from_svg(svg_file.read_bytes())
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    misses: list[str] = []
    mapping = reconcile(graph, tree, on_miss=lambda group, text: misses.append(text))
    _print_mapping(mapping, misses)


@app.command()
def help() -> None:
    """Show detailed help information."""
    console.print(f"[bold]{__description__}[/bold]")
    console.print(f"Version: {__version__}")
    console.print()

    table = Table(title="Available Commands")
    table.add_column("Command", style="cyan", no_wrap=True)
    table.add_column("Description", style="white")

    table.add_row("generate", "Concept graph -> Mermaid mindmap text")
    table.add_row("render", "Render with mermaid-cli, reconcile labels, export SVG")
    table.add_row("reconcile", "Map labels of an existing SVG back to concepts")
    table.add_row("help", "Show this help information")

    console.print(table)


if __name__ == "__main__":
    app()
