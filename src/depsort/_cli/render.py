"""Rich rendering utilities for the depsort commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from rich.console import Console

    from depsort._manifest import GraphManifest


def render_node_table(manifest: GraphManifest, console: Console) -> None:
    """Render the nodes of a manifest as a Rich table.

    Args:
        manifest: Manifest whose nodes to render.
        console: Rich Console to output to.

    """
    if not manifest.nodes:
        console.print("[dim]Manifest declares no nodes[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Node", style="bold")
    table.add_column("Deps", justify="right")
    table.add_column("Description", style="dim")

    for key, node in manifest.nodes.items():
        table.add_row(
            escape(key),
            str(len(node.depends_on)),
            escape(node.description or ""),
        )

    console.print(table)
    console.print(f"\n[dim]Total: {len(manifest.nodes)} nodes[/dim]")


def render_problems(problems: list[str], console: Console) -> None:
    """Render validation problems as a bulleted list."""
    console.print(f"[red]✗ Found {len(problems)} problem(s):[/red]")
    for problem in problems:
        console.print(f"  [red]•[/red] {escape(problem)}")
