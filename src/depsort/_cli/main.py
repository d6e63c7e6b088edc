import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from depsort._errors import DependencySortError
from depsort._manifest import GraphManifest, ManifestError, check_manifest, load_manifest, order_manifest

from .config import ConfigError, DepsortConfig, get_config
from .render import render_node_table, render_problems

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Order nodes of a dependency graph."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger().setLevel(log_level)


def _load_config() -> DepsortConfig:
    try:
        return get_config()
    except ConfigError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e


def _load_manifest(path: Path | None, config: DepsortConfig) -> GraphManifest:
    """Load the manifest given on the command line, or the configured one.

    Exits with code 1 if no manifest is available or it cannot be loaded.
    """
    if path is None:
        path = config.manifest
    if path is None:
        err_console.print("[red]Error: No manifest given and no \\[tool.depsort].manifest configured[/red]")
        raise typer.Exit(code=1)

    logger.debug(f"Loading manifest from {path}")
    try:
        return load_manifest(path)
    except ManifestError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e


def _resolve_allow_cycles(flag: bool | None, manifest: GraphManifest, config: DepsortConfig) -> bool:
    """Pick the cycle policy: CLI flag, then manifest, then config, then True."""
    for candidate in (flag, manifest.allow_cycles, config.allow_cycles):
        if candidate is not None:
            return candidate
    return True


@app.command()
def order(
    manifest_path: Annotated[
        Path | None,
        typer.Argument(help="Path to the manifest TOML file (defaults to the one configured in pyproject.toml)"),
    ] = None,
    *,
    allow_cycles: Annotated[
        bool | None,
        typer.Option("--allow-cycles/--strict", help="Tolerate cycles, or fail on the first one"),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the order as a JSON array"),
    ] = False,
) -> None:
    """Print the manifest's nodes with dependencies first."""
    config = _load_config()
    manifest = _load_manifest(manifest_path, config)
    allow = _resolve_allow_cycles(allow_cycles, manifest, config)

    try:
        ordered = order_manifest(manifest, allow_cycles=allow)
    except DependencySortError as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    if as_json:
        typer.echo(json.dumps(ordered))
        return

    for key in ordered:
        typer.echo(key)


@app.command()
def check(
    manifest_path: Annotated[
        Path | None,
        typer.Argument(help="Path to the manifest TOML file (defaults to the one configured in pyproject.toml)"),
    ] = None,
) -> None:
    """Check a manifest for undeclared dependencies and cycles."""
    config = _load_config()
    manifest = _load_manifest(manifest_path, config)

    render_node_table(manifest, err_console)
    err_console.print()

    problems = check_manifest(manifest)
    if problems:
        render_problems(problems, err_console)
        raise typer.Exit(code=1)

    err_console.print("[green]✓ Dependency graph is valid[/green]")


def main() -> None:
    app()
