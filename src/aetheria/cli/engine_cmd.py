"""Engine inspection commands: probe, models, load."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from aetheria.config.loader import load_config
from aetheria.engine.capabilities import tag_model
from aetheria.engine.prober import ConnectionProber
from aetheria.engine.urls import normalize_base_url

console = Console()


def _prober() -> ConnectionProber:
    config = load_config()
    return ConnectionProber(
        probe_timeout=config.prober.probe_timeout,
        models_timeout=config.prober.models_timeout,
        load_timeout=config.prober.load_timeout,
    )


def probe_command(url: str, api_key: str | None = None) -> None:
    """Report whether an engine answers its model-listing endpoint."""
    online = asyncio.run(_prober().probe(url, api_key))
    target = normalize_base_url(url)
    if online:
        console.print(f"[green]✓[/green] {target} is online")
    else:
        console.print(f"[red]✗[/red] {target} is offline")
        raise typer.Exit(1)


def models_command(url: str, api_key: str | None = None) -> None:
    """Print an engine's models and their capability tags."""
    model_ids = asyncio.run(_prober().list_models(url, api_key))
    if not model_ids:
        console.print(f"[yellow]No models found at {normalize_base_url(url)}[/yellow]")
        raise typer.Exit(1)

    table = Table(title=f"Models at {normalize_base_url(url)}")
    table.add_column("Model", style="cyan")
    table.add_column("Capabilities")
    for model_id in model_ids:
        table.add_row(model_id, ", ".join(tag_model(model_id)))
    console.print(table)


def load_command(url: str, model_id: str) -> None:
    """Ask an engine to load a model."""
    with console.status(f"[bold green]Loading {model_id}...[/bold green]", spinner="dots"):
        loaded = asyncio.run(_prober().request_model_load(url, model_id))
    if loaded:
        console.print(f"[green]✓[/green] {model_id} loaded")
    else:
        console.print(f"[red]✗[/red] Engine did not accept the load request for {model_id}")
        raise typer.Exit(1)
