"""Initialize command - config generation and first engine connection."""

import asyncio

import typer
from rich.console import Console
from rich.panel import Panel

from aetheria.config.loader import DEFAULT_CONFIG_PATH, save_config
from aetheria.config.schema import AetheriaConfig
from aetheria.engine.prober import ConnectionProber
from aetheria.engine.urls import normalize_base_url
from aetheria.store.persistence import LocalStorage
from aetheria.store.state import SessionStore

console = Console()


def init_command(force: bool = False, engine: str | None = None, model: str | None = None) -> None:
    """Initialize aetheria configuration.

    Args:
        force: Overwrite existing config if present
        engine: Optional engine base URL to register as the primary connection
        model: Optional model id (defaults to the engine's first model)
    """
    console.print(
        Panel.fit(
            "[bold blue]aetheria initialization[/bold blue]\n"
            "Writing configuration and checking your inference engine...",
            border_style="blue",
        )
    )

    if DEFAULT_CONFIG_PATH.exists() and not force:
        console.print(f"\n[yellow]Config already exists at {DEFAULT_CONFIG_PATH}[/yellow]")
        console.print(
            "Use [bold]--force[/bold] to overwrite, or [bold]aetheria chat[/bold] to use it."
        )
        raise typer.Exit(0)

    config = AetheriaConfig()
    path = save_config(config)
    console.print(f"\n[green]✓ Configuration saved to {path}[/green]")

    if engine:
        asyncio.run(_setup_engine(config, engine, model))

    console.print("\n[bold cyan]Setup Complete![/bold cyan]")
    console.print("\nNext steps:")
    console.print("  1. Start the server: [bold]aetheria start[/bold]")
    console.print("  2. Chat: [bold]aetheria chat[/bold]")


async def _setup_engine(config: AetheriaConfig, engine: str, model: str | None) -> None:
    """Probe the engine and record it as the primary connection."""
    base_url = normalize_base_url(engine)
    prober = ConnectionProber(
        probe_timeout=config.prober.probe_timeout,
        models_timeout=config.prober.models_timeout,
        load_timeout=config.prober.load_timeout,
    )

    console.print(f"\n[cyan]Checking engine at {base_url}...[/cyan]")
    models = await prober.list_models(base_url)
    if models:
        console.print(f"  [green]✓[/green] Engine is online ({len(models)} models)")
        console.print(f"  Available models: {', '.join(models[:5])}")
    else:
        console.print("  [yellow]Engine did not answer or lists no models[/yellow]")

    model_id = model or (models[0] if models else "")
    if not model_id:
        console.print("  [yellow]→[/yellow] Re-run with [bold]--model[/bold] to pick a model")
        return

    store = SessionStore(storage=LocalStorage(config.client.storage_path))
    store.complete_initial_setup(base_url, model_id)
    console.print(f"  [green]✓[/green] Primary connection: {base_url} ({model_id})")
