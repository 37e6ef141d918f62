"""Main CLI application using Typer."""

import logging
import sys

import typer
from rich.console import Console

from aetheria import __version__

app = typer.Typer(
    name="aetheria",
    help="Aetheria - Streaming chat client for self-hosted and cloud LLM backends",
    no_args_is_help=True,
)

console = Console()


def configure_logging(level: str = "INFO", verbose: bool = False) -> None:
    """Configure the root logger for CLI and server output."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.callback()
def main_options(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Aetheria command line."""
    from aetheria.config.loader import ConfigError, load_config

    try:
        level = load_config().logging.level
    except ConfigError:
        level = "INFO"
    configure_logging(level, verbose)


@app.command()
def version():
    """Show aetheria version."""
    console.print(f"aetheria version {__version__}")


@app.command()
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing config"),
    engine: str = typer.Option(
        None, "--engine", "-e", help="Base URL of an inference engine to configure"
    ),
    model: str = typer.Option(None, "--model", "-m", help="Model id to use on the engine"),
):
    """Write the default configuration and optionally set up an engine connection."""
    from aetheria.cli.init_cmd import init_command

    init_command(force=force, engine=engine, model=model)


@app.command()
def chat(
    config_path: str = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file (default: ~/.aetheria/aetheria.yaml)",
    ),
):
    """Start interactive chat session against the running server."""
    from aetheria.cli.chat import chat_command

    chat_command(config_path=config_path)


@app.command()
def start(
    config_path: str = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
    ),
    detach: bool = typer.Option(False, "--detach", "-d", help="Run server in background"),
):
    """Start aetheria API server."""
    from aetheria.cli.server_cmd import start_command

    start_command(config_path=config_path, detach=detach)


@app.command()
def stop():
    """Stop aetheria API server."""
    from aetheria.cli.server_cmd import stop_command

    stop_command()


@app.command()
def status():
    """Check aetheria server status."""
    from aetheria.cli.server_cmd import status_command

    status_command()


@app.command()
def probe(
    url: str = typer.Argument(..., help="Engine base URL (e.g. localhost:11434)"),
    api_key: str = typer.Option(None, "--api-key", "-k", help="Bearer token"),
):
    """Check whether an inference engine is reachable."""
    from aetheria.cli.engine_cmd import probe_command

    probe_command(url, api_key=api_key)


@app.command()
def models(
    url: str = typer.Argument(..., help="Engine base URL"),
    api_key: str = typer.Option(None, "--api-key", "-k", help="Bearer token"),
):
    """List an engine's models with capability tags."""
    from aetheria.cli.engine_cmd import models_command

    models_command(url, api_key=api_key)


@app.command()
def load(
    url: str = typer.Argument(..., help="Engine base URL"),
    model_id: str = typer.Argument(..., help="Model to load into memory"),
):
    """Ask an engine to load a model into memory."""
    from aetheria.cli.engine_cmd import load_command

    load_command(url, model_id)


def main():
    """Entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
