"""Lifecycle commands for the local streaming gateway."""

import os
import signal
import subprocess
import sys
from pathlib import Path

import httpx
from rich.console import Console

from aetheria.config.schema import AetheriaConfig

PID_FILE = Path.home() / ".aetheria" / "server.pid"
HEALTH_TIMEOUT = 3.0

console = Console()


def _write_pid(pid: int) -> None:
    PID_FILE.parent.mkdir(parents=True, exist_ok=True)
    PID_FILE.write_text(str(pid))


def _read_pid() -> int | None:
    """Return the recorded gateway PID, clearing the file when it is stale."""
    try:
        pid = int(PID_FILE.read_text().strip())
        os.kill(pid, 0)
    except FileNotFoundError:
        return None
    except (ValueError, ProcessLookupError, PermissionError):
        PID_FILE.unlink(missing_ok=True)
        return None
    return pid


def _uvicorn_argv(config: AetheriaConfig) -> list[str]:
    return [
        sys.executable,
        "-m",
        "uvicorn",
        "aetheria.server.asgi:app",
        f"--host={config.server.host}",
        f"--port={config.server.port}",
        f"--log-level={config.logging.level.lower()}",
    ]


def _describe_backends(config: AetheriaConfig) -> None:
    cloud = "configured" if config.cloud.api_key else "no API key"
    console.print(f"  Cloud ({config.cloud.model}): {cloud}")
    console.print(f"  Web grounding: up to {config.grounding.max_results} results per turn")


def _spawn_detached(config: AetheriaConfig) -> int:
    log_path = Path.home() / ".aetheria" / "server.log"
    log_path.parent.mkdir(parents=True, exist_ok=True)
    with log_path.open("a") as log_file:
        proc = subprocess.Popen(
            _uvicorn_argv(config),
            stdout=log_file,
            stderr=subprocess.STDOUT,
            start_new_session=True,
        )
    _write_pid(proc.pid)
    console.print(f"[green]Gateway running in background (PID {proc.pid})[/green]")
    console.print(f"  Log: {log_path}")
    return proc.pid


def _serve_foreground(config: AetheriaConfig) -> None:
    import uvicorn

    from aetheria.server.app import create_app

    app = create_app(config)
    _write_pid(os.getpid())
    console.print(
        f"[green]Gateway listening on http://{config.server.host}:{config.server.port}[/green]"
    )
    _describe_backends(config)
    console.print("Ctrl+C to stop")
    try:
        uvicorn.run(
            app,
            host=config.server.host,
            port=config.server.port,
            log_level=config.logging.level.lower(),
        )
    finally:
        PID_FILE.unlink(missing_ok=True)


def start_command(config_path: str | None = None, detach: bool = False) -> None:
    """Start the streaming gateway that serves /api/chat/stream.

    Args:
        config_path: Optional path to config file
        detach: Run the gateway as a background process
    """
    from aetheria.config.loader import load_config

    running = _read_pid()
    if running:
        console.print(f"[yellow]Gateway already running (PID {running}).[/yellow]")
        console.print("Use [bold]aetheria stop[/bold] before starting another.")
        return

    try:
        config = load_config(Path(config_path) if config_path else None)
    except Exception as e:
        console.print(f"[red]Failed to load config: {e}[/red]")
        console.print("Create one with [bold]aetheria init[/bold].")
        return

    if detach:
        _spawn_detached(config)
    else:
        _serve_foreground(config)


def stop_command() -> None:
    """Stop a gateway started by this machine's ``aetheria start``."""
    pid = _read_pid()
    if pid is None:
        console.print("[yellow]No gateway process recorded.[/yellow]")
        return

    try:
        os.kill(pid, signal.SIGTERM)
    except ProcessLookupError:
        console.print("[yellow]Gateway had already exited.[/yellow]")
    else:
        console.print(f"[green]Sent SIGTERM to gateway (PID {pid})[/green]")
    finally:
        PID_FILE.unlink(missing_ok=True)


def status_command() -> None:
    """Report whether the gateway the chat client talks to is healthy."""
    from aetheria.config.loader import load_config

    try:
        server_url = load_config().client.server_url.rstrip("/")
    except Exception:
        server_url = AetheriaConfig().client.server_url

    pid = _read_pid()
    try:
        health = httpx.get(f"{server_url}/health", timeout=HEALTH_TIMEOUT).json()
    except Exception:
        if pid:
            console.print(f"[yellow]PID {pid} recorded but {server_url} is not answering.[/yellow]")
        else:
            console.print(f"[yellow]No gateway at {server_url}.[/yellow]")
            console.print("Start one with [bold]aetheria start[/bold].")
        return

    console.print(f"[green]Gateway {health.get('status', 'unknown')}[/green] at {server_url}")
    console.print(f"  Version: {health.get('version', 'unknown')}")
    if pid:
        console.print(f"  PID:     {pid}")
