"""Interactive chat REPL command."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import httpx
from rich.console import Console
from rich.live import Live
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Confirm, Prompt

from aetheria.chat.orchestrator import FAILURE_MARKER, ChatOrchestrator
from aetheria.chat.titles import TitleGenerator
from aetheria.config.loader import load_config
from aetheria.errors import AetheriaError
from aetheria.llm.gemini import GeminiClient
from aetheria.store.models import TOOL_FLAGS, AppState, Role, SessionSettings
from aetheria.store.persistence import LocalStorage
from aetheria.store.state import SessionStore

if TYPE_CHECKING:
    from aetheria.config.schema import AetheriaConfig
    from aetheria.voice.speech import SpeechService

console = Console()
logger = logging.getLogger(__name__)

CONNECT_TIMEOUT = 10.0


@dataclass
class ChatContext:
    """Mutable REPL state shared with slash commands."""

    store: SessionStore
    session_id: str
    defaults: SessionSettings
    persona_id: str


def chat_command(config_path: str | None = None) -> None:
    """Start interactive chat session.

    Args:
        config_path: Optional path to config file
    """
    path = Path(config_path) if config_path else None
    try:
        config = load_config(path)
    except Exception as e:
        console.print(f"[red]Failed to load config: {e}[/red]")
        console.print("Run [bold]aetheria init[/bold] to create a config file.")
        return

    store = SessionStore(storage=LocalStorage(config.client.storage_path))
    connection = store.state.active_connection
    engine = f"{connection.base_url} ({connection.model_id})" if connection else "not configured"

    console.print(
        Panel.fit(
            f"[bold blue]aetheria chat[/bold blue]\n"
            f"Engine: {engine}\n"
            f"Type /help for commands, /exit to quit",
            border_style="blue",
        )
    )
    if connection is None:
        console.print(
            "[yellow]No engine connection. Run [bold]aetheria init --engine URL[/bold].[/yellow]"
        )

    asyncio.run(_async_chat(config, store))


def _build_speech(config: AetheriaConfig) -> SpeechService | None:
    if not config.cloud.api_key:
        return None

    from aetheria.voice import AudioPlayer, GeminiTTS, SpeechService

    engine = GeminiTTS(
        api_key=config.cloud.api_key,
        model=config.voice.model,
        voice=config.voice.voice,
        base_url=config.cloud.base_url,
    )
    player = AudioPlayer() if config.voice.playback else None
    return SpeechService(engine, player)


def _session_defaults(config: AetheriaConfig) -> SessionSettings:
    return SessionSettings(
        temperature=config.defaults.temperature,
        top_p=config.defaults.top_p,
        max_tokens=config.defaults.max_tokens,
    )


def _persona_id(config: AetheriaConfig, state: AppState) -> str:
    if any(p.id == config.defaults.persona_id for p in state.personas):
        return config.defaults.persona_id
    return state.personas[0].id


async def _async_chat(config: AetheriaConfig, store: SessionStore) -> None:
    """Async chat loop.

    Args:
        config: Aetheria configuration
        store: Session store backed by local storage
    """
    titles = None
    if config.cloud.api_key:
        titles = TitleGenerator(
            GeminiClient(
                api_key=config.cloud.api_key,
                model=config.cloud.title_model,
                base_url=config.cloud.base_url,
                timeout=config.cloud.timeout,
            )
        )

    defaults = _session_defaults(config)
    persona_id = _persona_id(config, store.state)
    session = store.state.active_session
    if session is None:
        session = store.create_session(settings=defaults, persona_id=persona_id)

    ctx = ChatContext(
        store=store, session_id=session.id, defaults=defaults, persona_id=persona_id
    )

    timeout = httpx.Timeout(config.client.stream_timeout, connect=CONNECT_TIMEOUT)
    async with httpx.AsyncClient(base_url=config.client.server_url, timeout=timeout) as http:
        orchestrator = ChatOrchestrator(
            store, http, speech=_build_speech(config), titles=titles
        )

        while True:
            try:
                user_input = Prompt.ask("\n[bold cyan]You[/bold cyan]")

                if not user_input.strip():
                    continue

                if user_input.startswith("/"):
                    action = _handle_slash_command(user_input, ctx)
                    if action == "exit":
                        break
                    if action == "regen":
                        await _run_turn(orchestrator, ctx, None)
                    continue

                await _run_turn(orchestrator, ctx, user_input)

            except KeyboardInterrupt:
                console.print("\n[yellow]Interrupted[/yellow]")
                if Confirm.ask("Exit chat?", default=False):
                    break
            except EOFError:
                break
            except AetheriaError as e:
                console.print(f"\n[red]Error: {e}[/red]")

        await orchestrator.wait_for_background()

    console.print("\n[cyan]Goodbye![/cyan]")


async def _run_turn(orchestrator: ChatOrchestrator, ctx: ChatContext, text: str | None) -> None:
    """Send (or regenerate) and render the assistant message as it streams."""
    console.print("\n[bold green]aetheria[/bold green]")
    with Live(Markdown(""), console=console, refresh_per_second=12) as live:

        def render(new: AppState, old: AppState) -> None:
            session = new.find_session(ctx.session_id)
            if session and session.messages and session.messages[-1].role is Role.ASSISTANT:
                live.update(Markdown(session.messages[-1].content))

        unsubscribe = ctx.store.subscribe(render)
        try:
            if text is None:
                message = await orchestrator.regenerate(ctx.session_id)
            else:
                message = await orchestrator.send(ctx.session_id, text)
        finally:
            unsubscribe()

    if message is not None and message.content.startswith(FAILURE_MARKER):
        console.print(f"[red]{message.content}[/red]")

    # Input is read synchronously, so let speech and titles finish before prompting
    await orchestrator.wait_for_background()


def _handle_slash_command(command: str, ctx: ChatContext) -> str | None:
    """Handle slash commands.

    Args:
        command: Command string starting with /
        ctx: Current REPL state

    Returns:
        "exit" to leave the loop, "regen" to re-send, otherwise None
    """
    parts = command.strip().split(maxsplit=1)
    cmd = parts[0].lower()
    arg = parts[1].strip() if len(parts) > 1 else ""
    store = ctx.store

    if cmd in ("/exit", "/quit", "/q"):
        return "exit"

    elif cmd == "/help":
        console.print("\n[bold]Available commands:[/bold]")
        console.print("  /help              - Show this help")
        console.print("  /exit              - Exit chat")
        console.print("  /new               - Start a new conversation")
        console.print("  /sessions          - List conversations")
        console.print("  /persona ID        - Switch persona")
        console.print("  /framework ID|none - Apply or clear a reasoning framework")
        console.print("  /style ID|none     - Apply or clear a linguistic control")
        console.print(f"  /tool NAME         - Toggle a tool ({', '.join(TOOL_FLAGS)})")
        console.print("  /temp X            - Set temperature (0.0-2.0)")
        console.print("  /regen             - Regenerate the last response")

    elif cmd == "/new":
        session = store.create_session(settings=ctx.defaults, persona_id=ctx.persona_id)
        ctx.session_id = session.id
        console.print("[cyan]Started a new conversation[/cyan]")

    elif cmd == "/sessions":
        for session in store.state.sessions:
            marker = "*" if session.id == ctx.session_id else " "
            count = len(session.messages)
            console.print(f" {marker} {session.id}  {session.title}  ({count} msgs)")

    elif cmd == "/persona":
        _apply(store, ctx.session_id, "persona_id", arg, "Persona")

    elif cmd == "/framework":
        _apply(store, ctx.session_id, "framework_id", arg, "Framework")

    elif cmd == "/style":
        _apply(store, ctx.session_id, "linguistic_id", arg, "Style")

    elif cmd == "/tool":
        try:
            store.toggle_tool(ctx.session_id, arg)
        except KeyError:
            console.print(f"[red]Unknown tool '{arg}'. Choose from: {', '.join(TOOL_FLAGS)}[/red]")
            return None
        flag = TOOL_FLAGS[arg]
        state = "on" if getattr(store.get_session(ctx.session_id).settings, flag) else "off"
        console.print(f"[cyan]{arg}:[/cyan] {state}")

    elif cmd == "/temp":
        try:
            store.patch_settings(ctx.session_id, temperature=float(arg))
        except ValueError:
            console.print("[red]Usage: /temp 0.7[/red]")
            return None
        temp = store.get_session(ctx.session_id).settings.temperature
        console.print(f"[cyan]Temperature:[/cyan] {temp}")

    elif cmd == "/regen":
        return "regen"

    else:
        console.print(f"[yellow]Unknown command: {cmd}. Type /help.[/yellow]")

    return None


def _apply(store: SessionStore, session_id: str, field: str, preset_id: str, label: str) -> None:
    if not preset_id:
        console.print(f"[red]Usage: /{label.lower()} ID[/red]")
        return
    value = None if preset_id.lower() == "none" and field != "persona_id" else preset_id
    try:
        store.apply_presets(session_id, **{field: value})
    except KeyError as e:
        console.print(f"[red]{e}[/red]")
        return
    console.print(f"[cyan]{label}:[/cyan] {value or 'none'}")
