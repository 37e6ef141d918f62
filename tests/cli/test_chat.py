"""Tests for CLI chat command."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from httpx import Response

from aetheria.chat.orchestrator import ChatOrchestrator
from aetheria.cli.chat import (
    ChatContext,
    _async_chat,
    _build_speech,
    _handle_slash_command,
    _persona_id,
    _run_turn,
    _session_defaults,
    chat_command,
)
from aetheria.config.schema import AetheriaConfig
from aetheria.store.models import SessionSettings
from aetheria.store.state import SessionStore
from aetheria.voice.speech import SpeechService


@pytest.fixture
def ctx(store: SessionStore) -> ChatContext:
    session = store.create_session()
    return ChatContext(
        store=store, session_id=session.id, defaults=SessionSettings(), persona_id="scholar"
    )


def _printed(mock_console: MagicMock) -> str:
    return " ".join(str(c) for c in mock_console.print.call_args_list)


class TestHandleSlashCommand:
    """Test _handle_slash_command dispatch."""

    @pytest.mark.parametrize("command", ["/exit", "/quit", "/q", "/EXIT"])
    def test_exit_aliases(self, ctx, command):
        """Test exit commands signal the loop to stop."""
        with patch("aetheria.cli.chat.console"):
            assert _handle_slash_command(command, ctx) == "exit"

    def test_help(self, ctx):
        """Test /help lists commands."""
        with patch("aetheria.cli.chat.console") as mock_console:
            assert _handle_slash_command("/help", ctx) is None
        assert "Available commands" in _printed(mock_console)
        assert "webSearch" in _printed(mock_console)

    def test_new_switches_session(self, ctx):
        """Test /new creates and selects a fresh session."""
        old = ctx.session_id
        with patch("aetheria.cli.chat.console"):
            _handle_slash_command("/new", ctx)

        assert ctx.session_id != old
        assert ctx.store.state.active_session_id == ctx.session_id

    def test_sessions_lists_titles(self, ctx):
        ctx.store.set_title(ctx.session_id, "Packet Loss")
        with patch("aetheria.cli.chat.console") as mock_console:
            _handle_slash_command("/sessions", ctx)
        assert "Packet Loss" in _printed(mock_console)

    def test_persona(self, ctx):
        with patch("aetheria.cli.chat.console"):
            _handle_slash_command("/persona infosec", ctx)
        assert ctx.store.get_session(ctx.session_id).persona_id == "infosec"

    def test_unknown_persona_reported(self, ctx):
        with patch("aetheria.cli.chat.console") as mock_console:
            _handle_slash_command("/persona nobody", ctx)
        assert "Unknown persona: nobody" in _printed(mock_console)
        assert ctx.store.get_session(ctx.session_id).persona_id == "scholar"

    def test_framework_apply_and_clear(self, ctx):
        with patch("aetheria.cli.chat.console"):
            _handle_slash_command("/framework stride", ctx)
            assert ctx.store.get_session(ctx.session_id).framework_id == "stride"
            _handle_slash_command("/framework none", ctx)
        assert ctx.store.get_session(ctx.session_id).framework_id is None

    def test_style_json_sets_format(self, ctx):
        with patch("aetheria.cli.chat.console"):
            _handle_slash_command("/style structured_json", ctx)
        assert ctx.store.get_session(ctx.session_id).settings.format == "json"

    def test_missing_argument_shows_usage(self, ctx):
        with patch("aetheria.cli.chat.console") as mock_console:
            _handle_slash_command("/framework", ctx)
        assert "Usage" in _printed(mock_console)

    def test_tool_toggle(self, ctx):
        with patch("aetheria.cli.chat.console") as mock_console:
            _handle_slash_command("/tool webSearch", ctx)
        assert ctx.store.get_session(ctx.session_id).settings.web_search_enabled
        assert "on" in _printed(mock_console)

    def test_unknown_tool(self, ctx):
        with patch("aetheria.cli.chat.console") as mock_console:
            assert _handle_slash_command("/tool teleport", ctx) is None
        assert "Unknown tool" in _printed(mock_console)

    def test_temperature_is_clamped(self, ctx):
        with patch("aetheria.cli.chat.console"):
            _handle_slash_command("/temp 5", ctx)
        assert ctx.store.get_session(ctx.session_id).settings.temperature == 2.0

    def test_temperature_usage(self, ctx):
        with patch("aetheria.cli.chat.console") as mock_console:
            _handle_slash_command("/temp warm", ctx)
        assert "Usage" in _printed(mock_console)

    def test_regen(self, ctx):
        with patch("aetheria.cli.chat.console"):
            assert _handle_slash_command("/regen", ctx) == "regen"

    def test_unknown_command(self, ctx):
        with patch("aetheria.cli.chat.console") as mock_console:
            assert _handle_slash_command("/dance", ctx) is None
        assert "Unknown command" in _printed(mock_console)


class TestHelpers:
    def test_session_defaults_from_config(self):
        config = AetheriaConfig()
        config.defaults.temperature = 0.3

        settings = _session_defaults(config)

        assert settings.temperature == 0.3
        assert settings.max_tokens == config.defaults.max_tokens

    def test_persona_id_falls_back_to_first(self, store):
        config = AetheriaConfig()
        config.defaults.persona_id = "missing"

        assert _persona_id(config, store.state) == "scholar"

    def test_no_speech_without_key(self):
        config = AetheriaConfig()
        config.cloud.api_key = None

        assert _build_speech(config) is None

    def test_speech_with_key(self):
        config = AetheriaConfig()
        config.cloud.api_key = "k"
        config.voice.playback = False

        speech = _build_speech(config)

        assert isinstance(speech, SpeechService)
        assert speech.player is None


class TestChatLoop:
    @pytest.mark.asyncio
    async def test_run_turn_reports_failure(self, ctx, capsys):
        def handler(request: httpx.Request) -> Response:
            return Response(500, json={"error": "Engine Node Error: down"})

        transport = httpx.MockTransport(handler)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
            await _run_turn(ChatOrchestrator(ctx.store, http), ctx, "Explain TCP")

        assert "ERROR: Engine Node Error: down" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_async_chat_exits_on_command(self, cli_config, store):
        with (
            patch("aetheria.cli.chat.Prompt.ask", side_effect=["", "/exit"]),
            patch("aetheria.cli.chat.console") as mock_console,
        ):
            await _async_chat(cli_config, store)

        assert store.state.active_session is not None
        assert "Goodbye" in _printed(mock_console)

    @pytest.mark.asyncio
    async def test_async_chat_sends_messages(self, cli_config, store):
        with (
            patch("aetheria.cli.chat.Prompt.ask", side_effect=["Explain TCP", EOFError]),
            patch("aetheria.cli.chat._run_turn", new_callable=AsyncMock) as mock_turn,
            patch("aetheria.cli.chat.console"),
        ):
            await _async_chat(cli_config, store)

        assert mock_turn.await_args.args[2] == "Explain TCP"


def test_chat_command_bad_config(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("server: [unclosed")

    with patch("aetheria.cli.chat.console") as mock_console:
        chat_command(config_path=str(bad))

    assert "Failed to load config" in _printed(mock_console)
