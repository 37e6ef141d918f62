"""Tests for CLI server commands."""

import signal
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from aetheria.cli.server_cmd import (
    _read_pid,
    _write_pid,
    start_command,
    status_command,
    stop_command,
)
from aetheria.config.schema import AetheriaConfig


@pytest.fixture
def pid_file(tmp_path: Path):
    path = tmp_path / "server.pid"
    with patch("aetheria.cli.server_cmd.PID_FILE", path):
        yield path


def test_pid_round_trip(pid_file):
    _write_pid(4321)

    with patch("os.kill"):
        assert _read_pid() == 4321


def test_stale_pid_is_removed(pid_file):
    pid_file.write_text("99999")

    with patch("os.kill", side_effect=ProcessLookupError):
        assert _read_pid() is None
    assert not pid_file.exists()


def test_start_foreground_uses_config_log_level(pid_file):
    config = AetheriaConfig()
    config.server.port = 9100
    config.logging.level = "DEBUG"

    with (
        patch("aetheria.config.loader.load_config", return_value=config),
        patch("aetheria.server.app.create_app") as mock_app,
        patch("uvicorn.run") as mock_uvicorn,
    ):
        start_command()

    mock_uvicorn.assert_called_once_with(
        mock_app.return_value, host="127.0.0.1", port=9100, log_level="debug"
    )
    assert not pid_file.exists()


def test_start_refuses_when_running(pid_file):
    pid_file.write_text("12345")

    with (
        patch("os.kill"),
        patch("aetheria.config.loader.load_config") as mock_load,
    ):
        start_command()

    mock_load.assert_not_called()


def test_start_detached_spawns_uvicorn(pid_file, tmp_path):
    proc = MagicMock()
    proc.pid = 77

    with (
        patch("aetheria.config.loader.load_config", return_value=AetheriaConfig()),
        patch("subprocess.Popen", return_value=proc) as mock_popen,
        patch("pathlib.Path.home", return_value=tmp_path),
    ):
        start_command(detach=True)

    cmd = mock_popen.call_args.args[0]
    assert "aetheria.server.asgi:app" in cmd
    assert pid_file.read_text() == "77"


def test_stop_sends_sigterm(pid_file):
    pid_file.write_text("12345")

    with patch("os.kill") as mock_kill:
        stop_command()

    mock_kill.assert_any_call(12345, signal.SIGTERM)
    assert not pid_file.exists()


def test_status_queries_client_server_url(pid_file):
    config = AetheriaConfig()
    config.client.server_url = "http://10.0.0.5:8080/"
    response = MagicMock()
    response.json.return_value = {"status": "healthy", "version": "0.1.0"}

    with (
        patch("aetheria.config.loader.load_config", return_value=config),
        patch("httpx.get", return_value=response) as mock_get,
    ):
        status_command()

    mock_get.assert_called_once_with("http://10.0.0.5:8080/health", timeout=3.0)


def test_status_not_running(pid_file):
    with (
        patch("aetheria.config.loader.load_config", return_value=AetheriaConfig()),
        patch("httpx.get", side_effect=Exception("connection refused")),
    ):
        status_command()
