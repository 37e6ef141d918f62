"""Tests for best-effort speech and local playback."""

import struct
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from aetheria.voice.gemini_tts import pcm_to_wav
from aetheria.voice.playback import AudioPlayer
from aetheria.voice.speech import SpeechService

WAV = pcm_to_wav(struct.pack("<2h", 0, 16384))


def _engine(**kwargs) -> MagicMock:
    engine = MagicMock()
    engine.engine_name = "fake"
    engine.synthesize = AsyncMock(**kwargs)
    return engine


@pytest.mark.asyncio
async def test_speak_synthesizes_and_plays():
    engine = _engine(return_value=WAV)
    player = MagicMock()
    player.play = AsyncMock()

    result = await SpeechService(engine, player).speak("Hello")

    assert result.ok
    assert result.value == WAV
    engine.synthesize.assert_awaited_once_with("Hello")
    player.play.assert_awaited_once_with(WAV)


@pytest.mark.asyncio
async def test_speak_without_player():
    result = await SpeechService(_engine(return_value=WAV)).speak("Hello")

    assert result.ok


@pytest.mark.asyncio
async def test_empty_text_is_not_spoken():
    engine = _engine(return_value=WAV)

    result = await SpeechService(engine).speak("   ")

    assert not result.ok
    engine.synthesize.assert_not_called()


@pytest.mark.asyncio
async def test_synthesis_failure_absorbed():
    result = await SpeechService(_engine(side_effect=RuntimeError("quota"))).speak("Hello")

    assert not result.ok
    assert result.value == b""
    assert "quota" in result.reason


@pytest.mark.asyncio
async def test_playback_failure_keeps_audio():
    player = MagicMock()
    player.play = AsyncMock(side_effect=ImportError("sounddevice/numpy not installed"))

    result = await SpeechService(_engine(return_value=WAV), player).speak("Hello")

    assert not result.ok
    assert result.value == WAV
    assert "playback failed" in result.reason


@pytest.mark.asyncio
async def test_audio_player_plays_samples():
    """Test playback through a mocked sounddevice module."""
    pytest.importorskip("numpy")
    mock_sd = MagicMock()

    with patch.dict("sys.modules", {"sounddevice": mock_sd}):
        await AudioPlayer().play(WAV)

    mock_sd.play.assert_called_once()
    assert mock_sd.play.call_args.kwargs["samplerate"] == 24000
    mock_sd.wait.assert_called_once()


@pytest.mark.asyncio
async def test_audio_player_skips_empty_audio():
    pytest.importorskip("numpy")
    mock_sd = MagicMock()

    with patch.dict("sys.modules", {"sounddevice": mock_sd}):
        await AudioPlayer().play(pcm_to_wav(b""))

    mock_sd.play.assert_not_called()
