"""Best-effort spoken responses."""

import logging
from typing import Protocol

from aetheria.results import Result

logger = logging.getLogger(__name__)


class TTSEngine(Protocol):
    """Anything that turns a finished reply into WAV audio."""

    sample_rate: int
    engine_name: str

    async def synthesize(self, text: str, voice: str | None = None) -> bytes: ...


class Player(Protocol):
    async def play(self, audio_data: bytes) -> None: ...


class SpeechService:
    """Synthesizes and optionally plays a finished response.

    Every failure (synthesis, missing audio libraries, playback) is absorbed
    and reported through the returned Result.
    """

    def __init__(self, engine: TTSEngine, player: Player | None = None):
        self.engine = engine
        self.player = player

    async def speak(self, text: str) -> Result[bytes]:
        """Speak text once.

        Args:
            text: Final response text

        Returns:
            WAV audio on success, or empty bytes with the failure reason
        """
        if not text.strip():
            return Result.failure(b"", "nothing to speak")

        try:
            audio = await self.engine.synthesize(text)
        except Exception as e:
            logger.warning(f"Speech synthesis failed ({self.engine.engine_name}): {e}")
            return Result.failure(b"", f"synthesis failed: {e}")

        if self.player is not None:
            try:
                await self.player.play(audio)
            except Exception as e:
                logger.warning(f"Voice playback failed: {e}")
                return Result.failure(audio, f"playback failed: {e}")

        return Result.success(audio)
