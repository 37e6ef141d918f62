"""Local audio playback through sounddevice."""

import asyncio
import wave
from io import BytesIO


class AudioPlayer:
    """Plays WAV audio on the default output device.

    Requires the ``voice`` extra (sounddevice and numpy).
    """

    def _play_sync(self, audio_data: bytes) -> None:
        try:
            import numpy as np
            import sounddevice as sd  # type: ignore[import-not-found]
        except ImportError as e:
            msg = "sounddevice/numpy not installed. Install with: pip install 'aetheria[voice]'"
            raise ImportError(msg) from e

        with wave.open(BytesIO(audio_data), "rb") as wav_file:
            sample_rate = wav_file.getframerate()
            audio_frames = wav_file.readframes(wav_file.getnframes())

        if not audio_frames:
            return

        audio_array = np.frombuffer(audio_frames, dtype=np.int16)
        audio_normalized = audio_array.astype(np.float32) / 32768.0

        sd.play(audio_normalized, samplerate=sample_rate)
        sd.wait()  # Wait until audio finishes

    async def play(self, audio_data: bytes) -> None:
        """Play WAV audio without blocking the event loop."""
        await asyncio.to_thread(self._play_sync, audio_data)
