"""Spoken responses for aetheria.

Finished assistant messages can be read aloud when a session has voice
responses enabled. Synthesis uses the Gemini TTS models over HTTP and
playback uses sounddevice (optional ``voice`` extra).

Components:

- :class:`TTSEngine` - Protocol for text-to-speech engines
- :class:`GeminiTTS` - Gemini text-to-speech returning WAV audio
- :class:`AudioPlayer` - Local playback through sounddevice
- :class:`SpeechService` - Best-effort synthesize-and-play wrapper
"""

from aetheria.voice.gemini_tts import GeminiTTS, pcm_to_wav
from aetheria.voice.playback import AudioPlayer
from aetheria.voice.speech import SpeechService, TTSEngine

__all__ = [
    "AudioPlayer",
    "GeminiTTS",
    "SpeechService",
    "TTSEngine",
    "pcm_to_wav",
]
