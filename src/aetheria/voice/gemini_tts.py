"""Gemini text-to-speech implementation.

The Gemini TTS models return raw 16-bit little-endian mono PCM at 24 kHz,
base64-encoded inside a ``generateContent`` response. This engine wraps it
in a WAV header so callers always receive playable audio.
"""

import base64
import logging
import struct

import httpx

from aetheria.llm.gemini import GEMINI_API_URL, GEMINI_API_VERSION

logger = logging.getLogger(__name__)

PCM_SAMPLE_RATE = 24000
PCM_CHANNELS = 1
PCM_SAMPLE_WIDTH = 2  # bytes (16-bit)


def pcm_to_wav(
    pcm: bytes,
    sample_rate: int = PCM_SAMPLE_RATE,
    channels: int = PCM_CHANNELS,
    sample_width: int = PCM_SAMPLE_WIDTH,
) -> bytes:
    """Prefix raw PCM data with a RIFF/WAVE header."""
    data_size = len(pcm)
    byte_rate = sample_rate * channels * sample_width
    block_align = channels * sample_width

    wav_header = struct.pack(
        "<4sI4s4sIHHIIHH4sI",
        b"RIFF",
        36 + data_size,
        b"WAVE",
        b"fmt ",
        16,  # PCM format chunk size
        1,  # PCM format
        channels,
        sample_rate,
        byte_rate,
        block_align,
        sample_width * 8,
        b"data",
        data_size,
    )
    return wav_header + pcm


class GeminiTTS:
    """Gemini-based text-to-speech engine."""

    def __init__(
        self,
        api_key: str | None,
        model: str = "gemini-2.5-flash-preview-tts",
        voice: str = "Algenib",
        base_url: str = GEMINI_API_URL,
        timeout: int = 120,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize Gemini TTS engine.

        Args:
            api_key: Gemini API key
            model: Speech model name
            voice: Default prebuilt voice
            base_url: API endpoint
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used in tests)
        """
        self.model = model
        self.voice = voice
        self.client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"x-goog-api-key": api_key or "", "content-type": "application/json"},
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    @property
    def sample_rate(self) -> int:
        return PCM_SAMPLE_RATE

    @property
    def engine_name(self) -> str:
        return "gemini"

    async def synthesize(self, text: str, voice: str | None = None) -> bytes:
        """Convert text to WAV audio.

        Raises:
            httpx.HTTPError: On transport or API errors
            ValueError: If the response carries no audio
        """
        if not text.strip():
            return pcm_to_wav(b"")

        payload = {
            "contents": [{"parts": [{"text": text}]}],
            "generationConfig": {
                "responseModalities": ["AUDIO"],
                "speechConfig": {
                    "voiceConfig": {"prebuiltVoiceConfig": {"voiceName": voice or self.voice}}
                },
            },
        }
        path = f"/{GEMINI_API_VERSION}/models/{self.model}:generateContent"
        response = await self.client.post(path, json=payload)
        response.raise_for_status()

        audio = None
        for candidate in response.json().get("candidates") or []:
            for part in (candidate.get("content") or {}).get("parts") or []:
                inline = part.get("inlineData")
                if inline and inline.get("data"):
                    audio = inline["data"]
                    break
            if audio:
                break
        if not audio:
            raise ValueError("no media returned from Gemini TTS")

        pcm = base64.b64decode(audio)
        logger.debug(f"Synthesized {len(pcm)} bytes of PCM for {len(text)} characters")
        return pcm_to_wav(pcm)

    async def close(self) -> None:
        await self.client.aclose()
